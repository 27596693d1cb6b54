"""
Management command to load the service/package/activity catalog from a JSON fixture
"""
import json
from pathlib import Path

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from backend.catalog.models import Service, Package, Activity

DEFAULT_FIXTURE = Path(__file__).resolve().parent.parent.parent / 'fixtures' / 'catalog.json'


class Command(BaseCommand):
    help = "Loads services, packages and activities from a JSON fixture"

    def add_arguments(self, parser):
        parser.add_argument(
            '--file',
            default=str(DEFAULT_FIXTURE),
            help='Path to the catalog JSON file',
        )
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Delete the existing catalog before loading',
        )

    def handle(self, *args, **options):
        path = Path(options['file'])
        try:
            data = json.loads(path.read_text(encoding='utf-8'))
        except FileNotFoundError:
            raise CommandError(f"Fixture not found: {path}")
        except json.JSONDecodeError as e:
            raise CommandError(f"Invalid JSON in {path}: {e}")

        self.stdout.write(self.style.SUCCESS("=" * 80))
        self.stdout.write(self.style.SUCCESS("SEEDING CATALOG"))
        self.stdout.write(self.style.SUCCESS("=" * 80))

        counts = {'services': 0, 'packages': 0, 'activities': 0, 'skipped': 0}

        with transaction.atomic():
            if options['clear']:
                self.stdout.write(self.style.WARNING("Clearing existing catalog..."))
                Service.objects.all().delete()

            for service_data in data.get('services', []):
                service, created = Service.objects.get_or_create(
                    name=service_data['name'].strip(),
                    defaults={
                        'description': service_data.get('description', ''),
                        'icon': service_data.get('icon') or '',
                    }
                )
                if not created:
                    counts['skipped'] += 1
                    self.stdout.write(self.style.WARNING(f"  ⊘ Skipped (already exists): {service.name}"))
                    continue

                counts['services'] += 1
                self.stdout.write(self.style.SUCCESS(f"  ✓ Created: {service.name}"))

                for package_data in service_data.get('packages', []):
                    package = Package.objects.create(
                        service=service,
                        name=package_data['name'],
                        tier=package_data['tier'],
                        price=str(package_data['price']),
                        description=package_data.get('description', ''),
                    )
                    counts['packages'] += 1

                    for activity_data in package_data.get('activities', []):
                        Activity.objects.create(
                            package=package,
                            name=activity_data['name'],
                            description=activity_data.get('description', ''),
                        )
                        counts['activities'] += 1

        self.stdout.write(self.style.SUCCESS("\n" + "=" * 80))
        self.stdout.write(self.style.SUCCESS("SUMMARY"))
        self.stdout.write(self.style.SUCCESS("=" * 80))
        self.stdout.write(f"Services Created: {counts['services']}")
        self.stdout.write(f"Packages Created: {counts['packages']}")
        self.stdout.write(f"Activities Created: {counts['activities']}")
        self.stdout.write(f"Services Skipped (already exist): {counts['skipped']}")
        self.stdout.write(f"Total Services in Database: {Service.objects.count()}")
