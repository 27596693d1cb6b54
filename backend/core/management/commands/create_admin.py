"""
Management command to create the first ADMIN user.

Every other account is created through the admin-only createUser mutation,
so a fresh database needs one administrator to start with.
"""
import getpass

from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from django.core.management.base import BaseCommand, CommandError

from backend.core.models import Role, User


class Command(BaseCommand):
    help = "Creates an ADMIN user (or promotes an existing one)"

    def add_arguments(self, parser):
        parser.add_argument('--email', required=True, help='Login email')
        parser.add_argument('--name', default='Administrator', help='Display name')
        parser.add_argument(
            '--password',
            help='Password; prompted for when omitted',
        )

    def handle(self, *args, **options):
        email = User.objects.normalize_email(options['email']).lower()
        password = options['password'] or getpass.getpass('Password: ')

        try:
            validate_password(password)
        except ValidationError as e:
            raise CommandError('; '.join(e.messages))

        user = User.objects.filter(email__iexact=email).first()
        if user:
            user.role = Role.ADMIN
            user.is_active = True
            user.set_password(password)
            user.save(update_fields=['role', 'is_active', 'password', 'updated_at'])
            self.stdout.write(self.style.WARNING(f"  ⊘ Existing user promoted to ADMIN: {email}"))
            return

        User.objects.create_user(
            email=email,
            password=password,
            name=options['name'],
            role=Role.ADMIN,
            is_staff=True,
        )
        self.stdout.write(self.style.SUCCESS(f"  ✓ Created ADMIN user: {email}"))
