"""
Management command to print the GraphQL schema in SDL form
"""
from pathlib import Path

from django.core.management.base import BaseCommand
from graphql import print_schema

from backend.api.schema import schema


class Command(BaseCommand):
    help = "Prints the GraphQL schema (SDL), or writes it to --out"

    def add_arguments(self, parser):
        parser.add_argument(
            '--out',
            help='File to write the schema to instead of stdout',
        )

    def handle(self, *args, **options):
        sdl = print_schema(schema)
        if options['out']:
            Path(options['out']).write_text(sdl + '\n', encoding='utf-8')
            self.stdout.write(self.style.SUCCESS(f"Schema written to {options['out']}"))
        else:
            self.stdout.write(sdl)
