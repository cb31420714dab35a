"""
Import legacy file-based posts into the posts table.

    python manage.py migrate_posts [--posts-dir PATH]
"""

from pathlib import Path

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from apps.blog.exceptions import LegacyDirectoryError
from apps.blog.legacy_import import migrate_file_posts


class Command(BaseCommand):
    help = "Migrate legacy JSON post files into the database"

    def add_arguments(self, parser):
        parser.add_argument(
            "--posts-dir",
            type=Path,
            default=settings.LEGACY_POSTS_DIR,
            help="Directory holding the legacy <id>.json post files",
        )

    def handle(self, *args, **options):
        try:
            report = migrate_file_posts(options["posts_dir"])
        except LegacyDirectoryError as e:
            raise CommandError(str(e)) from e

        self.stdout.write("Migration summary:")
        self.stdout.write(f"  Migrated: {report.migrated}")
        self.stdout.write(f"  Skipped (duplicate slug): {report.skipped}")
        self.stdout.write(f"  Errors: {report.error_count}")
        self.stdout.write(f"  Total files: {report.total}")

        for filename, message in report.errors:
            self.stderr.write(f"  {filename}: {message}")

        if report.migrated:
            self.stdout.write(self.style.SUCCESS("Migration completed."))
