from __future__ import annotations

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.core.management.base import CommandParser

from escort_directory.realtime.stores import DjangoUserPresenceStore


class Command(BaseCommand):
    help = (
        "Mark every user offline. Run before starting the realtime server "
        "when it was stopped without a clean shutdown."
    )

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument(
            "--dry-run",
            action="store_true",
            dest="dry_run",
            help="Only report how many users are flagged online",
        )

    def handle(self, *args, **options) -> str | None:
        if options.get("dry_run"):
            count = get_user_model().objects.filter(is_online=True).count()
            self.stdout.write(f"{count} user(s) flagged online")
            return None

        count = DjangoUserPresenceStore().mark_all_offline_sync()
        self.stdout.write(self.style.SUCCESS(f"Marked {count} user(s) offline"))
        return None
