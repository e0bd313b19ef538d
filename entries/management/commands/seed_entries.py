# entries/management/commands/seed_entries.py
from datetime import timedelta

from django.core.management.base import BaseCommand
from django.utils import timezone

from accounts.services import find_or_create_user
from entries.services import build_entry_service

DEMO_ENTRIES = [
    {"rose": "Morning run by the river", "thorn": "Missed the bus", "bud": "Dinner with friends"},
    {"rose": "Finished the report early", "bud": "Weekend hike"},
    {"thorn": "Headache most of the afternoon", "bud": "Sleeping in tomorrow"},
    {"rose": "Tried a new recipe and it worked"},
]


class Command(BaseCommand):
    help = "Create demo rose/bud/thorn entries for a dev user"

    def add_arguments(self, parser):
        parser.add_argument("--email", default="dev@example.com")
        parser.add_argument("--days", type=int, default=len(DEMO_ENTRIES))

    def handle(self, *args, **options):
        email = options["email"]
        user = find_or_create_user(external_id=f"dev:{email}", email=email, name="Dev User")
        service = build_entry_service()

        today = timezone.localdate()
        for offset in range(options["days"]):
            fields = DEMO_ENTRIES[offset % len(DEMO_ENTRIES)]
            # upsert 라서 여러 번 돌려도 날짜당 1개
            service.create_or_update(user.id, today - timedelta(days=offset), fields)

        self.stdout.write(self.style.SUCCESS(f"Seeded {options['days']} entries for {email}."))
