"""
Management command to make sure the SACCO always has an active quarter.

Run after deploys or at the start of each quarter:
    python manage.py check_quarters
"""
from datetime import datetime

from django.core.management.base import BaseCommand
from django.utils import timezone

from savings.models import Quarter
from savings.services import QuarterRegistry


class Command(BaseCommand):
    help = "Check quarters and create or activate one if none is active"

    def add_arguments(self, parser):
        parser.add_argument(
            "--date",
            type=str,
            help="Treat this day (YYYY-MM-DD) as today",
        )

    def handle(self, *args, **options):
        date_str = options.get("date")

        if date_str:
            try:
                today = datetime.strptime(date_str, "%Y-%m-%d").date()
            except ValueError:
                self.stderr.write(
                    self.style.ERROR("Invalid date format. Use YYYY-MM-DD")
                )
                return
        else:
            today = timezone.now().date()

        self.stdout.write("Checking quarters...")
        quarters = Quarter.objects.all()
        self.stdout.write(f"Total quarters: {quarters.count()}")

        for quarter in quarters:
            self.stdout.write(f"  {quarter} - {quarter.status}")

        quarter, action = QuarterRegistry().ensure_current_quarter(today)

        if action == "created":
            self.stdout.write(
                self.style.SUCCESS(f"Created: {quarter} - {quarter.status}")
            )
        elif action == "activated":
            self.stdout.write(
                self.style.SUCCESS(f"Set {quarter} to active status")
            )

        self.stdout.write("")
        self.stdout.write(self.style.SUCCESS("Active quarters:"))
        for active in Quarter.objects.filter(status="active"):
            self.stdout.write(f"- {active}")
