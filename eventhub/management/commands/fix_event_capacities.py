from django.core.management.base import BaseCommand

from eventhub.ticketing import fix_event_capacities


class Command(BaseCommand):
    help = "Recompute tickets_left/sold_out for every event and mirror them onto sub-events."

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Report what would change without saving.",
        )

    def handle(self, *args, **options):
        dry_run = options["dry_run"]
        changes = fix_event_capacities(dry_run=dry_run)
        for line in changes:
            self.stdout.write(line)
        verb = "Would fix" if dry_run else "Fixed"
        self.stdout.write(self.style.SUCCESS(f"{verb} {len(changes)} event(s)"))
