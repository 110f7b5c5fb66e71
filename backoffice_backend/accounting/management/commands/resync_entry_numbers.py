# accounting/management/commands/resync_entry_numbers.py

from django.core.management.base import BaseCommand

from accounting.services.journal_entry_service import rebuild_entry_number_sequence


class Command(BaseCommand):
    help = "Rebuild the journal entry-number high-water mark and free list from a scan (dry run by default)."

    def add_arguments(self, parser):
        parser.add_argument("--apply", action="store_true", help="Write the rebuilt sequence.")

    def handle(self, *args, **options):
        result = rebuild_entry_number_sequence(dry_run=not options.get("apply"))

        self.stdout.write(f"next value: {result['next_value_before']} -> {result['next_value_after']}")
        self.stdout.write(f"released:   {result['released_before']} -> {result['released_after']}")

        if not result["changed"]:
            self.stdout.write(self.style.SUCCESS("Sequence already matches the journal."))
        elif result["dry_run"]:
            self.stdout.write(self.style.WARNING("DRY RUN: re-run with --apply to write the sequence."))
        else:
            self.stdout.write(self.style.SUCCESS("Sequence rebuilt."))
