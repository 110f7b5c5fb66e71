# accounting/management/commands/delete_orphans.py

from django.core.management.base import BaseCommand

from accounting.services.integrity_service import delete_orphans, find_orphans


class Command(BaseCommand):
    help = "Report committed documents without a journal entry; delete them with --apply."

    def add_arguments(self, parser):
        parser.add_argument(
            "--apply",
            action="store_true",
            help="Actually delete orphan documents (default: dry run).",
        )

    def handle(self, *args, **options):
        apply = bool(options.get("apply"))

        orphans = find_orphans()
        total = sum(len(rows) for rows in orphans.values())

        for kind, rows in orphans.items():
            ids = ", ".join(str(r["id"]) for r in rows[:20]) or "-"
            self.stdout.write(f"{kind}: {len(rows)} ({ids})")

        if total == 0:
            self.stdout.write(self.style.SUCCESS("No orphan documents."))
            return

        if not apply:
            self.stdout.write(self.style.WARNING(f"DRY RUN: {total} orphan document(s). Re-run with --apply to delete."))
            return

        counts = delete_orphans(dry_run=False)
        self.stdout.write(self.style.SUCCESS(f"Deleted {sum(counts.values())} orphan document(s): {counts}"))
