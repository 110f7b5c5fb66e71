# accounting/management/commands/validate_ledger.py

from __future__ import annotations

from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db.models import Sum

from accounting.models.posting import JournalPosting
from accounting.services.integrity_service import find_orphans, find_unbalanced_entries
from accounting.services.journal_entry_service import rebuild_entry_number_sequence


class Command(BaseCommand):
    help = "Validate ledger integrity (entry balance, orphan documents, entry-number sequence)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--strict",
            action="store_true",
            help="Fail (non-zero exit) if any problem is found.",
        )

    def handle(self, *args, **options):
        strict = bool(options.get("strict"))
        errors = 0

        self.stdout.write(self.style.MIGRATE_HEADING("Ledger Validation"))

        # -----------------------------
        # 1) Per-entry balance
        # -----------------------------
        unbalanced = find_unbalanced_entries()
        if unbalanced:
            errors += len(unbalanced)
            self.stderr.write(self.style.ERROR(f"[FAIL] Unbalanced journal entries: {len(unbalanced)}"))
            for row in unbalanced[:10]:
                self.stderr.write(
                    f"  entry #{row['entry_number']} debit={row['total_debit']} "
                    f"credit={row['total_credit']} diff={row['difference']}"
                )
        else:
            self.stdout.write(self.style.SUCCESS("[OK] Every journal entry balances"))

        # -----------------------------
        # 2) Global balance
        # -----------------------------
        totals = JournalPosting.objects.aggregate(debit=Sum("debit"), credit=Sum("credit"))
        debits = totals["debit"] or Decimal("0.00")
        credits = totals["credit"] or Decimal("0.00")
        if debits != credits:
            errors += 1
            self.stderr.write(self.style.ERROR(f"[FAIL] Ledger not balanced: debits={debits} credits={credits}"))
        else:
            self.stdout.write(self.style.SUCCESS(f"[OK] Ledger balanced: debits={debits} credits={credits}"))

        # -----------------------------
        # 3) Orphan documents
        # -----------------------------
        orphans = find_orphans()
        orphan_count = sum(len(rows) for rows in orphans.values())
        if orphan_count:
            errors += orphan_count
            self.stderr.write(self.style.ERROR(f"[FAIL] Orphan documents: {orphan_count}"))
            for kind, rows in orphans.items():
                if rows:
                    ids = ", ".join(str(r["id"]) for r in rows[:10])
                    self.stderr.write(f"  {kind}: {ids}")
        else:
            self.stdout.write(self.style.SUCCESS("[OK] Every committed document references a journal entry"))

        # -----------------------------
        # 4) Entry-number sequence drift (report only)
        # -----------------------------
        seq = rebuild_entry_number_sequence(dry_run=True)
        if seq["changed"]:
            self.stdout.write(
                self.style.WARNING(
                    f"[WARN] Entry-number sequence differs from a scan "
                    f"(next {seq['next_value_before']} -> {seq['next_value_after']}); "
                    "run resync_entry_numbers --apply"
                )
            )
        else:
            self.stdout.write(self.style.SUCCESS("[OK] Entry-number sequence matches the journal"))

        self.stdout.write("")
        if errors == 0:
            self.stdout.write(self.style.SUCCESS("VALIDATION PASSED"))
        else:
            self.stderr.write(self.style.ERROR(f"VALIDATION FOUND ISSUES: {errors} problem(s)"))

        return self._exit(strict and errors > 0)

    def _exit(self, fail: bool):
        if fail:
            raise SystemExit(1)
        return None
