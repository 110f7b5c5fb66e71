# accounting/management/commands/seed_backoffice_chart.py

from django.core.management.base import BaseCommand

from accounting.services.chart_seed_service import seed_backoffice_books


class Command(BaseCommand):
    help = "Seed the restaurant chart of accounts, account mappings and the current fiscal year (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--year", type=int, help="Fiscal year to ensure (default: current year)")

    def handle(self, *args, **options):
        self.stdout.write("Seeding back-office books...")

        result = seed_backoffice_books(year=options.get("year"))

        self.stdout.write(
            f"Accounts: {result['accounts']['created']} created ({result['accounts']['total']} total)"
        )
        self.stdout.write(
            f"Mappings: {result['mappings']['created']} created ({result['mappings']['total']} defaults)"
        )
        fiscal_year = result["fiscal_year"]
        state = "created" if result["fiscal_year_created"] else "exists"
        self.stdout.write(f"Fiscal year {fiscal_year.year}: {state} ({fiscal_year.status})")

        self.stdout.write(self.style.SUCCESS("Back-office books ready"))
