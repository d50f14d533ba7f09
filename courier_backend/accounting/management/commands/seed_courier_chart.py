# accounting/management/commands/seed_courier_chart.py

from django.core.management.base import BaseCommand
from django.db import transaction

from accounting.models.account import Account
from accounting.services.chart_service import DEFAULT_ACCOUNTS, initialize_default_accounts
from accounting.services.exceptions import AlreadyInitializedError


class Command(BaseCommand):
    help = "Seed the standard courier/logistics Chart of Accounts"

    def add_arguments(self, parser):
        parser.add_argument(
            "--top-up",
            action="store_true",
            help="On a non-empty chart, create any default accounts that are missing",
        )

    def handle(self, *args, **options):
        self.stdout.write("Seeding courier/logistics Chart of Accounts...")

        try:
            count = initialize_default_accounts()
        except AlreadyInitializedError:
            if not options["top_up"]:
                self.stdout.write(
                    self.style.WARNING(
                        "Chart of accounts already initialized (use --top-up to add missing defaults)."
                    )
                )
                return
            count = self._top_up()
            self.stdout.write(
                self.style.SUCCESS(f"✔ Chart topped up ({count} missing accounts created).")
            )
            return

        self.stdout.write(self.style.SUCCESS(f"✔ Courier chart seeded ({count} accounts)."))

    @transaction.atomic
    def _top_up(self) -> int:
        created_count = 0

        for code, name, category, account_type, description in DEFAULT_ACCOUNTS:
            debit_rule, credit_rule = Account.default_rules(category)
            _, created = Account.objects.get_or_create(
                code=code,
                defaults={
                    "name": name,
                    "category": category,
                    "account_type": account_type,
                    "debit_rule": debit_rule,
                    "credit_rule": credit_rule,
                    "description": description,
                    "is_active": True,
                },
            )
            if created:
                created_count += 1

        return created_count
