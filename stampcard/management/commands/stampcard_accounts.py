"""Management command to list loyalty accounts."""

from django.core.management.base import BaseCommand

from stampcard.services.ledger import LedgerService


class Command(BaseCommand):
    help = "List accounts with their stamps and rewards"

    def add_arguments(self, parser):
        parser.add_argument(
            "--query",
            default="",
            help="Only usernames containing this text",
        )

    def handle(self, *args, **options):
        accounts = LedgerService().list_accounts(options["query"])
        for account in accounts:
            self.stdout.write(
                f"{account.username}\t{account.stamps}\t{account.rewards}"
            )
        self.stdout.write(self.style.SUCCESS(f"{len(accounts)} account(s)."))
