"""Management command to reset a customer's passcode."""

from django.core.management.base import BaseCommand, CommandError

from stampcard.exceptions import StampcardError
from stampcard.services.ledger import LedgerService


class Command(BaseCommand):
    help = "Reset the passcode of a customer who forgot it"

    def add_arguments(self, parser):
        parser.add_argument("username", help="Customer username (case-insensitive)")
        parser.add_argument("passcode", help="New passcode")

    def handle(self, *args, **options):
        try:
            account = LedgerService().reset_credential_for(
                options["username"], options["passcode"]
            )
        except StampcardError as exc:
            raise CommandError(exc.message) from exc
        self.stdout.write(
            self.style.SUCCESS(f"Passcode updated for {account.username}.")
        )
