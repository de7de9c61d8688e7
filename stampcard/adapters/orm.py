"""Django ORM AccountStore adapter."""

import logging
from contextlib import contextmanager

from django.db import IntegrityError, InterfaceError, OperationalError, transaction
from django.db.models import F
from django.utils import timezone

from stampcard.exceptions import StampcardError, StoreUnavailable
from stampcard.models import Account
from stampcard.protocols.accounts import AccountInfo
from stampcard.utils import normalize_username

logger = logging.getLogger(__name__)


@contextmanager
def _store_errors():
    """Translate connectivity failures into StoreUnavailable."""
    try:
        yield
    except (OperationalError, InterfaceError) as exc:
        logger.error("Account store unreachable: %s", exc)
        raise StoreUnavailable(str(exc)) from exc


def _to_info(account: Account) -> AccountInfo:
    return AccountInfo(
        id=account.pk,
        username=account.username,
        credential_hash=account.credential_hash,
        stamps=account.stamps,
        rewards=account.rewards,
    )


class OrmAccountStore:
    """
    Adapter that implements AccountStore on the Account model.

    Counter mutations lock the row (select_for_update) and apply a
    conditional UPDATE with F() expressions. The row lock serializes
    writers on PostgreSQL/MySQL; the WHERE guard keeps SQLite, which ignores
    FOR UPDATE, from ever committing a negative counter.

    Configuration in settings.py:
        STAMPCARD = {
            "STORE_BACKEND": "stampcard.adapters.orm.OrmAccountStore",
        }
    """

    @_store_errors()
    def create(self, username: str, credential_hash: str) -> AccountInfo:
        username = normalize_username(username)
        try:
            with transaction.atomic():
                account = Account.objects.create(
                    username=username,
                    credential_hash=credential_hash,
                )
        except IntegrityError:
            # Unique constraint on username; check it is really a duplicate
            if Account.objects.filter(username=username).exists():
                raise StampcardError("DUPLICATE_USERNAME", username=username)
            raise
        return _to_info(account)

    @_store_errors()
    def get_by_id(self, account_id: int) -> AccountInfo:
        try:
            return _to_info(Account.objects.get(pk=account_id))
        except Account.DoesNotExist:
            raise StampcardError("ACCOUNT_NOT_FOUND", account_id=account_id)

    @_store_errors()
    def get_by_username(self, username: str) -> AccountInfo:
        username = normalize_username(username)
        try:
            return _to_info(Account.objects.get(username=username))
        except Account.DoesNotExist:
            raise StampcardError("ACCOUNT_NOT_FOUND", username=username)

    @_store_errors()
    def apply_counter_delta(
        self,
        account_id: int,
        stamps_delta: int,
        rewards_delta: int,
    ) -> AccountInfo:
        with transaction.atomic():
            account = self._get_for_update(account_id)

            if account.stamps + stamps_delta < 0 or account.rewards + rewards_delta < 0:
                raise StampcardError(
                    "INVALID_DELTA",
                    account_id=account_id,
                    stamps=account.stamps,
                    stamps_delta=stamps_delta,
                    rewards=account.rewards,
                    rewards_delta=rewards_delta,
                )

            updated = Account.objects.filter(
                pk=account_id,
                stamps__gte=-stamps_delta,
                rewards__gte=-rewards_delta,
            ).update(
                stamps=F("stamps") + stamps_delta,
                rewards=F("rewards") + rewards_delta,
                updated_at=timezone.now(),
            )
            if not updated:
                # A concurrent writer drained the counter after our read
                raise StampcardError(
                    "INVALID_DELTA",
                    account_id=account_id,
                    stamps_delta=stamps_delta,
                    rewards_delta=rewards_delta,
                )

            account.refresh_from_db(fields=["stamps", "rewards", "updated_at"])

        return _to_info(account)

    @_store_errors()
    def set_credential(self, account_id: int, credential_hash: str) -> AccountInfo:
        with transaction.atomic():
            account = self._get_for_update(account_id)
            account.credential_hash = credential_hash
            account.save(update_fields=["credential_hash", "updated_at"])
        return _to_info(account)

    @_store_errors()
    def list_accounts(self, query: str = "") -> list[AccountInfo]:
        qs = Account.objects.all()
        query = normalize_username(query)
        if query:
            qs = qs.filter(username__contains=query)
        return [_to_info(a) for a in qs.order_by("-stamps", "username")]

    def _get_for_update(self, account_id: int) -> Account:
        """
        Get account with row-level lock for mutation.

        MUST be called inside transaction.atomic().
        """
        try:
            return Account.objects.select_for_update().get(pk=account_id)
        except Account.DoesNotExist:
            raise StampcardError("ACCOUNT_NOT_FOUND", account_id=account_id)
