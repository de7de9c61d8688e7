"""Ledger service: stamp and reward counter rules.

All counter changes go through AccountStore.apply_counter_delta(), which
applies both deltas as one unit and refuses to drive a counter negative.
"""

import logging

from django.core.exceptions import ImproperlyConfigured

from stampcard.adapters import get_store
from stampcard.conf import stampcard_settings
from stampcard.credentials import hash_passcode
from stampcard.exceptions import StampcardError
from stampcard.protocols.accounts import AccountInfo, AccountStore, Progress
from stampcard.signals import credential_reset, reward_redeemed, stamp_added

logger = logging.getLogger(__name__)


class LedgerService:
    """
    Service for stamp card operations.

    Independent of the storage backend: pass any AccountStore, or let it
    use the configured one. Callers authorize first (see stampcard.gates).
    """

    def __init__(self, store: AccountStore | None = None):
        self.store = store if store is not None else get_store()

    @property
    def stamps_for_reward(self) -> int:
        required = stampcard_settings.STAMPS_FOR_REWARD
        if not isinstance(required, int) or required < 1:
            raise ImproperlyConfigured(
                f"STAMPCARD['STAMPS_FOR_REWARD'] must be a positive integer, "
                f"got {required!r}"
            )
        return required

    # ======================================================================
    # Reads
    # ======================================================================

    def get(self, account_id: int) -> AccountInfo:
        """Get account snapshot (raises ACCOUNT_NOT_FOUND)."""
        return self.store.get_by_id(account_id)

    def list_accounts(self, query: str = "") -> list[AccountInfo]:
        """List accounts for the admin dashboard, optionally filtered."""
        return self.store.list_accounts(query)

    def progress(self, account: AccountInfo) -> Progress:
        """
        Progress toward the next reward. Pure, no I/O.

        Args:
            account: Account snapshot

        Returns:
            Progress(stamps_to_next, unlocked, target)
        """
        target = self.stamps_for_reward
        return Progress(
            stamps_to_next=max(target - account.stamps, 0),
            unlocked=account.stamps >= target,
            target=target,
        )

    # ======================================================================
    # Mutations
    # ======================================================================

    def add_stamp(self, account_id: int) -> AccountInfo:
        """
        Add one stamp to the card. No upper bound.

        Raises:
            StampcardError: ACCOUNT_NOT_FOUND
        """
        account = self.store.apply_counter_delta(account_id, 1, 0)
        logger.info("Stamp added: account=%s stamps=%s", account.id, account.stamps)
        stamp_added.send(sender=LedgerService, account=account)
        return account

    def redeem(self, account_id: int) -> AccountInfo:
        """
        Redeem one reward: -STAMPS_FOR_REWARD stamps, +1 reward.

        When two redemptions race for the same stamps, the store lets only
        one delta through; the other surfaces here as INSUFFICIENT_STAMPS.

        Raises:
            StampcardError: ACCOUNT_NOT_FOUND, INSUFFICIENT_STAMPS
            ImproperlyConfigured: STAMPS_FOR_REWARD below 1
        """
        required = self.stamps_for_reward
        account = self.store.get_by_id(account_id)

        if account.stamps < required:
            raise StampcardError(
                "INSUFFICIENT_STAMPS",
                available=account.stamps,
                required=required,
            )

        try:
            account = self.store.apply_counter_delta(account_id, -required, 1)
        except StampcardError as exc:
            if exc.code != "INVALID_DELTA":
                raise
            raise StampcardError(
                "INSUFFICIENT_STAMPS",
                available=exc.data.get("stamps"),
                required=required,
            ) from exc

        logger.info(
            "Reward redeemed: account=%s stamps=%s rewards=%s",
            account.id,
            account.stamps,
            account.rewards,
        )
        reward_redeemed.send(sender=LedgerService, account=account)
        return account

    def reset_credential(self, account_id: int, new_passcode: str) -> AccountInfo:
        """
        Replace the account's passcode.

        The old credential stays valid when the new passcode is rejected.

        Raises:
            StampcardError: WEAK_PASSCODE, ACCOUNT_NOT_FOUND
        """
        self._check_passcode(new_passcode)
        account = self.store.set_credential(account_id, hash_passcode(new_passcode))
        logger.info("Credential reset: account=%s", account.id)
        credential_reset.send(sender=LedgerService, account=account)
        return account

    # ======================================================================
    # By-username variants (admin dashboard, management commands)
    # ======================================================================

    def add_stamp_for(self, username: str) -> AccountInfo:
        """Add a stamp to the account with this username."""
        return self.add_stamp(self.store.get_by_username(username).id)

    def redeem_for(self, username: str) -> AccountInfo:
        """Redeem a reward for the account with this username."""
        return self.redeem(self.store.get_by_username(username).id)

    def reset_credential_for(self, username: str, new_passcode: str) -> AccountInfo:
        """Reset the passcode of the account with this username."""
        self._check_passcode(new_passcode)
        return self.reset_credential(self.store.get_by_username(username).id, new_passcode)

    def _check_passcode(self, passcode: str) -> None:
        minimum = stampcard_settings.MIN_PASSCODE_LENGTH
        if len(passcode or "") < minimum:
            raise StampcardError("WEAK_PASSCODE", min_length=minimum)
