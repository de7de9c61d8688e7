"""Account store protocol."""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class AccountInfo:
    """Snapshot of a customer account as committed in the store."""

    id: int
    username: str
    credential_hash: str
    stamps: int = 0
    rewards: int = 0


@dataclass(frozen=True)
class Progress:
    """Stamp card progress toward the next reward."""

    stamps_to_next: int
    unlocked: bool
    target: int


@runtime_checkable
class AccountStore(Protocol):
    """
    Protocol for account persistence.

    Implemented by adapters/orm.py (Django ORM) and adapters/memory.py.
    Every operation returns a fresh AccountInfo; nothing is cached.

    Failures are raised as StampcardError with codes ACCOUNT_NOT_FOUND,
    DUPLICATE_USERNAME or INVALID_DELTA. An unreachable store raises
    StoreUnavailable.

    Configuration in settings.py:
        STAMPCARD = {
            "STORE_BACKEND": "stampcard.adapters.memory.InMemoryAccountStore",
        }
    """

    def create(self, username: str, credential_hash: str) -> AccountInfo:
        """
        Persist a new account with zero stamps and rewards.

        Raises DUPLICATE_USERNAME if a case-insensitively equal username
        exists. Concurrent creates for the same username cannot both succeed.
        """
        ...

    def get_by_id(self, account_id: int) -> AccountInfo:
        """Return the account or raise ACCOUNT_NOT_FOUND."""
        ...

    def get_by_username(self, username: str) -> AccountInfo:
        """Case-insensitive lookup; raise ACCOUNT_NOT_FOUND if missing."""
        ...

    def apply_counter_delta(
        self,
        account_id: int,
        stamps_delta: int,
        rewards_delta: int,
    ) -> AccountInfo:
        """
        Apply both deltas to the same record as one unit.

        Raises INVALID_DELTA, with nothing mutated, if either counter would
        become negative. Concurrent calls on one account serialize.
        """
        ...

    def set_credential(self, account_id: int, credential_hash: str) -> AccountInfo:
        """Replace the stored credential hash."""
        ...

    def list_accounts(self, query: str = "") -> list[AccountInfo]:
        """
        List accounts, optionally filtered by a username substring.

        Ordered by stamps (most first), then username.
        """
        ...
