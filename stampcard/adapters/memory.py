"""In-process AccountStore adapter."""

import itertools
import threading
from dataclasses import replace

from stampcard.exceptions import StampcardError
from stampcard.protocols.accounts import AccountInfo
from stampcard.utils import normalize_username


class InMemoryAccountStore:
    """
    Adapter that implements AccountStore with dictionaries.

    Suited to single-process deployments and tests. State lives as long as
    the instance.

    A registry lock guards the id/username indexes (creation and lookup).
    Each account has its own lock for mutations, so writes to different
    accounts never wait on each other.

    Configuration in settings.py:
        STAMPCARD = {
            "STORE_BACKEND": "stampcard.adapters.memory.InMemoryAccountStore",
        }
    """

    def __init__(self) -> None:
        self._accounts: dict[int, AccountInfo] = {}
        self._ids_by_username: dict[str, int] = {}
        self._row_locks: dict[int, threading.Lock] = {}
        self._registry_lock = threading.Lock()
        self._next_id = itertools.count(1)

    def create(self, username: str, credential_hash: str) -> AccountInfo:
        username = normalize_username(username)
        with self._registry_lock:
            if username in self._ids_by_username:
                raise StampcardError("DUPLICATE_USERNAME", username=username)
            account = AccountInfo(
                id=next(self._next_id),
                username=username,
                credential_hash=credential_hash,
            )
            self._accounts[account.id] = account
            self._ids_by_username[username] = account.id
            self._row_locks[account.id] = threading.Lock()
        return account

    def get_by_id(self, account_id: int) -> AccountInfo:
        with self._registry_lock:
            account = self._accounts.get(account_id)
        if account is None:
            raise StampcardError("ACCOUNT_NOT_FOUND", account_id=account_id)
        return account

    def get_by_username(self, username: str) -> AccountInfo:
        username = normalize_username(username)
        with self._registry_lock:
            account_id = self._ids_by_username.get(username)
            account = self._accounts.get(account_id) if account_id is not None else None
        if account is None:
            raise StampcardError("ACCOUNT_NOT_FOUND", username=username)
        return account

    def apply_counter_delta(
        self,
        account_id: int,
        stamps_delta: int,
        rewards_delta: int,
    ) -> AccountInfo:
        with self._row_lock(account_id):
            account = self._accounts[account_id]
            stamps = account.stamps + stamps_delta
            rewards = account.rewards + rewards_delta
            if stamps < 0 or rewards < 0:
                raise StampcardError(
                    "INVALID_DELTA",
                    account_id=account_id,
                    stamps=account.stamps,
                    stamps_delta=stamps_delta,
                    rewards=account.rewards,
                    rewards_delta=rewards_delta,
                )
            account = replace(account, stamps=stamps, rewards=rewards)
            self._commit(account)
        return account

    def set_credential(self, account_id: int, credential_hash: str) -> AccountInfo:
        with self._row_lock(account_id):
            account = replace(self._accounts[account_id], credential_hash=credential_hash)
            self._commit(account)
        return account

    def list_accounts(self, query: str = "") -> list[AccountInfo]:
        query = normalize_username(query)
        with self._registry_lock:
            accounts = list(self._accounts.values())
        if query:
            accounts = [a for a in accounts if query in a.username]
        return sorted(accounts, key=lambda a: (-a.stamps, a.username))

    def _row_lock(self, account_id: int) -> threading.Lock:
        with self._registry_lock:
            lock = self._row_locks.get(account_id)
        if lock is None:
            raise StampcardError("ACCOUNT_NOT_FOUND", account_id=account_id)
        return lock

    def _commit(self, account: AccountInfo) -> None:
        with self._registry_lock:
            self._accounts[account.id] = account
