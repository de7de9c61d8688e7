"""Pytest fixtures for Stampcard tests."""

import pytest

from stampcard.adapters import reset_stores
from stampcard.adapters.memory import InMemoryAccountStore
from stampcard.adapters.orm import OrmAccountStore
from stampcard.services.auth import AuthService
from stampcard.services.ledger import LedgerService


@pytest.fixture(autouse=True)
def _fresh_stores():
    """Drop cached store instances between tests."""
    reset_stores()
    yield
    reset_stores()


@pytest.fixture
def stampcard_config(settings):
    """Override STAMPCARD keys for one test: stampcard_config(ADMIN_AUTH="pin")."""

    def _override(**values):
        settings.STAMPCARD = {**settings.STAMPCARD, **values}

    return _override


@pytest.fixture
def memory_store():
    return InMemoryAccountStore()


@pytest.fixture
def orm_store(db):
    return OrmAccountStore()


@pytest.fixture(params=["memory", "orm"])
def store(request):
    """Run the test against each AccountStore adapter."""
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def ledger(store):
    return LedgerService(store)


@pytest.fixture
def auth(store):
    return AuthService(store)


@pytest.fixture
def account(auth, store):
    """Registered customer 'maria' with passcode '4821'."""
    principal = auth.register_customer("maria", "4821")
    return store.get_by_id(principal.account_id)


@pytest.fixture
def with_stamps(store, account):
    """Set the fixture account's stamp count: with_stamps(6)."""

    def _set(count):
        current = store.get_by_id(account.id)
        return store.apply_counter_delta(account.id, count - current.stamps, 0)

    return _set
