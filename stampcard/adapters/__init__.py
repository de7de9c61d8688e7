"""
Account store adapters.

get_store() returns the AccountStore named by STAMPCARD["STORE_BACKEND"].
One instance is kept per dotted path, so the in-memory adapter keeps its
state across requests.
"""

import threading

from django.utils.module_loading import import_string

from stampcard.conf import stampcard_settings
from stampcard.protocols.accounts import AccountStore

_stores: dict[str, AccountStore] = {}
_stores_lock = threading.Lock()


def get_store() -> AccountStore:
    """Get the configured AccountStore."""
    backend_path = stampcard_settings.STORE_BACKEND
    with _stores_lock:
        store = _stores.get(backend_path)
        if store is None:
            store = import_string(backend_path)()
            _stores[backend_path] = store
    return store


def reset_stores() -> None:
    """Drop cached store instances (used by tests)."""
    with _stores_lock:
        _stores.clear()
