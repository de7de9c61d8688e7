"""
Stampcard configuration.

Usage in settings.py:
    STAMPCARD = {
        "STAMPS_FOR_REWARD": 6,
        "ADMIN_USERNAME": "admin",
        "ADMIN_PASSWORD": env("STAMPCARD_ADMIN_PASSWORD"),
        "ADMIN_AUTH": "password",
    }
"""

from dataclasses import dataclass
from typing import Any

from django.conf import settings


@dataclass
class StampcardSettings:
    """Stampcard configuration settings."""

    # Ledger
    STAMPS_FOR_REWARD: int = 6

    # Input rules
    MIN_USERNAME_LENGTH: int = 3
    MAX_USERNAME_LENGTH: int = 150
    MIN_PASSCODE_LENGTH: int = 4

    # Credential hashing (hasher name from PASSWORD_HASHERS, "default" = first)
    PASSCODE_HASHER: str = "default"
    PASSCODE_HASH_ITERATIONS: int | None = None

    # Operator admin identity. Empty password/PIN disables that login path.
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str = ""
    ADMIN_PIN: str = ""

    # Admin authorization strategy: "password" (dashboard login) or "pin"
    ADMIN_AUTH: str = "password"

    # Account store implementation
    STORE_BACKEND: str = "stampcard.adapters.orm.OrmAccountStore"


def get_stampcard_settings() -> StampcardSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "STAMPCARD", {})
    return StampcardSettings(**user_settings)


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_stampcard_settings(), name)


stampcard_settings = _LazySettings()
