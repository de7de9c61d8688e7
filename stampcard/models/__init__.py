"""Stampcard models."""

from stampcard.models.account import Account

__all__ = [
    "Account",
]
