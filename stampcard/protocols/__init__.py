"""Stampcard protocols."""

from stampcard.protocols.accounts import (
    AccountInfo,
    AccountStore,
    Progress,
)

__all__ = [
    "AccountInfo",
    "AccountStore",
    "Progress",
]
