"""Stampcard helpers."""


def normalize_username(username: str | None) -> str:
    """Canonical form used for storage, lookup and uniqueness."""
    return (username or "").strip().lower()
