"""
Passcode hashing and verification.

Built on Django's password hashers: the stored value embeds algorithm,
cost and salt (e.g. ``pbkdf2_sha256$<iterations>$<salt>$<hash>``), so a
hash stays verifiable after the configured cost changes.
"""

from django.contrib.auth.hashers import check_password, get_hasher, make_password

from stampcard.conf import stampcard_settings


def hash_passcode(passcode: str) -> str:
    """
    Derive a salted one-way hash of a passcode.

    Two calls with the same passcode return different strings; both verify.
    PASSCODE_HASH_ITERATIONS overrides the cost of PBKDF2-family hashers.
    """
    hasher = get_hasher(stampcard_settings.PASSCODE_HASHER)
    iterations = stampcard_settings.PASSCODE_HASH_ITERATIONS
    if iterations and hasattr(hasher, "iterations"):
        return hasher.encode(passcode, hasher.salt(), iterations=iterations)
    return make_password(passcode, hasher=hasher)


def verify_passcode(passcode: str, credential_hash: str | None) -> bool:
    """
    Check a passcode against a stored hash.

    Returns False for a malformed, empty or unknown-algorithm hash instead
    of raising.
    """
    if not passcode or not credential_hash:
        return False
    try:
        return check_password(passcode, credential_hash)
    except (ValueError, TypeError):
        return False
