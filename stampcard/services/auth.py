"""Auth service: registration, login and logout.

Every operation takes plain values and returns a session principal; the
view layer decides how to persist it (see stampcard.session).
"""

import logging

from stampcard.adapters import get_store
from stampcard.conf import stampcard_settings
from stampcard.credentials import hash_passcode, verify_passcode
from stampcard.exceptions import StampcardError
from stampcard.gates import Gates
from stampcard.protocols.accounts import AccountStore
from stampcard.session import (
    ANONYMOUS,
    AdminSession,
    Anonymous,
    CustomerSession,
    Session,
)
from stampcard.signals import account_registered
from stampcard.utils import normalize_username

logger = logging.getLogger(__name__)


class AuthService:
    """Service for customer and admin authentication."""

    def __init__(self, store: AccountStore | None = None):
        self.store = store if store is not None else get_store()

    def register_customer(self, username: str, passcode: str) -> CustomerSession:
        """
        Create an account and log the customer in.

        Args:
            username: Desired username (normalized, case-insensitive)
            passcode: Desired passcode (stored hashed)

        Returns:
            CustomerSession for the new account

        Raises:
            StampcardError: WEAK_INPUT, DUPLICATE_USERNAME
        """
        username = normalize_username(username)
        passcode = passcode or ""
        min_username = stampcard_settings.MIN_USERNAME_LENGTH
        min_passcode = stampcard_settings.MIN_PASSCODE_LENGTH

        if len(username) < min_username or len(passcode) < min_passcode:
            raise StampcardError(
                "WEAK_INPUT",
                message=(
                    f"Username must be {min_username}+ characters, "
                    f"passcode {min_passcode}+."
                ),
            )
        max_username = stampcard_settings.MAX_USERNAME_LENGTH
        if len(username) > max_username:
            raise StampcardError(
                "WEAK_INPUT",
                message=f"Username must be at most {max_username} characters.",
            )

        account = self.store.create(username, hash_passcode(passcode))
        logger.info("Account registered: account=%s", account.id)
        account_registered.send(sender=AuthService, account=account)
        return CustomerSession(account_id=account.id)

    def login_customer(self, username: str, passcode: str) -> CustomerSession:
        """
        Log a customer in.

        Unknown username and wrong passcode raise the same error. An
        unknown username still costs one hash, like a real verification.

        Raises:
            StampcardError: INVALID_CREDENTIALS
        """
        try:
            account = self.store.get_by_username(username)
        except StampcardError as exc:
            if exc.code != "ACCOUNT_NOT_FOUND":
                raise
            hash_passcode(passcode or "")
            raise StampcardError("INVALID_CREDENTIALS") from None

        if not verify_passcode(passcode, account.credential_hash):
            raise StampcardError("INVALID_CREDENTIALS")

        return CustomerSession(account_id=account.id)

    def login_admin(self, username: str, password: str) -> AdminSession:
        """
        Log the operator admin in.

        Raises:
            StampcardError: INVALID_CREDENTIALS
        """
        if not Gates.check_admin_credentials(username, password):
            logger.warning("Admin login failed for username %r", (username or "").strip())
            raise StampcardError("INVALID_CREDENTIALS")

        logger.info("Admin logged in")
        return AdminSession(username=stampcard_settings.ADMIN_USERNAME)

    def logout(self, session: Session) -> Anonymous:
        """End any session; all prior authorization is dropped."""
        if not isinstance(session, Anonymous):
            logger.debug("Logout: %s", type(session).__name__)
        return ANONYMOUS
