"""
Stampcard Gates - Authorization rules.

G1: CustomerSession - Actions on the caller's own card need a customer login
G2: AdminAction - Admin ledger actions pass the configured ADMIN_AUTH strategy
G3: AdminCredentials - Username/password match the operator admin identity
G4: AdminPin - Shared staff PIN matches

Gates raise GateError subclasses (Unauthenticated, Forbidden), never a
StampcardError.
"""

import hmac
import logging
from dataclasses import dataclass

from django.core.exceptions import ImproperlyConfigured

from stampcard.conf import stampcard_settings
from stampcard.session import AdminSession, CustomerSession, Session

logger = logging.getLogger(__name__)


class GateError(Exception):
    """Gate validation error."""

    def __init__(self, gate_name: str, message: str, details: dict | None = None):
        self.gate_name = gate_name
        self.message = message
        self.details = details or {}
        super().__init__(f"[{gate_name}] {message}")


class Unauthenticated(GateError):
    """No principal: the caller has to log in first."""


class Forbidden(GateError):
    """The principal is known but may not perform the action."""


@dataclass
class GateResult:
    """Result of a gate check."""

    passed: bool
    gate_name: str
    message: str = ""


def _matches(given: str | None, expected: str) -> bool:
    """Constant-time comparison; an unset secret never matches."""
    if not expected or given is None:
        return False
    return hmac.compare_digest(given.encode(), expected.encode())


# =============================================================================
# Gates
# =============================================================================


class Gates:
    """Stampcard authorization gates."""

    # =========================================================================
    # G1: Customer Session
    # =========================================================================

    @classmethod
    def customer_action(cls, session: Session) -> int:
        """
        G1: Action performed on behalf of the calling customer.

        Returns:
            The customer's account id

        Raises:
            Unauthenticated: Nobody is logged in
            Forbidden: The session belongs to the admin, not a customer
        """
        if isinstance(session, CustomerSession):
            return session.account_id

        if isinstance(session, AdminSession):
            raise Forbidden(
                "G1_CustomerSession",
                "Admin session cannot act as a customer.",
            )

        raise Unauthenticated("G1_CustomerSession", "Customer login required.")

    @classmethod
    def check_customer_action(cls, session: Session) -> bool:
        """Check without raising (returns bool)."""
        try:
            cls.customer_action(session)
            return True
        except GateError:
            return False

    # =========================================================================
    # G2: Admin Action
    # =========================================================================

    ADMIN_STRATEGIES = {
        "password",  # Dashboard login with ADMIN_USERNAME/ADMIN_PASSWORD
        "pin",  # Dashboard login, or staff PIN on a logged-in customer's card
    }

    @classmethod
    def admin_action(cls, session: Session, pin: str | None = None) -> GateResult:
        """
        G2: Admin-only ledger action (stamp, redeem, reset, listing).

        An AdminSession always passes. Under the "pin" strategy a
        CustomerSession also passes when the shared staff PIN is supplied.

        Args:
            session: Request principal
            pin: Staff PIN typed on the customer's screen (pin strategy)

        Raises:
            Unauthenticated: Nobody is logged in
            Forbidden: Customer session without a valid PIN
            ImproperlyConfigured: Unknown ADMIN_AUTH value
        """
        strategy = stampcard_settings.ADMIN_AUTH
        if strategy not in cls.ADMIN_STRATEGIES:
            raise ImproperlyConfigured(
                f"STAMPCARD['ADMIN_AUTH'] must be one of "
                f"{sorted(cls.ADMIN_STRATEGIES)}, got {strategy!r}"
            )

        if isinstance(session, AdminSession):
            return GateResult(True, "G2_AdminAction")

        if not isinstance(session, CustomerSession):
            raise Unauthenticated("G2_AdminAction", "Login required.")

        if strategy == "pin" and cls.check_admin_pin(pin):
            return GateResult(True, "G2_AdminAction", "Staff PIN accepted")

        logger.warning(
            "G2_AdminAction denied for account %s (strategy=%s)",
            session.account_id,
            strategy,
        )
        raise Forbidden(
            "G2_AdminAction",
            "Wrong PIN." if strategy == "pin" else "Admin login required.",
            {"strategy": strategy},
        )

    @classmethod
    def check_admin_action(cls, *args, **kwargs) -> bool:
        """Check without raising (returns bool)."""
        try:
            cls.admin_action(*args, **kwargs)
            return True
        except GateError:
            return False

    # =========================================================================
    # G3: Admin Credentials
    # =========================================================================

    @classmethod
    def admin_credentials(cls, username: str, password: str) -> GateResult:
        """
        G3: Username/password match the configured operator identity.

        Raises:
            Forbidden: Mismatch, or ADMIN_PASSWORD is not configured
        """
        username_ok = _matches((username or "").strip(), stampcard_settings.ADMIN_USERNAME)
        password_ok = _matches(password, stampcard_settings.ADMIN_PASSWORD)

        if not (username_ok and password_ok):
            raise Forbidden("G3_AdminCredentials", "Invalid admin login.")

        return GateResult(True, "G3_AdminCredentials")

    @classmethod
    def check_admin_credentials(cls, username: str, password: str) -> bool:
        """Check without raising (returns bool)."""
        try:
            cls.admin_credentials(username, password)
            return True
        except GateError:
            return False

    # =========================================================================
    # G4: Admin PIN
    # =========================================================================

    @classmethod
    def admin_pin(cls, pin: str | None) -> GateResult:
        """
        G4: Shared staff PIN matches ADMIN_PIN.

        Raises:
            Forbidden: Wrong or missing PIN, or ADMIN_PIN is not configured
        """
        if not _matches(pin, stampcard_settings.ADMIN_PIN):
            raise Forbidden("G4_AdminPin", "Wrong PIN.")

        return GateResult(True, "G4_AdminPin")

    @classmethod
    def check_admin_pin(cls, pin: str | None) -> bool:
        """Check without raising (returns bool)."""
        try:
            cls.admin_pin(pin)
            return True
        except GateError:
            return False
