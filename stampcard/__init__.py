"""
Django Stampcard - Café loyalty stamp card.

Usage:
    from stampcard import LedgerService, AuthService
    from stampcard.gates import Gates, GateError

    auth = AuthService()
    session = auth.register_customer("maria", "4821")

    ledger = LedgerService()
    ledger.add_stamp(session.account_id)
    progress = ledger.progress(ledger.get(session.account_id))

    # Authorization
    Gates.customer_action(session)
    Gates.admin_action(admin_session)
"""


def __getattr__(name):
    if name == "LedgerService":
        from stampcard.services.ledger import LedgerService

        return LedgerService
    if name == "AuthService":
        from stampcard.services.auth import AuthService

        return AuthService
    if name == "Gates":
        from stampcard.gates import Gates

        return Gates
    if name == "GateError":
        from stampcard.gates import GateError

        return GateError
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["LedgerService", "AuthService", "Gates", "GateError"]
__version__ = "0.1.0"
