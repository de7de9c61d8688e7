"""
Request principals.

A session is exactly one of Anonymous, CustomerSession or AdminSession.
Services take and return these values; only the view layer touches the
Django session, through load()/save()/clear().
"""

from dataclasses import dataclass

SESSION_KEY = "stampcard_principal"


@dataclass(frozen=True)
class Anonymous:
    """No one is logged in."""


@dataclass(frozen=True)
class CustomerSession:
    """A customer logged in to their own card."""

    account_id: int


@dataclass(frozen=True)
class AdminSession:
    """The operator admin logged in to the dashboard."""

    username: str


Session = Anonymous | CustomerSession | AdminSession

ANONYMOUS = Anonymous()


def to_dict(session: Session) -> dict:
    if isinstance(session, CustomerSession):
        return {"kind": "customer", "account_id": session.account_id}
    if isinstance(session, AdminSession):
        return {"kind": "admin", "username": session.username}
    return {"kind": "anonymous"}


def from_dict(data: dict | None) -> Session:
    """Rebuild a principal; anything unrecognized is Anonymous."""
    data = data or {}
    kind = data.get("kind")
    try:
        if kind == "customer":
            return CustomerSession(account_id=int(data["account_id"]))
        if kind == "admin":
            return AdminSession(username=str(data["username"]))
    except (KeyError, TypeError, ValueError):
        return ANONYMOUS
    return ANONYMOUS


def load(request) -> Session:
    """Principal stored in the request's Django session."""
    return from_dict(request.session.get(SESSION_KEY))


def save(request, session: Session) -> None:
    """
    Store a principal in the Django session.

    Rotates the session key when the principal changes, so a session id
    seen before login cannot be reused after it.
    """
    if isinstance(session, Anonymous):
        clear(request)
        return
    if load(request) != session:
        request.session.cycle_key()
    request.session[SESSION_KEY] = to_dict(session)


def clear(request) -> None:
    """Drop the principal and all other session data."""
    request.session.flush()
