"""Stampcard services.

- ledger: LedgerService (stamps, redemptions, credential resets)
- auth: AuthService (registration, customer/admin login, logout)
"""

from stampcard.services import auth
from stampcard.services import ledger

__all__ = ["auth", "ledger"]
