"""
Stampcard signals: public event API.

Emitted signals:
- account_registered: Emitted by AuthService.register_customer()
- stamp_added: Emitted by LedgerService.add_stamp()
- reward_redeemed: Emitted by LedgerService.redeem()
- credential_reset: Emitted by LedgerService.reset_credential()
"""

from django.dispatch import Signal

# Account signals (emitted by services)
account_registered = Signal()  # sender=AuthService, account=AccountInfo
stamp_added = Signal()  # sender=LedgerService, account=AccountInfo
reward_redeemed = Signal()  # sender=LedgerService, account=AccountInfo
credential_reset = Signal()  # sender=LedgerService, account=AccountInfo
