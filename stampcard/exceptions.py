"""Stampcard exceptions."""


class StampcardError(Exception):
    """
    Structured exception for loyalty operations.

    Every domain failure is expected and recoverable: the caller redisplays
    the input, nothing was mutated.

    Usage:
        try:
            ledger.redeem(account_id)
        except StampcardError as e:
            if e.code == "INSUFFICIENT_STAMPS":
                show_not_yet()
    """

    _default_messages = {
        "DUPLICATE_USERNAME": "That username is taken",
        "WEAK_INPUT": "Username or passcode too short",
        "WEAK_PASSCODE": "Passcode too short",
        "INVALID_CREDENTIALS": "Invalid login",
        "ACCOUNT_NOT_FOUND": "Account not found",
        "INSUFFICIENT_STAMPS": "Not enough stamps to redeem",
        "INVALID_DELTA": "Counter would become negative",
    }

    def __init__(self, code: str, message: str | None = None, **data):
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.data = data
        super().__init__(f"[{code}] {self.message}")

    def as_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "data": self.data}


class StoreUnavailable(Exception):
    """
    The account store could not be reached.

    Fatal for the current request. Not a StampcardError: callers must never
    read an outage as ACCOUNT_NOT_FOUND.
    """
