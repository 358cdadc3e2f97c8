"""Pointsman exceptions."""


class PointsmanError(Exception):
    """
    Structured exception for loyalty operations.

    Carries a stable machine-readable ``code``, a human message and any
    extra context as ``data``.

    Usage:
        try:
            RewardService.issue_reward("CLI-001", 250, "Birthday bonus")
        except PointsmanError as e:
            if e.code == "CLIENT_NOT_ENROLLED":
                handle_not_found()
    """

    retryable = False

    _default_messages = {
        "CLIENT_NOT_ENROLLED": "Client not enrolled in loyalty program",
        "INVALID_POINTS": "Points must be a non-zero integer",
        "INVALID_KIND": "Unknown transaction kind",
        "INVALID_AMOUNT": "Booking amount must be a non-negative integer",
        "INVALID_REWARD": "Unsupported reward",
        "INVALID_EVENT": "Malformed booking event",
        "STORE_UNAVAILABLE": "Points ledger is unavailable",
        "LEDGER_IMMUTABLE": "Ledger transactions cannot be changed or deleted",
    }

    def __init__(self, code: str, message: str | None = None, **data):
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.data = data
        super().__init__(f"[{code}] {self.message}")

    def as_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "data": self.data,
            "retryable": self.retryable,
        }


class ValidationError(PointsmanError):
    """Malformed input (zero/non-integer points, bad kind, bad amount or event)."""


class UnknownClientError(PointsmanError):
    """Client code does not resolve to an enrolled client."""

    def __init__(self, client_code: str, message: str | None = None):
        super().__init__("CLIENT_NOT_ENROLLED", message, client_code=client_code)


class StoreUnavailableError(PointsmanError):
    """The transaction store could not be read or written. Safe to retry."""

    retryable = True

    def __init__(self, message: str | None = None, **data):
        super().__init__("STORE_UNAVAILABLE", message, **data)


class LedgerImmutableError(PointsmanError):
    """Attempt to mutate or delete a ledger row."""

    def __init__(self, message: str | None = None, **data):
        super().__init__("LEDGER_IMMUTABLE", message, **data)
