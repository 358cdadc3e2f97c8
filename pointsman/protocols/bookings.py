"""Booking-completion event consumed from the scheduling app."""

from dataclasses import dataclass
from datetime import datetime

from pointsman.exceptions import ValidationError


@dataclass(frozen=True)
class BookingCompletion:
    """A booking was completed and paid."""

    client_code: str
    booking_ref: str
    amount_minor: int  # smallest currency unit (cents)
    completed_at: datetime | None = None

    @classmethod
    def from_payload(cls, data: dict) -> "BookingCompletion":
        """
        Build from a webhook payload.

        Accepts ``client_code``/``booking_ref``/``amount_minor`` keys and the
        scheduler's camelCase names (``clientId``, ``bookingId``,
        ``amountInSmallestCurrencyUnit``). ``completed_at`` is optional and
        must be an ISO 8601 datetime when given.

        Raises:
            ValidationError: INVALID_EVENT if a required key is missing or
                ``completed_at`` is not a valid datetime
        """
        from django.utils.dateparse import parse_datetime

        client_code = data.get("client_code") or data.get("clientId")
        booking_ref = data.get("booking_ref") or data.get("bookingId")
        if "amount_minor" in data:
            amount = data["amount_minor"]
        else:
            amount = data.get("amountInSmallestCurrencyUnit")

        for field_name, value in (
            ("client_code", client_code),
            ("booking_ref", booking_ref),
            ("amount_minor", amount),
        ):
            if value is None or value == "":
                raise ValidationError("INVALID_EVENT", f"Missing field: {field_name}", field=field_name)

        completed_raw = data.get("completed_at") or data.get("completedAt")
        completed_at = None
        if completed_raw:
            try:
                completed_at = parse_datetime(completed_raw)
            except (TypeError, ValueError):
                completed_at = None
            if completed_at is None:
                raise ValidationError(
                    "INVALID_EVENT",
                    "completed_at must be an ISO 8601 datetime",
                    field="completed_at",
                    value=repr(completed_raw),
                )

        return cls(
            client_code=str(client_code),
            booking_ref=str(booking_ref),
            amount_minor=amount,
            completed_at=completed_at,
        )
