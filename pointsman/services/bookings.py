"""Booking service: turns completed bookings into earn transactions."""

import logging

from django.db import IntegrityError, transaction

from pointsman.conf import pointsman_settings
from pointsman.exceptions import ValidationError
from pointsman.gates import GateError, Gates
from pointsman.models import PointsTransaction, TransactionKind
from pointsman.protocols.bookings import BookingCompletion
from pointsman.services.ledger import LedgerService

logger = logging.getLogger(__name__)


class BookingService:
    """
    Consumer of booking-completion events.

    Uses @classmethod for extensibility (consistent with other services).
    One point per whole currency unit; fractions are truncated.
    """

    @classmethod
    def points_for_amount(cls, amount_minor: int) -> int:
        """Whole currency units in ``amount_minor`` (truncated)."""
        return amount_minor // pointsman_settings.CURRENCY_MINOR_UNITS

    @classmethod
    def record_completion(
        cls,
        event: BookingCompletion,
    ) -> tuple[PointsTransaction | None, bool]:
        """
        Append the earn transaction for a completed booking.

        At most once per booking: a repeated event returns the existing
        transaction with ``created=False``. Bookings worth less than one
        currency unit earn nothing and return ``(None, False)``.

        Returns:
            Tuple of (PointsTransaction or None, created: bool)

        Raises:
            ValidationError: Negative/non-integer amount or empty booking ref
            UnknownClientError: If the client is not enrolled
            StoreUnavailableError: If the ledger cannot be written
        """
        amount = event.amount_minor
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
            raise ValidationError("INVALID_AMOUNT", amount=repr(amount))
        if not event.booking_ref:
            raise ValidationError("INVALID_EVENT", "Booking reference is required")

        Gates.enrolled_client(event.client_code)

        points = cls.points_for_amount(amount)
        if points == 0:
            logger.info(
                "Booking %s for %s below one currency unit; no points",
                event.booking_ref,
                event.client_code,
            )
            return None, False

        try:
            Gates.booking_at_most_once(event.booking_ref)
        except GateError:
            logger.debug("Booking %s already credited", event.booking_ref)
            return cls._existing(event.booking_ref), False

        try:
            with transaction.atomic():
                tx = LedgerService.append(
                    event.client_code,
                    points,
                    TransactionKind.EARN_FROM_BOOKING,
                    description=cls._description(event),
                    source_booking_ref=event.booking_ref,
                )
        except IntegrityError:
            # Lost the race to a concurrent delivery of the same event
            logger.debug("Booking %s credited concurrently", event.booking_ref)
            return cls._existing(event.booking_ref), False

        return tx, True

    @classmethod
    def _description(cls, event: BookingCompletion) -> str:
        if event.completed_at is None:
            return f"Booking {event.booking_ref} completed"
        return f"Booking {event.booking_ref} completed at {event.completed_at.isoformat()}"

    @classmethod
    def _existing(cls, booking_ref: str) -> PointsTransaction:
        return PointsTransaction.objects.get(
            source_booking_ref=booking_ref,
            kind=TransactionKind.EARN_FROM_BOOKING,
        )
