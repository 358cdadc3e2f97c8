"""
Pointsman Gates - Validation rules.

L1: PointsDelta - Delta is a non-zero 64-bit integer
L2: EnrolledClient - Client code resolves to an active, enrolled client
L3: BookingAtMostOnce - A booking earns points at most once
L4: ProviderEventAuthenticity - Booking webhook is authentic (HMAC + timestamp)

L1 and L2 raise the domain errors callers already handle
(ValidationError, UnknownClientError). L3 and L4 raise GateError.
"""

import hashlib
import hmac
import logging
import time
from dataclasses import dataclass

from pointsman.exceptions import UnknownClientError, ValidationError

logger = logging.getLogger(__name__)

# Signed 64-bit range of the ledger's delta column
MAX_DELTA = 2**63 - 1
MIN_DELTA = -(2**63)


class GateError(Exception):
    """Gate validation error."""

    def __init__(self, gate_name: str, message: str, details: dict | None = None):
        self.gate_name = gate_name
        self.message = message
        self.details = details or {}
        super().__init__(f"[{gate_name}] {message}")


@dataclass
class GateResult:
    """Result of a gate check."""

    passed: bool
    gate_name: str
    message: str = ""


# =============================================================================
# Gates
# =============================================================================


class Gates:
    """Pointsman validation gates."""

    # =========================================================================
    # L1: Points Delta
    # =========================================================================

    @classmethod
    def points_delta(cls, delta) -> GateResult:
        """
        L1: Delta must be a non-zero integer that fits the ledger column.

        bool is rejected even though it subclasses int.

        Raises:
            ValidationError: INVALID_POINTS
        """
        if isinstance(delta, bool) or not isinstance(delta, int):
            raise ValidationError(
                "INVALID_POINTS",
                f"Points must be an integer, got {type(delta).__name__}",
                points=repr(delta),
            )
        if delta == 0:
            raise ValidationError("INVALID_POINTS", "Points must be non-zero", points=0)
        if not MIN_DELTA <= delta <= MAX_DELTA:
            raise ValidationError(
                "INVALID_POINTS",
                "Points out of range",
                points=str(delta),
            )
        return GateResult(True, "L1_PointsDelta")

    @classmethod
    def check_points_delta(cls, delta) -> bool:
        """Check without raising (returns bool)."""
        try:
            cls.points_delta(delta)
            return True
        except ValidationError:
            return False

    # =========================================================================
    # L2: Enrolled Client
    # =========================================================================

    @classmethod
    def enrolled_client(cls, client_code: str) -> GateResult:
        """
        L2: Client must be known to the configured ClientDirectory.

        Raises:
            UnknownClientError: If the directory does not know the client
        """
        from pointsman.adapters.clients import get_client_directory

        if not client_code or not get_client_directory().is_enrolled(client_code):
            raise UnknownClientError(client_code)
        return GateResult(True, "L2_EnrolledClient")

    @classmethod
    def check_enrolled_client(cls, client_code: str) -> bool:
        """Check without raising (returns bool)."""
        try:
            cls.enrolled_client(client_code)
            return True
        except UnknownClientError:
            return False

    # =========================================================================
    # L3: Booking At Most Once
    # =========================================================================

    @classmethod
    def booking_at_most_once(cls, booking_ref: str) -> GateResult:
        """
        L3: A booking produces at most one earn transaction.

        The unique constraint on (source_booking_ref, kind=earn) is the final
        guard; this gate lets callers short-circuit before writing.

        Raises:
            GateError: If an earn row already exists for the booking
        """
        from pointsman.models import PointsTransaction, TransactionKind

        existing = PointsTransaction.objects.filter(
            source_booking_ref=booking_ref,
            kind=TransactionKind.EARN_FROM_BOOKING,
        ).first()
        if existing:
            raise GateError(
                "L3_BookingAtMostOnce",
                "Booking already credited.",
                {"transaction_uuid": str(existing.uuid), "booking_ref": booking_ref},
            )
        return GateResult(True, "L3_BookingAtMostOnce")

    # =========================================================================
    # L4: Provider Event Authenticity
    # =========================================================================

    @classmethod
    def provider_event_authenticity(
        cls,
        body: bytes,
        signature: str,
        secret: str,
        timestamp: int | None = None,
        max_age_seconds: int = 300,
    ) -> GateResult:
        """
        L4: Booking webhook is authentic (HMAC + timestamp validation).

        Signature header format: ``sha256=<hex_digest>`` (prefix optional).

        Args:
            body: Raw request body (bytes)
            signature: Signature from header
            secret: Webhook secret
            timestamp: Unix timestamp from header (optional)
            max_age_seconds: Maximum age of request (default 5 minutes)

        Raises:
            GateError: If signature is invalid or timestamp is too old
        """
        if not secret:
            logger.warning(
                "L4_ProviderEventAuthenticity: webhook secret is empty; "
                "booking payloads are accepted without signature validation. "
                "Set POINTSMAN['BOOKING_WEBHOOK_SECRET'] before deploying."
            )
            return GateResult(
                True, "L4_ProviderEventAuthenticity", "No secret configured (skipped)"
            )

        if not signature:
            raise GateError(
                "L4_ProviderEventAuthenticity",
                "Missing signature header.",
            )

        if signature.startswith("sha256="):
            signature = signature[7:]

        expected = hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()

        if not hmac.compare_digest(signature.lower(), expected.lower()):
            raise GateError(
                "L4_ProviderEventAuthenticity",
                "Invalid signature.",
            )

        if timestamp:
            age = abs(int(time.time()) - timestamp)
            if age > max_age_seconds:
                raise GateError(
                    "L4_ProviderEventAuthenticity",
                    f"Timestamp too old ({age}s > {max_age_seconds}s).",
                    {"age_seconds": age},
                )

        return GateResult(True, "L4_ProviderEventAuthenticity")
