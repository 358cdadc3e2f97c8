"""Ledger service: the append-only points store and balance aggregation.

The balance is never stored. Every read sums the client's rows, so
``balance == Σ delta`` holds at all times and concurrent appends can never
lose an update. No balance or tier is cached between calls.
"""

import logging
from contextlib import contextmanager

from django.db import InterfaceError, OperationalError, transaction
from django.db.models import BigIntegerField, Max, QuerySet, Sum, Value
from django.db.models.functions import Coalesce

from pointsman.exceptions import StoreUnavailableError, ValidationError
from pointsman.gates import Gates
from pointsman.models import Client, PointsTransaction, TransactionKind
from pointsman.signals import points_appended

logger = logging.getLogger(__name__)


# Required sign of the delta per kind
_POSITIVE_KINDS = {TransactionKind.EARN_FROM_BOOKING, TransactionKind.MANUAL_CREDIT}
_NEGATIVE_KINDS = {TransactionKind.MANUAL_DEBIT, TransactionKind.EXPIRATION}
_MANUAL_KINDS = {TransactionKind.MANUAL_CREDIT, TransactionKind.MANUAL_DEBIT}


@contextmanager
def store_guard(operation: str):
    """Re-raise connection-level database failures as StoreUnavailableError."""
    try:
        yield
    except (OperationalError, InterfaceError) as exc:
        logger.warning("Points store unavailable during %s: %s", operation, exc)
        raise StoreUnavailableError(operation=operation) from exc


class LedgerService:
    """
    Points Transaction Store + Balance Aggregator.

    Uses @classmethod for extensibility (consistent with other services).
    _insert() is the single insert path for ledger rows.
    """

    # ======================================================================
    # Writes
    # ======================================================================

    @classmethod
    def append(
        cls,
        client_code: str,
        delta: int,
        kind: str,
        description: str = "",
        source_booking_ref: str = "",
        created_by: str = "",
    ) -> PointsTransaction:
        """
        Append one immutable transaction.

        Negative balances are allowed; there is no insufficient-funds check.
        Manual credits and debits are written by RewardService only, so
        they are refused here.

        Args:
            client_code: Client code
            delta: Signed non-zero points
            kind: ``earn_from_booking`` or ``expiration``
            description: Human-readable reason
            source_booking_ref: Booking that produced an earn transaction
                (required for earn rows)
            created_by: Who triggered the write

        Returns:
            Created PointsTransaction

        Raises:
            ValidationError: Zero/non-integer delta, unknown or manual kind,
                a sign that contradicts the kind, or an earn row without a
                booking reference
            UnknownClientError: If the client is not enrolled
            StoreUnavailableError: If the store cannot be written
        """
        if kind in _MANUAL_KINDS:
            raise ValidationError(
                "INVALID_KIND",
                f"{kind} transactions are issued through RewardService",
                kind=str(kind),
            )
        return cls._insert(
            client_code,
            delta,
            kind,
            description=description,
            source_booking_ref=source_booking_ref,
            created_by=created_by,
        )

    @classmethod
    def _insert(
        cls,
        client_code: str,
        delta: int,
        kind: str,
        description: str = "",
        source_booking_ref: str = "",
        created_by: str = "",
    ) -> PointsTransaction:
        """Validate and write one row of any kind. The single insert path."""
        if kind not in TransactionKind.values:
            raise ValidationError("INVALID_KIND", kind=str(kind))
        Gates.points_delta(delta)
        if kind in _POSITIVE_KINDS and delta < 0:
            raise ValidationError("INVALID_POINTS", f"{kind} requires positive points", points=delta)
        if kind in _NEGATIVE_KINDS and delta > 0:
            raise ValidationError("INVALID_POINTS", f"{kind} requires negative points", points=delta)
        if kind == TransactionKind.EARN_FROM_BOOKING and not source_booking_ref:
            raise ValidationError("INVALID_EVENT", "Earn transactions require a booking reference")

        with store_guard("append"):
            Gates.enrolled_client(client_code)
            with transaction.atomic():
                client = cls.resolve_client(client_code)
                tx = PointsTransaction.objects.create(
                    client=client,
                    delta=delta,
                    kind=kind,
                    description=description,
                    source_booking_ref=source_booking_ref,
                    created_by=created_by,
                )
                transaction.on_commit(
                    lambda: points_appended.send(sender=PointsTransaction, transaction=tx)
                )

        logger.info("Ledger %s: %s %+d pts (%s)", client_code, kind, delta, tx.uuid)
        return tx

    @classmethod
    def expire(
        cls,
        client_code: str,
        points: int,
        description: str = "",
        created_by: str = "",
    ) -> PointsTransaction:
        """
        Expire points: appends a negative ``expiration`` row.

        Args:
            points: Points to expire (positive number)
        """
        Gates.points_delta(points)
        if points < 0:
            raise ValidationError("INVALID_POINTS", "Points to expire must be positive", points=points)
        return cls.append(
            client_code,
            -points,
            TransactionKind.EXPIRATION,
            description=description or f"Expired: -{points} points",
            created_by=created_by,
        )

    # ======================================================================
    # Reads
    # ======================================================================

    @classmethod
    def list_for_client(cls, client_code: str) -> QuerySet:
        """
        Client's transactions, oldest first.

        Returns a lazy QuerySet: nothing is fetched until iterated, and it
        can be iterated again (re-querying the store).
        """
        return PointsTransaction.objects.filter(client__code=client_code).order_by(
            "created_at", "id"
        )

    @classmethod
    def compute_balance(cls, client_code: str) -> int:
        """Sum of the client's deltas; 0 when there are none."""
        with store_guard("compute_balance"):
            total = cls.list_for_client(client_code).aggregate(total=Sum("delta"))["total"]
        return int(total or 0)

    @classmethod
    def recent(cls, client_code: str, limit: int = 20) -> list[PointsTransaction]:
        """Latest transactions first, for history displays."""
        with store_guard("recent"):
            return list(
                PointsTransaction.objects.filter(client__code=client_code).order_by(
                    "-created_at", "-id"
                )[:limit]
            )

    @classmethod
    def enrolled_totals(cls) -> QuerySet:
        """
        Active clients annotated with ``balance`` and ``last_transaction_at``.

        One aggregate query; clients without rows get balance 0 and
        ``last_transaction_at`` None.
        """
        return Client.objects.filter(is_active=True).annotate(
            balance=Coalesce(
                Sum("points_transactions__delta"),
                Value(0),
                output_field=BigIntegerField(),
            ),
            last_transaction_at=Max("points_transactions__created_at"),
        )

    @classmethod
    def sum_all_by_client(cls) -> dict[str, int]:
        """``{client_code: balance}`` for every enrolled client, in one query."""
        with store_guard("sum_all_by_client"):
            return {
                row["code"]: int(row["balance"])
                for row in cls.enrolled_totals().values("code", "balance")
            }

    # ======================================================================
    # Internal
    # ======================================================================

    @classmethod
    def resolve_client(cls, client_code: str, for_update: bool = False) -> Client:
        """
        Local enrollment row for a client the directory has accepted.

        Creates the row when an external directory knows a client that
        pointsman has not seen yet. ``for_update`` locks the row; it MUST
        be called inside transaction.atomic().
        """
        manager = Client.objects.select_for_update() if for_update else Client.objects
        client, created = manager.get_or_create(code=client_code)
        if created:
            logger.info("Client %s registered from client directory", client_code)
        return client
