"""PointsTransaction: the append-only points ledger."""

import uuid as uuid_lib

from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from pointsman.models.base import AppendOnlyModel


class TransactionKind(models.TextChoices):
    """Why the points moved."""

    EARN_FROM_BOOKING = "earn_from_booking", _("Earned from booking")
    MANUAL_CREDIT = "manual_credit", _("Manual credit")
    MANUAL_DEBIT = "manual_debit", _("Manual debit")
    EXPIRATION = "expiration", _("Expiration")


class PointsTransaction(AppendOnlyModel):
    """
    Immutable record of a points movement.

    A client's balance is the sum of ``delta`` over their rows. Rows are
    never updated or deleted; a correction is a new offsetting row.
    Zero deltas are never written.
    """

    uuid = models.UUIDField(default=uuid_lib.uuid4, editable=False, unique=True)

    client = models.ForeignKey(
        "pointsman.Client",
        on_delete=models.PROTECT,
        related_name="points_transactions",
        verbose_name=_("client"),
    )

    delta = models.BigIntegerField(
        _("points"),
        help_text=_("Positive for credits, negative for debits/expirations"),
    )
    kind = models.CharField(
        _("kind"),
        max_length=20,
        choices=TransactionKind.choices,
        db_index=True,
    )

    description = models.TextField(_("description"), blank=True)
    source_booking_ref = models.CharField(
        _("source booking"),
        max_length=100,
        blank=True,
        db_index=True,
        help_text=_("Booking that produced this earn transaction"),
    )

    created_at = models.DateTimeField(
        _("created at"),
        default=timezone.now,
        editable=False,
        db_index=True,
    )
    created_by = models.CharField(_("created by"), max_length=100, blank=True)

    class Meta:
        verbose_name = _("points transaction")
        verbose_name_plural = _("points transactions")
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["client", "created_at"], name="pointsman_tx_client_created"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~Q(delta=0),
                name="pointsman_tx_delta_nonzero",
            ),
            models.UniqueConstraint(
                fields=["source_booking_ref"],
                condition=Q(kind="earn_from_booking") & ~Q(source_booking_ref=""),
                name="pointsman_tx_one_earn_per_booking",
            ),
        ]

    def __str__(self):
        sign = "+" if self.delta > 0 else ""
        return f"{sign}{self.delta}pts ({self.kind})"
