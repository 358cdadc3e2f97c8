"""RewardIssuance: audit trail of every reward handed out by staff."""

import uuid as uuid_lib

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from pointsman.models.base import AppendOnlyModel


class RewardKind(models.TextChoices):
    POINTS = "points", _("Bonus points")
    DISCOUNT = "discount", _("Discount")
    ADDON = "addon", _("Free add-on")
    SERVICE = "service", _("Free service")


class RewardIssuance(AppendOnlyModel):
    """
    One issued reward, of any kind.

    Only points rewards move the ledger (``transaction`` is set); the other
    kinds are recorded here so the audit trail is complete.
    """

    uuid = models.UUIDField(default=uuid_lib.uuid4, editable=False, unique=True)

    client = models.ForeignKey(
        "pointsman.Client",
        on_delete=models.PROTECT,
        related_name="reward_issuances",
        verbose_name=_("client"),
    )
    reward_kind = models.CharField(_("reward"), max_length=20, choices=RewardKind.choices)
    detail = models.TextField(
        _("detail"),
        blank=True,
        help_text=_("What was given (e.g. '$10 off next visit')"),
    )
    note = models.TextField(_("note"), blank=True)

    points = models.BigIntegerField(_("points"), default=0)
    transaction = models.OneToOneField(
        "pointsman.PointsTransaction",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="reward_issuance",
        verbose_name=_("ledger transaction"),
    )

    tier_before = models.CharField(_("tier before"), max_length=50)
    tier_after = models.CharField(_("tier after"), max_length=50)

    created_at = models.DateTimeField(
        _("created at"),
        default=timezone.now,
        editable=False,
        db_index=True,
    )
    created_by = models.CharField(_("issued by"), max_length=100, blank=True)

    class Meta:
        verbose_name = _("reward issuance")
        verbose_name_plural = _("reward issuances")
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.get_reward_kind_display()} → {self.client_id}"
