"""Client enrollment record.

The loyalty ledger is keyed on ``Client.code``. Client profiles (names,
contacts, addresses) belong to the host's client-management app; this row
only records that a client takes part in the loyalty program and since when.
"""

import uuid as uuid_lib

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class Client(models.Model):
    """
    Client enrolled in the loyalty program.

    ``enrolled_at`` breaks leaderboard ties (earlier enrollment ranks first).
    Balance and tier are never stored here; see LedgerService.
    """

    code = models.CharField(
        _("code"),
        max_length=50,
        unique=True,
        help_text=_("Client identifier shared with the client-management app (e.g. CLI-001)"),
    )
    uuid = models.UUIDField(default=uuid_lib.uuid4, editable=False, unique=True)

    display_name = models.CharField(_("display name"), max_length=200, blank=True)

    is_active = models.BooleanField(_("active"), default=True, db_index=True)
    enrolled_at = models.DateTimeField(_("enrolled at"), default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    class Meta:
        verbose_name = _("client")
        verbose_name_plural = _("clients")
        ordering = ["enrolled_at", "id"]

    def __str__(self):
        if self.display_name:
            return f"{self.display_name} ({self.code})"
        return self.code
