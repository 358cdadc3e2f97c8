"""Client service: loyalty enrollment."""

import logging

from django.db import transaction

from pointsman.exceptions import UnknownClientError
from pointsman.models import Client

logger = logging.getLogger(__name__)


class ClientService:
    """
    Enrollment operations.

    Uses @classmethod for extensibility (consistent with other services).
    Unenrolling never touches ledger rows; re-enrolling restores the
    client with their full history.
    """

    @classmethod
    def enroll(cls, code: str, display_name: str = "") -> Client:
        """
        Enroll a client in the loyalty program.

        Idempotent: returns the existing row, reactivating it if needed.

        Args:
            code: Client code
            display_name: Name shown on the leaderboard

        Returns:
            Client (created or existing)
        """
        with transaction.atomic():
            client, created = Client.objects.select_for_update().get_or_create(
                code=code,
                defaults={"display_name": display_name},
            )
            if not created:
                fields = []
                if not client.is_active:
                    client.is_active = True
                    fields.append("is_active")
                if display_name and client.display_name != display_name:
                    client.display_name = display_name
                    fields.append("display_name")
                if fields:
                    client.save(update_fields=fields + ["updated_at"])

        if created:
            logger.info("Client %s enrolled in loyalty program", code)
        return client

    @classmethod
    def get(cls, code: str) -> Client | None:
        """Get active client by code."""
        try:
            return Client.objects.get(code=code, is_active=True)
        except Client.DoesNotExist:
            return None

    @classmethod
    def unenroll(cls, code: str) -> Client:
        """
        Deactivate a client. Their ledger is kept as-is.

        Raises:
            UnknownClientError: If no active client has this code
        """
        updated = Client.objects.filter(code=code, is_active=True).update(is_active=False)
        if not updated:
            raise UnknownClientError(code)
        logger.info("Client %s unenrolled from loyalty program", code)
        return Client.objects.get(code=code)
