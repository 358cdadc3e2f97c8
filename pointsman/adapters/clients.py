"""Default ClientDirectory adapters."""

from django.utils.module_loading import import_string

from pointsman.protocols.clients import ClientDirectory


class LocalClientDirectory:
    """
    Directory backed by pointsman's Client table.

    Configuration in settings.py (default):
        POINTSMAN = {
            "CLIENT_DIRECTORY": "pointsman.adapters.clients.LocalClientDirectory",
        }
    """

    def is_enrolled(self, client_code: str) -> bool:
        from pointsman.models import Client

        return Client.objects.filter(code=client_code, is_active=True).exists()


def get_client_directory() -> ClientDirectory:
    """Instantiate the configured ClientDirectory."""
    from pointsman.conf import pointsman_settings

    backend_class = import_string(pointsman_settings.CLIENT_DIRECTORY)
    return backend_class()
