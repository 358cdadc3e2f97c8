"""Client directory protocol: the enrollment check the ledger trusts."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class ClientDirectory(Protocol):
    """
    Answers "is this an active, enrolled client?".

    The loyalty engine does not manage client lifecycle. It asks the
    configured directory before accepting a client code. The default
    implementation reads pointsman's own enrollment table.

    Configuration in settings.py:
        POINTSMAN = {
            "CLIENT_DIRECTORY": "myproject.loyalty.ProfileClientDirectory",
        }
    """

    def is_enrolled(self, client_code: str) -> bool:
        """
        Return True if the client may earn and receive points.

        Args:
            client_code: Client code

        Returns:
            True for active, enrolled clients
        """
        ...
