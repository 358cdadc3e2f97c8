"""
Pointsman configuration.

Usage in settings.py:
    POINTSMAN = {
        "TIERS": [
            {"name": "bronze", "min_points": 0},
            {"name": "silver", "min_points": 300},
            {"name": "gold", "min_points": 700},
            {"name": "platinum", "min_points": 1500},
        ],
        "CURRENCY_MINOR_UNITS": 100,
        "BOOKING_WEBHOOK_SECRET": "change-me",
    }

The tier table is the single source of truth for every read path
(admin leaderboard, client dashboard, reward issuance). Changing it
re-tiers every client on the next read; tiers are never persisted.
"""

from dataclasses import dataclass, field
from typing import Any

from django.conf import settings


DEFAULT_TIERS = [
    {
        "name": "bronze",
        "min_points": 0,
        "label": "Bronze",
        "perks": ["5% off on your birthday", "Early booking access"],
    },
    {
        "name": "silver",
        "min_points": 300,
        "label": "Silver",
        "perks": [
            "10% off 1 service per month",
            "Free lash bath add-on",
            "All Bronze perks",
        ],
    },
    {
        "name": "gold",
        "min_points": 700,
        "label": "Gold",
        "perks": [
            "15% off all services",
            "Free add-on every visit",
            "Priority booking",
            "All Silver perks",
        ],
    },
    {
        "name": "platinum",
        "min_points": 1500,
        "label": "Platinum",
        "perks": [
            "20% off all services",
            "1 complimentary service/mo",
            "VIP event invites",
            "All Gold perks",
        ],
    },
]


@dataclass
class PointsmanSettings:
    """Pointsman configuration settings."""

    # Ordered tier threshold table
    TIERS: list[dict] = field(default_factory=lambda: list(DEFAULT_TIERS))

    # Minor units per whole currency unit (1 point per whole unit spent)
    CURRENCY_MINOR_UNITS: int = 100

    # Nominal width of the top tier, used only for the progress bar
    TOP_TIER_PROGRESS_SPAN: int = 1500

    # Enrollment check adapter (dotted path to a ClientDirectory)
    CLIENT_DIRECTORY: str = "pointsman.adapters.clients.LocalClientDirectory"

    # HMAC secret for the booking-completion webhook
    BOOKING_WEBHOOK_SECRET: str = ""

    # Rows printed by pointsman_leaderboard
    DEFAULT_LEADERBOARD_LIMIT: int = 20


def get_pointsman_settings() -> PointsmanSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "POINTSMAN", {})
    return PointsmanSettings(**user_settings)


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_pointsman_settings(), name)


pointsman_settings = _LazySettings()
