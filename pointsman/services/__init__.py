"""Pointsman services.

- ClientService: enrollment
- LedgerService: append-only store + balance aggregation
- RewardService: staff rewards + tier-transition detection
- SummaryService: leaderboard projection
- BookingService: booking-completion events → earn transactions
"""

from pointsman.services.clients import ClientService
from pointsman.services.ledger import LedgerService
from pointsman.services.rewards import RewardService
from pointsman.services.summaries import SummaryService
from pointsman.services.bookings import BookingService

__all__ = [
    "ClientService",
    "LedgerService",
    "RewardService",
    "SummaryService",
    "BookingService",
]
