"""
Django Pointsman - Loyalty points ledger and tier engine.

Usage:
    from pointsman import RewardService, SummaryService, LedgerService

    LedgerService.compute_balance("CLI-001")
    result = RewardService.issue_reward("CLI-001", 250, "Thanks for the referral")
    if result.tiered_up:
        notify(result.new_tier)

    leaderboard = SummaryService.list_summaries()

    # Tier resolution (pure)
    from pointsman.tiers import resolve_tier
    resolve_tier(450)  # TierStatus(tier=silver, points_to_next=250)
"""


def __getattr__(name):
    if name == "ClientService":
        from pointsman.services.clients import ClientService

        return ClientService
    if name == "LedgerService":
        from pointsman.services.ledger import LedgerService

        return LedgerService
    if name == "RewardService":
        from pointsman.services.rewards import RewardService

        return RewardService
    if name == "SummaryService":
        from pointsman.services.summaries import SummaryService

        return SummaryService
    if name == "BookingService":
        from pointsman.services.bookings import BookingService

        return BookingService
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "ClientService",
    "LedgerService",
    "RewardService",
    "SummaryService",
    "BookingService",
]
__version__ = "0.1.0"
