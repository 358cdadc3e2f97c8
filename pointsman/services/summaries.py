"""Summary service: per-client loyalty snapshot for leaderboards."""

from dataclasses import dataclass
from datetime import datetime

from pointsman.conf import pointsman_settings
from pointsman.services.ledger import LedgerService, store_guard
from pointsman.tiers import get_tier_table, progress_percent, resolve_tier


@dataclass(frozen=True)
class ClientSummary:
    """One leaderboard row."""

    client_code: str
    display_name: str
    balance: int
    tier: str
    tier_label: str
    points_to_next: int
    next_tier: str | None
    progress_percent: int
    last_activity_at: datetime
    enrolled_at: datetime

    def as_dict(self) -> dict:
        return {
            "client_code": self.client_code,
            "display_name": self.display_name,
            "balance": self.balance,
            "tier": self.tier,
            "tier_label": self.tier_label,
            "points_to_next": self.points_to_next,
            "next_tier": self.next_tier,
            "progress_percent": self.progress_percent,
            "last_activity_at": self.last_activity_at.isoformat(),
            "enrolled_at": self.enrolled_at.isoformat(),
        }


class SummaryService:
    """
    Read-only projection of the ledger.

    Uses @classmethod for extensibility (consistent with other services).
    Never writes; two calls with no writes in between return equal lists.
    """

    @classmethod
    def list_summaries(cls, limit: int | None = None) -> list[ClientSummary]:
        """
        Every enrolled client, highest balance first.

        Ties are broken by earliest enrollment, then by row id, so the
        order is fully deterministic.
        """
        table = get_tier_table()
        top_span = pointsman_settings.TOP_TIER_PROGRESS_SPAN

        rows = LedgerService.enrolled_totals().order_by("-balance", "enrolled_at", "id")
        if limit is not None:
            rows = rows[:limit]

        with store_guard("list_summaries"):
            return [cls._build(row, table, top_span) for row in rows]

    @classmethod
    def get_summary(cls, client_code: str) -> ClientSummary | None:
        """Snapshot for one enrolled client, or None."""
        table = get_tier_table()
        top_span = pointsman_settings.TOP_TIER_PROGRESS_SPAN

        with store_guard("get_summary"):
            row = LedgerService.enrolled_totals().filter(code=client_code).first()
        if row is None:
            return None
        return cls._build(row, table, top_span)

    @classmethod
    def _build(cls, client, table, top_span: int) -> ClientSummary:
        balance = int(client.balance)
        status = resolve_tier(balance, table)
        return ClientSummary(
            client_code=client.code,
            display_name=client.display_name,
            balance=balance,
            tier=status.tier.name,
            tier_label=str(status.tier),
            points_to_next=status.points_to_next,
            next_tier=status.next_tier.name if status.next_tier else None,
            progress_percent=progress_percent(balance, table, top_span),
            last_activity_at=client.last_transaction_at or client.enrolled_at,
            enrolled_at=client.enrolled_at,
        )
