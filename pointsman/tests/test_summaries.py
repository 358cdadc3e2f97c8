"""
Summary query tests:
- Ordering by balance, ties by enrollment
- Tier, points-to-next and progress per row
- Last activity fallback to enrollment
- Read idempotence and single-query projection
"""

from datetime import datetime, timedelta, timezone as dt_timezone

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from pointsman.models import TransactionKind
from pointsman.services.summaries import SummaryService


pytestmark = pytest.mark.django_db

T0 = datetime(2025, 1, 1, 9, 0, tzinfo=dt_timezone.utc)


@pytest.fixture
def leaderboard(make_client, credit):
    """Balances [1980, 1980, 300, 0] enrolled in order A, B, C, D."""
    a = make_client("A", "Alice", enrolled_at=T0)
    b = make_client("B", "Bea", enrolled_at=T0 + timedelta(days=1))
    c = make_client("C", "Cris", enrolled_at=T0 + timedelta(days=2))
    d = make_client("D", "Dani", enrolled_at=T0 + timedelta(days=3))

    # B's rows first so insertion order does not explain the result
    credit(b, 2000, created_at=T0 + timedelta(days=10))
    credit(b, -20, kind=TransactionKind.MANUAL_DEBIT, created_at=T0 + timedelta(days=11))
    credit(a, 1980, created_at=T0 + timedelta(days=12))
    credit(c, 300, created_at=T0 + timedelta(days=13))
    return a, b, c, d


class TestListSummaries:
    def test_ordering_with_tie_on_enrollment(self, leaderboard):
        rows = SummaryService.list_summaries()
        assert [r.client_code for r in rows] == ["A", "B", "C", "D"]
        assert [r.balance for r in rows] == [1980, 1980, 300, 0]

    def test_tie_order_follows_enrollment_not_code(self, make_client, credit):
        late = make_client("AAA", enrolled_at=T0 + timedelta(days=5))
        early = make_client("ZZZ", enrolled_at=T0)
        credit(late, 500)
        credit(early, 500)

        rows = SummaryService.list_summaries()
        assert [r.client_code for r in rows] == ["ZZZ", "AAA"]

    def test_row_fields(self, leaderboard):
        a, _, c, d = SummaryService.list_summaries()

        assert a.tier == "platinum"
        assert a.tier_label == "Platinum"
        assert a.points_to_next == 0
        assert a.next_tier is None
        assert a.display_name == "Alice"

        assert c.tier == "silver"
        assert c.points_to_next == 400
        assert c.next_tier == "gold"
        assert c.progress_percent == 0

        assert d.tier == "bronze"
        assert d.points_to_next == 300

    def test_last_activity(self, leaderboard):
        rows = {r.client_code: r for r in SummaryService.list_summaries()}

        assert rows["B"].last_activity_at == T0 + timedelta(days=11)
        assert rows["A"].last_activity_at == T0 + timedelta(days=12)
        # No transactions: falls back to enrollment
        assert rows["D"].last_activity_at == T0 + timedelta(days=3)

    def test_inactive_clients_excluded(self, leaderboard, make_client):
        make_client("OFF", is_active=False)
        codes = [r.client_code for r in SummaryService.list_summaries()]
        assert "OFF" not in codes

    def test_negative_balance_shown(self, make_client, credit):
        debtor = make_client("DEBT", enrolled_at=T0)
        credit(debtor, -75, kind=TransactionKind.MANUAL_DEBIT)

        (row,) = SummaryService.list_summaries()
        assert row.balance == -75
        assert row.tier == "bronze"
        assert row.points_to_next == 375
        assert row.progress_percent == 0

    def test_read_idempotence(self, leaderboard):
        assert SummaryService.list_summaries() == SummaryService.list_summaries()

    def test_single_query(self, leaderboard, django_assert_num_queries):
        with django_assert_num_queries(1):
            SummaryService.list_summaries()

    def test_limit(self, leaderboard):
        assert [r.client_code for r in SummaryService.list_summaries(limit=2)] == ["A", "B"]

    def test_tier_table_change_applies_on_next_read(self, leaderboard, settings):
        settings.POINTSMAN = {
            "TIERS": [
                {"name": "member", "min_points": 0},
                {"name": "vip", "min_points": 250},
            ]
        }
        rows = {r.client_code: r for r in SummaryService.list_summaries()}
        assert rows["C"].tier == "vip"
        assert rows["D"].tier == "member"
        assert rows["D"].points_to_next == 250

    def test_as_dict(self, leaderboard):
        data = SummaryService.list_summaries()[0].as_dict()
        assert data["client_code"] == "A"
        assert data["balance"] == 1980
        assert data["last_activity_at"] == (T0 + timedelta(days=12)).isoformat()

    def test_empty(self, db):
        assert SummaryService.list_summaries() == []


class TestGetSummary:
    def test_single_client(self, leaderboard):
        summary = SummaryService.get_summary("C")
        assert summary.balance == 300
        assert summary.tier == "silver"

    def test_unknown_client(self, db):
        assert SummaryService.get_summary("NOPE") is None


class TestLeaderboardCommand:
    def test_prints_ranked_rows(self, leaderboard, capsys):
        call_command("pointsman_leaderboard", "--limit", "3")
        out = capsys.readouterr().out

        lines = out.strip().splitlines()
        assert lines[0].split()[1] == "A"
        assert "max tier" in lines[0]
        assert "400 to gold" in lines[2]
        assert "3 clients listed." in out

    def test_limit_one(self, leaderboard, capsys):
        call_command("pointsman_leaderboard", "--limit", "1")
        assert "1 clients listed." in capsys.readouterr().out

    def test_zero_limit_rejected(self, leaderboard):
        with pytest.raises(CommandError, match="positive"):
            call_command("pointsman_leaderboard", "--limit", "0")

    def test_default_limit_from_settings(self, leaderboard, settings, capsys):
        settings.POINTSMAN = {"DEFAULT_LEADERBOARD_LIMIT": 2}
        call_command("pointsman_leaderboard")
        assert "2 clients listed." in capsys.readouterr().out

    def test_no_clients(self, db, capsys):
        call_command("pointsman_leaderboard")
        assert "No enrolled clients." in capsys.readouterr().out
