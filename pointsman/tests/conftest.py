"""Pytest fixtures for Pointsman tests."""

from datetime import datetime, timezone as dt_timezone

import pytest

from pointsman.models import Client, PointsTransaction, TransactionKind


@pytest.fixture
def make_client(db):
    """Factory for enrolled clients with controllable enrollment time."""

    def _make(code, display_name="", enrolled_at=None, is_active=True):
        kwargs = {"code": code, "display_name": display_name, "is_active": is_active}
        if enrolled_at is not None:
            kwargs["enrolled_at"] = enrolled_at
        return Client.objects.create(**kwargs)

    return _make


@pytest.fixture
def enrolled(make_client):
    """A single enrolled client with no transactions."""
    return make_client(
        "CLI-001",
        display_name="Maria Santos",
        enrolled_at=datetime(2025, 1, 10, 12, 0, tzinfo=dt_timezone.utc),
    )


@pytest.fixture
def credit(db):
    """Write a ledger row directly (bypassing services) for setup."""

    def _credit(client, delta, kind=TransactionKind.MANUAL_CREDIT, **extra):
        return PointsTransaction.objects.create(client=client, delta=delta, kind=kind, **extra)

    return _credit


@pytest.fixture
def tiers_table():
    """Default four-tier table."""
    from pointsman.tiers import get_tier_table

    return get_tier_table()
