"""
Gate tests:
- L1 PointsDelta
- L2 EnrolledClient (default and custom directory)
- L3 BookingAtMostOnce
- L4 ProviderEventAuthenticity
- Structured errors
"""

import hashlib
import hmac
import time

import pytest

from pointsman.exceptions import PointsmanError, UnknownClientError, ValidationError
from pointsman.gates import GateError, Gates, MAX_DELTA, MIN_DELTA
from pointsman.models import Client, TransactionKind
from pointsman.protocols.clients import ClientDirectory


class AllowListDirectory:
    """Test directory that trusts a fixed set of codes."""

    allowed = {"EXT-1"}

    def is_enrolled(self, client_code):
        return client_code in self.allowed


# ═══════════════════════════════════════════════════════════════════
# L1: PointsDelta
# ═══════════════════════════════════════════════════════════════════


class TestL1PointsDelta:
    @pytest.mark.parametrize("value", [1, -1, 250, MAX_DELTA, MIN_DELTA])
    def test_valid(self, value):
        assert Gates.points_delta(value).passed

    @pytest.mark.parametrize("value", [0, 0.0, 3.0, "5", None, True, MAX_DELTA + 1])
    def test_invalid(self, value):
        with pytest.raises(ValidationError):
            Gates.points_delta(value)
        assert Gates.check_points_delta(value) is False


# ═══════════════════════════════════════════════════════════════════
# L2: EnrolledClient
# ═══════════════════════════════════════════════════════════════════


@pytest.mark.django_db
class TestL2EnrolledClient:
    def test_active_client_passes(self, enrolled):
        assert Gates.enrolled_client("CLI-001").passed

    def test_unknown_client_raises(self):
        with pytest.raises(UnknownClientError):
            Gates.enrolled_client("GHOST")

    def test_empty_code_raises(self):
        assert Gates.check_enrolled_client("") is False

    def test_inactive_client_fails(self, make_client):
        make_client("CLI-OFF", is_active=False)
        assert Gates.check_enrolled_client("CLI-OFF") is False

    def test_custom_directory(self, settings):
        settings.POINTSMAN = {"CLIENT_DIRECTORY": "pointsman.tests.test_gates.AllowListDirectory"}
        assert Gates.check_enrolled_client("EXT-1") is True
        assert Gates.check_enrolled_client("EXT-2") is False

    def test_external_client_gets_local_row_on_first_write(self, settings):
        from pointsman.services.ledger import LedgerService

        settings.POINTSMAN = {"CLIENT_DIRECTORY": "pointsman.tests.test_gates.AllowListDirectory"}
        LedgerService.append("EXT-1", 40, TransactionKind.EARN_FROM_BOOKING, source_booking_ref="BK-EXT-1")

        assert Client.objects.filter(code="EXT-1").exists()
        assert LedgerService.compute_balance("EXT-1") == 40

    def test_directory_protocol(self):
        from pointsman.adapters.clients import LocalClientDirectory

        assert isinstance(LocalClientDirectory(), ClientDirectory)
        assert isinstance(AllowListDirectory(), ClientDirectory)


# ═══════════════════════════════════════════════════════════════════
# L3: BookingAtMostOnce
# ═══════════════════════════════════════════════════════════════════


@pytest.mark.django_db
class TestL3BookingAtMostOnce:
    def test_new_booking_passes(self, enrolled):
        assert Gates.booking_at_most_once("BK-NEW").passed

    def test_credited_booking_raises(self, enrolled, credit):
        tx = credit(enrolled, 50, kind=TransactionKind.EARN_FROM_BOOKING, source_booking_ref="BK-1")
        with pytest.raises(GateError, match="L3_BookingAtMostOnce") as exc_info:
            Gates.booking_at_most_once("BK-1")
        assert exc_info.value.details["transaction_uuid"] == str(tx.uuid)

    def test_manual_rows_with_same_ref_ignored(self, enrolled, credit):
        credit(enrolled, 50, source_booking_ref="BK-2")
        assert Gates.booking_at_most_once("BK-2").passed


# ═══════════════════════════════════════════════════════════════════
# L4: ProviderEventAuthenticity
# ═══════════════════════════════════════════════════════════════════


class TestL4ProviderEventAuthenticity:
    """L4: Webhook HMAC + timestamp validation."""

    def _make_signature(self, body: bytes, secret: str) -> str:
        return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()

    def test_valid_signature_passes(self):
        body = b'{"booking_ref": "BK-1"}'
        sig = self._make_signature(body, "my-secret")
        assert Gates.provider_event_authenticity(body, sig, "my-secret").passed

    def test_valid_signature_with_prefix(self):
        body = b'{"booking_ref": "BK-1"}'
        sig = "sha256=" + self._make_signature(body, "my-secret")
        assert Gates.provider_event_authenticity(body, sig, "my-secret").passed

    def test_invalid_signature_raises(self):
        with pytest.raises(GateError, match="Invalid signature"):
            Gates.provider_event_authenticity(b"body", "wrong-sig", "secret")

    def test_missing_signature_raises(self):
        with pytest.raises(GateError, match="Missing signature"):
            Gates.provider_event_authenticity(b"body", "", "secret")

    def test_no_secret_skips_validation(self):
        result = Gates.provider_event_authenticity(b"body", "anything", "")
        assert result.passed
        assert "skipped" in result.message

    def test_old_timestamp_raises(self):
        body = b"body"
        sig = self._make_signature(body, "secret")
        with pytest.raises(GateError, match="Timestamp too old"):
            Gates.provider_event_authenticity(body, sig, "secret", timestamp=int(time.time()) - 3600)

    def test_fresh_timestamp_passes(self):
        body = b"body"
        sig = self._make_signature(body, "secret")
        assert Gates.provider_event_authenticity(body, sig, "secret", timestamp=int(time.time())).passed


# ═══════════════════════════════════════════════════════════════════
# Structured errors
# ═══════════════════════════════════════════════════════════════════


class TestPointsmanError:
    def test_default_message(self):
        err = PointsmanError("CLIENT_NOT_ENROLLED")
        assert err.message == "Client not enrolled in loyalty program"
        assert err.code == "CLIENT_NOT_ENROLLED"

    def test_custom_message(self):
        err = PointsmanError("INVALID_POINTS", message="Custom msg")
        assert err.message == "Custom msg"

    def test_as_dict(self):
        d = UnknownClientError("CLI-404").as_dict()
        assert d["code"] == "CLIENT_NOT_ENROLLED"
        assert d["data"]["client_code"] == "CLI-404"
        assert d["retryable"] is False

    def test_subclasses_share_base(self):
        assert isinstance(ValidationError("INVALID_POINTS"), PointsmanError)
        assert isinstance(UnknownClientError("X"), PointsmanError)
