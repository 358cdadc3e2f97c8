"""
Pointsman JSON endpoints.

- GET  summaries/                 → leaderboard (SummaryService.list_summaries)
- POST clients/<code>/rewards/    → issue a reward (RewardService.issue)
- POST bookings/completed/        → booking-completion webhook

Authentication is the host's job: wrap the URLconf include (e.g. with
staff_member_required) for the staff endpoints. The webhook is protected
by the L4 HMAC gate instead.
"""

from __future__ import annotations

import json
import logging

from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from pointsman.conf import pointsman_settings
from pointsman.exceptions import (
    PointsmanError,
    StoreUnavailableError,
    UnknownClientError,
    ValidationError,
)
from pointsman.gates import GateError, Gates
from pointsman.models import RewardKind
from pointsman.protocols.bookings import BookingCompletion
from pointsman.services.bookings import BookingService
from pointsman.services.rewards import (
    AddOnReward,
    DiscountReward,
    FreeServiceReward,
    PointsReward,
    RewardService,
)
from pointsman.services.summaries import SummaryService

logger = logging.getLogger("pointsman.http")


_REWARD_VARIANTS = {
    RewardKind.DISCOUNT: DiscountReward,
    RewardKind.ADDON: AddOnReward,
    RewardKind.SERVICE: FreeServiceReward,
}


def _error_response(exc: PointsmanError) -> JsonResponse:
    if isinstance(exc, UnknownClientError):
        status = 404
    elif isinstance(exc, StoreUnavailableError):
        status = 503
    else:
        status = 400
    return JsonResponse({"error": exc.as_dict()}, status=status)


def _parse_json(body: bytes) -> dict | None:
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, ValueError):
        return None
    return data if isinstance(data, dict) else None


class SummaryListView(View):
    """GET endpoint for the loyalty leaderboard."""

    def get(self, request):
        try:
            summaries = SummaryService.list_summaries()
        except StoreUnavailableError as exc:
            return _error_response(exc)
        return JsonResponse({"results": [s.as_dict() for s in summaries]})


@method_decorator(csrf_exempt, name="dispatch")
class IssueRewardView(View):
    """
    POST endpoint for staff-issued rewards.

    Body:
        {"reward": "points", "points": 250, "note": "Thank you!"}
        {"reward": "discount", "detail": "$10 off", "note": "..."}

    ``reward`` defaults to "points".
    """

    def post(self, request, client_code):
        data = _parse_json(request.body)
        if data is None:
            return JsonResponse({"error": "Invalid JSON"}, status=400)

        kind = data.get("reward", RewardKind.POINTS)
        note = str(data.get("note") or "")
        if kind == RewardKind.POINTS:
            reward = PointsReward(data.get("points"))
        elif kind in _REWARD_VARIANTS:
            reward = _REWARD_VARIANTS[kind](detail=str(data.get("detail") or ""))
        else:
            return _error_response(ValidationError("INVALID_REWARD", reward=str(kind)))

        user = getattr(request, "user", None)
        created_by = user.get_username() if user is not None and user.is_authenticated else ""

        try:
            disposition = RewardService.issue(client_code, reward, note, created_by=created_by)
        except PointsmanError as exc:
            logger.info("Reward for %s rejected: %s", client_code, exc.code)
            return _error_response(exc)

        return JsonResponse(disposition.as_dict(), status=201)


@method_decorator(csrf_exempt, name="dispatch")
class BookingCompletedWebhookView(View):
    """
    POST endpoint for booking-completion events.

    Expects:
        - X-Pointsman-Signature header with HMAC (sha256=<hex>)
        - JSON body: {"client_code", "booking_ref", "amount_minor", "completed_at"}

    Settings:
        POINTSMAN["BOOKING_WEBHOOK_SECRET"]: HMAC secret.
    """

    def post(self, request):
        body = request.body
        signature = request.headers.get("X-Pointsman-Signature", "")

        # L4: Authenticity
        try:
            Gates.provider_event_authenticity(
                body, signature, pointsman_settings.BOOKING_WEBHOOK_SECRET
            )
        except GateError as exc:
            logger.warning("Booking webhook: L4 failed: %s", exc.message)
            return JsonResponse({"error": exc.message}, status=401)

        data = _parse_json(body)
        if data is None:
            return JsonResponse({"error": "Invalid JSON"}, status=400)

        try:
            event = BookingCompletion.from_payload(data)
        except ValidationError as exc:
            logger.info("Booking webhook: malformed event: %s", exc.message)
            return _error_response(exc)

        try:
            tx, created = BookingService.record_completion(event)
        except PointsmanError as exc:
            logger.info("Booking webhook %s rejected: %s", event.booking_ref, exc.code)
            return _error_response(exc)
        except Exception:
            logger.exception("Booking webhook: recording failed")
            return JsonResponse({"error": "Internal error"}, status=500)

        if tx is None:
            return JsonResponse({"status": "ignored", "points": 0})

        return JsonResponse(
            {
                "status": "created" if created else "duplicate",
                "transaction_uuid": str(tx.uuid),
                "points": tx.delta,
            },
            status=201 if created else 200,
        )
