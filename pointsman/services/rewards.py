"""Reward service: staff-issued rewards and tier-transition detection.

Rewards are a closed set of variants. Only ``PointsReward`` moves the
ledger; discounts, add-ons and free services are recorded in the
RewardIssuance audit trail with no ledger row.

Issuance flow (inside one DB transaction, client row locked):
    1. validate
    2. balance_before / tier_before (fresh sum)
    3. append manual_credit or manual_debit
    4. balance_after / tier_after (fresh sum)
    5. record RewardIssuance, return RewardDisposition

The row lock serializes issuances for the same client, so the before and
after reads of one call never interleave with another call's write.
"""

import logging
from dataclasses import asdict, dataclass
from enum import Enum
from typing import ClassVar, Union

from django.db import transaction

from pointsman.exceptions import ValidationError
from pointsman.gates import Gates
from pointsman.models import Client, RewardIssuance, RewardKind, TransactionKind
from pointsman.services.ledger import LedgerService, store_guard
from pointsman.signals import reward_issued, tier_changed
from pointsman.tiers import get_tier_table, resolve_tier, tier_rank

logger = logging.getLogger(__name__)


# =============================================================================
# Reward variants
# =============================================================================


@dataclass(frozen=True)
class PointsReward:
    """Bonus points (negative for a manual debit)."""

    points: int
    kind: ClassVar[str] = RewardKind.POINTS

    @property
    def detail(self) -> str:
        return f"{self.points:+d} points"


@dataclass(frozen=True)
class DiscountReward:
    """Money or percentage off a future visit."""

    detail: str = ""
    kind: ClassVar[str] = RewardKind.DISCOUNT


@dataclass(frozen=True)
class AddOnReward:
    """Complimentary upgrade or add-on."""

    detail: str = ""
    kind: ClassVar[str] = RewardKind.ADDON


@dataclass(frozen=True)
class FreeServiceReward:
    """One service on the house."""

    detail: str = ""
    kind: ClassVar[str] = RewardKind.SERVICE


Reward = Union[PointsReward, DiscountReward, AddOnReward, FreeServiceReward]

REWARD_TYPES = (PointsReward, DiscountReward, AddOnReward, FreeServiceReward)


class Outcome(str, Enum):
    NO_OP = "no_op"  # no ledger effect (non-points reward)
    REWARD_ONLY = "reward_only"  # points moved, tier unchanged
    TIER_UP = "tier_up"
    TIER_DOWN = "tier_down"


@dataclass(frozen=True)
class RewardDisposition:
    """
    What an issuance did.

    ``tiered_up`` is True whenever the tier after the write differs from
    the tier before it; ``outcome`` tells the direction.
    """

    outcome: Outcome
    tiered_up: bool
    new_tier: str
    previous_tier: str
    balance_before: int
    balance_after: int
    transaction_uuid: str | None = None
    issuance_uuid: str | None = None

    def as_dict(self) -> dict:
        data = asdict(self)
        data["outcome"] = self.outcome.value
        return data


# =============================================================================
# Service
# =============================================================================


class RewardService:
    """
    The only writer of manual_credit / manual_debit transactions.

    Uses @classmethod for extensibility (consistent with other services).
    """

    @classmethod
    def issue_reward(
        cls,
        client_code: str,
        points_delta: int,
        note: str = "",
        created_by: str = "",
    ) -> RewardDisposition:
        """
        Issue bonus points (positive) or a manual debit (negative).

        Args:
            client_code: Client code
            points_delta: Signed non-zero integer
            note: Shown in the client's points history
            created_by: Staff member issuing the reward

        Returns:
            RewardDisposition

        Raises:
            ValidationError: If points_delta is zero or not an integer
            UnknownClientError: If the client is not enrolled
            StoreUnavailableError: If the ledger cannot be read or written
        """
        return cls.issue(client_code, PointsReward(points_delta), note, created_by)

    @classmethod
    def issue(
        cls,
        client_code: str,
        reward: Reward,
        note: str = "",
        created_by: str = "",
    ) -> RewardDisposition:
        """
        Issue any reward variant. Validation failures write nothing.

        Raises:
            ValidationError: Unsupported reward or invalid points
            UnknownClientError: If the client is not enrolled
            StoreUnavailableError: If the ledger cannot be read or written
        """
        if not isinstance(reward, REWARD_TYPES):
            raise ValidationError("INVALID_REWARD", reward=type(reward).__name__)
        if isinstance(reward, PointsReward):
            Gates.points_delta(reward.points)

        table = get_tier_table()

        with store_guard("issue_reward"):
            Gates.enrolled_client(client_code)

            with transaction.atomic():
                client = LedgerService.resolve_client(client_code, for_update=True)

                balance_before = LedgerService.compute_balance(client_code)
                tier_before = resolve_tier(balance_before, table).tier

                tx = None
                if isinstance(reward, PointsReward):
                    tx = LedgerService._insert(
                        client_code,
                        reward.points,
                        cls._kind_for(reward.points),
                        description=note or cls._default_note(reward.points),
                        created_by=created_by,
                    )

                balance_after = LedgerService.compute_balance(client_code)
                tier_after = resolve_tier(balance_after, table).tier

                issuance = RewardIssuance.objects.create(
                    client=client,
                    reward_kind=reward.kind,
                    detail=reward.detail,
                    note=note,
                    points=reward.points if tx else 0,
                    transaction=tx,
                    tier_before=tier_before.name,
                    tier_after=tier_after.name,
                    created_by=created_by,
                )

                disposition = RewardDisposition(
                    outcome=cls._outcome(tx is not None, tier_before.name, tier_after.name, table),
                    tiered_up=tier_after.name != tier_before.name,
                    new_tier=tier_after.name,
                    previous_tier=tier_before.name,
                    balance_before=balance_before,
                    balance_after=balance_after,
                    transaction_uuid=str(tx.uuid) if tx else None,
                    issuance_uuid=str(issuance.uuid),
                )

                transaction.on_commit(
                    lambda: cls._emit(client, issuance, disposition)
                )

        logger.info(
            "Reward %s issued to %s: %s (%s -> %s)",
            reward.kind,
            client_code,
            disposition.outcome.value,
            disposition.previous_tier,
            disposition.new_tier,
        )
        return disposition

    # ======================================================================
    # Internal
    # ======================================================================

    @classmethod
    def _kind_for(cls, points: int) -> str:
        if points > 0:
            return TransactionKind.MANUAL_CREDIT
        return TransactionKind.MANUAL_DEBIT

    @classmethod
    def _default_note(cls, points: int) -> str:
        if points > 0:
            return f"Manual credit: +{points} points"
        return f"Manual debit: {points} points"

    @classmethod
    def _outcome(cls, moved: bool, before: str, after: str, table) -> Outcome:
        if not moved:
            return Outcome.NO_OP
        if before == after:
            return Outcome.REWARD_ONLY
        if tier_rank(after, table) > tier_rank(before, table):
            return Outcome.TIER_UP
        return Outcome.TIER_DOWN

    @classmethod
    def _emit(cls, client: Client, issuance: RewardIssuance, disposition: RewardDisposition) -> None:
        reward_issued.send(sender=RewardIssuance, issuance=issuance, disposition=disposition)
        if disposition.tiered_up:
            tier_changed.send(
                sender=Client,
                client_code=client.code,
                previous_tier=disposition.previous_tier,
                new_tier=disposition.new_tier,
            )
