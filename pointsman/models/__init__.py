"""Pointsman models."""

from pointsman.models.client import Client
from pointsman.models.transaction import PointsTransaction, TransactionKind
from pointsman.models.reward import RewardIssuance, RewardKind

__all__ = [
    # Enrollment
    "Client",
    # Ledger
    "PointsTransaction",
    "TransactionKind",
    # Reward audit trail
    "RewardIssuance",
    "RewardKind",
]
