"""
Pointsman signals: public event API.

Emitted signals (always after the surrounding DB transaction commits):
- points_appended: Emitted by LedgerService.append()
- reward_issued: Emitted by RewardService.issue()
- tier_changed: Emitted by RewardService.issue() when the tier moved
"""

from django.dispatch import Signal

# Ledger signals
points_appended = Signal()  # sender=PointsTransaction, transaction=PointsTransaction

# Reward signals
reward_issued = Signal()  # sender=RewardIssuance, issuance=RewardIssuance, disposition=RewardDisposition
tier_changed = Signal()  # sender=Client, client_code=str, previous_tier=str, new_tier=str
