"""
Event staking with proportional rewards.

Provides:
  - StakeRewardEngine : event table and settlement policy
  - StakeEvent        : one event's stakes and payouts
  - AHATokenStake     : ledger contract exposing the engine
"""

from .contract import AHATokenStake, TokenAsset
from .engine import AssetLedger, StakeRewardEngine, compute_reward
from .events import EventStatus, Settlement, StakeEvent

__all__ = [
    "AHATokenStake",
    "TokenAsset",
    "AssetLedger",
    "StakeRewardEngine",
    "compute_reward",
    "EventStatus",
    "Settlement",
    "StakeEvent",
]
