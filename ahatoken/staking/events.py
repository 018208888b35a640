"""
Staking Events

A stake event is created by a reward deposit, opened for a sale window,
and settled participant by participant once the window has closed.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List

from ..logger import get_logger

logger = get_logger(__name__)


# ══════════════════════════════════════════════════════════════════════
#  ENUMS
# ══════════════════════════════════════════════════════════════════════

class EventStatus(IntEnum):
    """Lifecycle stage of a stake event."""
    CREATED = 0       # Reward deposited, sale not open yet
    SALE_OPEN = 1     # sale_start <= now < sale_end
    SALE_CLOSED = 2   # Window passed, nobody settled yet
    SETTLING = 3      # Some participants have unstaked
    FINALIZED = 4     # Every participant has unstaked


# ══════════════════════════════════════════════════════════════════════
#  RECORDS
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Settlement:
    """
    Payout made to one participant at unstake.

    Attributes:
        participant: Account that unstaked
        principal: Staking asset returned
        reward: Reward asset paid from the pool
        timestamp: Settlement time
    """
    participant: str
    principal: int
    reward: int
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "participant": self.participant,
            "principal": self.principal,
            "reward": self.reward,
            "timestamp": self.timestamp,
        }


@dataclass
class StakeEvent:
    """
    One staking event.

    Fields:
        code:          Unique event key
        reward_pool:   Reward asset deposited for the event
        depositor:     Account that funded the pool
        created_at:    Deposit time
        sale_start:    First second stakes are accepted (0 until scheduled)
        sale_end:      First second stakes are refused again
        stakes:        participant -> currently staked amount
        total_staked:  Sum of every stake made; payout denominator
        rewards_paid:  Reward asset paid out so far
        settlements:   Payouts in settlement order
    """
    code: str
    reward_pool: int
    depositor: str
    created_at: int
    sale_start: int = 0
    sale_end: int = 0
    stakes: Dict[str, int] = field(default_factory=dict)
    total_staked: int = 0
    rewards_paid: int = 0
    settlements: List[Settlement] = field(default_factory=list)
    _history: List[Dict[str, Any]] = field(default_factory=list, repr=False)

    def __post_init__(self):
        self._record("created", self.created_at)

    # ── Properties ────────────────────────────────────────────────────

    @property
    def is_scheduled(self) -> bool:
        return self.sale_end > 0

    @property
    def participants(self) -> int:
        """Accounts that ever staked in this event."""
        return len(self.stakes)

    @property
    def settled(self) -> int:
        return len(self.settlements)

    @property
    def is_finalized(self) -> bool:
        return self.participants > 0 and self.settled == self.participants

    @property
    def leftover(self) -> int:
        """Reward asset still held for this event."""
        return self.reward_pool - self.rewards_paid

    @property
    def history(self) -> List[Dict[str, Any]]:
        return list(self._history)

    def has_started(self, now: int) -> bool:
        return self.is_scheduled and now >= self.sale_start

    def is_open(self, now: int) -> bool:
        return self.is_scheduled and self.sale_start <= now < self.sale_end

    def status_at(self, now: int) -> EventStatus:
        if self.is_finalized:
            return EventStatus.FINALIZED
        if self.settlements:
            return EventStatus.SETTLING
        if not self.has_started(now):
            return EventStatus.CREATED
        if now < self.sale_end:
            return EventStatus.SALE_OPEN
        return EventStatus.SALE_CLOSED

    # ── Mutations ─────────────────────────────────────────────────────

    def schedule(self, start: int, end: int, now: int) -> None:
        self.sale_start = start
        self.sale_end = end
        self._record(f"sale window [{start}, {end})", now)

    def add_stake(self, participant: str, amount: int) -> int:
        """Accumulate ``amount`` for ``participant``; returns their stake."""
        staked = self.stakes.get(participant, 0) + amount
        self.stakes[participant] = staked
        self.total_staked += amount
        return staked

    def settle(self, participant: str, reward: int, now: int) -> Settlement:
        settlement = Settlement(
            participant=participant,
            principal=self.stakes[participant],
            reward=reward,
            timestamp=now,
        )
        self.stakes[participant] = 0
        self.rewards_paid += reward
        self.settlements.append(settlement)
        if self.settled == 1:
            self._record("settling", now)
        if self.is_finalized:
            self._record("finalized", now)
            logger.info(
                f"Stake event '{self.code}' finalized: paid {self.rewards_paid}/"
                f"{self.reward_pool}, leftover {self.leftover}"
            )
        return settlement

    def _record(self, reason: str, timestamp: int) -> None:
        self._history.append({"reason": reason, "timestamp": timestamp})

    def to_dict(self, now: int) -> Dict[str, Any]:
        return {
            "code": self.code,
            "status": self.status_at(now).name,
            "rewardPool": self.reward_pool,
            "saleStart": self.sale_start,
            "saleEnd": self.sale_end,
            "totalStaked": self.total_staked,
            "participants": self.participants,
            "settled": self.settled,
            "rewardsPaid": self.rewards_paid,
            "leftover": self.leftover,
        }
