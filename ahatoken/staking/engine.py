"""
Stake Reward Engine

Distributes a fixed reward pool over the participants of an event in
proportion to their stake:

    reward = reward_pool * user_stake // total_staked

Each payout truncates, so at most one unit per participant stays in the
pool. Stake order is never inverted because the formula is monotonic in
``user_stake`` for a fixed pool and denominator.

The engine moves no funds itself. Callers pass asset adapters that pull
tokens into the staking contract and push them back out.
"""

from typing import Dict, Protocol

from ..exceptions import (
    DuplicateEvent,
    InvalidAmount,
    InvalidWindow,
    NothingStaked,
    SaleNotOpen,
    SaleStillOpen,
    UnknownEvent,
)
from ..logger import get_logger
from .events import EventStatus, Settlement, StakeEvent

logger = get_logger(__name__)


class AssetLedger(Protocol):
    """Token balance moves on behalf of the staking contract."""

    def pull(self, owner: str, amount: int) -> None:
        """Take ``amount`` from ``owner`` into custody."""

    def push(self, recipient: str, amount: int) -> None:
        """Pay ``amount`` out of custody to ``recipient``."""


def compute_reward(reward_pool: int, user_stake: int, total_staked: int) -> int:
    """Proportional share of the pool, truncated toward zero."""
    if total_staked <= 0:
        return 0
    return reward_pool * user_stake // total_staked


def _is_positive_int(amount) -> bool:
    return isinstance(amount, int) and not isinstance(amount, bool) and amount > 0


class StakeRewardEngine:
    """
    Event table and settlement policy.

    Holds only plain data so the owning contract's storage can be copied and
    restored around every call.
    """

    def __init__(self):
        self.events: Dict[str, StakeEvent] = {}

    # =========================================================================
    # QUERIES
    # =========================================================================

    def get_event(self, code: str) -> StakeEvent:
        event = self.events.get(code)
        if event is None:
            raise UnknownEvent(f"No reward deposited for event '{code}'")
        return event

    def get_user_staked(self, code: str, participant: str) -> int:
        event = self.events.get(code)
        if event is None:
            return 0
        return event.stakes.get(participant, 0)

    def status(self, code: str, now: int) -> EventStatus:
        return self.get_event(code).status_at(now)

    def leftover(self, code: str) -> int:
        return self.get_event(code).leftover

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    def deposit_event_reward(
        self,
        code: str,
        amount: int,
        depositor: str,
        now: int,
        reward_asset: AssetLedger,
    ) -> StakeEvent:
        """
        Fund a new event.

        Raises:
            DuplicateEvent: ``code`` already has a deposit
        """
        if code in self.events:
            raise DuplicateEvent(f"Event '{code}' already has a reward of {self.events[code].reward_pool}")
        if not _is_positive_int(amount):
            raise InvalidAmount(f"Reward must be a positive integer, got {amount!r}")

        reward_asset.pull(depositor, amount)
        event = StakeEvent(code=code, reward_pool=amount, depositor=depositor, created_at=now)
        self.events[code] = event
        logger.info(f"Stake event '{code}' created with reward pool {amount}")
        return event

    def set_sale_start_end(self, code: str, start: int, end: int, now: int) -> StakeEvent:
        """
        Schedule the sale window ``[start, end)``. ``start == 0`` opens it now.

        The window can be moved until the sale has started.

        Raises:
            InvalidWindow: sale already started, or ``end`` not after the start
        """
        event = self.get_event(code)
        if event.has_started(now):
            raise InvalidWindow(f"Sale of '{code}' already started at {event.sale_start}")

        effective_start = now if start == 0 else start
        if end <= effective_start:
            raise InvalidWindow(f"Sale end {end} is not after start {effective_start}")

        event.schedule(effective_start, end, now)
        logger.info(f"Stake event '{code}' sale window set to [{effective_start}, {end})")
        return event

    def stake(
        self,
        code: str,
        participant: str,
        amount: int,
        now: int,
        staking_asset: AssetLedger,
    ) -> int:
        """
        Stake ``amount`` while the sale is open. Repeated stakes accumulate.

        Returns:
            The participant's stake after this call

        Raises:
            SaleNotOpen: ``now`` is outside ``[sale_start, sale_end)``
        """
        event = self.get_event(code)
        if not event.is_open(now):
            raise SaleNotOpen(
                f"Event '{code}' accepts stakes in [{event.sale_start}, {event.sale_end}), now {now}"
            )
        if not _is_positive_int(amount):
            raise InvalidAmount(f"Stake must be a positive integer, got {amount!r}")

        staking_asset.pull(participant, amount)
        staked = event.add_stake(participant, amount)
        logger.debug(f"Stake: {participant} +{amount} in '{code}' (now {staked}, total {event.total_staked})")
        return staked

    def unstake(
        self,
        code: str,
        participant: str,
        now: int,
        staking_asset: AssetLedger,
        reward_asset: AssetLedger,
    ) -> Settlement:
        """
        Return the participant's principal and pay their share of the pool.

        Raises:
            SaleStillOpen: the sale has not ended
            NothingStaked: no stake recorded (includes a second unstake)
        """
        event = self.get_event(code)
        if not event.is_scheduled or now < event.sale_end:
            raise SaleStillOpen(f"Event '{code}' sale ends at {event.sale_end}, now {now}")

        principal = event.stakes.get(participant, 0)
        if principal <= 0:
            raise NothingStaked(f"{participant} has nothing staked in '{code}'")

        reward = compute_reward(event.reward_pool, principal, event.total_staked)
        staking_asset.push(participant, principal)
        if reward > 0:
            reward_asset.push(participant, reward)

        settlement = event.settle(participant, reward, now)
        logger.info(
            f"Unstake: {participant} from '{code}' principal={principal} reward={reward} "
            f"({event.settled}/{event.participants} settled)"
        )
        return settlement

    def __repr__(self) -> str:
        return f"<StakeRewardEngine events={len(self.events)}>"
