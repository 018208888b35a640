"""
AHA Token Stake Contract

Participants stake the AHA token during an event's sale window and, once it
closes, unstake to get their principal back plus a share of the event's
reward pool paid in the reward token.
"""

from dataclasses import dataclass, field
from typing import Any, Dict

from ..ledger.contract import CallContext, Contract, contract_method
from ..logger import get_logger
from ..token.erc20 import ERC20Token
from .engine import StakeRewardEngine

logger = get_logger(__name__)


class TokenAsset:
    """Moves an ERC-20 token in and out of the staking contract's custody."""

    def __init__(self, ctx: CallContext, custodian: Contract, token: ERC20Token):
        self._ctx = ctx.call_from(custodian)
        self._custodian = custodian
        self._token = token

    def pull(self, owner: str, amount: int) -> None:
        self._token.transfer_from(self._ctx, owner, self._custodian.address, amount)

    def push(self, recipient: str, amount: int) -> None:
        self._token.transfer(self._ctx, recipient, amount)


@dataclass
class StakeStorage:
    staking_token: str = ""
    reward_token: str = ""
    engine: StakeRewardEngine = field(default_factory=StakeRewardEngine)


class AHATokenStake(Contract):
    """
    Event-based staking with proportional rewards.

    Constructor args: ``(staking_token_address, reward_token_address)``.
    """

    name = "AHATokenStake"

    def constructor(self, ctx: CallContext, staking_token: str = "", reward_token: str = "") -> None:
        # Both must already be deployed
        ctx.ledger.contract_at(staking_token)
        ctx.ledger.contract_at(reward_token)
        self.storage = StakeStorage(staking_token=staking_token, reward_token=reward_token)
        logger.info(f"Stake contract bound to staking={staking_token} reward={reward_token}")

    @property
    def engine(self) -> StakeRewardEngine:
        return self.storage.engine

    def _asset(self, ctx: CallContext, address: str) -> TokenAsset:
        return TokenAsset(ctx, self, ctx.ledger.contract_at(address))

    # ── Administration ────────────────────────────────────────────────

    @contract_method("depositEventReward")
    def deposit_event_reward(self, ctx: CallContext, code: str, amount: int) -> int:
        """Fund event ``code`` with ``amount`` reward tokens. Owner only."""
        self._require_owner(ctx)
        self.engine.deposit_event_reward(
            code, amount, ctx.sender, ctx.timestamp,
            self._asset(ctx, self.storage.reward_token),
        )
        self.emit(ctx, "EventRewardDeposited", code=code, amount=amount)
        return amount

    @contract_method("setSaleStartEnd")
    def set_sale_start_end(self, ctx: CallContext, code: str, start: int, end: int) -> bool:
        self._require_owner(ctx)
        event = self.engine.set_sale_start_end(code, int(start), int(end), ctx.timestamp)
        self.emit(ctx, "SaleWindowSet", code=code, start=event.sale_start, end=event.sale_end)
        return True

    # ── Participants ──────────────────────────────────────────────────

    @contract_method()
    def stake(self, ctx: CallContext, code: str, amount: int) -> int:
        staked = self.engine.stake(
            code, ctx.sender, amount, ctx.timestamp,
            self._asset(ctx, self.storage.staking_token),
        )
        self.emit(ctx, "Staked", code=code, user=ctx.sender, amount=amount)
        return staked

    @contract_method()
    def unstake(self, ctx: CallContext, code: str) -> int:
        """Settle the caller; returns the reward paid."""
        settlement = self.engine.unstake(
            code, ctx.sender, ctx.timestamp,
            self._asset(ctx, self.storage.staking_token),
            self._asset(ctx, self.storage.reward_token),
        )
        self.emit(
            ctx, "Unstaked",
            code=code, user=ctx.sender,
            amount=settlement.principal, reward=settlement.reward,
        )
        self.debug(ctx, f"{ctx.sender} reward {settlement.reward} for stake {settlement.principal}")
        return settlement.reward

    # ── Views ─────────────────────────────────────────────────────────

    @contract_method("getUserStaked", view=True)
    def get_user_staked(self, ctx: CallContext, code: str, participant: str) -> int:
        return self.engine.get_user_staked(code, participant)

    @contract_method("getEvent", view=True)
    def get_event(self, ctx: CallContext, code: str) -> Dict[str, Any]:
        return self.engine.get_event(code).to_dict(ctx.timestamp)

    @contract_method("getEventStatus", view=True)
    def get_event_status(self, ctx: CallContext, code: str) -> str:
        return self.engine.status(code, ctx.timestamp).name

    @contract_method("getEventLeftover", view=True)
    def get_event_leftover(self, ctx: CallContext, code: str) -> int:
        return self.engine.leftover(code)
