"""
AHA Token Contract

ERC-20 token whose supply unlocks over time. A fraction of max supply is
minted to the owner at deployment; the rest becomes mintable as checkpoints
registered through ``addCheckpoints`` pass.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from ..constants import ERC20_MAX_DECIMALS
from ..ledger.contract import CallContext, contract_method
from ..logger import get_logger
from .erc20 import ERC20Storage, ERC20Token
from .mint_gate import MintGate

logger = get_logger(__name__)


@dataclass
class AHATokenStorage(ERC20Storage):
    gate: Optional[MintGate] = None


class AHAToken(ERC20Token):
    """
    Scheduled-supply token.

    Constructor args: ``(name, symbol, max_supply, mint_on_deploy_fraction)``.
    """

    name = "AHAToken"

    def constructor(
        self,
        ctx: CallContext,
        name: str = "",
        symbol: str = "",
        max_supply: int = 0,
        mint_on_deploy_fraction: int = 0,
    ) -> None:
        self._check_metadata(name, symbol, ERC20_MAX_DECIMALS)
        self._require_amount(max_supply, "Max supply")

        storage = AHATokenStorage(name=name, symbol=symbol, decimals=ERC20_MAX_DECIMALS)
        storage.gate = MintGate(
            max_supply=max_supply,
            initial_fraction=mint_on_deploy_fraction,
            deploy_time=ctx.timestamp,
            balances=storage.balances,
        )
        initial = storage.gate.initial_supply
        storage.total_supply = initial
        if initial > 0:
            storage.balances[ctx.sender] = initial
            self.emit(ctx, "Transfer", **{"from": None, "to": ctx.sender, "value": initial})
        self.storage = storage
        logger.info(
            f"{symbol} deployed: max supply {max_supply}, "
            f"{initial} minted on deploy ({mint_on_deploy_fraction}/1000)"
        )

    @property
    def gate(self) -> MintGate:
        return self.storage.gate

    # ── Schedule ──────────────────────────────────────────────────────

    @contract_method("addCheckpoints")
    def add_checkpoints(self, ctx: CallContext, checkpoints: Sequence[Sequence[Any]]) -> int:
        """Register ``(activation_time, note, fraction)`` rows. Owner only, once."""
        self._require_owner(ctx)
        self.gate.schedule.register(checkpoints)
        self.emit(ctx, "CheckpointsAdded", count=len(checkpoints))
        return len(checkpoints)

    @contract_method("getCheckpoints", view=True)
    def get_checkpoints(self, ctx: CallContext) -> List[Dict[str, Any]]:
        return [cp.to_dict() for cp in self.gate.schedule.checkpoints]

    @contract_method("unlockedFraction", view=True)
    def unlocked_fraction(self, ctx: CallContext) -> int:
        return self.gate.schedule.unlocked_fraction(ctx.timestamp)

    # ── Supply ────────────────────────────────────────────────────────

    @contract_method("maxSupply", view=True)
    def max_supply(self, ctx: CallContext) -> int:
        return self.gate.state.max_supply

    @contract_method("totalSupply", view=True)
    def total_supply(self, ctx: CallContext) -> int:
        return self.gate.total_supply()

    @contract_method("allowedSupply", view=True)
    def allowed_supply(self, ctx: CallContext) -> int:
        return self.gate.allowed_supply(ctx.timestamp)

    @contract_method(view=True)
    def mintable(self, ctx: CallContext) -> int:
        return self.gate.mintable(ctx.timestamp)

    @contract_method()
    def mint(self, ctx: CallContext, to: str, amount: int) -> int:
        """Mint within the unlocked allowance. Owner only."""
        self._require_owner(ctx)
        new_total = self.gate.mint(to, amount, ctx.timestamp)
        self.storage.total_supply = new_total
        self.emit(ctx, "Transfer", **{"from": None, "to": to, "value": amount})
        return new_total
