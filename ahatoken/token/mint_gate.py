"""
Mint Gate

Enforces that cumulative minted supply never exceeds the allowance derived
from the checkpoint schedule at the moment of the mint request:

    allowed(t) = max_supply * unlocked_fraction(t) // 1000

A rejected mint is a pure validation failure. Retrying the same amount at
the same time always fails the same way.
"""

from dataclasses import dataclass
from typing import Any, Dict

from ..constants import FRACTION_DENOMINATOR
from ..exceptions import InvalidAmount, MintExceedsAllowance
from ..logger import get_logger
from ..schedule.checkpoints import CheckpointSchedule

logger = get_logger(__name__)


@dataclass
class MintState:
    """
    Supply bookkeeping owned by the gate.

    Attributes:
        max_supply: Hard cap of the token
        total_supply: Units minted so far (initial mint included)
        deploy_time: Timestamp of deployment
    """
    max_supply: int
    total_supply: int
    deploy_time: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "maxSupply": self.max_supply,
            "totalSupply": self.total_supply,
            "deployTime": self.deploy_time,
        }


class MintGate:
    """
    Schedule-gated minting.

    ``balances`` is the token's balance table; accepted mints credit it
    directly so supply and balances never diverge.
    """

    def __init__(
        self,
        max_supply: int,
        initial_fraction: int,
        deploy_time: int,
        balances: Dict[str, int],
    ):
        if max_supply <= 0:
            raise InvalidAmount(f"Max supply must be positive, got {max_supply}")
        self.schedule = CheckpointSchedule(initial_fraction)
        self.state = MintState(max_supply=max_supply, total_supply=0, deploy_time=deploy_time)
        self.state.total_supply = self.initial_supply
        self._balances = balances

    @property
    def initial_supply(self) -> int:
        return self.state.max_supply * self.schedule.initial_fraction // FRACTION_DENOMINATOR

    def total_supply(self) -> int:
        return self.state.total_supply

    def allowed_supply(self, at: int) -> int:
        """Cumulative supply mintable as of ``at``."""
        return self.state.max_supply * self.schedule.unlocked_fraction(at) // FRACTION_DENOMINATOR

    def mintable(self, at: int) -> int:
        """Units that can still be minted at ``at``."""
        return max(0, self.allowed_supply(at) - self.state.total_supply)

    def mint(self, to: str, amount: int, at: int) -> int:
        """
        Mint ``amount`` to ``to`` if the schedule allows it at ``at``.

        Returns:
            The new total supply

        Raises:
            InvalidAmount: ``amount`` is not a positive integer
            MintExceedsAllowance: total would pass the unlocked allowance
        """
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise InvalidAmount(f"Mint amount must be a positive integer, got {amount!r}")
        allowed = self.allowed_supply(at)
        new_total = self.state.total_supply + amount
        if new_total > allowed:
            raise MintExceedsAllowance(
                f"Minting {amount} would bring supply to {new_total}, "
                f"allowed {allowed} at {at}"
            )
        self.state.total_supply = new_total
        self._balances[to] = self._balances.get(to, 0) + amount
        logger.info(f"Minted {amount} → {to} (supply {new_total}/{allowed} allowed)")
        return new_total
