"""
ERC-20 Token Contract

Integer-amount fungible token hosted on the in-memory ledger:
  - transfer, approve, transferFrom, balanceOf, allowance, totalSupply
  - Transfer / Approval events on every state change

Used directly as the reward asset (the Tether-like token) and as the base
of the scheduled-supply AHA token.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from ..constants import ERC20_MAX_DECIMALS
from ..exceptions import InsufficientAllowance, InsufficientBalance, InvalidAmount
from ..ledger.contract import CallContext, Contract, contract_method
from ..logger import get_logger

logger = get_logger(__name__)


@dataclass
class ERC20Storage:
    """Mutable state of an ERC-20 token."""
    name: str = ""
    symbol: str = ""
    decimals: int = ERC20_MAX_DECIMALS
    total_supply: int = 0
    balances: Dict[str, int] = field(default_factory=dict)
    allowances: Dict[Tuple[str, str], int] = field(default_factory=dict)  # (owner, spender)


class ERC20Token(Contract):
    """
    ERC-20 fungible token.

    Constructor args: ``(initial_supply, name, symbol, decimals)``; the whole
    initial supply is credited to the deployer.
    """

    name = "ERC20Token"

    def constructor(
        self,
        ctx: CallContext,
        initial_supply: int = 0,
        name: str = "",
        symbol: str = "",
        decimals: int = ERC20_MAX_DECIMALS,
    ) -> None:
        self._check_metadata(name, symbol, decimals)
        if initial_supply < 0:
            raise InvalidAmount("Initial supply cannot be negative")

        self.storage = ERC20Storage(name=name, symbol=symbol, decimals=decimals)
        if initial_supply > 0:
            self._credit(ctx, ctx.sender, initial_supply)
        logger.info(f"ERC20 deployed: {symbol} ({name}), supply={initial_supply}")

    # ── Read-only views ───────────────────────────────────────────────

    @contract_method("name", view=True)
    def token_name(self, ctx: CallContext) -> str:
        return self.storage.name

    @contract_method(view=True)
    def symbol(self, ctx: CallContext) -> str:
        return self.storage.symbol

    @contract_method(view=True)
    def decimals(self, ctx: CallContext) -> int:
        return self.storage.decimals

    @contract_method("totalSupply", view=True)
    def total_supply(self, ctx: CallContext) -> int:
        return self.storage.total_supply

    @contract_method("balanceOf", view=True)
    def balance_of(self, ctx: CallContext, owner: str) -> int:
        return self.storage.balances.get(owner, 0)

    @contract_method(view=True)
    def allowance(self, ctx: CallContext, owner: str, spender: str) -> int:
        return self.storage.allowances.get((owner, spender), 0)

    # ── Core ERC-20 operations ────────────────────────────────────────

    @contract_method()
    def transfer(self, ctx: CallContext, recipient: str, amount: int) -> bool:
        self._require_amount(amount, "Transfer amount")
        self._move(ctx, ctx.sender, recipient, amount)
        return True

    @contract_method()
    def approve(self, ctx: CallContext, spender: str, amount: int) -> bool:
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
            raise InvalidAmount(f"Allowance must be a non-negative integer, got {amount!r}")
        self.storage.allowances[(ctx.sender, spender)] = amount
        self.emit(ctx, "Approval", owner=ctx.sender, spender=spender, value=amount)
        logger.debug(f"Approve: {ctx.sender} → {spender} allowance={amount} {self.storage.symbol}")
        return True

    @contract_method("transferFrom")
    def transfer_from(self, ctx: CallContext, sender: str, recipient: str, amount: int) -> bool:
        """Move ``amount`` out of ``sender`` using the caller's allowance."""
        self._require_amount(amount, "Transfer amount")
        allowed = self.storage.allowances.get((sender, ctx.sender), 0)
        if allowed < amount:
            raise InsufficientAllowance(
                f"Allowance {allowed} of {ctx.sender} over {sender} < {amount}"
            )
        self._move(ctx, sender, recipient, amount)
        self.storage.allowances[(sender, ctx.sender)] = allowed - amount
        return True

    # ── Internal ──────────────────────────────────────────────────────

    @staticmethod
    def _check_metadata(name: str, symbol: str, decimals: int) -> None:
        if not name:
            raise InvalidAmount("Token name cannot be empty")
        if not symbol:
            raise InvalidAmount("Token symbol cannot be empty")
        if decimals < 0 or decimals > ERC20_MAX_DECIMALS:
            raise InvalidAmount(f"Decimals must be 0-{ERC20_MAX_DECIMALS}, got {decimals}")

    def _move(self, ctx: CallContext, sender: str, recipient: str, amount: int) -> None:
        balances = self.storage.balances
        bal = balances.get(sender, 0)
        if bal < amount:
            raise InsufficientBalance(f"{sender} balance {bal} < transfer amount {amount}")
        balances[sender] = bal - amount
        balances[recipient] = balances.get(recipient, 0) + amount
        self.emit(ctx, "Transfer", **{"from": sender, "to": recipient, "value": amount})
        logger.debug(f"Transfer: {sender} → {recipient} {amount} {self.storage.symbol}")

    def _credit(self, ctx: CallContext, recipient: str, amount: int) -> None:
        """Create ``amount`` new units for ``recipient``."""
        self.storage.total_supply += amount
        self.storage.balances[recipient] = self.storage.balances.get(recipient, 0) + amount
        self.emit(ctx, "Transfer", **{"from": None, "to": recipient, "value": amount})

    def __repr__(self) -> str:
        symbol = self.storage.symbol if self.storage else "?"
        return f"<{self.name} {symbol} at {self.address}>"
