"""
Contract base class and call context.

A contract is a plain Python object whose externally callable methods are
marked with ``@contract_method``. All mutable data lives in ``self.storage``
so the ledger can snapshot and revert it around every call.
"""

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from ..exceptions import InvalidAmount, NotOwner

if TYPE_CHECKING:
    from .service import LedgerService


# Type for contract method handlers
ContractMethod = Callable[..., Any]


def contract_method(name: Optional[str] = None, *, view: bool = False) -> Callable[[ContractMethod], ContractMethod]:
    """
    Decorator to expose a method on the contract ABI.

    Usage:
        @contract_method("balanceOf", view=True)
        def balance_of(self, ctx, owner):
            return self.storage.balances.get(owner, 0)

    Args:
        name: ABI name (defaults to the Python name)
        view: Read-only method; the ledger skips snapshotting for it
    """
    def decorator(func: ContractMethod) -> ContractMethod:
        func.__contract_method__ = name or func.__name__
        func.__view__ = view
        return func
    return decorator


@dataclass(frozen=True)
class ContractEvent:
    """Log entry emitted by a contract during a call."""
    contract: str
    event: str
    args: Dict[str, Any]
    block_number: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.contract,
            "event": self.event,
            "returnValues": dict(self.args),
            "blockNumber": self.block_number,
        }


@dataclass
class CallContext:
    """
    Execution context of one ledger call.

    Fields:
        ledger:        The ledger executing the call (for cross-contract calls)
        sender:        msg.sender of the current frame
        origin:        Account that signed the outer call
        timestamp:     Block timestamp (whole seconds)
        block_number:  Block the call is included in
        events:        Events emitted so far; committed only on success
    """
    ledger: "LedgerService"
    sender: str
    origin: str
    timestamp: int
    block_number: int
    events: List[ContractEvent] = field(default_factory=list)

    def call_from(self, contract: "Contract") -> "CallContext":
        """Context for a nested call made by ``contract``; shares the event buffer."""
        return replace(self, sender=contract.address)


class Contract:
    """
    Base class for ledger contracts.

    Subclasses set ``name``, initialise ``self.storage`` in ``constructor``
    and expose methods with ``@contract_method``.
    """

    name: str = "Contract"

    def __init__(self, address: str, owner: str):
        self.address = address
        self.owner = owner
        self.storage: Any = None

    def constructor(self, ctx: CallContext, *args: Any) -> None:
        """Deployment-time initialisation. Runs once."""

    # ── ABI ───────────────────────────────────────────────────────────

    def get_methods(self) -> Dict[str, ContractMethod]:
        """
        Get all ABI methods of this contract.

        Returns:
            Dict mapping ABI names to bound methods
        """
        methods = {}
        for attr_name in dir(type(self)):
            if attr_name.startswith("_"):
                continue
            abi_name = getattr(getattr(type(self), attr_name), "__contract_method__", None)
            if abi_name:
                methods[abi_name] = getattr(self, attr_name)
        return methods

    # ── Helpers for subclasses ────────────────────────────────────────

    def emit(self, ctx: CallContext, event: str, **args: Any) -> None:
        ctx.events.append(
            ContractEvent(
                contract=self.address,
                event=event,
                args=args,
                block_number=ctx.block_number,
            )
        )

    def debug(self, ctx: CallContext, message: str) -> None:
        """Emit a ``Debug`` event picked up by ``print_logs``."""
        self.emit(ctx, "Debug", message=f"Debugger: {message}")

    def _require_owner(self, ctx: CallContext) -> None:
        if ctx.sender != self.owner:
            raise NotOwner(f"{ctx.sender} is not the owner of {self.name}")

    @staticmethod
    def _require_amount(amount: Any, what: str = "Amount") -> int:
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise InvalidAmount(f"{what} must be an integer, got {amount!r}")
        if amount <= 0:
            raise InvalidAmount(f"{what} must be positive, got {amount}")
        return amount

    def __repr__(self) -> str:
        return f"<{self.name} at {self.address}>"
