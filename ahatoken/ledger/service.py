"""
In-Memory Stateful Ledger Service

The opaque collaborator the pipeline executor drives. It hosts contracts,
dispatches calls by ABI name, and guarantees that every call is atomic and
totally ordered:

- calls are serialized with an ``asyncio.Lock``
- contract storage is snapshotted before each call and restored when the
  call reverts (or always, for read-mode calls)
- events are committed to the log only when a write succeeds
"""

import asyncio
import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Type, Union

from ..crypto.address import generate_accounts, generate_contract_address, transaction_hash
from ..exceptions import (
    ContractError,
    LedgerClosedError,
    TransactionRejected,
    UnknownContractError,
    UnknownMethod,
)
from ..logger import get_logger
from .clock import Clock, SystemClock
from .contract import CallContext, Contract, ContractEvent

logger = get_logger(__name__)


class CallMode(str, Enum):
    """How an invocation touches ledger state."""
    READ = "read"     # Simulated; state always restored
    WRITE = "write"   # Committed; returns a Receipt


@dataclass(frozen=True)
class Receipt:
    """Completion record of a committed write."""
    tx_hash: str
    contract: str
    method: str
    args: tuple
    account: str
    block_number: int
    timestamp: int
    return_value: Any = None
    events: tuple = ()

    @property
    def status(self) -> bool:
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "transactionHash": self.tx_hash,
            "to": self.contract,
            "from": self.account,
            "method": self.method,
            "blockNumber": self.block_number,
            "timestamp": self.timestamp,
            "status": self.status,
            "events": [e.to_dict() for e in self.events],
        }


@dataclass
class ContractHandle:
    """
    Client-side reference to a deployed contract.

    Mirrors what a web3 contract instance offers a scenario: the address and
    the set of callable method names.
    """
    ledger: "LedgerService"
    address: str
    name: str
    methods: frozenset = field(default_factory=frozenset)

    def has_method(self, method: str) -> bool:
        return method in self.methods

    def __repr__(self) -> str:
        return f"<ContractHandle {self.name} at {self.address}>"


Target = Union[ContractHandle, str]


class LedgerService:
    """
    Stateful ledger hosting contracts for one scenario.

    Instances share nothing; run independent scenarios against independent
    ledgers.
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        account_seed: str = "aha-ledger",
        account_count: int = 10,
    ):
        self.clock = clock or SystemClock()
        self._accounts = generate_accounts(account_seed, account_count)
        self._lock = asyncio.Lock()
        self._contracts: Dict[str, Contract] = {}
        self._nonces: Dict[str, int] = {}
        self._events: List[ContractEvent] = []
        self._block_number = 0
        self._closed = False
        logger.info(f"Ledger started with {account_count} accounts")

    # =========================================================================
    # QUERIES
    # =========================================================================

    @property
    def accounts(self) -> List[str]:
        return list(self._accounts)

    @property
    def block_number(self) -> int:
        return self._block_number

    @property
    def is_closed(self) -> bool:
        return self._closed

    def now(self) -> int:
        return self.clock.now()

    def nonce_of(self, account: str) -> int:
        return self._nonces.get(account, 0)

    def contract_at(self, address: str) -> Contract:
        contract = self._contracts.get(address)
        if contract is None:
            raise UnknownContractError(f"No contract deployed at {address}")
        return contract

    def has_method(self, target: Target, method: str) -> bool:
        """Check the ABI without touching contract state."""
        address = self._address_of(target)
        contract = self._contracts.get(address)
        return contract is not None and method in contract.get_methods()

    def get_past_events(self, target: Target, event: Optional[str] = None) -> List[ContractEvent]:
        """Committed events emitted by ``target``, optionally filtered by name."""
        address = self._address_of(target)
        return [
            e for e in self._events
            if e.contract == address and (event is None or e.event == event)
        ]

    # =========================================================================
    # DEPLOYMENT
    # =========================================================================

    async def deploy(
        self,
        contract_cls: Type[Contract],
        args: Sequence[Any],
        account: str,
    ) -> ContractHandle:
        """
        Deploy ``contract_cls`` from ``account`` and run its constructor.

        Raises:
            TransactionRejected: constructor reverted
        """
        async with self._lock:
            self._require_open()
            nonce = self.nonce_of(account)
            address = generate_contract_address(account, nonce)
            contract = contract_cls(address=address, owner=account)
            ctx = self._context(account)
            try:
                contract.constructor(ctx, *args)
            except ContractError as e:
                tx_hash = transaction_hash(account, nonce, address, "constructor", args)
                logger.warning(f"Deployment of {contract_cls.name} reverted: {e.reason}")
                raise TransactionRejected(
                    "constructor", args, {tx_hash: {"error": "revert", "reason": e.reason}}, e
                ) from e

            self._contracts[address] = contract
            self._nonces[account] = nonce + 1
            self._commit(ctx)
            logger.info(f"Deployed {contract.name} at {address} (block {self._block_number})")

            return ContractHandle(
                ledger=self,
                address=address,
                name=contract.name,
                methods=frozenset(contract.get_methods()),
            )

    # =========================================================================
    # CALLS
    # =========================================================================

    async def invoke(
        self,
        account: str,
        target: Target,
        method: str,
        args: Sequence[Any] = (),
        mode: CallMode = CallMode.WRITE,
    ) -> Any:
        """
        Call ``method`` on ``target`` as ``account``.

        Returns:
            The method's return value for READ, a ``Receipt`` for WRITE

        Raises:
            UnknownMethod: ABI has no such method
            TransactionRejected: the contract reverted; state is unchanged
        """
        mode = CallMode(mode)
        args = tuple(args)
        async with self._lock:
            self._require_open()
            contract = self.contract_at(self._address_of(target))
            fn = contract.get_methods().get(method)
            if fn is None:
                raise UnknownMethod(method)

            nonce = self.nonce_of(account)
            tx_hash = transaction_hash(account, nonce, contract.address, method, args)
            ctx = self._context(account)
            is_view = getattr(fn, "__view__", False)
            snapshot = None if is_view else self._snapshot()

            try:
                result = fn(ctx, *args)
            except ContractError as e:
                if snapshot is not None:
                    self._restore(snapshot)
                logger.warning(
                    f"[{contract.name}] {method} from {account} reverted: revert {e.reason}"
                )
                raise TransactionRejected(
                    method, args, {tx_hash: {"error": "revert", "reason": e.reason}}, e
                ) from e
            except Exception:
                if snapshot is not None:
                    self._restore(snapshot)
                raise

            if mode is CallMode.READ or is_view:
                if snapshot is not None:
                    self._restore(snapshot)
                return result

            self._nonces[account] = nonce + 1
            self._commit(ctx)
            receipt = Receipt(
                tx_hash=tx_hash,
                contract=contract.address,
                method=method,
                args=args,
                account=account,
                block_number=self._block_number,
                timestamp=ctx.timestamp,
                return_value=result,
                events=tuple(ctx.events),
            )
            logger.debug(f"[{contract.name}] {method} mined in block {self._block_number} ({tx_hash})")
            return receipt

    def close(self) -> None:
        """Tear the ledger down; further calls raise ``LedgerClosedError``."""
        self._closed = True
        self._contracts.clear()
        logger.info("Ledger closed")

    # =========================================================================
    # HELPER METHODS
    # =========================================================================

    @staticmethod
    def _address_of(target: Target) -> str:
        return target.address if isinstance(target, ContractHandle) else target

    def _require_open(self) -> None:
        if self._closed:
            raise LedgerClosedError("Ledger service is closed")

    def _context(self, account: str) -> CallContext:
        return CallContext(
            ledger=self,
            sender=account,
            origin=account,
            timestamp=self.clock.now(),
            block_number=self._block_number + 1,
        )

    def _snapshot(self) -> Dict[str, Any]:
        return {
            address: copy.deepcopy(contract.storage)
            for address, contract in self._contracts.items()
        }

    def _restore(self, snapshot: Dict[str, Any]) -> None:
        for address, storage in snapshot.items():
            self._contracts[address].storage = storage

    def _commit(self, ctx: CallContext) -> None:
        self._block_number = ctx.block_number
        self._events.extend(ctx.events)
