"""
In-memory ledger collaborator.

Provides:
  - LedgerService   : hosts contracts, atomic serialized ``invoke``
  - Contract        : base class, ``@contract_method`` ABI marker
  - Clock           : SystemClock / ManualClock time sources
"""

from .clock import Clock, ManualClock, SystemClock
from .contract import CallContext, Contract, ContractEvent, contract_method
from .service import CallMode, ContractHandle, LedgerService, Receipt

__all__ = [
    "Clock",
    "ManualClock",
    "SystemClock",
    "CallContext",
    "Contract",
    "ContractEvent",
    "contract_method",
    "CallMode",
    "ContractHandle",
    "LedgerService",
    "Receipt",
]
