"""
AHA Token Harness Exceptions

Custom exception classes for the token economics harness.

Every exception that reverts a contract call derives from ``ContractError``
and carries a stable ``reason`` string. The ledger service turns those into
``TransactionRejected`` and the pipeline executor hands the reason to
scenario interceptors.
"""

from typing import Any, Dict, Optional, Sequence

from .constants import (
    REASON_DUPLICATE_EVENT,
    REASON_INSUFFICIENT_ALLOWANCE,
    REASON_INSUFFICIENT_BALANCE,
    REASON_INVALID_AMOUNT,
    REASON_INVALID_WINDOW,
    REASON_MINT_EXCEEDS_ALLOWANCE,
    REASON_NOT_OWNER,
    REASON_NOTHING_STAKED,
    REASON_SALE_NOT_OPEN,
    REASON_SALE_STILL_OPEN,
    REASON_SCHEDULE,
    REASON_UNKNOWN_EVENT,
)


class AHAException(Exception):
    """Base exception for the harness."""
    pass


class ConfigurationError(AHAException):
    """Configuration error."""
    pass


# ══════════════════════════════════════════════════════════════════════
#  CONTRACT REVERTS
# ══════════════════════════════════════════════════════════════════════

class ContractError(AHAException):
    """
    A contract call was reverted.

    Subclasses set ``reason``; the message passed to the constructor is the
    human-readable detail and never replaces the reason.
    """
    reason: str = "revert"

    def __init__(self, detail: str = ""):
        super().__init__(detail or self.reason)
        self.detail = detail


class ScheduleError(ContractError):
    """Checkpoint schedule is malformed or already registered."""
    reason = REASON_SCHEDULE


class MintExceedsAllowance(ContractError):
    """Mint would push total supply past the unlocked allowance."""
    reason = REASON_MINT_EXCEEDS_ALLOWANCE


class NotOwner(ContractError):
    """Caller is not the contract owner."""
    reason = REASON_NOT_OWNER


class InvalidAmount(ContractError):
    """Amount is zero or negative."""
    reason = REASON_INVALID_AMOUNT


class InsufficientBalance(ContractError):
    """Sender balance is too low."""
    reason = REASON_INSUFFICIENT_BALANCE


class InsufficientAllowance(ContractError):
    """Spender allowance is too low."""
    reason = REASON_INSUFFICIENT_ALLOWANCE


class DuplicateEvent(ContractError):
    """A reward was already deposited for this event code."""
    reason = REASON_DUPLICATE_EVENT


class UnknownEvent(ContractError):
    """No reward was ever deposited for this event code."""
    reason = REASON_UNKNOWN_EVENT


class InvalidWindow(ContractError):
    """Sale window is empty, inverted, or already started."""
    reason = REASON_INVALID_WINDOW


class SaleNotOpen(ContractError):
    """Stake attempted outside [sale_start, sale_end)."""
    reason = REASON_SALE_NOT_OPEN


class SaleStillOpen(ContractError):
    """Unstake attempted before the sale ended."""
    reason = REASON_SALE_STILL_OPEN


class NothingStaked(ContractError):
    """Caller has no recorded stake in the event."""
    reason = REASON_NOTHING_STAKED


# ══════════════════════════════════════════════════════════════════════
#  LEDGER / PIPELINE FAULTS
# ══════════════════════════════════════════════════════════════════════

class LedgerError(AHAException):
    """Ledger service error."""
    pass


class LedgerClosedError(LedgerError):
    """The ledger service was torn down."""
    pass


class UnknownContractError(LedgerError):
    """No contract is deployed at the requested address."""
    pass


class TransactionRejected(LedgerError):
    """
    A call was rejected by the ledger.

    ``results`` mirrors a node rejection payload:
    ``{tx_hash: {"error": "revert", "reason": <reason>}}``.
    """

    def __init__(
        self,
        method: str,
        args: Sequence[Any],
        results: Dict[str, Dict[str, Any]],
        cause: Optional[ContractError] = None,
    ):
        self.method = method
        self.call_args = tuple(args)
        self.results = results
        self.cause = cause
        reason = next(iter(results.values()), {}).get("reason", "revert")
        super().__init__(f"VM Exception while processing transaction: revert {reason}")


class PipelineError(AHAException):
    """Base pipeline exception."""
    pass


class UnknownMethod(PipelineError):
    """Raised before dispatch when the target exposes no such method."""

    def __init__(self, method: str):
        super().__init__(f"Unknown method called {method}")
        self.method = method


class PipelineStepFailed(PipelineError):
    """An invocation failed and nothing intercepted it."""

    def __init__(self, index: int, method: str, args: Sequence[Any], message: str):
        super().__init__(message)
        self.index = index
        self.method = method
        self.call_args = tuple(args)
