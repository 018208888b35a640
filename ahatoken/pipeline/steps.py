"""
Pipeline steps.

A step is exactly one of:

  Invocation  call a contract method, optionally observing the result
              (``on_return``) or intercepting a rejection (``on_error``)
  Suspension  wait ``duration_ms`` on the ledger clock
  SideEffect  run a zero-argument callable in place
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Union

from ..exceptions import PipelineError
from ..ledger.service import CallMode, Target

# (result, previous_value) -> None
ReturnHandler = Callable[[Any, Any], Any]
# (reason) -> None
ErrorHandler = Callable[[str], Any]


@dataclass(frozen=True)
class Invocation:
    """
    Contract call step.

    Fields:
        method:     ABI method name
        args:       Positional call arguments
        account:    Calling account
        target:     Contract handle or address (pipeline default when None)
        mode:       READ or WRITE; inferred when None
        on_return:  Called with ``(result, previous_value)``
        on_error:   Called with the rejection reason; the step then succeeds
    """
    method: str
    args: Sequence[Any] = ()
    account: Optional[str] = None
    target: Optional[Target] = None
    mode: Optional[CallMode] = None
    on_return: Optional[ReturnHandler] = None
    on_error: Optional[ErrorHandler] = None

    def __post_init__(self):
        if not self.method:
            raise PipelineError("Invocation needs a method name")
        object.__setattr__(self, "args", tuple(self.args))
        if self.mode is not None:
            object.__setattr__(self, "mode", CallMode(self.mode))

    @property
    def call_mode(self) -> CallMode:
        """Explicit mode, else READ when the result is observed."""
        if self.mode is not None:
            return self.mode
        return CallMode.READ if self.on_return is not None else CallMode.WRITE


@dataclass(frozen=True)
class Suspension:
    """Wait step. Leaves the previous value untouched."""
    duration_ms: int

    def __post_init__(self):
        if self.duration_ms < 0:
            raise PipelineError(f"Suspension cannot be negative, got {self.duration_ms}ms")

    @property
    def seconds(self) -> float:
        return self.duration_ms / 1000


@dataclass(frozen=True)
class SideEffect:
    """Synchronous local action, e.g. cross-checking collected values."""
    run: Callable[[], Any]


Step = Union[Invocation, Suspension, SideEffect]


_INVOCATION_KEYS = {"method", "args", "account", "target", "mode", "onReturn", "on_return", "catch", "on_error"}


def step_from_dict(data: Mapping[str, Any]) -> Step:
    """
    Build a step from a loose mapping.

    Accepts ``{"wait": ms}``, ``{"then": fn}`` or an invocation with
    ``method``/``args``/``account`` and ``onReturn``/``catch`` handlers.

    Raises:
        PipelineError: the mapping matches no step kind, or more than one
    """
    kinds = [key for key in ("method", "wait", "then") if data.get(key) is not None]
    if len(kinds) != 1:
        raise PipelineError(
            f"Step must have exactly one of method/wait/then, got {kinds or 'none'}"
        )

    kind = kinds[0]
    if kind == "wait":
        return Suspension(duration_ms=int(data["wait"]))
    if kind == "then":
        return SideEffect(run=data["then"])

    unknown = set(data) - _INVOCATION_KEYS
    if unknown:
        raise PipelineError(f"Unexpected invocation keys: {sorted(unknown)}")
    return Invocation(
        method=data["method"],
        args=data.get("args") or (),
        account=data.get("account"),
        target=data.get("target"),
        mode=data.get("mode"),
        on_return=data.get("on_return", data.get("onReturn")),
        on_error=data.get("on_error", data.get("catch")),
    )


def coerce_step(step: Union[Step, Dict[str, Any]]) -> Step:
    if isinstance(step, (Invocation, Suspension, SideEffect)):
        return step
    if isinstance(step, Mapping):
        return step_from_dict(step)
    raise PipelineError(f"Not a pipeline step: {step!r}")
