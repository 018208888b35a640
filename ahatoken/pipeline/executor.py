"""
Step Pipeline Executor

Runs an ordered list of steps against a ledger service. Each step settles
before the next one starts; the result of every invocation is threaded to
the next ``on_return`` handler as the previous value.

Failure handling:
  - a rejected invocation with ``on_error`` hands the rejection reason to
    the handler and the pipeline continues
  - any other failure of an invocation aborts the run with
    ``PipelineStepFailed`` naming the method and its arguments
  - an unknown method name aborts with ``UnknownMethod`` before dispatch
"""

from typing import Any, Dict, Iterable, Optional, Union

from ..exceptions import PipelineError, PipelineStepFailed, UnknownMethod
from ..ledger.clock import Clock
from ..ledger.service import ContractHandle, LedgerService, Target
from ..logger import get_logger
from ..utils.debug import format_args
from .steps import Invocation, SideEffect, Step, Suspension, coerce_step

logger = get_logger(__name__)

StepLike = Union[Step, Dict[str, Any]]


def extract_reason(error: BaseException) -> Optional[str]:
    """First structured revert reason carried by ``error``, if any."""
    results = getattr(error, "results", None)
    if not isinstance(results, dict):
        return None
    for result in results.values():
        if isinstance(result, dict) and result.get("reason"):
            return result["reason"]
    return None


class StepPipeline:
    """
    Sequential executor bound to one ledger.

    Args:
        ledger: Service every invocation is sent to
        default_target: Contract used by invocations that name none
        clock: Clock suspensions wait on (the ledger's by default)
    """

    def __init__(
        self,
        ledger: LedgerService,
        default_target: Optional[Target] = None,
        clock: Optional[Clock] = None,
    ):
        self.ledger = ledger
        self.default_target = default_target
        self.clock = clock or ledger.clock

    async def run(self, steps: Union[StepLike, Iterable[StepLike]]) -> Any:
        """
        Execute ``steps`` in order.

        Returns:
            The last previous value (result of the last invocation)

        Raises:
            UnknownMethod: a step names a method the target does not expose
            PipelineStepFailed: a rejection nobody intercepted
        """
        if isinstance(steps, (Invocation, Suspension, SideEffect, dict)):
            steps = [steps]
        plan = [coerce_step(step) for step in steps]

        previous: Any = None
        for index, step in enumerate(plan):
            if isinstance(step, Suspension):
                logger.debug(f"Step {index}: waiting {step.duration_ms}ms")
                await self.clock.sleep(step.seconds)
            elif isinstance(step, SideEffect):
                logger.debug(f"Step {index}: side effect")
                step.run()
            else:
                previous = await self._invoke(index, step, previous)
        return previous

    async def _invoke(self, index: int, step: Invocation, previous: Any) -> Any:
        target = step.target if step.target is not None else self.default_target
        if target is None:
            raise PipelineError(f"Step {index}: no target for method {step.method}")
        if not self.ledger.has_method(target, step.method):
            raise UnknownMethod(step.method)

        account = step.account or self.ledger.accounts[0]
        mode = step.call_mode
        logger.debug(
            f"Step {index}: {step.method}{format_args(step.args)} from {account} ({mode.value})"
        )

        try:
            result = await self.ledger.invoke(account, target, step.method, step.args, mode)
        except Exception as e:
            reason = extract_reason(e)
            if step.on_error is not None and reason is not None:
                logger.debug(f"Step {index}: {step.method} rejected as expected: {reason}")
                step.on_error(reason)
                return None
            raise PipelineStepFailed(
                index,
                step.method,
                step.args,
                f"Calling method {step.method}{format_args(step.args)} {e}",
            ) from e

        if step.on_return is not None:
            step.on_return(result, previous)
        return result


async def use_methods_on(
    contract: ContractHandle,
    steps: Union[StepLike, Iterable[StepLike]],
    clock: Optional[Clock] = None,
) -> Any:
    """Run ``steps`` with ``contract`` as the default target."""
    return await StepPipeline(contract.ledger, default_target=contract, clock=clock).run(steps)
