"""
Step Pipeline Test Suite

Coverage:
  - step kinds and loose-mapping construction
  - mode inference
  - value threading through on_return
  - suspension / side effect semantics
  - interception with on_error, fatal wrapping, UnknownMethod
  - concurrent pipelines
"""

import asyncio
import os
import sys

import pytest
import pytest_asyncio

# ── Path setup ────────────────────────────────────────────────────────
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from ahatoken.config import HarnessConfig
from ahatoken.constants import REASON_INSUFFICIENT_BALANCE, REASON_MINT_EXCEEDS_ALLOWANCE
from ahatoken.deploy import fresh_deployment
from ahatoken.exceptions import PipelineError, PipelineStepFailed, TransactionRejected, UnknownMethod
from ahatoken.ledger import CallMode, ManualClock, Receipt
from ahatoken.pipeline import (
    Invocation,
    SideEffect,
    StepPipeline,
    Suspension,
    extract_reason,
    step_from_dict,
    use_methods_on,
)


# ══════════════════════════════════════════════════════════════════════
#  HELPERS
# ══════════════════════════════════════════════════════════════════════

T0 = 1_700_000_000


@pytest_asyncio.fixture
async def deployment():
    async with fresh_deployment(HarnessConfig(), ManualClock(T0)) as d:
        yield d


# ══════════════════════════════════════════════════════════════════════
#  STEPS
# ══════════════════════════════════════════════════════════════════════


class TestSteps:

    def test_invocation_defaults(self):
        step = Invocation("transfer", [1, 2])
        assert step.args == (1, 2)
        assert step.call_mode == CallMode.WRITE

    def test_mode_inferred_from_on_return(self):
        step = Invocation("totalSupply", on_return=lambda result, previous: None)
        assert step.call_mode == CallMode.READ

    def test_explicit_mode_wins(self):
        step = Invocation("totalSupply", mode="write", on_return=lambda r, p: None)
        assert step.call_mode == CallMode.WRITE

    def test_invocation_needs_method(self):
        with pytest.raises(PipelineError):
            Invocation("")

    def test_suspension(self):
        assert Suspension(1500).seconds == 1.5
        with pytest.raises(PipelineError):
            Suspension(-1)

    def test_from_dict_wait(self):
        assert step_from_dict({"wait": 3000}) == Suspension(3000)

    def test_from_dict_then(self):
        fn = lambda: None
        assert step_from_dict({"then": fn}) == SideEffect(fn)

    def test_from_dict_invocation(self):
        on_return = lambda r, p: None
        catch = lambda reason: None
        step = step_from_dict({
            "method": "mint",
            "args": ["0xabc", 5],
            "account": "0xdef",
            "onReturn": on_return,
            "catch": catch,
        })
        assert isinstance(step, Invocation)
        assert step.args == ("0xabc", 5)
        assert step.account == "0xdef"
        assert step.on_return is on_return
        assert step.on_error is catch

    def test_from_dict_ambiguous(self):
        with pytest.raises(PipelineError, match="exactly one"):
            step_from_dict({"method": "mint", "wait": 10})

    def test_from_dict_empty(self):
        with pytest.raises(PipelineError):
            step_from_dict({})

    def test_from_dict_unknown_key(self):
        with pytest.raises(PipelineError, match="Unexpected"):
            step_from_dict({"method": "mint", "gas": 1})


class TestExtractReason:

    def test_structured(self):
        err = TransactionRejected("mint", [], {"0x1": {"error": "revert", "reason": "nope"}})
        assert extract_reason(err) == "nope"

    def test_first_reason_wins(self):
        err = TransactionRejected("m", [], {"0x1": {"error": "revert"}, "0x2": {"reason": "second"}})
        assert extract_reason(err) == "second"

    def test_plain_error(self):
        assert extract_reason(RuntimeError("x")) is None


# ══════════════════════════════════════════════════════════════════════
#  EXECUTOR
# ══════════════════════════════════════════════════════════════════════


class TestExecutor:

    @pytest.mark.asyncio
    async def test_empty_pipeline(self, deployment):
        assert await use_methods_on(deployment.token, []) is None

    @pytest.mark.asyncio
    async def test_value_threading(self, deployment):
        d = deployment
        seen = []
        result = await use_methods_on(d.token, [
            Invocation("totalSupply", account=d.owner, on_return=lambda r, p: seen.append((r, p))),
            Invocation("maxSupply", account=d.owner, on_return=lambda r, p: seen.append((r, p))),
        ])
        assert seen == [(210_000_000, None), (700_000_000, 210_000_000)]
        assert result == 700_000_000

    @pytest.mark.asyncio
    async def test_write_step_yields_receipt(self, deployment):
        d = deployment
        bob = d.accounts[1]
        seen = []
        await use_methods_on(d.token, [
            Invocation("transfer", [bob, 10], account=d.owner),
            Invocation(
                "balanceOf", [bob], account=d.owner,
                on_return=lambda r, p: seen.append((r, p)),
            ),
        ])
        balance, previous = seen[0]
        assert balance == 10
        assert isinstance(previous, Receipt)
        assert previous.method == "transfer"

    @pytest.mark.asyncio
    async def test_single_step_and_dict_steps(self, deployment):
        d = deployment
        assert await use_methods_on(d.token, {"method": "symbol", "account": d.owner}) == "AHA"
        seen = []
        await use_methods_on(d.token, [
            {"method": "decimals", "account": d.owner, "onReturn": lambda r, p: seen.append(r)},
            {"then": lambda: seen.append("then")},
        ])
        assert seen == [18, "then"]

    @pytest.mark.asyncio
    async def test_suspension_keeps_previous_and_advances_clock(self, deployment):
        d = deployment
        seen = []
        await use_methods_on(d.token, [
            Invocation("totalSupply", account=d.owner, on_return=lambda r, p: None),
            Suspension(3000),
            SideEffect(lambda: seen.append(d.clock.now())),
            Invocation("maxSupply", account=d.owner, on_return=lambda r, p: seen.append(p)),
        ])
        assert seen == [T0 + 3, 210_000_000]

    @pytest.mark.asyncio
    async def test_side_effect_runs_in_order(self, deployment):
        d = deployment
        order = []
        await use_methods_on(d.token, [
            SideEffect(lambda: order.append("a")),
            Invocation("totalSupply", account=d.owner, on_return=lambda r, p: order.append("call")),
            SideEffect(lambda: order.append("b")),
        ])
        assert order == ["a", "call", "b"]

    @pytest.mark.asyncio
    async def test_on_error_intercepts(self, deployment):
        d = deployment
        reasons, previous = [], []
        await use_methods_on(d.token, [
            Invocation("mint", [d.owner, 43_400_000], account=d.owner, on_error=reasons.append),
            Invocation("totalSupply", account=d.owner, on_return=lambda r, p: previous.append(p)),
        ])
        assert reasons == [REASON_MINT_EXCEEDS_ALLOWANCE]
        assert previous == [None]

    @pytest.mark.asyncio
    async def test_unhandled_rejection_is_fatal(self, deployment):
        d = deployment
        bob, carol = d.accounts[1], d.accounts[2]
        after = []
        with pytest.raises(PipelineStepFailed) as exc:
            await use_methods_on(d.token, [
                Invocation("transfer", [carol, 5], account=bob),
                SideEffect(lambda: after.append(True)),
            ])
        err = exc.value
        assert str(err).startswith(f"Calling method transfer({carol}, 5) ")
        assert REASON_INSUFFICIENT_BALANCE in str(err)
        assert err.index == 0
        assert err.call_args == (carol, 5)
        assert isinstance(err.__cause__, TransactionRejected)
        assert after == []

    @pytest.mark.asyncio
    async def test_wrong_arity_is_wrapped(self, deployment):
        d = deployment
        bob = d.accounts[1]
        caught = []
        with pytest.raises(PipelineStepFailed) as exc:
            await use_methods_on(d.token, [
                Invocation("transfer", [bob], account=d.owner, on_error=caught.append),
            ])
        err = exc.value
        assert str(err).startswith(f"Calling method transfer({bob}) ")
        assert err.call_args == (bob,)
        assert isinstance(err.__cause__, TypeError)
        assert caught == []

    @pytest.mark.asyncio
    async def test_bad_argument_value_is_wrapped(self, deployment):
        d = deployment
        with pytest.raises(PipelineStepFailed) as exc:
            await use_methods_on(d.stake, [
                Invocation("setSaleStartEnd", ["x", "soon", 5], account=d.owner),
            ])
        assert str(exc.value).startswith("Calling method setSaleStartEnd(x, soon, 5) ")
        assert isinstance(exc.value.__cause__, ValueError)

    @pytest.mark.asyncio
    async def test_fail_fast_keeps_completed_steps(self, deployment):
        d = deployment
        bob = d.accounts[1]
        with pytest.raises(PipelineStepFailed):
            await use_methods_on(d.token, [
                Invocation("transfer", [bob, 7], account=d.owner),
                Invocation("mint", [bob, 1], account=d.owner),
            ])
        assert await d.ledger.invoke(d.owner, d.token, "balanceOf", [bob]) == 7

    @pytest.mark.asyncio
    async def test_unknown_method_before_dispatch(self, deployment):
        d = deployment
        block = d.ledger.block_number
        ran = []
        with pytest.raises(UnknownMethod, match="Unknown method called burn"):
            await use_methods_on(d.token, [
                SideEffect(lambda: ran.append(1)),
                Invocation("burn", [1], account=d.owner, on_error=ran.append),
            ])
        assert ran == [1]
        assert d.ledger.block_number == block

    @pytest.mark.asyncio
    async def test_explicit_targets(self, deployment):
        d = deployment
        seen = []
        pipeline = StepPipeline(d.ledger)
        await pipeline.run([
            Invocation("symbol", target=d.token, account=d.owner, on_return=lambda r, p: seen.append(r)),
            Invocation("symbol", target=d.reward_token.address, account=d.owner, on_return=lambda r, p: seen.append(r)),
        ])
        assert seen == ["AHA", "USDT"]

    @pytest.mark.asyncio
    async def test_missing_target(self, deployment):
        with pytest.raises(PipelineError, match="no target"):
            await StepPipeline(deployment.ledger).run([Invocation("symbol")])

    @pytest.mark.asyncio
    async def test_account_defaults_to_first(self, deployment):
        d = deployment
        receipt = await use_methods_on(d.token, Invocation("transfer", [d.accounts[1], 1]))
        assert receipt.account == d.owner


class TestConcurrency:

    @pytest.mark.asyncio
    async def test_independent_ledgers_share_nothing(self):
        async def scenario(amount):
            async with fresh_deployment(HarnessConfig(), ManualClock(T0)) as d:
                bob = d.accounts[1]
                return await use_methods_on(d.token, [
                    Invocation("transfer", [bob, amount], account=d.owner),
                    Suspension(1000),
                    Invocation("balanceOf", [bob], account=d.owner, on_return=lambda r, p: None),
                ])

        results = await asyncio.gather(scenario(1), scenario(2), scenario(3))
        assert results == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_pipelines_on_one_ledger_are_serialized(self, deployment):
        d = deployment

        def transfers(to):
            return [Invocation("transfer", [to, 1], account=d.owner) for _ in range(10)]

        await asyncio.gather(
            use_methods_on(d.token, transfers(d.accounts[1])),
            use_methods_on(d.token, transfers(d.accounts[2])),
        )
        assert await d.ledger.invoke(d.owner, d.token, "balanceOf", [d.accounts[1]]) == 10
        assert await d.ledger.invoke(d.owner, d.token, "balanceOf", [d.accounts[2]]) == 10
        assert d.ledger.nonce_of(d.owner) == 3 + 20
