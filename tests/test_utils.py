"""
Scenario Helpers Test Suite
"""

import os
import random
import sys

import pytest

# ── Path setup ────────────────────────────────────────────────────────
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from ahatoken.ledger import Contract, LedgerService, ManualClock, contract_method
from ahatoken.utils import (
    format_args,
    get_debug_logs,
    new_array,
    print_logs,
    random_int,
    seconds_in_the_future,
    time_in_secs,
)

T0 = 1_700_000_000


class Chatty(Contract):
    name = "Chatty"

    def constructor(self, ctx):
        self.storage = {}

    @contract_method()
    def talk(self, ctx, message):
        self.debug(ctx, message)
        self.emit(ctx, "Note", message="not a debugger line")
        return True


class TestHelpers:

    def test_seconds_in_the_future_uses_clock(self):
        assert seconds_in_the_future(5, ManualClock(T0)) == T0 + 5

    def test_time_in_secs(self):
        assert time_in_secs(ManualClock(T0 + 0.4)) == T0
        assert abs(time_in_secs() - seconds_in_the_future(0)) <= 1

    def test_random_int_bounds(self):
        rng = random.Random(3)
        values = [random_int(100, 1000, rng) for _ in range(500)]
        assert all(100 <= v <= 1000 for v in values)
        assert len(set(values)) > 100

    def test_random_int_degenerate(self):
        assert random_int(7, 7) == 7
        with pytest.raises(ValueError):
            random_int(10, 1)

    def test_new_array(self):
        assert new_array(4, lambda i: i * i) == [0, 1, 4, 9]
        assert new_array(0, lambda i: i) == []


class TestDebug:

    def test_format_args(self):
        assert format_args(["0xabc", 5]) == "(0xabc, 5)"
        assert format_args([]) == "()"
        assert format_args(None) == ""

    @pytest.mark.asyncio
    async def test_print_logs_filters_debugger_messages(self):
        ledger = LedgerService(clock=ManualClock(T0), account_count=2)
        owner = ledger.accounts[0]
        chatty = await ledger.deploy(Chatty, [], owner)
        await ledger.invoke(owner, chatty, "talk", ["hello"])
        await ledger.invoke(owner, chatty, "talk", ["world"])
        logs = print_logs(ledger, chatty)
        assert logs == [
            {"event": "Debug", "message": "Debugger: hello"},
            {"event": "Debug", "message": "Debugger: world"},
        ]
        assert get_debug_logs(ledger, chatty) == logs
        ledger.close()
