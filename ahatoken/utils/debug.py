"""
Debug utilities for scenarios.
"""

import re
from typing import Any, Dict, List, Optional, Sequence

from ..ledger.service import LedgerService, Target
from ..logger import get_logger

logger = get_logger(__name__)

DEBUG_MESSAGE = re.compile(r"^Debugger: ")


def format_args(args: Optional[Sequence[Any]]) -> str:
    """``(a, b, c)`` for diagnostics; empty string when there are no args at all."""
    if args is None:
        return ""
    return f"({', '.join(str(arg) for arg in args)})"


def get_debug_logs(ledger: LedgerService, target: Target) -> List[Dict[str, Any]]:
    """Committed events of ``target`` carrying a ``Debugger:`` message."""
    logs = []
    for entry in ledger.get_past_events(target):
        log = {"event": entry.event, **entry.args}
        message = log.get("message")
        if isinstance(message, str) and DEBUG_MESSAGE.match(message):
            logs.append(log)
    return logs


def print_logs(ledger: LedgerService, target: Target) -> List[Dict[str, Any]]:
    """Log every debugger message emitted by ``target`` and return them."""
    logs = get_debug_logs(ledger, target)
    for log in logs:
        logger.info(f"[{log['event']}] {log['message']}")
    return logs
