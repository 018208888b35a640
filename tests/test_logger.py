"""
Logging Test Suite
"""

import logging
import os
import sys
import time

# ── Path setup ────────────────────────────────────────────────────────
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from rich.text import Text

from ahatoken.logger import AHALogHighlighter, LogManager, TerminalSafeFormatter, get_logger


def make_record(msg):
    return logging.LogRecord(
        name="ahatoken.test", level=logging.INFO, pathname="", lineno=0,
        msg=msg, args=(), exc_info=None,
    )


class TestLogManager:

    def test_singleton(self):
        assert LogManager() is LogManager()

    def test_get_logger_is_named(self):
        logger = get_logger("ahatoken.pipeline.executor")
        assert logger.name == "ahatoken.pipeline.executor"
        assert logging.getLogger().handlers


class TestTerminalSafeFormatter:

    def test_strips_ansi_and_control_chars(self):
        raw = "event \x1b[31mFirst\x1b[0m stake\r\x07"
        assert TerminalSafeFormatter.sanitize(raw) == "event First stake"

    def test_keeps_tabs_and_newlines(self):
        assert TerminalSafeFormatter.sanitize("a\tb\nc") == "a\tb\nc"

    def test_format_sanitizes_message(self):
        formatter = TerminalSafeFormatter(fmt="%(levelname)s - %(message)s")
        formatter.converter = time.gmtime
        assert formatter.format(make_record("minted\x1b[2J 5")) == "INFO - minted 5"


class TestHighlighter:

    def styles_of(self, text):
        rendered = Text(text)
        AHALogHighlighter().highlight(rendered)
        return {span.style for span in rendered.spans}

    def test_address_and_reason(self):
        styles = self.styles_of(
            "[AHAToken] mint from 0x" + "ab" * 20 + " reverted: revert AHAToken: nope"
        )
        assert "aha.address" in styles
        assert "aha.reason" in styles
        assert "aha.tag" in styles

    def test_tx_hash(self):
        assert "aha.tx_hash" in self.styles_of("tx 0x" + "cd" * 32)
