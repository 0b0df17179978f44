"""
govindex Logging System
=======================

Root logger setup shared by every module: a Rich console handler on stderr,
an optional rotating file handler, and a formatter that strips terminal
control sequences out of event-supplied text.

Usage:
    >>> from govindex.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Replay started")
"""

import logging
import logging.handlers
import re
import sys
import threading
import time
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.highlighter import RegexHighlighter
from rich.logging import RichHandler
from rich.theme import Theme

from .constants import (
    LOG_LEVEL,
    LOG_FORMAT,
    LOG_DATE_FORMAT,
    LOG_MAX_FILE_SIZE,
    LOG_BACKUP_COUNT,
    LOG_CONSOLE_HIGHLIGHTING,
    LOG_FILE_OUTPUT,
)


LOG_FILE_PATH = Path(__file__).parent.parent / "logs" / "govindex.log"

_THEME = Theme(
    {
        "govindex.address":    "cyan",
        "govindex.tx_hash":    "dim cyan",
        "govindex.block":      "bold blue",
        "govindex.proposal":   "bold magenta",
        "govindex.fault":      "bold red",
        "govindex.level":      "bold yellow",
        "govindex.timestamp":  "bold cyan",
    }
)


class TerminalSafeFormatter(logging.Formatter):
    """
    Strips ANSI escapes and control characters from formatted records.

    Proposal descriptions and vote reasons come straight from chain data
    and may carry escape sequences.
    """

    _ansi_escape_re = re.compile(r"\x1b\[[0-?]*[ -/]*[@-~]|\x1b[@-Z\\-_]")
    # Tab and newline survive
    _control_chars_re = re.compile(r"[\x00-\x08\x0B-\x1F\x7F]")

    @classmethod
    def sanitize(cls, text: str) -> str:
        if not text:
            return text
        return cls._control_chars_re.sub("", cls._ansi_escape_re.sub("", text))

    def format(self, record: logging.LogRecord) -> str:
        return self.sanitize(super().format(record))


class GovIndexLogHighlighter(RegexHighlighter):
    """Colors hashes, addresses, blocks, proposals and [FAULT_KIND] tags."""

    base_style = "govindex."
    highlights = [
        r"(?P<tx_hash>\b0x[0-9a-fA-F]{64}\b)",
        r"(?P<address>\b0x[0-9a-fA-F]{40}\b)",
        r"(?P<block>\bblock #?\d+\b)",
        r"(?P<proposal>\bProposal #\S+)",
        r"(?P<level>\b(?:DEBUG|INFO|WARNING|ERROR|CRITICAL)\b)",
        r"(?P<fault>\[[A-Z_]+\])",
        r"(?P<timestamp>^(.*?)UTC)",
    ]


def _build_formatter() -> TerminalSafeFormatter:
    """Formatter from LOG_FORMAT / LOG_DATE_FORMAT, falling back to their defaults."""
    log_format = str(LOG_FORMAT) or str(LOG_FORMAT.default())
    date_format = str(LOG_DATE_FORMAT) or str(LOG_DATE_FORMAT.default())

    probe = logging.LogRecord("govindex", logging.INFO, "", 0, "check", (), None)
    try:
        formatter = TerminalSafeFormatter(fmt=log_format, datefmt=date_format + " UTC")
        formatter.format(probe)
    except (ValueError, KeyError, TypeError) as e:
        print(f"govindex.logger - invalid LOG_FORMAT/LOG_DATE_FORMAT ({e}), using defaults", file=sys.stderr)
        formatter = TerminalSafeFormatter(
            fmt=str(LOG_FORMAT.default()),
            datefmt=str(LOG_DATE_FORMAT.default()) + " UTC",
        )

    formatter.converter = time.gmtime
    return formatter


class LogManager:
    """
    Configures the root logger once per process.

    ``configure`` is idempotent and guarded by a lock; ``set_level`` may be
    called afterwards (the CLI does so once the config file is loaded).
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._configured = False

    def configure(
        self,
        log_level: Optional[str] = None,
        log_file: Optional[Path] = None,
        file_output: Optional[bool] = None,
    ) -> None:
        with self._lock:
            if self._configured:
                return

            level = getattr(logging, str(log_level or LOG_LEVEL).upper(), logging.INFO)
            formatter = _build_formatter()

            root_logger = logging.getLogger()
            root_logger.setLevel(level)
            root_logger.handlers.clear()

            if LOG_CONSOLE_HIGHLIGHTING:
                console_handler: logging.Handler = RichHandler(
                    console=Console(theme=_THEME, highlight=False, stderr=True),
                    highlighter=GovIndexLogHighlighter(),
                    rich_tracebacks=True,
                    show_path=False,
                    show_time=False,
                    show_level=False,
                    markup=False,
                )
            else:
                console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(formatter)
            root_logger.addHandler(console_handler)

            if file_output is None:
                file_output = bool(LOG_FILE_OUTPUT)
            if file_output:
                path = log_file or LOG_FILE_PATH
                path.parent.mkdir(parents=True, exist_ok=True)
                file_handler = logging.handlers.RotatingFileHandler(
                    filename=str(path),
                    maxBytes=LOG_MAX_FILE_SIZE,
                    backupCount=LOG_BACKUP_COUNT,
                    encoding="utf-8",
                )
                file_handler.setFormatter(formatter)
                root_logger.addHandler(file_handler)

            for handler in root_logger.handlers:
                handler.setLevel(level)
            self._configured = True

    def set_level(self, log_level: str) -> None:
        level = getattr(logging, str(log_level).upper(), logging.INFO)
        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        for handler in root_logger.handlers:
            handler.setLevel(level)

    def get_logger(self, name: str) -> logging.Logger:
        if not self._configured:
            self.configure()
        return logging.getLogger(name)

    @property
    def is_configured(self) -> bool:
        return self._configured


_manager = LogManager()


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name`` (typically ``__name__``), configuring logging on first use."""
    return _manager.get_logger(name)


def set_log_level(log_level: str) -> None:
    """Adjust the active log level (used by the CLI once config is loaded)."""
    _manager.set_level(log_level)


_manager.configure()
