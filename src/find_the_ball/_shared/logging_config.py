# Area: Shared
"""
find_the_ball._shared.logging_config — Structured logging setup
===============================================================

Two handlers on the ``find_the_ball`` logger:

- stderr, one line per record, tagged with the round it belongs to and
  colored when stderr is a terminal;
- a JSON-lines file carrying ``round_id`` and ``error_type`` as fields.

While the terminal board is on screen (``play_mode()``) the stderr
handler stays quiet; the file keeps everything.
"""

from __future__ import annotations
import logging
import json
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Iterator, Optional, TextIO

if TYPE_CHECKING:
    from ..errors import OracleError

logger = logging.getLogger("find_the_ball")

# Record attributes copied into the JSON line when a caller passes them as extra
_EXTRA_FIELDS = ("round_id", "error_type")

_play_mode_enabled = False


class PlayModeFilter(logging.Filter):
    """Drop records while the board owns the terminal."""

    def filter(self, record: logging.LogRecord) -> bool:
        return not _play_mode_enabled


class RoundTagFilter(logging.Filter):
    """Give every record a ``round_tag`` ("[round-…] " or empty)."""

    def filter(self, record: logging.LogRecord) -> bool:
        round_id = getattr(record, "round_id", None)
        record.round_tag = f"[{round_id}] " if round_id else ""
        return True


class TerminalFormatter(logging.Formatter):
    """One-line terminal format; level names colored only on a tty."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"
    FORMAT = "%(asctime)s │ %(levelname)s │ %(round_tag)s%(message)s"

    def __init__(self, use_color: bool = True):
        super().__init__(fmt=self.FORMAT, datefmt="%H:%M:%S")
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "round_tag"):
            record.round_tag = ""
        if not self.use_color:
            return super().format(record)
        # Copy so the file handler keeps the plain level name
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname, self.RESET)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


class JSONFormatter(logging.Formatter):
    """JSON-lines formatter for the log file."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in _EXTRA_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_data[field] = value
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data)


def setup_logging(
    log_file_path: str = "find_the_ball.log",
    level: int = logging.INFO,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Configure the ``find_the_ball`` logger. Safe to call more than once.

    Parameters
    ----------
    log_file_path : str
        JSON-lines log file. Parent directories are created.
    level : int
        Logging level for both handlers.
    stream : TextIO, optional
        Terminal stream. Defaults to ``sys.stderr``.
    """
    stream = stream or sys.stderr
    pkg_logger = logging.getLogger("find_the_ball")
    pkg_logger.setLevel(level)

    for handler in list(pkg_logger.handlers):
        pkg_logger.removeHandler(handler)
        handler.close()

    terminal_handler = logging.StreamHandler(stream)
    terminal_handler.setLevel(level)
    terminal_handler.setFormatter(TerminalFormatter(use_color=_is_tty(stream)))
    terminal_handler.addFilter(PlayModeFilter())
    terminal_handler.addFilter(RoundTagFilter())
    pkg_logger.addHandler(terminal_handler)

    try:
        log_path = Path(log_file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(JSONFormatter())
        pkg_logger.addHandler(file_handler)
    except OSError as e:
        pkg_logger.warning(f"Could not create log file: {e}")

    pkg_logger.propagate = False


def _is_tty(stream: TextIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def log_round_error(error: "OracleError") -> None:
    """Log the structured block for an oracle error that aborted a round."""
    logger.warning(
        error.format_error_log(),
        extra={"round_id": error.round_id, "error_type": error.error_type},
    )


def enable_play_mode() -> None:
    global _play_mode_enabled
    _play_mode_enabled = True


def disable_play_mode() -> None:
    global _play_mode_enabled
    _play_mode_enabled = False


def is_play_mode_enabled() -> bool:
    return _play_mode_enabled


@contextmanager
def play_mode() -> Iterator[None]:
    """Silence terminal logging for the duration of the block."""
    previous = _play_mode_enabled
    enable_play_mode()
    try:
        yield
    finally:
        if not previous:
            disable_play_mode()
