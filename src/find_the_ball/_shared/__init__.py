# Area: Shared
"""
Shared utilities used by the engine, the oracle clients and the CLI.

This package contains:
- Logging configuration
- Round id and timestamp helpers
"""

from .logging_config import (
    setup_logging,
    log_round_error,
    enable_play_mode,
    disable_play_mode,
    is_play_mode_enabled,
    play_mode,
)
from .ids import generate_round_id, current_timestamp

__all__ = [
    "setup_logging",
    "log_round_error",
    "enable_play_mode",
    "disable_play_mode",
    "is_play_mode_enabled",
    "play_mode",
    "generate_round_id",
    "current_timestamp",
]
