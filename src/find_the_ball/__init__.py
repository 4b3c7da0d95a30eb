"""
find_the_ball — Single-round "find the ball" game engine
========================================================

A round: the oracle decides where the ball is, the ball is shown for a
moment, then hidden, and the player guesses the cup.

Quick Start (no server needed):
    from find_the_ball import DemoOracle, RoundEngine

    engine = RoundEngine(oracle=DemoOracle())
    round_id = await engine.start_round()     # ball revealed
    ...                                       # reveal timer hides it
    outcome = engine.submit_guess(1)          # Outcome.CORRECT / INCORRECT
    engine.acknowledge()                      # back to idle

Remote oracle:
    from find_the_ball import HttpPositionOracle, RoundEngine, EngineSettings

    engine = RoundEngine(
        oracle=HttpPositionOracle("http://localhost:8080/position"),
        settings=EngineSettings(board_size=3, reveal_seconds=1.0),
    )

Terminal game:
    python -m find_the_ball --demo
"""

from ._engine import RoundEngine, RoundPhase, Outcome
from ._oracle import HttpPositionOracle
from .config import EngineSettings, load_settings
from .demo_oracle import DemoOracle
from .oracle import PositionOracle, PositionResult
from .runner import TerminalRunner
from .types import RoundSnapshot
from .errors import (
    FindTheBallError,
    OracleError,
    OracleUnavailable,
    OracleResponseInvalid,
    InvalidGuessRange,
    NoActiveRound,
    GuessNotAllowed,
    StaleTransition,
    InvalidPhaseTransition,
    ConfigFileError,
)

__all__ = [
    # Engine
    "RoundEngine",
    "RoundPhase",
    "Outcome",
    "RoundSnapshot",
    # Oracles
    "PositionOracle",
    "PositionResult",
    "HttpPositionOracle",
    "DemoOracle",
    # Configuration
    "EngineSettings",
    "load_settings",
    # Presentation
    "TerminalRunner",
    # Errors
    "FindTheBallError",
    "OracleError",
    "OracleUnavailable",
    "OracleResponseInvalid",
    "InvalidGuessRange",
    "NoActiveRound",
    "GuessNotAllowed",
    "StaleTransition",
    "InvalidPhaseTransition",
    "ConfigFileError",
]
__version__ = "1.0.0"
