# Area: Engine
"""
Round engine - the lifecycle of a single find-the-ball round.

This package handles:
- Round phases and the transition table
- Timed reveal and result display windows
- Single-flight round start
- Guess validation and scoring
"""

from .enums import RoundPhase, RoundEvent, Outcome
from .state_machine import RoundStateMachine, TRANSITIONS
from .round import Round
from .phase_timer import PhaseTimer
from .engine import RoundEngine

__all__ = [
    "RoundPhase",
    "RoundEvent",
    "Outcome",
    "RoundStateMachine",
    "TRANSITIONS",
    "Round",
    "PhaseTimer",
    "RoundEngine",
]
