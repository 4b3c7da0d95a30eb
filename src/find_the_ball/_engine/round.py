# Area: Engine
"""
find_the_ball._engine.round — Round state
=========================================

Tracks one round from start to outcome: its phase, the ball position
the oracle chose, the player's guess and the timestamps of each step.
The engine owns the Round; the presentation layer only ever sees a
snapshot of it.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional
import logging

from .enums import RoundPhase, RoundEvent, Outcome, ACTIVE_PHASES, TERMINAL_PHASES
from .state_machine import RoundStateMachine
from .._shared.ids import generate_round_id, current_timestamp
from ..errors import OracleError

logger = logging.getLogger("find_the_ball.round")


@dataclass
class Round:
    """
    Full state of one round.

    ``ball_position`` stays ``None`` until the oracle answers. It is
    internal: the engine decides when (if ever) it may be shown.
    """
    board_size: int
    round_id: str = field(default_factory=generate_round_id)
    machine: RoundStateMachine = field(default_factory=RoundStateMachine, repr=False)

    ball_position: Optional[int] = field(default=None, repr=False)
    guess: Optional[int] = None
    outcome: Outcome = Outcome.NONE
    error: Optional[OracleError] = None

    started_at: Optional[str] = None
    revealed_at: Optional[str] = None
    hidden_at: Optional[str] = None
    resolved_at: Optional[str] = None
    aborted_at: Optional[str] = None

    # ── Phase helpers ────────────────────────────────────────

    @property
    def phase(self) -> RoundPhase:
        return self.machine.current_phase

    @property
    def is_active(self) -> bool:
        return self.phase in ACTIVE_PHASES

    @property
    def is_terminal(self) -> bool:
        return self.phase in TERMINAL_PHASES

    def advance(self, event: RoundEvent) -> RoundPhase:
        """Apply an event and stamp the matching timestamp."""
        previous = self.phase
        new_phase = self.machine.transition(event)
        logger.info(f"[{self.round_id}] Phase: {previous.value} → {new_phase.value}")

        now = current_timestamp()
        if new_phase == RoundPhase.AWAITING_POSITION:
            self.started_at = now
        elif new_phase == RoundPhase.REVEALING:
            self.revealed_at = now
        elif new_phase == RoundPhase.HIDDEN:
            self.hidden_at = now
        elif new_phase == RoundPhase.RESOLVED:
            self.resolved_at = now
        elif new_phase == RoundPhase.ABORTED:
            self.aborted_at = now
        return new_phase

    def score(self, guess: int) -> Outcome:
        """Record a guess and compute the outcome. Caller checks the phase."""
        self.guess = guess
        if guess == self.ball_position:
            self.outcome = Outcome.CORRECT
        else:
            self.outcome = Outcome.INCORRECT
        return self.outcome
