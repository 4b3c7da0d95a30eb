# Area: Engine
"""
find_the_ball._engine.state_machine — Round state machine
=========================================================

Implements the state machine that tracks one round from start to
resolution. Every phase change of a round goes through here; an event
the current phase does not accept is an error.
"""

from typing import Dict
from .enums import RoundPhase, RoundEvent
from ..errors import InvalidPhaseTransition


# Valid phase transitions: {current_phase: {event: next_phase}}
TRANSITIONS: Dict[RoundPhase, Dict[RoundEvent, RoundPhase]] = {
    RoundPhase.IDLE: {
        RoundEvent.START: RoundPhase.AWAITING_POSITION,
    },
    RoundPhase.AWAITING_POSITION: {
        RoundEvent.POSITION_RECEIVED: RoundPhase.REVEALING,
        RoundEvent.ORACLE_FAILED: RoundPhase.ABORTED,
        RoundEvent.CANCEL: RoundPhase.ABORTED,
    },
    RoundPhase.REVEALING: {
        RoundEvent.REVEAL_EXPIRED: RoundPhase.HIDDEN,
        RoundEvent.CANCEL: RoundPhase.ABORTED,
    },
    RoundPhase.HIDDEN: {
        RoundEvent.GUESS_ACCEPTED: RoundPhase.RESOLVED,
        RoundEvent.CANCEL: RoundPhase.ABORTED,
    },
    RoundPhase.RESOLVED: {
        RoundEvent.ACKNOWLEDGE: RoundPhase.IDLE,
    },
    RoundPhase.ABORTED: {
        RoundEvent.ACKNOWLEDGE: RoundPhase.IDLE,
    },
}


class RoundStateMachine:
    """
    State machine for a single round.

    Attributes:
        current_phase: The phase the round is in
    """

    def __init__(self):
        """Initialize state machine in IDLE."""
        self.current_phase = RoundPhase.IDLE

    def can_transition(self, event: RoundEvent) -> bool:
        """
        Check if a transition is valid from the current phase.

        Args:
            event: The event to check

        Returns:
            True if the transition is valid, False otherwise
        """
        return event in TRANSITIONS.get(self.current_phase, {})

    def transition(self, event: RoundEvent) -> RoundPhase:
        """
        Execute a phase transition.

        Args:
            event: The event triggering the transition

        Returns:
            The new phase after transition

        Raises:
            InvalidPhaseTransition: If the current phase does not accept the event
        """
        if not self.can_transition(event):
            raise InvalidPhaseTransition(
                f"Invalid transition: {event.value} from {self.current_phase.value}"
            )

        next_phase = TRANSITIONS[self.current_phase][event]
        self.current_phase = next_phase
        return next_phase

    def reset(self) -> None:
        """Reset state machine to IDLE."""
        self.current_phase = RoundPhase.IDLE
