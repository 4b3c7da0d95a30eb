# Area: Engine
"""
find_the_ball._engine.enums — Round state machine enums
=======================================================

Defines the phases, events and outcomes of a single round.
"""

from enum import Enum


class RoundPhase(Enum):
    """
    Phases of a round.

    Phase transitions:
    IDLE -> AWAITING_POSITION (on START)
    AWAITING_POSITION -> REVEALING (on POSITION_RECEIVED)
    AWAITING_POSITION -> ABORTED (on ORACLE_FAILED or CANCEL)
    REVEALING -> HIDDEN (on REVEAL_EXPIRED)
    REVEALING -> ABORTED (on CANCEL)
    HIDDEN -> RESOLVED (on GUESS_ACCEPTED)
    HIDDEN -> ABORTED (on CANCEL)
    RESOLVED -> IDLE (on ACKNOWLEDGE)
    ABORTED -> IDLE (on ACKNOWLEDGE)
    """
    IDLE = "idle"
    AWAITING_POSITION = "awaiting_position"
    REVEALING = "revealing"
    HIDDEN = "hidden"
    RESOLVED = "resolved"
    ABORTED = "aborted"


# A round in one of these phases blocks a new start_round()
ACTIVE_PHASES = frozenset({
    RoundPhase.AWAITING_POSITION,
    RoundPhase.REVEALING,
    RoundPhase.HIDDEN,
})

TERMINAL_PHASES = frozenset({
    RoundPhase.RESOLVED,
    RoundPhase.ABORTED,
})


class RoundEvent(Enum):
    """
    Events that drive the round state machine.

    Events are triggered by:
    - START: start_round() on an idle engine
    - POSITION_RECEIVED: the oracle returned a usable position
    - ORACLE_FAILED: the oracle call failed or returned garbage
    - REVEAL_EXPIRED: the reveal timer fired
    - GUESS_ACCEPTED: submit_guess() with an in-range index
    - CANCEL: cancel() on an active round
    - ACKNOWLEDGE: acknowledge() or the result display timer
    """
    START = "START"
    POSITION_RECEIVED = "POSITION_RECEIVED"
    ORACLE_FAILED = "ORACLE_FAILED"
    REVEAL_EXPIRED = "REVEAL_EXPIRED"
    GUESS_ACCEPTED = "GUESS_ACCEPTED"
    CANCEL = "CANCEL"
    ACKNOWLEDGE = "ACKNOWLEDGE"


class Outcome(Enum):
    """Result of a round."""
    NONE = "none"
    CORRECT = "correct"
    INCORRECT = "incorrect"
