"""
find_the_ball.types — TypedDict schemas for the presentation boundary
=====================================================================

The presentation layer never touches a Round directly. It reads a
RoundSnapshot from ``RoundEngine.snapshot()`` or receives one in every
listener call.

    >>> RoundSnapshot.__annotations__
    {'round_id': Optional[str], 'phase': str, 'position_visible': bool, ...}
"""

from typing import Optional, TypedDict


class RoundSnapshot(TypedDict):
    """What the presentation layer may know about the current round.

    Fields
    ------
    round_id : Optional[str]
        Identifier of the current round, ``None`` when idle.
    phase : str
        One of "idle", "awaiting_position", "revealing", "hidden",
        "resolved", "aborted".
    position_visible : bool
        True only while the ball is being revealed.
    visible_position : Optional[int]
        The ball position while revealing, otherwise ``None``.
    outcome : str
        "correct", "incorrect" or "none".
    board_size : int
        Number of cups; valid guesses are ``0..board_size - 1``.
    """
    round_id: Optional[str]
    phase: str
    position_visible: bool
    visible_position: Optional[int]
    outcome: str
    board_size: int
