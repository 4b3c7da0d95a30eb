"""
find_the_ball.runner — Terminal game loop
=========================================

The TerminalRunner is a minimal presentation layer: it draws the cups
from the engine's snapshots and feeds the player's keystrokes back as
start / guess calls. It never looks inside a Round.

    from find_the_ball import TerminalRunner, DemoOracle, EngineSettings

    settings = EngineSettings(board_size=3)
    TerminalRunner(settings, DemoOracle(settings.board_size)).run()
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Callable, Optional, TextIO

from ._engine import RoundEngine, RoundPhase, Outcome
from ._shared.logging_config import play_mode
from .config import EngineSettings
from .errors import InvalidGuessRange, OracleError
from .oracle import PositionOracle
from .types import RoundSnapshot

logger = logging.getLogger("find_the_ball.runner")

MSG_WELCOME = 'Press Enter to start the game ("q" to quit)'
MSG_WAITING = "Hiding the ball..."
MSG_WATCH = "Watch carefully where the ball is!"
MSG_HIDDEN = "The ball is hidden."
MSG_CORRECT = "Well done, you found the ball!"
MSG_INCORRECT = "Missed! The ball was somewhere else."

QUIT_WORDS = {"q", "quit", "exit"}


def render_board(board_size: int, ball: Optional[int] = None, hidden: bool = False) -> str:
    """Draw the cups on one line with 1-based labels under them."""
    cups = []
    for index in range(board_size):
        if hidden:
            cups.append("[?]")
        elif ball == index:
            cups.append("[o]")
        else:
            cups.append("[ ]")
    labels = [f" {index + 1} " for index in range(board_size)]
    return " ".join(cups) + "\n" + " ".join(labels)


class TerminalRunner:
    """
    Plays rounds on a terminal.

    ``input_fn`` and ``output`` default to ``input`` and ``sys.stdout``;
    tests pass their own.
    """

    def __init__(
        self,
        settings: EngineSettings,
        oracle: PositionOracle,
        input_fn: Callable[[str], str] = input,
        output: Optional[TextIO] = None,
    ):
        self.settings = settings
        self.engine = RoundEngine(oracle=oracle, settings=settings)
        self._input = input_fn
        self._output = output or sys.stdout
        self._hidden = asyncio.Event()
        self.engine.add_listener(self._render)

    def run(self, rounds: Optional[int] = None) -> int:
        """Blocking entry point. Returns the number of rounds played."""
        return asyncio.run(self.play(rounds))

    async def play(self, rounds: Optional[int] = None) -> int:
        """Play until the player quits or ``rounds`` rounds are done."""
        played = 0
        try:
            with play_mode():
                while rounds is None or played < rounds:
                    try:
                        answer = await self._ask(MSG_WELCOME + " ")
                        if answer.strip().lower() in QUIT_WORDS:
                            break
                        outcome = await self.play_round()
                    except EOFError:
                        break
                    if outcome is not None:
                        played += 1
        finally:
            self.engine.close()
        logger.info(f"Session over after {played} round(s)")
        return played

    async def play_round(self) -> Optional[Outcome]:
        """
        Play one round.

        Returns the outcome, or ``None`` if the oracle could not place
        the ball.
        """
        self._hidden.clear()
        try:
            await self.engine.start_round()
        except OracleError as e:
            self._print(f"Could not place the ball: {e}")
            self._print("Start again to retry.")
            self.engine.acknowledge()
            return None

        await self._hidden.wait()
        if self.engine.phase != RoundPhase.HIDDEN:
            self.engine.acknowledge()
            return None

        n = self.engine.board_size
        while True:
            answer = await self._ask(f"Where is the ball? Pick a cup 1-{n}: ")
            try:
                cup = int(answer.strip())
            except ValueError:
                self._print(f"Please type a number between 1 and {n}.")
                continue
            try:
                outcome = self.engine.submit_guess(cup - 1)
            except InvalidGuessRange:
                self._print(f"There is no cup {cup}. Pick between 1 and {n}.")
                continue
            break

        self.engine.acknowledge()
        return outcome

    # ── Presentation ─────────────────────────────────────────

    def _render(self, snapshot: RoundSnapshot) -> None:
        phase = snapshot["phase"]
        size = snapshot["board_size"]
        if phase == RoundPhase.AWAITING_POSITION.value:
            self._print(MSG_WAITING)
        elif phase == RoundPhase.REVEALING.value:
            self._print(MSG_WATCH)
            self._print(render_board(size, ball=snapshot["visible_position"]))
        elif phase == RoundPhase.HIDDEN.value:
            self._print(MSG_HIDDEN)
            self._print(render_board(size, hidden=True))
            self._hidden.set()
        elif phase == RoundPhase.RESOLVED.value:
            if snapshot["outcome"] == Outcome.CORRECT.value:
                self._print(MSG_CORRECT)
            else:
                self._print(MSG_INCORRECT)
        elif phase == RoundPhase.ABORTED.value:
            self._print("Round aborted.")
            self._hidden.set()

    def _print(self, text: str) -> None:
        print(text, file=self._output, flush=True)

    async def _ask(self, prompt: str) -> str:
        return await asyncio.to_thread(self._input, prompt)
