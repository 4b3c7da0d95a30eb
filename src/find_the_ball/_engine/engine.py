# Area: Engine
"""
find_the_ball._engine.engine — Round engine
===========================================

Owns the current round and drives it through its phases:

    start_round()  -> awaiting_position   (oracle call in flight)
    oracle answers -> revealing           (ball shown, reveal timer running)
    timer fires    -> hidden              (ball concealed, guessing open)
    submit_guess() -> resolved            (outcome computed)
    acknowledge()  -> idle

An oracle failure or cancel() sends the round to aborted instead.

Only one round is active at a time: start_round() while a round is in
flight returns that round's id and does nothing else. Everything runs
on the event loop thread and no method awaits between checking a phase
and changing it, so concurrent callers cannot interleave inside a
transition.

Asynchronous completions (the oracle task and the timers) capture the
round id they were started for. When one fires for a round that is no
longer current, or in a phase it no longer expects, it is dropped.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from typing import Callable, List, Optional

from .enums import RoundPhase, RoundEvent, Outcome
from .phase_timer import PhaseTimer
from .round import Round
from ..config import EngineSettings
from ..errors import (
    GuessNotAllowed,
    InvalidGuessRange,
    NoActiveRound,
    OracleError,
    OracleResponseInvalid,
    OracleUnavailable,
    StaleTransition,
)
from ..oracle import PositionOracle, PositionResult
from ..types import RoundSnapshot
from .._shared.logging_config import log_round_error

logger = logging.getLogger("find_the_ball.engine")

Listener = Callable[[RoundSnapshot], None]

REVEAL_TIMER = "reveal"
DISPLAY_TIMER = "display"


class RoundEngine:
    """
    Single owner of the round lifecycle.

    Usage
    -----
        engine = RoundEngine(oracle=DemoOracle(), settings=EngineSettings())
        round_id = await engine.start_round()   # ball is now revealing
        ...                                     # reveal timer hides it
        outcome = engine.submit_guess(1)
        engine.acknowledge()

    Must be used from a running event loop.
    """

    def __init__(
        self,
        oracle: PositionOracle,
        settings: Optional[EngineSettings] = None,
    ):
        self.oracle = oracle
        self.settings = settings or EngineSettings()
        self.rounds_started = 0
        self.last_error: Optional[OracleError] = None

        self._round: Optional[Round] = None
        self._oracle_task: Optional[asyncio.Task] = None
        self._ready: Optional[asyncio.Future] = None
        self._timers = PhaseTimer()
        self._listeners: List[Listener] = []

    # ── Presentation-facing state ────────────────────────────

    @property
    def phase(self) -> RoundPhase:
        if self._round is None:
            return RoundPhase.IDLE
        return self._round.phase

    @property
    def round_id(self) -> Optional[str]:
        return self._round.round_id if self._round else None

    @property
    def board_size(self) -> int:
        return self.settings.board_size

    @property
    def position_visible(self) -> bool:
        return self.phase == RoundPhase.REVEALING

    @property
    def visible_position(self) -> Optional[int]:
        """The ball position, only while it is being revealed."""
        if self._round is not None and self._round.phase == RoundPhase.REVEALING:
            return self._round.ball_position
        return None

    @property
    def outcome(self) -> Outcome:
        if self._round is not None and self._round.phase == RoundPhase.RESOLVED:
            return self._round.outcome
        return Outcome.NONE

    def snapshot(self) -> RoundSnapshot:
        return RoundSnapshot(
            round_id=self.round_id,
            phase=self.phase.value,
            position_visible=self.position_visible,
            visible_position=self.visible_position,
            outcome=self.outcome.value,
            board_size=self.board_size,
        )

    def pending_timers(self) -> List[str]:
        """Names of the timed transitions still waiting to fire."""
        return [entry["name"] for entry in self._timers.pending()]

    def add_listener(self, listener: Listener) -> None:
        """Call ``listener(snapshot)`` after every phase change."""
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ── Operations ───────────────────────────────────────────

    async def start_round(self) -> str:
        """
        Start a round and wait until its ball is revealed.

        Returns:
            The round id. If a round is already active, its id is
            returned at once and no oracle call is made. If the round
            is cancelled while the oracle call is in flight, its id is
            returned and the phase is ``aborted``.

        Raises:
            OracleUnavailable: The oracle could not be reached (round aborted)
            OracleResponseInvalid: The oracle answer was unusable (round aborted)
        """
        current = self._round
        if current is not None and current.is_active:
            logger.debug(f"[{current.round_id}] start_round ignored, round in flight")
            return current.round_id

        loop = asyncio.get_running_loop()

        # A resolved round may still have its display timer pending
        self._timers.clear()

        rnd = Round(board_size=self.settings.board_size)
        self._round = rnd
        self.last_error = None
        self.rounds_started += 1
        rnd.advance(RoundEvent.START)

        ready = loop.create_future()
        self._ready = ready
        task = loop.create_task(
            self.oracle.fetch_position(), name=f"oracle-{rnd.round_id}"
        )
        task.add_done_callback(functools.partial(self._on_oracle_done, rnd.round_id))
        self._oracle_task = task
        self._notify()

        # The engine applies the oracle result itself; a cancelled caller
        # must not take the round down with it.
        return await asyncio.shield(ready)

    def submit_guess(self, index: int) -> Outcome:
        """
        Guess which cup hides the ball.

        Returns:
            Outcome.CORRECT or Outcome.INCORRECT. The round is resolved.

        Raises:
            NoActiveRound: No round, or the round is already over
            GuessNotAllowed: The ball has not been concealed yet
            InvalidGuessRange: ``index`` is not a cup; the round still
                accepts a guess
        """
        rnd = self._round
        if rnd is None or not rnd.is_active:
            raise NoActiveRound("submit guess", self.phase)
        if rnd.phase != RoundPhase.HIDDEN:
            raise GuessNotAllowed(rnd.phase)
        if isinstance(index, bool) or not isinstance(index, int) \
                or not 0 <= index < rnd.board_size:
            raise InvalidGuessRange(index, rnd.board_size)

        outcome = rnd.score(index)
        rnd.advance(RoundEvent.GUESS_ACCEPTED)
        logger.info(f"[{rnd.round_id}] Guess {index}: {outcome.value}")

        if self.settings.result_display_seconds is not None:
            self._timers.schedule(
                DISPLAY_TIMER,
                rnd.round_id,
                self.settings.result_display_seconds,
                self._on_display_expired,
            )
        self._notify()
        return outcome

    def cancel(self) -> RoundPhase:
        """
        Abort the active round, dropping its oracle call and timers.

        Raises:
            NoActiveRound: There is no round in flight
        """
        rnd = self._round
        if rnd is None or not rnd.is_active:
            raise NoActiveRound("cancel", self.phase)

        self._timers.clear()
        rnd.advance(RoundEvent.CANCEL)
        self._drop_oracle_task()
        self._settle_ready(rnd.round_id)
        logger.info(f"[{rnd.round_id}] Round cancelled")
        self._notify()
        return rnd.phase

    def acknowledge(self) -> RoundPhase:
        """Return a resolved or aborted round to idle. No-op otherwise."""
        rnd = self._round
        if rnd is None or not rnd.is_terminal:
            return self.phase

        self._timers.cancel(DISPLAY_TIMER)
        rnd.advance(RoundEvent.ACKNOWLEDGE)
        self._round = None
        self._notify()
        return RoundPhase.IDLE

    def close(self) -> None:
        """Cancel any round in flight and every pending timer."""
        if self._round is not None and self._round.is_active:
            self.cancel()
        self._timers.clear()
        self._drop_oracle_task()

    # ── Async completions ────────────────────────────────────

    def _on_oracle_done(self, round_id: str, task: asyncio.Task) -> None:
        result = self._result_of(task)
        try:
            rnd = self._current(round_id, RoundPhase.AWAITING_POSITION, "oracle resolution")
        except StaleTransition as e:
            logger.debug(str(e))
            return

        self._oracle_task = None
        error = result.error
        position = result.position
        if error is None:
            if isinstance(position, bool) or not isinstance(position, int):
                error = OracleResponseInvalid(
                    "Oracle returned no position", body=repr(position)
                )
            elif not 0 <= position < rnd.board_size:
                error = OracleResponseInvalid(
                    f"Position {position} is outside the board (size {rnd.board_size})",
                    body=position,
                )

        if error is not None:
            self._abort_on_oracle_failure(rnd, error)
            return

        rnd.ball_position = position
        rnd.advance(RoundEvent.POSITION_RECEIVED)
        self._timers.schedule(
            REVEAL_TIMER,
            rnd.round_id,
            self.settings.reveal_seconds,
            self._on_reveal_expired,
        )
        self._settle_ready(rnd.round_id)
        self._notify()

    def _on_reveal_expired(self, round_id: str) -> None:
        try:
            rnd = self._current(round_id, RoundPhase.REVEALING, "reveal timer")
        except StaleTransition as e:
            logger.debug(str(e))
            return

        rnd.advance(RoundEvent.REVEAL_EXPIRED)
        self._notify()

    def _on_display_expired(self, round_id: str) -> None:
        try:
            self._current(round_id, RoundPhase.RESOLVED, "display timer")
        except StaleTransition as e:
            logger.debug(str(e))
            return

        self.acknowledge()

    # ── Helpers ──────────────────────────────────────────────

    def _current(self, round_id: str, expected: RoundPhase, trigger: str) -> Round:
        """Return the current round if it is ``round_id`` in phase ``expected``."""
        rnd = self._round
        if rnd is None or rnd.round_id != round_id or rnd.phase != expected:
            raise StaleTransition(trigger, round_id, rnd.round_id if rnd else None)
        return rnd

    @staticmethod
    def _result_of(task: asyncio.Task) -> PositionResult:
        """Turn a finished oracle task into a PositionResult."""
        if task.cancelled():
            return PositionResult.failure(OracleUnavailable("Oracle call cancelled"))
        exc = task.exception()
        if exc is None:
            result = task.result()
            if not isinstance(result, PositionResult):
                return PositionResult.failure(OracleResponseInvalid(
                    f"Oracle returned {type(result).__name__}, not PositionResult",
                    body=repr(result),
                ))
            return result
        if isinstance(exc, OracleError):
            return PositionResult.failure(exc)
        logger.error("Oracle raised instead of reporting failure", exc_info=exc)
        return PositionResult.failure(
            OracleUnavailable(f"Oracle raised {exc.__class__.__name__}: {exc}")
        )

    def _abort_on_oracle_failure(self, rnd: Round, error: OracleError) -> None:
        error.round_id = rnd.round_id
        rnd.error = error
        self.last_error = error
        rnd.advance(RoundEvent.ORACLE_FAILED)
        log_round_error(error)

        ready = self._ready
        self._ready = None
        if ready is not None and not ready.done():
            ready.set_exception(error)
            # Mark retrieved: the awaiting caller may already be gone
            ready.exception()
        self._notify()

    def _settle_ready(self, round_id: str) -> None:
        ready = self._ready
        self._ready = None
        if ready is not None and not ready.done():
            ready.set_result(round_id)

    def _drop_oracle_task(self) -> None:
        task = self._oracle_task
        self._oracle_task = None
        if task is not None and not task.done():
            task.cancel()

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception(f"Listener {listener!r} failed")
