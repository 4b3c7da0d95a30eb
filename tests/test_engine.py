# Area: Engine Tests
"""Tests for RoundEngine — round lifecycle, single-flight start, staleness."""

import asyncio
import gc

import pytest

from find_the_ball._engine.engine import RoundEngine, REVEAL_TIMER, DISPLAY_TIMER
from find_the_ball._engine.enums import RoundPhase, Outcome
from find_the_ball.config import EngineSettings
from find_the_ball.errors import (
    GuessNotAllowed,
    InvalidGuessRange,
    NoActiveRound,
    OracleResponseInvalid,
    OracleUnavailable,
)
from find_the_ball.oracle import PositionOracle, PositionResult


FAST = EngineSettings(board_size=3, reveal_seconds=0.05)
SLOW = EngineSettings(board_size=3, reveal_seconds=30)
SETTLE = 0.25


class ScriptedOracle(PositionOracle):
    """Returns the scripted results in order. Counts calls.

    Items may be ints, PositionResults or exceptions to raise. With a
    ``gate`` the call waits until the gate is set.
    """

    def __init__(self, *results, gate=None):
        self.results = list(results)
        self.calls = 0
        self.gate = gate

    async def fetch_position(self):
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        item = self.results.pop(0)
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, PositionResult):
            return item
        return PositionResult.success(item)


class RawOracle(PositionOracle):
    """Breaks the contract by returning a bare value."""

    def __init__(self, value):
        self.value = value

    async def fetch_position(self):
        return self.value


class LateOracle(PositionOracle):
    """Ignores cancellation and answers anyway, like a slow server."""

    def __init__(self, position, gate):
        self.position = position
        self.gate = gate

    async def fetch_position(self):
        try:
            await self.gate.wait()
        except asyncio.CancelledError:
            pass
        return PositionResult.success(self.position)


async def _play_until_hidden(engine):
    round_id = await engine.start_round()
    await asyncio.sleep(SETTLE)
    assert engine.phase == RoundPhase.HIDDEN
    return round_id


class TestHappyPath:
    """Full rounds from start to outcome."""

    def test_correct_guess(self):
        async def scenario():
            engine = RoundEngine(ScriptedOracle(1), FAST)
            seen = {}

            round_id = await engine.start_round()
            seen["phase_after_start"] = engine.phase
            seen["visible"] = engine.visible_position
            seen["position_visible"] = engine.position_visible

            await asyncio.sleep(SETTLE)
            seen["phase_after_timer"] = engine.phase
            seen["visible_after_timer"] = engine.visible_position

            outcome = engine.submit_guess(1)
            return engine, round_id, outcome, seen

        engine, round_id, outcome, seen = asyncio.run(scenario())

        assert seen["phase_after_start"] == RoundPhase.REVEALING
        assert seen["visible"] == 1
        assert seen["position_visible"] is True
        assert seen["phase_after_timer"] == RoundPhase.HIDDEN
        assert seen["visible_after_timer"] is None
        assert outcome == Outcome.CORRECT
        assert engine.phase == RoundPhase.RESOLVED
        assert engine.outcome == Outcome.CORRECT
        assert engine.round_id == round_id

    def test_incorrect_guess(self):
        async def scenario():
            engine = RoundEngine(ScriptedOracle(2), FAST)
            await _play_until_hidden(engine)
            return engine, engine.submit_guess(0)

        engine, outcome = asyncio.run(scenario())
        assert outcome == Outcome.INCORRECT
        assert engine.outcome == Outcome.INCORRECT

    @pytest.mark.parametrize("position", [0, 1, 2])
    @pytest.mark.parametrize("guess", [0, 1, 2])
    def test_outcome_correct_iff_guess_matches(self, position, guess):
        async def scenario():
            engine = RoundEngine(ScriptedOracle(position), FAST)
            await _play_until_hidden(engine)
            return engine.submit_guess(guess)

        outcome = asyncio.run(scenario())
        expected = Outcome.CORRECT if guess == position else Outcome.INCORRECT
        assert outcome == expected

    def test_position_hidden_after_reveal(self):
        async def scenario():
            engine = RoundEngine(ScriptedOracle(1), FAST)
            await _play_until_hidden(engine)
            hidden = engine.snapshot()
            engine.submit_guess(1)
            resolved = engine.snapshot()
            return hidden, resolved

        hidden, resolved = asyncio.run(scenario())
        for snap in (hidden, resolved):
            assert snap["visible_position"] is None
            assert snap["position_visible"] is False
        assert resolved["outcome"] == "correct"

    def test_acknowledge_returns_to_idle(self):
        async def scenario():
            engine = RoundEngine(ScriptedOracle(1), FAST)
            await _play_until_hidden(engine)
            engine.submit_guess(1)
            return engine, engine.acknowledge()

        engine, phase = asyncio.run(scenario())
        assert phase == RoundPhase.IDLE
        assert engine.phase == RoundPhase.IDLE
        assert engine.round_id is None
        assert engine.outcome == Outcome.NONE

    def test_acknowledge_is_noop_while_active(self):
        async def scenario():
            engine = RoundEngine(ScriptedOracle(1), FAST)
            await _play_until_hidden(engine)
            return engine.acknowledge()

        assert asyncio.run(scenario()) == RoundPhase.HIDDEN

    def test_result_display_window_auto_acknowledges(self):
        settings = EngineSettings(
            board_size=3, reveal_seconds=0.01, result_display_seconds=0.01
        )

        async def scenario():
            engine = RoundEngine(ScriptedOracle(0), settings)
            await _play_until_hidden(engine)
            engine.submit_guess(0)
            assert engine.pending_timers() == [DISPLAY_TIMER]
            await asyncio.sleep(SETTLE)
            return engine

        engine = asyncio.run(scenario())
        assert engine.phase == RoundPhase.IDLE

    def test_new_round_after_resolved(self):
        async def scenario():
            oracle = ScriptedOracle(1, 2)
            engine = RoundEngine(oracle, FAST)
            first = await _play_until_hidden(engine)
            engine.submit_guess(0)
            second = await engine.start_round()
            return oracle, engine, first, second

        oracle, engine, first, second = asyncio.run(scenario())
        assert first != second
        assert oracle.calls == 2
        assert engine.rounds_started == 2
        assert engine.outcome == Outcome.NONE


class TestSingleFlight:
    """Repeated start_round() while a round is active."""

    def test_second_start_returns_same_round_id(self):
        async def scenario():
            gate = asyncio.Event()
            oracle = ScriptedOracle(1, gate=gate)
            engine = RoundEngine(oracle, SLOW)

            first = asyncio.create_task(engine.start_round())
            await asyncio.sleep(0)
            second_id = await engine.start_round()
            gate.set()
            first_id = await first
            engine.close()
            return oracle, engine, first_id, second_id

        oracle, engine, first_id, second_id = asyncio.run(scenario())
        assert first_id == second_id
        assert oracle.calls == 1
        assert engine.rounds_started == 1

    def test_burst_of_starts_creates_one_round(self):
        async def scenario():
            oracle = ScriptedOracle(2)
            engine = RoundEngine(oracle, SLOW)
            ids = await asyncio.gather(*(engine.start_round() for _ in range(10)))
            engine.close()
            return oracle, engine, ids

        oracle, engine, ids = asyncio.run(scenario())
        assert len(set(ids)) == 1
        assert oracle.calls == 1
        assert engine.rounds_started == 1

    def test_start_while_revealing_is_noop(self):
        async def scenario():
            oracle = ScriptedOracle(1)
            engine = RoundEngine(oracle, SLOW)
            first = await engine.start_round()
            again = await engine.start_round()
            phase = engine.phase
            engine.close()
            return oracle, first, again, phase

        oracle, first, again, phase = asyncio.run(scenario())
        assert first == again
        assert phase == RoundPhase.REVEALING
        assert oracle.calls == 1

    def test_start_while_hidden_is_noop(self):
        async def scenario():
            oracle = ScriptedOracle(1)
            engine = RoundEngine(oracle, FAST)
            first = await _play_until_hidden(engine)
            again = await engine.start_round()
            return oracle, engine, first, again

        oracle, engine, first, again = asyncio.run(scenario())
        assert first == again
        assert engine.phase == RoundPhase.HIDDEN
        assert oracle.calls == 1


class TestOracleFailure:
    """Oracle failures abort the round and reach the caller."""

    def test_non_2xx_aborts_round(self):
        failure = PositionResult.failure(
            OracleUnavailable("Oracle answered HTTP 500", status_code=500)
        )

        async def scenario():
            engine = RoundEngine(ScriptedOracle(failure), FAST)
            with pytest.raises(OracleUnavailable) as exc_info:
                await engine.start_round()
            await asyncio.sleep(SETTLE)
            return engine, exc_info.value

        engine, error = asyncio.run(scenario())
        assert engine.phase == RoundPhase.ABORTED
        assert engine.visible_position is None
        assert engine.pending_timers() == []
        assert error.round_id == engine.round_id
        assert engine.last_error is error

    def test_invalid_body_aborts_round(self):
        failure = PositionResult.failure(OracleResponseInvalid("bad", body="x"))

        async def scenario():
            engine = RoundEngine(ScriptedOracle(failure), FAST)
            with pytest.raises(OracleResponseInvalid):
                await engine.start_round()
            return engine

        engine = asyncio.run(scenario())
        assert engine.phase == RoundPhase.ABORTED

    def test_position_outside_board_is_invalid(self):
        async def scenario():
            engine = RoundEngine(ScriptedOracle(7), FAST)
            with pytest.raises(OracleResponseInvalid):
                await engine.start_round()
            return engine

        engine = asyncio.run(scenario())
        assert engine.phase == RoundPhase.ABORTED
        assert engine.pending_timers() == []

    def test_oracle_exception_becomes_unavailable(self):
        async def scenario():
            engine = RoundEngine(ScriptedOracle(RuntimeError("boom")), FAST)
            with pytest.raises(OracleUnavailable, match="boom"):
                await engine.start_round()
            return engine

        engine = asyncio.run(scenario())
        assert engine.phase == RoundPhase.ABORTED

    @pytest.mark.parametrize("value", [1, None, {"position": 1}])
    def test_non_result_return_aborts_round(self, value):
        async def scenario():
            engine = RoundEngine(RawOracle(value), FAST)
            with pytest.raises(OracleResponseInvalid, match="not PositionResult"):
                await asyncio.wait_for(engine.start_round(), 1.0)
            return engine

        engine = asyncio.run(scenario())
        assert engine.phase == RoundPhase.ABORTED
        assert engine.visible_position is None

    def test_failure_after_caller_gone_is_not_reported_unretrieved(self):
        failure = PositionResult.failure(OracleUnavailable("down"))

        async def scenario():
            reported = []
            asyncio.get_running_loop().set_exception_handler(
                lambda loop, context: reported.append(context.get("message", ""))
            )
            gate = asyncio.Event()
            engine = RoundEngine(ScriptedOracle(failure, gate=gate), SLOW)

            caller = asyncio.create_task(engine.start_round())
            await asyncio.sleep(0)
            caller.cancel()
            with pytest.raises(asyncio.CancelledError):
                await caller

            gate.set()
            await asyncio.sleep(SETTLE)
            gc.collect()
            await asyncio.sleep(0)
            return engine, reported

        engine, reported = asyncio.run(scenario())
        assert engine.phase == RoundPhase.ABORTED
        assert not [m for m in reported if "never retrieved" in m]

    def test_no_position_ever_exposed(self):
        failure = PositionResult.failure(OracleUnavailable("down"))
        snapshots = []

        async def scenario():
            engine = RoundEngine(ScriptedOracle(failure), FAST)
            engine.add_listener(snapshots.append)
            with pytest.raises(OracleUnavailable):
                await engine.start_round()

        asyncio.run(scenario())
        assert [s["phase"] for s in snapshots] == ["awaiting_position", "aborted"]
        assert all(s["visible_position"] is None for s in snapshots)

    def test_caller_may_retry_after_failure(self):
        failure = PositionResult.failure(OracleUnavailable("down"))

        async def scenario():
            oracle = ScriptedOracle(failure, 1)
            engine = RoundEngine(oracle, SLOW)
            with pytest.raises(OracleUnavailable):
                await engine.start_round()
            await engine.start_round()
            phase = engine.phase
            engine.close()
            return oracle, engine, phase

        oracle, engine, phase = asyncio.run(scenario())
        assert phase == RoundPhase.REVEALING
        assert oracle.calls == 2
        assert engine.last_error is None


class TestGuessRules:
    """submit_guess() phase and range checks."""

    def test_guess_with_no_round(self):
        engine = RoundEngine(ScriptedOracle(), FAST)
        with pytest.raises(NoActiveRound):
            engine.submit_guess(0)

    def test_guess_while_revealing_is_rejected(self):
        async def scenario():
            engine = RoundEngine(ScriptedOracle(1), SLOW)
            await engine.start_round()
            with pytest.raises(GuessNotAllowed) as exc_info:
                engine.submit_guess(1)
            phase = engine.phase
            engine.close()
            return exc_info.value, phase

        error, phase = asyncio.run(scenario())
        assert phase == RoundPhase.REVEALING
        assert error.phase == RoundPhase.REVEALING

    def test_guess_while_awaiting_position_is_rejected(self):
        async def scenario():
            gate = asyncio.Event()
            engine = RoundEngine(ScriptedOracle(1, gate=gate), SLOW)
            task = asyncio.create_task(engine.start_round())
            await asyncio.sleep(0)
            with pytest.raises(GuessNotAllowed):
                engine.submit_guess(1)
            gate.set()
            await task
            engine.close()

        asyncio.run(scenario())

    def test_guess_after_resolved_is_no_active_round(self):
        async def scenario():
            engine = RoundEngine(ScriptedOracle(1), FAST)
            await _play_until_hidden(engine)
            engine.submit_guess(1)
            with pytest.raises(NoActiveRound) as exc_info:
                engine.submit_guess(1)
            return engine, exc_info.value

        engine, error = asyncio.run(scenario())
        assert type(error) is NoActiveRound
        assert engine.outcome == Outcome.CORRECT

    def test_guess_after_cancel_is_no_active_round(self):
        async def scenario():
            engine = RoundEngine(ScriptedOracle(1), FAST)
            await _play_until_hidden(engine)
            engine.cancel()
            with pytest.raises(NoActiveRound) as exc_info:
                engine.submit_guess(1)
            return exc_info.value

        error = asyncio.run(scenario())
        assert type(error) is NoActiveRound

    @pytest.mark.parametrize("bad_guess", [-1, 3, 99, "1", 1.0, None, True])
    def test_out_of_range_guess_keeps_round(self, bad_guess):
        async def scenario():
            engine = RoundEngine(ScriptedOracle(1), FAST)
            await _play_until_hidden(engine)
            with pytest.raises(InvalidGuessRange) as exc_info:
                engine.submit_guess(bad_guess)
            phase_after_bad = engine.phase
            outcome = engine.submit_guess(1)
            return exc_info.value, phase_after_bad, outcome

        error, phase_after_bad, outcome = asyncio.run(scenario())
        assert error.board_size == 3
        assert phase_after_bad == RoundPhase.HIDDEN
        assert outcome == Outcome.CORRECT


class TestCancel:
    """cancel() and stale async completions."""

    def test_cancel_with_no_round(self):
        engine = RoundEngine(ScriptedOracle(), FAST)
        with pytest.raises(NoActiveRound):
            engine.cancel()

    def test_cancel_after_resolved_is_no_active_round(self):
        async def scenario():
            engine = RoundEngine(ScriptedOracle(1), FAST)
            await _play_until_hidden(engine)
            engine.submit_guess(1)
            with pytest.raises(NoActiveRound):
                engine.cancel()
            return engine

        engine = asyncio.run(scenario())
        assert engine.phase == RoundPhase.RESOLVED

    def test_cancel_while_awaiting_position(self):
        async def scenario():
            gate = asyncio.Event()
            oracle = ScriptedOracle(1, gate=gate)
            engine = RoundEngine(oracle, FAST)
            task = asyncio.create_task(engine.start_round())
            await asyncio.sleep(0)
            phase = engine.cancel()
            returned = await task
            await asyncio.sleep(SETTLE)
            return engine, phase, returned

        engine, phase, returned = asyncio.run(scenario())
        assert phase == RoundPhase.ABORTED
        assert returned == engine.round_id
        assert engine.phase == RoundPhase.ABORTED
        assert engine.visible_position is None
        assert engine.pending_timers() == []

    def test_late_oracle_answer_after_cancel_is_ignored(self):
        async def scenario():
            gate = asyncio.Event()
            engine = RoundEngine(LateOracle(2, gate), FAST)
            snapshots = []
            engine.add_listener(snapshots.append)

            task = asyncio.create_task(engine.start_round())
            # One step for start_round, one for the oracle call to begin
            await asyncio.sleep(0)
            await asyncio.sleep(0)
            engine.cancel()
            await task
            await asyncio.sleep(SETTLE)
            return engine, snapshots

        engine, snapshots = asyncio.run(scenario())
        assert engine.phase == RoundPhase.ABORTED
        assert [s["phase"] for s in snapshots] == ["awaiting_position", "aborted"]

    def test_cancel_while_revealing_stops_hide_timer(self):
        async def scenario():
            engine = RoundEngine(ScriptedOracle(1), EngineSettings(reveal_seconds=0.05))
            await engine.start_round()
            assert engine.pending_timers() == [REVEAL_TIMER]
            engine.cancel()
            await asyncio.sleep(SETTLE)
            return engine

        engine = asyncio.run(scenario())
        assert engine.phase == RoundPhase.ABORTED
        assert engine.pending_timers() == []

    def test_cancel_while_hidden(self):
        async def scenario():
            engine = RoundEngine(ScriptedOracle(1), FAST)
            await _play_until_hidden(engine)
            return engine.cancel()

        assert asyncio.run(scenario()) == RoundPhase.ABORTED

    def test_stale_reveal_timer_does_not_touch_new_round(self):
        async def scenario():
            engine = RoundEngine(ScriptedOracle(1, 2), SLOW)
            old_id = await engine.start_round()
            engine.cancel()
            new_id = await engine.start_round()
            # Old round's timer firing late
            engine._on_reveal_expired(old_id)
            phase = engine.phase
            visible = engine.visible_position
            engine.close()
            return old_id, new_id, phase, visible

        old_id, new_id, phase, visible = asyncio.run(scenario())
        assert old_id != new_id
        assert phase == RoundPhase.REVEALING
        assert visible == 2

    def test_stale_display_timer_does_not_touch_new_round(self):
        async def scenario():
            engine = RoundEngine(ScriptedOracle(0, 1), FAST)
            old_id = await _play_until_hidden(engine)
            engine.submit_guess(0)
            await engine.start_round()
            engine._on_display_expired(old_id)
            phase = engine.phase
            engine.close()
            return phase

        assert asyncio.run(scenario()) == RoundPhase.REVEALING

    def test_acknowledge_after_abort(self):
        async def scenario():
            engine = RoundEngine(ScriptedOracle(1), FAST)
            await _play_until_hidden(engine)
            engine.cancel()
            return engine, engine.acknowledge()

        engine, phase = asyncio.run(scenario())
        assert phase == RoundPhase.IDLE
        assert engine.round_id is None


class TestListeners:
    """Snapshots pushed to the presentation layer."""

    def test_listener_sees_every_phase(self):
        snapshots = []

        async def scenario():
            engine = RoundEngine(ScriptedOracle(1), FAST)
            engine.add_listener(snapshots.append)
            await _play_until_hidden(engine)
            engine.submit_guess(1)
            engine.acknowledge()

        asyncio.run(scenario())
        assert [s["phase"] for s in snapshots] == [
            "awaiting_position", "revealing", "hidden", "resolved", "idle",
        ]
        revealing = snapshots[1]
        assert revealing["visible_position"] == 1
        for snap in snapshots:
            if snap["phase"] != "revealing":
                assert snap["visible_position"] is None

    def test_failing_listener_does_not_break_engine(self):
        def broken(snapshot):
            raise RuntimeError("render failed")

        async def scenario():
            engine = RoundEngine(ScriptedOracle(1), FAST)
            engine.add_listener(broken)
            await _play_until_hidden(engine)
            return engine.submit_guess(1)

        assert asyncio.run(scenario()) == Outcome.CORRECT

    def test_removed_listener_not_called(self):
        snapshots = []

        async def scenario():
            engine = RoundEngine(ScriptedOracle(1), SLOW)
            engine.add_listener(snapshots.append)
            engine.remove_listener(snapshots.append)
            await engine.start_round()
            engine.close()

        asyncio.run(scenario())
        assert snapshots == []

    def test_idle_snapshot(self):
        engine = RoundEngine(ScriptedOracle(), FAST)
        assert engine.snapshot() == {
            "round_id": None,
            "phase": "idle",
            "position_visible": False,
            "visible_position": None,
            "outcome": "none",
            "board_size": 3,
        }
