# Area: Engine
"""
find_the_ball._engine.phase_timer — Delayed phase transitions
=============================================================

Tracks the pending timed transitions of the current round (the reveal
window, the result display window). Each timer remembers the round it
was scheduled for so the engine can tell a stale firing from a live one.
Timers are ``loop.call_later`` handles and must be scheduled from the
event loop thread.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, List, Optional

logger = logging.getLogger("find_the_ball.phase_timer")


class PhaseTimer:
    """
    Pending timed transitions keyed by timer name.

    Each entry stores the round id it belongs to, the delay it was set
    for and the loop handle that will fire it.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop
        self._timers: Dict[str, dict] = {}

    def schedule(
        self,
        name: str,
        round_id: str,
        delay_seconds: float,
        callback: Callable[[str], None],
    ) -> None:
        """Schedule (or replace) a timer. ``callback`` receives the round id."""
        self.cancel(name)
        loop = self._loop or asyncio.get_running_loop()
        handle = loop.call_later(delay_seconds, self._fire, name, round_id, callback)
        self._timers[name] = {
            "round_id": round_id,
            "delay_seconds": delay_seconds,
            "handle": handle,
        }
        logger.debug("Timer set: %s for %s (%.2fs)", name, round_id, delay_seconds)

    def _fire(self, name: str, round_id: str, callback: Callable[[str], None]) -> None:
        entry = self._timers.get(name)
        if entry is not None and entry["round_id"] == round_id:
            del self._timers[name]
        callback(round_id)

    def cancel(self, name: str) -> None:
        """Cancel a timer. No-op if not found."""
        entry = self._timers.pop(name, None)
        if entry is not None:
            entry["handle"].cancel()
            logger.debug("Timer cancelled: %s for %s", name, entry["round_id"])

    def clear(self) -> None:
        """Cancel all pending timers."""
        for entry in self._timers.values():
            entry["handle"].cancel()
        self._timers.clear()
        logger.debug("All timers cleared")

    def pending(self) -> List[dict]:
        """Return ``{"name", "round_id"}`` for every timer not yet fired."""
        return [
            {"name": name, "round_id": entry["round_id"]}
            for name, entry in self._timers.items()
        ]

    def is_pending(self, name: str) -> bool:
        return name in self._timers
