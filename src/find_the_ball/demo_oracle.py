# Area: Oracle
"""
find_the_ball.demo_oracle — Demo position oracle
================================================

A ready-to-use PositionOracle that works without any server. Picks a
random cup locally, optionally after a simulated network delay.

Usage:
    from find_the_ball import DemoOracle, RoundEngine

    engine = RoundEngine(oracle=DemoOracle(board_size=3))
"""

import asyncio
import random
from typing import Optional

from .oracle import PositionOracle, PositionResult


class DemoOracle(PositionOracle):
    """
    Demo implementation of PositionOracle using a local random generator.

    Pass ``seed`` for a reproducible sequence of positions.
    """

    def __init__(
        self,
        board_size: int = 3,
        seed: Optional[int] = None,
        latency_seconds: float = 0.0,
    ):
        if board_size < 1:
            raise ValueError(f"board_size must be positive, got {board_size}")
        self.board_size = board_size
        self.latency_seconds = latency_seconds
        self._random = random.Random(seed)

    async def fetch_position(self) -> PositionResult:
        if self.latency_seconds > 0:
            await asyncio.sleep(self.latency_seconds)
        return PositionResult.success(self._random.randrange(self.board_size))
