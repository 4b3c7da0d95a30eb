# Area: Oracle
"""
find_the_ball.oracle — The position oracle contract
===================================================

The oracle is the authority that decides where the ball is for a round.
The engine asks it once per round and never caches the answer.

Subclass PositionOracle and implement ``fetch_position()``:

    class MyOracle(PositionOracle):
        async def fetch_position(self) -> PositionResult:
            return PositionResult.success(1)

Failures (unreachable server, bad status, unreadable body) are reported
inside the PositionResult, not raised. Retrying is the caller's job: the
engine aborts the round and the player starts a new one.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from .errors import OracleError


@dataclass(frozen=True)
class PositionResult:
    """Either a non-negative ball position or the error that prevented one."""
    position: Optional[int] = None
    error: Optional[OracleError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.position is not None

    @classmethod
    def success(cls, position: int) -> "PositionResult":
        return cls(position=position)

    @classmethod
    def failure(cls, error: OracleError) -> "PositionResult":
        return cls(error=error)


class PositionOracle(ABC):
    """
    Abstract base class for position sources.

    Implementations must be safe to call once per round and must not
    block the event loop.
    """

    @abstractmethod
    async def fetch_position(self) -> PositionResult:
        """
        Ask for the ball position of a new round.

        Returns
        -------
        PositionResult
            ``PositionResult.success(n)`` with ``n >= 0``, or
            ``PositionResult.failure(err)`` with an OracleError.
        """
        raise NotImplementedError
