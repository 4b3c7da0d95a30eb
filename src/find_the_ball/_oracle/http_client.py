# Area: Oracle
"""
find_the_ball._oracle.http_client — HTTP position oracle
========================================================

Fetches the ball position with one HTTP GET per round. The blocking
``requests`` call runs in a worker thread so the event loop keeps
serving the rest of the game while the round waits.

No retries and no caching: every round needs a fresh answer, and the
engine decides what to do with a failure.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import requests

from ..errors import OracleUnavailable, OracleResponseInvalid
from ..oracle import PositionOracle, PositionResult
from .parsing import parse_position

logger = logging.getLogger("find_the_ball.oracle")


class HttpPositionOracle(PositionOracle):
    """Position oracle backed by a plain HTTP endpoint."""

    def __init__(
        self,
        url: str,
        timeout_seconds: float = 5.0,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the HTTP oracle.

        Args:
            url: Endpoint returning the position (e.g. ``"1"``)
            timeout_seconds: Connect/read timeout for each request
            session: Optional requests session (connection reuse, tests)
        """
        self.url = url
        self.timeout_seconds = timeout_seconds
        self._session = session or requests.Session()

    async def fetch_position(self) -> PositionResult:
        return await asyncio.to_thread(self._fetch_blocking)

    def _fetch_blocking(self) -> PositionResult:
        logger.debug("GET %s", self.url)
        try:
            response = self._session.get(self.url, timeout=self.timeout_seconds)
        except requests.RequestException as e:
            logger.warning(f"Oracle unreachable: {e}")
            return PositionResult.failure(
                OracleUnavailable(f"Could not reach oracle at {self.url}: {e}")
            )

        if not 200 <= response.status_code < 300:
            logger.warning(f"Oracle answered HTTP {response.status_code}")
            return PositionResult.failure(
                OracleUnavailable(
                    f"Oracle answered HTTP {response.status_code}",
                    status_code=response.status_code,
                )
            )

        try:
            position = parse_position(response.text)
        except OracleResponseInvalid as e:
            logger.warning(f"Oracle body rejected: {e}")
            return PositionResult.failure(e)

        logger.debug("Oracle position: %d", position)
        return PositionResult.success(position)

    def close(self) -> None:
        """Close the underlying session."""
        self._session.close()
