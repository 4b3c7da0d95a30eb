# Area: Oracle
"""
Position oracle clients.

This package contains:
- HTTP oracle backed by requests
- Response body parsing
"""

from .http_client import HttpPositionOracle
from .parsing import parse_position

__all__ = [
    "HttpPositionOracle",
    "parse_position",
]
