# Area: Oracle
"""
find_the_ball._oracle.parsing — Oracle body parsing
===================================================

The oracle answers with one integer position. Accepted bodies:

    "1"                  plain text (surrounding whitespace ignored)
    1                    a JSON integer
    {"position": 1}      a JSON object with an integer "position"

Anything else raises OracleResponseInvalid.
"""

from __future__ import annotations

import json
import re
from typing import Any

from ..errors import OracleResponseInvalid

_PLAIN_INT = re.compile(r"^\+?\d+$")


def parse_position(body: Any) -> int:
    """
    Parse an oracle response body into a ball position.

    Args:
        body: Response body as ``str`` or ``bytes``

    Returns:
        The position as a non-negative int

    Raises:
        OracleResponseInvalid: If the body does not hold exactly one
            non-negative integer
    """
    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            raise OracleResponseInvalid("Response body is not UTF-8", body=repr(body))

    if not isinstance(body, str):
        raise OracleResponseInvalid(
            f"Unexpected response body type: {type(body).__name__}", body=repr(body)
        )

    text = body.strip()
    if not text:
        raise OracleResponseInvalid("Empty response body", body=body)

    if _PLAIN_INT.match(text):
        try:
            return int(text)
        except ValueError:
            # Past the interpreter's int digit limit
            raise OracleResponseInvalid(
                f"Position has too many digits ({len(text)})", body=text[:64]
            )

    try:
        data = json.loads(text)
    except ValueError:
        raise OracleResponseInvalid("Response body is not a position", body=body)

    if isinstance(data, dict):
        if "position" not in data:
            raise OracleResponseInvalid("JSON body has no 'position' field", body=body)
        data = data["position"]

    # bool is an int subclass; true/false are not positions
    if isinstance(data, bool) or not isinstance(data, int):
        raise OracleResponseInvalid(
            f"Position must be an integer, got {type(data).__name__}", body=body
        )
    if data < 0:
        raise OracleResponseInvalid(f"Position must be non-negative, got {data}", body=body)
    return data
