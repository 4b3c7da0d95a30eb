# Area: Shared
"""
find_the_ball._shared.ids — Identifier and timestamp helpers
============================================================
"""

import uuid
from datetime import datetime, timezone


def generate_round_id(prefix: str = "round") -> str:
    """Generate unique round ID.

    Format: prefix-YYYYMMDD-<32 hex chars>
    """
    date_part = datetime.now().strftime("%Y%m%d")
    return f"{prefix}-{date_part}-{uuid.uuid4().hex}"


def current_timestamp() -> str:
    """Generate ISO 8601 timestamp with timezone."""
    return datetime.now(timezone.utc).isoformat()
