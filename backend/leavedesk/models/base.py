from __future__ import annotations

import time
import uuid
from datetime import UTC, datetime


def now_utc() -> datetime:
    """Return the current UTC time."""
    return datetime.now(UTC)


def generate_document_id(prefix: str) -> str:
    """Return ``<prefix>_<epoch millis>_<8 random hex chars>``.

    Globally unique without a shared counter: the timestamp orders ids roughly
    by creation and the random suffix separates ids minted in the same
    millisecond by different server threads or processes.
    """
    return f"{prefix}_{time.time_ns() // 1_000_000}_{uuid.uuid4().hex[:8]}"


def parse_timestamp(value: datetime | str) -> datetime:
    """Parse a stored ISO-8601 timestamp, treating naive values as UTC."""
    parsed = value if isinstance(value, datetime) else datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
