"""
Utility functions for timestamps and group naming
"""
import time
from datetime import datetime, timezone


def now_ms() -> int:
    """Current time in milliseconds since the epoch"""
    return int(time.time() * 1000)


def iso_timestamp() -> str:
    """Current UTC time as ISO-8601 with millisecond precision"""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def group_name(stream_id: str) -> str:
    """Broadcast group (room) name for a stream"""
    return f"stream-{stream_id}"
