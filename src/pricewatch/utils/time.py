from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Callable

# Anything returning epoch milliseconds; injected into the engine so tests
# can drive a synthetic clock.
Clock = Callable[[], int]

def utc_now_ms() -> int:
    """Unix epoch milliseconds (int)."""
    return time.time_ns() // 1_000_000

def minutes_to_ms(minutes: float) -> int:
    return int(float(minutes) * 60 * 1000)

def utc_dt(ts_ms: int) -> datetime:
    """Epoch milliseconds -> timezone-aware UTC datetime."""
    return datetime.fromtimestamp(ts_ms / 1000.0, tz=timezone.utc)

def normalize_epoch_ms(ts: float | int) -> int:
    """
    Best-effort unit normalization to epoch milliseconds.
    Finnhub sends ms; tolerate seconds and nanoseconds.
    """
    if ts > 1e17:   # ns
        return int(ts // 1_000_000)
    if ts < 1e11:   # s
        return int(ts * 1000)
    return int(ts)
