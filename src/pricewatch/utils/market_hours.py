from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time as dtime
from zoneinfo import ZoneInfo

DEFAULT_TZ = "America/Chicago"

# Regular session expressed in Central time (09:30-16:00 NY)
DEFAULT_OPEN = dtime(8, 30)
DEFAULT_CLOSE = dtime(15, 0)


def parse_hhmm(value: str) -> dtime:
    """'08:30' -> time(8, 30). Raises ValueError on anything else."""
    try:
        hh, mm = value.strip().split(":")
        return dtime(int(hh), int(mm))
    except (AttributeError, TypeError, ValueError) as e:
        raise ValueError(f"expected HH:MM, got {value!r}") from e


@dataclass(frozen=True, slots=True)
class TradingHours:
    """
    Time-of-day gate for alerting. No holiday or weekday awareness: the
    window is applied to every calendar day in `tz_name`.
    """
    open: dtime = DEFAULT_OPEN
    close: dtime = DEFAULT_CLOSE
    tz_name: str = DEFAULT_TZ

    def local_time(self, now_ms: int) -> dtime:
        tz = ZoneInfo(self.tz_name)
        return datetime.fromtimestamp(now_ms / 1000.0, tz).time()

    def contains(self, now_ms: int) -> bool:
        """True if `now_ms` falls inside [open, close], both ends inclusive."""
        t = self.local_time(now_ms)
        return self.open <= t <= self.close
