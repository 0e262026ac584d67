from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Iterator, Optional


@dataclass(slots=True)
class LastAlert:
    pct: float     # signed delta percent at fire time
    ts: int        # epoch ms


@dataclass(slots=True)
class SymbolRecord:
    """
    Mutable per-symbol state.

    window:       (ts_ms, price) pairs in arrival order
    high/low:     running extrema over every price seen since start
    prior_*:      extrema as they stood before the latest tick was applied
    cooldown_until: epoch ms; 0 means armed from the start
    """
    high_of_day: float
    low_of_day: float
    prior_high: float = 0.0
    prior_low: float = 0.0
    window: deque[tuple[int, float]] = field(default_factory=deque)
    last_alert: Optional[LastAlert] = None
    cooldown_until: int = 0

    def __post_init__(self) -> None:
        self.prior_high = self.high_of_day
        self.prior_low = self.low_of_day

    @property
    def size(self) -> int:
        return len(self.window)

    def last_price(self) -> float | None:
        return self.window[-1][1] if self.window else None

    def last_ts(self) -> int | None:
        return self.window[-1][0] if self.window else None

    def cooling(self, now_ms: int) -> bool:
        return now_ms < self.cooldown_until


class SymbolStore:
    """
    Owns one SymbolRecord per symbol. Built empty; records are created lazily
    by the window maintainer on a symbol's first tick.
    """
    def __init__(self) -> None:
        self._records: dict[str, SymbolRecord] = {}

    def get(self, symbol: str) -> Optional[SymbolRecord]:
        return self._records.get(symbol)

    def get_or_create(self, symbol: str, price: float) -> SymbolRecord:
        rec = self._records.get(symbol)
        if rec is None:
            rec = SymbolRecord(high_of_day=price, low_of_day=price)
            self._records[symbol] = rec
        return rec

    def symbols(self) -> list[str]:
        return list(self._records)

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)
