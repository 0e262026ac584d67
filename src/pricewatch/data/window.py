from __future__ import annotations

from pricewatch.data.store import SymbolRecord, SymbolStore


class WindowMaintainer:
    """
    Keeps each symbol's trailing price window and day extrema current.

    Eviction compares the oldest entries against a cutoff derived from the
    tick just inserted. Out-of-order ticks are accepted as-is: if timestamps
    regress, entries evicted against a newer cutoff stay evicted and the
    window is not re-sorted.
    """
    def __init__(self, store: SymbolStore, window_ms: int):
        if window_ms <= 0:
            raise ValueError("window_ms must be > 0")
        self.store = store
        self.window_ms = int(window_ms)

    def record_tick(self, symbol: str, ts: int, price: float) -> SymbolRecord:
        rec = self.store.get_or_create(symbol, price)

        # breakout compares against the extrema before this tick
        rec.prior_high = rec.high_of_day
        rec.prior_low = rec.low_of_day

        rec.window.append((ts, price))

        cutoff = ts - self.window_ms
        w = rec.window
        while w and w[0][0] < cutoff:
            w.popleft()

        if price > rec.high_of_day:
            rec.high_of_day = price
        if price < rec.low_of_day:
            rec.low_of_day = price
        return rec
