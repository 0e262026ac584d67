from __future__ import annotations
from typing import Any
from pricewatch.utils.types import Tick
from pricewatch.utils.time import normalize_epoch_ms, utc_now_ms

def parse_trade_msg(m: Any) -> list[Tick]:
    """
    Return the Ticks in a Finnhub trade message; [] for anything else.

    Finnhub trade frame:
      {"type": "trade",
       "data": [{"s": "AAPL", "p": 189.22, "t": 1700000000123, "v": 100}, ...]}

    Entries without a symbol or a positive price are dropped. A missing
    timestamp falls back to the local clock.
    """
    if not isinstance(m, dict) or m.get("type") != "trade":
        return []
    data = m.get("data")
    if not isinstance(data, list):
        return []

    out: list[Tick] = []
    for d in data:
        if not isinstance(d, dict):
            continue
        sym = d.get("s")
        px = d.get("p")
        if not sym or not isinstance(px, (int, float)) or isinstance(px, bool) or px <= 0:
            continue
        t = d.get("t")
        ts = normalize_epoch_ms(t) if isinstance(t, (int, float)) and not isinstance(t, bool) else utc_now_ms()
        out.append(Tick(symbol=str(sym).strip().upper(), ts=ts, price=float(px)))
    return out
