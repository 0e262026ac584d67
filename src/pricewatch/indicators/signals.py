# src/pricewatch/indicators/signals.py
from __future__ import annotations

from typing import Optional

import numpy as np

from pricewatch.data.store import SymbolRecord

# ----------------------------
# Momentum defaults
# ----------------------------
MOMENTUM_HORIZON_MS = 60_000   # look back 60s from the latest tick
MOMENTUM_MIN_ACTIVITY = 0.6    # sum of |step %| over the horizon
MOMENTUM_MIN_STEPS = 3         # |net up-steps minus down-steps|


def delta_percent(rec: Optional[SymbolRecord]) -> Optional[float]:
    """Percent change from oldest to newest price in the window, None if < 2 points."""
    if rec is None or rec.size < 2:
        return None
    first = rec.window[0][1]
    last = rec.window[-1][1]
    return (last - first) / first * 100.0


def _horizon_prices(rec: SymbolRecord, horizon_ms: int) -> np.ndarray:
    latest = rec.window[-1][0]
    cutoff = latest - horizon_ms
    return np.fromiter(
        (p for t, p in rec.window if t >= cutoff),
        dtype=np.float64,
    )


def momentum_stats(rec: Optional[SymbolRecord], horizon_ms: int = MOMENTUM_HORIZON_MS) -> tuple[float, int]:
    """
    (activity, direction) over the short horizon:
      activity  = sum of |Δp / p_prev| * 100 over consecutive pairs
      direction = sum of sign(Δp); flat steps count 0
    """
    if rec is None or rec.size < 2:
        return 0.0, 0
    px = _horizon_prices(rec, horizon_ms)
    if px.size < 2:
        return 0.0, 0
    d = np.diff(px)
    activity = float(np.sum(np.abs(d / px[:-1])) * 100.0)
    direction = int(np.sum(np.sign(d)))
    return activity, direction


def momentum_ok(
    rec: Optional[SymbolRecord],
    *,
    horizon_ms: int = MOMENTUM_HORIZON_MS,
    min_activity: float = MOMENTUM_MIN_ACTIVITY,
    min_steps: int = MOMENTUM_MIN_STEPS,
) -> bool:
    activity, direction = momentum_stats(rec, horizon_ms)
    return activity >= min_activity and abs(direction) >= min_steps
