# src/pricewatch/alerts/rules.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from pricewatch.data.store import SymbolRecord
from pricewatch.indicators.signals import (
    MOMENTUM_HORIZON_MS,
    MOMENTUM_MIN_ACTIVITY,
    MOMENTUM_MIN_STEPS,
)
from pricewatch.utils.market_hours import TradingHours
from pricewatch.utils.types import Breakout, Severity


@dataclass(frozen=True, slots=True)
class AlertRules:
    """
    Thresholds and gates for the alert engine. Percent values are in percent
    units (2.0 == 2%), durations in milliseconds.

    - swing   → |delta| >= thresh_low
    - urgent  → |delta| >= thresh_high
    - dedup   → re-alert only once |delta| >= |last alert pct| + dedup_extra
    """
    window_ms: int = 10 * 60_000
    thresh_low: float = 2.0
    thresh_high: float = 4.0
    cooldown_ms: int = 5 * 60_000
    dedup_extra: float = 0.5
    trading_hours: TradingHours = field(default_factory=TradingHours)
    ignore_market_hours: bool = False
    momentum_horizon_ms: int = MOMENTUM_HORIZON_MS
    momentum_min_activity: float = MOMENTUM_MIN_ACTIVITY
    momentum_min_steps: int = MOMENTUM_MIN_STEPS


def detect_breakout(rec: SymbolRecord, price: float) -> Optional[Breakout]:
    """New extreme relative to the day's high/low before this tick."""
    if price > rec.prior_high:
        return "HOD"
    if price < rec.prior_low:
        return "LOD"
    return None


def classify_severity(delta_pct: float, thresh_high: float) -> Severity:
    return "urgent" if abs(delta_pct) >= thresh_high else "normal"


def dedup_blocks(rec: SymbolRecord, delta_pct: float, dedup_extra: float) -> bool:
    """True if the move has not grown enough past the last alert to re-alert."""
    if rec.last_alert is None:
        return False
    return abs(delta_pct) < abs(rec.last_alert.pct) + dedup_extra
