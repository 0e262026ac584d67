from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from pricewatch.alerts.rules import AlertRules
from pricewatch.utils.market_hours import DEFAULT_TZ, TradingHours, parse_hhmm
from pricewatch.utils.time import minutes_to_ms

DEFAULT_WATCHLIST = "AAPL,TSLA,PLTR,SPY"


def env_flag(value: Optional[str]) -> bool:
    """'1' / 'true' (any case) → True; everything else, including unset → False."""
    return (value or "").strip().lower() in ("1", "true")


def parse_watchlist(value: str) -> list[str]:
    return [s.strip().upper() for s in value.split(",") if s.strip()]


def _float(env: Mapping[str, str], name: str, default: str) -> float:
    raw = env.get(name) or default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e


@dataclass(frozen=True, slots=True)
class Settings:
    """Process-wide settings, read once at startup."""
    symbols: list[str]
    rules: AlertRules
    finnhub_token: Optional[str] = None
    sim_mode: bool = False
    log_level: str = "INFO"

    @property
    def hours_gated(self) -> bool:
        return not self.rules.ignore_market_hours


def settings_from_env(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from the environment (after load_dotenv()).
    Raises ValueError for malformed numbers or HH:MM times.
    """
    env = os.environ if env is None else env

    sim = env_flag(env.get("SIM_MODE"))
    ignore_hours = env_flag(env.get("IGNORE_MARKET_HOURS"))

    window_min = _float(env, "WINDOW_MIN", "10")
    if window_min <= 0:
        raise ValueError("WINDOW_MIN must be > 0")

    hours = TradingHours(
        open=parse_hhmm(env.get("MARKET_OPEN_CST") or "08:30"),
        close=parse_hhmm(env.get("MARKET_CLOSE_CST") or "15:00"),
        tz_name=env.get("MARKET_TZ") or DEFAULT_TZ,
    )

    rules = AlertRules(
        window_ms=minutes_to_ms(window_min),
        thresh_low=_float(env, "THRESHLOW", "2"),
        thresh_high=_float(env, "THRESHHIGH", "4"),
        cooldown_ms=minutes_to_ms(_float(env, "COOLDOWN_MIN", "5")),
        dedup_extra=_float(env, "DEDUP_EXTRA", "0.5"),
        trading_hours=hours,
        # simulated ticks run off-hours by design
        ignore_market_hours=ignore_hours or sim,
    )

    return Settings(
        symbols=parse_watchlist(env.get("WATCHLIST") or DEFAULT_WATCHLIST),
        rules=rules,
        finnhub_token=env.get("FINNHUB_TOKEN") or None,
        sim_mode=sim,
        log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
    )
