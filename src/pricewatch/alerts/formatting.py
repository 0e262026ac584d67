from __future__ import annotations
from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

from pricewatch.utils.types import AlertEvent

def _fmt_ts(ts_ms: int, tz_name: str) -> str:
    tz = ZoneInfo(tz_name)
    return datetime.fromtimestamp(ts_ms / 1000.0, tz).strftime("%H:%M:%S %Z")  # e.g., 11:28:30 CDT

def webhook_payload(evt: AlertEvent, source: str) -> dict[str, Any]:
    """JSON body expected by the downstream n8n flow."""
    return {
        "symbol": evt.symbol,
        "price": evt.price,
        "ts": evt.ts,
        "source": source,
        "rule": evt.rule.label,
        "changePct": evt.change_pct,
        "severity": evt.severity,
    }

def format_alert_pretty(evt: AlertEvent, tz_name: str = "America/Chicago") -> str:
    arrow = "↑" if evt.change_pct >= 0 else "↓"
    tag = "URGENT" if evt.severity == "urgent" else "ALERT"
    return (
        f"[{tag} {evt.symbol}] {_fmt_ts(evt.ts, tz_name)} {arrow} {evt.change_pct:+.2f}% "
        f"@ {evt.price:.2f}  |  {evt.rule.label}"
    )
