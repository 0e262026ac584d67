# src/pricewatch/alerts/notifiers.py
from __future__ import annotations
import structlog
from typing import Callable, Optional, Protocol

from pricewatch.utils.types import AlertEvent

log = structlog.get_logger("notifier")

class AlertSink(Protocol):
    """
    One-way delivery of decided alerts. deliver() returns immediately and
    must not raise; failures are the sink's to log.
    """
    def deliver(self, evt: AlertEvent) -> None: ...

class ConsoleNotifier:
    def __init__(self, format_fn: Optional[Callable[[AlertEvent], str]] = None):
        self._format_fn = format_fn

    def deliver(self, evt: AlertEvent) -> None:
        if self._format_fn:
            try:
                print(self._format_fn(evt), flush=True)
                return
            except Exception as e:
                log.warning("console_format_failed", err=str(e))
        # fallback (raw)
        print(f"[ALERT] {evt.symbol} {evt.rule.label} {evt.severity} "
              f"pct={evt.change_pct} px={evt.price}", flush=True)

class FanoutNotifier:
    """Deliver to every sink; one failing sink does not starve the others."""
    def __init__(self, *sinks: AlertSink):
        self.sinks = list(sinks)

    def deliver(self, evt: AlertEvent) -> None:
        for s in self.sinks:
            try:
                s.deliver(evt)
            except Exception as e:
                log.warning("sink_deliver_failed", sink=type(s).__name__, err=str(e))
