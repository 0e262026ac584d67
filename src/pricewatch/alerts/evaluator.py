from __future__ import annotations

import asyncio
from typing import Optional

import structlog

from pricewatch.alerts.notifiers import AlertSink
from pricewatch.alerts.rules import AlertRules, classify_severity, dedup_blocks, detect_breakout
from pricewatch.data.store import LastAlert, SymbolStore
from pricewatch.data.window import WindowMaintainer
from pricewatch.indicators.signals import delta_percent, momentum_ok
from pricewatch.utils.time import Clock, utc_now_ms
from pricewatch.utils.types import AlertEvent, RuleHit, Tick

log = structlog.get_logger("engine")


class AlertEngine:
    """
    Per-tick streaming evaluation: window update → signals → decision → sink.

    Inputs:
      - q_ticks: asyncio.Queue[Tick]  (only needed for start()/stop())
      - sink:    AlertSink            (fire-and-forget delivery)
      - clock:   Callable[[], int]    epoch ms; read once per tick

    Gates, in order: trading hours, >= 2 window points, cooldown.
    A symbol is Cooling while now < cooldown_until and Armed otherwise.
    """
    def __init__(
        self,
        rules: AlertRules,
        sink: AlertSink,
        *,
        store: Optional[SymbolStore] = None,
        q_ticks: Optional[asyncio.Queue] = None,
        clock: Clock = utc_now_ms,
    ):
        self.rules = rules
        self.sink = sink
        self.store = store if store is not None else SymbolStore()
        self.window = WindowMaintainer(self.store, rules.window_ms)
        self.q_ticks = q_ticks
        self.clock = clock
        self.fired = 0
        self._stop = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    # ---------------- lifecycle ----------------

    async def start(self) -> None:
        if self.q_ticks is None:
            raise RuntimeError("AlertEngine.start() needs a ticks queue")
        self._task = asyncio.create_task(self._loop(), name="alert-engine")

    async def stop(self) -> None:
        self._stop.set()
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

    async def _loop(self) -> None:
        assert self.q_ticks is not None
        try:
            while not self._stop.is_set():
                tick = await self.q_ticks.get()
                try:
                    self.process_tick(tick)
                except Exception:
                    # one bad tick must not stop the stream
                    log.exception("tick_processing_failed", symbol=getattr(tick, "symbol", None))
        except asyncio.CancelledError:
            return

    # ---------------- core ----------------

    def process_tick(self, tick: Tick, now: Optional[int] = None) -> Optional[AlertEvent]:
        """
        Ingestion entry point. Runs one full pass for the tick using a single
        captured `now` and dispatches the alert, if any, to the sink.
        """
        now = self.clock() if now is None else now
        self.window.record_tick(tick.symbol, tick.ts, tick.price)
        evt = self.evaluate(tick.symbol, now)
        if evt is not None:
            self._dispatch(evt)
        return evt

    def evaluate(self, symbol: str, now: int) -> Optional[AlertEvent]:
        """
        Decide whether `symbol` alerts at `now`. On a fire, records the alert
        and arms the cooldown before returning the event.
        """
        r = self.rules
        if not r.ignore_market_hours and not r.trading_hours.contains(now):
            return None

        rec = self.store.get(symbol)
        if rec is None or rec.size < 2:
            return None
        if rec.cooling(now):
            return None

        last = rec.window[-1][1]
        delta = delta_percent(rec)
        if delta is None:
            return None

        hit = RuleHit(
            breakout=detect_breakout(rec, last),
            swing=abs(delta) >= r.thresh_low,
            momentum=momentum_ok(
                rec,
                horizon_ms=r.momentum_horizon_ms,
                min_activity=r.momentum_min_activity,
                min_steps=r.momentum_min_steps,
            ),
        )
        if not hit.any():
            return None
        if dedup_blocks(rec, delta, r.dedup_extra):
            log.debug("alert_dedup_blocked", symbol=symbol, delta=round(delta, 4),
                      last_pct=round(rec.last_alert.pct, 4))
            return None

        rec.last_alert = LastAlert(pct=delta, ts=now)
        rec.cooldown_until = now + r.cooldown_ms
        self.fired += 1

        return AlertEvent(
            symbol=symbol,
            price=last,
            ts=now,
            rule=hit,
            change_pct=round(delta, 2),
            severity=classify_severity(delta, r.thresh_high),
        )

    def _dispatch(self, evt: AlertEvent) -> None:
        log.info("alert_fired", symbol=evt.symbol, rule=evt.rule.label,
                 change_pct=evt.change_pct, severity=evt.severity, price=evt.price)
        try:
            self.sink.deliver(evt)
        except Exception as e:
            # state stays as fired; delivery is best-effort
            log.warning("alert_sink_failed", symbol=evt.symbol, err=str(e))
