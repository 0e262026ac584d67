from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass
from typing import Optional

import structlog

from pricewatch.utils.time import Clock, utc_now_ms
from pricewatch.utils.types import Tick

log = structlog.get_logger("simulator")


@dataclass(slots=True)
class SimConfig:
    """
    Random-walk tick generator for off-hours testing.

    Each interval, per symbol: drift uniformly in ±drift_pct/2 percent, and
    with probability spike_prob jump by spike_min_pct..spike_max_pct percent
    in a random direction. Prices are rounded to cents.
    """
    interval_s: float = 1.0
    base_min: float = 100.0
    base_span: float = 50.0
    drift_pct: float = 0.2
    spike_prob: float = 0.05
    spike_min_pct: float = 2.0
    spike_max_pct: float = 5.0


class TickSimulator:
    def __init__(
        self,
        symbols: list[str],
        ticks_queue: asyncio.Queue,
        cfg: Optional[SimConfig] = None,
        *,
        rng: Optional[random.Random] = None,
        clock: Clock = utc_now_ms,
    ):
        self.symbols = symbols
        self.q_ticks = ticks_queue
        self.cfg = cfg or SimConfig()
        self._rng = rng or random.Random()
        self._clock = clock
        self._stop = asyncio.Event()
        self.prices: dict[str, float] = {
            s: self.cfg.base_min + self._rng.random() * self.cfg.base_span for s in symbols
        }

    def step(self, symbol: str) -> float:
        """Advance one symbol's price by one interval."""
        c = self.cfg
        price = self.prices[symbol]
        drift = (self._rng.random() - 0.5) * c.drift_pct
        price *= 1 + drift / 100
        if self._rng.random() < c.spike_prob:
            sign = -1 if self._rng.random() < 0.5 else 1
            spike = sign * (c.spike_min_pct + self._rng.random() * (c.spike_max_pct - c.spike_min_pct))
            price *= 1 + spike / 100
        price = round(price, 2)
        self.prices[symbol] = price
        return price

    def emit_round(self) -> list[Tick]:
        """Enqueue one tick per symbol, each stamped from the clock."""
        out: list[Tick] = []
        for s in self.symbols:
            t = Tick(symbol=s, ts=self._clock(), price=self.step(s))
            try:
                self.q_ticks.put_nowait(t)
                out.append(t)
            except asyncio.QueueFull:
                log.info("ticks_queue_full_drop", symbol=s)
        return out

    async def start(self) -> None:
        log.info("sim_started", symbols=self.symbols, interval_s=self.cfg.interval_s)
        try:
            while not self._stop.is_set():
                self.emit_round()
                try:
                    await asyncio.wait_for(self._stop.wait(), timeout=self.cfg.interval_s)
                except asyncio.TimeoutError:
                    pass
        except asyncio.CancelledError:
            log.info("sim_cancelled")
            raise

    async def stop(self) -> None:
        self._stop.set()
