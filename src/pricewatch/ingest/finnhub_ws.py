from __future__ import annotations

import asyncio
import json
import random
from dataclasses import dataclass

import structlog
from websockets.asyncio.client import connect as ws_connect
from websockets.exceptions import ConnectionClosed

from pricewatch.utils.types import Tick
from pricewatch.ingest import parser  # must expose parse_trade_msg(dict)->list[Tick]

FINNHUB_WS_URL = "wss://ws.finnhub.io"


@dataclass(slots=True)
class FinnhubWSConfig:
    token: str
    symbols: list[str]
    base_url: str = FINNHUB_WS_URL
    # reconnect: fixed base plus a random spread, no growth
    reconnect_base_s: float = 2.0
    reconnect_spread_s: float = 3.0
    # timeouts
    open_timeout_s: float = 10.0
    ping_interval_s: float = 20.0

    @property
    def url(self) -> str:
        return f"{self.base_url}?token={self.token}"


class FinnhubWS:
    """
    Finnhub trades WebSocket client.

    Lifecycle:
      - Connect → subscribe (one message per symbol) → stream
      - On close or error, wait reconnect_base_s + U(0, reconnect_spread_s) and reconnect
      - Trade frames are parsed to Ticks and enqueued without blocking.

    Usage:
        cfg = FinnhubWSConfig(token=..., symbols=["AAPL", "TSLA"])
        client = FinnhubWS(cfg, q_ticks)
        await client.start()   # runs until cancelled/stop() called
    """

    def __init__(self, cfg: FinnhubWSConfig, ticks_queue: asyncio.Queue):
        self.cfg = cfg
        self.q_ticks = ticks_queue
        self._log = structlog.get_logger("finnhub_ws")
        self._stop = asyncio.Event()
        self._ws = None

        self.connected: bool = False
        self.subscribed: bool = False
        self.dropped: int = 0

    # ---------------------------- public API ---------------------------- #

    async def start(self) -> None:
        while not self._stop.is_set():
            try:
                await self._connect_and_stream()
            except asyncio.CancelledError:
                self._log.info("ws_cancelled")
                raise
            except Exception as e:
                if self._stop.is_set():
                    break
                self._log.warning("ws_error", err=str(e))
            if self._stop.is_set():
                break
            delay = self._reconnect_delay()
            self._log.info("ws_reconnect_scheduled", delay_s=round(delay, 3))
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=delay)
            except asyncio.TimeoutError:
                pass
        self._log.info("ws_loop_exit")

    async def stop(self) -> None:
        self._stop.set()
        if self._ws is not None and hasattr(self._ws, "close"):
            try:
                await self._ws.close()
            except Exception as e:
                self._log.debug("ws_close_error", err=str(e))

    # --------------------------- core internals ------------------------- #

    async def _connect_and_stream(self) -> None:
        self._reset_state()
        self._log.info("ws_connecting", url=self.cfg.base_url)
        async with ws_connect(
            self.cfg.url,
            open_timeout=self.cfg.open_timeout_s,
            ping_interval=self.cfg.ping_interval_s,
        ) as ws:
            self._ws = ws
            self.connected = True
            self._log.info("ws_connected", symbols=self.cfg.symbols)
            await self._subscribe(ws)
            await self._stream_loop(ws)

    async def _subscribe(self, ws) -> None:
        for sym in self.cfg.symbols:
            await ws.send(json.dumps({"type": "subscribe", "symbol": sym}))
        self.subscribed = True
        self._log.info("ws_subscribed", symbols=self.cfg.symbols)

    async def _stream_loop(self, ws) -> None:
        while not self._stop.is_set():
            try:
                raw = await ws.recv()
            except ConnectionClosed as e:
                self._log.warning("ws_closed", code=getattr(e, "code", None), reason=str(e))
                return

            try:
                msg = json.loads(raw)
            except (TypeError, ValueError) as e:
                self._log.warning("ws_json_error", err=str(e))
                continue

            for tick in parser.parse_trade_msg(msg):
                self._enqueue_tick(tick)

            if isinstance(msg, dict) and msg.get("type") == "error":
                self._log.warning("finnhub_stream_error", msg=msg.get("msg"))

        self._log.info("ws_stream_loop_exit")

    # --------------------------- helpers -------------------------------- #

    def _enqueue_tick(self, t: Tick) -> None:
        try:
            self.q_ticks.put_nowait(t)
        except asyncio.QueueFull:
            # keep the socket drained; losing a trade is acceptable
            self.dropped += 1
            self._log.info("ticks_queue_full_drop", symbol=t.symbol)

    def _reconnect_delay(self) -> float:
        return self.cfg.reconnect_base_s + random.random() * self.cfg.reconnect_spread_s

    def _reset_state(self) -> None:
        self.connected = False
        self.subscribed = False
        self._ws = None
