from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass, field
from typing import Optional

import aiohttp
import structlog

from pricewatch.alerts.formatting import webhook_payload
from pricewatch.utils.types import AlertEvent

log = structlog.get_logger("webhook")

# --------- config ----------

@dataclass(frozen=True, slots=True)
class WebhookConfig:
    url: Optional[str]           # None → deliveries are dropped with a warning
    mode: str = "TEST"           # "TEST" | "PROD"
    headers: dict[str, str] = field(default_factory=dict)
    source: str = "finnhub"      # "finnhub" | "sim"
    timeout_s: float = 8.0

def config_from_env(*, sim: bool = False) -> WebhookConfig:
    """
    N8N_ENV picks N8N_WEBHOOK_URL_PROD or N8N_WEBHOOK_URL_TEST. The extra
    header is only sent when both N8N_HEADER_KEY and N8N_HEADER_VALUE are set.
    """
    mode = (os.getenv("N8N_ENV") or "TEST").upper()
    url = os.getenv("N8N_WEBHOOK_URL_PROD") if mode == "PROD" else os.getenv("N8N_WEBHOOK_URL_TEST")
    key = os.getenv("N8N_HEADER_KEY")
    value = os.getenv("N8N_HEADER_VALUE")
    headers = {key: value} if key and value else {}
    return WebhookConfig(
        url=url or None,
        mode=mode,
        headers=headers,
        source="sim" if sim else "finnhub",
    )

# --------- client ----------

class WebhookNotifier:
    """
    Fire-and-forget JSON POST of each alert to the n8n webhook.

    deliver() schedules one task per event on the running loop and returns.
    No retries: non-2xx responses and network errors are logged and the
    delivery is dropped.
    """
    def __init__(self, cfg: WebhookConfig, session: Optional[aiohttp.ClientSession] = None):
        self.cfg = cfg
        self._session = session
        self._owns_session = session is None
        self._inflight: set[asyncio.Task] = set()

    async def start(self) -> None:
        if self._session is None:
            timeout = aiohttp.ClientTimeout(total=self.cfg.timeout_s)
            self._session = aiohttp.ClientSession(timeout=timeout)

    async def stop(self) -> None:
        for t in list(self._inflight):
            t.cancel()
        if self._inflight:
            await asyncio.gather(*self._inflight, return_exceptions=True)
        if self._session and self._owns_session:
            await self._session.close()
            self._session = None

    def deliver(self, evt: AlertEvent) -> None:
        if not self.cfg.url:
            log.warning("webhook_url_missing", mode=self.cfg.mode, symbol=evt.symbol,
                        hint="set N8N_WEBHOOK_URL_TEST/N8N_WEBHOOK_URL_PROD")
            return
        if self._session is None:
            log.warning("webhook_not_started", mode=self.cfg.mode, symbol=evt.symbol)
            return
        task = asyncio.get_running_loop().create_task(self._send(evt), name=f"webhook-{evt.symbol}")
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _send(self, evt: AlertEvent) -> bool:
        headers = {"content-type": "application/json", **self.cfg.headers}
        payload = webhook_payload(evt, self.cfg.source)
        try:
            async with self._session.post(self.cfg.url, json=payload, headers=headers) as resp:
                if 200 <= resp.status < 300:
                    return True
                detail = await _maybe_text(resp)
                log.error("webhook_http_error", mode=self.cfg.mode, status=resp.status, body=detail)
                return False
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            log.error("webhook_send_failed", mode=self.cfg.mode, err=str(e) or type(e).__name__)
            return False

async def _maybe_text(resp: aiohttp.ClientResponse) -> str:
    try:
        return await resp.text()
    except Exception:
        return ""
