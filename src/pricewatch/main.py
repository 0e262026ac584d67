# src/pricewatch/main.py
import asyncio
import logging
import os
import sys

import structlog
from dotenv import load_dotenv

from pricewatch.config import Settings, settings_from_env
from pricewatch.alerts.evaluator import AlertEngine
from pricewatch.alerts.formatting import format_alert_pretty
from pricewatch.alerts.notifiers import ConsoleNotifier, FanoutNotifier
from pricewatch.ingest.finnhub_ws import FinnhubWS, FinnhubWSConfig
from pricewatch.ingest.simulator import TickSimulator
from pricewatch.notify.webhook import WebhookNotifier, config_from_env

load_dotenv()
log = structlog.get_logger()


def configure_logging(level: str) -> None:
    level_no = logging.getLevelName(level)
    if not isinstance(level_no, int):
        level_no = logging.INFO
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(level_no))


def build_tick_source(settings: Settings, q_ticks: asyncio.Queue):
    """Simulator in SIM mode, Finnhub otherwise. None if live mode lacks a token."""
    if settings.sim_mode:
        return TickSimulator(settings.symbols, q_ticks)
    if not settings.finnhub_token:
        return None
    return FinnhubWS(FinnhubWSConfig(token=settings.finnhub_token, symbols=settings.symbols), q_ticks)


# ---------------------------
# Main
# ---------------------------

async def main() -> int:
    settings = settings_from_env()
    configure_logging(settings.log_level)

    webhook_cfg = config_from_env(sim=settings.sim_mode)
    log.info(
        "boot",
        mode=webhook_cfg.mode,
        sim=settings.sim_mode,
        hours_gated=settings.hours_gated,
        symbols=settings.symbols,
        python=sys.version.split()[0],
        wd=os.getcwd(),
    )

    q_ticks: asyncio.Queue = asyncio.Queue(maxsize=10_000)

    source = build_tick_source(settings, q_ticks)
    if source is None:
        log.error("finnhub_token_missing", hint="set FINNHUB_TOKEN or SIM_MODE=1")
        return 1

    tz_name = settings.rules.trading_hours.tz_name
    console = ConsoleNotifier(format_fn=lambda e: format_alert_pretty(e, tz_name))
    webhook = WebhookNotifier(webhook_cfg)
    await webhook.start()

    engine = AlertEngine(settings.rules, FanoutNotifier(console, webhook), q_ticks=q_ticks)
    await engine.start()

    try:
        await source.start()
    finally:
        log.info("shutdown", alerts_fired=engine.fired)
        for obj in (source, engine, webhook):
            try:
                await obj.stop()
            except Exception as e:
                log.warning("stop_failed", component=type(obj).__name__, err=str(e))
    return 0


def run() -> None:
    try:
        code = asyncio.run(main())
    except KeyboardInterrupt:
        code = 0
    sys.exit(code)


if __name__ == "__main__":
    run()
