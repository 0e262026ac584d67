import asyncio
import random

import pytest

from pricewatch.ingest.simulator import SimConfig, TickSimulator


def test_initial_prices_in_base_range():
    sim = TickSimulator(["AAPL", "TSLA"], asyncio.Queue(), rng=random.Random(1))
    for p in sim.prices.values():
        assert 100.0 <= p < 150.0


def test_step_without_spike_stays_within_drift():
    cfg = SimConfig(spike_prob=0.0)
    sim = TickSimulator(["AAPL"], asyncio.Queue(), cfg, rng=random.Random(3))
    for _ in range(200):
        before = sim.prices["AAPL"]
        after = sim.step("AAPL")
        assert after == round(after, 2)
        # ±0.1% drift plus cent rounding
        assert abs(after - before) <= before * 0.001 + 0.006


def test_step_always_spiking_moves_2_to_5_pct():
    cfg = SimConfig(spike_prob=1.0, drift_pct=0.0)
    sim = TickSimulator(["AAPL"], asyncio.Queue(), cfg, rng=random.Random(5))
    for _ in range(30):
        before = sim.prices["AAPL"]
        after = sim.step("AAPL")
        move = abs(after - before) / before * 100
        assert 2.0 - 0.02 <= move <= 5.0 + 0.02


def test_emit_round_enqueues_one_tick_per_symbol():
    q = asyncio.Queue()
    sim = TickSimulator(["AAPL", "SPY"], q, rng=random.Random(9), clock=lambda: 1234)
    ticks = sim.emit_round()
    assert [t.symbol for t in ticks] == ["AAPL", "SPY"]
    assert all(t.ts == 1234 for t in ticks)
    assert q.qsize() == 2


def test_emit_round_drops_on_full_queue():
    q = asyncio.Queue(maxsize=1)
    sim = TickSimulator(["AAPL", "SPY"], q, rng=random.Random(9))
    assert len(sim.emit_round()) == 1
    assert q.qsize() == 1


@pytest.mark.asyncio
async def test_start_stop():
    q = asyncio.Queue()
    sim = TickSimulator(["AAPL"], q, SimConfig(interval_s=0.01), rng=random.Random(2))
    task = asyncio.create_task(sim.start())
    await asyncio.wait_for(q.get(), timeout=1.0)
    await sim.stop()
    await asyncio.wait_for(task, timeout=1.0)


@pytest.mark.asyncio
async def test_cancel_propagates():
    q = asyncio.Queue()
    sim = TickSimulator(["AAPL"], q, SimConfig(interval_s=0.01), rng=random.Random(4))
    task = asyncio.create_task(sim.start())
    await asyncio.wait_for(q.get(), timeout=1.0)
    task.cancel()
    await asyncio.wait([task], timeout=1.0)
    assert task.cancelled()
