import pytest

from pricewatch.data.store import SymbolStore
from pricewatch.data.window import WindowMaintainer
from pricewatch.indicators.signals import delta_percent, momentum_ok, momentum_stats


def feed(points, window_ms=10 * 60_000, symbol="AAPL"):
    store = SymbolStore()
    wm = WindowMaintainer(store, window_ms)
    for t, p in points:
        wm.record_tick(symbol, t, p)
    return store.get(symbol)


def test_delta_percent_two_points():
    rec = feed([(0, 100.0), (60_000, 102.0)])
    assert delta_percent(rec) == pytest.approx(2.0)


def test_delta_percent_needs_two_points():
    assert delta_percent(None) is None
    assert delta_percent(feed([(0, 100.0)])) is None


def test_delta_percent_uses_retained_window_only():
    # the 50.0 tick falls out of a 1-minute window
    rec = feed([(0, 50.0), (90_000, 100.0), (120_000, 97.0)], window_ms=60_000)
    assert delta_percent(rec) == pytest.approx(-3.0)


def test_momentum_four_same_direction_steps():
    px = 100.0
    pts = [(0, px)]
    for i in range(1, 5):
        px *= 1.0025        # +0.25% per step
        pts.append((i * 10_000, px))
    rec = feed(pts)
    activity, direction = momentum_stats(rec)
    assert direction == 4
    assert activity == pytest.approx(1.0, rel=1e-6)
    assert momentum_ok(rec) is True


def test_momentum_two_steps_is_not_enough():
    rec = feed([(0, 100.0), (10_000, 100.25), (20_000, 100.5)])
    assert momentum_ok(rec) is False


def test_momentum_down_moves_count_by_magnitude():
    px = 100.0
    pts = [(0, px)]
    for i in range(1, 5):
        px *= 0.997
        pts.append((i * 5_000, px))
    rec = feed(pts)
    _, direction = momentum_stats(rec)
    assert direction == -4
    assert momentum_ok(rec) is True


def test_momentum_flat_steps_do_not_count_toward_direction():
    rec = feed([(0, 100.0), (1_000, 100.0), (2_000, 101.0), (3_000, 101.0), (4_000, 102.0)])
    activity, direction = momentum_stats(rec)
    assert direction == 2
    assert activity > 0.6
    assert momentum_ok(rec) is False


def test_momentum_ignores_points_outside_horizon():
    # three early up-steps are more than 60s before the latest tick
    pts = [(0, 100.0), (1_000, 101.0), (2_000, 102.0), (3_000, 103.0),
           (120_000, 103.0), (121_000, 103.5)]
    rec = feed(pts)
    activity, direction = momentum_stats(rec)
    assert direction == 1
    assert momentum_ok(rec) is False


def test_momentum_choppy_activity_without_direction():
    rec = feed([(0, 100.0), (1_000, 101.0), (2_000, 100.0), (3_000, 101.0), (4_000, 100.0)])
    activity, direction = momentum_stats(rec)
    assert activity > 0.6
    assert direction == 0
    assert momentum_ok(rec) is False


def test_momentum_none_or_single_point():
    assert momentum_ok(None) is False
    assert momentum_ok(feed([(0, 100.0)])) is False


def test_momentum_thresholds_are_tunable():
    rec = feed([(0, 100.0), (10_000, 100.25), (20_000, 100.5)])
    assert momentum_ok(rec, min_activity=0.4, min_steps=2) is True
