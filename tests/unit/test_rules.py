from pricewatch.alerts.rules import classify_severity, dedup_blocks, detect_breakout
from pricewatch.data.store import LastAlert, SymbolRecord
from pricewatch.utils.types import RuleHit


def test_severity_boundary():
    assert classify_severity(4.0, 4.0) == "urgent"
    assert classify_severity(-4.0, 4.0) == "urgent"
    assert classify_severity(3.99, 4.0) == "normal"
    assert classify_severity(-3.99, 4.0) == "normal"


def test_rule_label_order_and_empty():
    assert RuleHit().label == ""
    assert RuleHit().any() is False
    assert RuleHit(swing=True).label == "swing"
    assert RuleHit(momentum=True).label == "momentum"
    assert RuleHit(breakout="LOD", momentum=True).label == "breakout_LOD+momentum"
    assert RuleHit(breakout="HOD", swing=True, momentum=True).label == "breakout_HOD+swing+momentum"


def test_detect_breakout_against_prior_extrema():
    rec = SymbolRecord(high_of_day=101.0, low_of_day=99.0)
    rec.prior_high, rec.prior_low = 100.0, 99.5
    assert detect_breakout(rec, 100.01) == "HOD"
    assert detect_breakout(rec, 99.4) == "LOD"
    assert detect_breakout(rec, 100.0) is None
    assert detect_breakout(rec, 99.5) is None


def test_dedup_margin():
    rec = SymbolRecord(high_of_day=1.0, low_of_day=1.0)
    assert dedup_blocks(rec, 0.1, 0.5) is False
    rec.last_alert = LastAlert(pct=3.0, ts=0)
    assert dedup_blocks(rec, 3.4, 0.5) is True
    assert dedup_blocks(rec, -3.4, 0.5) is True
    assert dedup_blocks(rec, 3.6, 0.5) is False
    # magnitude only: a reversal of the same size is still blocked
    rec.last_alert = LastAlert(pct=-3.0, ts=0)
    assert dedup_blocks(rec, 3.2, 0.5) is True
    assert dedup_blocks(rec, -3.6, 0.5) is False
