from datetime import datetime, time
from zoneinfo import ZoneInfo

import pytest

from pricewatch.utils.market_hours import TradingHours, parse_hhmm

CHI = ZoneInfo("America/Chicago")


def ms(y, mo, d, h, mi, s=0, tz=CHI):
    return int(datetime(y, mo, d, h, mi, s, tzinfo=tz).timestamp() * 1000)


def test_parse_hhmm():
    assert parse_hhmm("08:30") == time(8, 30)
    assert parse_hhmm(" 15:00 ") == time(15, 0)
    for bad in ("8", "25:00", "ab:cd", ""):
        with pytest.raises(ValueError):
            parse_hhmm(bad)


def test_contains_is_inclusive_at_both_ends():
    hours = TradingHours()
    assert hours.contains(ms(2024, 3, 5, 8, 30))
    assert hours.contains(ms(2024, 3, 5, 15, 0))
    assert not hours.contains(ms(2024, 3, 5, 8, 29, 59))
    assert not hours.contains(ms(2024, 3, 5, 15, 0, 1))


def test_contains_uses_configured_zone():
    ny = TradingHours(open=time(9, 30), close=time(16, 0), tz_name="America/New_York")
    # 09:45 in New York is 08:45 in Chicago
    t = ms(2024, 7, 9, 9, 45, tz=ZoneInfo("America/New_York"))
    assert ny.contains(t)
    assert TradingHours().contains(t)
    # 15:30 Chicago is 16:30 New York
    t2 = ms(2024, 7, 9, 15, 30)
    assert not ny.contains(t2)
