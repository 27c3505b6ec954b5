from __future__ import annotations

from datetime import timezone


def test_utc_now_is_timezone_aware():
    from mrp.common.time import utc_now

    out = utc_now()
    assert out.tzinfo is not None
    assert out.utcoffset() == timezone.utc.utcoffset(out)


def test_current_year_matches_utc_now():
    from mrp.common.time import current_year, utc_now

    y = current_year()
    assert isinstance(y, int)
    assert abs(y - utc_now().year) <= 1
