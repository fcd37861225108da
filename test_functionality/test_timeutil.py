import pytest

from agent.tools.timeutil import describe_datetime, parse_datetime, to_pacific, utc_date


def test_naive_datetimes_are_utc():
    assert parse_datetime("2024-01-15T18:00:00").utcoffset().total_seconds() == 0


def test_pacific_rendering_tracks_daylight_saving():
    assert to_pacific("2024-01-15T18:00:00Z") == "Mon Jan 15 2024 10:00:00 GMT-0800 (PST)"
    assert to_pacific("2024-07-01T17:00:00+00:00") == "Mon Jul 01 2024 10:00:00 GMT-0700 (PDT)"


def test_unparseable_input():
    with pytest.raises(ValueError):
        to_pacific("tomorrow at noon")
    assert describe_datetime("tomorrow at noon") == "tomorrow at noon"


def test_utc_date_crosses_midnight():
    assert utc_date("2024-03-10T23:30:00-08:00") == "2024-03-11"
