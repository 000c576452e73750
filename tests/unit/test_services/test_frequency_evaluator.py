"""Tests for the frequency evaluator."""

import pytest
from datetime import date, time, timedelta
from src.models.asset import Asset
from src.models.frequency import build_frequency_spec
from src.services.frequency_evaluator import fires, occurrence_index


def _days(start: date, count: int):
    return [start + timedelta(days=offset) for offset in range(count)]


@pytest.mark.unit
def test_specific_days_over_four_weeks():
    """Test Mon/Wed/Fri fires exactly on those weekdays."""
    asset = Asset(
        id="unit-1",
        property_id="prop-1",
        base_frequency="specific_days",
        base_days=[1, 3, 5],
        base_times=["09:00"],
    )

    fired = [d for d in _days(date(2025, 1, 5), 28) if fires(asset.base_schedule, d).fires]

    assert len(fired) == 12
    # python weekday(): Monday = 0
    assert all(d.weekday() in (0, 2, 4) for d in fired)


@pytest.mark.unit
def test_every_other_day_parity_from_anchor():
    """Test every_other_day alternates starting on the anchor."""
    spec = build_frequency_spec("every_other_day", times=["09:00"], anchor_date=date(2025, 1, 1))

    assert fires(spec, date(2025, 1, 1)).fires is True
    assert fires(spec, date(2025, 1, 2)).fires is False
    assert fires(spec, date(2025, 1, 3)).fires is True
    assert fires(spec, date(2025, 1, 4)).fires is False
    assert fires(spec, date(2025, 1, 5)).fires is True
    # dates before the anchor stay in phase
    assert fires(spec, date(2024, 12, 30)).fires is True
    assert fires(spec, date(2024, 12, 31)).fires is False


@pytest.mark.unit
def test_every_other_day_without_anchor_uses_epoch():
    """Test epoch parity when no anchor is configured."""
    spec = build_frequency_spec("every_other_day", times=["09:00"])
    day = date(2025, 1, 1)
    expected = (day - date(1970, 1, 1)).days % 2 == 0

    assert fires(spec, day).fires is expected
    assert fires(spec, day + timedelta(days=1)).fires is not expected


@pytest.mark.unit
def test_weekly_fires_once_per_week():
    """Test weekly fires only on its weekday."""
    spec = build_frequency_spec("weekly", times=["08:00"], weekday="wednesday")

    fired = [d for d in _days(date(2025, 1, 5), 14) if fires(spec, d).fires]

    assert fired == [date(2025, 1, 8), date(2025, 1, 15)]


@pytest.mark.unit
def test_multi_daily_emits_all_times():
    """Test 2x_daily fires with both times in order."""
    spec = build_frequency_spec("2x_daily", times=["09:00", "15:00"])

    decision = fires(spec, date(2025, 1, 6))

    assert decision.fires is True
    assert decision.times == (time(9, 0), time(15, 0))
    assert decision.warning is None


@pytest.mark.unit
def test_multi_daily_time_mismatch_warns():
    """Test 2x_daily with one time never fires and warns."""
    spec = build_frequency_spec("2x_daily", times=["09:00"])

    decision = fires(spec, date(2025, 1, 6))

    assert decision.fires is False
    assert "2x_daily" in decision.warning


@pytest.mark.unit
def test_empty_specific_days_warns():
    """Test specific_days with no days never fires and warns."""
    spec = build_frequency_spec("specific_days", times=["09:00"], days=[])

    decision = fires(spec, date(2025, 1, 6))

    assert decision.fires is False
    assert "specific_days" in decision.warning


@pytest.mark.unit
def test_unknown_frequency_warns():
    """Test unknown frequencies never fire."""
    decision = fires(build_frequency_spec("fortnightly"), date(2025, 1, 6))

    assert decision.fires is False
    assert "fortnightly" in decision.warning


@pytest.mark.unit
def test_twice_weekly_monday_thursday():
    """Test twice_weekly fires Mondays and Thursdays."""
    spec = build_frequency_spec("twice_weekly", times=["09:00"])

    fired = [d for d in _days(date(2025, 1, 5), 7) if fires(spec, d).fires]

    assert fired == [date(2025, 1, 6), date(2025, 1, 9)]


@pytest.mark.unit
def test_biweekly_skips_alternate_weeks():
    """Test biweekly fires every second week from its anchor."""
    spec = build_frequency_spec("biweekly", times=["09:00"], anchor_date=date(2025, 1, 6))

    fired = [d for d in _days(date(2025, 1, 5), 35) if fires(spec, d).fires]

    assert fired == [date(2025, 1, 6), date(2025, 1, 20), date(2025, 2, 3)]


@pytest.mark.unit
@pytest.mark.parametrize("day_of_month,on_date,expected", [
    (15, date(2025, 3, 15), True),
    (15, date(2025, 3, 16), False),
    (31, date(2025, 2, 28), True),
    (31, date(2024, 2, 29), True),
    (31, date(2024, 2, 28), False),
    (30, date(2025, 4, 30), True),
])
def test_monthly_clamps_to_month_end(day_of_month, on_date, expected):
    """Test monthly day 31 fires on the last day of short months."""
    spec = build_frequency_spec("monthly", times=["09:00"], day_of_month=day_of_month)

    assert fires(spec, on_date).fires is expected


@pytest.mark.unit
def test_daily_when_occupied():
    """Test daily_when_occupied follows occupancy."""
    spec = build_frequency_spec("daily_when_occupied", times=["09:00"])

    assert fires(spec, date(2025, 1, 6), occupied=True).fires is True
    assert fires(spec, date(2025, 1, 6), occupied=False).fires is False


@pytest.mark.unit
def test_fixed_dates():
    """Test explicit fire dates."""
    spec = build_frequency_spec("dates", times=["09:00"], dates=["2025-02-14", "2025-12-25"])

    assert fires(spec, date(2025, 2, 14)).fires is True
    assert fires(spec, date(2025, 2, 15)).fires is False


@pytest.mark.unit
def test_evaluation_is_deterministic():
    """Test the same inputs always give the same decision."""
    spec = build_frequency_spec("specific_days", times=["09:00"], days=[2, 4])

    for day in _days(date(2025, 1, 1), 14):
        assert fires(spec, day) == fires(spec, day)


@pytest.mark.unit
@pytest.mark.parametrize("spec_args,start,step", [
    ({"frequency": "daily"}, date(2025, 1, 1), 1),
    ({"frequency": "every_other_day", "anchor_date": date(2025, 1, 1)}, date(2025, 1, 1), 2),
    ({"frequency": "weekly", "weekday": 1}, date(2025, 1, 6), 7),
    ({"frequency": "biweekly", "weekday": 1, "anchor_date": date(2025, 1, 6)}, date(2025, 1, 6), 14),
])
def test_occurrence_index_advances_once_per_firing(spec_args, start, step):
    """Test consecutive firings map to consecutive occurrence indexes."""
    spec_args = dict(spec_args)
    frequency = spec_args.pop("frequency")
    spec = build_frequency_spec(frequency, times=["09:00"], **spec_args)

    indexes = [occurrence_index(spec, start + timedelta(days=step * n)) for n in range(6)]

    assert all(fires(spec, start + timedelta(days=step * n)).fires for n in range(6))
    assert indexes == list(range(indexes[0], indexes[0] + 6))


@pytest.mark.unit
def test_occurrence_index_specific_days_consecutive():
    """Test specific_days firings across week boundaries are consecutive."""
    spec = build_frequency_spec("specific_days", times=["09:00"], days=[1, 3, 5])

    fired = [d for d in _days(date(2025, 1, 5), 21) if fires(spec, d).fires]
    indexes = [occurrence_index(spec, d) for d in fired]

    assert indexes == list(range(indexes[0], indexes[0] + len(fired)))


@pytest.mark.unit
def test_occurrence_index_monthly():
    """Test monthly occurrence indexes step by one per month."""
    spec = build_frequency_spec("monthly", times=["09:00"], day_of_month=31)

    assert occurrence_index(spec, date(2025, 2, 28)) == occurrence_index(spec, date(2025, 1, 31)) + 1
