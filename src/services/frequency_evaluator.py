"""Frequency evaluator - decides whether a recurrence fires on a date."""

from calendar import monthrange
from datetime import date, time
from typing import Optional
from pydantic import BaseModel

from src.models.frequency import (
    EPOCH,
    AnySpec,
    BiweeklySpec,
    DailySpec,
    EveryOtherDaySpec,
    FixedDatesSpec,
    InvalidSpec,
    MonthlySpec,
    MultiDailySpec,
    OccupiedDailySpec,
    SpecificDaysSpec,
    TwiceWeeklySpec,
    WeeklySpec,
    weekday_index,
)


class FireDecision(BaseModel):
    """Outcome of evaluating one recurrence on one date."""
    fires: bool
    times: tuple[time, ...] = ()
    warning: Optional[str] = None


_NO_FIRE = FireDecision(fires=False)


def _fire(spec: AnySpec) -> FireDecision:
    return FireDecision(fires=True, times=spec.times)


def fires(spec: AnySpec, on_date: date, *, occupied: bool = False) -> FireDecision:
    """Evaluate ``spec`` on ``on_date``.

    Invalid specs never fire and carry a warning; ``occupied`` is only read
    by ``daily_when_occupied``.
    """
    if isinstance(spec, InvalidSpec):
        label = spec.raw_frequency or "unknown"
        return FireDecision(fires=False, warning=f"Invalid {label} schedule: {spec.reason}")

    if isinstance(spec, (DailySpec, MultiDailySpec)):
        return _fire(spec)

    if isinstance(spec, EveryOtherDaySpec):
        # the anchor itself fires; python's modulo keeps dates before the anchor in phase
        return _fire(spec) if (on_date - spec.anchor_date).days % 2 == 0 else _NO_FIRE

    if isinstance(spec, WeeklySpec):
        return _fire(spec) if weekday_index(on_date) == spec.target_weekday else _NO_FIRE

    if isinstance(spec, BiweeklySpec):
        if weekday_index(on_date) != spec.target_weekday:
            return _NO_FIRE
        weeks = (on_date - (spec.anchor_date or EPOCH)).days // 7
        return _fire(spec) if weeks % 2 == 0 else _NO_FIRE

    if isinstance(spec, (SpecificDaysSpec, TwiceWeeklySpec)):
        return _fire(spec) if weekday_index(on_date) in spec.days else _NO_FIRE

    if isinstance(spec, MonthlySpec):
        last_day = monthrange(on_date.year, on_date.month)[1]
        return _fire(spec) if on_date.day == min(spec.target_day, last_day) else _NO_FIRE

    if isinstance(spec, OccupiedDailySpec):
        return _fire(spec) if occupied else _NO_FIRE

    if isinstance(spec, FixedDatesSpec):
        return _fire(spec) if on_date in spec.dates else _NO_FIRE

    return FireDecision(fires=False, warning=f"Unsupported schedule variant: {type(spec).__name__}")


def occurrence_index(spec: AnySpec, on_date: date) -> int:
    """Ordinal of the firing cycle containing ``on_date``.

    Consecutive firings of a spec map to consecutive integers, which is what
    rotation needs to advance its window once per firing rather than once
    per calendar day.
    """
    ordinal = on_date.toordinal()

    if isinstance(spec, EveryOtherDaySpec):
        return (on_date - spec.anchor_date).days // 2
    if isinstance(spec, WeeklySpec):
        return ordinal // 7
    if isinstance(spec, BiweeklySpec):
        return ((on_date - (spec.anchor_date or EPOCH)).days // 7) // 2
    if isinstance(spec, MonthlySpec):
        return on_date.year * 12 + on_date.month
    if isinstance(spec, (SpecificDaysSpec, TwiceWeeklySpec)):
        # ordinal // 7 groups Sunday..Saturday, matching weekday_index
        days = sorted(spec.days)
        weekday = weekday_index(on_date)
        rank = days.index(weekday) if weekday in days else 0
        return (ordinal // 7) * len(days) + rank
    if isinstance(spec, FixedDatesSpec):
        ordered = sorted(spec.dates)
        return ordered.index(on_date) if on_date in spec.dates else ordinal
    return ordinal
