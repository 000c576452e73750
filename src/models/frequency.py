"""Frequency variants - one model per recurrence kind, discriminated by ``frequency``.

Raw schedule JSON (asset columns, custom schedule configs, rule configs,
template configs) is turned into one of these variants exactly once, when the
owning record is constructed. Anything that does not validate becomes an
``InvalidSpec`` carrying the reason, so evaluation never has to re-parse JSON
or handle type errors.
"""

from datetime import date, time
from enum import Enum
from typing import Annotated, Any, Iterable, Literal, Mapping, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator, model_validator

from src.utils.config import SchedulingConfig


# every_other_day parity is counted from here when an asset has no anchor
EPOCH = date(1970, 1, 1)

WEEKDAY_NAMES = {
    "sunday": 0,
    "monday": 1,
    "tuesday": 2,
    "wednesday": 3,
    "thursday": 4,
    "friday": 5,
    "saturday": 6,
}

MONDAY = 1
THURSDAY = 4


class Frequency(str, Enum):
    """Recurrence kinds understood by the frequency evaluator."""
    DAILY = "daily"
    TWICE_DAILY = "2x_daily"
    THREE_TIMES_DAILY = "3x_daily"
    EVERY_OTHER_DAY = "every_other_day"
    WEEKLY = "weekly"
    SPECIFIC_DAYS = "specific_days"
    CUSTOM = "custom"
    DAILY_WHEN_OCCUPIED = "daily_when_occupied"
    TWICE_WEEKLY = "twice_weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    DATES = "dates"


def weekday_index(value: date) -> int:
    """Weekday as 0-6 with Sunday = 0."""
    return value.isoweekday() % 7


def parse_weekday(value: Any) -> int:
    """Parse a weekday given as 0-6 (Sunday = 0) or an English day name."""
    if isinstance(value, bool):
        raise ValueError(f"Invalid weekday: {value!r}")
    if isinstance(value, int):
        if 0 <= value <= 6:
            return value
        raise ValueError(f"Weekday out of range 0-6: {value}")
    if isinstance(value, str):
        text = value.strip().lower()
        if text.isdigit():
            return parse_weekday(int(text))
        if text in WEEKDAY_NAMES:
            return WEEKDAY_NAMES[text]
    raise ValueError(f"Invalid weekday: {value!r}")


def parse_time_of_day(value: Any) -> time:
    """Parse ``HH:MM`` / ``HH:MM:SS`` strings (or pass through ``time``)."""
    if isinstance(value, time):
        return value.replace(tzinfo=None)
    if not isinstance(value, str):
        raise ValueError(f"Invalid time of day: {value!r}")
    parts = value.strip().split(":")
    if len(parts) not in (2, 3) or not all(part.isdigit() for part in parts):
        raise ValueError(f"Invalid time of day: {value!r}")
    hour, minute = int(parts[0]), int(parts[1])
    second = int(parts[2]) if len(parts) == 3 else 0
    return time(hour, minute, second)


def _ordered_times(value: Any) -> tuple[time, ...]:
    if value is None:
        return ()
    if isinstance(value, (str, time)):
        value = [value]
    elif not isinstance(value, (list, tuple, set, frozenset)):
        raise ValueError(f"Invalid times: {value!r}")
    seen: dict[time, None] = {}
    for item in value:
        seen.setdefault(parse_time_of_day(item), None)
    return tuple(seen)


class _SpecBase(BaseModel):
    times: tuple[time, ...] = Field(default=(), description="Ordered, de-duplicated times of day")

    @field_validator("times", mode="before")
    @classmethod
    def _parse_times(cls, value: Any) -> tuple[time, ...]:
        return _ordered_times(value)


class DailySpec(_SpecBase):
    frequency: Literal["daily"] = "daily"


class MultiDailySpec(_SpecBase):
    """``2x_daily`` / ``3x_daily``: every day, exactly 2 or 3 times."""
    frequency: Literal["2x_daily", "3x_daily"]

    @property
    def expected_times(self) -> int:
        return 2 if self.frequency == Frequency.TWICE_DAILY.value else 3

    @model_validator(mode="after")
    def _check_time_count(self) -> "MultiDailySpec":
        if len(self.times) != self.expected_times:
            raise ValueError(
                f"{self.frequency} requires exactly {self.expected_times} times, got {len(self.times)}"
            )
        return self


class EveryOtherDaySpec(_SpecBase):
    frequency: Literal["every_other_day"] = "every_other_day"
    anchor_date: date = EPOCH


class _WeekdaySpec(_SpecBase):
    weekday: Optional[int] = Field(None, description="Explicit weekday, 0-6 with Sunday = 0")
    anchor_date: Optional[date] = None

    @field_validator("weekday", mode="before")
    @classmethod
    def _parse_weekday(cls, value: Any) -> Optional[int]:
        if value is None or value == "":
            return None
        return parse_weekday(value)

    @property
    def target_weekday(self) -> int:
        if self.weekday is not None:
            return self.weekday
        if self.anchor_date is not None:
            return weekday_index(self.anchor_date)
        return MONDAY


class WeeklySpec(_WeekdaySpec):
    frequency: Literal["weekly"] = "weekly"


class BiweeklySpec(_WeekdaySpec):
    """Every other week on ``target_weekday``, week parity counted from the anchor."""
    frequency: Literal["biweekly"] = "biweekly"


class SpecificDaysSpec(_SpecBase):
    frequency: Literal["specific_days"] = "specific_days"
    days: frozenset[int] = frozenset()

    @field_validator("days", mode="before")
    @classmethod
    def _parse_days(cls, value: Any) -> frozenset[int]:
        if value is None:
            return frozenset()
        if isinstance(value, (str, int)):
            value = [value]
        elif not isinstance(value, (list, tuple, set, frozenset)):
            raise ValueError(f"Invalid weekdays: {value!r}")
        return frozenset(parse_weekday(item) for item in value)

    @model_validator(mode="after")
    def _require_days(self) -> "SpecificDaysSpec":
        if not self.days:
            raise ValueError("specific_days requires at least one weekday")
        return self


class TwiceWeeklySpec(_SpecBase):
    """Mondays and Thursdays."""
    frequency: Literal["twice_weekly"] = "twice_weekly"

    @property
    def days(self) -> frozenset[int]:
        return frozenset({MONDAY, THURSDAY})


class MonthlySpec(_SpecBase):
    frequency: Literal["monthly"] = "monthly"
    day_of_month: Optional[int] = Field(None, ge=1, le=31)
    anchor_date: Optional[date] = None

    @property
    def target_day(self) -> int:
        if self.day_of_month is not None:
            return self.day_of_month
        if self.anchor_date is not None:
            return self.anchor_date.day
        return 1


class OccupiedDailySpec(_SpecBase):
    frequency: Literal["daily_when_occupied"] = "daily_when_occupied"


class FixedDatesSpec(_SpecBase):
    """Explicit list of absolute fire dates."""
    frequency: Literal["dates"] = "dates"
    dates: frozenset[date] = frozenset()

    @model_validator(mode="after")
    def _require_dates(self) -> "FixedDatesSpec":
        if not self.dates:
            raise ValueError("dates schedule requires at least one date")
        return self


class InvalidSpec(BaseModel):
    """A frequency definition that failed validation; never fires."""
    frequency: Literal["invalid"] = "invalid"
    raw_frequency: Optional[str] = None
    reason: str
    times: tuple[time, ...] = ()


FrequencySpec = Annotated[
    Union[
        DailySpec,
        MultiDailySpec,
        EveryOtherDaySpec,
        WeeklySpec,
        BiweeklySpec,
        SpecificDaysSpec,
        TwiceWeeklySpec,
        MonthlySpec,
        OccupiedDailySpec,
        FixedDatesSpec,
    ],
    Field(discriminator="frequency"),
]

AnySpec = Union[FrequencySpec, InvalidSpec]

_SPEC_ADAPTER = TypeAdapter(FrequencySpec)

_EVALUABLE = {f.value for f in Frequency} - {Frequency.CUSTOM.value}


def _describe(error: ValueError) -> str:
    if isinstance(error, ValidationError):
        messages = []
        for detail in error.errors():
            msg = detail.get("msg", "")
            if msg.startswith("Value error, "):
                msg = msg[len("Value error, "):]
            loc = ".".join(str(part) for part in detail.get("loc", ())[1:])
            messages.append(f"{loc}: {msg}" if loc else msg)
        return "; ".join(messages)
    return str(error)


def build_frequency_spec(
    frequency: Any,
    *,
    times: Optional[Iterable[Any]] = None,
    days: Optional[Iterable[Any]] = None,
    anchor_date: Any = None,
    weekday: Any = None,
    day_of_month: Any = None,
    dates: Optional[Iterable[Any]] = None,
) -> AnySpec:
    """Validate raw frequency fields into a spec variant, or an ``InvalidSpec``."""
    if frequency is None or (isinstance(frequency, str) and not frequency.strip()):
        return InvalidSpec(reason="Missing frequency")

    raw = str(frequency.value if isinstance(frequency, Enum) else frequency).strip().lower()
    if raw == Frequency.CUSTOM.value:
        return InvalidSpec(raw_frequency=raw, reason="'custom' frequency must be resolved by a custom schedule")
    if raw not in _EVALUABLE:
        return InvalidSpec(raw_frequency=raw, reason=f"Unknown frequency: {frequency!r}")

    payload = {
        "frequency": raw,
        "times": times,
        "days": days,
        "anchor_date": anchor_date,
        "weekday": weekday,
        "day_of_month": day_of_month,
        "dates": [dates] if isinstance(dates, (str, date)) else dates,
    }
    payload = {key: value for key, value in payload.items() if value is not None}

    try:
        return _SPEC_ADAPTER.validate_python(payload)
    except ValueError as e:
        return InvalidSpec(raw_frequency=raw, reason=_describe(e))


def config_times(config: Mapping[str, Any], default: Optional[list[Any]] = None) -> list[Any]:
    """Times from a schedule-shaped config: ``times``, ``time`` or ``time_preference``."""
    for key in ("times", "time", "time_preference"):
        value = config.get(key)
        if value:
            return [value] if isinstance(value, (str, time)) else list(value)
    return list(default) if default is not None else [SchedulingConfig.DEFAULT_TIME]


def build_spec_from_config(config: Mapping[str, Any], default_times: Optional[list[Any]] = None) -> AnySpec:
    """Build a spec from the JSON shape shared by custom schedules, rules and templates."""
    if not isinstance(config, Mapping):
        return InvalidSpec(reason=f"Schedule config must be an object, got {type(config).__name__}")

    try:
        times = config_times(config, default_times)
    except TypeError:
        return InvalidSpec(raw_frequency=str(config.get("frequency")), reason="Invalid times value")

    return build_frequency_spec(
        config.get("frequency"),
        times=times,
        days=config.get("specific_days") if config.get("specific_days") is not None else config.get("days"),
        anchor_date=config.get("anchor_date"),
        weekday=config.get("day_preference") if config.get("day_preference") is not None else config.get("weekday"),
        day_of_month=config.get("day_of_month"),
        dates=config.get("dates"),
    )
