"""CustomSchedule model - per-asset override that replaces the base frequency."""

from datetime import time
from enum import Enum
from typing import Any, Mapping, Optional, Union
from pydantic import BaseModel, Field, PrivateAttr

from src.models.frequency import (
    AnySpec,
    InvalidSpec,
    build_spec_from_config,
    parse_time_of_day,
)
from src.utils.config import SchedulingConfig


ServiceTypes = Union[dict[str, Any], list[str]]


class ScheduleType(str, Enum):
    """Custom schedule shapes."""
    SIMPLE = "simple"
    COMPLEX = "complex"


class ScheduleEntry(BaseModel):
    """One compiled recurrence of a custom schedule."""
    spec: AnySpec
    trigger_key: Optional[str] = Field(None, description="service_types key this entry reads")
    service_types: Optional[tuple[str, ...]] = Field(
        None,
        description="Service types emitted when the entry fires; None when not configured"
    )


class ArrivalRule(BaseModel):
    """Occupancy rule: service a unit on guest arrival days."""
    at_time: time
    service_type: str


def lookup_service_types(service_types: Any, trigger_key: Optional[str]) -> Optional[tuple[str, ...]]:
    """Service types for a trigger key; a flat list applies to every key."""
    if isinstance(service_types, list):
        values = service_types
    elif isinstance(service_types, Mapping) and trigger_key is not None:
        values = service_types.get(trigger_key)
    else:
        values = None
    if isinstance(values, str):
        values = [values]
    if not isinstance(values, (list, tuple)):
        return None
    return tuple(dict.fromkeys(str(value) for value in values if value))


def _trigger_key(spec: AnySpec) -> Optional[str]:
    if isinstance(spec, InvalidSpec):
        return spec.raw_frequency
    return spec.frequency


def compile_simple_entry(config: Mapping[str, Any], service_types: Any) -> ScheduleEntry:
    spec = build_spec_from_config(config)
    key = _trigger_key(spec)
    return ScheduleEntry(spec=spec, trigger_key=key, service_types=lookup_service_types(service_types, key))


def compile_complex_entry(entry: Any, service_types: Any) -> ScheduleEntry:
    if not isinstance(entry, Mapping):
        return ScheduleEntry(spec=InvalidSpec(reason=f"Complex schedule entry must be an object, got {entry!r}"))
    spec = build_spec_from_config(entry)
    key = _trigger_key(spec)
    own = lookup_service_types(entry.get("service_types"), key) if "service_types" in entry else None
    return ScheduleEntry(
        spec=spec,
        trigger_key=key,
        service_types=own if own else lookup_service_types(service_types, key),
    )


class CustomSchedule(BaseModel):
    """Custom schedule for a single asset.

    ``simple`` schedules carry one recurrence in ``schedule_config``
    (``frequency``, ``time_preference``/``times``, ``day_preference``,
    ``specific_days``, ...). ``complex`` schedules carry a list of such
    recurrences under ``schedule_config["schedules"]``, each with its own
    ``service_types`` list; an entry may also be ``{"frequency": "dates",
    "dates": [...]}`` for explicit fire dates.
    """
    id: Optional[str] = Field(None, description="Custom schedule ID")
    asset_id: str = Field(..., description="Asset ID (FK)")
    name: Optional[str] = Field(None, description="Schedule name")
    description: Optional[str] = None
    schedule_type: str = Field(default=ScheduleType.SIMPLE.value, description="simple or complex")
    schedule_config: dict[str, Any] = Field(default_factory=dict, description="Recurrence configuration")
    service_types: ServiceTypes = Field(
        default_factory=dict,
        description="Trigger key (daily, weekly, ...) to ordered service types"
    )
    is_active: bool = Field(default=True)

    _entries: list[ScheduleEntry] = PrivateAttr(default_factory=list)
    _error: Optional[str] = PrivateAttr(default=None)
    _arrival: Optional[ArrivalRule] = PrivateAttr(default=None)

    def model_post_init(self, __context: Any) -> None:
        """Compile the config into schedule entries once, at construction."""
        schedule_type = (self.schedule_type or "").strip().lower()
        config = self.schedule_config or {}

        if schedule_type == ScheduleType.SIMPLE.value:
            self._entries = [compile_simple_entry(config, self.service_types)]
        elif schedule_type == ScheduleType.COMPLEX.value:
            raw_entries = config.get("schedules")
            if not isinstance(raw_entries, list) or not raw_entries:
                self._error = "Complex schedule requires a non-empty 'schedules' list"
            else:
                self._entries = [compile_complex_entry(entry, self.service_types) for entry in raw_entries]
        else:
            self._error = f"Unknown schedule type: {self.schedule_type!r}"

        self._arrival = self._compile_arrival(config)

    def _compile_arrival(self, config: Mapping[str, Any]) -> Optional[ArrivalRule]:
        occupancy = config.get("occupancy_rules")
        if not isinstance(occupancy, Mapping) or not occupancy.get("on_arrival"):
            return None
        try:
            arrival_time = parse_time_of_day(config.get("time_preference") or SchedulingConfig.DEFAULT_TIME)
        except ValueError:
            arrival_time = parse_time_of_day(SchedulingConfig.DEFAULT_TIME)
        daily = lookup_service_types(self.service_types, "daily")
        return ArrivalRule(
            at_time=arrival_time,
            service_type=daily[0] if daily else SchedulingConfig.DEFAULT_SERVICE_TYPE,
        )

    @property
    def entries(self) -> list[ScheduleEntry]:
        return self._entries

    @property
    def error(self) -> Optional[str]:
        """Reason the whole schedule is unusable, if any."""
        return self._error

    @property
    def arrival_rule(self) -> Optional[ArrivalRule]:
        return self._arrival
