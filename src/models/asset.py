"""Asset model - units (pools, spas), plant rooms and equipment on a property."""

from datetime import date, time
from enum import Enum
from typing import Any, Optional, Union
from pydantic import BaseModel, Field, PrivateAttr

from src.models.frequency import AnySpec, Frequency, build_frequency_spec
from src.utils.config import SchedulingConfig


class AssetType(str, Enum):
    """Kinds of schedulable asset."""
    UNIT = "unit"
    EQUIPMENT = "equipment"
    PLANT_ROOM = "plant_room"


def default_times_for(asset_type: AssetType) -> list[str]:
    """Times used when an asset has no configured times."""
    if asset_type == AssetType.PLANT_ROOM:
        return list(SchedulingConfig.DEFAULT_PLANT_ROOM_TIMES)
    if asset_type == AssetType.EQUIPMENT:
        return list(SchedulingConfig.DEFAULT_EQUIPMENT_TIMES)
    return [SchedulingConfig.DEFAULT_TIME]


def default_service_type_for(asset_type: AssetType) -> str:
    """Service type emitted by an asset's base frequency."""
    if asset_type == AssetType.PLANT_ROOM:
        return SchedulingConfig.PLANT_ROOM_SERVICE_TYPE
    if asset_type == AssetType.EQUIPMENT:
        return SchedulingConfig.EQUIPMENT_SERVICE_TYPE
    return SchedulingConfig.DEFAULT_SERVICE_TYPE


class Asset(BaseModel):
    """Schedulable asset. Read-only for the schedule engine."""
    id: str = Field(..., description="Asset ID")
    property_id: str = Field(..., description="Property ID (FK)")
    name: str = Field(default="", description="Display name, used for ordering")
    asset_type: AssetType = Field(default=AssetType.UNIT, description="unit, equipment or plant_room")
    unit_type: Optional[str] = Field(None, description="Unit subtype: main_pool, kids_pool, main_spa, ...")
    water_type: Optional[str] = Field(None, description="Water type: saltwater, chlorine, ...")
    base_frequency: Optional[str] = Field(
        None,
        description="daily, 2x_daily, 3x_daily, every_other_day, weekly, specific_days, custom, ..."
    )
    base_times: list[Union[str, time]] = Field(default_factory=list, description="Ordered times of day")
    base_days: list[Union[int, str]] = Field(
        default_factory=list,
        description="Weekdays 0-6 (Sunday = 0), only used by specific_days"
    )
    anchor_date: Optional[date] = Field(None, description="Recurrence anchor (every_other_day parity, weekly day)")
    weekday: Optional[Union[int, str]] = Field(None, description="Explicit weekday for weekly/biweekly")
    day_of_month: Optional[int] = Field(None, description="Day of month for monthly")
    is_active: bool = Field(default=True, description="Inactive assets are never scheduled")

    _base_schedule: Optional[AnySpec] = PrivateAttr(default=None)

    def model_post_init(self, __context: Any) -> None:
        """Validate the base recurrence once, at construction."""
        if self.uses_custom_schedule:
            return
        self._base_schedule = build_frequency_spec(
            self.base_frequency,
            times=self.base_times or default_times_for(self.asset_type),
            days=self.base_days,
            anchor_date=self.anchor_date,
            weekday=self.weekday,
            day_of_month=self.day_of_month,
        )

    @property
    def uses_custom_schedule(self) -> bool:
        """``custom`` base frequency defers entirely to a custom schedule."""
        return (self.base_frequency or "").strip().lower() == Frequency.CUSTOM.value

    @property
    def base_schedule(self) -> Optional[AnySpec]:
        """Validated base recurrence, ``None`` for ``custom`` assets."""
        return self._base_schedule

    @property
    def default_service_type(self) -> str:
        return default_service_type_for(self.asset_type)
