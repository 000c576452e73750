"""Property snapshot - the read-only input of a schedule computation."""

from typing import Any, Optional
from pydantic import BaseModel, Field, PrivateAttr

from src.models.asset import Asset
from src.models.custom_schedule import CustomSchedule
from src.models.scheduled_task import ScheduleWarning, WarningKind
from src.models.schedule_template import ScheduleTemplate
from src.models.scheduling_rule import PropertySchedulingRule


class PropertySnapshot(BaseModel):
    """Assets and rule sources for one property, fetched once by the caller."""
    property_id: str = Field(default="", description="Property ID")
    company_id: Optional[str] = Field(None, description="Owning company ID")
    property_name: Optional[str] = None
    assets: list[Asset] = Field(default_factory=list)
    custom_schedules: list[CustomSchedule] = Field(default_factory=list)
    rules: list[PropertySchedulingRule] = Field(default_factory=list)
    templates: list[ScheduleTemplate] = Field(default_factory=list)
    occupied_asset_ids: frozenset[str] = Field(default_factory=frozenset, description="Units occupied on the date")
    arrival_asset_ids: frozenset[str] = Field(default_factory=frozenset, description="Units with an arrival on the date")
    load_warnings: list[ScheduleWarning] = Field(default_factory=list)

    _active_schedules: dict[str, CustomSchedule] = PrivateAttr(default_factory=dict)
    _integrity_warnings: list[ScheduleWarning] = PrivateAttr(default_factory=list)

    def model_post_init(self, __context: Any) -> None:
        """Index active custom schedules, keeping at most one per asset."""
        by_asset: dict[str, list[CustomSchedule]] = {}
        for schedule in self.custom_schedules:
            if schedule.is_active:
                by_asset.setdefault(schedule.asset_id, []).append(schedule)

        for asset_id, schedules in by_asset.items():
            schedules.sort(key=lambda s: s.id or "")
            self._active_schedules[asset_id] = schedules[0]
            if len(schedules) > 1:
                self._integrity_warnings.append(ScheduleWarning(
                    kind=WarningKind.DATA_INTEGRITY,
                    asset_id=asset_id,
                    message=(
                        f"{len(schedules)} active custom schedules for asset; "
                        f"using {schedules[0].id or 'first'}"
                    ),
                ))

    def active_custom_schedule(self, asset_id: str) -> Optional[CustomSchedule]:
        return self._active_schedules.get(asset_id)

    @property
    def integrity_warnings(self) -> list[ScheduleWarning]:
        """Problems found while loading plus those found indexing the snapshot."""
        return [*self.load_warnings, *self._integrity_warnings]
