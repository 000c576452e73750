"""ScheduleTemplate model - reusable company-level recurrence."""

from typing import Any, Optional
from pydantic import BaseModel, Field

from src.models.custom_schedule import ScheduleType


class ScheduleTemplate(BaseModel):
    """Company-authored (or public) schedule template."""
    id: str = Field(..., description="Template ID")
    company_id: Optional[str] = Field(None, description="Owning company ID (FK)")
    template_name: str = Field(..., description="Template name, used for tie-breaking")
    template_type: Optional[str] = Field(None, description="simple or complex")
    template_config: dict[str, Any] = Field(
        default_factory=dict,
        description="Same shape as CustomSchedule.schedule_config, may embed service_types"
    )
    applicable_asset_types: Optional[list[str]] = Field(
        None,
        description="Asset types (unit, equipment, plant_room) or unit types (main_pool, ...)"
    )
    applicable_water_types: Optional[list[str]] = Field(None, description="Water types, unset means any")
    description: Optional[str] = None
    is_public: bool = Field(default=False, description="Public templates lose ties to company ones")
    is_active: bool = Field(default=True)

    @property
    def schedule_type(self) -> str:
        """``template_type`` when it names a schedule shape, else inferred from the config."""
        template_type = (self.template_type or "").strip().lower()
        if template_type in (ScheduleType.SIMPLE.value, ScheduleType.COMPLEX.value):
            return template_type
        if isinstance(self.template_config.get("schedules"), list):
            return ScheduleType.COMPLEX.value
        return ScheduleType.SIMPLE.value
