"""Schedule output models - due tasks and the warnings raised while compiling them."""

import datetime as dt
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field

from src.models.asset import AssetType


class TaskSource(str, Enum):
    """Mechanism that produced a task."""
    CUSTOM_SCHEDULE = "custom_schedule"
    TEMPLATE = "template"
    ROTATION_RULE = "rotation_rule"
    BASE_FREQUENCY = "base_frequency"
    OCCUPANCY_ARRIVAL = "occupancy_arrival"


class TaskPriority(str, Enum):
    """Dispatch priority of a task."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return {"high": 3, "medium": 2, "low": 1}[self.value]


class WarningKind(str, Enum):
    """Non-fatal problem categories."""
    DATA_INTEGRITY = "data_integrity"
    CONFIGURATION = "configuration"


def format_time(value: dt.time) -> str:
    return value.strftime("%H:%M")


class ScheduledTask(BaseModel):
    """One due (asset, service type, time) item for a date. Never persisted by the engine."""
    date: dt.date = Field(..., description="Date the task is due")
    asset_id: str = Field(..., description="Asset ID")
    asset_name: str = Field(default="", description="Asset display name")
    asset_type: AssetType = Field(..., description="unit, equipment or plant_room")
    property_id: str = Field(..., description="Property ID")
    service_type: str = Field(..., description="full_service, test_only, plant_room_check, ...")
    time: dt.time = Field(..., description="Time of day")
    source_rule: TaskSource = Field(..., description="Mechanism that produced the task")
    source_id: Optional[str] = Field(None, description="Custom schedule, template or rule ID")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="high, medium or low")
    is_occupied: bool = Field(default=False, description="Unit has guests on the date")

    @property
    def task_id(self) -> str:
        """Deterministic identifier for the task."""
        return (
            f"{self.source_rule.value}-{self.asset_id}-{self.date.isoformat()}-"
            f"{format_time(self.time)}-{self.service_type}"
        )

    @property
    def dedupe_key(self) -> tuple[str, str, dt.time]:
        return (self.asset_id, self.service_type, self.time)

    def to_response(self) -> dict[str, Any]:
        return {
            "id": self.task_id,
            "date": self.date.isoformat(),
            "asset_id": self.asset_id,
            "asset_name": self.asset_name,
            "asset_type": self.asset_type.value,
            "property_id": self.property_id,
            "service_type": self.service_type,
            "time": format_time(self.time),
            "source_rule": self.source_rule.value,
            "source_id": self.source_id,
            "priority": self.priority.value,
            "is_occupied": self.is_occupied,
        }


class ScheduleWarning(BaseModel):
    """Structured, non-fatal problem surfaced alongside a schedule."""
    kind: WarningKind
    message: str
    asset_id: Optional[str] = None
    rule_id: Optional[str] = None

    def to_response(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class ScheduleResult(BaseModel):
    """Tasks due on a date for one property, with any warnings."""
    property_id: str
    date: dt.date
    tasks: list[ScheduledTask] = Field(default_factory=list)
    warnings: list[ScheduleWarning] = Field(default_factory=list)

    def to_response(self) -> dict[str, Any]:
        return {
            "property_id": self.property_id,
            "date": self.date.isoformat(),
            "tasks": [task.to_response() for task in self.tasks],
            "warnings": [warning.to_response() for warning in self.warnings],
        }
