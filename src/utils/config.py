"""Scheduling defaults with environment variable support."""

import os


def _csv(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


class SchedulingConfig:
    """Defaults applied when asset or rule data leaves a field empty."""
    
    DEFAULT_TIME = os.environ.get("SCHEDULE_DEFAULT_TIME", "09:00")
    DEFAULT_PLANT_ROOM_TIMES = _csv(os.environ.get("SCHEDULE_DEFAULT_PLANT_ROOM_TIMES", "09:00,15:00"))
    DEFAULT_EQUIPMENT_TIMES = _csv(os.environ.get("SCHEDULE_DEFAULT_EQUIPMENT_TIMES", "11:00"))
    DEFAULT_SERVICE_TYPE = os.environ.get("SCHEDULE_DEFAULT_SERVICE_TYPE", "full_service")
    DEFAULT_ROTATION_SERVICE_TYPE = os.environ.get("SCHEDULE_DEFAULT_ROTATION_SERVICE_TYPE", "test_only")
    PLANT_ROOM_SERVICE_TYPE = "plant_room_check"
    EQUIPMENT_SERVICE_TYPE = "equipment_check"
