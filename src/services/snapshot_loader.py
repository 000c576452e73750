"""Snapshot loader - fetch schedule inputs from Supabase and validate them once."""

from datetime import date
from typing import Any, Callable, Optional, TypeVar

from pydantic import BaseModel

from src.models.asset import Asset, AssetType
from src.models.custom_schedule import CustomSchedule
from src.models.scheduled_task import ScheduleWarning, WarningKind
from src.models.schedule_template import ScheduleTemplate
from src.models.scheduling_rule import PropertySchedulingRule
from src.models.snapshot import PropertySnapshot
from src.services.supabase_client import (
    get_property,
    list_active_custom_schedules,
    list_active_rules_for_property,
    list_applicable_templates,
    list_equipment_for_property,
    list_occupancy,
    list_plant_rooms_for_property,
    list_units_for_property,
)
from src.utils.errors import PropertyNotFoundError, ScheduleRequestError
from src.utils.logging import get_structured_logger, timed

logger = get_structured_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def unit_row_to_asset(row: dict) -> dict:
    return {
        "id": row["id"],
        "property_id": row.get("property_id"),
        "name": row.get("name") or "",
        "asset_type": AssetType.UNIT,
        "unit_type": row.get("unit_type"),
        "water_type": row.get("water_type"),
        "base_frequency": row.get("service_frequency"),
        "base_times": row.get("service_times") or [],
        "base_days": row.get("service_days") or [],
        "anchor_date": row.get("anchor_date"),
        "weekday": row.get("service_day"),
        "is_active": row.get("is_active", True),
    }


def plant_room_row_to_asset(row: dict) -> dict:
    return {
        "id": row["id"],
        "property_id": row.get("property_id"),
        "name": row.get("name") or "",
        "asset_type": AssetType.PLANT_ROOM,
        "base_frequency": row.get("check_frequency"),
        "base_times": row.get("check_times") or [],
        "base_days": row.get("check_days") or [],
        "anchor_date": row.get("anchor_date"),
        "is_active": row.get("is_active", True),
    }


def equipment_row_to_asset(row: dict) -> Optional[dict]:
    """Equipment is only scheduled once maintenance is configured and switched on."""
    if not row.get("measurement_config") or not row.get("maintenance_scheduled"):
        return None
    if not row.get("maintenance_frequency"):
        return None
    return {
        "id": row["id"],
        "property_id": row.get("property_id"),
        "name": row.get("name") or "",
        "asset_type": AssetType.EQUIPMENT,
        "base_frequency": row.get("maintenance_frequency"),
        "base_times": row.get("maintenance_times") or [],
        "base_days": row.get("maintenance_days") or [],
        "anchor_date": row.get("anchor_date"),
        "is_active": row.get("is_active", True),
    }


def custom_schedule_row(row: dict) -> dict:
    return {
        "id": row.get("id"),
        "asset_id": row.get("unit_id") or row.get("asset_id"),
        "name": row.get("name"),
        "description": row.get("description"),
        "schedule_type": row.get("schedule_type") or "simple",
        "schedule_config": row.get("schedule_config") or {},
        "service_types": row.get("service_types") or {},
        "is_active": row.get("is_active", True) is not False,
    }


def rule_row(row: dict) -> dict:
    return {
        "id": row["id"],
        "property_id": row.get("property_id"),
        "rule_name": row.get("rule_name") or "",
        "rule_type": row.get("rule_type") or "",
        "rule_config": row.get("rule_config") or {},
        "priority": row.get("priority") or 0,
        "is_active": row.get("is_active", True) is not False,
        "target_unit_types": row.get("target_unit_types"),
        "target_water_types": row.get("target_water_types"),
        "target_units": row.get("target_units"),
    }


def template_row(row: dict) -> dict:
    return {
        "id": row["id"],
        "company_id": row.get("company_id"),
        "template_name": row.get("template_name") or "",
        "template_type": row.get("template_type"),
        "template_config": row.get("template_config") or {},
        "applicable_asset_types": row.get("applicable_asset_types") or row.get("applicable_unit_types"),
        "applicable_water_types": row.get("applicable_water_types"),
        "description": row.get("description"),
        "is_public": bool(row.get("is_public")),
        "is_active": row.get("is_active", True) is not False,
    }


def build_models(
    model: type[ModelT],
    rows: list[dict],
    mapper: Callable[[dict], Optional[dict]],
    warnings: list[ScheduleWarning],
) -> list[ModelT]:
    """Map and validate rows; rows that fail become data-integrity warnings."""
    built: list[ModelT] = []
    for row in rows:
        try:
            data = mapper(row)
            if data is None:
                continue
            built.append(model(**data))
        except (KeyError, TypeError, ValueError) as e:
            row_id = row.get("id") if isinstance(row, dict) else None
            warnings.append(ScheduleWarning(
                kind=WarningKind.DATA_INTEGRITY,
                message=f"Invalid {model.__name__} record skipped: {e}",
                asset_id=row_id if model is Asset else None,
                rule_id=row_id if model is PropertySchedulingRule else None,
            ))
            logger.warning(
                "Invalid record skipped",
                model=model.__name__,
                record_id=row_id,
                error=str(e),
            )
    return built


def occupancy_from_bookings(bookings: list[dict], on_date: date) -> tuple[frozenset[str], frozenset[str]]:
    """(occupied unit IDs, arrival unit IDs) for a date."""
    day = on_date.isoformat()
    occupied = frozenset(b["unit_id"] for b in bookings if b.get("unit_id"))
    arrivals = frozenset(
        b["unit_id"] for b in bookings
        if b.get("unit_id") and str(b.get("check_in_date", ""))[:10] == day
    )
    return occupied, arrivals


async def list_assets_for_property(property_id: str, warnings: list[ScheduleWarning]) -> list[Asset]:
    """All schedulable assets on a property: units, plant rooms and scheduled equipment."""
    units = await list_units_for_property(property_id)
    plant_rooms = await list_plant_rooms_for_property(property_id)
    equipment = await list_equipment_for_property(property_id)

    return [
        *build_models(Asset, units, unit_row_to_asset, warnings),
        *build_models(Asset, plant_rooms, plant_room_row_to_asset, warnings),
        *build_models(Asset, equipment, equipment_row_to_asset, warnings),
    ]


@timed("load_property_snapshot")
async def load_property_snapshot(property_id: Optional[str], on_date: date) -> PropertySnapshot:
    """
    Fetch everything needed to compute a property's schedule for a date.

    Raises ScheduleRequestError for a blank property ID and
    PropertyNotFoundError when the property does not exist.
    """
    if not (property_id or "").strip():
        raise ScheduleRequestError("propertyId is required")

    prop = await get_property(property_id)
    if prop is None:
        raise PropertyNotFoundError(f"Property not found: {property_id}")

    warnings: list[ScheduleWarning] = []
    assets = await list_assets_for_property(property_id, warnings)

    schedule_rows = await list_active_custom_schedules([asset.id for asset in assets])
    rule_rows = await list_active_rules_for_property(property_id)
    company_id = prop.get("company_id")
    template_rows = await list_applicable_templates(company_id)
    booking_rows = await list_occupancy(property_id, on_date)

    occupied, arrivals = occupancy_from_bookings(booking_rows, on_date)

    snapshot = PropertySnapshot(
        property_id=property_id,
        company_id=company_id,
        property_name=prop.get("name"),
        assets=assets,
        custom_schedules=build_models(CustomSchedule, schedule_rows, custom_schedule_row, warnings),
        rules=build_models(PropertySchedulingRule, rule_rows, rule_row, warnings),
        templates=build_models(ScheduleTemplate, template_rows, template_row, warnings),
        occupied_asset_ids=occupied,
        arrival_asset_ids=arrivals,
        load_warnings=warnings,
    )

    logger.info(
        "Property snapshot loaded",
        property_id=property_id,
        company_id=company_id,
        asset_count=len(snapshot.assets),
        custom_schedule_count=len(snapshot.custom_schedules),
        rule_count=len(snapshot.rules),
        template_count=len(snapshot.templates),
        load_warning_count=len(warnings),
    )
    return snapshot
