"""Template resolver - picks the schedule template that applies to an asset."""

from typing import Iterable, Optional

from src.models.asset import Asset
from src.models.custom_schedule import CustomSchedule
from src.models.schedule_template import ScheduleTemplate


def template_applies(template: ScheduleTemplate, asset: Asset) -> bool:
    """Active template whose asset types (and water types, when set) include the asset."""
    if not template.is_active:
        return False

    asset_types = set(template.applicable_asset_types or [])
    if asset.asset_type.value not in asset_types and asset.unit_type not in asset_types:
        return False

    water_types = template.applicable_water_types
    if water_types and asset.water_type not in water_types:
        return False

    return True


def _precedence(template: ScheduleTemplate) -> tuple[bool, str, str]:
    # company-authored (is_public=False) sorts first
    return (template.is_public, template.template_name, template.id)


def template_to_custom_schedule(template: ScheduleTemplate, asset: Asset) -> CustomSchedule:
    """Expand a template into a synthetic custom schedule for ``asset``."""
    config = dict(template.template_config)
    service_types = config.pop("service_types", None)
    if not isinstance(service_types, (dict, list)):
        service_types = {}

    return CustomSchedule(
        id=template.id,
        asset_id=asset.id,
        name=template.template_name,
        description=template.description,
        schedule_type=template.schedule_type,
        schedule_config=config,
        service_types=service_types,
        is_active=True,
    )


def resolve_template(asset: Asset, templates: Iterable[ScheduleTemplate]) -> Optional[CustomSchedule]:
    """
    Resolve the template for an asset.

    Ties between matching templates go to company-authored ones, then to the
    lexically smallest template name, then to the smallest ID.
    """
    candidates = [template for template in templates if template_applies(template, asset)]
    if not candidates:
        return None
    return template_to_custom_schedule(min(candidates, key=_precedence), asset)
