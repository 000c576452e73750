"""PropertySchedulingRule model - property-wide rotation policies."""

from datetime import time
from enum import Enum
from typing import Any, Mapping, Optional, Union
from pydantic import BaseModel, Field, PrivateAttr

from src.models.asset import Asset, AssetType
from src.models.custom_schedule import lookup_service_types
from src.models.frequency import AnySpec, Frequency, InvalidSpec, build_spec_from_config
from src.utils.config import SchedulingConfig
from src.utils.errors import ScheduleConfigError


class RuleType(str, Enum):
    """Supported property rule types."""
    RANDOM_SELECTION = "random_selection"


class RotationPlan(BaseModel):
    """Validated ``random_selection`` configuration."""
    selection_count: int = Field(..., gt=0)
    spec: AnySpec
    service_types: tuple[str, ...]
    target_asset_type: AssetType = AssetType.UNIT
    target_unit_types: frozenset[str] = frozenset()
    target_water_types: frozenset[str] = frozenset()
    target_asset_ids: frozenset[str] = frozenset()
    suppress_unselected: bool = False

    @property
    def times(self) -> tuple[time, ...]:
        return self.spec.times

    def targets(self, asset: Asset) -> bool:
        """Whether an asset falls inside this rule's candidate filters."""
        if asset.asset_type != self.target_asset_type:
            return False
        if self.target_unit_types and asset.unit_type not in self.target_unit_types:
            return False
        if self.target_water_types and asset.water_type not in self.target_water_types:
            return False
        if self.target_asset_ids and asset.id not in self.target_asset_ids:
            return False
        return True


def _string_set(value: Any, field: str) -> frozenset[str]:
    if not value:
        return frozenset()
    if isinstance(value, str):
        return frozenset({value})
    if isinstance(value, Mapping):
        value = value.get("ids") or []
    if not isinstance(value, (list, tuple, set, frozenset)):
        raise ScheduleConfigError(f"{field} must be a list, got {value!r}", field=field)
    return frozenset(str(item) for item in value)


class PropertySchedulingRule(BaseModel):
    """Property-level scheduling rule.

    Column-level targets (``target_unit_types``, ``target_water_types``,
    ``target_units``) take precedence over the same keys inside
    ``rule_config``.
    """
    id: str = Field(..., description="Rule ID")
    property_id: str = Field(..., description="Property ID (FK)")
    rule_name: str = Field(default="", description="Rule name")
    rule_type: str = Field(default=RuleType.RANDOM_SELECTION.value, description="Rule type")
    rule_config: dict[str, Any] = Field(default_factory=dict, description="Rule configuration")
    priority: int = Field(default=0, description="Higher priority rules claim candidates first")
    is_active: bool = Field(default=True)
    target_unit_types: Optional[list[str]] = None
    target_water_types: Optional[list[str]] = None
    target_units: Optional[Union[list[str], dict[str, Any]]] = None

    _plan: Optional[RotationPlan] = PrivateAttr(default=None)
    _error: Optional[str] = PrivateAttr(default=None)

    def model_post_init(self, __context: Any) -> None:
        """Validate the rule config once, at construction."""
        try:
            self._plan = self._compile()
        except (ScheduleConfigError, ValueError) as e:
            self._error = str(e)

    def _compile(self) -> RotationPlan:
        if (self.rule_type or "").strip().lower() != RuleType.RANDOM_SELECTION.value:
            raise ScheduleConfigError(f"Unsupported rule type: {self.rule_type!r}", field="rule_type")

        config = self.rule_config or {}
        raw_count = config.get("selection_count")
        if isinstance(raw_count, bool):
            raise ScheduleConfigError(f"selection_count must be an integer, got {raw_count!r}", field="selection_count")
        try:
            selection_count = int(raw_count)
        except (TypeError, ValueError):
            raise ScheduleConfigError(f"selection_count must be an integer, got {raw_count!r}", field="selection_count")
        if selection_count <= 0:
            raise ScheduleConfigError(f"selection_count must be positive, got {selection_count}", field="selection_count")

        spec = build_spec_from_config({"frequency": Frequency.DAILY.value, **config})
        if isinstance(spec, InvalidSpec):
            raise ScheduleConfigError(f"Invalid rule frequency: {spec.reason}", field="frequency")

        service_types = lookup_service_types(config.get("service_types"), spec.frequency)
        if not service_types:
            service_types = (SchedulingConfig.DEFAULT_ROTATION_SERVICE_TYPE,)

        try:
            target_asset_type = AssetType(config.get("target_asset_type") or AssetType.UNIT.value)
        except ValueError:
            raise ScheduleConfigError(f"Unknown target_asset_type: {config.get('target_asset_type')!r}", field="target_asset_type")

        return RotationPlan(
            selection_count=selection_count,
            spec=spec,
            service_types=service_types,
            target_asset_type=target_asset_type,
            target_unit_types=_string_set(self.target_unit_types or config.get("target_unit_types"), "target_unit_types"),
            target_water_types=_string_set(self.target_water_types or config.get("target_water_types"), "target_water_types"),
            target_asset_ids=_string_set(self.target_units or config.get("target_units"), "target_units"),
            suppress_unselected=bool(config.get("suppress_unselected", False)),
        )

    @property
    def plan(self) -> Optional[RotationPlan]:
        return self._plan

    @property
    def error(self) -> Optional[str]:
        """Configuration error that disables this rule, if any."""
        return self._error
