"""Schedule compiler - resolves every asset of a property snapshot into due tasks.

Precedence per asset, first match wins:

1. active custom schedule
2. schedule template
3. property rotation rule that selects the asset for the date
4. the asset's base frequency

The computation is pure: no I/O, no shared state, nothing persisted.
"""

from datetime import date, datetime, time
from typing import Any, Optional

from src.models.asset import Asset, AssetType
from src.models.custom_schedule import CustomSchedule
from src.models.scheduled_task import (
    ScheduledTask,
    ScheduleResult,
    ScheduleWarning,
    TaskPriority,
    TaskSource,
    WarningKind,
)
from src.models.scheduling_rule import PropertySchedulingRule
from src.models.snapshot import PropertySnapshot
from src.services.custom_schedule_evaluator import evaluate_custom_schedule
from src.services.frequency_evaluator import fires
from src.services.rotation_selector import select_rotation
from src.services.template_resolver import resolve_template
from src.utils.errors import ScheduleRequestError
from src.utils.logging import get_structured_logger, log_timing

logger = get_structured_logger(__name__)


def coerce_schedule_date(value: Any) -> date:
    """Parse a ``YYYY-MM-DD`` string (or pass through a date). Raises ``ScheduleRequestError``."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            raise ScheduleRequestError(f"Invalid date {value!r}, expected YYYY-MM-DD")
    raise ScheduleRequestError("date is required (YYYY-MM-DD)")


def task_priority(asset: Asset, source: TaskSource, occupied: bool) -> TaskPriority:
    """Arrivals, rotation picks and plant rooms are always high; occupied units outrank vacant ones."""
    if source in (TaskSource.OCCUPANCY_ARRIVAL, TaskSource.ROTATION_RULE):
        return TaskPriority.HIGH
    if asset.asset_type == AssetType.PLANT_ROOM:
        return TaskPriority.HIGH
    if asset.asset_type == AssetType.EQUIPMENT:
        return TaskPriority.MEDIUM
    return TaskPriority.HIGH if occupied else TaskPriority.MEDIUM


class ScheduleCompiler:
    """Single-use compilation of one snapshot for one date."""

    def __init__(self, snapshot: PropertySnapshot, on_date: date):
        self.snapshot = snapshot
        self.on_date = on_date
        self.tasks: list[ScheduledTask] = []
        self.warnings: list[ScheduleWarning] = []

    def compile(self) -> ScheduleResult:
        for warning in self.snapshot.integrity_warnings:
            self._record(warning)

        pending: list[Asset] = []
        for asset in self._schedulable_assets():
            schedule = self.snapshot.active_custom_schedule(asset.id)
            if schedule is not None:
                self._apply_custom_schedule(asset, schedule, TaskSource.CUSTOM_SCHEDULE)
                continue

            resolved = resolve_template(asset, self.snapshot.templates)
            if resolved is not None:
                self._apply_custom_schedule(asset, resolved, TaskSource.TEMPLATE)
                continue

            pending.append(asset)

        selected, governed = self._apply_rotation_rules(pending)

        for asset in pending:
            rule = selected.get(asset.id)
            if rule is not None:
                self._emit_rule_tasks(asset, rule)
            elif asset.id in governed and governed[asset.id].plan.suppress_unselected:
                continue
            else:
                self._apply_base_frequency(asset)

        return ScheduleResult(
            property_id=self.snapshot.property_id,
            date=self.on_date,
            tasks=self._finalize(),
            warnings=self.warnings,
        )

    def _schedulable_assets(self) -> list[Asset]:
        seen: set[str] = set()
        assets: list[Asset] = []
        for asset in sorted(self.snapshot.assets, key=lambda a: (a.name, a.id)):
            if not asset.is_active:
                continue
            if asset.property_id != self.snapshot.property_id:
                self._warn(
                    WarningKind.DATA_INTEGRITY,
                    f"Asset belongs to property {asset.property_id}, skipped",
                    asset_id=asset.id,
                )
                continue
            if asset.id in seen:
                self._warn(WarningKind.DATA_INTEGRITY, "Duplicate asset in snapshot, skipped", asset_id=asset.id)
                continue
            seen.add(asset.id)
            assets.append(asset)
        return assets

    def _apply_custom_schedule(self, asset: Asset, schedule: CustomSchedule, source: TaskSource) -> None:
        decision = evaluate_custom_schedule(
            schedule,
            self.on_date,
            occupied=asset.id in self.snapshot.occupied_asset_ids,
            arrival=asset.id in self.snapshot.arrival_asset_ids,
        )
        for message in decision.warnings:
            self._warn(WarningKind.DATA_INTEGRITY, message, asset_id=asset.id)
        for at_time, service_type in decision.tasks:
            self._emit(asset, service_type, at_time, source, schedule.id)
        for at_time, service_type in decision.arrival_tasks:
            self._emit(asset, service_type, at_time, TaskSource.OCCUPANCY_ARRIVAL, schedule.id)

    def _active_rules(self) -> list[PropertySchedulingRule]:
        rules = [
            rule for rule in self.snapshot.rules
            if rule.is_active and rule.property_id == self.snapshot.property_id
        ]
        return sorted(rules, key=lambda rule: (-rule.priority, rule.id))

    def _apply_rotation_rules(
        self,
        pending: list[Asset],
    ) -> tuple[dict[str, PropertySchedulingRule], dict[str, PropertySchedulingRule]]:
        """Select rotation assets; returns (selected, governed) maps of asset ID to rule."""
        selected: dict[str, PropertySchedulingRule] = {}
        governed: dict[str, PropertySchedulingRule] = {}
        property_asset_ids = {asset.id for asset in self.snapshot.assets}

        for rule in self._active_rules():
            plan = rule.plan
            if plan is None:
                self._warn(WarningKind.CONFIGURATION, f"Rule skipped: {rule.error}", rule_id=rule.id)
                continue

            if plan.target_asset_ids and not plan.target_asset_ids & property_asset_ids:
                self._warn(
                    WarningKind.CONFIGURATION,
                    "Rule skipped: none of its target assets exist on the property",
                    rule_id=rule.id,
                )
                continue

            pool = [asset for asset in pending if asset.id not in governed and plan.targets(asset)]
            if not pool:
                self._warn(WarningKind.CONFIGURATION, "Rule skipped: candidate pool is empty", rule_id=rule.id)
                continue

            for asset in pool:
                governed[asset.id] = rule

            if not fires(plan.spec, self.on_date).fires:
                continue

            chosen = select_rotation(rule, pool, self.on_date)
            for asset_id in chosen:
                selected[asset_id] = rule

            logger.debug(
                "Rotation rule selected assets",
                rule_id=rule.id,
                property_id=rule.property_id,
                schedule_date=self.on_date.isoformat(),
                candidates=len(pool),
                selected=sorted(chosen),
            )

        return selected, governed

    def _emit_rule_tasks(self, asset: Asset, rule: PropertySchedulingRule) -> None:
        plan = rule.plan
        for at_time in plan.times:
            for service_type in plan.service_types:
                self._emit(asset, service_type, at_time, TaskSource.ROTATION_RULE, rule.id)

    def _apply_base_frequency(self, asset: Asset) -> None:
        if asset.uses_custom_schedule:
            self._warn(
                WarningKind.DATA_INTEGRITY,
                "Base frequency is 'custom' but no active custom schedule or template applies",
                asset_id=asset.id,
            )
            return

        decision = fires(
            asset.base_schedule,
            self.on_date,
            occupied=asset.id in self.snapshot.occupied_asset_ids,
        )
        if decision.warning:
            self._warn(WarningKind.DATA_INTEGRITY, decision.warning, asset_id=asset.id)
        if not decision.fires:
            return
        for at_time in decision.times:
            self._emit(asset, asset.default_service_type, at_time, TaskSource.BASE_FREQUENCY, None)

    def _emit(
        self,
        asset: Asset,
        service_type: str,
        at_time: time,
        source: TaskSource,
        source_id: Optional[str],
    ) -> None:
        occupied = asset.id in self.snapshot.occupied_asset_ids
        self.tasks.append(ScheduledTask(
            date=self.on_date,
            asset_id=asset.id,
            asset_name=asset.name,
            asset_type=asset.asset_type,
            property_id=asset.property_id,
            service_type=service_type,
            time=at_time,
            source_rule=source,
            source_id=source_id,
            priority=task_priority(asset, source, occupied),
            is_occupied=occupied,
        ))

    def _finalize(self) -> list[ScheduledTask]:
        unique: dict[tuple, ScheduledTask] = {}
        for task in self.tasks:
            existing = unique.get(task.dedupe_key)
            if existing is None:
                unique[task.dedupe_key] = task
                continue
            # the higher-priority duplicate survives, the earlier one on ties
            if task.priority.rank > existing.priority.rank:
                unique[task.dedupe_key], task = task, existing
            logger.debug(
                "Duplicate task dropped",
                asset_id=task.asset_id,
                service_type=task.service_type,
                source_rule=task.source_rule.value,
            )
        return sorted(
            unique.values(),
            key=lambda task: (task.time, task.asset_name, task.asset_id, task.service_type),
        )

    def _warn(
        self,
        kind: WarningKind,
        message: str,
        asset_id: Optional[str] = None,
        rule_id: Optional[str] = None,
    ) -> None:
        self._record(ScheduleWarning(kind=kind, message=message, asset_id=asset_id, rule_id=rule_id))

    def _record(self, warning: ScheduleWarning) -> None:
        self.warnings.append(warning)
        logger.warning(
            "Schedule warning",
            warning_kind=warning.kind.value,
            detail=warning.message,
            asset_id=warning.asset_id,
            rule_id=warning.rule_id,
            property_id=self.snapshot.property_id,
            schedule_date=self.on_date.isoformat(),
        )


def compute_schedule_for_date(snapshot: PropertySnapshot, on_date: Any) -> ScheduleResult:
    """
    Compute the tasks due on ``on_date`` for the snapshot's property.

    Raises ``ScheduleRequestError`` for a missing property ID or an
    unparsable date. Every other problem degrades to a warning in the result.
    """
    target = coerce_schedule_date(on_date)
    if not (snapshot.property_id or "").strip():
        raise ScheduleRequestError("propertyId is required")

    with log_timing(
        "compute_schedule_for_date",
        logger=logger,
        property_id=snapshot.property_id,
        schedule_date=target.isoformat(),
        asset_count=len(snapshot.assets),
    ):
        result = ScheduleCompiler(snapshot, target).compile()

    logger.info(
        "Schedule computed",
        property_id=snapshot.property_id,
        schedule_date=target.isoformat(),
        task_count=len(result.tasks),
        warning_count=len(result.warnings),
    )
    return result
