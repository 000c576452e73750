"""Custom schedule evaluator - turns a custom schedule into (time, service type) pairs."""

from datetime import date, time
from pydantic import BaseModel, Field

from src.models.custom_schedule import CustomSchedule
from src.services.frequency_evaluator import fires


class CustomScheduleDecision(BaseModel):
    """Outcome of evaluating a custom schedule on one date."""
    fires: bool = False
    tasks: list[tuple[time, str]] = Field(default_factory=list)
    arrival_tasks: list[tuple[time, str]] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


def evaluate_custom_schedule(
    schedule: CustomSchedule,
    on_date: date,
    *,
    occupied: bool = False,
    arrival: bool = False,
) -> CustomScheduleDecision:
    """
    Evaluate a custom schedule for a date.

    Each entry that fires emits one task per (time, service type). An entry
    that fires without service types for its trigger key contributes no
    tasks and a warning. Arrival tasks are returned separately so the caller
    can tag them.
    """
    decision = CustomScheduleDecision()

    if schedule.error:
        decision.warnings.append(schedule.error)
        return decision

    for entry in schedule.entries:
        outcome = fires(entry.spec, on_date, occupied=occupied)
        if outcome.warning:
            decision.warnings.append(outcome.warning)
        if not outcome.fires:
            continue

        decision.fires = True
        if not entry.service_types:
            decision.warnings.append(
                f"No service types configured for trigger '{entry.trigger_key}'"
            )
            continue

        for at_time in outcome.times:
            for service_type in entry.service_types:
                decision.tasks.append((at_time, service_type))

    rule = schedule.arrival_rule
    if rule is not None and arrival:
        decision.fires = True
        decision.arrival_tasks.append((rule.at_time, rule.service_type))

    return decision
