"""Tests for the custom schedule evaluator."""

import pytest
from datetime import date, time
from src.models.custom_schedule import CustomSchedule
from src.services.custom_schedule_evaluator import evaluate_custom_schedule


@pytest.mark.unit
def test_simple_daily_schedule(daily_full_service_schedule, next_monday):
    """Test a simple daily schedule emits its service type."""
    decision = evaluate_custom_schedule(daily_full_service_schedule, next_monday)

    assert decision.fires is True
    assert decision.tasks == [(time(9, 0), "full_service")]
    assert decision.warnings == []


@pytest.mark.unit
def test_simple_schedule_multiple_service_types_and_times():
    """Test one task per (time, service type)."""
    schedule = CustomSchedule(
        asset_id="unit-1",
        schedule_config={"frequency": "2x_daily", "times": ["09:00", "16:00"]},
        service_types={"2x_daily": ["test_only", "skim"]},
    )

    decision = evaluate_custom_schedule(schedule, date(2025, 1, 6))

    assert decision.tasks == [
        (time(9, 0), "test_only"),
        (time(9, 0), "skim"),
        (time(16, 0), "test_only"),
        (time(16, 0), "skim"),
    ]


@pytest.mark.unit
def test_schedule_not_firing(next_monday):
    """Test a weekly schedule on the wrong day."""
    schedule = CustomSchedule(
        asset_id="unit-1",
        schedule_config={"frequency": "weekly", "day_preference": "friday"},
        service_types={"weekly": ["full_service"]},
    )

    decision = evaluate_custom_schedule(schedule, next_monday)

    assert decision.fires is False
    assert decision.tasks == []


@pytest.mark.unit
def test_missing_service_types_key_warns(next_monday):
    """Test a firing entry without service types for its key."""
    schedule = CustomSchedule(
        asset_id="unit-1",
        schedule_config={"frequency": "daily"},
        service_types={"weekly": ["full_service"]},
    )

    decision = evaluate_custom_schedule(schedule, next_monday)

    assert decision.fires is True
    assert decision.tasks == []
    assert decision.warnings == ["No service types configured for trigger 'daily'"]


@pytest.mark.unit
def test_complex_schedule_combines_entries():
    """Test complex entries firing on the same date all contribute."""
    schedule = CustomSchedule(
        asset_id="unit-1",
        schedule_type="complex",
        schedule_config={
            "schedules": [
                {"frequency": "daily", "time": "09:00", "service_types": ["test_only"]},
                {"frequency": "weekly", "weekday": "monday", "time": "14:00", "service_types": ["full_service"]},
                {"frequency": "dates", "dates": ["2025-01-07"], "time": "07:00", "service_types": ["event_prep"]},
            ]
        },
    )

    monday = evaluate_custom_schedule(schedule, date(2025, 1, 6))
    tuesday = evaluate_custom_schedule(schedule, date(2025, 1, 7))

    assert monday.tasks == [(time(9, 0), "test_only"), (time(14, 0), "full_service")]
    assert tuesday.tasks == [(time(9, 0), "test_only"), (time(7, 0), "event_prep")]


@pytest.mark.unit
def test_invalid_entry_warns_other_entries_still_fire():
    """Test one bad complex entry does not block the others."""
    schedule = CustomSchedule(
        asset_id="unit-1",
        schedule_type="complex",
        schedule_config={
            "schedules": [
                {"frequency": "3x_daily", "times": ["09:00"], "service_types": ["test_only"]},
                {"frequency": "daily", "time": "10:00", "service_types": ["full_service"]},
            ]
        },
    )

    decision = evaluate_custom_schedule(schedule, date(2025, 1, 6))

    assert decision.tasks == [(time(10, 0), "full_service")]
    assert len(decision.warnings) == 1
    assert "3x_daily" in decision.warnings[0]


@pytest.mark.unit
def test_schedule_error_warns():
    """Test an unusable schedule yields only a warning."""
    schedule = CustomSchedule(asset_id="unit-1", schedule_type="complex", schedule_config={})

    decision = evaluate_custom_schedule(schedule, date(2025, 1, 6))

    assert decision.fires is False
    assert decision.tasks == []
    assert decision.warnings


@pytest.mark.unit
def test_arrival_tasks_only_on_arrival():
    """Test on_arrival rules emit separately on arrival days."""
    schedule = CustomSchedule(
        asset_id="unit-1",
        schedule_config={
            "frequency": "daily_when_occupied",
            "time_preference": "14:00",
            "occupancy_rules": {"on_arrival": True},
        },
        service_types={"daily_when_occupied": ["test_only"], "daily": ["arrival_prep"]},
    )

    arrival = evaluate_custom_schedule(schedule, date(2025, 1, 6), occupied=True, arrival=True)
    stay = evaluate_custom_schedule(schedule, date(2025, 1, 7), occupied=True)
    vacant = evaluate_custom_schedule(schedule, date(2025, 1, 8))

    assert arrival.tasks == [(time(14, 0), "test_only")]
    assert arrival.arrival_tasks == [(time(14, 0), "arrival_prep")]
    assert stay.arrival_tasks == []
    assert stay.tasks == [(time(14, 0), "test_only")]
    assert vacant.fires is False
