"""Shared pytest fixtures and configuration."""

import os
import pytest
from datetime import date
from freezegun import freeze_time

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-key")
os.environ.setdefault("LOG_FORMAT", "text")

from src.models.asset import Asset, AssetType
from src.models.custom_schedule import CustomSchedule
from src.models.scheduling_rule import PropertySchedulingRule
from src.models.snapshot import PropertySnapshot


PROPERTY_ID = "prop-1"
COMPANY_ID = "company-1"

# 2025-01-06 is a Monday
NEXT_MONDAY = date(2025, 1, 6)


@pytest.fixture
def property_id():
    return PROPERTY_ID


@pytest.fixture
def next_monday():
    return NEXT_MONDAY


@pytest.fixture
def daily_unit():
    """Pool with a plain daily base frequency."""
    return Asset(
        id="unit-daily",
        property_id=PROPERTY_ID,
        name="Main Pool",
        asset_type=AssetType.UNIT,
        unit_type="main_pool",
        water_type="saltwater",
        base_frequency="daily",
        base_times=["09:00"],
    )


@pytest.fixture
def custom_unit():
    """Spa that defers to its custom schedule."""
    return Asset(
        id="unit-custom",
        property_id=PROPERTY_ID,
        name="Villa 3 Spa",
        asset_type=AssetType.UNIT,
        unit_type="villa_spa",
        base_frequency="custom",
    )


@pytest.fixture
def daily_full_service_schedule():
    """The simple daily custom schedule used across the app's own tests."""
    return CustomSchedule(
        id="cs-1",
        asset_id="unit-custom",
        name="Daily full service",
        schedule_type="simple",
        schedule_config={"frequency": "daily", "time_preference": "09:00"},
        service_types={"daily": ["full_service"]},
    )


@pytest.fixture
def pool_rotation_units():
    """Four shared pools A-D that never fire on their own on weekdays."""
    return [
        Asset(
            id=f"pool-{letter.lower()}",
            property_id=PROPERTY_ID,
            name=letter,
            asset_type=AssetType.UNIT,
            unit_type="main_pool",
            base_frequency="weekly",
            weekday="sunday",
        )
        for letter in "ABCD"
    ]


@pytest.fixture
def random_selection_rule():
    """Rotate 2 test-only services per day across the property's units."""
    return PropertySchedulingRule(
        id="rule-1",
        property_id=PROPERTY_ID,
        rule_name="Daily spot checks",
        rule_type="random_selection",
        rule_config={
            "selection_count": 2,
            "frequency": "daily",
            "time_preference": "10:00",
            "service_types": {"daily": ["test_only"]},
        },
    )


@pytest.fixture
def make_snapshot():
    """Build a snapshot for the test property."""
    def _make(**kwargs):
        kwargs.setdefault("property_id", PROPERTY_ID)
        kwargs.setdefault("company_id", COMPANY_ID)
        return PropertySnapshot(**kwargs)
    return _make


@pytest.fixture
def freeze_time_fixture():
    """Fixture for freezing time in tests."""
    with freeze_time("2025-01-06 12:00:00") as frozen_time:
        yield frozen_time

