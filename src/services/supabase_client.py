"""Supabase client wrapper and read helpers for schedule inputs."""

import os
from datetime import date
from typing import Optional
from supabase import create_client, Client
from supabase.client import ClientOptions
from src.utils.errors import SupabaseError
import logging

logger = logging.getLogger(__name__)

# Global client instance (singleton pattern)
_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """Get or create Supabase client singleton."""
    global _client

    if _client is None:
        url = os.environ.get("SUPABASE_URL")
        key = os.environ.get("SUPABASE_SERVICE_ROLE_KEY")

        if not url or not key:
            raise SupabaseError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")

        options = ClientOptions(
            auto_refresh_token=False,
            persist_session=False,
        )

        _client = create_client(url, key, options)
        logger.info("Supabase client initialized", extra={"url": url})

    return _client


class SupabaseClient:
    """Async context manager for Supabase client."""

    def __init__(self):
        self.client: Optional[Client] = None

    async def __aenter__(self) -> Client:
        """Enter async context."""
        self.client = get_supabase_client()
        return self.client

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Exit async context."""
        if exc_type:
            logger.error(
                "Supabase operation error",
                extra={"error": str(exc_val), "type": exc_type.__name__}
            )
        return False


# Properties
async def get_property(property_id: str) -> Optional[dict]:
    """Get a property by ID."""
    async with SupabaseClient() as client:
        try:
            result = client.table("properties").select("id, name, company_id").eq("id", property_id).execute()
            return result.data[0] if result.data and len(result.data) > 0 else None
        except Exception as e:
            raise SupabaseError(f"Failed to get property: {e}")


# Assets
async def list_units_for_property(property_id: str) -> list[dict]:
    """Get active units (pools, spas) for a property."""
    async with SupabaseClient() as client:
        try:
            result = client.table("units").select("*").eq("property_id", property_id).eq("is_active", True).execute()
            return result.data if result.data else []
        except Exception as e:
            raise SupabaseError(f"Failed to list units: {e}")


async def list_plant_rooms_for_property(property_id: str) -> list[dict]:
    """Get active plant rooms for a property."""
    async with SupabaseClient() as client:
        try:
            result = client.table("plant_rooms").select("*").eq("property_id", property_id).eq("is_active", True).execute()
            return result.data if result.data else []
        except Exception as e:
            raise SupabaseError(f"Failed to list plant rooms: {e}")


async def list_equipment_for_property(property_id: str) -> list[dict]:
    """Get active equipment for a property."""
    async with SupabaseClient() as client:
        try:
            result = client.table("equipment").select("*").eq("property_id", property_id).eq("is_active", True).execute()
            return result.data if result.data else []
        except Exception as e:
            raise SupabaseError(f"Failed to list equipment: {e}")


# Custom schedules (keyed by unit_id)
async def get_active_custom_schedule(asset_id: str) -> Optional[dict]:
    """Get the active custom schedule for an asset."""
    async with SupabaseClient() as client:
        try:
            result = client.table("custom_schedules").select("*").eq("unit_id", asset_id).eq("is_active", True).execute()
            return result.data[0] if result.data and len(result.data) > 0 else None
        except Exception as e:
            raise SupabaseError(f"Failed to get custom schedule: {e}")


async def list_active_custom_schedules(asset_ids: list[str]) -> list[dict]:
    """Get active custom schedules for a batch of assets."""
    if not asset_ids:
        return []
    async with SupabaseClient() as client:
        try:
            result = client.table("custom_schedules").select("*").in_("unit_id", asset_ids).eq("is_active", True).execute()
            return result.data if result.data else []
        except Exception as e:
            raise SupabaseError(f"Failed to list custom schedules: {e}")


# Property scheduling rules
async def list_active_rules_for_property(property_id: str) -> list[dict]:
    """Get active scheduling rules for a property."""
    async with SupabaseClient() as client:
        try:
            result = client.table("property_scheduling_rules").select("*").eq("property_id", property_id).eq("is_active", True).execute()
            return result.data if result.data else []
        except Exception as e:
            raise SupabaseError(f"Failed to list scheduling rules: {e}")


# Schedule templates
async def list_applicable_templates(company_id: Optional[str]) -> list[dict]:
    """Get active templates owned by a company plus public templates (public only without a company)."""
    async with SupabaseClient() as client:
        try:
            query = client.table("schedule_templates").select("*")
            if company_id:
                query = query.or_(f"company_id.eq.{company_id},is_public.eq.true")
            else:
                query = query.eq("is_public", True)
            result = (
                query
                .eq("is_active", True)
                .order("template_name")
                .execute()
            )
            return result.data if result.data else []
        except Exception as e:
            raise SupabaseError(f"Failed to list schedule templates: {e}")


# Bookings (occupancy)
async def list_occupancy(property_id: str, on_date: date) -> list[dict]:
    """Get bookings on a property that cover a date."""
    day = on_date.isoformat()
    async with SupabaseClient() as client:
        try:
            result = (
                client.table("bookings")
                .select("id, unit_id, check_in_date, check_out_date, units!inner(property_id)")
                .eq("units.property_id", property_id)
                .lte("check_in_date", day)
                .gte("check_out_date", day)
                .execute()
            )
            return result.data if result.data else []
        except Exception as e:
            raise SupabaseError(f"Failed to list bookings: {e}")
