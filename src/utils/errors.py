"""Error handling utilities."""

from typing import Optional


class PoolScheduleError(Exception):
    """Base exception for the pool schedule backend."""
    pass


class ScheduleRequestError(PoolScheduleError):
    """Caller error: the request cannot be compiled (missing property, bad date)."""
    pass


class ScheduleConfigError(PoolScheduleError):
    """A schedule, rule or template configuration could not be parsed."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class PropertyNotFoundError(PoolScheduleError):
    """Property does not exist."""
    pass


class SupabaseError(PoolScheduleError):
    """Supabase operation error."""
    pass
