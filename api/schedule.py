"""Schedule read endpoint for Vercel: GET /api/schedule?date=YYYY-MM-DD&propertyId=<id>."""

from http.server import BaseHTTPRequestHandler
from datetime import date
from urllib.parse import urlparse, parse_qs
import asyncio
import json

from src.services.schedule_compiler import coerce_schedule_date, compute_schedule_for_date
from src.services.snapshot_loader import load_property_snapshot
from src.utils.errors import PropertyNotFoundError, ScheduleRequestError, SupabaseError
from src.utils.logging import correlation_context, get_structured_logger, setup_logging
from src.utils.logging_config import LoggingConfig

setup_logging()
logger = get_structured_logger(__name__)


def parse_schedule_query(path: str) -> tuple[str, date]:
    """
    Extract (property_id, date) from a request path.

    A missing date means today. Raises ScheduleRequestError for a missing
    propertyId or an unparsable date.
    """
    query = parse_qs(urlparse(path).query)
    property_id = (query.get("propertyId") or [""])[0].strip()
    if not property_id:
        raise ScheduleRequestError("propertyId is required")

    raw_date = (query.get("date") or [""])[0].strip()
    on_date = coerce_schedule_date(raw_date) if raw_date else date.today()
    return property_id, on_date


def handle_schedule_request(path: str) -> tuple[int, dict]:
    """Compute the schedule for a request path, returning (status, body)."""
    try:
        property_id, on_date = parse_schedule_query(path)
    except ScheduleRequestError as e:
        logger.warning("Rejected schedule request", error=str(e), path=path)
        return 400, {"error": str(e)}

    try:
        snapshot = asyncio.run(load_property_snapshot(property_id, on_date))
        result = compute_schedule_for_date(snapshot, on_date)
    except ScheduleRequestError as e:
        return 400, {"error": str(e)}
    except PropertyNotFoundError as e:
        return 404, {"error": str(e)}
    except SupabaseError as e:
        logger.error("Schedule backend error", property_id=property_id, error=str(e), exc_info=True)
        return 500, {"error": "backend unavailable"}

    return 200, result.to_response()


class handler(BaseHTTPRequestHandler):
    """Vercel serverless function handler for the schedule endpoint."""

    def _send_json(self, status: int, body: dict) -> None:
        self.send_response(status)
        self.send_header('Content-Type', 'application/json')
        self.end_headers()
        self.wfile.write(json.dumps(body).encode('utf-8'))

    def do_GET(self):
        """Handle GET request."""
        correlation_id = self.headers.get(LoggingConfig.LOG_CORRELATION_ID_HEADER) if self.headers else None
        with correlation_context(correlation_id):
            try:
                status, body = handle_schedule_request(self.path)
            except Exception as e:
                logger.error("Error computing schedule", error=str(e), exc_info=True)
                status, body = 500, {"error": "internal server error"}
            self._send_json(status, body)
