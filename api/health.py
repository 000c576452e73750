"""Health check endpoint."""

from http.server import BaseHTTPRequestHandler
import json

from src.utils.config import SchedulingConfig
from src.utils.logging_config import LoggingConfig


def health_payload() -> dict:
    """Liveness body, with the scheduling defaults this deployment runs with."""
    return {
        "status": "ok",
        "service": LoggingConfig.LOG_SERVICE_NAME,
        "defaults": {
            "time": SchedulingConfig.DEFAULT_TIME,
            "plant_room_times": SchedulingConfig.DEFAULT_PLANT_ROOM_TIMES,
            "equipment_times": SchedulingConfig.DEFAULT_EQUIPMENT_TIMES,
            "service_type": SchedulingConfig.DEFAULT_SERVICE_TYPE,
            "rotation_service_type": SchedulingConfig.DEFAULT_ROTATION_SERVICE_TYPE,
        },
    }


class handler(BaseHTTPRequestHandler):
    """Health check handler for Vercel serverless function."""

    def do_GET(self):
        """Handle GET request."""
        self.send_response(200)
        self.send_header('Content-Type', 'application/json')
        self.send_header('Cache-Control', 'no-store')
        self.end_headers()
        self.wfile.write(json.dumps(health_payload()).encode('utf-8'))

    def do_HEAD(self):
        """Handle HEAD request (uptime probes)."""
        self.send_response(200)
        self.send_header('Content-Type', 'application/json')
        self.end_headers()
