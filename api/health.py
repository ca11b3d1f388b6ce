"""Health check endpoint."""

from http.server import BaseHTTPRequestHandler
import json
import os


def health_payload() -> dict:
    """Liveness plus whether the property store is configured."""
    store_configured = bool(os.environ.get("SUPABASE_URL") and os.environ.get("SUPABASE_SERVICE_ROLE_KEY"))
    return {
        "status": "ok" if store_configured else "degraded",
        "service": "imoveis77-backend",
        "store": "configured" if store_configured else "missing",
    }


class handler(BaseHTTPRequestHandler):
    """Health check handler for Vercel serverless function."""

    def _write_json(self, status: int, payload: dict) -> None:
        self.send_response(status)
        self.send_header('Content-Type', 'application/json')
        self.send_header('Cache-Control', 'no-store')
        self.end_headers()
        self.wfile.write(json.dumps(payload).encode('utf-8'))

    def do_GET(self):
        self._write_json(200, health_payload())

    def do_HEAD(self):
        self.send_response(200)
        self.end_headers()
