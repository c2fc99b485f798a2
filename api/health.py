"""Health check endpoint."""

from src.utils.config import AppConfig
from src.utils.http import JSONRequestHandler


class handler(JSONRequestHandler):
    """Health check handler for Vercel serverless function."""

    def do_GET(self):
        """Handle GET request."""
        self.send_json(200, {
            "status": "ok",
            "service": "buyhome-backend",
            "storage_backend": AppConfig.STORAGE_BACKEND,
            "assistant_configured": bool(AppConfig.OPENAI_ASSISTANT_ID),
        })

    def do_POST(self):
        """Handle POST request (same as GET for health check)."""
        self.do_GET()
