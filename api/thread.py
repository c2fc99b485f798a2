"""Chat thread creation endpoint (proxy to the assistant API)."""

from src.services.assistant_client import AssistantClient
from src.utils.errors import AssistantError
from src.utils.http import JSONRequestHandler, json_endpoint, run_async


class handler(JSONRequestHandler):
    """Create a new chat thread."""

    @json_endpoint
    def do_POST(self):
        """Handle POST request."""
        try:
            thread_id = run_async(AssistantClient().create_thread())
        except AssistantError:
            self.send_json(500, {"error": "Failed to create thread"})
            return

        self.send_json(200, {"thread": {"id": thread_id}})
