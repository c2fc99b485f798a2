"""Thread messages endpoint (proxy to the assistant API)."""

from src.services.assistant_client import AssistantClient
from src.utils.errors import AssistantError
from src.utils.http import JSONRequestHandler, json_endpoint, run_async


class handler(JSONRequestHandler):
    """List the messages of a chat thread."""

    @json_endpoint
    def do_GET(self):
        """Handle GET ?thread_id=..."""
        thread_id = self.query_param("thread_id")
        if not thread_id:
            self.send_json(400, {"error": "Thread ID is required"})
            return

        try:
            messages = run_async(AssistantClient().list_messages(thread_id))
        except AssistantError:
            self.send_json(500, {"error": "Failed to retrieve messages"})
            return

        self.send_json(200, {"messages": [m.model_dump(mode="json") for m in messages]})
