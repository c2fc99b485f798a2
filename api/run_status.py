"""Run status endpoint (proxy to the assistant API)."""

from src.services.assistant_client import AssistantClient
from src.utils.errors import AssistantError
from src.utils.http import JSONRequestHandler, json_endpoint, run_async


class handler(JSONRequestHandler):
    """Return the current status of an assistant run."""

    @json_endpoint
    def do_GET(self):
        """Handle GET ?thread_id=...&run_id=..."""
        thread_id = self.query_param("thread_id")
        run_id = self.query_param("run_id")
        if not thread_id or not run_id:
            self.send_json(400, {"error": "Thread ID and Run ID are required"})
            return

        try:
            run = run_async(AssistantClient().get_run(thread_id, run_id))
        except AssistantError:
            self.send_json(500, {"error": "Failed to retrieve run status"})
            return

        self.send_json(200, {"run": run.model_dump(mode="json")})
