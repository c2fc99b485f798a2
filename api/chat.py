"""Chat message endpoint (proxy to the assistant API)."""

from pydantic import ValidationError

from src.models.chat import ChatRequest
from src.services.assistant_client import AssistantClient
from src.utils.errors import AssistantError
from src.utils.http import JSONRequestHandler, json_endpoint, run_async


class handler(JSONRequestHandler):
    """Post a user message to a thread and start an assistant run."""

    @json_endpoint
    def do_POST(self):
        """Handle POST {message, thread_id}."""
        body = self.read_json()
        if body is None:
            self.send_json(400, {"error": "Request body must be a JSON object"})
            return

        if not body.get("message"):
            self.send_json(400, {"error": "Message is required"})
            return
        if not body.get("thread_id"):
            self.send_json(400, {"error": "Thread ID is required"})
            return

        try:
            request = ChatRequest.model_validate(body)
        except ValidationError:
            self.send_json(400, {"error": "Message and Thread ID must not be blank"})
            return

        try:
            run = run_async(AssistantClient().post_message(request.thread_id, request.message))
        except AssistantError:
            self.send_json(500, {"error": "Failed to process chat request"})
            return

        self.send_json(200, {"run": run.model_dump(mode="json")})
