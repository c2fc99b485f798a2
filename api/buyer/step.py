"""Buyer step completion endpoint."""

from src.services.signup import SignupService
from src.utils.errors import SignupError, StorageError
from src.utils.http import JSONRequestHandler, json_endpoint, run_async
from src.utils.logging import get_structured_logger

_logger = get_structured_logger(__name__)


class handler(JSONRequestHandler):
    """Mark a guided step complete for a buyer."""

    @json_endpoint
    def do_POST(self):
        """Handle POST {buyer_id, step}."""
        body = self.read_json()
        if body is None:
            self.send_json(400, {"error": "Request body must be a JSON object"})
            return

        buyer_id = body.get("buyer_id")
        step = body.get("step")
        if not buyer_id or not isinstance(step, int) or isinstance(step, bool):
            self.send_json(400, {"error": "buyer_id and integer step are required"})
            return

        try:
            buyer = run_async(SignupService().complete_step(buyer_id, step))
        except (SignupError, ValueError) as e:
            self.send_json(400, {"error": str(e)})
            return
        except StorageError as e:
            _logger.error("Failed to record step completion", buyer_id=buyer_id, error=str(e))
            self.send_json(500, {"error": "Failed to update progress"})
            return

        self.send_json(200, {"buyer": buyer.model_dump(mode="json")})
