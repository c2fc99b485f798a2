"""Buyer signup endpoint."""

from src.services.signup import SignupService
from src.utils.errors import SignupError
from src.utils.http import JSONRequestHandler, json_endpoint, run_async


class handler(JSONRequestHandler):
    """Create a buyer account from a realtor's invite code."""

    @json_endpoint
    def do_POST(self):
        """Handle POST {first_name, last_name?, email, invite_code}."""
        body = self.read_json()
        if body is None:
            self.send_json(400, {"error": "Request body must be a JSON object"})
            return

        missing = [f for f in ("first_name", "email", "invite_code") if not body.get(f)]
        if missing:
            self.send_json(400, {"error": f"Missing required fields: {', '.join(missing)}"})
            return

        try:
            buyer = run_async(SignupService().register_buyer(
                body["first_name"],
                body.get("last_name") or "",
                body["email"],
                body["invite_code"],
            ))
        except SignupError as e:
            self.send_json(400, {"error": str(e)})
            return

        self.send_json(201, {"buyer": buyer.model_dump(mode="json")})
