"""Realtor signup endpoint."""

from src.services.signup import SignupService
from src.utils.errors import SignupError
from src.utils.http import JSONRequestHandler, json_endpoint, run_async


class handler(JSONRequestHandler):
    """Create a realtor account with the realtor signup code."""

    @json_endpoint
    def do_POST(self):
        """Handle POST {name, email, signup_code, phone?, brokerage?, license_number?}."""
        body = self.read_json()
        if body is None:
            self.send_json(400, {"error": "Request body must be a JSON object"})
            return

        missing = [f for f in ("name", "email", "signup_code") if not body.get(f)]
        if missing:
            self.send_json(400, {"error": f"Missing required fields: {', '.join(missing)}"})
            return

        try:
            realtor = run_async(SignupService().register_realtor(
                body["name"],
                body["email"],
                body["signup_code"],
                phone=body.get("phone"),
                brokerage=body.get("brokerage"),
                license_number=body.get("license_number"),
            ))
        except SignupError as e:
            self.send_json(400, {"error": str(e)})
            return

        self.send_json(201, {"realtor": realtor.model_dump(mode="json")})
