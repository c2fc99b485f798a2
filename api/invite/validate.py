"""Invite code validation endpoint."""

from src.services.invite_codes import InviteCodeService
from src.utils.http import JSONRequestHandler, json_endpoint, run_async


class handler(JSONRequestHandler):
    """Validate an invite code for a role (read-only)."""

    @json_endpoint
    def do_POST(self):
        """Handle POST {code, role?, email?}."""
        body = self.read_json()
        if body is None:
            self.send_json(400, {"error": "Request body must be a JSON object"})
            return

        role = body.get("role") or "buyer"
        if role not in ("buyer", "realtor"):
            self.send_json(400, {"error": "role must be buyer or realtor"})
            return

        validation = run_async(InviteCodeService().validate_invite_code(
            body.get("code"),
            role=role,
            email=body.get("email"),
        ))
        self.send_json(200, validation.model_dump(mode="json"))
