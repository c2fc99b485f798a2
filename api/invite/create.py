"""Invite code issuance endpoint."""

from src.services.invite_codes import InviteCodeService
from src.utils.errors import InviteCodeCollisionError, InviteCodeError, StorageError
from src.utils.http import JSONRequestHandler, json_endpoint, run_async
from src.utils.logging import get_structured_logger

_logger = get_structured_logger(__name__)


class handler(JSONRequestHandler):
    """Create an invite code for a buyer email on behalf of a realtor."""

    @json_endpoint
    def do_POST(self):
        """Handle POST {email, realtor_id, buyer_name?}."""
        body = self.read_json()
        if body is None:
            self.send_json(400, {"error": "Request body must be a JSON object"})
            return

        email = body.get("email")
        realtor_id = body.get("realtor_id")
        if not isinstance(email, str) or not isinstance(realtor_id, str) or not email or not realtor_id:
            self.send_json(400, {"error": "email and realtor_id are required"})
            return

        try:
            invite = run_async(InviteCodeService().create_invite_code(
                email,
                realtor_id,
                buyer_name=body.get("buyer_name"),
            ))
        except InviteCodeCollisionError as e:
            _logger.error("Invite code generation exhausted", realtor_id=realtor_id, error=str(e))
            self.send_json(500, {"error": "Failed to create invite code"})
            return
        except InviteCodeError as e:
            _logger.warning("Invite code creation rejected", realtor_id=realtor_id, error=str(e))
            self.send_json(400, {"error": str(e)})
            return
        except StorageError as e:
            _logger.error("Invite code creation failed", realtor_id=realtor_id, error=str(e))
            self.send_json(500, {"error": "Failed to create invite code"})
            return

        self.send_json(200, {"invite": invite.model_dump(mode="json")})
