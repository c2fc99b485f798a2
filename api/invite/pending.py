"""Pending invites for a realtor (derived view over the invite store)."""

from src.services.invite_codes import InviteCodeService
from src.utils.errors import StorageError
from src.utils.http import JSONRequestHandler, json_endpoint, run_async
from src.utils.logging import get_structured_logger

_logger = get_structured_logger(__name__)


class handler(JSONRequestHandler):
    """List a realtor's pending invites."""

    @json_endpoint
    def do_GET(self):
        """Handle GET ?realtor_id=..."""
        realtor_id = self.query_param("realtor_id")
        if not realtor_id:
            self.send_json(400, {"error": "realtor_id is required"})
            return

        try:
            invites = run_async(InviteCodeService().pending_invites_for_realtor(realtor_id))
        except StorageError as e:
            _logger.error("Failed to list pending invites", realtor_id=realtor_id, error=str(e))
            self.send_json(500, {"error": "Failed to retrieve pending invites"})
            return

        self.send_json(200, {"invites": [invite.model_dump(mode="json") for invite in invites]})
