"""Realtor client detail endpoint."""

from src.services.clients import RealtorClientsService
from src.utils.errors import ClientNotFoundError, StorageError
from src.utils.http import JSONRequestHandler, json_endpoint, run_async
from src.utils.logging import get_structured_logger

_logger = get_structured_logger(__name__)


class handler(JSONRequestHandler):
    """One buyer with per-step progress, scoped to the requesting realtor."""

    @json_endpoint
    def do_GET(self):
        """Handle GET ?realtor_id=...&buyer_id=..."""
        realtor_id = self.query_param("realtor_id")
        buyer_id = self.query_param("buyer_id")
        if not realtor_id or not buyer_id:
            self.send_json(400, {"error": "realtor_id and buyer_id are required"})
            return

        try:
            detail = run_async(RealtorClientsService().get_client(realtor_id, buyer_id))
        except ClientNotFoundError as e:
            self.send_json(404, {"error": str(e)})
            return
        except StorageError as e:
            _logger.error("Failed to load client", realtor_id=realtor_id, buyer_id=buyer_id, error=str(e))
            self.send_json(500, {"error": "Failed to retrieve client"})
            return

        self.send_json(200, detail.model_dump(mode="json"))
