"""Realtor client list endpoint."""

from src.services.clients import RealtorClientsService
from src.utils.errors import ClientNotFoundError, StorageError
from src.utils.http import JSONRequestHandler, json_endpoint, run_async
from src.utils.logging import get_structured_logger

_logger = get_structured_logger(__name__)


class handler(JSONRequestHandler):
    """List the buyers linked to a realtor."""

    @json_endpoint
    def do_GET(self):
        """Handle GET ?realtor_id=...&status=...&search=..."""
        realtor_id = self.query_param("realtor_id")
        if not realtor_id:
            self.send_json(400, {"error": "realtor_id is required"})
            return

        try:
            result = run_async(RealtorClientsService().list_clients(
                realtor_id,
                status=self.query_param("status"),
                search=self.query_param("search"),
            ))
        except ValueError as e:
            self.send_json(400, {"error": str(e)})
            return
        except ClientNotFoundError as e:
            self.send_json(404, {"error": str(e)})
            return
        except StorageError as e:
            _logger.error("Failed to list realtor clients", realtor_id=realtor_id, error=str(e))
            self.send_json(500, {"error": "Failed to retrieve clients"})
            return

        self.send_json(200, result.model_dump(mode="json"))
