"""Contact form endpoint."""

from src.services.contact_relay import submit_contact_form
from src.utils.http import JSONRequestHandler, json_endpoint, run_async


class handler(JSONRequestHandler):
    """Validate a contact form submission and relay it."""

    @json_endpoint
    def do_POST(self):
        """Handle POST {name, email, phone?, message}."""
        body = self.read_json()
        if body is None:
            self.send_json(400, {"success": False, "message": "Please check your form inputs"})
            return

        result = run_async(submit_contact_form(body))
        if result.success:
            status = 200
        elif result.errors:
            status = 400
        else:
            status = 500
        self.send_json(status, result.model_dump(mode="json"))
