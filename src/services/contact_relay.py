"""Contact form relay - forwards validated submissions to the third-party form endpoint."""

from typing import Any, Optional

import httpx
from pydantic import ValidationError

from src.models.contact import FIELD_ERROR_MESSAGES, ContactForm, ContactResult
from src.utils.config import AppConfig
from src.utils.errors import ContactRelayError
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

MSG_SUCCESS = "Thanks! We've received your message and will get back to you shortly."
MSG_INVALID = "Please check your form inputs"
MSG_FAILED = "Failed to send your message. Please try again later."


def validation_errors(error: ValidationError) -> dict[str, str]:
    """Flatten pydantic errors into field -> user-facing message, first error per field."""
    errors: dict[str, str] = {}
    for item in error.errors():
        field = str(item["loc"][0]) if item.get("loc") else "form"
        errors.setdefault(field, FIELD_ERROR_MESSAGES.get(field, item.get("msg", "Invalid value")))
    return errors


async def relay_contact_form(form: ContactForm, client: Optional[httpx.AsyncClient] = None) -> None:
    """POST a contact form to the relay. Raises ContactRelayError on any failure."""
    if not AppConfig.CONTACT_RELAY_ACCESS_KEY:
        raise ContactRelayError("CONTACT_RELAY_ACCESS_KEY must be set")

    payload = {
        "access_key": AppConfig.CONTACT_RELAY_ACCESS_KEY,
        "subject": f"New contact form submission from {form.name}",
        **form.model_dump(exclude_none=True),
    }

    owns_client = client is None
    client = client or httpx.AsyncClient(timeout=AppConfig.CONTACT_RELAY_TIMEOUT_SECONDS)
    try:
        response = await client.post(AppConfig.CONTACT_RELAY_URL, json=payload)
        response.raise_for_status()
        body = response.json()
    except (httpx.HTTPError, ValueError) as e:
        raise ContactRelayError(f"Contact relay request failed: {e}")
    finally:
        if owns_client:
            await client.aclose()

    if not body.get("success", False):
        raise ContactRelayError(f"Contact relay rejected submission: {body.get('message')}")


async def submit_contact_form(data: dict[str, Any], client: Optional[httpx.AsyncClient] = None) -> ContactResult:
    """Validate and relay a raw contact form payload, returning a user-facing result."""
    try:
        form = ContactForm.model_validate(data)
    except ValidationError as e:
        return ContactResult(success=False, message=MSG_INVALID, errors=validation_errors(e))

    try:
        await relay_contact_form(form, client=client)
    except ContactRelayError as e:
        logger.error("Error processing contact form", email=form.email, error=str(e))
        return ContactResult(success=False, message=MSG_FAILED)

    logger.info("Contact form relayed", email=form.email)
    return ContactResult(success=True, message=MSG_SUCCESS)
