"""Application configuration read from environment variables."""

import logging
import os

logger = logging.getLogger(__name__)


def _env_bool(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).strip().lower() == "true"


def _env_number(name: str, default, cast):
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError:
        logger.warning("Ignoring malformed %s=%r, using %r", name, raw, default)
        return default


def _env_int(name: str, default: int) -> int:
    return _env_number(name, default, int)


def _env_float(name: str, default: float) -> float:
    return _env_number(name, default, float)


def _env_list(name: str, default: str = "") -> list[str]:
    raw = os.environ.get(name, default)
    return [item.strip().upper() for item in raw.split(",") if item.strip()]


class AppConfig:
    """Centralized application configuration."""

    # Storage
    STORAGE_BACKEND = os.environ.get("STORAGE_BACKEND", "memory").lower()

    # Invite codes
    REALTOR_SIGNUP_CODE = os.environ.get("REALTOR_SIGNUP_CODE", "REALTOR").strip().upper()
    INVITE_MAX_GENERATION_ATTEMPTS = _env_int("INVITE_MAX_GENERATION_ATTEMPTS", 5)
    INVITE_ENFORCE_EMAIL_MATCH = _env_bool("INVITE_ENFORCE_EMAIL_MATCH")
    INVITE_TEST_CODES_ENABLED = _env_bool("INVITE_TEST_CODES_ENABLED")
    INVITE_TEST_CODES = _env_list("INVITE_TEST_CODES", "TEST1234,DEMO5678")
    INVITE_TEST_REALTOR_ID = os.environ.get("INVITE_TEST_REALTOR_ID", "r1")

    # Chat assistant
    OPENAI_ASSISTANT_ID = os.environ.get("OPENAI_ASSISTANT_ID", "")
    RUN_POLL_INTERVAL_SECONDS = _env_float("RUN_POLL_INTERVAL_SECONDS", 1.0)
    RUN_POLL_MAX_ATTEMPTS = _env_int("RUN_POLL_MAX_ATTEMPTS", 60)

    # Contact form relay
    CONTACT_RELAY_URL = os.environ.get("CONTACT_RELAY_URL", "https://api.web3forms.com/submit")
    CONTACT_RELAY_ACCESS_KEY = os.environ.get("CONTACT_RELAY_ACCESS_KEY", "")
    CONTACT_RELAY_TIMEOUT_SECONDS = _env_float("CONTACT_RELAY_TIMEOUT_SECONDS", 10.0)
