"""Shared helpers for Vercel BaseHTTPRequestHandler endpoints."""

import asyncio
import json
from functools import wraps
from http.server import BaseHTTPRequestHandler
from typing import Any, Awaitable, Optional
from urllib.parse import parse_qs, urlparse

from src.utils.logging import correlation_context, get_structured_logger
from src.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()
logger = get_structured_logger(__name__)


def run_async(coro: Awaitable[Any]) -> Any:
    """Run a coroutine to completion from a synchronous handler."""
    try:
        loop = asyncio.get_event_loop()
    except RuntimeError:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
    if loop.is_closed():
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
    return loop.run_until_complete(coro)


def json_endpoint(method):
    """Run a handler method under the caller's correlation ID, answering 500 JSON on unexpected errors."""
    @wraps(method)
    def wrapper(self, *args, **kwargs):
        with correlation_context(self.correlation_id()):
            try:
                return method(self, *args, **kwargs)
            except Exception as e:
                logger.error(
                    "Unhandled error in request handler",
                    exc_info=True,
                    path=self.path,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                self.send_json(500, {"error": "Internal server error"})

    return wrapper


class JSONRequestHandler(BaseHTTPRequestHandler):
    """Base handler with JSON request/response helpers."""

    def send_json(self, status: int, payload: Any) -> None:
        """Write a JSON response."""
        self.send_response(status)
        self.send_header('Content-Type', 'application/json')
        self.end_headers()
        self.wfile.write(json.dumps(payload, default=str).encode('utf-8'))

    def read_json(self) -> Optional[dict]:
        """Read the request body as a JSON object. Returns None if it is not one."""
        try:
            content_length = int(self.headers.get('Content-Length', 0) or 0)
        except ValueError:
            return None
        if content_length < 0:
            return None
        try:
            raw_body = self.rfile.read(content_length).decode('utf-8') if content_length > 0 else ""
            body = json.loads(raw_body) if raw_body else {}
        except (UnicodeDecodeError, json.JSONDecodeError):
            return None
        return body if isinstance(body, dict) else None

    def query_param(self, name: str) -> Optional[str]:
        """First value of a query string parameter."""
        values = parse_qs(urlparse(self.path).query).get(name)
        return values[0] if values else None

    def correlation_id(self) -> Optional[str]:
        """Correlation ID supplied by the caller, if any."""
        return self.headers.get(LoggingConfig.LOG_CORRELATION_ID_HEADER) or None
