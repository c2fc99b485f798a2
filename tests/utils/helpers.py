"""Test helper functions."""

import json
from io import BytesIO
from types import SimpleNamespace
from typing import Any, Dict, Optional
from unittest.mock import Mock


def make_handler(handler_cls, path: str = "/", body: Any = None, headers: Optional[Dict[str, str]] = None):
    """
    Build a Vercel handler instance without a socket.

    The request body is exposed through rfile and the response is captured
    in wfile; send_response/send_header/end_headers are mocks.
    """
    if body is None:
        raw = b""
    elif isinstance(body, (bytes, str)):
        raw = body.encode('utf-8') if isinstance(body, str) else body
    else:
        raw = json.dumps(body).encode('utf-8')

    h = handler_cls.__new__(handler_cls)
    h.path = path
    h.headers = {"Content-Type": "application/json", "Content-Length": str(len(raw)), **(headers or {})}
    h.rfile = BytesIO(raw)
    h.wfile = BytesIO()
    h.send_response = Mock()
    h.send_header = Mock()
    h.end_headers = Mock()
    return h


def read_response(h) -> tuple[int, Any]:
    """Return (status, parsed JSON body) written by a handler."""
    h.wfile.seek(0)
    return h.send_response.call_args[0][0], json.loads(h.wfile.read().decode('utf-8'))


def sdk_run(run_id: str = "run_1", thread_id: str = "thread_1", status: str = "queued", last_error=None):
    """Object shaped like an OpenAI SDK run."""
    return SimpleNamespace(id=run_id, thread_id=thread_id, status=status, last_error=last_error)


def sdk_message(message_id: str, role: str, text: str, created_at: int = 1733745600):
    """Object shaped like an OpenAI SDK thread message with one text block."""
    block = SimpleNamespace(type="text", text=SimpleNamespace(value=text))
    return SimpleNamespace(id=message_id, role=role, content=[block], created_at=created_at)
