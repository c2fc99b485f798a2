"""Chat assistant models (threads, runs, messages)."""

from enum import Enum
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field, field_validator


class MessageRole(str, Enum):
    """Chat message author role."""
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class RunStatus(str, Enum):
    """Assistant run states."""
    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    REQUIRES_ACTION = "requires_action"
    CANCELLING = "cancelling"
    CANCELLED = "cancelled"
    FAILED = "failed"
    COMPLETED = "completed"
    INCOMPLETE = "incomplete"
    EXPIRED = "expired"


TERMINAL_RUN_STATUSES = frozenset({
    RunStatus.COMPLETED,
    RunStatus.FAILED,
    RunStatus.CANCELLED,
    RunStatus.EXPIRED,
    RunStatus.INCOMPLETE,
})


class ChatMessage(BaseModel):
    """A single message in a chat thread."""
    message_id: str = Field(..., description="Message ID")
    role: MessageRole = Field(..., description="Author role")
    content: str = Field(default="", description="Plain-text content")
    created_at: Optional[datetime] = None


class ChatRun(BaseModel):
    """One assistant invocation on a thread."""
    run_id: str = Field(..., description="Run ID")
    thread_id: str = Field(..., description="Thread ID")
    status: RunStatus = Field(..., description="Current run status")
    last_error: Optional[str] = Field(None, description="Error message for failed runs")

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_RUN_STATUSES


class ChatRequest(BaseModel):
    """Incoming chat message request."""
    message: str = Field(..., description="User message")
    thread_id: str = Field(..., description="Thread ID")

    @field_validator("message", "thread_id")
    @classmethod
    def _required(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must not be blank")
        return value
