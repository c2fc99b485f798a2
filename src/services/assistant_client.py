"""Chat assistant client - thin wrapper over the OpenAI Assistants threads API."""

import os
from datetime import datetime, timezone
from typing import Any, Optional

from openai import AsyncOpenAI

from src.models.chat import ChatMessage, ChatRun, MessageRole
from src.utils.config import AppConfig
from src.utils.errors import AssistantError
from src.utils.logging import get_structured_logger, log_timing, sanitize_message_text

logger = get_structured_logger(__name__)

# Global client instance (singleton pattern)
_client: Optional[AsyncOpenAI] = None


def get_openai_client() -> AsyncOpenAI:
    """Get or create the OpenAI client, raising a helpful error when the key is missing."""
    global _client

    if _client is None:
        if not os.environ.get("OPENAI_API_KEY"):
            raise AssistantError("OPENAI_API_KEY must be set")
        _client = AsyncOpenAI()
        logger.info("OpenAI client initialized")

    return _client


def _text_content(message: Any) -> str:
    parts = []
    for block in getattr(message, "content", None) or []:
        if getattr(block, "type", None) == "text":
            parts.append(block.text.value)
    return "\n".join(parts)


def to_chat_message(message: Any) -> ChatMessage:
    """Convert an SDK thread message into a ChatMessage."""
    created_at = getattr(message, "created_at", None)
    return ChatMessage(
        message_id=message.id,
        role=MessageRole(message.role),
        content=_text_content(message),
        created_at=datetime.fromtimestamp(created_at, tz=timezone.utc) if created_at else None,
    )


def to_chat_run(run: Any) -> ChatRun:
    """Convert an SDK run into a ChatRun."""
    last_error = getattr(run, "last_error", None)
    return ChatRun(
        run_id=run.id,
        thread_id=run.thread_id,
        status=run.status,
        last_error=getattr(last_error, "message", None) if last_error else None,
    )


class AssistantClient:
    """Create threads, post messages, check runs and list messages."""

    def __init__(self, client: Optional[AsyncOpenAI] = None, assistant_id: Optional[str] = None):
        self._client = client
        self.assistant_id = assistant_id or AppConfig.OPENAI_ASSISTANT_ID

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = get_openai_client()
        return self._client

    async def create_thread(self) -> str:
        """Create a new conversation thread and return its ID."""
        try:
            thread = await self.client.beta.threads.create()
        except Exception as e:
            logger.error("Failed to create thread", error=str(e))
            raise AssistantError(f"Failed to create thread: {e}")

        logger.info("Created chat thread", thread_id=thread.id)
        return thread.id

    async def post_message(self, thread_id: str, message: str) -> ChatRun:
        """Add a user message to a thread and start a run with the configured assistant."""
        if not self.assistant_id:
            raise AssistantError("OPENAI_ASSISTANT_ID must be set")

        with log_timing("post_message", logger=logger, thread_id=thread_id):
            try:
                await self.client.beta.threads.messages.create(
                    thread_id,
                    role="user",
                    content=message,
                )
                run = await self.client.beta.threads.runs.create(
                    thread_id,
                    assistant_id=self.assistant_id,
                )
            except Exception as e:
                logger.error(
                    "Failed to process chat request",
                    thread_id=thread_id,
                    message_preview=sanitize_message_text(message, max_length=100),
                    error=str(e),
                )
                raise AssistantError(f"Failed to process chat request: {e}")

        return to_chat_run(run)

    async def get_run(self, thread_id: str, run_id: str) -> ChatRun:
        """Retrieve the current status of a run."""
        try:
            run = await self.client.beta.threads.runs.retrieve(run_id, thread_id=thread_id)
        except Exception as e:
            logger.error("Failed to retrieve run status", thread_id=thread_id, run_id=run_id, error=str(e))
            raise AssistantError(f"Failed to retrieve run status: {e}")
        return to_chat_run(run)

    async def list_messages(self, thread_id: str) -> list[ChatMessage]:
        """List the messages of a thread, oldest first."""
        try:
            page = await self.client.beta.threads.messages.list(thread_id, order="asc")
        except Exception as e:
            logger.error("Failed to retrieve messages", thread_id=thread_id, error=str(e))
            raise AssistantError(f"Failed to retrieve messages: {e}")
        return [to_chat_message(message) for message in page.data]
