"""Run polling - wait for an assistant run to reach a terminal status."""

import asyncio
from typing import Awaitable, Callable, Optional

from src.models.chat import ChatMessage, ChatRun, MessageRole, RunStatus
from src.services.assistant_client import AssistantClient
from src.utils.config import AppConfig
from src.utils.errors import AssistantError, RunPollingTimeout
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)


async def poll_run(
    fetch_run: Callable[[], Awaitable[ChatRun]],
    interval: Optional[float] = None,
    max_attempts: Optional[int] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> ChatRun:
    """
    Poll `fetch_run` on a fixed interval until the run is terminal.

    Each tick is an independent fetch; there is no backoff. Errors raised by
    `fetch_run` stop the loop and propagate. Raises RunPollingTimeout after
    `max_attempts` non-terminal results.
    """
    interval = AppConfig.RUN_POLL_INTERVAL_SECONDS if interval is None else interval
    max_attempts = AppConfig.RUN_POLL_MAX_ATTEMPTS if max_attempts is None else max_attempts

    run: Optional[ChatRun] = None
    for attempt in range(1, max_attempts + 1):
        run = await fetch_run()
        if run.is_terminal:
            logger.info(
                "Run reached terminal status",
                run_id=run.run_id,
                thread_id=run.thread_id,
                run_status=run.status.value,
                attempts=attempt,
            )
            return run

        logger.debug("Run still pending", run_id=run.run_id, run_status=run.status.value, attempt=attempt)
        if attempt < max_attempts:
            await sleep(interval)

    last_status = run.status.value if run else None
    logger.warning("Run polling gave up", attempts=max_attempts, last_status=last_status)
    raise RunPollingTimeout(f"Run not finished after {max_attempts} attempts (last status: {last_status})")


class ChatSession:
    """
    A single chat conversation: one thread plus its local message history.

    `send` posts a message, polls the run and refreshes history from the
    thread's message list.
    """

    def __init__(self, assistant: Optional[AssistantClient] = None, thread_id: Optional[str] = None):
        self.assistant = assistant or AssistantClient()
        self.thread_id = thread_id
        self.messages: list[ChatMessage] = []
        self.error: Optional[str] = None

    async def ensure_thread(self) -> str:
        if self.thread_id is None:
            self.thread_id = await self.assistant.create_thread()
        return self.thread_id

    async def send(
        self,
        content: str,
        interval: Optional[float] = None,
        max_attempts: Optional[int] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> Optional[ChatMessage]:
        """Send a user message and return the latest assistant reply, if any."""
        if not content or not content.strip():
            return None

        thread_id = await self.ensure_thread()
        self.error = None

        try:
            run_id = (await self.assistant.post_message(thread_id, content)).run_id
            run = await poll_run(
                lambda: self.assistant.get_run(thread_id, run_id),
                interval=interval,
                max_attempts=max_attempts,
                sleep=sleep,
            )
            if run.status != RunStatus.COMPLETED:
                raise AssistantError(run.last_error or f"Run ended with status {run.status.value}")
            self.messages = await self.assistant.list_messages(thread_id)
        except AssistantError as e:
            self.error = "Failed to send message"
            logger.error("Chat message failed", thread_id=thread_id, error=str(e))
            raise

        replies = [m for m in self.messages if m.role == MessageRole.ASSISTANT]
        return replies[-1] if replies else None
