"""Chat session controller talking to the Guruji relay."""

import asyncio
import random
import string
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Sequence

import httpx

from guruji.client.formatting import Segment, format_message
from guruji.core.logging import setup_logger
from guruji.prompts.persona import (
    CLIENT_FALLBACK_RESPONSES,
    NETWORK_ERROR_MESSAGE,
    WELCOME_MESSAGE,
)
from guruji.schemas.chat import Message, Role
from guruji.services.fallback import pick_fallback

logger = setup_logger(__name__)

SESSION_ID_ALPHABET = string.digits + string.ascii_lowercase


class ConnectionState(str, Enum):
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


class Renderer(Protocol):
    """Display surface for a chat session."""

    def render_message(self, segments: List[Segment], from_user: bool) -> None: ...

    def render_status(self, state: ConnectionState, message: str) -> None: ...

    def set_busy(self, busy: bool) -> None: ...


def generate_session_id(prefix: str = "guruji") -> str:
    """Build an opaque session id from the current time and a random suffix."""
    suffix = "".join(random.choices(SESSION_ID_ALPHABET, k=9))
    return f"{prefix}_{int(time.time() * 1000)}_{suffix}"


class ChatSession:
    """
    One chat session against the relay.

    Tracks connectivity, keeps the message history and drives the
    request/response cycle. Only one submission may be in flight at a time.
    """

    def __init__(
        self,
        base_url: str,
        renderer: Optional[Renderer] = None,
        client: Optional[httpx.AsyncClient] = None,
        max_reconnect_attempts: int = 3,
        reconnect_delay: float = 2.0,
        history_window: int = 10,
        temperature: float = 0.7,
        request_timeout: float = 60.0,
        fallback_pool: Sequence[str] = CLIENT_FALLBACK_RESPONSES,
        rng_seed: Optional[int] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._renderer = renderer
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url, timeout=request_timeout
        )
        self._sleep = sleep
        self._fallback_pool = tuple(fallback_pool)
        self._rng_seed = rng_seed

        self.max_reconnect_attempts = max_reconnect_attempts
        self.reconnect_delay = reconnect_delay
        self.history_window = history_window
        self.temperature = temperature

        self.session_id = generate_session_id()
        self.history: List[Message] = []
        self.state = ConnectionState.CONNECTING
        self.status_message = ""
        self.reconnect_attempts = 0
        self.is_processing = False

    async def start(self) -> None:
        """Check connectivity, then greet the user."""
        await self.check_connectivity()
        self._append(Message(role=Role.ASSISTANT, content=WELCOME_MESSAGE))

    async def check_connectivity(self) -> bool:
        """
        Probe the relay until it answers or the retry budget is spent.

        Returns:
            True once connected, False after entering the error state.
        """
        self.reconnect_attempts = 0
        self._set_status(
            ConnectionState.CONNECTING, "Connecting to Guruji's sanctuary..."
        )

        while True:
            if await self._probe():
                self.reconnect_attempts = 0
                self._set_status(
                    ConnectionState.CONNECTED, "Connected to DeepSeek wisdom"
                )
                return True

            self.reconnect_attempts += 1
            if self.reconnect_attempts > self.max_reconnect_attempts:
                self._set_status(
                    ConnectionState.ERROR, "Cannot reach Guruji. Please refresh."
                )
                return False

            self._set_status(
                ConnectionState.CONNECTING,
                f"Reconnecting... Attempt {self.reconnect_attempts}/"
                f"{self.max_reconnect_attempts}",
            )
            await self._sleep(self.reconnect_delay)

    async def _probe(self) -> bool:
        try:
            response = await self._client.get("/api/health")
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Connection check failed: {e}")
            return False

        healthy = (
            response.is_success
            and isinstance(data, dict)
            and data.get("status") == "healthy"
        )
        if not healthy:
            logger.warning(f"Backend unhealthy: status={response.status_code}")
        return healthy

    async def submit(self, text: str) -> Optional[str]:
        """
        Send one user message and record the reply.

        Args:
            text: Raw user input

        Returns:
            The assistant text shown to the user, or None if nothing was sent
            (blank input, or another submission still in flight).
        """
        message = text.strip()
        if not message or self.is_processing:
            return None

        self.is_processing = True
        self._set_busy(True)
        try:
            self._append(Message(role=Role.USER, content=message))
            reply = await self._send()
            self._append(Message(role=Role.ASSISTANT, content=reply))
            return reply
        finally:
            self.is_processing = False
            self._set_busy(False)

    def recent_messages(self) -> List[Message]:
        """The slice of history transmitted with each request."""
        return self.history[-self.history_window :]

    async def _send(self) -> str:
        payload = {
            "messages": [m.model_dump(mode="json") for m in self.recent_messages()],
            "temperature": self.temperature,
            "sessionId": self.session_id,
        }

        try:
            response = await self._client.post("/api/chat", json=payload)
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Chat error: {e}")
            return NETWORK_ERROR_MESSAGE

        return self._reply_from(response, data)

    def _reply_from(self, response: httpx.Response, data: Any) -> str:
        if not isinstance(data, dict):
            return pick_fallback(self._fallback_pool, self._rng_seed)

        content = data.get("content")
        if response.is_success and data.get("success") and isinstance(content, str):
            return content

        logger.warning(
            f"Relay failure: status={response.status_code} code={data.get('code')}"
        )
        fallback = data.get("fallback")
        if isinstance(fallback, str) and fallback:
            return fallback
        return pick_fallback(self._fallback_pool, self._rng_seed)

    def render(self, content: str, from_user: bool) -> None:
        if self._renderer is not None:
            self._renderer.render_message(format_message(content), from_user)

    async def on_unload(self) -> None:
        """Report the full history for logging. Failures are ignored."""
        if len(self.history) <= 1:
            return

        payload: Dict[str, Any] = {
            "messages": [m.model_dump(mode="json") for m in self.history],
            "sessionId": self.session_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        try:
            await self._client.post("/api/conversation/end", json=payload)
        except httpx.HTTPError as e:
            logger.debug(f"Conversation end report not delivered: {e}")

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _append(self, message: Message) -> None:
        self.render(message.content, from_user=message.role == Role.USER)
        self.history.append(message)

    def _set_status(self, state: ConnectionState, message: str) -> None:
        self.state = state
        self.status_message = message
        if self._renderer is not None:
            self._renderer.render_status(state, message)

    def _set_busy(self, busy: bool) -> None:
        if self._renderer is not None:
            self._renderer.set_busy(busy)
