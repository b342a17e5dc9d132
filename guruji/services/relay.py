"""Relay service: persona injection, upstream call and fallback replies."""

from datetime import datetime, timezone
from typing import Optional, Sequence, Union

from guruji.core.logging import setup_logger
from guruji.prompts.persona import SERVER_FALLBACK_RESPONSES, ensure_system_prompt
from guruji.schemas.chat import (
    ChatFailureResponse,
    ChatRequest,
    ChatSuccessResponse,
    ConversationEndRequest,
    ConversationEndResponse,
)
from guruji.services.completion import CompletionService
from guruji.services.fallback import pick_fallback

logger = setup_logger(__name__)

ChatResponse = Union[ChatSuccessResponse, ChatFailureResponse]


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class RelayService:
    """Service relaying chat requests to the completion API."""

    def __init__(
        self,
        completion_service: CompletionService,
        fallback_pool: Sequence[str] = SERVER_FALLBACK_RESPONSES,
        rng_seed: Optional[int] = None,
    ) -> None:
        """
        Initialize the relay service.

        Args:
            completion_service: Upstream completion client
            fallback_pool: Phrases to choose from when the upstream call fails
            rng_seed: Optional seed for deterministic fallback selection
        """
        self._completion_service = completion_service
        self._fallback_pool = tuple(fallback_pool)
        self._rng_seed = rng_seed

    async def chat(self, request: ChatRequest) -> ChatResponse:
        """
        Relay one chat request.

        This method:
        1. Prepends the persona system prompt if the caller sent none
        2. Calls the completion API with a bounded timeout
        3. Wraps the reply, or a mapped error plus a fallback phrase

        Args:
            request: Validated chat request

        Returns:
            ChatSuccessResponse or ChatFailureResponse
        """
        messages = ensure_system_prompt(request.messages)
        logger.debug(
            f"Relaying {len(messages)} messages for session {request.session_id}"
        )

        result = await self._completion_service.generate(
            messages, temperature=request.temperature
        )

        if result.success:
            return ChatSuccessResponse(
                content=result.content,
                usage=result.usage,
                timestamp=utc_timestamp(),
            )

        logger.warning(
            f"Chat failed for session {request.session_id}: {result.code.value}"
        )
        return ChatFailureResponse(
            error=result.error,
            code=result.code,
            fallback=pick_fallback(self._fallback_pool, self._rng_seed),
        )

    def end_conversation(
        self, request: ConversationEndRequest
    ) -> ConversationEndResponse:
        """Log the end of a conversation. Always succeeds."""
        logger.info(
            f"Session {request.session_id} ended with {len(request.messages)} messages"
        )
        return ConversationEndResponse()
