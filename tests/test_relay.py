import asyncio
from unittest.mock import AsyncMock, Mock

from guruji.prompts.persona import PERSONA_SYSTEM_PROMPT, SERVER_FALLBACK_RESPONSES
from guruji.schemas.chat import (
    ChatFailureResponse,
    ChatRequest,
    ChatSuccessResponse,
    ConversationEndRequest,
    ErrorCode,
)
from guruji.services.completion import CompletionResult
from guruji.services.relay import RelayService


def make_relay(result, **kwargs):
    completion_service = Mock()
    completion_service.generate = AsyncMock(return_value=result)
    return RelayService(completion_service, **kwargs), completion_service


class TestRelayService:
    def test_success_wraps_content(self):
        relay, _ = make_relay(
            CompletionResult(success=True, content="Be still.", usage={"total_tokens": 3})
        )
        request = ChatRequest(messages=[{"role": "user", "content": "hi"}], sessionId="s1")

        response = asyncio.run(relay.chat(request))

        assert isinstance(response, ChatSuccessResponse)
        assert response.content == "Be still."
        assert response.usage == {"total_tokens": 3}
        assert response.timestamp

    def test_persona_injected_before_upstream_call(self):
        relay, completion_service = make_relay(CompletionResult(success=True, content="ok"))
        request = ChatRequest(
            messages=[
                {"role": "user", "content": "one"},
                {"role": "assistant", "content": "two"},
            ],
            temperature=0.3,
        )

        asyncio.run(relay.chat(request))

        sent, = completion_service.generate.call_args.args
        assert [m.role for m in sent] == ["system", "user", "assistant"]
        assert sent[0].content == PERSONA_SYSTEM_PROMPT
        assert completion_service.generate.call_args.kwargs == {"temperature": 0.3}

    def test_failure_carries_code_and_fallback(self):
        relay, _ = make_relay(
            CompletionResult(
                success=False, error="Rate limit exceeded.", code=ErrorCode.RATE_LIMITED
            )
        )
        request = ChatRequest(messages=[{"role": "user", "content": "hi"}])

        response = asyncio.run(relay.chat(request))

        assert isinstance(response, ChatFailureResponse)
        assert response.code == ErrorCode.RATE_LIMITED
        assert response.fallback in SERVER_FALLBACK_RESPONSES

    def test_seeded_fallback_is_repeatable(self):
        result = CompletionResult(success=False, error="x", code=ErrorCode.TIMEOUT)
        relay, _ = make_relay(result, fallback_pool=["a", "b", "c"], rng_seed=7)
        request = ChatRequest(messages=[])

        first = asyncio.run(relay.chat(request)).fallback
        second = asyncio.run(relay.chat(request)).fallback

        assert first == second

    def test_end_conversation_always_succeeds(self):
        relay, _ = make_relay(CompletionResult(success=True, content="ok"))

        response = relay.end_conversation(ConversationEndRequest())

        assert response.success is True
