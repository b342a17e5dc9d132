import pytest

from guruji.prompts.persona import (
    PERSONA_SYSTEM_PROMPT,
    SERVER_FALLBACK_RESPONSES,
    ensure_system_prompt,
)
from guruji.schemas.chat import Message, Role
from guruji.services.fallback import pick_fallback


class TestEnsureSystemPrompt:
    def test_prepends_exactly_one_persona_message(self):
        messages = [
            Message(role=Role.USER, content="Who am I?"),
            Message(role=Role.ASSISTANT, content="A seeker."),
            Message(role=Role.USER, content="And then?"),
        ]
        result = ensure_system_prompt(messages)

        assert len(result) == 4
        assert result[0].role == "system"
        assert result[0].content == PERSONA_SYSTEM_PROMPT
        assert sum(1 for m in result if m.role == Role.SYSTEM) == 1
        assert result[1:] == messages

    def test_empty_conversation_gets_persona(self):
        result = ensure_system_prompt([])
        assert [m.role for m in result] == ["system"]

    def test_existing_system_message_left_untouched(self):
        messages = [
            Message(role=Role.USER, content="hi"),
            Message(role=Role.SYSTEM, content="Be brief."),
            Message(role=Role.USER, content="well?"),
        ]
        result = ensure_system_prompt(messages)

        assert result == messages
        assert PERSONA_SYSTEM_PROMPT not in [m.content for m in result]

    def test_does_not_mutate_input(self):
        messages = [Message(role=Role.USER, content="hi")]
        ensure_system_prompt(messages)
        assert len(messages) == 1


class TestPickFallback:
    def test_returns_member_of_pool(self):
        for _ in range(20):
            assert pick_fallback(SERVER_FALLBACK_RESPONSES) in SERVER_FALLBACK_RESPONSES

    def test_seed_is_deterministic(self):
        pool = ["a", "b", "c", "d", "e"]
        picks = {pick_fallback(pool, seed=42) for _ in range(10)}
        assert len(picks) == 1

    def test_single_item_pool(self):
        assert pick_fallback(["only"]) == "only"

    def test_empty_pool_raises(self):
        with pytest.raises(ValueError, match="must not be empty"):
            pick_fallback([])
