"""Persona prompt and canned fallback replies for the Guruji assistant."""

from typing import List, Sequence

from guruji.schemas.chat import Message, Role

PERSONA_SYSTEM_PROMPT = (
    "You are Guruji, a wise, compassionate spiritual teacher. "
    "You speak in calm, metaphorical language. "
    "Offer profound yet practical wisdom. "
    "Keep responses concise (2-4 sentences). "
    "Use Sanskrit terms occasionally. "
    "You embody patience and ancient wisdom."
)

# Shown by the relay when the completion API cannot produce a reply
SERVER_FALLBACK_RESPONSES = (
    "🌿 The cosmic connection is momentarily interrupted. Please try again in a moment.",
    "🕉️ I feel the energy shifting. Let us wait a breath before continuing.",
    "📜 The ancient scrolls are being redacted. The sage will return shortly.",
    "✨ The stars need realignment. Guruji will be with you soon.",
)


def persona_message() -> Message:
    """Build the persona system message."""
    return Message(role=Role.SYSTEM, content=PERSONA_SYSTEM_PROMPT)


def ensure_system_prompt(messages: Sequence[Message]) -> List[Message]:
    """
    Make sure the conversation carries a system message.

    Args:
        messages: Conversation in chronological order.

    Returns:
        The messages unchanged if any of them is a system message, otherwise a
        new list with the persona system message prepended.
    """
    if any(message.role == Role.SYSTEM for message in messages):
        return list(messages)
    return [persona_message(), *messages]


# Client-side texts
WELCOME_MESSAGE = (
    "🕉️ Namaste. I am Guruji, a humble channel of DeepSeek wisdom. "
    "What question stirs in your heart today?"
)

# Shown by the client when the relay fails without sending a fallback
CLIENT_FALLBACK_RESPONSES = (
    "🌱 The cosmic winds are turbulent. Guruji will return when the skies clear.",
    "📜 The ancient scrolls are momentarily hidden. Please try again.",
    "🕉️ The energy needs to settle. Ask again in a few breaths.",
    "✨ The stars need realignment. Your patience brings wisdom.",
)

NETWORK_ERROR_MESSAGE = (
    "🔮 The connection to Guruji's realm is unstable. Please check your network."
)
