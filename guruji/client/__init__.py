"""Chat client: session controller, formatting and console front-end."""

from .formatting import Segment, format_message, segments_to_html
from .session import ChatSession, ConnectionState

__all__ = [
    "ChatSession",
    "ConnectionState",
    "Segment",
    "format_message",
    "segments_to_html",
]
