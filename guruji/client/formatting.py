"""Plain-text message formatting with link detection."""

import html
import re
from dataclasses import dataclass
from typing import List, Literal, Sequence

URL_PATTERN = re.compile(r"(https?://[^\s]+)")


@dataclass(frozen=True)
class Segment:
    kind: Literal["text", "link"]
    text: str


def format_message(text: str) -> List[Segment]:
    """
    Split message text into plain-text and link segments.

    Args:
        text: Raw message text

    Returns:
        Segments in their original order; empty text gives an empty list.
    """
    if not text:
        return []

    segments = []
    for part in URL_PATTERN.split(text):
        if not part:
            continue
        kind = "link" if URL_PATTERN.fullmatch(part) else "text"
        segments.append(Segment(kind=kind, text=part))
    return segments


def segments_to_html(segments: Sequence[Segment]) -> str:
    """Render segments as escaped HTML, links opening in a new tab."""
    rendered = []
    for segment in segments:
        escaped = html.escape(segment.text)
        if segment.kind == "link":
            rendered.append(
                f'<a href="{escaped}" target="_blank" rel="noopener noreferrer">'
                f"{escaped}</a>"
            )
        else:
            rendered.append(escaped)
    return "".join(rendered)
