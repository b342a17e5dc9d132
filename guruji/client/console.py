"""Terminal front-end for a Guruji chat session."""

import argparse
import asyncio
import sys
from typing import List, Optional, TextIO

from guruji.client.formatting import Segment
from guruji.client.session import ChatSession, ConnectionState

EXIT_COMMANDS = {"/quit", "/exit"}


class ConsoleRenderer:
    """Prints chat messages and connection status to a text stream."""

    def __init__(self, stream: TextIO = sys.stdout) -> None:
        self.stream = stream

    def render_message(self, segments: List[Segment], from_user: bool) -> None:
        label = "You" if from_user else "Guruji"
        body = "".join(
            f"<{segment.text}>" if segment.kind == "link" else segment.text
            for segment in segments
        )
        print(f"{label}: {body}", file=self.stream, flush=True)

    def render_status(self, state: ConnectionState, message: str) -> None:
        print(f"[{state.value}] {message}", file=self.stream, flush=True)

    def set_busy(self, busy: bool) -> None:
        if busy:
            print("Guruji is contemplating...", file=self.stream, flush=True)


async def chat_loop(session: ChatSession) -> None:
    """Read lines from stdin and submit them until EOF or an exit command."""
    await session.start()
    try:
        while True:
            try:
                line = await asyncio.to_thread(input, "> ")
            except EOFError:
                break
            if line.strip() in EXIT_COMMANDS:
                break
            await session.submit(line)
    finally:
        await session.on_unload()
        await session.aclose()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="guruji-chat", description="Chat with Guruji from the terminal"
    )
    parser.add_argument(
        "--base-url",
        default="http://localhost:3000",
        help="Relay server URL (default: http://localhost:3000)",
    )
    parser.add_argument(
        "--temperature", type=float, default=0.7, help="Sampling temperature"
    )
    return parser


def run(argv: Optional[List[str]] = None) -> None:
    args = _build_parser().parse_args(argv)
    session = ChatSession(
        args.base_url, renderer=ConsoleRenderer(), temperature=args.temperature
    )
    try:
        asyncio.run(chat_loop(session))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
