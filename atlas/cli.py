"""Console entry points for Atlas."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from pathlib import Path
from typing import Optional

import uvicorn

from .client import ChatSession, open_client
from .config import load_config
from .types import ConversationMessage


def print_message(message: ConversationMessage) -> None:
    speaker = "Atlas" if message.role == "assistant" else "You"
    print(f"\n{speaker}: {message.content}")
    turn = message.turn
    if not turn:
        return
    if turn.meta and turn.meta.used_openai and turn.meta.latency_ms is not None:
        print(f"  [OpenAI {turn.meta.latency_ms}ms]")
    for action in turn.actions:
        print(f"  * {action.title}: {action.description}")
        print(f"    {action.outcome}")
    for source in turn.sources:
        link = f" <{source.url}>" if source.url else ""
        print(f"  - {source.title}{link}: {source.excerpt}")


def print_suggestions(session: ChatSession) -> None:
    for index, suggestion in enumerate(session.suggestions, start=1):
        print(f"  /{index} {suggestion}")


async def chat_loop(base_url: str, timeout_seconds: float) -> None:
    async with open_client(base_url, timeout_seconds) as client:
        session = ChatSession(client)
        for message in session.state.messages:
            print_message(message)
        print_suggestions(session)
        while True:
            try:
                line = await asyncio.to_thread(input, "\n> ")
            except EOFError:
                return
            seen = len(session.state.messages)
            choice = line.strip()
            if choice in {"/quit", "/exit"}:
                return
            if choice.startswith("/") and choice[1:].isdigit():
                suggestions = session.suggestions
                index = int(choice[1:]) - 1
                if not 0 <= index < len(suggestions):
                    print("No such suggestion.")
                    continue
                await session.choose_suggestion(suggestions[index])
            elif not await session.send(line):
                continue
            for message in session.state.messages[seen:]:
                if message.role == "assistant":
                    print_message(message)
            if session.state.error:
                print(f"\n! {session.state.error}")
            print_suggestions(session)


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="atlas", description="Atlas chat agent")
    parser.add_argument("--config", help="Path to the agent.yaml file")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Serve the Atlas web app")
    run_parser.add_argument("--host", default="0.0.0.0")
    run_parser.add_argument("--port", type=int, default=8080)
    run_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")

    chat_parser = subparsers.add_parser("chat", help="Chat with a running Atlas server")
    chat_parser.add_argument("--url", help="Server base URL (defaults to client.base_url)")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.config:
        config_file = Path(args.config).resolve()
        if not config_file.exists():
            raise SystemExit(f"Config file not found: {config_file}")
        os.environ["ATLAS_CONFIG"] = str(config_file)

    if args.command == "run":
        uvicorn.run("atlas.server:app", host=args.host, port=args.port, reload=args.reload)
    elif args.command == "chat":
        config = load_config()
        asyncio.run(chat_loop(args.url or config.client.base_url, config.client.timeout_seconds))


if __name__ == "__main__":  # pragma: no cover
    main()
