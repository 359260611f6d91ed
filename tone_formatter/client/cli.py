"""Interactive console client for the tone formatter service."""

from __future__ import annotations

import argparse
import asyncio
import logging
import pathlib

import httpx

from tone_formatter.client.api import ToneFormatterClient
from tone_formatter.client.controller import ToneFormatterController
from tone_formatter.client.drafts import JsonFileDraftStorage
from tone_formatter.client.presenter import ConsolePresenter
from tone_formatter.client.state import ControllerState, InvalidTransitionError

DEFAULT_URL = "http://127.0.0.1:3000"
DEFAULT_DRAFT_FILE = pathlib.Path.home() / ".tone-formatter-draft.json"

HELP = """Type or paste text; each line is appended to the input.
Commands: :formal  :casual  :retry  :dismiss  :clear  :usage  :show  :quit"""


async def run_client(url: str, draft_file: pathlib.Path, text: str | None, tone: str | None) -> int:
    """Run one-shot when ``text`` and ``tone`` are given, otherwise interactively."""

    presenter = ConsolePresenter()
    async with httpx.AsyncClient(base_url=url, timeout=None) as http_client:
        controller = ToneFormatterController(
            ToneFormatterClient(http_client), JsonFileDraftStorage(draft_file), presenter
        )

        if text is not None and tone is not None:
            controller.set_text(text)
            return 0 if await controller.format(tone) else 1

        controller.restore_draft()
        await controller.refresh_usage()
        print(HELP)
        while True:
            try:
                line = await asyncio.to_thread(input, "> ")
            except EOFError:
                return 0
            if not await handle_line(controller, line):
                return 0


async def handle_line(controller: ToneFormatterController, line: str) -> bool:
    """Apply one line of input; returns ``False`` to stop."""

    command = line.strip()
    try:
        if command in (":formal", ":casual"):
            await controller.format(command[1:])
        elif command == ":retry":
            await controller.retry()
        elif command == ":dismiss":
            controller.dismiss_error()
        elif command == ":clear":
            controller.clear()
        elif command == ":usage":
            await controller.refresh_usage()
        elif command == ":show":
            print(controller.text)
        elif command == ":quit":
            return False
        elif controller.state is ControllerState.ERROR:
            print("Dismiss or retry the error first.")
        else:
            combined = f"{controller.text}\n{line}" if controller.text else line
            controller.set_text(combined)
    except InvalidTransitionError as exc:
        print(f"Not available now: {exc}")
    return True


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Console client for the tone formatter service.")
    parser.add_argument("--url", default=DEFAULT_URL, help="Service URL (default: %(default)s)")
    parser.add_argument(
        "--draft-file",
        type=pathlib.Path,
        default=DEFAULT_DRAFT_FILE,
        help="Where the draft is kept between sessions (default: %(default)s)",
    )
    parser.add_argument("--text", help="Text to format once and exit.")
    parser.add_argument("--tone", choices=("formal", "casual"), help="Tone for --text.")
    parser.add_argument("--log-level", default="WARNING", help="Logging level.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING))
    try:
        code = asyncio.run(run_client(args.url, args.draft_file, args.text, args.tone))
    except KeyboardInterrupt:  # pragma: no cover - manual usage only
        code = 130
    raise SystemExit(code)


if __name__ == "__main__":  # pragma: no cover
    main()
