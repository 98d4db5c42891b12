#!/usr/bin/env python3
"""
FarmGenie console client

Ask the advisory backend a question by voice or text and print its reply.

Examples:
    farmgenie ask "Weather in Pune"
    farmgenie listen --question "Should I irrigate today?"
    farmgenie listen --seconds 5
    farmgenie listen --file question.ogg
"""

import argparse
import asyncio
import logging
import sys

from farmgenie.core.config import get_settings
from farmgenie.core.exceptions import FarmGenieError
from farmgenie.core.models import NormalizedResponse
from farmgenie.services.audio import create_audio_source
from farmgenie.services.orchestrator import create_session_controller

logger = logging.getLogger(__name__)


def render_response(response: NormalizedResponse) -> str:
    """Format a reply as the text cards shown on the advisory page."""
    lines = []
    if response.message:
        lines.append(response.message)

    if response.weather is not None:
        weather = response.weather
        lines.extend(
            [
                "",
                f"Weather in {weather.location}",
                f"  {weather.condition}",
                f"  {weather.temperature_celsius}°C",
            ]
        )

    if response.soil is not None:
        soil = response.soil
        lines.extend(
            [
                "",
                "Soil Moisture",
                f"  {soil.moisture:g}% (remaining {soil.remaining_percent:g}%)",
                f"  pH {soil.ph:g}",
                f"  N {soil.nitrogen} / P {soil.phosphorus} / K {soil.potassium}",
            ]
        )
    return "\n".join(lines)


async def _print_response(response: NormalizedResponse) -> None:
    print(render_response(response))


async def _wait_for_stop(seconds: float | None) -> None:
    if seconds is not None:
        await asyncio.sleep(seconds)
    else:
        await asyncio.to_thread(input, "Recording... press Enter to stop. ")


async def run_ask(question: str) -> int:
    controller = create_session_controller(on_response=_print_response)
    try:
        await controller.ask(question)
    finally:
        await controller.aclose()
    return 0


async def run_listen(question: str | None, seconds: float | None, file: str | None) -> int:
    source = create_audio_source("file", path=file) if file else None
    controller = create_session_controller(source=source, on_response=_print_response)
    try:
        if not await controller.start_recording():
            return 1
        await _wait_for_stop(seconds)
        print("Processing...")
        await controller.stop_recording(text=question)
    finally:
        await controller.aclose()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="farmgenie",
        description="Ask the FarmGenie advisory backend by voice or text",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("Examples:")[1],
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    ask = subparsers.add_parser("ask", help="Send a typed question")
    ask.add_argument("question", help="Question or location")

    listen = subparsers.add_parser("listen", help="Record a spoken question")
    listen.add_argument("--question", help="Typed text sent along with the recording")
    listen.add_argument("--seconds", type=float, help="Stop after N seconds instead of on Enter")
    listen.add_argument("--file", help="Send an existing audio file instead of the microphone")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else get_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "ask":
            return asyncio.run(run_ask(args.question))
        return asyncio.run(run_listen(args.question, args.seconds, args.file))
    except FarmGenieError as exc:
        logger.debug("Session failed: %s (%s)", exc.detail, exc.code)
        print(exc.user_message, file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nCancelled")
        return 130


if __name__ == "__main__":
    sys.exit(main())
