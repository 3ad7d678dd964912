"""CLI entry point for the Colonoscopy Scheduler.

A terminal chat loop that runs each message through the same pipeline as
the API, using a JSON file of appointments as the candidate list.  Useful
for trying prompt or filter changes without the web frontend.

Usage:
    uv run python -m colonoscopy_scheduler.main --appointments slots.json
    uv run python -m colonoscopy_scheduler.main --appointments slots.json --debug
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from dotenv import load_dotenv
from pydantic import TypeAdapter

from colonoscopy_scheduler.agent import create_scheduling_agent
from colonoscopy_scheduler.models import Appointment, ConversationState
from colonoscopy_scheduler.services.completion import CompletionError

logger = logging.getLogger(__name__)

_APPOINTMENT_LIST = TypeAdapter(list[Appointment])


def _configure_logging(debug: bool = False) -> None:
    """Set up logging: WARNING by default, DEBUG when --debug is passed."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    )
    if not debug:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("colonoscopy_scheduler").setLevel(logging.DEBUG if debug else logging.INFO)


def load_appointments(path: Path) -> list[Appointment]:
    """Read a JSON array of appointments in the frontend's format."""
    return _APPOINTMENT_LIST.validate_json(path.read_bytes())


def format_appointment(appointment: Appointment) -> str:
    return (
        f"{appointment.date.strftime('%a %d %b %Y')} "
        f"{appointment.period.value} with {appointment.doctor.value}"
    )


def main():
    """Run the interactive CLI chat loop."""
    parser = argparse.ArgumentParser(description="Colonoscopy Scheduler CLI")
    parser.add_argument(
        "--appointments", type=Path, required=True,
        help="JSON file with the candidate appointments",
    )
    parser.add_argument("--step", default="initial", help="Booking step to report")
    parser.add_argument(
        "--debug", action="store_true",
        help="Show all log messages including HTTP requests",
    )
    args = parser.parse_args()

    load_dotenv()
    _configure_logging(debug=args.debug)

    try:
        appointments = load_appointments(args.appointments)
    except (OSError, ValueError) as e:
        parser.error(f"could not load {args.appointments}: {e}")

    context = ConversationState(current_step=args.step, available_dates=appointments)
    agent = create_scheduling_agent()
    logger.info("Loaded %d candidate appointments", len(appointments))

    print("\n" + "=" * 60)
    print("  Colonoscopy Scheduler - CLI Chat")
    print("=" * 60)
    print("  Type your message and press Enter. 'quit' to exit.")
    print("=" * 60 + "\n")

    while True:
        try:
            user_input = input("You: ").strip()
        except (KeyboardInterrupt, EOFError):
            print("\n\nGoodbye!")
            break

        if not user_input:
            continue
        if user_input.lower() in ("exit", "quit", "q"):
            print("\nGoodbye!")
            break

        try:
            result = agent.invoke({"message": user_input, "context": context})
        except CompletionError as e:
            logger.exception("Completion failed")
            print(f"\nAssistant: {e.user_message}\n")
            continue

        print(f"\nAssistant: {result['reply']}\n")
        if result["show_appointments"]:
            for appointment in result["attached"]:
                print(f"   • {format_appointment(appointment)}")
            print()


if __name__ == "__main__":
    main()
