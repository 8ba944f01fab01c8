"""Command-line keystream generator."""

import argparse
import sys
from typing import Sequence, TextIO

from config import config
from solitaire.cards import parse_order
from solitaire.engine import SolitaireEngine
from solitaire.log import configure_logging


def _order_arg(text: str) -> tuple[int, ...]:
    """Parse a comma-separated deck order."""
    try:
        return parse_order(int(part) for part in text.split(",") if part.strip())
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="solitaire-keystream",
        description="Generate Solitaire keystream values from a 54-card deck",
    )
    parser.add_argument(
        "--count",
        type=int,
        default=None,
        help="Print this many values and exit instead of prompting",
    )
    parser.add_argument(
        "--skip-empty",
        action="store_true",
        help="Draw again on joker rounds so every printed value is 1-52",
    )
    parser.add_argument(
        "--order",
        type=_order_arg,
        default=None,
        help="Comma-separated starting order, top card first (default 1..54)",
    )
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Log the deck after every step of every round",
    )
    parser.add_argument(
        "--log-level",
        default=config.log_level,
        help="Logging level (default from LOG_LEVEL)",
    )
    return parser


def main(
    argv: Sequence[str] | None = None,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> int:
    """Run the CLI and return the exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    if args.count is not None and args.count < 0:
        parser.error("--count must not be negative")
    try:
        configure_logging("DEBUG" if args.trace else args.log_level)
    except ValueError as exc:
        parser.error(str(exc))

    engine = SolitaireEngine(args.order)
    draw = engine.next_value if args.skip_empty else engine.advance_and_emit

    if args.count is not None:
        values = [draw() for _ in range(args.count)]
        print(" ".join(str(v) for v in values), file=stdout)
        return 0

    while True:
        print(f"Produced value: {draw()}", file=stdout)
        print("Press enter for next value!", file=stdout, flush=True)
        if not stdin.readline():
            return 0
