# Area: Shared
"""
find_the_ball.cli — Command-line interface
==========================================

Provides CLI entry point for playing in a terminal.

Usage:
    python -m find_the_ball --demo                           # Local demo oracle
    python -m find_the_ball --oracle-url http://host/pos     # Remote oracle
    python -m find_the_ball --config config.json             # Settings from file

Demo mode can be enabled via:
    1. CLI flag: --demo
    2. Environment variable: FIND_THE_BALL_DEMO_MODE=true
"""

import argparse
import os
import sys
from typing import Optional, Sequence

from pydantic import ValidationError

from .config import EngineSettings, load_settings
from .demo_oracle import DemoOracle
from .errors import ConfigFileError
from .oracle import PositionOracle
from ._oracle import HttpPositionOracle
from ._shared.logging_config import setup_logging


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="find_the_ball",
        description="Find the ball - watch the cup, then guess where the ball went",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m find_the_ball --demo
  python -m find_the_ball --demo --board-size 5 --reveal-seconds 0.8
  python -m find_the_ball --oracle-url http://localhost:8080/position
  FIND_THE_BALL_DEMO_MODE=true python -m find_the_ball --config config.json
        """,
    )

    parser.add_argument(
        "--demo",
        action="store_true",
        help="Use the local demo oracle instead of a remote one",
    )
    parser.add_argument("--config", type=str, help="Path to JSON config file")
    parser.add_argument("--oracle-url", type=str, help="URL of the position oracle")
    parser.add_argument("--board-size", type=int, help="Number of cups")
    parser.add_argument(
        "--reveal-seconds",
        type=float,
        help="How long the ball stays visible",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Seed for the demo oracle (reproducible positions)",
    )
    parser.add_argument(
        "--rounds",
        type=int,
        help="Stop after this many rounds (default: until you quit)",
    )

    return parser.parse_args(argv)


def is_demo_mode(args: argparse.Namespace) -> bool:
    """Check if demo mode is enabled via CLI or environment."""
    if args.demo:
        return True
    if os.environ.get("FIND_THE_BALL_DEMO_MODE", "").lower() in ("true", "1", "yes"):
        return True
    return False


def get_oracle(args: argparse.Namespace, settings: EngineSettings) -> Optional[PositionOracle]:
    """Get the oracle for this session, or None if none is configured."""
    if is_demo_mode(args):
        return DemoOracle(board_size=settings.board_size, seed=args.seed)
    if settings.oracle_url:
        return HttpPositionOracle(
            settings.oracle_url,
            timeout_seconds=settings.oracle_timeout_seconds,
        )
    return None


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entry point."""
    args = parse_args(argv)

    try:
        settings = load_settings(
            args.config,
            overrides={
                "oracle_url": args.oracle_url,
                "board_size": args.board_size,
                "reveal_seconds": args.reveal_seconds,
            },
        )
    except ConfigFileError as e:
        print(f"Error: Invalid configuration: {e}", file=sys.stderr)
        return 1
    except ValidationError as e:
        print(f"Error: Invalid configuration:\n{e}", file=sys.stderr)
        return 1

    setup_logging(log_file_path=settings.log_file, level=settings.log_level_value)

    oracle = get_oracle(args, settings)
    if oracle is None:
        print("Error: No position oracle configured.", file=sys.stderr)
        print("Use --demo or set --oracle-url / FIND_THE_BALL_ORACLE_URL.", file=sys.stderr)
        return 1

    # Import here so --help stays fast
    from .runner import TerminalRunner

    try:
        TerminalRunner(settings, oracle).run(rounds=args.rounds)
    finally:
        close = getattr(oracle, "close", None)
        if close is not None:
            close()
    return 0
