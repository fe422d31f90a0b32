from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from flashgraph.adapters.snapshot import snapshot_to_json
from flashgraph.app import replay_cycles
from flashgraph.config import (
    ConfigurationError,
    configure_logging,
    get_session_config,
    parse_log_level,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Project DAQ flashlists onto the topology graph")
    parser.add_argument(
        "--log-level",
        type=str,
        default="info",
        help="Logging level (default: %(default)s)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    replay = subparsers.add_parser("replay", help="Replay recorded LAS flashlists")
    replay.add_argument(
        "--topology",
        type=Path,
        required=True,
        help="Topology description (JSON)",
    )
    replay.add_argument(
        "--flashlists",
        type=Path,
        nargs="+",
        required=True,
        help="LAS flashlist payloads (JSON), one file per flashlist",
    )
    replay.add_argument(
        "--cycles",
        type=int,
        default=1,
        help="Number of cycles to apply the flashlists for (default: %(default)s)",
    )
    replay.add_argument(
        "--output",
        type=Path,
        help="Write the final snapshot here instead of standard output",
    )
    return parser.parse_args(list(argv))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(level=parse_log_level(parsed_args.log_level))
        if parsed_args.cycles < 1:
            raise ValueError("--cycles must be at least 1")  # noqa: TRY301
        config = get_session_config()
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        result = replay_cycles(
            topology_path=parsed_args.topology,
            flashlist_paths=parsed_args.flashlists,
            config=config,
            cycles=parsed_args.cycles,
        )
        output = snapshot_to_json(result.last_cycle.snapshot)
        if parsed_args.output is None:
            sys.stdout.write(output + "\n")
        else:
            parsed_args.output.write_text(output + "\n", encoding="utf-8")
            log.info(
                "Snapshot of cycle %d written to %s",
                result.last_cycle.number,
                parsed_args.output,
            )
    except Exception:
        log.exception("Fatal error during replay")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
