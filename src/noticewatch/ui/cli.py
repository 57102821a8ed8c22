from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from noticewatch.app import list_sources, run_relay_cycle, skip_source
from noticewatch.common.logging import configure_logging
from noticewatch.config.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Relay announcements to Telegram")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Run one polling cycle")
    run.add_argument(
        "--only",
        nargs="+",
        metavar="NAME",
        help="Restrict the cycle to these sources",
    )

    skip = subparsers.add_parser(
        "skip",
        help="Mark the current items of a source as seen without sending them",
    )
    skip.add_argument("name", help="Source name, see the 'sources' command")

    subparsers.add_parser("sources", help="List the built-in sources")

    return parser.parse_args(list(argv))


def _print_sources() -> None:
    for spec in list_sources():
        flags = ["enabled" if spec.enabled else "disabled"]
        if spec.correlated:
            flags.append("edits")
        if spec.message_thread_id is not None:
            flags.append(f"thread={spec.message_thread_id}")
        print(f"{spec.name:<10} {spec.display_name}  [{', '.join(flags)}]")  # noqa: T201


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        if parsed_args.command == "run":
            report = run_relay_cycle(only=parsed_args.only)
            log.info(
                "Relay cycle finished: delivered=%s, failed_sources=%s",
                report.delivered,
                report.failed_sources,
            )
        elif parsed_args.command == "skip":
            skip_source(parsed_args.name)
        elif parsed_args.command == "sources":
            _print_sources()
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except (ConfigurationError, ValueError):
        log.exception("Configuration error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during relay")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
