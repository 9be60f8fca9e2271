"""Command line entry point.

Usage::

    ledger-engine transactions.csv > accounts.csv

The final account snapshot goes to stdout, one ``warn - <message>`` line per
rejected transaction goes to stderr.
"""

import argparse
import logging
import sys
from typing import IO, List, Optional

import structlog

from config import Settings, get_settings
from exceptions import StreamError
from models import ProcessingSummary
from records import read_transactions, write_snapshot
from services import LedgerService

LOGGER_NAME = "ledger"
_LEVEL_LABELS = {"warning": "warn"}

logger = structlog.get_logger("ledger.main")


def render_plain(_, method_name: str, event_dict: dict) -> str:
    """Render ``<level> - <event>``, dropping the structured context."""
    level = event_dict.get("level", method_name)
    return f"{_LEVEL_LABELS.get(level, level)} - {event_dict.get('event', '')}"


def build_processors(settings: Settings) -> list:
    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
    ]
    if settings.log_format == "json":
        processors += [
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(render_plain)
    return processors


def configure_logging(settings: Settings, stream: Optional[IO[str]] = None) -> None:
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))

    app_logger = logging.getLogger(LOGGER_NAME)
    app_logger.handlers = [handler]
    app_logger.setLevel(settings.log_level.upper())
    app_logger.propagate = False

    structlog.configure(
        processors=build_processors(settings),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ledger-engine",
        description="Apply a CSV stream of transactions and print the final account balances.",
    )
    parser.add_argument("input", help="Path to the transactions CSV file")
    return parser


def run(
    input_path: str,
    settings: Settings,
    ledger: Optional[LedgerService] = None,
    out: Optional[IO[str]] = None,
) -> ProcessingSummary:
    """Process the whole input file and write the snapshot. StreamError aborts the run."""
    if ledger is None:
        ledger = LedgerService()

    summary = ledger.process(read_transactions(input_path))
    write_snapshot(ledger.snapshot(sort=settings.sort_output), out if out is not None else sys.stdout)
    return summary


def main(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> int:
    args = build_parser().parse_args(argv)
    if settings is None:
        settings = get_settings()
    configure_logging(settings)

    logger.info(
        "Starting ledger run",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        input=args.input,
    )

    try:
        run(args.input, settings)
    except StreamError as e:
        logger.error(str(e), error_code=e.error_code, input=args.input)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
