"""Command-line entry point."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from crypto_signal import VERSION
from crypto_signal.config import Settings
from crypto_signal.context import RunContext
from crypto_signal.report import REPORT_PATH, generate_report

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NO_REPORT = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="crypto-signal",
        description="Fetch crypto sentiment and price history, score technical signals, write a report.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=REPORT_PATH,
        help=f"Report file path (default: {REPORT_PATH})",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level, overrides LOG_LEVEL (default: INFO)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = Settings.from_env()
    except ValueError as e:
        logging.basicConfig(level=logging.INFO)
        logger.error(f"Invalid configuration: {e}")
        return EXIT_CONFIG_ERROR

    log_level = (args.log_level or settings.log_level).upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    logger.info(f"Starting crypto-signal v{VERSION} ({settings.coin_id}/{settings.vs_currency})")

    with RunContext.create(settings) as ctx:
        report = asyncio.run(generate_report(ctx, args.output))

    if report is None or report.output_path is None:
        return EXIT_NO_REPORT
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
