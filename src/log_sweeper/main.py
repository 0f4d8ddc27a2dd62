"""Main entry point for the log sweeper."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from .config import SweepConfig, SweepConfigError
from .sweeper import LogSweeper, setup_logging

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ExitStatus:
    """Process exit status filled in by :func:`report_exit`."""

    code: int = 0


@contextmanager
def report_exit(logger: logging.Logger) -> Iterator[ExitStatus]:
    """Log how the wrapped block ended and record the exit code.

    Configuration errors and I/O errors are logged and turn into exit code 1;
    anything else propagates.
    """
    status = ExitStatus()
    try:
        yield status
    except (SweepConfigError, OSError) as e:
        logger.error("exited with error: %s", e)
        status.code = 1
    else:
        logger.info("exited")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        argv: Argument list. Uses ``sys.argv`` if None.

    Returns:
        Parsed arguments.

    """
    parser = argparse.ArgumentParser(
        prog="log-sweeper",
        description="Delete log files whose name-embedded date is older than the retention window",
    )

    parser.add_argument("--dir", default=None, help="Log directory to walk recursively")
    parser.add_argument(
        "--match",
        default=None,
        help="Filename regex with a date group, e.g. '^app-(?P<date>\\d{8})\\.log$'",
    )
    parser.add_argument(
        "--layout",
        default=None,
        help="strptime format of the date group, e.g. '%%Y%%m%%d'",
    )
    parser.add_argument("--keep", type=int, default=None, help="Number of days of logs to keep")
    parser.add_argument(
        "--dry",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Only log what would be deleted (--no-dry overrides the config file)",
    )

    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to configuration file",
    )
    parser.add_argument("--log-file", type=Path, default=None, help="Also write the log to this file")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Log level (default: INFO)",
    )
    parser.add_argument(
        "--init-config",
        action="store_true",
        help="Write the effective configuration to the config file and exit",
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> SweepConfig:
    """Load the config file and apply command line overrides."""
    directory = None
    if args.dir is not None:
        directory = Path(args.dir.strip() or ".")

    # --init-config starts from the defaults, the target file may not exist yet
    base = SweepConfig() if args.init_config else SweepConfig.load(args.config)

    return base.with_overrides(
        directory=directory,
        match=args.match,
        layout=args.layout,
        keep_days=args.keep,
        dry_run=args.dry,
        log_file=args.log_file,
        log_level=args.log_level,
    )


def cmd_init_config(config: SweepConfig, config_path: Path | None, logger: logging.Logger) -> None:
    """Write ``config`` to ``config_path`` (or the default location).

    Raises:
        SweepConfigError: If the file already exists.

    """
    config_path = config_path or SweepConfig.get_config_path()
    if config_path.exists():
        raise SweepConfigError(f"Config already exists: {config_path}")
    config.save(config_path)
    logger.info("Created config: %s", config_path)


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code.

    """
    args = parse_args(argv)
    logger = setup_logging(args.log_level or logging.INFO)

    with report_exit(logger) as status:
        config = build_config(args)
        setup_logging(config.validate_log_level(), config.log_file)

        if args.init_config:
            cmd_init_config(config, args.config, logger)
        else:
            LogSweeper(config, logger).run()

    return status.code


if __name__ == "__main__":
    sys.exit(main())
