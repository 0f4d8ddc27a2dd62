"""Single-pass log retention sweep."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.logging import RichHandler

from .evaluator import Decision, Evaluation, RetentionEvaluator
from .policy import RetentionPolicy
from .walker import walk_files

if TYPE_CHECKING:
    from .config import SweepConfig

LOGGER_NAME = "log-sweeper"


def setup_logging(level: int | str = logging.INFO, log_file: Path | None = None) -> logging.Logger:
    """Set up the sweeper logger.

    Args:
        level: Logging level for the logger.
        log_file: Optional file that receives every record.

    Returns:
        Configured logger instance.

    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Clear existing handlers to avoid duplicates when set up again
    if logger.handlers:
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_time=True,
        show_path=False,
    )
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


@dataclass
class SweepStats:
    """Counters for one sweep."""

    start_time: datetime
    scanned: int = 0
    unmatched: int = 0
    unparsable: int = 0
    kept: int = 0
    deleted: int = 0
    would_delete: int = 0
    failed: int = 0

    def record(self, result: Evaluation) -> None:
        """Count a single evaluation."""
        self.scanned += 1
        if result.decision is Decision.SKIP_NO_MATCH:
            self.unmatched += 1
        elif result.decision is Decision.SKIP_UNPARSABLE_DATE:
            self.unparsable += 1
        elif result.decision is Decision.SKIP_TOO_RECENT:
            self.kept += 1
        elif result.decision is Decision.DELETE_DRY_RUN:
            self.would_delete += 1
        elif result.deleted:
            self.deleted += 1
        else:
            self.failed += 1


class LogSweeper:
    """Walks a directory once and removes logs older than the retention window."""

    def __init__(
        self,
        config: SweepConfig,
        logger: logging.Logger,
        now: datetime | None = None,
    ) -> None:
        """Initialize the sweeper.

        Args:
            config: Sweep configuration.
            logger: Logger instance.
            now: Reference time. Defaults to the current UTC time.

        Raises:
            SweepConfigError: If the configuration is invalid.

        """
        self.config = config
        self.logger = logger
        self.policy = RetentionPolicy.from_config(config)
        self.now = now or datetime.now(UTC)
        self.evaluator = RetentionEvaluator(self.policy, self.now, logger)

    def run(self) -> SweepStats:
        """Run the sweep.

        Returns:
            Statistics for the pass.

        Raises:
            OSError: If the directory tree cannot be walked.

        """
        stats = SweepStats(start_time=self.now)
        if self.policy.dry_run:
            self.logger.info("Dry run, nothing will be deleted")

        for path in walk_files(self.config.directory):
            stats.record(self.evaluator.evaluate(path))

        self.logger.info(
            "Sweep finished. Stats: scanned=%d, unmatched=%d, unparsable=%d, kept=%d, "
            "deleted=%d, would_delete=%d, failed=%d",
            stats.scanned,
            stats.unmatched,
            stats.unparsable,
            stats.kept,
            stats.deleted,
            stats.would_delete,
            stats.failed,
        )
        return stats
