"""Retention policy: the validated, immutable form of a sweep configuration."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from .config import SweepConfigError

if TYPE_CHECKING:
    from .config import SweepConfig

DATE_GROUP = "date"


@dataclass(frozen=True)
class DatePattern:
    """Compiled filename pattern with its resolved date group index."""

    regex: re.Pattern[str]
    date_index: int

    @classmethod
    def compile(cls, expression: str) -> DatePattern:
        """Compile a filename pattern and locate its ``date`` group.

        Args:
            expression: Regular expression containing ``(?P<date>...)``.

        Returns:
            The compiled pattern.

        Raises:
            SweepConfigError: If the expression is empty, does not compile,
                or has no ``date`` group.

        """
        expression = expression.strip()
        if not expression:
            raise SweepConfigError("missing --match")

        try:
            regex = re.compile(expression)
        except re.error as e:
            raise SweepConfigError(f"--match does not compile: {e}") from e

        if DATE_GROUP not in regex.groupindex:
            raise SweepConfigError(
                f"--match has no {DATE_GROUP!r} group, define one with (?P<{DATE_GROUP}>...)"
            )

        return cls(regex=regex, date_index=regex.groupindex[DATE_GROUP])

    def extract(self, name: str) -> str | None:
        """Return the date text captured from ``name``, or None if it does not match."""
        match = self.regex.search(name)
        if match is None:
            return None
        return match.group(self.date_index) or ""


def parse_date(text: str, layout: str) -> datetime:
    """Parse ``text`` with the strptime ``layout``.

    Naive results are taken to be UTC.

    Raises:
        ValueError: If the layout is empty or the text does not conform.

    """
    if not layout:
        raise ValueError("empty layout")
    parsed = datetime.strptime(text, layout)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


@dataclass(frozen=True)
class RetentionPolicy:
    """Everything the evaluator needs, resolved once before the walk."""

    pattern: DatePattern
    layout: str
    keep: timedelta
    dry_run: bool = False

    @classmethod
    def from_config(cls, config: SweepConfig) -> RetentionPolicy:
        """Validate ``config`` and build the policy.

        Raises:
            SweepConfigError: On an empty or broken pattern, a missing date
                group, or a non-positive or oversized retention window.

        """
        pattern = DatePattern.compile(config.match)

        if config.keep_days <= 0:
            raise SweepConfigError(f"--keep must be a positive number of days, got {config.keep_days}")

        try:
            keep = timedelta(days=config.keep_days)
        except OverflowError as e:
            raise SweepConfigError(f"--keep {config.keep_days} is too large") from e

        return cls(
            pattern=pattern,
            layout=config.layout,
            keep=keep,
            dry_run=config.dry_run,
        )
