"""Per-file retention decisions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from .policy import parse_date

if TYPE_CHECKING:
    from .policy import RetentionPolicy


class Decision(Enum):
    """Outcome of evaluating one candidate."""

    SKIP_NO_MATCH = "no_match"
    SKIP_UNPARSABLE_DATE = "unparsable_date"
    SKIP_TOO_RECENT = "too_recent"
    DELETE = "delete"
    DELETE_DRY_RUN = "delete_dry_run"


@dataclass(frozen=True)
class Evaluation:
    """Result of evaluating a single file."""

    path: Path
    decision: Decision
    date: datetime | None = None
    age: timedelta | None = None
    error: str | None = None
    deleted: bool = False

    @property
    def failed(self) -> bool:
        """True when a deletion was attempted and did not happen."""
        return self.decision is Decision.DELETE and not self.deleted


class RetentionEvaluator:
    """Decides keep/delete for each file and removes stale ones."""

    def __init__(self, policy: RetentionPolicy, now: datetime, logger: logging.Logger) -> None:
        """Initialize the evaluator.

        Args:
            policy: Validated retention policy.
            now: Reference time, captured once per run.
            logger: Logger instance.

        """
        self.policy = policy
        self.now = now
        self.logger = logger

    def decide(self, path: Path) -> Evaluation:
        """Decide what to do with ``path`` without touching the filesystem.

        Only the base name is matched against the pattern.
        """
        text = self.policy.pattern.extract(path.name)
        if text is None:
            return Evaluation(path=path, decision=Decision.SKIP_NO_MATCH)

        try:
            date = parse_date(text, self.policy.layout)
        except ValueError as e:
            return Evaluation(path=path, decision=Decision.SKIP_UNPARSABLE_DATE, error=str(e))

        # Future dates give a negative age and are simply kept
        age = self.now - date
        if age < self.policy.keep:
            return Evaluation(path=path, decision=Decision.SKIP_TOO_RECENT, date=date, age=age)

        decision = Decision.DELETE_DRY_RUN if self.policy.dry_run else Decision.DELETE
        return Evaluation(path=path, decision=decision, date=date, age=age)

    def evaluate(self, path: Path) -> Evaluation:
        """Decide on ``path``, log the outcome and delete it if it is stale.

        Args:
            path: File to evaluate.

        Returns:
            Evaluation describing what happened.

        """
        result = self.decide(path)

        if result.decision is Decision.SKIP_NO_MATCH:
            self.logger.info("%s no match", path)
        elif result.decision is Decision.SKIP_UNPARSABLE_DATE:
            self.logger.info("%s cannot parse date: %s", path, result.error)
        elif result.decision is Decision.SKIP_TOO_RECENT:
            self.logger.info("%s kept", path)
        elif result.decision is Decision.DELETE_DRY_RUN:
            self.logger.info("%s would delete", path)
        else:
            return self._delete(result)

        return result

    def _delete(self, result: Evaluation) -> Evaluation:
        """Remove the file behind ``result``; failures are logged, not raised."""
        path = result.path
        try:
            path.unlink()
        except OSError as e:
            self.logger.error("%s delete failed: %s", path, e)
            return Evaluation(
                path=path,
                decision=result.decision,
                date=result.date,
                age=result.age,
                error=str(e),
            )

        self.logger.info("%s deleted", path)
        return Evaluation(
            path=path,
            decision=result.decision,
            date=result.date,
            age=result.age,
            deleted=True,
        )
