"""Restrict violations to changed lines."""

from __future__ import annotations

from typing import Iterable

from loguru import logger

from aster.types import Violation

from .ranges import ChangeRanges, normalize_path


class ChangeFilter:
    """Keeps only violations whose line falls inside a changed interval.

    Violations carry 0-based lines (as the engine reports them); intervals
    are 1-based and inclusive. A violation in a file with no intervals is
    dropped silently. Output order equals input order.
    """

    def __init__(self, ranges: ChangeRanges):
        self._ranges = ranges

    def accepts(self, violation: Violation) -> bool:
        """Check whether a single violation lies on a changed line."""
        return self._ranges.contains(normalize_path(violation.file), violation.line + 1)

    def filter(self, violations: Iterable[Violation]) -> list[Violation]:
        """Filter violations to changed lines, preserving order."""
        violations = list(violations)
        kept = [v for v in violations if self.accepts(v)]
        logger.debug("Kept {} of {} violation(s) on changed lines", len(kept), len(violations))
        return kept


def filter_violations(
    violations: Iterable[Violation],
    ranges: ChangeRanges,
) -> list[Violation]:
    """Convenience wrapper around ``ChangeFilter(ranges).filter``."""
    return ChangeFilter(ranges).filter(violations)
