"""Diff scoping: changed-line extraction and violation filtering.

Usage:
    from aster.diff import extract_changed_ranges, filter_violations

    ranges = extract_changed_ranges(diff_text)
    changed_only = filter_violations(violations, ranges)
"""

from .filter import ChangeFilter, filter_violations
from .ranges import (
    ChangeRanges,
    DiffRangeExtractor,
    extract_changed_ranges,
    normalize_path,
)

__all__ = [
    "ChangeFilter",
    "ChangeRanges",
    "DiffRangeExtractor",
    "extract_changed_ranges",
    "filter_violations",
    "normalize_path",
]
