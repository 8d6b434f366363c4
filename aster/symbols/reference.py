"""Detection of test names that reference implementation symbols.

A test name is split into word segments; every run of consecutive
segments is concatenated (no separator) and compared for exact equality
with the normalized symbol set. Segment boundaries are respected on the
test-name side only: ``test_username_is_valid`` never matches ``user``,
and ``test_fetch_user_returns_none`` never matches ``fetch_user_data``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Collection, Iterable

from loguru import logger

from aster.constants import WORD_SEPARATOR
from aster.types import SymbolReference, TestCase

from .table import SymbolTable

_WHITESPACE = re.compile(r"\s")


def segment_test_name(test_name: str) -> list[str]:
    """Split a test name into lowercase word segments.

    Quotes are stripped and whitespace becomes the word separator, so
    ``"calculateTotal returns sum"`` gives ``["calculatetotal", "returns", "sum"]``.
    """
    normalized = test_name.lower().replace('"', "").replace("'", "")
    normalized = _WHITESPACE.sub(WORD_SEPARATOR, normalized)
    return [segment for segment in normalized.split(WORD_SEPARATOR) if segment]


def find_symbol_reference(
    test_name: str,
    symbols: Collection[str],
    max_length: int | None = None,
) -> str | None:
    """Find the first symbol referenced by a test name.

    Scans start index ``i`` ascending and, for each ``i``, extends the run
    one segment at a time; the first concatenation found in ``symbols``
    wins.

    Args:
        test_name: Raw test name (identifier or string literal).
        symbols: Normalized symbol names.
        max_length: Longest symbol length; runs longer than this stop early.

    Returns:
        The matched normalized symbol, or None if the name is clean.
    """
    if not symbols:
        return None
    if max_length is None:
        max_length = max(len(s) for s in symbols)

    segments = segment_test_name(test_name)
    for i in range(len(segments)):
        combo = ""
        for j in range(i, len(segments)):
            combo += segments[j]
            if len(combo) > max_length:
                break
            if combo in symbols:
                return combo
    return None


@dataclass
class ReferenceCheckResult:
    """Outcome of checking test names against a symbol table."""

    references: list[SymbolReference] = field(default_factory=list)
    symbol_count: int = 0
    test_count: int = 0
    skipped_reason: str | None = None

    @property
    def has_violations(self) -> bool:
        return bool(self.references)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "references": [r.to_dict() for r in self.references],
            "symbol_count": self.symbol_count,
            "test_count": self.test_count,
            "skipped_reason": self.skipped_reason,
        }


class ReferenceMatcher:
    """Matches test names against a fixed symbol table.

    Usage:
        matcher = ReferenceMatcher(table)
        matcher.match("test_calculate_total_returns_sum")  # "calculatetotal"
    """

    def __init__(self, symbols: SymbolTable | Iterable[str]):
        if isinstance(symbols, SymbolTable):
            self._min_length = symbols.min_length
            self._symbols = symbols.normalized
        else:
            self._min_length = None
            self._symbols = frozenset(symbols)
        self._max_length = max((len(s) for s in self._symbols), default=0)

    @property
    def symbol_count(self) -> int:
        return len(self._symbols)

    def match(self, test_name: str) -> str | None:
        """Return the first symbol referenced by ``test_name``, if any."""
        return find_symbol_reference(test_name, self._symbols, self._max_length)

    def check(self, tests: Iterable[TestCase]) -> ReferenceCheckResult:
        """Check every test case; at most one reference is reported per test."""
        tests = list(tests)
        if not self._symbols:
            threshold = f" of at least {self._min_length} characters" if self._min_length else ""
            reason = f"no symbols{threshold} found"
            logger.info("Skipping symbol-reference check: {}", reason)
            return ReferenceCheckResult(test_count=len(tests), skipped_reason=reason)

        references: list[SymbolReference] = []
        for test in tests:
            symbol = self.match(test.raw_name)
            if symbol is not None:
                references.append(
                    SymbolReference(
                        test=test,
                        symbol=symbol,
                        segments=tuple(segment_test_name(test.raw_name)),
                    )
                )

        return ReferenceCheckResult(
            references=references,
            symbol_count=len(self._symbols),
            test_count=len(tests),
        )
