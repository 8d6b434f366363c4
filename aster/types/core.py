"""
Core value types for change scoping and symbol matching.

All of these are scan-scoped: they are created during a single
invocation, passed between components by value and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


@dataclass(frozen=True)
class ChangedInterval:
    """A 1-based, inclusive range of lines added by one diff hunk."""

    file: str
    start_line: int
    end_line: int

    def __post_init__(self) -> None:
        if self.start_line < 1:
            raise ValueError("start_line must be >= 1")
        if self.end_line < self.start_line:
            raise ValueError("end_line must be >= start_line")

    @property
    def line_count(self) -> int:
        """Number of lines in this interval."""
        return self.end_line - self.start_line + 1

    def contains(self, line: int) -> bool:
        """Check if a 1-based line number is within this interval (inclusive)."""
        return self.start_line <= line <= self.end_line


@dataclass(frozen=True)
class DiffWarning:
    """A hunk header that could not be parsed and was skipped."""

    line_number: int
    text: str
    reason: str


@dataclass(frozen=True)
class Violation:
    """A rule violation reported by the structural-match engine.

    ``line`` and ``column`` are 0-based, exactly as the engine reports them.
    """

    file: str
    line: int
    column: int
    rule_id: str
    message: str
    matched_text: str = ""
    severity: str = "error"

    @property
    def location(self) -> str:
        """Get a 1-based location string for display."""
        return f"{self.file}:{self.line + 1}:{self.column + 1}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "file": self.file,
            "line": self.line,
            "column": self.column,
            "rule_id": self.rule_id,
            "message": self.message,
            "matched_text": self.matched_text,
            "severity": self.severity,
        }


class SymbolKind(StrEnum):
    """Kinds of declarations collected into the symbol table."""

    FUNCTION = "function"
    METHOD = "method"
    CLASS = "class"


@dataclass(frozen=True)
class Symbol:
    """A declared identifier found in a source file."""

    raw_name: str
    kind: SymbolKind
    source_file: str


@dataclass(frozen=True)
class TestCase:
    """A test-case name paired with the file declaring it.

    For registration calls (``test("...")``) ``raw_name`` is the string
    literal as written, quotes included.
    """

    __test__ = False

    raw_name: str
    source_file: str
    line: int = 0


@dataclass(frozen=True)
class SymbolReference:
    """A test name found to reference an implementation symbol."""

    test: TestCase
    symbol: str
    segments: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "test_name": self.test.raw_name,
            "file": self.test.source_file,
            "line": self.test.line,
            "symbol": self.symbol,
        }
