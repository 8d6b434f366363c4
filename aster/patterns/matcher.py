"""Structural matcher base class and match record.

A structural matcher is treated as an oracle: given a language, a
declaration shape and a set of files, it returns where that shape
occurs and the text bound to its ``NAME`` placeholder.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Sequence

from aster.types import SymbolKind

from .shapes import Shape


@dataclass(frozen=True)
class StructuralMatch:
    """A single shape match.

    ``line`` and ``column`` are 0-based, as reported by the engine.
    """

    file: str
    line: int
    column: int
    name: str
    shape: str
    kind: SymbolKind | None = None

    @classmethod
    def from_record(cls, record: dict[str, Any], shape: Shape) -> "StructuralMatch | None":
        """Build a match from an engine record, or None if NAME is unbound.

        Record shape::

            {"file": ..., "range": {"start": {"line": 0, "column": 0}},
             "metaVariables": {"single": {"NAME": {"text": ...}}}}
        """
        name = (
            record.get("metaVariables", {})
            .get("single", {})
            .get("NAME", {})
            .get("text")
        )
        if not name:
            return None
        start = record.get("range", {}).get("start", {})
        return cls(
            file=str(record.get("file", "")),
            line=int(start.get("line", 0)),
            column=int(start.get("column", 0)),
            name=name,
            shape=shape.name,
            kind=shape.kind,
        )


class StructuralMatcher(ABC):
    """Abstract base class for structural matchers.

    Implementations must provide:
    - match_shape(): Find all occurrences of a shape in files
    - supports_language(): Check if a language can be matched
    """

    name: str = "structural"

    @abstractmethod
    def match_shape(
        self,
        shape: Shape,
        language: str,
        paths: Sequence[str],
    ) -> list[StructuralMatch]:
        """Find all occurrences of a shape.

        Args:
            shape: Declaration or call shape to look for.
            language: Grammar name (python, typescript, tsx).
            paths: Files (or directories) to search.

        Returns:
            Matches in engine order. No output means no matches.
        """

    @abstractmethod
    def supports_language(self, language: str) -> bool:
        """Check if this matcher can parse a language."""

    def match_shapes(
        self,
        shapes: Sequence[Shape],
        language: str,
        paths: Sequence[str],
    ) -> list[StructuralMatch]:
        """Match several shapes over the same files, concatenating results."""
        results: list[StructuralMatch] = []
        if not paths:
            return results
        for shape in shapes:
            results.extend(self.match_shape(shape, language, paths))
        return results
