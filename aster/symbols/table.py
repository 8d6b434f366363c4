"""Symbol table: declared identifiers, normalized for name matching.

Symbols are collected through a structural matcher using the fixed
declaration shapes for each language, then normalized (lowercase, word
separators removed). Normalized names shorter than the minimum length,
and declarations that carry the test prefix, are discarded. The table
is built once per scan and read-only thereafter.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator

from loguru import logger

from aster.constants import (
    DEFAULT_IGNORE_DIRS,
    MIN_SYMBOL_LENGTH,
    TEST_PREFIX,
    WORD_SEPARATOR,
)
from aster.patterns import ShapeRole, StructuralMatcher, shapes_for
from aster.types import Symbol, SymbolKind
from aster.utils.files import group_by_language, iter_source_files


def normalize_symbol(name: str) -> str:
    """Normalize a symbol name: lowercase, word separators removed.

    ``UserService`` and ``user_service`` both become ``userservice``.
    """
    return name.lower().replace(WORD_SEPARATOR, "")


@dataclass(frozen=True)
class SymbolTable:
    """Deduplicated, normalized symbol names plus the declarations behind them."""

    symbols: tuple[Symbol, ...]
    normalized: frozenset[str]
    min_length: int = MIN_SYMBOL_LENGTH

    @classmethod
    def from_symbols(
        cls,
        symbols: Iterable[Symbol],
        min_length: int = MIN_SYMBOL_LENGTH,
        test_prefix: str = TEST_PREFIX,
    ) -> "SymbolTable":
        """Build a table from raw declarations.

        Args:
            symbols: Declarations found in source files.
            min_length: Minimum normalized length to keep.
            test_prefix: Declarations whose raw name starts with this are skipped.

        Returns:
            SymbolTable whose ``normalized`` set is the lookup key set.
        """
        kept: list[Symbol] = []
        normalized: set[str] = set()
        for symbol in symbols:
            if symbol.raw_name.startswith(test_prefix):
                continue
            key = normalize_symbol(symbol.raw_name)
            if len(key) < min_length:
                continue
            kept.append(symbol)
            normalized.add(key)
        return cls(symbols=tuple(kept), normalized=frozenset(normalized), min_length=min_length)

    @classmethod
    def collect(
        cls,
        roots: Iterable[str | Path],
        matcher: StructuralMatcher,
        min_length: int = MIN_SYMBOL_LENGTH,
        test_prefix: str = TEST_PREFIX,
        ignore_dirs: Iterable[str] = DEFAULT_IGNORE_DIRS,
    ) -> "SymbolTable":
        """Collect declarations under source roots using a structural matcher."""
        files = list(iter_source_files(roots, ignore_dirs))
        table = cls.from_symbols(
            iter_declarations(files, matcher),
            min_length=min_length,
            test_prefix=test_prefix,
        )
        logger.debug(
            "Collected {} unique symbol(s) from {} file(s)",
            len(table.normalized),
            len(files),
        )
        return table

    @property
    def max_length(self) -> int:
        """Length of the longest normalized symbol (0 when empty)."""
        return max((len(s) for s in self.normalized), default=0)

    def is_empty(self) -> bool:
        return not self.normalized

    def __contains__(self, name: object) -> bool:
        return name in self.normalized

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self.normalized))

    def __len__(self) -> int:
        return len(self.normalized)


def iter_declarations(files: Iterable[str], matcher: StructuralMatcher) -> Iterator[Symbol]:
    """Yield every declaration matching a symbol shape, grouped by language."""
    for language, paths in group_by_language(files).items():
        if not matcher.supports_language(language):
            logger.debug("{} cannot match {}; skipping {} file(s)", matcher.name, language, len(paths))
            continue
        for match in matcher.match_shapes(shapes_for(language, ShapeRole.SYMBOL), language, paths):
            yield Symbol(
                raw_name=match.name,
                kind=match.kind or SymbolKind.FUNCTION,
                source_file=match.file,
            )


def collect_symbols(
    roots: Iterable[str | Path],
    matcher: StructuralMatcher,
    min_length: int = MIN_SYMBOL_LENGTH,
) -> frozenset[str]:
    """Collect the normalized symbol set for source roots."""
    return SymbolTable.collect(roots, matcher, min_length=min_length).normalized
