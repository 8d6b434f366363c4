"""AST-based shape matching using tree-sitter.

In-process alternative to the ast-grep engine for symbol and test
discovery. Answers the same shape queries from ``shapes.py`` but cannot
run ast-grep rule files.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Sequence

from loguru import logger

from aster.types import SymbolKind
from aster.utils.files import iter_source_files, language_for

from .matcher import StructuralMatch, StructuralMatcher
from .shapes import Shape

if TYPE_CHECKING:
    from tree_sitter import Language, Node, Parser, Query


TREE_SITTER_LANGUAGES = frozenset({"python", "typescript", "tsx"})


def _is_method(node: "Node") -> bool:
    """Check whether a Python function node is defined directly in a class body."""
    parent = node.parent
    while parent is not None:
        if parent.type == "class_definition":
            return True
        if parent.type in ("function_definition", "lambda", "module"):
            return False
        parent = parent.parent
    return False


class TreeSitterMatcher(StructuralMatcher):
    """Shape matching using tree-sitter queries.

    Features:
    - Lazy parser initialization (only loads when needed)
    - Query compilation cached per (language, shape)
    - Graceful degradation if tree-sitter unavailable

    Usage:
        matcher = TreeSitterMatcher()
        for match in matcher.match_shape(shape, "python", ["src/app.py"]):
            print(f"{match.name} at {match.file}:{match.line + 1}")
    """

    name = "tree-sitter"

    def __init__(self):
        """Initialize tree-sitter matcher.

        Parsers are loaded lazily when first needed for each language.
        """
        self._parsers: dict[str, "Parser"] = {}
        self._languages: dict[str, "Language"] = {}
        self._queries: dict[tuple[str, str], "Query"] = {}
        self._available: bool | None = None

    def _check_availability(self) -> bool:
        """Check if tree-sitter is available.

        Returns:
            True if tree-sitter can be used.
        """
        if self._available is not None:
            return self._available

        try:
            import tree_sitter  # noqa: F401
            import tree_sitter_language_pack  # noqa: F401

            self._available = True
        except ImportError:
            logger.warning(
                "tree-sitter not available. In-process shape matching disabled. "
                "Install with: pip install tree-sitter tree-sitter-language-pack"
            )
            self._available = False

        return self._available

    def _ensure_parser(self, language: str) -> bool:
        """Lazily initialize parser for a language.

        Args:
            language: Grammar name.

        Returns:
            True if parser is available.
        """
        if not self._check_availability():
            return False

        if language in self._parsers:
            return True

        try:
            import tree_sitter_language_pack as tslp
            from tree_sitter import Parser

            lang = tslp.get_language(language)
            self._parsers[language] = Parser(lang)
            self._languages[language] = lang
            logger.debug("Initialized tree-sitter parser for {}", language)
            return True

        except Exception as e:
            logger.warning("Failed to initialize tree-sitter for {}: {}", language, e)
            return False

    def _get_query(self, language: str, shape: Shape) -> "Query":
        key = (language, shape.name)
        if key not in self._queries:
            from tree_sitter import Query

            self._queries[key] = Query(self._languages[language], shape.query)
        return self._queries[key]

    def supports_language(self, language: str) -> bool:
        """Check if we can parse this language.

        Args:
            language: Grammar name.

        Returns:
            True if shape matching is available for this language.
        """
        language = language.lower()
        return language in TREE_SITTER_LANGUAGES and self._ensure_parser(language)

    def match_shape(
        self,
        shape: Shape,
        language: str,
        paths: Sequence[str],
    ) -> list[StructuralMatch]:
        language = language.lower()
        if shape.query is None or not self.supports_language(language):
            return []

        matches: list[StructuralMatch] = []
        for file_path in iter_source_files(paths):
            if language_for(file_path) != language:
                continue
            matches.extend(self._match_file(shape, language, file_path))
        return matches

    def _match_file(self, shape: Shape, language: str, file_path: str) -> list[StructuralMatch]:
        try:
            source = Path(file_path).read_bytes()
        except OSError as e:
            logger.debug("Skipping file {}: {}", file_path, e)
            return []

        from tree_sitter import QueryCursor

        tree = self._parsers[language].parse(source)
        cursor = QueryCursor(self._get_query(language, shape))

        results: list[StructuralMatch] = []
        for _pattern_idx, captures in cursor.matches(tree.root_node):
            if shape.callee is not None:
                callees = captures.get("callee", [])
                if not callees or callees[0].text.decode("utf-8", errors="replace") != shape.callee:
                    continue

            for node in captures.get("name", []):
                kind = shape.kind
                if kind == SymbolKind.FUNCTION and language == "python":
                    owners = captures.get("match", [])
                    if owners and _is_method(owners[0]):
                        kind = SymbolKind.METHOD

                results.append(
                    StructuralMatch(
                        file=file_path,
                        line=node.start_point[0],
                        column=node.start_point[1],
                        name=node.text.decode("utf-8", errors="replace"),
                        shape=shape.name,
                        kind=kind,
                    )
                )
        return results
