"""
Pytest configuration and shared fixtures for Aster tests.
"""

from dataclasses import replace
from pathlib import Path
from typing import Sequence

import pytest

from aster.patterns import Shape, StructuralMatch, StructuralMatcher


class StaticMatcher(StructuralMatcher):
    """Structural matcher answering from a fixed list of matches.

    A match is returned for a shape when its ``shape`` field names that
    shape and its file is one of the requested paths.
    """

    name = "static"

    def __init__(self, matches: Sequence[StructuralMatch] = (), languages=("python", "typescript", "tsx")):
        self.matches = list(matches)
        self.languages = frozenset(languages)
        self.calls: list[tuple[str, str, tuple[str, ...]]] = []

    def supports_language(self, language: str) -> bool:
        return language in self.languages

    def match_shape(self, shape: Shape, language: str, paths: Sequence[str]) -> list[StructuralMatch]:
        self.calls.append((shape.name, language, tuple(paths)))
        wanted = set(paths)
        return [
            replace(m, kind=shape.kind)
            for m in self.matches
            if m.shape == shape.name and m.file in wanted
        ]


def make_match(file, name: str, shape: str, line: int = 0, column: int = 0) -> StructuralMatch:
    """Build a match record for StaticMatcher."""
    return StructuralMatch(file=str(file), line=line, column=column, name=name, shape=shape)


@pytest.fixture
def static_matcher():
    """Factory for StaticMatcher instances."""
    return StaticMatcher


@pytest.fixture
def match():
    """Factory for StructuralMatch records."""
    return make_match


@pytest.fixture
def write_tree(tmp_path):
    """Write a {relative path: content} mapping under tmp_path."""

    def _write(files: dict[str, str], root: Path | None = None) -> Path:
        base = root or tmp_path
        for rel, content in files.items():
            path = base / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        return base

    return _write
