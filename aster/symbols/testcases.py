"""Test-case discovery.

Python tests are found by convention (function names carrying the test
prefix); TypeScript tests by registration calls such as
``test("name", ...)`` whose first argument is a string literal.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from loguru import logger

from aster.constants import DEFAULT_IGNORE_DIRS, REGISTRATION_CALLS, TEST_PREFIX
from aster.patterns import ShapeRole, StructuralMatch, StructuralMatcher, shapes_for
from aster.types import TestCase
from aster.utils.files import group_by_language, iter_source_files

_QUOTES = ('"', "'")


def _is_string_literal(text: str) -> bool:
    return len(text) >= 2 and text[0] in _QUOTES and text[-1] == text[0]


class TestNameIndex:
    """Collects test-case names from test roots.

    Usage:
        index = TestNameIndex(matcher)
        for case in index.collect(["tests"]):
            print(case.raw_name, case.source_file)
    """

    __test__ = False

    def __init__(
        self,
        matcher: StructuralMatcher,
        test_prefix: str = TEST_PREFIX,
        registration_calls: Iterable[str] = REGISTRATION_CALLS,
        ignore_dirs: Iterable[str] = DEFAULT_IGNORE_DIRS,
    ):
        self._matcher = matcher
        self._test_prefix = test_prefix
        self._registration_calls = frozenset(registration_calls)
        self._ignore_dirs = frozenset(ignore_dirs)

    def _accepts(self, match: StructuralMatch, callee: str | None) -> bool:
        if callee is None:
            return match.name.startswith(self._test_prefix)
        return callee in self._registration_calls and _is_string_literal(match.name)

    def collect(self, roots: Iterable[str | Path]) -> list[TestCase]:
        """Collect test cases under roots (files or directories).

        Returns:
            Test cases sorted by file, then line.
        """
        files = list(iter_source_files(roots, self._ignore_dirs))
        cases: list[TestCase] = []

        for language, paths in group_by_language(files).items():
            if not self._matcher.supports_language(language):
                continue
            for shape in shapes_for(language, ShapeRole.TEST):
                if shape.callee is not None and shape.callee not in self._registration_calls:
                    continue
                for match in self._matcher.match_shape(shape, language, paths):
                    if self._accepts(match, shape.callee):
                        cases.append(
                            TestCase(raw_name=match.name, source_file=match.file, line=match.line)
                        )

        cases.sort(key=lambda c: (c.source_file, c.line))
        logger.debug("Collected {} test case(s) from {} file(s)", len(cases), len(files))
        return cases


def collect_tests(
    roots: Iterable[str | Path],
    matcher: StructuralMatcher,
) -> list[TestCase]:
    """Collect test cases under roots with default conventions."""
    return TestNameIndex(matcher).collect(roots)
