"""File discovery and classification helpers."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Iterable, Iterator

from aster.constants import DEFAULT_IGNORE_DIRS, LANGUAGE_BY_EXTENSION

# test_*.py, *_test.py, *.test.ts(x), *.spec.ts(x)
TEST_FILE_PATTERN = re.compile(r"(^test_.*\.py|_test\.py|\.test\.tsx?|\.spec\.tsx?)$")


def language_for(path: str | Path) -> str | None:
    """Map a file path to its grammar name by extension, or None if unsupported."""
    return LANGUAGE_BY_EXTENSION.get(Path(path).suffix.lower())


def is_test_file(path: str | Path) -> bool:
    """Check whether a file follows one of the recognized test-file conventions."""
    return TEST_FILE_PATTERN.search(Path(path).name) is not None


def iter_source_files(
    roots: Iterable[str | Path],
    ignore_dirs: Iterable[str] = DEFAULT_IGNORE_DIRS,
) -> Iterator[str]:
    """Yield supported source files under the given roots, in sorted order.

    A root that is itself a file is yielded as-is when its extension is
    supported. Paths keep the form of the root they were found under.
    """
    skip = set(ignore_dirs)
    for root in roots:
        root_path = Path(root)
        if root_path.is_file():
            if language_for(root_path):
                yield str(root_path)
            continue
        if not root_path.is_dir():
            continue
        for dirpath, dirnames, filenames in os.walk(root_path):
            dirnames[:] = sorted(d for d in dirnames if d not in skip)
            for filename in sorted(filenames):
                if language_for(filename):
                    yield os.path.join(dirpath, filename)


def group_by_language(paths: Iterable[str]) -> dict[str, list[str]]:
    """Group file paths by grammar name, dropping unsupported files."""
    grouped: dict[str, list[str]] = {}
    for path in paths:
        language = language_for(path)
        if language:
            grouped.setdefault(language, []).append(path)
    return grouped
