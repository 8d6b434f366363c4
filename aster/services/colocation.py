"""Test colocation conventions.

Rules:
- Python: ``{name}_test.py`` must have ``{name}.py`` in the same directory
- TypeScript: ``{name}.test.ts(x)`` must have ``{name}.ts(x)`` in the same directory
- No ``test_*.py`` (wrong prefix)
- No ``*.spec.ts(x)`` (use ``.test.ts(x)``)
- No tests in ``tests/``, ``test/`` or ``__tests__/`` subdirectories
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator

from loguru import logger

from aster.constants import DEFAULT_IGNORE_DIRS

WRONG_TEST_PREFIX = "wrong-test-prefix"
WRONG_TEST_SUFFIX = "wrong-test-suffix"
TEST_NOT_COLOCATED = "test-not-colocated"
ORPHANED_TEST = "orphaned-test"

_PY_SEPARATE_DIRS = ("tests", "test")
_TS_SEPARATE_DIRS = ("__tests__", "tests")


@dataclass(frozen=True)
class ColocationViolation:
    """A test file that breaks a colocation rule.

    ``detail`` is the offending directory for ``test-not-colocated`` and
    the expected SUT path for ``orphaned-test``.
    """

    rule_id: str
    file: str
    detail: str = ""

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {"rule_id": self.rule_id, "file": self.file, "detail": self.detail}


def _iter_files(target: Path, ignore_dirs: frozenset[str]) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(target):
        dirnames[:] = sorted(d for d in dirnames if d not in ignore_dirs)
        for filename in sorted(filenames):
            yield Path(dirpath) / filename


def _separate_dir(path: Path, target: Path, candidates: tuple[str, ...]) -> str | None:
    """Name of the first test-only directory the file sits under, if any."""
    try:
        parts = path.relative_to(target).parts[:-1]
    except ValueError:
        parts = path.parts[:-1]
    for candidate in candidates:
        if candidate in parts:
            return candidate
    return None


def check_file(path: Path, target: Path) -> list[ColocationViolation]:
    """Check one file against every colocation rule."""
    name = path.name
    file = str(path)
    violations: list[ColocationViolation] = []

    if name.endswith(".py"):
        if name.startswith("test_"):
            violations.append(ColocationViolation(WRONG_TEST_PREFIX, file))
        if name.endswith("_test.py"):
            separate = _separate_dir(path, target, _PY_SEPARATE_DIRS)
            if separate:
                violations.append(ColocationViolation(TEST_NOT_COLOCATED, file, separate))
            else:
                sut = path.with_name(name[: -len("_test.py")] + ".py")
                if not sut.is_file():
                    violations.append(ColocationViolation(ORPHANED_TEST, file, str(sut)))
        return violations

    for ext in (".ts", ".tsx"):
        if name.endswith(f".spec{ext}"):
            violations.append(ColocationViolation(WRONG_TEST_SUFFIX, file))
        elif name.endswith(f".test{ext}"):
            separate = _separate_dir(path, target, _TS_SEPARATE_DIRS)
            if separate:
                violations.append(ColocationViolation(TEST_NOT_COLOCATED, file, separate))
            else:
                sut = path.with_name(name[: -len(f".test{ext}")] + ext)
                if not sut.is_file():
                    violations.append(ColocationViolation(ORPHANED_TEST, file, str(sut)))
    return violations


def check_colocation(
    target: str | Path,
    ignore_dirs: Iterable[str] = DEFAULT_IGNORE_DIRS,
) -> list[ColocationViolation]:
    """Check every test file under ``target`` for colocation violations.

    Returns:
        Violations in directory-walk order.
    """
    root = Path(target)
    skip = frozenset(ignore_dirs)
    violations: list[ColocationViolation] = []
    for path in _iter_files(root, skip):
        violations.extend(check_file(path, root))
    logger.debug("Found {} colocation violation(s) under {}", len(violations), root)
    return violations
