"""Scan orchestration.

Wires the engines, the diff scoping and the symbol-reference check into
the four scan modes: full directory, unstaged changes, staged changes,
and changes against a base revision. Every stage hands its result to the
next as an in-memory value.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Iterable, Protocol, Sequence

from loguru import logger

from aster.config import AsterConfig
from aster.diff import ChangeFilter, DiffRangeExtractor, normalize_path
from aster.patterns import AstGrepMatcher, StructuralMatcher, TreeSitterMatcher
from aster.symbols import ReferenceCheckResult, ReferenceMatcher, SymbolTable, TestNameIndex
from aster.types import DiffWarning, Violation
from aster.utils.files import is_test_file, iter_source_files, language_for

from .colocation import ColocationViolation, check_colocation, check_file
from .git_service import DiffTarget, GitService

AST_PATTERN = "ast-pattern"
SYMBOL_REFERENCE = "symbol-reference"
COLOCATION = "colocation"


class RuleScanner(Protocol):
    """Runs a rule configuration over files and reports violations."""

    def scan_rules(self, sgconfig: str, paths: Sequence[str]) -> list[Violation]: ...


def create_matcher(config: AsterConfig) -> StructuralMatcher:
    """Build the structural matcher selected by configuration."""
    if config.engine == "tree-sitter":
        return TreeSitterMatcher()
    return AstGrepMatcher(binary=config.ast_grep_binary, timeout=config.timeout)


def _relative_to(root: str, path: str) -> str:
    """Express a path relative to root with forward slashes, if it lies under it."""
    if os.path.isabs(path):
        try:
            path = os.path.relpath(path, root)
        except ValueError:
            return normalize_path(path)
    return normalize_path(path)


@dataclass
class ScanReport:
    """Everything a scan found, grouped by category."""

    description: str
    rule_violations: list[Violation] = field(default_factory=list)
    reference: ReferenceCheckResult | None = None
    colocation_violations: list[ColocationViolation] = field(default_factory=list)
    diff_warnings: list[DiffWarning] = field(default_factory=list)
    files_scanned: int = 0
    nothing_to_check: str | None = None
    colocation_checked: bool = False

    def counts(self) -> dict[str, int]:
        """Violation count per category."""
        return {
            AST_PATTERN: len(self.rule_violations),
            SYMBOL_REFERENCE: len(self.reference.references) if self.reference else 0,
            COLOCATION: len(self.colocation_violations),
        }

    @property
    def exit_code(self) -> int:
        """0 when every category is empty and the input was well formed, else 1."""
        if self.diff_warnings:
            return 1
        return 1 if any(self.counts().values()) else 0

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "description": self.description,
            "counts": self.counts(),
            "exit_code": self.exit_code,
            "files_scanned": self.files_scanned,
            "nothing_to_check": self.nothing_to_check,
            "rule_violations": [v.to_dict() for v in self.rule_violations],
            "symbol_references": self.reference.to_dict() if self.reference else None,
            "colocation_violations": [v.to_dict() for v in self.colocation_violations],
            "diff_warnings": [
                {"line_number": w.line_number, "text": w.text, "reason": w.reason}
                for w in self.diff_warnings
            ],
        }


class ScanService:
    """Runs scans and aggregates results.

    Usage:
        service = ScanService(AsterConfig.from_env())
        report = service.scan_directory("src")
        report = service.scan_changes(DiffTarget.against("main"))
        sys.exit(report.exit_code)
    """

    def __init__(
        self,
        config: AsterConfig | None = None,
        matcher: StructuralMatcher | None = None,
        rule_scanner: RuleScanner | None = None,
        git: GitService | None = None,
    ):
        self._config = config or AsterConfig()
        self._matcher = matcher or create_matcher(self._config)
        self._rule_scanner = rule_scanner or AstGrepMatcher(
            binary=self._config.ast_grep_binary,
            timeout=self._config.timeout,
        )
        self._git = git or GitService(timeout=self._config.timeout)

    # ----------------------------------------------------------------
    # Building blocks
    # ----------------------------------------------------------------

    def build_symbol_table(self, source_roots: Iterable[str | Path]) -> SymbolTable:
        """Collect the normalized symbol set once for a scan."""
        return SymbolTable.collect(
            source_roots,
            self._matcher,
            min_length=self._config.min_symbol_length,
            test_prefix=self._config.test_prefix,
            ignore_dirs=self._config.ignore_dirs,
        )

    def _test_index(self) -> TestNameIndex:
        return TestNameIndex(
            self._matcher,
            test_prefix=self._config.test_prefix,
            registration_calls=self._config.registration_calls,
            ignore_dirs=self._config.ignore_dirs,
        )

    def check_names(
        self,
        source_roots: Iterable[str | Path],
        test_roots: Iterable[str | Path],
        symbols: SymbolTable | None = None,
    ) -> ReferenceCheckResult:
        """Check test names under ``test_roots`` against symbols from ``source_roots``."""
        table = symbols if symbols is not None else self.build_symbol_table(source_roots)
        matcher = ReferenceMatcher(table)
        if table.is_empty():
            return matcher.check([])
        tests = self._test_index().collect(test_roots)
        return matcher.check(tests)

    def _resolve_sgconfig(self, root: str) -> str | None:
        path = Path(self._config.sgconfig)
        if not path.is_absolute():
            candidates = [Path(root) / path, Path.cwd() / path]
        else:
            candidates = [path]
        for candidate in candidates:
            if candidate.is_file():
                return str(candidate)
        logger.warning("No rule config found at {}; skipping rule scan", self._config.sgconfig)
        return None

    def _scan_rules(self, root: str, paths: Sequence[str]) -> list[Violation]:
        sgconfig = self._resolve_sgconfig(root)
        if sgconfig is None or not paths:
            return []
        return self._rule_scanner.scan_rules(sgconfig, paths)

    # ----------------------------------------------------------------
    # Scan modes
    # ----------------------------------------------------------------

    def scan_directory(self, target: str = ".", colocation: bool = False) -> ScanReport:
        """Full scan: rules, symbol references and (optionally) colocation."""
        report = ScanReport(description=f"directory {target}", colocation_checked=colocation)
        report.rule_violations = self._scan_rules(target, [target])
        report.reference = self.check_names([target], [target])
        report.files_scanned = sum(1 for _ in iter_source_files([target], self._config.ignore_dirs))
        if colocation:
            report.colocation_violations = check_colocation(target, self._config.ignore_dirs)
        return report

    def scan_changes(self, target: DiffTarget, colocation: bool = False) -> ScanReport:
        """Scan only lines changed in ``target``.

        Rule violations are restricted to changed intervals; test names are
        checked in changed test files only, against symbols collected from
        the whole work tree.
        """
        report = ScanReport(description=target.description, colocation_checked=colocation)
        root = self._git.toplevel()

        changed = [normalize_path(f) for f in self._git.changed_files(target) if language_for(f)]
        if not changed:
            report.nothing_to_check = "No TypeScript or Python files changed."
            return report

        ranges = DiffRangeExtractor().extract(self._git.diff_text(target))
        report.diff_warnings = list(ranges.warnings)

        existing = [f for f in changed if (Path(root) / f).is_file()]
        report.files_scanned = len(existing)
        absolute = [str(Path(root) / f) for f in existing]

        raw = [
            replace(v, file=_relative_to(root, v.file))
            for v in self._scan_rules(root, absolute)
        ]
        report.rule_violations = ChangeFilter(ranges).filter(raw)

        changed_tests = [f for f in existing if is_test_file(f)]
        if changed_tests:
            result = self.check_names([root], [str(Path(root) / f) for f in changed_tests])
            result.references = [
                replace(r, test=replace(r.test, source_file=_relative_to(root, r.test.source_file)))
                for r in result.references
            ]
            report.reference = result
        else:
            logger.info("No test files changed")

        if colocation:
            for file in changed_tests:
                for violation in check_file(Path(root) / file, Path(root)):
                    report.colocation_violations.append(
                        replace(violation, file=file, detail=_relative_to(root, violation.detail))
                    )
        return report
