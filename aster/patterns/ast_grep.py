"""Structural matching through the ``ast-grep`` command-line tool.

Shape matching runs ``ast-grep run --pattern ... --json=compact`` and
rule scanning runs ``ast-grep scan --config <sgconfig> --json=compact``.
Python function matches are checked against an inline ``inside:
class_definition`` rule so that methods are reported with kind ``method``.
A missing binary or empty output is treated as "no matches"; output that
is present but not a JSON array raises ``OracleError``.
"""

from __future__ import annotations

import json
import shutil
import subprocess
from dataclasses import replace
from typing import Any, Sequence

from loguru import logger

from aster.constants import DEFAULT_TIMEOUT
from aster.types import ErrorContext, OracleError, RecoveryAction, SymbolKind, Violation
from aster.utils.subprocess_util import format_command, run_command

from .matcher import StructuralMatch, StructuralMatcher
from .shapes import Shape

# Keep command lines well under platform argument limits.
MAX_PATHS_PER_CALL = 200

AST_GREP_LANGUAGES = frozenset({"python", "typescript", "tsx"})

# Python functions directly inside a class body (a nested def stops the search).
METHOD_RULE = """\
id: python-method
language: python
rule:
  pattern: {pattern}
  inside:
    kind: class_definition
    stopBy:
      kind: function_definition
"""


def parse_records(output: str, command: str = "ast-grep") -> list[dict[str, Any]]:
    """Parse ast-grep JSON output into a list of records.

    Args:
        output: Raw stdout from ast-grep.
        command: Command line, for error context.

    Returns:
        List of match records; empty for blank output or ``[]``.

    Raises:
        OracleError: If output is present but is not a JSON array of objects.
    """
    if not output or not output.strip():
        return []
    try:
        data = json.loads(output)
    except json.JSONDecodeError as e:
        raise OracleError(
            f"ast-grep output is not valid JSON: {e}",
            context=ErrorContext(operation=command, component="ast-grep"),
            original_error=e,
        ) from e
    if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
        raise OracleError(
            "ast-grep output is not a JSON array of match records",
            context=ErrorContext(operation=command, component="ast-grep"),
        )
    return data


def record_to_violation(record: dict[str, Any]) -> Violation:
    """Convert an ``ast-grep scan`` record into a Violation."""
    start = record.get("range", {}).get("start", {})
    return Violation(
        file=str(record.get("file", "")),
        line=int(start.get("line", 0)),
        column=int(start.get("column", 0)),
        rule_id=str(record.get("ruleId") or "unknown-rule"),
        message=str(record.get("message") or ""),
        matched_text=str(record.get("text") or record.get("matchedCode") or ""),
        severity=str(record.get("severity") or "error"),
    )


def _chunks(paths: Sequence[str], size: int) -> list[Sequence[str]]:
    return [paths[i : i + size] for i in range(0, len(paths), size)]


class AstGrepMatcher(StructuralMatcher):
    """Structural matcher backed by the ``ast-grep`` binary.

    Usage:
        matcher = AstGrepMatcher()
        for match in matcher.match_shape(shape, "python", ["src"]):
            print(match.file, match.line, match.name)

        violations = matcher.scan_rules("sgconfig.yml", ["src/app.py"])
    """

    name = "ast-grep"

    def __init__(
        self,
        binary: str = "ast-grep",
        timeout: int = DEFAULT_TIMEOUT,
        cwd: str | None = None,
    ):
        """Initialize the matcher.

        Args:
            binary: Name or path of the ast-grep executable.
            timeout: Per-invocation timeout in seconds.
            cwd: Working directory for invocations (paths are relative to it).
        """
        self._binary = binary
        self._timeout = timeout
        self._cwd = cwd
        self._warned_missing = False

    def is_available(self) -> bool:
        """Check if the ast-grep binary can be found."""
        return shutil.which(self._binary) is not None

    def supports_language(self, language: str) -> bool:
        return language.lower() in AST_GREP_LANGUAGES

    def _run(self, args: list[str]) -> str:
        """Run ast-grep and return stdout; empty string when unavailable."""
        command = [self._binary, *args]
        logger.debug("Running {}", format_command(command))
        try:
            result = run_command(command, cwd=self._cwd, timeout=self._timeout)
        except FileNotFoundError:
            if not self._warned_missing:
                logger.warning(
                    "{} not found on PATH; structural checks report no matches. "
                    "Install with: npm install -g @ast-grep/cli",
                    self._binary,
                )
                self._warned_missing = True
            return ""
        except subprocess.TimeoutExpired as e:
            raise OracleError(
                f"ast-grep timed out after {self._timeout}s",
                user_message="Structural matcher timed out.",
                context=ErrorContext(operation=format_command(command), component="ast-grep"),
                recovery_actions=[
                    RecoveryAction(
                        description="Raise the timeout",
                        command="export ASTER_TIMEOUT=300",
                    )
                ],
                original_error=e,
            ) from e

        # scan exits non-zero when error-severity rules match; stdout is still valid.
        if result.returncode != 0 and not result.stdout.strip() and result.stderr.strip():
            logger.warning("ast-grep exited {}: {}", result.returncode, result.stderr.strip())
        return result.stdout

    def match_shape(
        self,
        shape: Shape,
        language: str,
        paths: Sequence[str],
    ) -> list[StructuralMatch]:
        if not paths or not self.supports_language(language):
            return []

        matches: list[StructuralMatch] = []
        for chunk in _chunks(list(paths), MAX_PATHS_PER_CALL):
            args = ["run", "--pattern", shape.pattern, "--lang", language, "--json=compact", *chunk]
            found = [
                match
                for match in (
                    StructuralMatch.from_record(record, shape)
                    for record in parse_records(self._run(args), command=f"ast-grep run {shape.name}")
                )
                if match is not None
            ]
            if found and language == "python" and shape.kind == SymbolKind.FUNCTION:
                methods = self._method_positions(shape, chunk)
                found = [
                    replace(m, kind=SymbolKind.METHOD) if (m.file, m.line, m.column) in methods else m
                    for m in found
                ]
            matches.extend(found)
        return matches

    def _method_positions(self, shape: Shape, paths: Sequence[str]) -> set[tuple[str, int, int]]:
        """Positions of ``shape`` matches that are defined in a class body."""
        rule = METHOD_RULE.format(pattern=json.dumps(shape.pattern))
        args = ["scan", "--inline-rules", rule, "--json=compact", *paths]
        positions = set()
        for record in parse_records(self._run(args), command="ast-grep scan python-method"):
            start = record.get("range", {}).get("start", {})
            positions.add((str(record.get("file", "")), int(start.get("line", 0)), int(start.get("column", 0))))
        return positions

    def scan_rules(self, sgconfig: str, paths: Sequence[str]) -> list[Violation]:
        """Run the configured rule set over files.

        Args:
            sgconfig: Path to the ast-grep project config (rule directories).
            paths: Files or directories to scan.

        Returns:
            Violations in engine order.
        """
        if not paths:
            return []

        violations: list[Violation] = []
        for chunk in _chunks(list(paths), MAX_PATHS_PER_CALL):
            args = ["scan", "--config", sgconfig, "--json=compact", *chunk]
            records = parse_records(self._run(args), command="ast-grep scan")
            violations.extend(record_to_violation(r) for r in records)
        return violations
