"""Human-readable rendering of scan results."""

from __future__ import annotations

from aster.services.colocation import (
    ORPHANED_TEST,
    TEST_NOT_COLOCATED,
    WRONG_TEST_PREFIX,
    WRONG_TEST_SUFFIX,
    ColocationViolation,
)
from aster.services.scan_service import AST_PATTERN, COLOCATION, ScanReport
from aster.symbols import ReferenceCheckResult
from aster.types import SymbolReference, Violation

TEST_REFERENCES_SYMBOL = "test-references-symbol"

_SYMBOL_REFERENCE_TEXT = """\
error[test-references-symbol]: Test names should describe behavior, not reference implementation symbols.

Our test naming philosophy:
- Tests document what the system does, not how it's built
- Test names should be readable by non-programmers
- Tests should survive refactoring without needing name changes
- Names describe behavior from the user's perspective

Why referencing symbols is problematic:
- Renaming a function or class requires updating test names
- Symbol names are implementation details that evolve over time
- Tests named after symbols read like "test the function" not "verify behavior"
- Makes it harder to understand what behavior is actually being tested
- Couples tests to code structure instead of requirements

Example refactoring:
  # Before: References implementation symbol 'calculate_damage'
  def test_calculate_damage_returns_correct_value():
      result = calculate_damage(10, 3)
      assert result == 7

  # After: Describes behavior without mentioning the function
  def test_damage_is_attack_minus_defense():
      result = calculate_damage(10, 3)
      assert result == 7

  // Before: References class name 'UserService'
  test("UserService returns user by id", ...)

  // After: Describes behavior
  test("user is retrieved by unique identifier", ...)

The test name should answer "what behavior is being verified?" not "what code is being executed?"
"""

_COLOCATION_MESSAGES: dict[str, str] = {
    WRONG_TEST_PREFIX: "Use suffix pattern {name}_test.py instead of prefix pattern test_{name}.py.",
    WRONG_TEST_SUFFIX: "Use .test.ts suffix instead of .spec.ts for consistency.",
    TEST_NOT_COLOCATED: "Test files should be colocated with their SUT, not in separate directories.",
    ORPHANED_TEST: "Test file has no matching SUT (System Under Test).",
}

# Long explanations, shown between the message and the location.
_COLOCATION_EXPLANATIONS: dict[str, str] = {
    WRONG_TEST_PREFIX: """\
Our testing philosophy:
- Tests live next to their SUT (System Under Test)
- Tests are easy to find when navigating the codebase
- Refactoring a module includes its tests naturally

Why suffix naming matters:
- Alphabetical sorting groups tests with their SUT (service.py, service_test.py)
- Prefix naming separates them (service.py appears far from test_service.py)
- IDE file trees show related files together
- Tab-completion works naturally: type "service" to find both files

Example refactoring:
  # Before: Prefix pattern
  users/
    test_service.py    # Sorts under 't', far from service.py
    service.py

  # After: Suffix pattern
  users/
    service.py
    service_test.py    # Sorts right after service.py
""",
    WRONG_TEST_SUFFIX: """\
Our testing philosophy:
- Consistent naming across the codebase reduces cognitive load
- One convention is better than two
- Tests should be immediately recognizable

Why .test.ts over .spec.ts:
- Vitest and Jest both support .test.ts by default
- ".test" clearly indicates a test file
- Avoids mixing conventions (.spec from Angular/Jasmine era)
- Simpler glob patterns: **/*.test.ts

Example refactoring:
  # Before
  Button.spec.ts
  Button.spec.tsx

  # After
  Button.test.ts
  Button.test.tsx
""",
    TEST_NOT_COLOCATED: """\
Our testing philosophy:
- Tests are part of the module, not a separate concern
- Related code stays together
- Refactoring moves tests with their SUT naturally

Why colocation matters:
- Separate test directories create distance between tests and code
- Developers must navigate to a different location to find tests
- Refactoring requires changes in multiple directory trees
- Easy to forget updating tests when they're "out of sight"

Example refactoring:
  # Before: Separate test directory
  users/
    service.py
  {detail}/
    service_test.py    # Easy to forget, hard to find

  # After: Colocated tests
  users/
    service.py
    service_test.py    # Right next to the code it tests
""",
    ORPHANED_TEST: """\
Our testing philosophy:
- Every test file corresponds to a source file
- Tests verify behavior of specific modules
- Naming conventions link tests to their SUT

Possible causes:
- SUT was renamed or moved without updating the test
- SUT was deleted but the test remains
- Test file naming doesn't follow {{name}}_test.py / {{name}}.test.ts convention
- Test covers code that should be extracted to its own module

How to fix:
1. Rename the test to match an existing SUT
2. Create the missing SUT if the test is valid
3. Delete the test if the SUT was intentionally removed
4. Move shared test utilities to a non-test file
""",
}


def format_violation(violation: Violation) -> str:
    """Render a rule violation with a 1-based location."""
    lines = [
        f"{violation.severity}[{violation.rule_id}]: {violation.message}",
        f"  ┌─ {violation.location}",
        "  │",
    ]
    for text_line in (violation.matched_text or "").splitlines() or [""]:
        lines.append(f"  │ {text_line}")
    lines.append("  │")
    return "\n".join(lines)


def format_symbol_reference(reference: SymbolReference, verbose: bool = True) -> str:
    """Render a test name that references an implementation symbol."""
    location = f"{reference.test.source_file}:{reference.test.line + 1}"
    if not verbose:
        return (
            f"error[{TEST_REFERENCES_SYMBOL}]: Test '{reference.test.raw_name}' "
            f"in {location} references symbol '{reference.symbol}'"
        )
    return (
        f"{_SYMBOL_REFERENCE_TEXT}\n"
        f"  ┌─ test: {reference.test.raw_name}\n"
        f"  │  at: {location}\n"
        f"  │  references symbol: {reference.symbol}\n"
    )


def format_colocation(violation: ColocationViolation, verbose: bool = True) -> str:
    """Render a colocation violation, with its explanation when ``verbose``."""
    message = _COLOCATION_MESSAGES.get(violation.rule_id, violation.rule_id)
    location = violation.file
    if violation.rule_id == ORPHANED_TEST and violation.detail:
        location = f"{violation.file} (expected: {violation.detail})"
    elif violation.rule_id == TEST_NOT_COLOCATED and violation.detail:
        location = f"{violation.file} (in {violation.detail}/)"
    explanation = _COLOCATION_EXPLANATIONS.get(violation.rule_id) if verbose else None
    if explanation:
        explanation = explanation.format(detail=violation.detail or "tests")
        return f"error[{violation.rule_id}]: {message}\n\n{explanation}\n  ┌─ {location}\n"
    return f"error[{violation.rule_id}]: {message}\n  ┌─ {location}\n"


def format_reference_result(result: ReferenceCheckResult, verbose: bool = True) -> list[str]:
    """Render the symbol-reference section."""
    if result.skipped_reason:
        return [f"Nothing to check: {result.skipped_reason}."]
    lines = [format_symbol_reference(r, verbose=verbose) for r in result.references]
    if result.references:
        lines.append(f"Found {len(result.references)} test name violation(s).")
    else:
        lines.append(
            f"No test name violations found ({result.test_count} test(s), "
            f"{result.symbol_count} symbol(s))."
        )
    return lines


def format_report(report: ScanReport, verbose: bool = True) -> str:
    """Render a full scan report as text."""
    if report.nothing_to_check:
        return report.nothing_to_check

    counts = report.counts()
    lines = [f"Scanning {report.description}...", ""]

    for warning in report.diff_warnings:
        lines.append(f"warning: skipped malformed hunk at diff line {warning.line_number}: {warning.text}")
    if report.diff_warnings:
        lines.append("")

    lines.append("=== Running ast-grep rules ===")
    lines.extend(format_violation(v) for v in report.rule_violations)
    if counts[AST_PATTERN]:
        lines.append(f"Found {counts[AST_PATTERN]} ast-grep violation(s).")
    else:
        lines.append("No ast-grep violations.")

    lines.append("")
    lines.append("=== Checking test naming conventions ===")
    if report.reference is None:
        lines.append("No test files changed.")
    else:
        lines.extend(format_reference_result(report.reference, verbose=verbose))

    if report.colocation_checked:
        lines.append("")
        lines.append("=== Checking test colocation ===")
        lines.extend(format_colocation(v, verbose=verbose) for v in report.colocation_violations)
        if counts[COLOCATION]:
            lines.append(f"Found {counts[COLOCATION]} test colocation violation(s).")
        else:
            lines.append("No test colocation violations found.")

    lines.append("")
    if report.exit_code == 0:
        lines.append("All checks passed.")
    else:
        summary = ", ".join(f"{name}: {count}" for name, count in counts.items() if count)
        lines.append(f"Violations found ({summary})." if summary else "Malformed input detected.")
    return "\n".join(lines)
