"""
Phase 1 Tests: Core Types

These tests verify that the value dataclasses work correctly:
- Correct field types and defaults
- Validation behavior
- Serialization to dict
"""

import json

import pytest

from aster.types import (
    AsterError,
    ChangedInterval,
    ConfigurationError,
    ErrorCode,
    ErrorContext,
    GitError,
    OracleError,
    RecoveryAction,
    SymbolReference,
    TestCase,
    UnsupportedDiffError,
    Violation,
)


class TestChangedInterval:
    """Tests for ChangedInterval dataclass."""

    def test_creation(self):
        """ChangedInterval can be created with file, start and end."""
        interval = ChangedInterval(file="a.py", start_line=10, end_line=12)
        assert interval.file == "a.py"
        assert interval.start_line == 10
        assert interval.end_line == 12

    def test_contains(self):
        """ChangedInterval.contains is inclusive at both ends."""
        interval = ChangedInterval(file="a.py", start_line=10, end_line=12)
        assert interval.contains(10) is True
        assert interval.contains(12) is True
        assert interval.contains(9) is False
        assert interval.contains(13) is False

    def test_line_count(self):
        """A single-line interval has a line count of one."""
        assert ChangedInterval(file="a.py", start_line=5, end_line=5).line_count == 1
        assert ChangedInterval(file="a.py", start_line=10, end_line=12).line_count == 3

    def test_validation_start_zero(self):
        """Line numbers are 1-based."""
        with pytest.raises(ValueError, match="start_line must be >= 1"):
            ChangedInterval(file="a.py", start_line=0, end_line=3)

    def test_validation_end_before_start(self):
        """ChangedInterval rejects end before start."""
        with pytest.raises(ValueError, match="end_line must be >= start_line"):
            ChangedInterval(file="a.py", start_line=5, end_line=4)

    def test_frozen(self):
        """Intervals are immutable."""
        interval = ChangedInterval(file="a.py", start_line=1, end_line=1)
        with pytest.raises(AttributeError):
            interval.start_line = 2


class TestViolation:
    """Tests for Violation dataclass."""

    def test_defaults(self):
        """Severity defaults to error and matched text to empty."""
        violation = Violation(file="a.py", line=0, column=0, rule_id="no-mock", message="m")
        assert violation.severity == "error"
        assert violation.matched_text == ""

    def test_location_is_one_based(self):
        """Display location converts 0-based engine positions."""
        violation = Violation(file="src/a.py", line=11, column=4, rule_id="r", message="m")
        assert violation.location == "src/a.py:12:5"

    def test_to_dict_is_json_serializable(self):
        """to_dict keeps 0-based positions and round-trips through json."""
        violation = Violation(file="a.py", line=3, column=1, rule_id="r", message="m", matched_text="x")
        data = json.loads(json.dumps(violation.to_dict()))
        assert data["line"] == 3
        assert data["rule_id"] == "r"
        assert data["matched_text"] == "x"


class TestTestCaseAndReference:
    """Tests for TestCase and SymbolReference."""

    def test_test_case_default_line(self):
        case = TestCase(raw_name="test_x", source_file="x_test.py")
        assert case.line == 0

    def test_reference_to_dict(self):
        case = TestCase(raw_name='"getUserById works"', source_file="u.test.ts", line=4)
        reference = SymbolReference(test=case, symbol="getuserbyid", segments=("getuserbyid", "works"))
        assert reference.to_dict() == {
            "test_name": '"getUserById works"',
            "file": "u.test.ts",
            "line": 4,
            "symbol": "getuserbyid",
        }


class TestErrors:
    """Tests for the error hierarchy."""

    @pytest.mark.parametrize(
        "error_cls, code",
        [
            (UnsupportedDiffError, ErrorCode.UNSUPPORTED_DIFF),
            (OracleError, ErrorCode.ORACLE_OUTPUT_INVALID),
            (GitError, ErrorCode.GIT_FAILED),
            (ConfigurationError, ErrorCode.INVALID_CONFIG),
        ],
    )
    def test_subclasses_carry_codes(self, error_cls, code):
        """Each subclass is an AsterError with its own code."""
        error = error_cls("detail")
        assert isinstance(error, AsterError)
        assert error.code == code
        assert str(error) == "detail"

    def test_unsupported_diff_suggests_zero_context(self):
        """The default recovery action shows how to produce a supported diff."""
        error = UnsupportedDiffError("context lines present")
        commands = [a.command for a in error.recovery_actions]
        assert "git diff --unified=0" in commands

    def test_formatted_message(self):
        """Formatted message includes user message, code, context and actions."""
        error = GitError(
            "git exited 128: not a git repository",
            user_message="Git command failed.",
            context=ErrorContext(operation="git diff", component="git"),
            recovery_actions=[RecoveryAction(description="Run inside a work tree", command="git init")],
        )
        text = error.get_formatted_message()
        assert "[Error] Git command failed." in text
        assert f"Code: {ErrorCode.GIT_FAILED.value}" in text
        assert "Operation: git diff" in text
        assert "1. Run inside a work tree" in text
        assert "Run: git init" in text

    def test_to_dict(self):
        """to_dict is JSON-serializable and keeps the original error text."""
        cause = ValueError("bad")
        error = OracleError("unreadable", original_error=cause)
        data = json.loads(json.dumps(error.to_dict()))
        assert data["name"] == "OracleError"
        assert data["code"] == ErrorCode.ORACLE_OUTPUT_INVALID.value
        assert data["original_error"] == "bad"
        assert data["recovery_actions"] == []
