"""
Phase 5 Tests: Test colocation

Tests for the colocation rules over temporary directory trees.
"""

from pathlib import Path

from aster.services.colocation import (
    ORPHANED_TEST,
    TEST_NOT_COLOCATED,
    WRONG_TEST_PREFIX,
    WRONG_TEST_SUFFIX,
    check_colocation,
    check_file,
)


def rules(violations, root):
    return [(v.rule_id, str(Path(v.file).relative_to(root))) for v in violations]


class TestPythonRules:
    """Tests for Python test files."""

    def test_colocated_test_passes(self, tmp_path, write_tree):
        write_tree({"pkg/calc.py": "", "pkg/calc_test.py": ""})
        assert check_colocation(tmp_path) == []

    def test_wrong_prefix(self, tmp_path, write_tree):
        write_tree({"calc.py": "", "test_calc.py": ""})
        assert rules(check_colocation(tmp_path), tmp_path) == [(WRONG_TEST_PREFIX, "test_calc.py")]

    def test_separate_test_directory(self, tmp_path, write_tree):
        write_tree({"src/calc.py": "", "tests/calc_test.py": ""})
        (violation,) = check_colocation(tmp_path)
        assert violation.rule_id == TEST_NOT_COLOCATED
        assert violation.detail == "tests"

    def test_orphaned_test(self, tmp_path, write_tree):
        write_tree({"calc_test.py": ""})
        (violation,) = check_colocation(tmp_path)
        assert violation.rule_id == ORPHANED_TEST
        assert violation.detail == str(tmp_path / "calc.py")

    def test_target_inside_tests_directory_is_not_separate(self, tmp_path, write_tree):
        """Only directories below the scanned target count."""
        write_tree({"tests/calc.py": "", "tests/calc_test.py": ""})
        assert check_colocation(tmp_path / "tests") == []


class TestTypeScriptRules:
    """Tests for TypeScript test files."""

    def test_colocated_tests_pass(self, tmp_path, write_tree):
        write_tree({"api.ts": "", "api.test.ts": "", "Button.tsx": "", "Button.test.tsx": ""})
        assert check_colocation(tmp_path) == []

    def test_spec_suffix(self, tmp_path, write_tree):
        write_tree({"api.ts": "", "api.spec.ts": ""})
        assert rules(check_colocation(tmp_path), tmp_path) == [(WRONG_TEST_SUFFIX, "api.spec.ts")]

    def test_dunder_tests_directory(self, tmp_path, write_tree):
        write_tree({"api.ts": "", "__tests__/api.test.ts": ""})
        (violation,) = check_colocation(tmp_path)
        assert violation.rule_id == TEST_NOT_COLOCATED
        assert violation.detail == "__tests__"

    def test_orphaned_tsx_test(self, tmp_path, write_tree):
        write_tree({"Button.ts": "", "Button.test.tsx": ""})
        (violation,) = check_colocation(tmp_path)
        assert violation.rule_id == ORPHANED_TEST
        assert violation.detail.endswith("Button.tsx")


class TestTraversal:
    """Tests for traversal and single-file checks."""

    def test_ignored_directories(self, tmp_path, write_tree):
        write_tree({"node_modules/lib/index.spec.ts": "", ".venv/lib/test_x.py": ""})
        assert check_colocation(tmp_path) == []

    def test_walk_order(self, tmp_path, write_tree):
        write_tree({"b/test_b.py": "", "a/test_a.py": "", "test_root.py": ""})
        assert [v.file for v in check_colocation(tmp_path)] == [
            str(tmp_path / "test_root.py"),
            str(tmp_path / "a" / "test_a.py"),
            str(tmp_path / "b" / "test_b.py"),
        ]

    def test_non_test_files_are_ignored(self, tmp_path):
        (tmp_path / "calc.py").write_text("")
        assert check_file(tmp_path / "calc.py", tmp_path) == []

    def test_to_dict(self, tmp_path, write_tree):
        write_tree({"test_calc.py": ""})
        (violation,) = check_colocation(tmp_path)
        assert violation.to_dict() == {"rule_id": WRONG_TEST_PREFIX, "file": str(tmp_path / "test_calc.py"), "detail": ""}
