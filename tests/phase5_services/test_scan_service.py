"""
Phase 5 Tests: Scan orchestration

Tests for ScanService and ScanReport with in-memory git and rule
scanner stand-ins:
- Diff-scoped scans (filtering, relativization, test-name checks)
- Directory scans
- Report counts, exit codes and serialization
"""

import json
from pathlib import Path

import pytest

from aster.config import AsterConfig
from aster.services import DiffTarget, ScanReport, ScanService
from aster.services.colocation import ORPHANED_TEST, TEST_NOT_COLOCATED
from aster.types import DiffWarning, Violation


class FakeGit:
    """Git stand-in returning canned diff output for a fixed work tree."""

    def __init__(self, root: Path, changed: list[str], diff: str):
        self.root = root
        self.changed = changed
        self.diff = diff
        self.targets: list[DiffTarget] = []

    def toplevel(self) -> str:
        return str(self.root)

    def changed_files(self, target: DiffTarget) -> list[str]:
        self.targets.append(target)
        return list(self.changed)

    def diff_text(self, target: DiffTarget) -> str:
        return self.diff


class RecordingRules:
    """Rule scanner stand-in that records its calls."""

    def __init__(self, violations=()):
        self.violations = list(violations)
        self.calls: list[tuple[str, list[str]]] = []

    def scan_rules(self, sgconfig, paths):
        self.calls.append((sgconfig, list(paths)))
        return list(self.violations)


def rule_violation(file, line: int, rule_id: str = "no-mock") -> Violation:
    return Violation(file=str(file), line=line, column=0, rule_id=rule_id, message="Avoid mocks.")


APP_DIFF = (
    "diff --git a/app.py b/app.py\n"
    "--- a/app.py\n"
    "+++ b/app.py\n"
    "@@ -9,0 +10,3 @@\n"
    "+a\n+b\n+c\n"
    "diff --git a/app_test.py b/app_test.py\n"
    "--- a/app_test.py\n"
    "+++ b/app_test.py\n"
    "@@ -0,0 +1,2 @@\n"
    "+def test_calculate_total_returns_sum():\n"
    "+    pass\n"
)


@pytest.fixture
def repo(tmp_path, write_tree):
    write_tree(
        {
            "app.py": "\n" * 12 + "def calculate_total(items):\n    return sum(items)\n",
            "app_test.py": "def test_calculate_total_returns_sum():\n    pass\n",
            "README.md": "docs\n",
            "sgconfig.yml": "ruleDirs:\n  - rules\n",
        }
    )
    return tmp_path


@pytest.fixture
def repo_matcher(repo, static_matcher, match):
    return static_matcher(
        [
            match(repo / "app.py", "calculate_total", "py_function", line=12),
            match(repo / "app_test.py", "test_calculate_total_returns_sum", "py_test_function"),
        ]
    )


class TestScanChanges:
    """Tests for diff-scoped scans."""

    def test_rule_violations_are_restricted_to_changed_lines(self, repo, repo_matcher):
        rules = RecordingRules(
            [
                rule_violation(repo / "app.py", 11, "kept-in-range"),
                rule_violation(repo / "app.py", 20, "outside-range"),
                rule_violation(repo / "app_test.py", 0, "kept-test-file"),
            ]
        )
        git = FakeGit(repo, ["app.py", "app_test.py", "README.md", "deleted.py"], APP_DIFF)
        service = ScanService(AsterConfig(), matcher=repo_matcher, rule_scanner=rules, git=git)

        report = service.scan_changes(DiffTarget.staged())

        assert [(v.file, v.rule_id) for v in report.rule_violations] == [
            ("app.py", "kept-in-range"),
            ("app_test.py", "kept-test-file"),
        ]
        assert rules.calls == [(str(repo / "sgconfig.yml"), [str(repo / "app.py"), str(repo / "app_test.py")])]
        assert report.files_scanned == 2
        assert report.description == "staged changes"
        assert git.targets == [DiffTarget.staged()]

    def test_changed_test_names_are_checked_against_all_symbols(self, repo, repo_matcher):
        git = FakeGit(repo, ["app_test.py"], APP_DIFF)
        service = ScanService(AsterConfig(), matcher=repo_matcher, rule_scanner=RecordingRules(), git=git)

        report = service.scan_changes(DiffTarget.unstaged())

        (reference,) = report.reference.references
        assert reference.symbol == "calculatetotal"
        assert reference.test.source_file == "app_test.py"
        assert report.counts() == {"ast-pattern": 0, "symbol-reference": 1, "colocation": 0}
        assert report.exit_code == 1

    def test_no_changed_test_files_skips_name_check(self, repo, repo_matcher):
        git = FakeGit(repo, ["app.py"], APP_DIFF)
        service = ScanService(AsterConfig(), matcher=repo_matcher, rule_scanner=RecordingRules(), git=git)

        report = service.scan_changes(DiffTarget.against("main"))

        assert report.reference is None
        assert report.exit_code == 0
        assert report.description == "changes against main"

    def test_nothing_to_check(self, repo, repo_matcher):
        rules = RecordingRules()
        git = FakeGit(repo, ["README.md", "package.json"], "")
        report = ScanService(AsterConfig(), matcher=repo_matcher, rule_scanner=rules, git=git).scan_changes(
            DiffTarget.unstaged()
        )

        assert report.nothing_to_check == "No TypeScript or Python files changed."
        assert report.exit_code == 0
        assert rules.calls == []

    def test_mode_change_only_passes(self, repo, repo_matcher):
        diff = "diff --git a/app.py b/app.py\nold mode 100644\nnew mode 100755\n"
        rules = RecordingRules([rule_violation(repo / "app.py", 12)])
        git = FakeGit(repo, ["app.py"], diff)
        report = ScanService(AsterConfig(), matcher=repo_matcher, rule_scanner=rules, git=git).scan_changes(
            DiffTarget.unstaged()
        )

        assert report.rule_violations == []
        assert report.diff_warnings == []
        assert report.exit_code == 0

    def test_malformed_hunk_fails_the_scan(self, repo, repo_matcher):
        diff = "--- a/app.py\n+++ b/app.py\n@@ -1 +x @@\n+junk\n"
        git = FakeGit(repo, ["app.py"], diff)
        report = ScanService(AsterConfig(), matcher=repo_matcher, rule_scanner=RecordingRules(), git=git).scan_changes(
            DiffTarget.unstaged()
        )

        assert len(report.diff_warnings) == 1
        assert report.rule_violations == []
        assert report.exit_code == 1

    def test_colocation_of_changed_tests(self, repo, write_tree, static_matcher):
        write_tree({"tests/widget_test.py": "def test_widget(): ...\n", "lonely_test.py": "...\n"})
        git = FakeGit(repo, ["app_test.py", "tests/widget_test.py", "lonely_test.py"], APP_DIFF)
        service = ScanService(AsterConfig(), matcher=static_matcher(), rule_scanner=RecordingRules(), git=git)

        report = service.scan_changes(DiffTarget.unstaged(), colocation=True)

        assert report.colocation_checked
        assert [(v.rule_id, v.file, v.detail) for v in report.colocation_violations] == [
            (TEST_NOT_COLOCATED, "tests/widget_test.py", "tests"),
            (ORPHANED_TEST, "lonely_test.py", "lonely.py"),
        ]

    def test_missing_rule_config_skips_rule_scan(self, repo, repo_matcher, monkeypatch, tmp_path_factory):
        (repo / "sgconfig.yml").unlink()
        monkeypatch.chdir(tmp_path_factory.mktemp("elsewhere"))
        rules = RecordingRules([rule_violation(repo / "app.py", 11)])
        git = FakeGit(repo, ["app.py"], APP_DIFF)

        report = ScanService(AsterConfig(), matcher=repo_matcher, rule_scanner=rules, git=git).scan_changes(
            DiffTarget.unstaged()
        )

        assert rules.calls == []
        assert report.rule_violations == []


class TestScanDirectory:
    """Tests for full-directory scans."""

    def test_all_checks(self, repo, repo_matcher):
        rules = RecordingRules([rule_violation("app.py", 30)])
        service = ScanService(AsterConfig(), matcher=repo_matcher, rule_scanner=rules)

        report = service.scan_directory(str(repo), colocation=True)

        assert report.files_scanned == 2
        assert [v.line for v in report.rule_violations] == [30]
        assert rules.calls == [(str(repo / "sgconfig.yml"), [str(repo)])]
        assert [r.symbol for r in report.reference.references] == ["calculatetotal"]
        assert report.colocation_violations == []
        assert report.counts() == {"ast-pattern": 1, "symbol-reference": 1, "colocation": 0}

    def test_clean_directory(self, tmp_path, write_tree, static_matcher):
        write_tree({"sgconfig.yml": "ruleDirs: []\n", "calc.py": "def add(a, b): ...\n"})
        service = ScanService(AsterConfig(), matcher=static_matcher(), rule_scanner=RecordingRules())

        report = service.scan_directory(str(tmp_path))

        assert report.exit_code == 0
        assert report.reference.skipped_reason == "no symbols of at least 4 characters found"
        assert not report.colocation_checked


class TestScanReport:
    """Tests for ScanReport."""

    def test_empty_report_passes(self):
        report = ScanReport(description="unstaged changes")
        assert report.exit_code == 0
        assert report.counts() == {"ast-pattern": 0, "symbol-reference": 0, "colocation": 0}

    def test_warnings_alone_fail(self):
        report = ScanReport(description="x", diff_warnings=[DiffWarning(3, "@@ bad @@", "unparseable")])
        assert report.exit_code == 1

    def test_to_dict_is_json_serializable(self):
        report = ScanReport(
            description="directory src",
            rule_violations=[rule_violation("a.py", 1)],
            diff_warnings=[DiffWarning(3, "@@ bad @@", "unparseable")],
        )
        data = json.loads(json.dumps(report.to_dict()))
        assert data["exit_code"] == 1
        assert data["counts"]["ast-pattern"] == 1
        assert data["rule_violations"][0]["file"] == "a.py"
        assert data["symbol_references"] is None
        assert data["diff_warnings"] == [{"line_number": 3, "text": "@@ bad @@", "reason": "unparseable"}]
