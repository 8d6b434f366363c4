"""Git access for diff-scoped scans."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from enum import StrEnum

from loguru import logger

from aster.constants import DEFAULT_TIMEOUT
from aster.types import ErrorContext, GitError, RecoveryAction
from aster.utils.subprocess_util import format_command, run_command


class DiffMode(StrEnum):
    """Which changes a diff-scoped scan looks at."""

    UNSTAGED = "unstaged"  # working tree vs index
    STAGED = "staged"  # index vs HEAD
    BASE = "base"  # merge-base(base, HEAD) vs HEAD


@dataclass(frozen=True)
class DiffTarget:
    """A diff mode plus the base revision it needs, if any."""

    mode: DiffMode
    base: str | None = None

    def __post_init__(self) -> None:
        if self.mode == DiffMode.BASE and not self.base:
            raise ValueError("base revision is required for DiffMode.BASE")

    @classmethod
    def unstaged(cls) -> "DiffTarget":
        return cls(DiffMode.UNSTAGED)

    @classmethod
    def staged(cls) -> "DiffTarget":
        return cls(DiffMode.STAGED)

    @classmethod
    def against(cls, base: str) -> "DiffTarget":
        return cls(DiffMode.BASE, base)

    @property
    def description(self) -> str:
        """Human-readable name for reports."""
        if self.mode == DiffMode.STAGED:
            return "staged changes"
        if self.mode == DiffMode.BASE:
            return f"changes against {self.base}"
        return "unstaged changes"

    def revision_args(self) -> list[str]:
        """Arguments selecting the revision range for ``git diff``."""
        if self.mode == DiffMode.STAGED:
            return ["--staged"]
        if self.mode == DiffMode.BASE:
            return [f"{self.base}...HEAD"]
        return []


class GitService:
    """Runs the git commands a diff-scoped scan needs.

    External diff drivers (delta, difftastic, ...) are always bypassed
    so the output is a plain unified diff.
    """

    def __init__(
        self,
        repo_root: str = ".",
        binary: str = "git",
        timeout: int = DEFAULT_TIMEOUT,
    ):
        self._repo_root = repo_root
        self._binary = binary
        self._timeout = timeout

    def _run(self, *args: str) -> str:
        command = [self._binary, "-C", self._repo_root, *args]
        logger.debug("Running {}", format_command(command))
        try:
            result = run_command(command, timeout=self._timeout)
        except FileNotFoundError as e:
            raise GitError(
                f"{self._binary} not found on PATH",
                user_message="Git is not installed or not on PATH.",
                context=ErrorContext(operation=format_command(command), component="git"),
                original_error=e,
            ) from e
        except subprocess.TimeoutExpired as e:
            raise GitError(
                f"git timed out after {self._timeout}s",
                context=ErrorContext(operation=format_command(command), component="git"),
                original_error=e,
            ) from e

        if result.returncode != 0:
            raise GitError(
                f"git exited {result.returncode}: {result.stderr.strip()}",
                context=ErrorContext(operation=format_command(command), component="git"),
                recovery_actions=[
                    RecoveryAction(description="Run the scan from inside a git work tree"),
                    RecoveryAction(description="Check that the base revision exists", command="git fetch"),
                ],
            )
        return result.stdout

    def toplevel(self) -> str:
        """Absolute path of the work tree root; diff paths are relative to it."""
        return self._run("rev-parse", "--show-toplevel").strip()

    def diff_text(self, target: DiffTarget) -> str:
        """Zero-context unified diff for the target."""
        return self._run(
            "--no-pager",
            "diff",
            "--no-ext-diff",
            "--no-color",
            "--unified=0",
            *target.revision_args(),
        )

    def changed_files(self, target: DiffTarget) -> list[str]:
        """Repository-relative paths changed in the target."""
        output = self._run("diff", "--name-only", "--no-ext-diff", *target.revision_args())
        return [line.strip() for line in output.splitlines() if line.strip()]
