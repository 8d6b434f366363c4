"""Changed-line extraction from zero-context unified diffs.

Turns the output of ``git diff --unified=0`` into a mapping of
file -> list of 1-based, inclusive line intervals added in the new
revision. Only the post-image (``+++ b/<path>``) is used; pre-image
markers and removed lines are consumed but contribute nothing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from loguru import logger

from aster.types import ChangedInterval, DiffWarning, ErrorContext, UnsupportedDiffError

# @@ -<old_start>[,<old_count>] +<new_start>[,<new_count>] @@ [section heading]
HUNK_HEADER = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")

# Markers that start a new file section; a malformed hunk body ends at any of them.
_SECTION_MARKERS = ("diff ", "@@", "--- a/", "--- /dev/null", "+++ b/", "+++ /dev/null")

DEV_NULL = "/dev/null"


def normalize_path(path: str) -> str:
    """Normalize a repository-relative path for comparison (no leading ``./``)."""
    path = path.replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    return path


def _parse_new_path(marker_value: str) -> str | None:
    """Extract the post-image path from the text following ``+++ ``.

    Returns None for ``/dev/null`` (file deleted in the new revision).
    """
    # Non-git diffs may append a tab and a timestamp.
    value = marker_value.split("\t", 1)[0].strip()
    if value.startswith('"') and value.endswith('"') and len(value) >= 2:
        value = value[1:-1]
    if value == DEV_NULL:
        return None
    if value.startswith("b/"):
        value = value[2:]
    return normalize_path(value)


@dataclass
class ChangeRanges:
    """Changed intervals per file, plus warnings for skipped hunks."""

    intervals: dict[str, list[ChangedInterval]] = field(default_factory=dict)
    warnings: list[DiffWarning] = field(default_factory=list)

    @property
    def files(self) -> list[str]:
        """Files with at least one changed interval, in diff order."""
        return list(self.intervals)

    def for_file(self, file: str) -> list[ChangedInterval]:
        """Intervals for a file; empty means nothing to check."""
        return self.intervals.get(normalize_path(file), [])

    def contains(self, file: str, line: int) -> bool:
        """Check whether a 1-based line of a file lies in any changed interval."""
        return any(interval.contains(line) for interval in self.for_file(file))

    def add(self, interval: ChangedInterval) -> None:
        self.intervals.setdefault(interval.file, []).append(interval)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            file: [[i.start_line, i.end_line] for i in intervals]
            for file, intervals in self.intervals.items()
        }


class DiffRangeExtractor:
    """Parses zero-context unified diffs into changed-line intervals.

    Hunk bodies are consumed by count (the header's old/new counts), so an
    added line whose content happens to start with ``++ b/`` is never
    mistaken for a file marker.

    Policy:
    - A hunk header that does not parse is skipped with a warning.
    - Anything that is not a ``--unified=0`` unified diff (context lines,
      context-diff format, hunks before any file marker, or text with no
      diff markers at all) raises ``UnsupportedDiffError``.

    Usage:
        ranges = DiffRangeExtractor().extract(diff_text)
        for interval in ranges.for_file("src/app.py"):
            print(interval.start_line, interval.end_line)
    """

    def extract(self, diff_text: str) -> ChangeRanges:
        """Extract changed intervals from unified-diff text.

        Args:
            diff_text: Output of ``git diff --unified=0``.

        Returns:
            ChangeRanges keyed by repository-relative path.

        Raises:
            UnsupportedDiffError: If the text is not a zero-context unified diff.
        """
        ranges = ChangeRanges()
        current_file: str | None = None
        seen_file_marker = False
        seen_git_header = False
        old_remaining = 0
        new_remaining = 0
        skipping_hunk = False

        for line_number, line in enumerate(diff_text.splitlines(), 1):
            if old_remaining or new_remaining:
                if line.startswith("-") and old_remaining:
                    old_remaining -= 1
                    continue
                if line.startswith("+") and new_remaining:
                    new_remaining -= 1
                    continue
                if line.startswith("\\"):
                    continue
                if line.startswith(" "):
                    raise self._unsupported(
                        f"line {line_number}: context line inside hunk; "
                        "only --unified=0 diffs are supported",
                        line_number,
                    )
                logger.warning(
                    "Hunk ended early at diff line {} ({} removed / {} added lines missing)",
                    line_number,
                    old_remaining,
                    new_remaining,
                )
                old_remaining = new_remaining = 0

            if skipping_hunk:
                if line.startswith(("+", "-", "\\")) and not line.startswith(_SECTION_MARKERS):
                    continue
                skipping_hunk = False

            if line.startswith("\\"):
                # "\ No newline at end of file"
                continue

            if line.startswith("diff --git "):
                seen_git_header = True
                continue

            if line.startswith("--- "):
                seen_file_marker = True
                continue

            if line.startswith("+++ "):
                seen_file_marker = True
                current_file = _parse_new_path(line[4:])
                continue

            if line.startswith("@@"):
                if not seen_file_marker:
                    raise self._unsupported(
                        f"line {line_number}: hunk header appears before any file marker",
                        line_number,
                    )
                match = HUNK_HEADER.match(line)
                reason = None
                if not match:
                    reason = "hunk header does not match '@@ -x,y +a,b @@'"
                elif int(match.group(3)) == 0 and match.group(4) != "0":
                    # +0 is only valid for an empty post-image (+0,0)
                    reason = "hunk adds lines starting at line 0"
                if reason is not None:
                    warning = DiffWarning(line_number=line_number, text=line, reason=reason)
                    ranges.warnings.append(warning)
                    logger.warning("Skipping malformed hunk header at line {}: {}", line_number, line)
                    skipping_hunk = True
                    continue

                old_count = int(match.group(2)) if match.group(2) is not None else 1
                new_start = int(match.group(3))
                new_count = int(match.group(4)) if match.group(4) is not None else 1
                old_remaining = old_count
                new_remaining = new_count

                if new_count == 0 or current_file is None:
                    continue

                ranges.add(
                    ChangedInterval(
                        file=current_file,
                        start_line=new_start,
                        end_line=new_start + new_count - 1,
                    )
                )
                continue

            if line.startswith("*** ") or line.startswith("***************"):
                raise self._unsupported(
                    f"line {line_number}: context-diff format is not supported",
                    line_number,
                )

            # Extended headers (index, mode, rename, Binary files ...)
            # carry no range information.

        if diff_text.strip() and not (seen_file_marker or seen_git_header):
            raise self._unsupported("no unified-diff file markers ('--- a/', '+++ b/') found", None)

        logger.debug(
            "Extracted {} interval(s) across {} file(s)",
            sum(len(v) for v in ranges.intervals.values()),
            len(ranges.intervals),
        )
        return ranges

    @staticmethod
    def _unsupported(message: str, line_number: int | None) -> UnsupportedDiffError:
        return UnsupportedDiffError(
            message,
            user_message="Input is not a zero-context unified diff.",
            context=ErrorContext(
                operation="extract_changed_ranges",
                component="diff",
                additional_info={"line_number": line_number},
            ),
        )


def extract_changed_ranges(diff_text: str) -> ChangeRanges:
    """Convenience wrapper around ``DiffRangeExtractor().extract``."""
    return DiffRangeExtractor().extract(diff_text)
