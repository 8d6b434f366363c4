"""Aster services: git access, colocation checks and scan orchestration."""

from .colocation import ColocationViolation, check_colocation
from .git_service import DiffMode, DiffTarget, GitService
from .scan_service import ScanReport, ScanService, create_matcher

__all__ = [
    "ColocationViolation",
    "DiffMode",
    "DiffTarget",
    "GitService",
    "ScanReport",
    "ScanService",
    "check_colocation",
    "create_matcher",
]
