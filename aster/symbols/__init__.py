"""Symbol-reference detection for test names.

Components:
- SymbolTable: normalized, deduplicated declaration names
- TestNameIndex: test-case names by convention or registration call
- ReferenceMatcher: segment-run matching of test names against symbols
"""

from .reference import (
    ReferenceCheckResult,
    ReferenceMatcher,
    find_symbol_reference,
    segment_test_name,
)
from .table import SymbolTable, collect_symbols, normalize_symbol
from .testcases import TestNameIndex, collect_tests

__all__ = [
    "ReferenceCheckResult",
    "ReferenceMatcher",
    "SymbolTable",
    "TestNameIndex",
    "collect_symbols",
    "collect_tests",
    "find_symbol_reference",
    "normalize_symbol",
    "segment_test_name",
]
