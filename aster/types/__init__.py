"""
Aster type definitions.

This module exports the value types and error types shared across Aster.
"""

# Core types
from .core import (
    ChangedInterval,
    DiffWarning,
    Symbol,
    SymbolKind,
    SymbolReference,
    TestCase,
    Violation,
)

# Error types
from .errors import (
    AsterError,
    ConfigurationError,
    ErrorCode,
    ErrorContext,
    ErrorSeverity,
    GitError,
    OracleError,
    RecoveryAction,
    UnsupportedDiffError,
)

__all__ = [
    # Core types
    "ChangedInterval",
    "DiffWarning",
    "Symbol",
    "SymbolKind",
    "SymbolReference",
    "TestCase",
    "Violation",
    # Error types
    "ErrorCode",
    "ErrorSeverity",
    "RecoveryAction",
    "ErrorContext",
    "AsterError",
    "ConfigurationError",
    "GitError",
    "OracleError",
    "UnsupportedDiffError",
]
