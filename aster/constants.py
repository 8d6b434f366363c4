"""Shared constants for Aster.

Centralizes file extensions, test-file conventions, ignore directories
and the symbol-matching thresholds.
"""

# Language dispatch is by file extension.
LANGUAGE_BY_EXTENSION: dict[str, str] = {
    ".py": "python",
    ".ts": "typescript",
    ".tsx": "tsx",
}

# Normalized symbols shorter than this are never matched against test names.
MIN_SYMBOL_LENGTH: int = 4

# Word separator used in test names and stripped from symbols.
WORD_SEPARATOR: str = "_"

# Convention-based test discovery (Python).
TEST_PREFIX: str = "test_"

# Registration-call test discovery (TypeScript).
REGISTRATION_CALLS: tuple[str, ...] = ("test", "it")

# Directories to skip during file traversal.
DEFAULT_IGNORE_DIRS: frozenset[str] = frozenset(
    {
        "node_modules",
        ".git",
        "__pycache__",
        "dist",
        "build",
        ".next",
        ".venv",
        "venv",
        ".mypy_cache",
        ".pytest_cache",
        ".ruff_cache",
    }
)

# Timeout for external processes (git, ast-grep), in seconds.
DEFAULT_TIMEOUT: int = 60
