"""
Aster utility modules.

- Logging (stderr-only, loguru)
- Subprocess helpers for external tools (git, ast-grep)
"""

from .logger import configure_logging, is_debug_enabled, logger
from .subprocess_util import format_command, run_command, subprocess_kwargs

__all__ = [
    "configure_logging",
    "is_debug_enabled",
    "logger",
    "format_command",
    "run_command",
    "subprocess_kwargs",
]
