"""Runtime configuration.

Values come from defaults, then environment variables, then CLI flags
(applied by the caller with ``dataclasses.replace``).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping

from aster.constants import (
    DEFAULT_IGNORE_DIRS,
    DEFAULT_TIMEOUT,
    MIN_SYMBOL_LENGTH,
    REGISTRATION_CALLS,
    TEST_PREFIX,
)
from aster.types import ConfigurationError, ErrorContext, RecoveryAction

ENGINES = ("ast-grep", "tree-sitter")


def _parse_positive_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigurationError(
            f"{key} must be an integer, got {raw!r}",
            context=ErrorContext(operation="load_config", additional_info={key: raw}),
            original_error=e,
        ) from e
    if value < 1:
        raise ConfigurationError(
            f"{key} must be >= 1, got {value}",
            context=ErrorContext(operation="load_config", additional_info={key: raw}),
        )
    return value


@dataclass(frozen=True)
class AsterConfig:
    """Settings shared by every scan mode."""

    engine: str = "ast-grep"
    ast_grep_binary: str = "ast-grep"
    sgconfig: str = "sgconfig.yml"
    min_symbol_length: int = MIN_SYMBOL_LENGTH
    test_prefix: str = TEST_PREFIX
    registration_calls: tuple[str, ...] = REGISTRATION_CALLS
    ignore_dirs: frozenset[str] = field(default_factory=lambda: DEFAULT_IGNORE_DIRS)
    timeout: int = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if self.engine not in ENGINES:
            raise ConfigurationError(
                f"Unknown engine {self.engine!r}",
                user_message=f"Engine must be one of: {', '.join(ENGINES)}.",
                recovery_actions=[
                    RecoveryAction(description="Use the ast-grep engine", command="export ASTER_ENGINE=ast-grep")
                ],
            )
        if self.min_symbol_length < 1:
            raise ConfigurationError(f"min_symbol_length must be >= 1, got {self.min_symbol_length}")
        if self.timeout < 1:
            raise ConfigurationError(f"timeout must be >= 1, got {self.timeout}")

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "AsterConfig":
        """Build configuration from ``ASTER_*`` environment variables."""
        env = os.environ if env is None else env
        defaults = cls()
        return cls(
            engine=env.get("ASTER_ENGINE", "").strip() or defaults.engine,
            ast_grep_binary=env.get("ASTER_AST_GREP", "").strip() or defaults.ast_grep_binary,
            sgconfig=env.get("ASTER_SGCONFIG", "").strip() or defaults.sgconfig,
            min_symbol_length=_parse_positive_int(
                env, "ASTER_MIN_SYMBOL_LENGTH", defaults.min_symbol_length
            ),
            timeout=_parse_positive_int(env, "ASTER_TIMEOUT", defaults.timeout),
        )
