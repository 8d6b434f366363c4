import platform
import shlex
import subprocess


def subprocess_kwargs() -> dict:
    """
    Returns a dictionary of keyword arguments for subprocess calls, adding platform-specific
    flags that we want to use consistently.
    """
    kwargs = {}
    if platform.system() == "Windows":
        kwargs["creationflags"] = subprocess.CREATE_NO_WINDOW  # type: ignore
    return kwargs


def format_command(args: list[str]) -> str:
    """Render an argument vector as a copy-pasteable shell command."""
    return " ".join(shlex.quote(arg) for arg in args)


def run_command(
    args: list[str],
    cwd: str | None = None,
    timeout: int | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run an external tool with captured text output.

    Raises the underlying ``FileNotFoundError`` or ``subprocess.TimeoutExpired``
    so that callers can decide whether a missing tool is fatal.
    """
    return subprocess.run(
        args,
        cwd=cwd,
        capture_output=True,
        text=True,
        encoding="utf-8",
        errors="replace",
        timeout=timeout,
        check=False,
        **subprocess_kwargs(),
    )
