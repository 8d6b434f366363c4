"""Aster command-line interface.

Exit codes: 0 when no violations remain after filtering, 1 when at least
one violation remains or the input (diff, config, git state) is invalid.
"""

from __future__ import annotations

import json
from dataclasses import replace
from typing import Callable

import click

from aster import __version__
from aster.config import ENGINES, AsterConfig
from aster.reporting import format_colocation, format_reference_result, format_report
from aster.services import DiffTarget, ScanReport, ScanService, check_colocation
from aster.types import AsterError
from aster.utils.logger import configure_logging, logger


def _service(ctx: click.Context) -> ScanService:
    return ctx.obj["service_factory"]()


def _run(ctx: click.Context, action: Callable[[], int]) -> None:
    """Run a command body, mapping AsterError to a message and exit code 1."""
    try:
        code = action()
    except AsterError as e:
        logger.debug("Command failed: {!r}", e)
        if ctx.obj["format"] == "json":
            click.echo(json.dumps({"error": e.to_dict()}, indent=2, default=str))
        else:
            click.echo(e.get_formatted_message(), err=True)
        ctx.exit(1)
    ctx.exit(code)


def _emit_report(ctx: click.Context, report: ScanReport) -> int:
    if ctx.obj["format"] == "json":
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        click.echo(format_report(report, verbose=ctx.obj["explain"]))
    return report.exit_code


@click.group(invoke_without_command=True)
@click.version_option(__version__, prog_name="Aster", message="%(prog)s v%(version)s")
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr.")
@click.option("--engine", type=click.Choice(ENGINES), default=None, help="Structural matcher for symbol and test discovery.")
@click.option("--sgconfig", default=None, help="ast-grep rule config (default: sgconfig.yml).")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    show_default=True,
    help="Report format.",
)
@click.option(
    "--explain/--no-explain",
    default=True,
    help="Include the explanation text for test-name and colocation violations.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    engine: str | None,
    sgconfig: str | None,
    output_format: str,
    explain: bool,
) -> None:
    """Aster - Cross-language lint rules for test code.

    Flags mocking and interaction assertions (via ast-grep rules) and test
    names that reference implementation symbols, optionally only on lines
    changed in a revision range.
    """
    configure_logging(verbose)
    try:
        config = AsterConfig.from_env()
        overrides = {k: v for k, v in {"engine": engine, "sgconfig": sgconfig}.items() if v}
        if overrides:
            config = replace(config, **overrides)
    except AsterError as e:
        click.echo(e.get_formatted_message(), err=True)
        ctx.exit(1)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["format"] = output_format
    ctx.obj["explain"] = explain
    ctx.obj.setdefault("service_factory", lambda: ScanService(config))

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.argument("target", default=".", type=click.Path(exists=True, file_okay=False))
@click.option("--colocation", is_flag=True, help="Also check test colocation conventions.")
@click.pass_context
def lint(ctx: click.Context, target: str, colocation: bool) -> None:
    """Run all checks on a target directory."""
    _run(ctx, lambda: _emit_report(ctx, _service(ctx).scan_directory(target, colocation=colocation)))


@cli.command()
@click.argument("base", required=False)
@click.option("--colocation", is_flag=True, help="Also check colocation of changed test files.")
@click.pass_context
def diff(ctx: click.Context, base: str | None, colocation: bool) -> None:
    """Run checks on changed lines only.

    Without BASE, checks unstaged changes (working tree vs index).
    With BASE, checks changes against it (BASE...HEAD).
    """
    target = DiffTarget.against(base) if base else DiffTarget.unstaged()
    _run(ctx, lambda: _emit_report(ctx, _service(ctx).scan_changes(target, colocation=colocation)))


@cli.command()
@click.option("--colocation", is_flag=True, help="Also check colocation of changed test files.")
@click.pass_context
def staged(ctx: click.Context, colocation: bool) -> None:
    """Run checks on staged changes only."""
    _run(ctx, lambda: _emit_report(ctx, _service(ctx).scan_changes(DiffTarget.staged(), colocation=colocation)))


@cli.command("check-names")
@click.argument("source", default="src", type=click.Path(exists=True))
@click.argument("tests", required=False, type=click.Path(exists=True))
@click.pass_context
def check_names(ctx: click.Context, source: str, tests: str | None) -> None:
    """Detect test names that reference implementation symbols.

    SOURCE holds the code whose symbols are collected; TESTS (default:
    SOURCE) holds the tests whose names are checked.
    """

    def action() -> int:
        result = _service(ctx).check_names([source], [tests or source])
        if ctx.obj["format"] == "json":
            click.echo(json.dumps(result.to_dict(), indent=2))
        else:
            click.echo("\n".join(format_reference_result(result, verbose=ctx.obj["explain"])))
        return 1 if result.has_violations else 0

    _run(ctx, action)


@cli.command()
@click.argument("target", default=".", type=click.Path(exists=True, file_okay=False))
@click.pass_context
def colocation(ctx: click.Context, target: str) -> None:
    """Check that test files are colocated with their SUTs."""

    def action() -> int:
        violations = check_colocation(target, ctx.obj["config"].ignore_dirs)
        if ctx.obj["format"] == "json":
            click.echo(json.dumps([v.to_dict() for v in violations], indent=2))
        else:
            for violation in violations:
                click.echo(format_colocation(violation, verbose=ctx.obj["explain"]))
            if violations:
                click.echo(f"Found {len(violations)} test colocation violation(s).")
            else:
                click.echo("No test colocation violations found.")
        return 1 if violations else 0

    _run(ctx, action)


def main() -> None:
    """Console-script entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
