"""lengthlint CLI entry point."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from lengthlint import __version__


@click.group()
@click.version_option(version=__version__, prog_name="lengthlint")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Minimal output (errors only).")
@click.pass_context
def main(ctx: click.Context, *, verbose: bool, quiet: bool) -> None:
    """lengthlint - redundant length checks next to Array#some()/Array#every()."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet

    level = logging.WARNING
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


@main.command()
@click.argument(
    "paths",
    nargs=-1,
    type=click.Path(exists=True, path_type=Path),
)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["rich", "json", "porcelain"]),
    default=None,
    help="Output format (default: rich if TTY, porcelain if piped).",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: .lengthlint.yml in the current directory).",
)
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Exit 1 on warnings too, not only on errors.",
)
def lint(
    paths: tuple[Path, ...],
    *,
    fmt: str | None,
    config_path: Path | None,
    strict: bool,
) -> None:
    """Lint JavaScript/TypeScript files and directories.

    PATHS default to the current directory.
    Exit codes: 0 = clean or warnings only, 1 = errors (or any diagnostic
    with --strict), 2 = configuration error.
    """
    from lengthlint.linter import LintError
    from lengthlint.linter import format_json as _format_json
    from lengthlint.linter import format_porcelain as _format_porcelain
    from lengthlint.linter import format_rich as _format_rich
    from lengthlint.linter import lint as run_lint
    from lengthlint.linter import render_result

    # Resolve output format: explicit flag > TTY detection.
    is_tty = sys.stdout.isatty()
    if fmt is None:
        fmt = "rich" if is_tty else "porcelain"

    try:
        result = run_lint(list(paths), config_path=config_path)
    except LintError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    if fmt == "rich" and is_tty:
        from rich.console import Console

        render_result(result, Console())
    else:
        formatters = {
            "rich": _format_rich,
            "json": _format_json,
            "porcelain": _format_porcelain,
        }
        output = formatters[fmt](result)
        if output:
            click.echo(output)

    if result.error_count or (strict and result.diagnostics):
        sys.exit(1)


@main.command()
@click.option("--json", "output_json", is_flag=True, help="Output as JSON.")
def rules(*, output_json: bool) -> None:
    """List the available rules."""
    from lengthlint.rules import ALL_RULES

    if output_json:
        data = [
            {
                "name": rule.name,
                "category": rule.category,
                "default_severity": rule.default_severity,
                "description": rule.description,
            }
            for rule in ALL_RULES
        ]
        click.echo(json.dumps(data, indent=2))
        return

    for rule in ALL_RULES:
        click.echo(f"{rule.name} ({rule.category}, default: {rule.default_severity})")
        click.echo(f"  {rule.description}")
