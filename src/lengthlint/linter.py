"""Linter orchestrator: collect files, parse, run rules, format results."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from lengthlint.config import ConfigError, find_config, load_config
from lengthlint.rules import default_rules
from lengthlint.rules.base import LintContext
from lengthlint.syntax.parser import parse_source, supported_extensions
from lengthlint.syntax.walker import iter_chain_roots

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from rich.console import Console

    from lengthlint.config import LintConfig
    from lengthlint.rules import Diagnostic, Rule
    from lengthlint.syntax.nodes import Expression, Span

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class LintError(Exception):
    """Raised when lint cannot run: bad configuration, missing paths, unsupported input."""


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class FileReport:
    """Diagnostics for one file, with the source kept for code frames."""

    path: str
    source: str
    diagnostics: list[Diagnostic] = field(default_factory=list)
    has_errors: bool = False


@dataclass
class LintResult:
    """Result of a lint run."""

    reports: list[FileReport] = field(default_factory=list)
    files_scanned: int = 0
    rules_evaluated: int = 0
    elapsed_ms: float = 0.0

    @property
    def diagnostics(self) -> list[tuple[str, Diagnostic]]:
        """All diagnostics as ``(path, diagnostic)`` pairs, in report order."""
        return [(r.path, d) for r in self.reports for d in r.diagnostics]

    @property
    def error_count(self) -> int:
        return sum(1 for _, d in self.diagnostics if d.severity == "error")

    @property
    def warning_count(self) -> int:
        return sum(1 for _, d in self.diagnostics if d.severity == "warn")


# ---------------------------------------------------------------------------
# Running rules
# ---------------------------------------------------------------------------


def run_rules(root: Expression, rules: Sequence[Rule], ctx: LintContext) -> None:
    """Run every rule on every chain-root logical expression under *root*."""
    for node in iter_chain_roots(root):
        for rule in rules:
            rule.run(node, ctx)


def check_source(
    source: str,
    *,
    extension: str = ".ts",
    rules: Sequence[Rule] | None = None,
) -> list[Diagnostic]:
    """Lint a source string and return its diagnostics.

    Raises
    ------
    LintError
        When no grammar is available for *extension*.
    """
    parsed = parse_source(source, extension)
    if parsed is None:
        msg = f"No parser available for '{extension}' files"
        raise LintError(msg)

    ctx = LintContext()
    run_rules(parsed.root, default_rules() if rules is None else rules, ctx)
    return ctx.diagnostics


def lint_file(
    path: Path, rules: Sequence[Rule], *, display_path: str | None = None
) -> FileReport | None:
    """Lint a single file.

    Returns ``None`` when the file is skipped: unsupported extension, or the
    file cannot be read or decoded.  Files with syntax errors are still
    analyzed as far as the parser recovered.
    """
    name = display_path or str(path)
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        logger.warning("Cannot read file: %s", name)
        return None

    parsed = parse_source(content, path.suffix)
    if parsed is None:
        logger.debug("Unsupported language: %s", name)
        return None
    if parsed.has_errors:
        logger.warning("Syntax errors in %s, analyzing the recovered tree", name)

    ctx = LintContext(file_path=name)
    run_rules(parsed.root, rules, ctx)
    logger.debug("%s: %d diagnostic(s)", name, len(ctx.diagnostics))
    return FileReport(
        path=name,
        source=content,
        diagnostics=ctx.diagnostics,
        has_errors=parsed.has_errors,
    )


def collect_files(paths: Iterable[Path], config: LintConfig) -> list[tuple[Path, str]]:
    """Expand *paths* into ``(file, display_path)`` pairs to lint.

    Directories are walked recursively for files with a supported extension;
    exclude globs are matched relative to the directory given.  Explicit
    file arguments are never excluded.
    """
    extensions = supported_extensions()
    files: list[tuple[Path, str]] = []
    seen: set[Path] = set()

    for path in paths:
        if not path.exists():
            msg = f"Path does not exist: {path}"
            raise LintError(msg)

        if path.is_file():
            candidates = [(path, str(path))]
        else:
            candidates = []
            for child in sorted(path.rglob("*")):
                if not child.is_file() or child.suffix not in extensions:
                    continue
                relative = child.relative_to(path).as_posix()
                if config.is_excluded(relative):
                    continue
                candidates.append((child, str(child)))

        for file_path, display in candidates:
            resolved = file_path.resolve()
            if resolved in seen:
                continue
            seen.add(resolved)
            files.append((file_path, display))

    return files


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def lint(
    paths: Sequence[Path],
    *,
    config: LintConfig | None = None,
    config_path: Path | None = None,
) -> LintResult:
    """Lint files and directories.

    Parameters
    ----------
    paths:
        Files and/or directories to lint.
    config:
        Already-resolved configuration.  Takes precedence over *config_path*.
    config_path:
        Explicit ``.lengthlint.yml`` to load.  When both are *None* the
        config is looked up in the current directory, falling back to the
        defaults.

    Returns
    -------
    LintResult
        Per-file diagnostics, counts, and timing.

    Raises
    ------
    LintError
        When the configuration is invalid or a path does not exist.
    """
    start = time.monotonic()

    if config is None:
        try:
            config = load_config(config_path) if config_path else find_config(Path.cwd())
        except ConfigError as exc:
            msg = f"Invalid configuration: {exc}"
            raise LintError(msg) from exc
    logger.debug("Using configuration from %s", config.source or "built-in defaults")

    rules = config.enabled_rules()
    result = LintResult(rules_evaluated=len(rules))
    if not rules:
        logger.info("All rules are disabled, nothing to do")
        result.elapsed_ms = (time.monotonic() - start) * 1000
        return result

    for file_path, display in collect_files(paths or [Path.cwd()], config):
        report = lint_file(file_path, rules, display_path=display)
        if report is None:
            continue
        result.files_scanned += 1
        if report.diagnostics:
            result.reports.append(report)

    result.elapsed_ms = (time.monotonic() - start) * 1000
    logger.info(
        "Linted %d file(s): %d diagnostic(s) in %.1fms",
        result.files_scanned,
        len(result.diagnostics),
        result.elapsed_ms,
    )
    return result


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------


def _line_info(source: str, span: Span) -> tuple[str, int, int]:
    """Return the source line containing *span* and the caret start/width in characters."""
    data = source.encode("utf-8")
    line_start = data.rfind(b"\n", 0, span.start) + 1
    line_end = data.find(b"\n", span.start)
    if line_end == -1:
        line_end = len(data)
    line = data[line_start:line_end].decode("utf-8", errors="replace").rstrip("\r")
    col = len(data[line_start : span.start].decode("utf-8", errors="replace"))
    width = len(data[span.start : min(span.end, line_end)].decode("utf-8", errors="replace"))
    return line, col, max(width, 1)


def _recovered_note(report: FileReport) -> str:
    return " (syntax errors, checked the recovered tree)" if report.has_errors else ""


def _summary(result: LintResult) -> str:
    count = len(result.diagnostics)
    noun = "problem" if count == 1 else "problems"
    elapsed_str = f"{result.elapsed_ms / 1000:.1f}s"
    return (
        f"{count} {noun} ({result.error_count} errors, {result.warning_count} warnings) "
        f"in {result.files_scanned} files ({result.rules_evaluated} rules, {elapsed_str})"
    )


def format_rich(result: LintResult) -> str:
    """Format a LintResult as human-readable text with a code frame per diagnostic.

    Example output::

        ⚠ eslint-plugin-unicorn(no-useless-length-check): Redundant empty check
          src/app.ts:3:5
           3 | if (array.length === 0 || array.every(Boolean)) {
             |     ^^^^^^^^^^^^^^^^^^
          help: The empty check is useless as `Array#every()` returns `true` ...

        1 problem (0 errors, 1 warnings) in 4 files (1 rules, 0.0s)
    """
    lines: list[str] = []

    for report in result.reports:
        for d in report.diagnostics:
            marker = "✗" if d.severity == "error" else "⚠"
            lines.append(f"{marker} {d.label}: {d.message}")
            location = f"{report.path}:{d.span.line}:{d.span.column}"
            lines.append(f"  {location}{_recovered_note(report)}")
            text, col, width = _line_info(report.source, d.span)
            gutter = str(d.span.line)
            lines.append(f"  {gutter} | {text}")
            lines.append(f"  {' ' * len(gutter)} | {' ' * col}{'^' * width}")
            lines.append(f"  help: {d.help}")
            lines.append("")

    if result.diagnostics:
        lines.append(_summary(result))
    else:
        lines.append(
            f"✓ No problems found ({result.files_scanned} files, "
            f"{result.rules_evaluated} rules)"
        )
    return "\n".join(lines)


def format_json(result: LintResult) -> str:
    """Format a LintResult as structured JSON.

    Returns a JSON string with a ``diagnostics`` array and a ``summary`` object.
    """
    diagnostics_list: list[dict[str, object]] = []
    for path, d in result.diagnostics:
        diagnostics_list.append(
            {
                "file_path": path,
                "rule_name": d.rule_name,
                "kind": d.kind,
                "severity": d.severity,
                "message": d.message,
                "help": d.help,
                "span": {
                    "start": d.span.start,
                    "end": d.span.end,
                    "line": d.span.line,
                    "column": d.span.column,
                },
            }
        )

    output: dict[str, object] = {
        "diagnostics": diagnostics_list,
        "summary": {
            "files_scanned": result.files_scanned,
            "rules_evaluated": result.rules_evaluated,
            "diagnostics_count": len(result.diagnostics),
            "errors": result.error_count,
            "warnings": result.warning_count,
            "elapsed_ms": result.elapsed_ms,
        },
    }
    return json.dumps(output, indent=2)


def format_porcelain(result: LintResult) -> str:
    """Format a LintResult as one line per diagnostic.

    Format: ``file_path:line:column:rule_name:kind:severity``

    Returns empty string when there are no diagnostics.
    """
    return "\n".join(
        f"{path}:{d.span.line}:{d.span.column}:{d.rule_name}:{d.kind}:{d.severity}"
        for path, d in result.diagnostics
    )


def render_result(result: LintResult, console: Console) -> None:
    """Render a LintResult on a Rich console, with highlighted code frames."""
    from rich.markup import escape
    from rich.text import Text

    for report in result.reports:
        for d in report.diagnostics:
            style = "bold red" if d.severity == "error" else "bold yellow"
            marker = "✗" if d.severity == "error" else "⚠"
            console.print(f"[{style}]{marker} {escape(d.label)}[/]: {escape(d.message)}")
            console.print(
                f"  [cyan]{escape(report.path)}[/]:{d.span.line}:{d.span.column}"
                f"[dim]{_recovered_note(report)}[/]"
            )

            text, col, width = _line_info(report.source, d.span)
            gutter = str(d.span.line)
            frame = Text(f"  {gutter} | ", style="dim")
            frame.append(text[:col])
            frame.append(text[col : col + width], style="underline")
            frame.append(text[col + width :])
            console.print(frame)
            console.print(
                Text(f"  {' ' * len(gutter)} | {' ' * col}{'^' * width}", style=style)
            )
            console.print(f"  [dim]help:[/] {escape(d.help)}")
            console.print()

    if result.diagnostics:
        console.print(escape(_summary(result)))
    else:
        console.print(
            f"[green]✓[/] No problems found ({result.files_scanned} files, "
            f"{result.rules_evaluated} rules)"
        )
