"""Rule plumbing: diagnostics, the per-file reporting context, the rule base class."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from lengthlint.syntax.nodes import Expression, Span

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

VALID_SEVERITIES: frozenset[str] = frozenset({"warn", "error"})
VALID_RULE_SETTINGS: frozenset[str] = VALID_SEVERITIES | {"off"}

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Diagnostic:
    """A single finding, anchored at exactly one source span."""

    rule_name: str
    kind: str  # rule-specific tag, e.g. "Some" | "Every"
    severity: str  # "warn" | "error"
    message: str  # short human-readable summary
    help: str  # explanation of why the code is flagged
    span: Span

    @property
    def label(self) -> str:
        """Rule label in the ``plugin(rule-name)`` form used by the upstream plugin."""
        return f"eslint-plugin-unicorn({self.rule_name})"


@dataclass
class LintContext:
    """Collects diagnostics reported by rules while one file is analyzed."""

    file_path: str | None = None
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def diagnostic(self, diagnostic: Diagnostic) -> None:
        """Report *diagnostic* for the current file."""
        self.diagnostics.append(diagnostic)


# ---------------------------------------------------------------------------
# Rule base class
# ---------------------------------------------------------------------------


class Rule:
    """Base class for lint rules.

    Subclasses set the class-level metadata and implement :meth:`run`, which
    is called once per chain-root logical expression in a file.
    """

    name: ClassVar[str] = ""
    category: ClassVar[str] = ""
    description: ClassVar[str] = ""
    default_severity: ClassVar[str] = "warn"

    def __init__(self, severity: str | None = None) -> None:
        if severity is None:
            severity = self.default_severity
        if severity not in VALID_SEVERITIES:
            msg = f"Rule '{self.name}': invalid severity '{severity}'"
            raise ValueError(msg)
        self.severity = severity

    def run(self, node: Expression, ctx: LintContext) -> None:
        """Inspect *node* and report findings through *ctx*."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(severity={self.severity!r})"
