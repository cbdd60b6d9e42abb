"""Source parser: tree-sitter parsing and conversion into the expression model."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from tree_sitter import Language, Parser

from lengthlint.syntax.nodes import (
    Binary,
    Call,
    Expression,
    Identifier,
    Literal,
    Logical,
    Member,
    Opaque,
    Parenthesized,
    Span,
    TypeWrapper,
    binary_operator,
    logical_operator,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from tree_sitter import Node as TSNode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LangConfig:
    """Tree-sitter configuration for a source language."""

    name: str
    language: Language
    comment_types: frozenset[str]


@dataclass(frozen=True)
class ParsedSource:
    """A converted syntax tree plus parse diagnostics."""

    root: Expression
    has_errors: bool


# ---- Language loaders (lazy, handle ImportError) ----


def _load_typescript() -> LangConfig:
    import tree_sitter_typescript as tstypescript

    return LangConfig(
        name="typescript",
        language=Language(tstypescript.language_typescript()),
        comment_types=frozenset({"comment", "html_comment"}),
    )


def _load_tsx() -> LangConfig:
    import tree_sitter_typescript as tstypescript

    return LangConfig(
        name="tsx",
        language=Language(tstypescript.language_tsx()),
        comment_types=frozenset({"comment", "html_comment"}),
    )


# Extension -> loader function mapping.
_EXTENSION_LOADERS: dict[str, Callable[[], LangConfig]] = {
    ".ts": _load_typescript,
    ".mts": _load_typescript,
    ".cts": _load_typescript,
    ".js": _load_typescript,
    ".mjs": _load_typescript,
    ".cjs": _load_typescript,
    ".tsx": _load_tsx,
    ".jsx": _load_tsx,
}

# Cache for loaded languages (None means "tried and failed / unsupported").
_LANG_CACHE: dict[str, LangConfig | None] = {}


def get_lang_config(extension: str) -> LangConfig | None:
    """Get language config for a file extension, or ``None`` if unsupported/unavailable."""
    if extension in _LANG_CACHE:
        return _LANG_CACHE[extension]

    loader = _EXTENSION_LOADERS.get(extension)
    if loader is None:
        _LANG_CACHE[extension] = None
        return None

    try:
        config = loader()
    except ImportError:
        logger.debug("Grammar for %s is not installed", extension)
        _LANG_CACHE[extension] = None
        return None

    _LANG_CACHE[extension] = config
    return config


def supported_extensions() -> frozenset[str]:
    """Return the set of file extensions with available grammars."""
    available: set[str] = set()
    for ext in _EXTENSION_LOADERS:
        if get_lang_config(ext) is not None:
            available.add(ext)
    return frozenset(available)


def clear_cache() -> None:
    """Clear the language config cache (useful for testing)."""
    _LANG_CACHE.clear()


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_source(source: str, extension: str = ".ts") -> ParsedSource | None:
    """Parse *source* with the grammar registered for *extension*.

    Returns ``None`` when the extension is unsupported or its grammar is not
    installed.  Syntax errors do not fail the parse: error nodes become
    :class:`Opaque` nodes and ``has_errors`` is set.
    """
    config = get_lang_config(extension)
    if config is None:
        return None

    parser = Parser(config.language)
    data = source.encode("utf-8")
    tree = parser.parse(data)
    root = convert_tree(tree.root_node, data, config.comment_types)
    return ParsedSource(root=root, has_errors=tree.root_node.has_error)


def convert_tree(
    root: TSNode, source: bytes, comment_types: frozenset[str] = frozenset()
) -> Expression:
    """Convert a tree-sitter subtree into the expression model.

    Uses an explicit post-order stack so deeply nested sources cannot
    exhaust the interpreter's call stack.  *source* is the parsed buffer,
    used to report columns in characters rather than bytes.
    """
    columns = _ColumnMap(source)
    converted: dict[int, Expression] = {}
    stack: list[tuple[TSNode, bool]] = [(root, False)]

    while stack:
        node, expanded = stack.pop()
        kids = _kids(node, comment_types)
        if not expanded:
            stack.append((node, True))
            stack.extend((child, False) for child in reversed(kids))
            continue
        parts = {child.id: converted.pop(child.id) for child in kids}
        converted[node.id] = _build(node, kids, parts, columns)

    return converted[root.id]


def _kids(node: TSNode, comment_types: frozenset[str]) -> list[TSNode]:
    return [child for child in node.named_children if child.type not in comment_types]


def _text(node: TSNode) -> str:
    return node.text.decode("utf-8") if node.text else ""


class _ColumnMap:
    """Translates tree-sitter byte columns into 1-based character columns."""

    def __init__(self, source: bytes) -> None:
        self._source = source
        self._ascii = source.isascii()

    def column(self, node: TSNode) -> int:
        byte_column = node.start_point.column
        if self._ascii:
            return byte_column + 1
        line_start = node.start_byte - byte_column
        prefix = self._source[line_start : node.start_byte]
        return len(prefix.decode("utf-8", errors="replace")) + 1


def _span(node: TSNode, columns: _ColumnMap) -> Span:
    return Span(
        start=node.start_byte,
        end=node.end_byte,
        line=node.start_point.row + 1,
        column=columns.column(node),
    )


# ``?.`` shows up as an ``optional_chain`` node or as a bare token, depending on the grammar rule.
_OPTIONAL_CHAIN_TYPES = frozenset({"optional_chain", "?."})


def _has_optional_chain(node: TSNode) -> bool:
    """True if ``?.`` appears as a direct child (not inside a sub-expression)."""
    return any(child.type in _OPTIONAL_CHAIN_TYPES for child in node.children)


def _field(node: TSNode, name: str, parts: dict[int, Expression]) -> Expression | None:
    child = node.child_by_field_name(name)
    if child is None:
        return None
    return parts.get(child.id)


_LITERAL_KINDS: dict[str, str] = {
    "number": "number",
    "string": "string",
    "template_string": "template",
    "true": "boolean",
    "false": "boolean",
    "null": "null",
    "regex": "regex",
}

_TYPE_WRAPPERS: dict[str, str] = {
    "non_null_expression": "!",
    "as_expression": "as",
    "satisfies_expression": "satisfies",
}


def _build(
    node: TSNode, kids: list[TSNode], parts: dict[int, Expression], columns: _ColumnMap
) -> Expression:
    kind = node.type
    span = _span(node, columns)
    ordered = tuple(parts[child.id] for child in kids)
    fallback = Opaque(kind=kind, span=span, children=ordered)

    if kind == "identifier":
        return Identifier(name=_text(node), span=span)

    if kind in _LITERAL_KINDS:
        return Literal(raw=_text(node), literal_kind=_LITERAL_KINDS[kind], span=span)

    if kind == "member_expression":
        obj = _field(node, "object", parts)
        prop = node.child_by_field_name("property")
        if obj is None or prop is None:
            return fallback
        return Member(
            object=obj,
            property=_text(prop),
            computed=False,
            optional=_has_optional_chain(node),
            span=span,
        )

    if kind == "subscript_expression":
        obj = _field(node, "object", parts)
        if obj is None:
            return fallback
        index = node.child_by_field_name("index")
        static_name: str | None = None
        if index is not None and index.type == "string":
            static_name = _text(index)[1:-1]
        return Member(
            object=obj,
            property=static_name,
            computed=True,
            optional=_has_optional_chain(node),
            span=span,
        )

    if kind == "call_expression":
        callee = _field(node, "function", parts)
        args = _field(node, "arguments", parts)
        if callee is None:
            return fallback
        arguments: tuple[Expression, ...] = ()
        if isinstance(args, Opaque) and args.kind == "arguments":
            arguments = args.children
        elif args is not None:
            arguments = (args,)
        return Call(
            callee=callee,
            arguments=arguments,
            optional=_has_optional_chain(node),
            span=span,
        )

    if kind == "binary_expression":
        left = _field(node, "left", parts)
        right = _field(node, "right", parts)
        op_node = node.child_by_field_name("operator")
        if left is None or right is None or op_node is None:
            return fallback
        logical = logical_operator(op_node.type)
        if logical is not None:
            return Logical(operator=logical, left=left, right=right, span=span)
        binary = binary_operator(op_node.type)
        if binary is not None:
            return Binary(operator=binary, left=left, right=right, span=span)
        return fallback

    if kind == "parenthesized_expression":
        if not ordered:
            return fallback
        return Parenthesized(expression=ordered[0], span=span)

    if kind in _TYPE_WRAPPERS and ordered:
        return TypeWrapper(wrapper=_TYPE_WRAPPERS[kind], expression=ordered[0], span=span)

    if kind == "type_assertion" and ordered:
        # <T>expr: the type arguments come first, the expression last.
        return TypeWrapper(wrapper="<>", expression=ordered[-1], span=span)

    return fallback
