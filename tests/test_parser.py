"""Tests for lengthlint.syntax.parser — tree-sitter conversion into the expression model."""

from __future__ import annotations

import pytest

from lengthlint.syntax.nodes import (
    Binary,
    BinaryOperator,
    Call,
    Expression,
    Identifier,
    Literal,
    Logical,
    LogicalOperator,
    Member,
    Opaque,
    Parenthesized,
    TypeWrapper,
)
from lengthlint.syntax.parser import (
    get_lang_config,
    parse_source,
    supported_extensions,
)
from lengthlint.syntax.walker import iter_nodes


def _expression(source: str, extension: str = ".ts") -> Expression:
    parsed = parse_source(source, extension)
    assert parsed is not None
    assert isinstance(parsed.root, Opaque)
    statement = parsed.root.children[0]
    assert isinstance(statement, Opaque)
    return statement.children[0]


# --- language configs ---


class TestLangConfig:
    @pytest.mark.parametrize("ext", [".ts", ".js", ".mjs", ".cjs", ".mts", ".cts"])
    def test_typescript_grammar(self, ext: str) -> None:
        config = get_lang_config(ext)
        assert config is not None
        assert config.name == "typescript"

    @pytest.mark.parametrize("ext", [".tsx", ".jsx"])
    def test_tsx_grammar(self, ext: str) -> None:
        config = get_lang_config(ext)
        assert config is not None
        assert config.name == "tsx"

    def test_unsupported_extension(self) -> None:
        assert get_lang_config(".py") is None
        assert parse_source("x = 1", ".py") is None

    def test_supported_extensions(self) -> None:
        assert {".ts", ".tsx", ".js", ".jsx"} <= supported_extensions()


# --- conversion ---


class TestConversion:
    def test_identifier(self) -> None:
        expr = _expression("array")
        assert isinstance(expr, Identifier)
        assert expr.name == "array"

    @pytest.mark.parametrize(
        ("source", "kind"),
        [
            ("0", "number"),
            ("0x0", "number"),
            ("0.", "number"),
            ('"0"', "string"),
            ("true", "boolean"),
            ("null", "null"),
        ],
    )
    def test_literal_keeps_raw_text(self, source: str, kind: str) -> None:
        expr = _expression(source)
        assert isinstance(expr, Literal)
        assert expr.raw == source
        assert expr.literal_kind == kind

    def test_member(self) -> None:
        expr = _expression("array.length")
        assert isinstance(expr, Member)
        assert isinstance(expr.object, Identifier)
        assert expr.property == "length"
        assert expr.computed is False
        assert expr.optional is False

    def test_optional_member(self) -> None:
        expr = _expression("array?.length")
        assert isinstance(expr, Member)
        assert expr.optional is True

    def test_subscript_with_string_is_static(self) -> None:
        expr = _expression('array["length"]')
        assert isinstance(expr, Member)
        assert expr.computed is True
        assert expr.property == "length"

    def test_subscript_with_identifier_is_dynamic(self) -> None:
        expr = _expression("array[length]")
        assert isinstance(expr, Member)
        assert expr.computed is True
        assert expr.property is None

    def test_call(self) -> None:
        expr = _expression("array.every(Boolean, 1)")
        assert isinstance(expr, Call)
        assert expr.optional is False
        assert isinstance(expr.callee, Member)
        assert len(expr.arguments) == 2

    def test_optional_call(self) -> None:
        expr = _expression("array.every?.(Boolean)")
        assert isinstance(expr, Call)
        assert expr.optional is True
        assert isinstance(expr.callee, Member)
        assert expr.callee.optional is False

    def test_optional_call_on_member_chain(self) -> None:
        expr = _expression("data.items.some?.(Boolean)")
        assert isinstance(expr, Call)
        assert expr.optional is True
        assert isinstance(expr.callee, Member)
        assert expr.callee.optional is False
        assert isinstance(expr.callee.object, Member)
        assert expr.callee.object.optional is False

    def test_optional_member_inside_call_is_not_an_optional_call(self) -> None:
        expr = _expression("data?.items.some(Boolean)")
        assert isinstance(expr, Call)
        assert expr.optional is False

    def test_call_on_optional_member(self) -> None:
        expr = _expression("array?.every(Boolean)")
        assert isinstance(expr, Call)
        assert expr.optional is False
        assert isinstance(expr.callee, Member)
        assert expr.callee.optional is True

    @pytest.mark.parametrize(
        ("token", "operator"),
        [
            ("&&", LogicalOperator.AND),
            ("||", LogicalOperator.OR),
            ("??", LogicalOperator.COALESCE),
        ],
    )
    def test_logical(self, token: str, operator: LogicalOperator) -> None:
        expr = _expression(f"a {token} b")
        assert isinstance(expr, Logical)
        assert expr.operator is operator

    @pytest.mark.parametrize("token", ["===", "!==", "==", "!=", ">", ">=", "<=", "+", "in"])
    def test_binary(self, token: str) -> None:
        expr = _expression(f"a {token} b")
        assert isinstance(expr, Binary)
        assert expr.operator is BinaryOperator(token)

    def test_parenthesized(self) -> None:
        expr = _expression("((a))")
        assert isinstance(expr, Parenthesized)
        assert isinstance(expr.expression, Parenthesized)
        assert isinstance(expr.expression.expression, Identifier)

    @pytest.mark.parametrize(
        ("source", "wrapper"),
        [("a!", "!"), ("a as number", "as"), ("a satisfies number", "satisfies")],
    )
    def test_type_wrappers(self, source: str, wrapper: str) -> None:
        expr = _expression(source)
        assert isinstance(expr, TypeWrapper)
        assert expr.wrapper == wrapper
        assert isinstance(expr.expression, Identifier)

    def test_comments_are_dropped(self) -> None:
        parsed = parse_source("/* a */ a /* b */ || b // c\n")
        assert parsed is not None
        kinds = {node.kind for node in iter_nodes(parsed.root) if isinstance(node, Opaque)}
        assert "comment" not in kinds

    def test_span_positions(self) -> None:
        source = "let x;\n  foo.length"
        parsed = parse_source(source)
        assert parsed is not None
        member = next(n for n in iter_nodes(parsed.root) if isinstance(n, Member))
        assert member.span.line == 2
        assert member.span.column == 3
        assert member.span.slice(source) == "foo.length"

    def test_span_slice_multibyte(self) -> None:
        source = 'const s = "ü"; items.length'
        parsed = parse_source(source)
        assert parsed is not None
        member = next(n for n in iter_nodes(parsed.root) if isinstance(n, Member))
        assert member.span.slice(source) == "items.length"
        assert member.span.column == 16


# --- error handling ---


class TestParseErrors:
    def test_syntax_error_is_flagged(self) -> None:
        parsed = parse_source("if (a.length === 0 || ) {")
        assert parsed is not None
        assert parsed.has_errors is True

    def test_clean_source(self) -> None:
        parsed = parse_source("a.length === 0 || a.every(f);")
        assert parsed is not None
        assert parsed.has_errors is False

    def test_long_chain_converts_without_recursion(self) -> None:
        source = " || ".join(f"x{i}" for i in range(1500))
        parsed = parse_source(source)
        assert parsed is not None
        logical = [n for n in iter_nodes(parsed.root) if isinstance(n, Logical)]
        assert len(logical) == 1499
