"""Shared helpers for the parser tests.

Expected trees are built with the helpers below; spans do not take part in
node equality, so they all use a dummy span.
"""

from typing import Iterable

import pytest

from cexpr.ast_nodes import (
    Assign,
    BinaryOp,
    BinaryOperator,
    Call,
    Cast,
    Identifier,
    Index,
    IntLiteral,
    PostfixOp,
    PostfixOperator,
    Radix,
    StringLiteral,
    Ternary,
    TypeName,
    UnaryOp,
    UnaryOperator,
)
from cexpr.lexer import Lexer, Span
from cexpr.parser import Parser
from cexpr.type_names import CTypeNames

NOWHERE = Span(0, 0)


def parse(text: str, typedefs: Iterable[str] = (), **kwargs):
    lexer = Lexer(text)
    tokens = lexer.tokenize()
    assert not lexer.has_errors(), lexer.get_errors()
    return Parser(tokens, type_names=CTypeNames(typedefs), **kwargs).parse()


def ident(name: str) -> Identifier:
    return Identifier(span=NOWHERE, name=name)


def num(raw: str, radix: Radix = Radix.DECIMAL) -> IntLiteral:
    return IntLiteral(span=NOWHERE, raw=raw, radix=radix)


def string(value: str) -> StringLiteral:
    return StringLiteral(span=NOWHERE, value=value)


def binop(symbol: str, lhs, rhs) -> BinaryOp:
    return BinaryOp(span=NOWHERE, op=BinaryOperator(symbol), lhs=_node(lhs), rhs=_node(rhs))


def unary(symbol: str, operand) -> UnaryOp:
    return UnaryOp(span=NOWHERE, op=UnaryOperator(symbol), operand=_node(operand))


def postfix(symbol: str, operand) -> PostfixOp:
    return PostfixOp(span=NOWHERE, op=PostfixOperator(symbol), operand=_node(operand))


def index(base, idx) -> Index:
    return Index(span=NOWHERE, base=_node(base), index=_node(idx))


def call(name: str, *args) -> Call:
    return Call(span=NOWHERE, callee=ident(name), args=tuple(_node(a) for a in args))


def cast(type_words: str, operand) -> Cast:
    type_name = TypeName(span=NOWHERE, words=tuple(type_words.split()))
    return Cast(span=NOWHERE, type_name=type_name, operand=_node(operand))


def ternary(cond, then_branch, else_branch) -> Ternary:
    return Ternary(span=NOWHERE, cond=_node(cond), then_branch=_node(then_branch), else_branch=_node(else_branch))


def assign(lhs, rhs) -> Assign:
    return Assign(span=NOWHERE, lhs=_node(lhs), rhs=_node(rhs))


def _node(value):
    # Bare strings in expected trees stand for identifiers.
    if isinstance(value, str):
        return ident(value)
    return value


@pytest.fixture
def c_parse():
    """Parse with ``int``-style keywords and the typedef names ``T`` and ``size_t``."""
    def _parse(text: str, **kwargs):
        return parse(text, typedefs=("T", "size_t"), **kwargs)
    return _parse
