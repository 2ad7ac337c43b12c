"""cexpr.printer

Turns an expression tree back into C source. Parentheses are emitted only
where precedence or associativity require them, so parsing the output gives
back an equal tree.
"""

from __future__ import annotations

from typing import Tuple

from cexpr.ast_nodes import (
    Assign,
    BinaryOp,
    BinaryOperator,
    Call,
    Cast,
    CharLiteral,
    Expression,
    FloatLiteral,
    Identifier,
    Index,
    IntLiteral,
    PostfixOp,
    StringLiteral,
    Ternary,
    UnaryOp,
)

# Binding strength, loosest first. Cast and prefix operators share a level
# because each takes a cast-level operand.
ASSIGNMENT = 1
CONDITIONAL = 2
PREFIX = 13
POSTFIX = 14
PRIMARY = 15

BINARY_PRECEDENCE = {
    BinaryOperator.OR: 3,
    BinaryOperator.AND: 4,
    BinaryOperator.BIT_OR: 5,
    BinaryOperator.BIT_XOR: 6,
    BinaryOperator.BIT_AND: 7,
    BinaryOperator.EQ: 8,
    BinaryOperator.NE: 8,
    BinaryOperator.LT: 9,
    BinaryOperator.GT: 9,
    BinaryOperator.LE: 9,
    BinaryOperator.GE: 9,
    BinaryOperator.SHL: 10,
    BinaryOperator.SHR: 10,
    BinaryOperator.ADD: 11,
    BinaryOperator.SUB: 11,
    BinaryOperator.MUL: 12,
    BinaryOperator.DIV: 12,
    BinaryOperator.MOD: 12,
}

_STRING_ESCAPES = {
    '\\': '\\\\', '"': '\\"', '\n': '\\n', '\t': '\\t', '\r': '\\r',
    '\a': '\\a', '\b': '\\b', '\f': '\\f', '\v': '\\v',
}


def to_source(node: Expression) -> str:
    """Render ``node`` as C source text"""
    return _format(node)[0]


def quote_string(value: str) -> str:
    out = []
    for i, ch in enumerate(value):
        if ch in _STRING_ESCAPES:
            out.append(_STRING_ESCAPES[ch])
        elif ch == '\0' and not value[i + 1:i + 2].isdigit():
            out.append("\\0")
        elif ord(ch) < 0x20 or ord(ch) == 0x7f:
            # Three octal digits end the escape whatever follows.
            out.append(f"\\{ord(ch):03o}")
        else:
            out.append(ch)
    return '"' + "".join(out) + '"'


def _operand(node: Expression, min_precedence: int) -> str:
    text, precedence = _format(node)
    if precedence < min_precedence:
        return f"({text})"
    return text


def _prefixed(symbol: str, operand: str) -> str:
    # "- -x" must not become "--x", nor "& &x" become "&&x".
    if operand[:1] == symbol[-1:] and symbol[-1] in "+-&":
        return f"{symbol} {operand}"
    return symbol + operand


def _format(node: Expression) -> Tuple[str, int]:
    if isinstance(node, Identifier):
        return node.name, PRIMARY
    if isinstance(node, (IntLiteral, FloatLiteral, CharLiteral)):
        return node.raw, PRIMARY
    if isinstance(node, StringLiteral):
        return quote_string(node.value), PRIMARY

    if isinstance(node, Call):
        args = ", ".join(_operand(arg, ASSIGNMENT) for arg in node.args)
        return f"{node.callee.name}({args})", POSTFIX
    if isinstance(node, Index):
        return f"{_operand(node.base, POSTFIX)}[{_operand(node.index, ASSIGNMENT)}]", POSTFIX
    if isinstance(node, PostfixOp):
        return _operand(node.operand, POSTFIX) + node.op.value, POSTFIX

    if isinstance(node, UnaryOp):
        return _prefixed(node.op.value, _operand(node.operand, PREFIX)), PREFIX
    if isinstance(node, Cast):
        return f"({node.type_name}){_operand(node.operand, PREFIX)}", PREFIX

    if isinstance(node, BinaryOp):
        precedence = BINARY_PRECEDENCE[node.op]
        lhs = _operand(node.lhs, precedence)
        rhs = _operand(node.rhs, precedence + 1)
        return f"{lhs} {node.op.value} {rhs}", precedence

    if isinstance(node, Ternary):
        cond = _operand(node.cond, CONDITIONAL + 1)
        then_branch = _operand(node.then_branch, ASSIGNMENT)
        else_branch = _operand(node.else_branch, CONDITIONAL)
        return f"{cond} ? {then_branch} : {else_branch}", CONDITIONAL

    if isinstance(node, Assign):
        return f"{_operand(node.lhs, CONDITIONAL)} = {_operand(node.rhs, ASSIGNMENT)}", ASSIGNMENT

    raise TypeError(f"not an expression node: {node!r}")
