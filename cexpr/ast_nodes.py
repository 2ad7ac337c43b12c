"""
Abstract Syntax Tree (AST) Node Definitions for C expressions

Every node is a frozen dataclass deriving from ``Expression``. Nodes own their
children exclusively and are never mutated after the parser builds them.
Spans are excluded from equality, so ``==`` compares tree structure only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple

from cexpr.lexer import Span


@dataclass(frozen=True)
class ASTNode:
    """Base class for all AST nodes"""
    # Required before every subclass field; pass it by keyword.
    span: Span = field(compare=False)


# ============== Operators ==============

class BinaryOperator(Enum):
    """Binary operators, valued by their C spelling"""
    MUL = '*'
    DIV = '/'
    MOD = '%'
    ADD = '+'
    SUB = '-'
    SHL = '<<'
    SHR = '>>'
    LT = '<'
    GT = '>'
    LE = '<='
    GE = '>='
    EQ = '=='
    NE = '!='
    BIT_AND = '&'
    BIT_XOR = '^'
    BIT_OR = '|'
    AND = '&&'
    OR = '||'


class UnaryOperator(Enum):
    """Prefix operators"""
    INCREMENT = '++'
    DECREMENT = '--'
    NOT = '!'
    PLUS = '+'
    MINUS = '-'
    ADDRESS_OF = '&'
    DEREF = '*'
    BIT_NOT = '~'


class PostfixOperator(Enum):
    """Postfix operators"""
    INCREMENT = '++'
    DECREMENT = '--'


class Radix(Enum):
    """Integer literal base, taken from the literal's prefix"""
    DECIMAL = 10
    OCTAL = 8
    HEXADECIMAL = 16


# ============== Expression Nodes ==============

@dataclass(frozen=True)
class Expression(ASTNode):
    """Base class for expressions"""
    pass


@dataclass(frozen=True)
class Identifier(Expression):
    """Identifier (variable or function name)"""
    name: str


@dataclass(frozen=True)
class IntLiteral(Expression):
    """Integer literal, kept as written"""
    raw: str
    radix: Radix = Radix.DECIMAL


@dataclass(frozen=True)
class FloatLiteral(Expression):
    """Floating-point literal, kept as written"""
    raw: str


@dataclass(frozen=True)
class CharLiteral(Expression):
    """Character literal, kept as written (quotes included)"""
    raw: str


@dataclass(frozen=True)
class StringLiteral(Expression):
    """String literal; adjacent literals are already concatenated"""
    value: str


@dataclass(frozen=True)
class Call(Expression):
    """Function call on a named function"""
    callee: Identifier
    args: Tuple[Expression, ...] = ()


@dataclass(frozen=True)
class Index(Expression):
    """Array subscript"""
    base: Expression
    index: Expression


@dataclass(frozen=True)
class PostfixOp(Expression):
    """Postfix increment or decrement"""
    op: PostfixOperator
    operand: Expression


@dataclass(frozen=True)
class UnaryOp(Expression):
    """Prefix unary operation"""
    op: UnaryOperator
    operand: Expression


@dataclass(frozen=True)
class TypeName(ASTNode):
    """Opaque run of tokens the type-name oracle accepted"""
    words: Tuple[str, ...]

    def __str__(self) -> str:
        return " ".join(self.words)


@dataclass(frozen=True)
class Cast(Expression):
    """Type cast"""
    type_name: TypeName
    operand: Expression


@dataclass(frozen=True)
class BinaryOp(Expression):
    """Binary operation"""
    op: BinaryOperator
    lhs: Expression
    rhs: Expression


@dataclass(frozen=True)
class Ternary(Expression):
    """Ternary conditional operation (? :)"""
    cond: Expression
    then_branch: Expression
    else_branch: Expression


@dataclass(frozen=True)
class Assign(Expression):
    """Simple assignment"""
    lhs: Expression
    rhs: Expression


# ============== Utility Functions ==============

def dump_ast(node: ASTNode, indent: int = 0) -> str:
    """Render an indented structural dump of an expression tree"""
    prefix = "  " * indent

    if isinstance(node, Identifier):
        return f"{prefix}Identifier({node.name})\n"

    elif isinstance(node, IntLiteral):
        return f"{prefix}IntLiteral({node.raw}, {node.radix.name.lower()})\n"

    elif isinstance(node, FloatLiteral):
        return f"{prefix}FloatLiteral({node.raw})\n"

    elif isinstance(node, CharLiteral):
        return f"{prefix}CharLiteral({node.raw})\n"

    elif isinstance(node, StringLiteral):
        return f"{prefix}StringLiteral({node.value!r})\n"

    elif isinstance(node, Call):
        result = f"{prefix}Call({node.callee.name})\n"
        for arg in node.args:
            result += dump_ast(arg, indent + 1)
        return result

    elif isinstance(node, Index):
        return f"{prefix}Index\n" + dump_ast(node.base, indent + 1) + dump_ast(node.index, indent + 1)

    elif isinstance(node, PostfixOp):
        return f"{prefix}PostfixOp({node.op.value})\n" + dump_ast(node.operand, indent + 1)

    elif isinstance(node, UnaryOp):
        return f"{prefix}UnaryOp({node.op.value})\n" + dump_ast(node.operand, indent + 1)

    elif isinstance(node, Cast):
        return f"{prefix}Cast({node.type_name})\n" + dump_ast(node.operand, indent + 1)

    elif isinstance(node, BinaryOp):
        return f"{prefix}BinaryOp({node.op.value})\n" + dump_ast(node.lhs, indent + 1) + dump_ast(node.rhs, indent + 1)

    elif isinstance(node, Ternary):
        result = f"{prefix}Ternary\n"
        for child in (node.cond, node.then_branch, node.else_branch):
            result += dump_ast(child, indent + 1)
        return result

    elif isinstance(node, Assign):
        return f"{prefix}Assign\n" + dump_ast(node.lhs, indent + 1) + dump_ast(node.rhs, indent + 1)

    raise TypeError(f"not an expression node: {node!r}")
