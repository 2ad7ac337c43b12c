"""cexpr.dot

Graphviz rendering of expression trees, for inspecting what the parser built::

    cexpr --format dot 'a + (int)b' | dot -Tsvg > ast.svg
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

from cexpr.ast_nodes import (
    Assign,
    BinaryOp,
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

# Placeholder for the operand position in operator labels.
HOLE = "◌"


@dataclass
class DotTree:
    """A labelled node whose children hang off labelled edges"""
    label: str
    children: List[Tuple[str, "DotTree"]] = field(default_factory=list)

    @classmethod
    def leaf(cls, label: str) -> "DotTree":
        return cls(label)


def escape_label(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\t", "\\t")
        .replace("\r", "\\r")
    )


def to_dot_tree(node: Expression) -> DotTree:
    if isinstance(node, Identifier):
        return DotTree.leaf(node.name)

    if isinstance(node, IntLiteral):
        return _literal(node.radix.name.lower(), node.raw)
    if isinstance(node, FloatLiteral):
        return _literal("float", node.raw)
    if isinstance(node, CharLiteral):
        return _literal("char", node.raw)
    if isinstance(node, StringLiteral):
        return _literal("string", node.value)

    if isinstance(node, Call):
        children = [("name", DotTree.leaf(node.callee.name))]
        children.extend(("arg", to_dot_tree(arg)) for arg in node.args)
        return DotTree("func call", children)

    if isinstance(node, Index):
        return DotTree(f"{HOLE}[{HOLE}]", [("lhs", to_dot_tree(node.base)), ("rhs", to_dot_tree(node.index))])

    if isinstance(node, PostfixOp):
        return DotTree(HOLE + node.op.value, [("", to_dot_tree(node.operand))])

    if isinstance(node, UnaryOp):
        return DotTree(node.op.value + HOLE, [("", to_dot_tree(node.operand))])

    if isinstance(node, Cast):
        return DotTree("cast", [("type", DotTree.leaf(str(node.type_name))), ("expr", to_dot_tree(node.operand))])

    if isinstance(node, BinaryOp):
        return DotTree(node.op.value, [("lhs", to_dot_tree(node.lhs)), ("rhs", to_dot_tree(node.rhs))])

    if isinstance(node, Ternary):
        return DotTree("?:", [
            ("cond", to_dot_tree(node.cond)),
            ("then", to_dot_tree(node.then_branch)),
            ("else", to_dot_tree(node.else_branch)),
        ])

    if isinstance(node, Assign):
        return DotTree("=", [("lhs", to_dot_tree(node.lhs)), ("rhs", to_dot_tree(node.rhs))])

    raise TypeError(f"not an expression node: {node!r}")


def _literal(kind: str, value: str) -> DotTree:
    return DotTree("literal", [(kind, DotTree.leaf(value))])


def render_dot(node: Expression, name: str = "ast") -> str:
    """Render ``node`` as a Graphviz digraph"""
    lines = [f"digraph {name} {{", "  node [shape=box];"]
    counter = 0
    # Iterative walk; ids are assigned in pre-order.
    stack = [(to_dot_tree(node), None, "")]
    while stack:
        tree, parent, edge = stack.pop()
        node_id = f"n{counter}"
        counter += 1
        lines.append(f'  {node_id} [label="{escape_label(tree.label)}"];')
        if parent is not None:
            lines.append(f'  {parent} -> {node_id} [label="{escape_label(edge)}"];')
        for child_edge, child in reversed(tree.children):
            stack.append((child, node_id, child_edge))
    lines.append("}")
    return "\n".join(lines) + "\n"
