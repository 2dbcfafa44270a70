"""JSON serialization/deserialization for the QueryScript AST.

This module converts between AST dataclasses and plain Python dict/list
structures suitable for JSON encoding. Every `Expr` becomes a dict whose
`type` names its node and whose `span` is a `[lo, hi]` pair. Passing
`spans=False` drops the spans, which leaves only the structure of the tree.
"""

from __future__ import annotations

from typing import Any, Dict

from .ast import (
    BINARY_OPS,
    Program,
    Expr,
    BinaryOp,
    Var,
    Assign,
    Call,
    Return,
    NumberLit,
    StringLit,
    ListLit,
)
from .lexer import Span


def node_to_obj(node: Any, spans: bool) -> Dict[str, Any]:
    if isinstance(node, BinaryOp):
        return {
            "type": type(node).__name__,
            "lhs": ast_to_obj(node.lhs, spans),
            "rhs": ast_to_obj(node.rhs, spans),
        }
    if isinstance(node, Var):
        return {"type": "Var", "name": node.name}
    if isinstance(node, Assign):
        return {"type": "Assign", "name": node.name, "value": ast_to_obj(node.value, spans)}
    if isinstance(node, Call):
        return {"type": "Call", "name": node.name, "arg": ast_to_obj(node.arg, spans)}
    if isinstance(node, Return):
        return {"type": "Return", "value": ast_to_obj(node.value, spans)}
    if isinstance(node, NumberLit):
        return {"type": "Number", "value": node.value}
    if isinstance(node, StringLit):
        return {"type": "String", "value": node.value}
    if isinstance(node, ListLit):
        return {"type": "List", "elements": [ast_to_obj(e, spans) for e in node.elements]}

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_to_obj(node: Any, spans: bool = True) -> Any:
    if isinstance(node, Program):
        return {"type": "Program", "stmts": [ast_to_obj(s, spans) for s in node.stmts]}
    if isinstance(node, Expr):
        obj = node_to_obj(node.node, spans)
        if spans:
            obj["span"] = [node.span.lo, node.span.hi]
        return obj

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")
    if t == "Program":
        return Program(stmts=[ast_from_obj(s) for s in obj["stmts"]])

    lo, hi = obj.get("span", (0, 0))
    span = Span(lo, hi)
    if t in BINARY_OPS:
        node = BINARY_OPS[t](lhs=ast_from_obj(obj["lhs"]), rhs=ast_from_obj(obj["rhs"]))
    elif t == "Var":
        node = Var(name=obj["name"])
    elif t == "Assign":
        node = Assign(name=obj["name"], value=ast_from_obj(obj["value"]))
    elif t == "Call":
        node = Call(name=obj["name"], arg=ast_from_obj(obj["arg"]))
    elif t == "Return":
        node = Return(value=ast_from_obj(obj["value"]))
    elif t == "Number":
        node = NumberLit(value=float(obj["value"]))
    elif t == "String":
        node = StringLit(value=obj["value"])
    elif t == "List":
        node = ListLit(elements=[ast_from_obj(e) for e in obj["elements"]])
    else:
        raise ValueError(f"Unknown AST node type: {t}")
    return Expr(span, node)
