"""Abstract Syntax Tree (AST) definitions for QueryScript.

A `Program` is the ordered list of top-level statements. Every expression
is an `Expr` pairing a source `Span` with a node payload; composite nodes
own their child `Expr`s outright.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from .lexer import Span


@dataclass
class Node:
    """Base class for all expression payloads."""
    pass


@dataclass
class Expr:
    span: Span
    node: Node


@dataclass
class Program:
    stmts: List[Expr]


@dataclass
class BinaryOp(Node):
    lhs: Expr
    rhs: Expr

    symbol = '?'


@dataclass
class Add(BinaryOp):
    symbol = '+'


@dataclass
class Sub(BinaryOp):
    symbol = '-'


@dataclass
class Mul(BinaryOp):
    symbol = '*'


@dataclass
class Div(BinaryOp):
    symbol = '/'


@dataclass
class Mod(BinaryOp):
    symbol = '%'


@dataclass
class Var(Node):
    name: str


@dataclass
class Assign(Node):
    name: str
    value: Expr


@dataclass
class Call(Node):
    """Single-argument call of the function bound to `name`."""
    name: str
    arg: Expr


@dataclass
class Return(Node):
    value: Expr


@dataclass
class NumberLit(Node):
    value: float


@dataclass
class StringLit(Node):
    value: str


@dataclass
class ListLit(Node):
    elements: List[Expr]


BINARY_OPS = {cls.__name__: cls for cls in (Add, Sub, Mul, Div, Mod)}
