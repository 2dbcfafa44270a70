"""Interpreter for QueryScript.

This module ties the pipeline together: source text is tokenized and
parsed (see `lexer` and `parser`), then `Interpreter` walks the resulting
AST depth first against a fresh `Environment` seeded with the native
functions. The value of the last statement is the program's result.

Errors are raised as `QueryError` subclasses as soon as they occur; a
failing statement stops the whole program.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, Dict, List, Mapping, Optional

from .ast import (
    Program, Expr, BinaryOp, Add, Sub, Mul, Div, Mod, Var, Assign, Call,
    Return, NumberLit, StringLit, ListLit,
)
from .builtin_function import NativeFunction
from .environment import Environment
from .errors import EmptyProgramError, InvalidType, MathError, NestingTooDeep
from .parser import parse_program
from .std import ConsoleSink, standard_natives
from .types import ListVal, is_number, to_string, type_name

logger = logging.getLogger(__name__)


def fmod(a: float, b: float) -> float:
    # math.fmod raises for an infinite dividend where IEEE gives NaN
    try:
        return math.fmod(a, b)
    except ValueError:
        return math.nan


ARITHMETIC: Dict[type, Callable[[float, float], float]] = {
    Add: lambda a, b: a + b,
    Sub: lambda a, b: a - b,
    Mul: lambda a, b: a * b,
    Div: lambda a, b: a / b,
    Mod: fmod,
}


class Interpreter:
    """Evaluates QueryScript programs.

    `sink` receives the renderings emitted by `print` and by `return`
    expressions; it defaults to standard output. `natives` maps extra
    names to host callables taking the list of evaluated arguments.
    """

    def __init__(self, sink: Optional[Any] = None, natives: Optional[Mapping[str, Callable]] = None):
        self.sink = sink if sink is not None else ConsoleSink()
        self.natives = standard_natives(self.sink, natives)

    def new_environment(self) -> Environment:
        return Environment(self.natives)

    # Public API
    def run(self, program: Program, env: Optional[Environment] = None) -> Any:
        if not program.stmts:
            raise EmptyProgramError()
        if env is None:
            env = self.new_environment()
        logger.info("running program with %d statement(s)", len(program.stmts))
        result = None
        for stmt in program.stmts:
            try:
                result = self.evaluate(stmt, env)
            except RecursionError:
                raise NestingTooDeep(stmt.span) from None
            logger.debug("statement %d..%d -> %s", stmt.span.lo, stmt.span.hi, to_string(result))
        logger.info("result: %s", to_string(result))
        return result

    def evaluate(self, expr: Expr, env: Environment) -> Any:
        node = expr.node
        if isinstance(node, NumberLit):
            return node.value
        if isinstance(node, StringLit):
            return node.value
        if isinstance(node, BinaryOp):
            return self.evaluate_chain(expr, env)
        if isinstance(node, Var):
            return env.get(node.name, expr.span)
        if isinstance(node, Assign):
            value = self.evaluate(node.value, env)
            env.set(node.name, value)
            return value
        if isinstance(node, Call):
            arg = self.evaluate(node.arg, env)
            func = env.get(node.name, expr.span)
            return self.call_function(node.name, func, [arg], expr)
        if isinstance(node, Return):
            value = self.evaluate(node.value, env)
            self.sink.emit(to_string(value))
            return value
        if isinstance(node, ListLit):
            return ListVal(tuple(self.evaluate(element, env) for element in node.elements))
        raise NotImplementedError(f"evaluate: unexpected node type {type(node)}")

    def evaluate_chain(self, expr: Expr, env: Environment) -> Any:
        """Evaluate a left-leaning run of binary operators such as `1 + 2 - 3`.

        The run is folded in a loop from its leftmost operand, so long sums
        do not consume a stack frame per operator.
        """
        chain: List[Expr] = []
        while isinstance(expr.node, BinaryOp):
            chain.append(expr)
            expr = expr.node.lhs
        value = self.evaluate(expr, env)
        for op_expr in reversed(chain):
            rhs = self.evaluate(op_expr.node.rhs, env)
            value = self.apply_binary_op(op_expr.node, value, rhs, op_expr)
        return value

    def apply_binary_op(self, node: BinaryOp, a: Any, b: Any, expr: Expr) -> Any:
        for operand in (a, b):
            if not is_number(operand):
                raise InvalidType(
                    f"cannot apply '{node.symbol}' to {type_name(a)} and {type_name(b)}",
                    expr.span,
                )
        if isinstance(node, (Div, Mod)) and b == 0.0:
            raise MathError('division by zero', expr.span)
        return float(ARITHMETIC[type(node)](float(a), float(b)))

    def call_function(self, name: str, func: Any, args: List[Any], expr: Expr) -> Any:
        if not isinstance(func, NativeFunction):
            raise InvalidType(f"{name} is not callable ({type_name(func)})", expr.span)
        logger.debug("call %s with %d argument(s)", name, len(args))
        return func(args)


def evaluate(source: str, sink: Optional[Any] = None, natives: Optional[Mapping[str, Callable]] = None) -> Any:
    """Tokenize, parse and run `source`, returning the last statement's value."""
    program = parse_program(source)
    return Interpreter(sink=sink, natives=natives).run(program)


def run_file(file_path: str, sink: Optional[Any] = None, natives: Optional[Mapping[str, Callable]] = None) -> Any:
    """Evaluate a QueryScript file."""
    with open(file_path, 'r', encoding='utf-8') as f:
        source = f.read()
    return evaluate(source, sink=sink, natives=natives)
