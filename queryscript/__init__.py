# QueryScript package
# This package provides a tokenizer, parser and interpreter for the QueryScript language.
from .errors import (
    QueryError, LexingError, ParsingError, VariableNotDefined, InvalidType,
    MathError, EmptyProgramError, NestingTooDeep,
)
from .interpreter import evaluate, run_file, Interpreter
from .lexer import tokenize, Token, Span
from .parser import parse, parse_program

__all__ = [
    'evaluate',
    'run_file',
    'Interpreter',
    'tokenize',
    'Token',
    'Span',
    'parse',
    'parse_program',
    'QueryError',
    'LexingError',
    'ParsingError',
    'VariableNotDefined',
    'InvalidType',
    'MathError',
    'EmptyProgramError',
    'NestingTooDeep',
]
