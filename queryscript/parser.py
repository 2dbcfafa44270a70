"""Parser for QueryScript.

The grammar is handed to a Lark LALR parser. Lark does not scan the text
itself: a custom lexer class feeds it the `(Token, Span)` stream produced
by `queryscript.lexer.tokenize`, so every terminal is `%declare`d below.
The resulting parse tree is turned into the AST by `ASTTransformer`,
which also derives each node's span from its first and last child.

`parse_program` is the public entry point and returns a `Program`.
"""

from __future__ import annotations

import logging
from typing import Iterable, Tuple

from lark import Lark, v_args
from lark import Token as LarkToken
from lark.exceptions import UnexpectedInput, UnexpectedToken
from lark.lexer import Lexer
from lark.visitors import Transformer_NonRecursive

from .ast import (
    Program, Expr, Add, Sub, Mul, Div, Mod, Var, Assign, Call, Return,
    NumberLit, StringLit, ListLit,
)
from .errors import NestingTooDeep, ParsingError
from .lexer import Span, Token, TOKEN_KINDS, tokenize

logger = logging.getLogger(__name__)


QUERY_GRAMMAR = r"""
    start: statement*

    statement: RETURN assignment SEMICOLON       -> return_stmt
             | assignment SEMICOLON              -> expr_stmt

    // Calls and assignments are recognised before falling through to object
    ?assignment: IDENT LPAR assignment RPAR      -> call
               | IDENT EQUAL assignment          -> assign
               | object

    ?object: LSQB elements RSQB                  -> list_literal
           | LSQB RSQB                           -> empty_list
           | term

    elements: object                             -> first_element
            | elements COMMA object              -> next_element

    ?term: term PLUS factor                      -> add
         | term MINUS factor                     -> sub
         | factor

    ?factor: factor STAR atom                    -> mul
           | factor SLASH atom                   -> div
           | factor PERCENT atom                 -> mod
           | atom

    ?atom: IDENT                                 -> var
         | NUMBER                                -> number
         | STRING                                -> string
         | LPAR assignment RPAR                  -> group

    %declare """ + ' '.join(TOKEN_KINDS) + "\n"


FRIENDLY_TOKEN_NAMES = {
    'IDENT': 'identifier',
    'RETURN': "'return'",
    'NUMBER': 'number',
    'STRING': 'string',
    'EQUAL': "'='",
    'PLUS': "'+'",
    'MINUS': "'-'",
    'STAR': "'*'",
    'SLASH': "'/'",
    'PERCENT': "'%'",
    'LPAR': "'('",
    'RPAR': "')'",
    'LSQB': "'['",
    'RSQB': "']'",
    'COMMA': "','",
    'SEMICOLON': "';'",
    '$END': 'end of input',
}


class TokenStreamLexer(Lexer):
    """Adapts a `(Token, Span)` stream to the tokens Lark expects.

    Lark hands `lex` whatever object was given to `parse`: either source
    text, which is tokenized here, or an already started token stream.
    """

    def __init__(self, lexer_conf):
        pass

    def lex(self, data):
        if isinstance(data, str):
            data = tokenize(data)
        for token, span in data:
            yield LarkToken(token.kind, token.value, start_pos=span.lo, end_pos=span.hi)


QUERY_PARSER = Lark(
    QUERY_GRAMMAR,
    parser='lalr',
    lexer=TokenStreamLexer,
)


def token_span(item) -> Span:
    if isinstance(item, Expr):
        return item.span
    return Span(item.start_pos, item.end_pos)


def span_of(first, last) -> Span:
    return token_span(first).cover(token_span(last))


@v_args(inline=True)
class ASTTransformer(Transformer_NonRecursive):
    """Transforms the raw parse tree into an AST.

    Left-recursive rules make the parse tree as deep as a list or sum is
    long, so the tree is walked without recursion.
    """

    def start(self, *statements):
        return Program(stmts=list(statements))

    def return_stmt(self, keyword, value, _semicolon):
        return Expr(span_of(keyword, value), Return(value))

    def expr_stmt(self, expr, _semicolon):
        return expr

    def call(self, name, _lpar, arg, rpar):
        return Expr(span_of(name, rpar), Call(str(name.value), arg))

    def assign(self, name, _equal, value):
        return Expr(span_of(name, value), Assign(str(name.value), value))

    def list_literal(self, lsqb, elements, rsqb):
        return Expr(span_of(lsqb, rsqb), ListLit(elements))

    def empty_list(self, lsqb, rsqb):
        return Expr(span_of(lsqb, rsqb), ListLit([]))

    def first_element(self, element):
        return [element]

    def next_element(self, elements, _comma, element):
        elements.append(element)
        return elements

    def add(self, lhs, _op, rhs):
        return Expr(span_of(lhs, rhs), Add(lhs, rhs))

    def sub(self, lhs, _op, rhs):
        return Expr(span_of(lhs, rhs), Sub(lhs, rhs))

    def mul(self, lhs, _op, rhs):
        return Expr(span_of(lhs, rhs), Mul(lhs, rhs))

    def div(self, lhs, _op, rhs):
        return Expr(span_of(lhs, rhs), Div(lhs, rhs))

    def mod(self, lhs, _op, rhs):
        return Expr(span_of(lhs, rhs), Mod(lhs, rhs))

    def var(self, name):
        return Expr(token_span(name), Var(str(name.value)))

    def number(self, token):
        return Expr(token_span(token), NumberLit(token.value))

    def string(self, token):
        return Expr(token_span(token), StringLit(token.value))

    def group(self, _lpar, inner, _rpar):
        return inner


def describe_expected(expected) -> str:
    names = [FRIENDLY_TOKEN_NAMES.get(e, e) for e in sorted(expected)]
    if not names:
        return ''
    if len(names) == 1:
        return f"expected {names[0]}"
    return f"expected one of: {', '.join(names[:-1])} or {names[-1]}"


def translate_lark_error(err: UnexpectedInput) -> ParsingError:
    """Turn a Lark parse failure into a ParsingError."""
    if isinstance(err, UnexpectedToken):
        found = err.token
        expected = describe_expected(err.expected)
        if found.type == '$END':
            message = 'unexpected end of input'
            if expected:
                message += f", {expected}"
            span = Span(found.end_pos, found.end_pos) if found.end_pos is not None else None
            return ParsingError(message, None, span)
        token = Token(found.type, found.value)
        message = f"unexpected {FRIENDLY_TOKEN_NAMES.get(found.type, found.type)} {str(found.value)!r}"
        if expected:
            message += f", {expected}"
        return ParsingError(message, token, Span(found.start_pos, found.end_pos))
    return ParsingError(str(err))


def parse(tokens: Iterable[Tuple[Token, Span]]) -> Program:
    """Parse a token stream into a Program.

    Lexing failures raised while the stream is consumed propagate as they
    are; grammar violations raise ParsingError.
    """
    try:
        tree = QUERY_PARSER.parse(iter(tokens))
    except UnexpectedInput as err:
        raise translate_lark_error(err) from None
    try:
        program = ASTTransformer().transform(tree)
    except RecursionError:
        raise NestingTooDeep() from None
    logger.debug("parsed %d statement(s)", len(program.stmts))
    return program


def parse_program(source: str) -> Program:
    """Parse QueryScript source code into an AST Program."""
    return parse(tokenize(source))
