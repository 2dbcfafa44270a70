"""Tokenizer for QueryScript.

`tokenize` turns source text into a lazy stream of `(Token, Span)` pairs.
At every position each lexical rule is tried and the longest match wins;
when two rules match the same length the one listed first wins, which is
how `return` becomes a keyword while `returned` stays an identifier.
Whitespace and `#` line comments are matched like any other rule and then
dropped from the stream.

Spans are half-open UTF-8 byte offsets into the original source.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Tuple

from .errors import LexingError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Span:
    """Half-open byte range `[lo, hi)` into the source."""
    lo: int
    hi: int

    def cover(self, other: 'Span') -> 'Span':
        return Span(min(self.lo, other.lo), max(self.hi, other.hi))

    def text(self, source: str) -> str:
        return source.encode('utf-8')[self.lo:self.hi].decode('utf-8', errors='replace')

    def location(self, source: str) -> Tuple[int, int]:
        """Return the 1-based (line, column) of the start of the span."""
        before = source.encode('utf-8')[:self.lo].decode('utf-8', errors='replace')
        line = before.count('\n') + 1
        column = len(before) - (before.rfind('\n') + 1) + 1
        return line, column


@dataclass(frozen=True)
class Token:
    kind: str
    value: Any = None

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.value!r})"


PUNCTUATION = {
    '=': 'EQUAL',
    '+': 'PLUS',
    '-': 'MINUS',
    '*': 'STAR',
    '/': 'SLASH',
    '%': 'PERCENT',
    '(': 'LPAR',
    ')': 'RPAR',
    '[': 'LSQB',
    ']': 'RSQB',
    ',': 'COMMA',
    ';': 'SEMICOLON',
}

TOKEN_KINDS = ('IDENT', 'RETURN', 'NUMBER', 'STRING') + tuple(PUNCTUATION.values())

# Order matters: it breaks ties between matches of equal length.
RULES = (
    ('WHITESPACE', re.compile(r'[ \t\r\n]+')),
    ('COMMENT', re.compile(r'#[^\n]*')),
    ('RETURN', re.compile(r'return')),
    ('STRING', re.compile(r'"[^"]*"')),
    ('NUMBER', re.compile(r'[0-9]+\.?[0-9]*')),
    ('IDENT', re.compile(r'[A-Za-z_][A-Za-z0-9_]*')),
    ('PUNCT', re.compile(r'[=+\-*/%()\[\],;]')),
)

SKIPPED = frozenset({'WHITESPACE', 'COMMENT'})


def longest_match(source: str, pos: int) -> Tuple[Optional[str], str]:
    """Return the (rule, text) of the longest rule match at `pos`."""
    best_rule: Optional[str] = None
    best_text = ''
    for rule, pattern in RULES:
        m = pattern.match(source, pos)
        if m is not None and len(m.group()) > len(best_text):
            best_rule, best_text = rule, m.group()
    return best_rule, best_text


def make_token(rule: str, text: str, span: Span) -> Token:
    if rule == 'RETURN':
        return Token('RETURN', text)
    if rule == 'STRING':
        return Token('STRING', text[1:-1])
    if rule == 'NUMBER':
        value = float(text)
        if not math.isfinite(value):
            raise LexingError(f"number {text} is out of range", span)
        return Token('NUMBER', value)
    if rule == 'IDENT':
        return Token('IDENT', text)
    return Token(PUNCTUATION[text], text)


def tokenize(source: str) -> Iterator[Tuple[Token, Span]]:
    """Yield the `(Token, Span)` pairs of `source` one at a time.

    Raises LexingError when the input at the current position matches no
    rule, for example a stray `@` or an unterminated string literal.
    """
    pos = 0
    offset = 0
    length = len(source)
    while pos < length:
        rule, text = longest_match(source, pos)
        if rule is None:
            bad = source[pos]
            raise LexingError(f"unexpected character {bad!r}",
                              Span(offset, offset + len(bad.encode('utf-8'))))
        width = len(text.encode('utf-8'))
        span = Span(offset, offset + width)
        pos += len(text)
        offset += width
        if rule in SKIPPED:
            continue
        token = make_token(rule, text, span)
        logger.debug("tok: %r %d..%d", token, span.lo, span.hi)
        yield token, span
