# linecalc.py
"""
Left-to-right integer calculator core.

A line such as "2 + 3 * 4" is scanned by the Lexer one token at a time, the
Parser checks the token order against

    expr := INTEGER (OPERATOR INTEGER)+

and folds every operator/operand pair into a running accumulator as soon as it
is read. There is no operator precedence and no tree: "2 + 3 * 4" is (2 + 3) * 4.

Modules, Classes, and Functions Implemented
-------------------------------------------
- Error classes: CalcError, LexError, ParseError, ExpectedInteger, ExpectedOperator,
  EvalError, UnsupportedOperation, DivisionByZeroError
- Tokens: TokenType, Token
- Lexer: Lexer, tokenize()
- Evaluator: apply()
- Parser: Parser, evaluate_line()
- Line outcome: Outcome, try_evaluate(), format_result()
"""

from __future__ import annotations

import logging
import operator
import string
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Callable, Dict, Iterator, List, Optional, Union

logger = logging.getLogger(__name__)

Number = Union[int, float]


def _number_text(n: Number) -> str:
    # Decimal is exempt from the int/str digit limit (sys.set_int_max_str_digits).
    if isinstance(n, int):
        return str(Decimal(n))
    return str(n)

# --------------------------
# Exceptions
# --------------------------

class CalcError(Exception):
    """Base class for every error that aborts evaluation of a line."""
    pass


class LexError(CalcError):
    """Raised when the lexer meets a character it does not recognize."""

    def __init__(self, char: str, pos: int):
        super().__init__(f"cannot parse input {char}")
        self.char = char
        self.pos = pos


class ParseError(CalcError):
    """Raised when a token shows up where the grammar does not allow it."""

    expected = ""

    def __init__(self, token: Token):
        super().__init__(
            f"cannot parse input: {token.text} of type: {token.type.name} {self.expected}"
        )
        self.token = token


class ExpectedInteger(ParseError):
    expected = "into: INTEGER"


class ExpectedOperator(ParseError):
    expected = "into a valid operation"


class EvalError(CalcError):
    """Raised for errors while applying an operator."""
    pass


class UnsupportedOperation(EvalError):
    def __init__(self, op: TokenType):
        super().__init__(f"unsupported operation: {op.name}")
        self.operator = op


class DivisionByZeroError(EvalError):
    pass

# --------------------------
# Tokens
# --------------------------

class TokenType(Enum):
    EOF = "EOF"
    INTEGER = "INTEGER"
    PLUS = "+"
    MINUS = "-"
    MULTIPLY = "*"
    DIVIDE = "/"


OPERATORS = (TokenType.PLUS, TokenType.MINUS, TokenType.MULTIPLY, TokenType.DIVIDE)

_OPERATOR_CHARS: Dict[str, TokenType] = {t.value: t for t in OPERATORS}


@dataclass(frozen=True)
class Token:
    """One lexical unit. Only INTEGER tokens carry a value."""
    type: TokenType
    value: Optional[int] = None
    pos: int = 0

    @property
    def text(self) -> str:
        """The token as it appears in error messages."""
        if self.type is TokenType.INTEGER:
            return _number_text(self.value)
        if self.type is TokenType.EOF:
            return ""
        return self.type.value

    def __repr__(self) -> str:
        if self.type is TokenType.INTEGER:
            return f"Token({self.type.name}, {_number_text(self.value)}, pos={self.pos})"
        return f"Token({self.type.name}, pos={self.pos})"

# --------------------------
# Lexer
# --------------------------

def _is_blank(ch: str) -> bool:
    return not ch.strip()


def _is_digit(ch: str) -> bool:
    # str.isdigit() accepts '²' and other digits int() rejects; '' is "in" every string.
    return len(ch) == 1 and ch in string.digits


class Lexer:
    """Pull-based scanner: every call to next_token() returns one token.

    Reaching the end of the text is not an error; next_token() keeps
    returning EOF from then on.
    """

    def __init__(self, text: str = ""):
        self.text = text
        self.pos = 0

    def reset(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def _skip_whitespace(self) -> None:
        while self.pos < len(self.text) and _is_blank(self.text[self.pos]):
            self.pos += 1

    def _read_integer(self) -> Token:
        start = self.pos
        while self.pos < len(self.text) and _is_digit(self.text[self.pos]):
            self.pos += 1
        digits = self.text[start:self.pos]
        # int(digits) refuses runs longer than the int/str digit limit.
        return Token(TokenType.INTEGER, int(Decimal(digits)), start)

    def next_token(self) -> Token:
        self._skip_whitespace()
        if self.pos >= len(self.text):
            return Token(TokenType.EOF, pos=self.pos)

        ch = self.text[self.pos]
        if ch in _OPERATOR_CHARS:
            self.pos += 1
            return Token(_OPERATOR_CHARS[ch], pos=self.pos - 1)
        if _is_digit(ch):
            return self._read_integer()
        raise LexError(ch, self.pos)

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next_token()
            if token.type is TokenType.EOF:
                return
            yield token


def tokenize(text: str) -> List[Token]:
    """Scan the whole line, returning every token including the final EOF."""
    lexer = Lexer(text)
    tokens = list(lexer)
    tokens.append(Token(TokenType.EOF, pos=lexer.pos))
    return tokens

# --------------------------
# Evaluator
# --------------------------

_OPERATIONS: Dict[TokenType, Callable[[Number, Number], Number]] = {
    TokenType.PLUS: operator.add,
    TokenType.MINUS: operator.sub,
    TokenType.MULTIPLY: operator.mul,
    TokenType.DIVIDE: operator.truediv,
}


def apply(lhs: Number, op: TokenType, rhs: Number) -> Number:
    """Apply one binary operator.

    Division is Python true division, so int / int gives a float. Dividing by
    zero raises DivisionByZeroError rather than producing inf or nan.
    """
    try:
        func = _OPERATIONS[op]
    except KeyError:
        raise UnsupportedOperation(op) from None
    try:
        return func(lhs, rhs)
    except ZeroDivisionError:
        raise DivisionByZeroError(f"division by zero: {_number_text(lhs)} / {_number_text(rhs)}") from None
    except OverflowError as e:
        raise EvalError(f"result out of range: {_number_text(lhs)} {op.value} {_number_text(rhs)} ({e})") from None

# --------------------------
# Parser
# --------------------------

class Parser:
    """Validates token order and reduces each operation into the accumulator."""

    def __init__(self, lexer: Lexer):
        self.lexer = lexer

    def _expect_integer(self, token: Token) -> int:
        if token.type is not TokenType.INTEGER:
            raise ExpectedInteger(token)
        return token.value

    def _expect_operator(self, token: Token) -> TokenType:
        if token.type not in OPERATORS:
            raise ExpectedOperator(token)
        return token.type

    def parse(self) -> Number:
        acc: Number = self._expect_integer(self.lexer.next_token())
        token = self.lexer.next_token()
        while True:
            op = self._expect_operator(token)
            rhs = self._expect_integer(self.lexer.next_token())
            result = apply(acc, op, rhs)
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("reduced %s %s %s -> %s", _number_text(acc), op.value,
                             _number_text(rhs), _number_text(result))
            acc = result
            token = self.lexer.next_token()
            if token.type is TokenType.EOF:
                return acc


def evaluate_line(text: str) -> Number:
    """Evaluate one line strictly left to right.

    Raises LexError, ParseError or EvalError (all CalcError) on failure.
    """
    try:
        return Parser(Lexer(text)).parse()
    except CalcError as e:
        logger.debug("evaluation of %r failed: %s", text, e)
        raise

# --------------------------
# Line outcome
# --------------------------

@dataclass(frozen=True)
class Outcome:
    """Result of evaluating one line: a value or an error, never both."""
    value: Optional[Number] = None
    error: Optional[CalcError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def try_evaluate(text: str) -> Outcome:
    try:
        return Outcome(value=evaluate_line(text))
    except CalcError as e:
        return Outcome(error=e)


def format_result(value: Number) -> str:
    """Render a result the way the REPL prints it (9.0 prints as 9)."""
    if isinstance(value, float):
        if value.is_integer() and abs(value) < 1e16:
            return str(int(value))
        return repr(value)
    return _number_text(value)
