from __future__ import annotations

from enum import Enum
from typing import Any


class MpError(Exception):
    """Base class for every error raised while running Mp code."""


class LexErrorKind(Enum):
    UNEXPECTED_CHAR = 'Unexpected character'
    INVALID_NUMBER = 'Invalid number'
    INVALID_ESCAPE = 'Invalid escape sequence'
    UNCLOSED_STRING = 'Unclosed string literal'
    UNCLOSED_COMMENT = 'Unclosed block comment'


class LexError(MpError):
    """Raised by the lexer when the source cannot be split into tokens."""
    def __init__(self, kind: LexErrorKind, line: int, column: int, detail: str = ''):
        message = f"{line}:{column}: {kind.value}"
        if detail:
            message += f": {detail!r}"
        super().__init__(message)
        self.kind = kind
        self.line = line
        self.column = column
        self.detail = detail


class ParseErrorKind(Enum):
    UNEXPECTED_TOKEN = 'Unexpected token'
    UNEXPECTED_EOF = 'Unexpected end of input'
    INVALID_SYNTAX = 'Invalid syntax'


class ParseError(MpError):
    """Raised by the parser on the first structural error; there is no recovery."""
    def __init__(self, kind: ParseErrorKind, token: Any, message: str):
        self.kind = kind
        self.token = token
        self.message = message
        self.line = token.line if token is not None else 0
        self.column = token.column if token is not None else 0
        if kind is ParseErrorKind.UNEXPECTED_TOKEN:
            head = f"{kind.value} {token.lexeme()!r}"
        else:
            head = kind.value
        super().__init__(f"{self.line}:{self.column}: {head}: {message}")


class InterpreterError(MpError):
    """Base class for runtime errors raised by the evaluator and built-ins."""


class UndefinedVariable(InterpreterError):
    def __init__(self, name: str):
        super().__init__(f"undefined variable: {name}")
        self.name = name


class TypeMismatch(InterpreterError):
    def __init__(self, context: str):
        super().__init__(f"type mismatch: {context}")
        self.context = context


class InvalidOperation(InterpreterError):
    def __init__(self, context: str):
        super().__init__(f"invalid operation: {context}")
        self.context = context


class ReturnSignal:
    """Outcome of a `return` statement.

    It is handed back up through every evaluation step as a value, never
    raised, until a function call boundary or the top level unwraps it.
    """
    __slots__ = ('value',)

    def __init__(self, value: Any):
        self.value = value

    def __repr__(self) -> str:
        return f"ReturnSignal({self.value!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ReturnSignal) and other.value == self.value
