"""Lexer for the Mp language.

Tokenization is delegated to a lark grammar used with the basic lexer only:
the grammar's single rule accepts any sequence of terminals, and
`Lark.lex` is used to stream them out. Each lark token is then converted
into a `Token` carrying a decoded payload and its 1-based source position.

Newlines are significant to the parser (they decide which statement is a
block's value), so they are emitted as `NEWLINE` tokens rather than being
ignored. Comments are emitted as `COMMENT` tokens; the parser drops them.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List

from lark import Lark
from lark.exceptions import UnexpectedCharacters

from .errors import LexError, LexErrorKind


class TokenKind(Enum):
    NUMBER = 'number'
    BOOLEAN = 'boolean'
    STRING = 'string'
    IDENTIFIER = 'identifier'
    COMMENT = 'comment'
    LET = 'let'
    FN = 'fn'
    IF = 'if'
    ELSE = 'else'
    WHILE = 'while'
    RETURN = 'return'
    PLUS = '+'
    MINUS = '-'
    STAR = '*'
    SLASH = '/'
    ASSIGN = '='
    EQUAL_EQUAL = '=='
    NOT_EQUAL = '!='
    GREATER = '>'
    GREATER_EQUAL = '>='
    LESS = '<'
    LESS_EQUAL = '<='
    LEFT_PAREN = '('
    RIGHT_PAREN = ')'
    LEFT_BRACE = '{'
    RIGHT_BRACE = '}'
    LEFT_BRACKET = '['
    RIGHT_BRACKET = ']'
    COMMA = ','
    SEMICOLON = ';'
    COLON = ':'
    NEWLINE = 'newline'
    EOF = 'eof'


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: Any
    line: int
    column: int

    def lexeme(self) -> str:
        """Source text for this token, as `render_tokens` writes it."""
        kind = self.kind
        if kind is TokenKind.NUMBER:
            return format_number(self.value)
        if kind is TokenKind.BOOLEAN:
            return 'true' if self.value else 'false'
        if kind is TokenKind.STRING:
            return '"' + ''.join(_ESCAPES_OUT.get(c, c) for c in self.value) + '"'
        if kind is TokenKind.IDENTIFIER:
            return self.value
        if kind is TokenKind.COMMENT:
            if '*/' in self.value:
                return '//' + self.value
            return '/*' + self.value + '*/'
        if kind is TokenKind.NEWLINE:
            return '\n'
        if kind is TokenKind.EOF:
            return ''
        return kind.value


MP_TOKEN_GRAMMAR = r"""
    start: _token*
    _token: NUMBER | STRING | COMMENT | NAME
          | LET | FN | IF | ELSE | WHILE | RETURN | TRUE | FALSE
          | EQUAL_EQUAL | NOT_EQUAL | GREATER_EQUAL | LESS_EQUAL
          | PLUS | MINUS | STAR | SLASH | ASSIGN | GREATER | LESS
          | LEFT_PAREN | RIGHT_PAREN | LEFT_BRACE | RIGHT_BRACE
          | LEFT_BRACKET | RIGHT_BRACKET | COMMA | SEMICOLON | COLON
          | NEWLINE | UNCLOSED_STRING | UNCLOSED_COMMENT

    // Literals. Unterminated strings and comments get their own lower
    // priority terminals so they can be reported precisely.
    STRING.3: /"(\\[\s\S]|[^"\\])*"/
    UNCLOSED_STRING.2: /"(\\[\s\S]|[^"\\])*/
    COMMENT.3: /\/\/[^\n]*/ | /\/\*[\s\S]*?\*\//
    UNCLOSED_COMMENT.2: /\/\*[\s\S]*/
    NUMBER: /[0-9][0-9.]*/
    NAME: /[A-Za-z_][A-Za-z0-9_]*/

    // Keywords; the basic lexer re-types a NAME that matches one exactly.
    LET: "let"
    FN: "fn"
    IF: "if"
    ELSE: "else"
    WHILE: "while"
    RETURN: "return"
    TRUE: "true"
    FALSE: "false"

    EQUAL_EQUAL: "=="
    NOT_EQUAL: "!="
    GREATER_EQUAL: ">="
    LESS_EQUAL: "<="
    PLUS: "+"
    MINUS: "-"
    STAR: "*"
    SLASH: "/"
    ASSIGN: "="
    GREATER: ">"
    LESS: "<"
    LEFT_PAREN: "("
    RIGHT_PAREN: ")"
    LEFT_BRACE: "{"
    RIGHT_BRACE: "}"
    LEFT_BRACKET: "["
    RIGHT_BRACKET: "]"
    COMMA: ","
    SEMICOLON: ";"
    COLON: ":"
    NEWLINE: /\n/

    WS: /[ \t\r\f]+/
    %ignore WS
"""


MP_LEXER = Lark(
    MP_TOKEN_GRAMMAR,
    parser='lalr',
    lexer='basic',
)


# Terminals whose kind is fixed; the rest carry a payload and are decoded below.
_FIXED_KINDS = {
    'LET': TokenKind.LET,
    'FN': TokenKind.FN,
    'IF': TokenKind.IF,
    'ELSE': TokenKind.ELSE,
    'WHILE': TokenKind.WHILE,
    'RETURN': TokenKind.RETURN,
    'EQUAL_EQUAL': TokenKind.EQUAL_EQUAL,
    'NOT_EQUAL': TokenKind.NOT_EQUAL,
    'GREATER_EQUAL': TokenKind.GREATER_EQUAL,
    'LESS_EQUAL': TokenKind.LESS_EQUAL,
    'PLUS': TokenKind.PLUS,
    'MINUS': TokenKind.MINUS,
    'STAR': TokenKind.STAR,
    'SLASH': TokenKind.SLASH,
    'ASSIGN': TokenKind.ASSIGN,
    'GREATER': TokenKind.GREATER,
    'LESS': TokenKind.LESS,
    'LEFT_PAREN': TokenKind.LEFT_PAREN,
    'RIGHT_PAREN': TokenKind.RIGHT_PAREN,
    'LEFT_BRACE': TokenKind.LEFT_BRACE,
    'RIGHT_BRACE': TokenKind.RIGHT_BRACE,
    'LEFT_BRACKET': TokenKind.LEFT_BRACKET,
    'RIGHT_BRACKET': TokenKind.RIGHT_BRACKET,
    'COMMA': TokenKind.COMMA,
    'SEMICOLON': TokenKind.SEMICOLON,
    'COLON': TokenKind.COLON,
    'NEWLINE': TokenKind.NEWLINE,
}

_ESCAPES_IN = {'n': '\n', 't': '\t', 'r': '\r', '"': '"', '\\': '\\'}
_ESCAPES_OUT = {'\n': '\\n', '\t': '\\t', '\r': '\\r', '"': '\\"', '\\': '\\\\'}


def parse_number(text: str, line: int, column: int) -> int | float:
    """Integral text becomes an int, anything else with dots a float."""
    try:
        if text.isdigit():
            return int(text)
        value = float(text)
    except ValueError:
        raise LexError(LexErrorKind.INVALID_NUMBER, line, column, text) from None
    if math.isinf(value):
        raise LexError(LexErrorKind.INVALID_NUMBER, line, column, text)
    return value


def format_number(value: int | float) -> str:
    if isinstance(value, int):
        return str(value)
    text = repr(value)
    # The lexer has no exponent syntax, so spell large/small floats out.
    if 'e' in text:
        text = format(value, 'f')
    return text


def unescape(raw: str, line: int, column: int) -> str:
    """Decode the body of a string literal (without its quotes)."""
    out: List[str] = []
    i = 0
    while i < len(raw):
        c = raw[i]
        if c == '\\':
            nxt = raw[i + 1]
            if nxt not in _ESCAPES_IN:
                raise LexError(LexErrorKind.INVALID_ESCAPE, line, column, '\\' + nxt)
            out.append(_ESCAPES_IN[nxt])
            i += 2
            continue
        out.append(c)
        i += 1
    return ''.join(out)


def _end_position(source: str) -> tuple[int, int]:
    line = source.count('\n') + 1
    last_newline = source.rfind('\n')
    return line, len(source) - last_newline


def tokenize(source: str) -> List[Token]:
    """Convert source code into a list of tokens ending with `EOF`.

    Raises `LexError` on the first character sequence that is not a token.
    """
    tokens: List[Token] = []
    try:
        for tok in MP_LEXER.lex(source):
            line, column = tok.line, tok.column
            ttype = tok.type
            if ttype in _FIXED_KINDS:
                tokens.append(Token(_FIXED_KINDS[ttype], None, line, column))
            elif ttype == 'NUMBER':
                tokens.append(Token(TokenKind.NUMBER, parse_number(str(tok), line, column), line, column))
            elif ttype in ('TRUE', 'FALSE'):
                tokens.append(Token(TokenKind.BOOLEAN, ttype == 'TRUE', line, column))
            elif ttype == 'STRING':
                tokens.append(Token(TokenKind.STRING, unescape(str(tok)[1:-1], line, column), line, column))
            elif ttype == 'NAME':
                tokens.append(Token(TokenKind.IDENTIFIER, str(tok), line, column))
            elif ttype == 'COMMENT':
                text = str(tok)
                body = text[2:] if text.startswith('//') else text[2:-2]
                tokens.append(Token(TokenKind.COMMENT, body, line, column))
            elif ttype == 'UNCLOSED_STRING':
                raise LexError(LexErrorKind.UNCLOSED_STRING, line, column)
            elif ttype == 'UNCLOSED_COMMENT':
                raise LexError(LexErrorKind.UNCLOSED_COMMENT, line, column)
            else:
                raise LexError(LexErrorKind.UNEXPECTED_CHAR, line, column, str(tok))
    except UnexpectedCharacters as e:
        raise LexError(LexErrorKind.UNEXPECTED_CHAR, e.line, e.column, e.char) from e
    line, column = _end_position(source)
    tokens.append(Token(TokenKind.EOF, None, line, column))
    return tokens


def render_tokens(tokens: Iterable[Token]) -> str:
    """Pretty-print a token stream back into source text.

    Tokens on one line are separated by single spaces; `NEWLINE` tokens start
    a new line. Tokenizing the result yields the same token kinds and values.
    """
    lines: List[str] = []
    current: List[str] = []
    for tok in tokens:
        if tok.kind is TokenKind.EOF:
            break
        if tok.kind is TokenKind.NEWLINE:
            lines.append(' '.join(current))
            current = []
            continue
        current.append(tok.lexeme())
    lines.append(' '.join(current))
    return '\n'.join(lines)
