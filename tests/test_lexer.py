from pathlib import Path

import pytest

from mplang.errors import LexError, LexErrorKind
from mplang.lexer import TokenKind, render_tokens, tokenize
from mplang.parser import parse

EXAMPLES = Path(__file__).parent.parent / 'examples'


def kinds(source):
    return [t.kind for t in tokenize(source)]


def test_let_statement_tokens():
    tokens = tokenize('let x = 1')
    assert [t.kind for t in tokens] == [
        TokenKind.LET, TokenKind.IDENTIFIER, TokenKind.ASSIGN, TokenKind.NUMBER, TokenKind.EOF,
    ]
    assert tokens[1].value == 'x'
    assert tokens[3].value == 1


def test_positions_are_one_based():
    tokens = tokenize('let\n  x')
    assert (tokens[0].line, tokens[0].column) == (1, 1)
    assert tokens[1].kind is TokenKind.NEWLINE
    assert (tokens[2].line, tokens[2].column) == (2, 3)
    assert (tokens[-1].line, tokens[-1].column) == (2, 4)


def test_operators_prefer_longest_match():
    assert kinds('== != >= <= = > <') == [
        TokenKind.EQUAL_EQUAL, TokenKind.NOT_EQUAL, TokenKind.GREATER_EQUAL,
        TokenKind.LESS_EQUAL, TokenKind.ASSIGN, TokenKind.GREATER, TokenKind.LESS,
        TokenKind.EOF,
    ]


def test_punctuation():
    assert kinds('(){}[],;:+-*/') == [
        TokenKind.LEFT_PAREN, TokenKind.RIGHT_PAREN, TokenKind.LEFT_BRACE,
        TokenKind.RIGHT_BRACE, TokenKind.LEFT_BRACKET, TokenKind.RIGHT_BRACKET,
        TokenKind.COMMA, TokenKind.SEMICOLON, TokenKind.COLON, TokenKind.PLUS,
        TokenKind.MINUS, TokenKind.STAR, TokenKind.SLASH, TokenKind.EOF,
    ]


def test_numbers():
    tokens = tokenize('42 3.5 7.')
    assert tokens[0].value == 42 and isinstance(tokens[0].value, int)
    assert tokens[1].value == 3.5
    assert tokens[2].value == 7.0 and isinstance(tokens[2].value, float)


def test_malformed_number():
    with pytest.raises(LexError) as exc:
        tokenize('x = 1.2.3')
    assert exc.value.kind is LexErrorKind.INVALID_NUMBER
    assert (exc.value.line, exc.value.column) == (1, 5)


def test_float_literal_out_of_range():
    with pytest.raises(LexError) as exc:
        tokenize('1' * 400 + '.0')
    assert exc.value.kind is LexErrorKind.INVALID_NUMBER


def test_keywords_and_identifiers():
    tokens = tokenize('letter iffy true false_ fn2 _tmp while')
    assert [t.kind for t in tokens[:-1]] == [
        TokenKind.IDENTIFIER, TokenKind.IDENTIFIER, TokenKind.BOOLEAN,
        TokenKind.IDENTIFIER, TokenKind.IDENTIFIER, TokenKind.IDENTIFIER,
        TokenKind.WHILE,
    ]
    assert tokens[2].value is True
    assert tokens[3].value == 'false_'


def test_string_escapes():
    tokens = tokenize(r'"a\n\t\"b\"\\"')
    assert tokens[0].kind is TokenKind.STRING
    assert tokens[0].value == 'a\n\t"b"\\'


def test_invalid_escape():
    with pytest.raises(LexError) as exc:
        tokenize(r'"\q"')
    assert exc.value.kind is LexErrorKind.INVALID_ESCAPE


def test_unclosed_string():
    with pytest.raises(LexError) as exc:
        tokenize('let s = "abc')
    assert exc.value.kind is LexErrorKind.UNCLOSED_STRING
    assert (exc.value.line, exc.value.column) == (1, 9)


def test_comments():
    tokens = tokenize('// hi\n/* a\nb */x')
    assert [t.kind for t in tokens] == [
        TokenKind.COMMENT, TokenKind.NEWLINE, TokenKind.COMMENT,
        TokenKind.IDENTIFIER, TokenKind.EOF,
    ]
    assert tokens[0].value == ' hi'
    assert tokens[2].value == ' a\nb '
    assert tokens[3].line == 3


def test_unclosed_comment():
    with pytest.raises(LexError) as exc:
        tokenize('1 /* never closed')
    assert exc.value.kind is LexErrorKind.UNCLOSED_COMMENT


def test_unexpected_character():
    with pytest.raises(LexError) as exc:
        tokenize('let x = 1 @')
    assert exc.value.kind is LexErrorKind.UNEXPECTED_CHAR
    assert (exc.value.line, exc.value.column) == (1, 11)
    assert str(exc.value) == "1:11: Unexpected character: '@'"


def test_render_tokens_layout():
    assert render_tokens(tokenize('let  x=1\nprint( x )')) == 'let x = 1\nprint ( x )'


@pytest.mark.parametrize('path', sorted(EXAMPLES.glob('*.mp')), ids=lambda p: p.name)
def test_rendered_tokens_parse_to_same_program(path):
    tokens = tokenize(path.read_text(encoding='utf-8'))
    rendered = render_tokens(tokens)
    again = tokenize(rendered)
    assert [(t.kind, t.value) for t in again] == [(t.kind, t.value) for t in tokens]
    assert parse(again) == parse(tokens)
