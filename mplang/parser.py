"""Recursive-descent parser for the Mp language.

The parser consumes the token list produced by `mplang.lexer.tokenize` and
builds the AST defined in `mplang.ast`. Newlines are kept in the token
stream: they separate statements, and together with `;` they decide whether
an expression statement is the value of its block (`ResultStmt`) or is run
only for its effect (`ExprStmt`).

An expression statement followed by `;` is always an `ExprStmt`. One that
ends the last non-empty line of its program or block becomes the
`ResultStmt`. One followed by a newline and then another statement is an
`ExprStmt`. Anything else after an expression is a syntax error.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from .ast import (
    Program, Literal, ArrayLit, ObjectLit, Variable, BinaryOp, UnaryOp,
    Call, If, Block, While, ExprStmt, LetStmt, FuncDecl, ResultStmt,
    ReturnStmt, Node,
)
from .errors import ParseError, ParseErrorKind
from .lexer import Token, TokenKind, tokenize
from .types import BoolVal, StrVal, make_number


# Tokens that may end a `let`, `fn` or `return` statement.
STATEMENT_END = (TokenKind.SEMICOLON, TokenKind.NEWLINE, TokenKind.RIGHT_BRACE, TokenKind.EOF)


class Parser:
    def __init__(self, tokens: List[Token]):
        self.tokens = [t for t in tokens if t.kind is not TokenKind.COMMENT]
        if not self.tokens or self.tokens[-1].kind is not TokenKind.EOF:
            last = self.tokens[-1] if self.tokens else None
            line = last.line if last else 1
            column = last.column + 1 if last else 1
            self.tokens.append(Token(TokenKind.EOF, None, line, column))
        self.pos = 0

    # Token helpers

    def peek(self, offset: int = 0) -> Token:
        index = min(self.pos + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def advance(self) -> Token:
        token = self.peek()
        if token.kind is not TokenKind.EOF:
            self.pos += 1
        return token

    def check(self, *kinds: TokenKind) -> bool:
        return self.peek().kind in kinds

    def match(self, *kinds: TokenKind) -> bool:
        if self.check(*kinds):
            self.advance()
            return True
        return False

    def consume(self, kind: TokenKind, message: str) -> Token:
        if self.check(kind):
            return self.advance()
        raise self.error(message)

    def error(self, message: str, token: Optional[Token] = None) -> ParseError:
        token = token or self.peek()
        if token.kind is TokenKind.EOF:
            return ParseError(ParseErrorKind.UNEXPECTED_EOF, token, message)
        return ParseError(ParseErrorKind.UNEXPECTED_TOKEN, token, message)

    def skip_newlines(self) -> bool:
        skipped = False
        while self.check(TokenKind.NEWLINE):
            self.advance()
            skipped = True
        return skipped

    def skip_separators(self):
        while self.check(TokenKind.SEMICOLON, TokenKind.NEWLINE):
            self.advance()

    # Statements

    def parse_program(self) -> Program:
        statements: List[Node] = []
        self.skip_separators()
        while not self.check(TokenKind.EOF):
            statements.append(self.parse_statement())
            self.skip_separators()
        return Program(statements)

    def parse_block(self) -> Block:
        self.consume(TokenKind.LEFT_BRACE, "expected '{'")
        statements: List[Node] = []
        self.skip_separators()
        while not self.check(TokenKind.RIGHT_BRACE):
            if self.check(TokenKind.EOF):
                raise self.error("unterminated block, expected '}'")
            statements.append(self.parse_statement())
            self.skip_separators()
        self.consume(TokenKind.RIGHT_BRACE, "expected '}'")
        return Block(statements)

    def parse_statement(self) -> Node:
        if self.check(TokenKind.LET):
            stmt = self.parse_let_stmt()
        elif self.check(TokenKind.FN):
            stmt = self.parse_func_decl()
        elif self.check(TokenKind.RETURN):
            stmt = self.parse_return_stmt()
        else:
            return self.parse_expression_statement()
        if not self.check(*STATEMENT_END):
            raise self.error("expected ';' or newline after statement")
        return stmt

    def parse_expression_statement(self) -> Node:
        expr = self.parse_expression()
        if self.check(TokenKind.SEMICOLON):
            return ExprStmt(expr)
        skipped = self.skip_newlines()
        if self.check(TokenKind.EOF, TokenKind.RIGHT_BRACE):
            return ResultStmt(expr)
        if skipped:
            return ExprStmt(expr)
        raise self.error("expected ';' or newline after expression")

    def parse_let_stmt(self) -> LetStmt:
        self.consume(TokenKind.LET, "expected 'let'")
        name = self.consume(TokenKind.IDENTIFIER, "expected variable name after 'let'").value
        self.consume(TokenKind.ASSIGN, f"expected '=' after 'let {name}'")
        value = self.parse_expression()
        return LetStmt(name, value)

    def parse_func_decl(self) -> FuncDecl:
        self.consume(TokenKind.FN, "expected 'fn'")
        name = self.consume(TokenKind.IDENTIFIER, "expected function name after 'fn'").value
        params = self.parse_param_list()
        body = self.parse_expression()
        return FuncDecl(name, params, body)

    def parse_param_list(self) -> List[str]:
        self.consume(TokenKind.LEFT_PAREN, "expected '(' before parameters")
        params: List[str] = []
        self.skip_newlines()
        while not self.check(TokenKind.RIGHT_PAREN):
            params.append(self.consume(TokenKind.IDENTIFIER, "expected parameter name").value)
            self.skip_newlines()
            if not self.match(TokenKind.COMMA):
                break
            self.skip_newlines()
        self.consume(TokenKind.RIGHT_PAREN, "expected ')' after parameters")
        return params

    def parse_return_stmt(self) -> ReturnStmt:
        self.consume(TokenKind.RETURN, "expected 'return'")
        if self.check(*STATEMENT_END):
            return ReturnStmt(None)
        return ReturnStmt(self.parse_expression())

    # Expressions

    def parse_expression(self) -> Node:
        if self.check(TokenKind.IF):
            return self.parse_if()
        if self.check(TokenKind.WHILE):
            return self.parse_while()
        return self.parse_assign()

    def parse_if(self) -> If:
        self.consume(TokenKind.IF, "expected 'if'")
        condition = self.parse_expression()
        then_branch = self.parse_expression()
        else_branch = None
        # `else` may start a later line; the newlines are only consumed if it does
        saved = self.pos
        self.skip_newlines()
        if self.match(TokenKind.ELSE):
            else_branch = self.parse_expression()
        else:
            self.pos = saved
        return If(condition, then_branch, else_branch)

    def parse_while(self) -> While:
        self.consume(TokenKind.WHILE, "expected 'while'")
        condition = self.parse_expression()
        body = self.parse_block()
        return While(condition, body)

    # assignment: equality ('=' assignment)?
    def parse_assign(self) -> Node:
        left = self.parse_equality()
        if self.check(TokenKind.ASSIGN):
            op_token = self.advance()
            if not isinstance(left, Variable):
                raise ParseError(ParseErrorKind.INVALID_SYNTAX, op_token,
                                 "left side of '=' must be a variable")
            value = self.parse_assign()
            return BinaryOp('=', left, value)
        return left

    def parse_equality(self) -> Node:
        node = self.parse_comparison()
        while self.check(TokenKind.EQUAL_EQUAL, TokenKind.NOT_EQUAL):
            op_token = self.advance()
            right = self.parse_comparison()
            node = BinaryOp(op_token.kind.value, node, right)
        return node

    def parse_comparison(self) -> Node:
        node = self.parse_term()
        while self.check(TokenKind.GREATER, TokenKind.GREATER_EQUAL,
                         TokenKind.LESS, TokenKind.LESS_EQUAL):
            op_token = self.advance()
            right = self.parse_term()
            node = BinaryOp(op_token.kind.value, node, right)
        return node

    def parse_term(self) -> Node:
        node = self.parse_factor()
        while self.check(TokenKind.PLUS, TokenKind.MINUS):
            op_token = self.advance()
            right = self.parse_factor()
            node = BinaryOp(op_token.kind.value, node, right)
        return node

    def parse_factor(self) -> Node:
        node = self.parse_unary()
        while self.check(TokenKind.STAR, TokenKind.SLASH):
            op_token = self.advance()
            right = self.parse_unary()
            node = BinaryOp(op_token.kind.value, node, right)
        return node

    def parse_unary(self) -> Node:
        if self.check(TokenKind.MINUS):
            op_token = self.advance()
            operand = self.parse_unary()
            return UnaryOp(op_token.kind.value, operand)
        return self.parse_primary()

    def parse_primary(self) -> Node:
        token = self.peek()
        kind = token.kind
        if kind is TokenKind.NUMBER:
            self.advance()
            return Literal(make_number(token.value))
        if kind is TokenKind.BOOLEAN:
            self.advance()
            return Literal(BoolVal(token.value))
        if kind is TokenKind.STRING:
            self.advance()
            return Literal(StrVal(token.value))
        if kind is TokenKind.IDENTIFIER:
            self.advance()
            if self.check(TokenKind.LEFT_PAREN):
                return Call(token.value, self.parse_arguments())
            return Variable(token.value)
        if kind is TokenKind.LEFT_PAREN:
            self.advance()
            expr = self.parse_expression()
            self.consume(TokenKind.RIGHT_PAREN, "expected ')' after expression")
            return expr
        if kind is TokenKind.LEFT_BRACE:
            if self.at_object_literal():
                return self.parse_object()
            return self.parse_block()
        if kind is TokenKind.LEFT_BRACKET:
            return self.parse_array()
        if kind is TokenKind.IF:
            return self.parse_if()
        if kind is TokenKind.WHILE:
            return self.parse_while()
        raise self.error("expected expression")

    def parse_arguments(self) -> List[Node]:
        self.consume(TokenKind.LEFT_PAREN, "expected '(' before arguments")
        args: List[Node] = []
        self.skip_newlines()
        while not self.check(TokenKind.RIGHT_PAREN):
            args.append(self.parse_expression())
            self.skip_newlines()
            if not self.match(TokenKind.COMMA):
                break
            self.skip_newlines()
        self.consume(TokenKind.RIGHT_PAREN, "expected ')' after arguments")
        return args

    def parse_array(self) -> ArrayLit:
        self.consume(TokenKind.LEFT_BRACKET, "expected '['")
        elements: List[Node] = []
        self.skip_newlines()
        while not self.check(TokenKind.RIGHT_BRACKET):
            elements.append(self.parse_expression())
            self.skip_newlines()
            if not self.match(TokenKind.COMMA):
                break
            self.skip_newlines()
        self.consume(TokenKind.RIGHT_BRACKET, "expected ']' after array elements")
        return ArrayLit(elements)

    def at_object_literal(self) -> bool:
        """True when the `{` at the cursor opens `{key: ...}` rather than a block."""
        offset = 1
        while self.peek(offset).kind is TokenKind.NEWLINE:
            offset += 1
        key = self.peek(offset)
        if key.kind not in (TokenKind.IDENTIFIER, TokenKind.STRING):
            return False
        return self.peek(offset + 1).kind is TokenKind.COLON

    def parse_object(self) -> ObjectLit:
        self.consume(TokenKind.LEFT_BRACE, "expected '{'")
        entries: List[Tuple[str, Node]] = []
        self.skip_newlines()
        while not self.check(TokenKind.RIGHT_BRACE):
            entries.append(self.parse_object_entry())
            self.skip_newlines()
            if not self.match(TokenKind.COMMA):
                break
            self.skip_newlines()
        self.consume(TokenKind.RIGHT_BRACE, "expected '}' after object entries")
        return ObjectLit(entries)

    def parse_object_entry(self) -> Tuple[str, Node]:
        if not self.check(TokenKind.IDENTIFIER, TokenKind.STRING):
            raise self.error("expected object key")
        key = self.advance().value
        self.consume(TokenKind.COLON, "expected ':' after object key")
        self.skip_newlines()
        return (key, self.parse_expression())


def parse(tokens: List[Token]) -> Program:
    """Parse a token list into a Program AST."""
    return Parser(tokens).parse_program()


def parse_program(source: str) -> Program:
    """Tokenize and parse Mp source code."""
    return parse(tokenize(source))
