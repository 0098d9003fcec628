"""Abstract Syntax Tree (AST) definitions for the Mp language.

The AST classes defined in this module represent the syntactic structure
of parsed Mp programs. They carry no behaviour; the interpreter walks them
and the tests compare them structurally.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .types import Value


@dataclass
class Node:
    """Base class for all AST nodes."""
    pass


@dataclass
class Program(Node):
    body: List[Node]


# Expressions

@dataclass
class Literal(Node):
    value: Value  # IntVal, FloatVal, BoolVal or StrVal


@dataclass
class ArrayLit(Node):
    elements: List[Node]


@dataclass
class ObjectLit(Node):
    entries: List[Tuple[str, Node]]  # in source order; later keys win


@dataclass
class Variable(Node):
    name: str


@dataclass
class BinaryOp(Node):
    op: str  # '=' for assignment, whose left side is always a Variable
    left: Node
    right: Node


@dataclass
class UnaryOp(Node):
    op: str
    operand: Node


@dataclass
class Call(Node):
    name: str
    args: List[Node]


@dataclass
class If(Node):
    condition: Node
    then_branch: Node
    else_branch: Optional[Node]


@dataclass
class Block(Node):
    statements: List[Node]


@dataclass
class While(Node):
    condition: Node
    body: Block


# Statements

@dataclass
class ExprStmt(Node):
    expr: Node


@dataclass
class LetStmt(Node):
    name: str
    value: Node


@dataclass
class FuncDecl(Node):
    name: str
    params: List[str]
    body: Node


@dataclass
class ResultStmt(Node):
    expr: Node


@dataclass
class ReturnStmt(Node):
    value: Optional[Node]
