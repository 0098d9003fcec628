"""JSON serialization/deserialization for Mp AST.

This module converts between Mp AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. Literal values are stored
with their Mp type name so that `1` and `1.0` survive the round-trip.
"""

from __future__ import annotations

from typing import Any, Dict

from .ast import (
    Program,
    Literal,
    ArrayLit,
    ObjectLit,
    Variable,
    BinaryOp,
    UnaryOp,
    Call,
    If,
    Block,
    While,
    ExprStmt,
    LetStmt,
    FuncDecl,
    ResultStmt,
    ReturnStmt,
)
from .types import BoolVal, FloatVal, IntVal, StrVal, Value, type_name


_LITERAL_TYPES = {
    'Int': IntVal,
    'Float': FloatVal,
    'Boolean': BoolVal,
    'String': StrVal,
}


def value_to_obj(value: Value) -> Dict[str, Any]:
    kind = type_name(value)
    if kind not in _LITERAL_TYPES:
        raise TypeError(f"Unsupported literal value for serialization: {value!r}")
    return {"kind": kind, "value": value.value}


def value_from_obj(o: Dict[str, Any]) -> Value:
    kind = o["kind"]
    if kind not in _LITERAL_TYPES:
        raise ValueError(f"Unknown literal kind: {kind}")
    raw = o["value"]
    if kind == 'Float':
        raw = float(raw)
    return _LITERAL_TYPES[kind](raw)


def ast_to_obj(node: Any) -> Any:
    if node is None:
        return None

    if isinstance(node, Program):
        return {"type": "Program", "body": [ast_to_obj(n) for n in node.body]}
    if isinstance(node, LetStmt):
        return {"type": "LetStmt", "name": node.name, "value": ast_to_obj(node.value)}
    if isinstance(node, FuncDecl):
        return {
            "type": "FuncDecl",
            "name": node.name,
            "params": list(node.params),
            "body": ast_to_obj(node.body),
        }
    if isinstance(node, ExprStmt):
        return {"type": "ExprStmt", "expr": ast_to_obj(node.expr)}
    if isinstance(node, ResultStmt):
        return {"type": "ResultStmt", "expr": ast_to_obj(node.expr)}
    if isinstance(node, ReturnStmt):
        return {"type": "ReturnStmt", "value": ast_to_obj(node.value)}
    if isinstance(node, Block):
        return {"type": "Block", "statements": [ast_to_obj(s) for s in node.statements]}
    if isinstance(node, If):
        return {
            "type": "If",
            "condition": ast_to_obj(node.condition),
            "then_branch": ast_to_obj(node.then_branch),
            "else_branch": ast_to_obj(node.else_branch),
        }
    if isinstance(node, While):
        return {"type": "While", "condition": ast_to_obj(node.condition), "body": ast_to_obj(node.body)}
    if isinstance(node, BinaryOp):
        return {"type": "BinaryOp", "op": node.op, "left": ast_to_obj(node.left), "right": ast_to_obj(node.right)}
    if isinstance(node, UnaryOp):
        return {"type": "UnaryOp", "op": node.op, "operand": ast_to_obj(node.operand)}
    if isinstance(node, Literal):
        return {"type": "Literal", "value": value_to_obj(node.value)}
    if isinstance(node, Variable):
        return {"type": "Variable", "name": node.name}
    if isinstance(node, ArrayLit):
        return {"type": "ArrayLit", "elements": [ast_to_obj(e) for e in node.elements]}
    if isinstance(node, ObjectLit):
        return {"type": "ObjectLit", "entries": [[k, ast_to_obj(v)] for (k, v) in node.entries]}
    if isinstance(node, Call):
        return {"type": "Call", "name": node.name, "args": [ast_to_obj(a) for a in node.args]}

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None:
        return None
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")
    if t == "Program":
        return Program(body=[ast_from_obj(n) for n in obj["body"]])
    if t == "LetStmt":
        return LetStmt(name=obj["name"], value=ast_from_obj(obj["value"]))
    if t == "FuncDecl":
        return FuncDecl(name=obj["name"], params=list(obj["params"]), body=ast_from_obj(obj["body"]))
    if t == "ExprStmt":
        return ExprStmt(expr=ast_from_obj(obj["expr"]))
    if t == "ResultStmt":
        return ResultStmt(expr=ast_from_obj(obj["expr"]))
    if t == "ReturnStmt":
        return ReturnStmt(value=ast_from_obj(obj.get("value")))
    if t == "Block":
        return Block(statements=[ast_from_obj(s) for s in obj["statements"]])
    if t == "If":
        return If(
            condition=ast_from_obj(obj["condition"]),
            then_branch=ast_from_obj(obj["then_branch"]),
            else_branch=ast_from_obj(obj.get("else_branch")),
        )
    if t == "While":
        return While(condition=ast_from_obj(obj["condition"]), body=ast_from_obj(obj["body"]))
    if t == "BinaryOp":
        return BinaryOp(op=obj["op"], left=ast_from_obj(obj["left"]), right=ast_from_obj(obj["right"]))
    if t == "UnaryOp":
        return UnaryOp(op=obj["op"], operand=ast_from_obj(obj["operand"]))
    if t == "Literal":
        return Literal(value=value_from_obj(obj["value"]))
    if t == "Variable":
        return Variable(name=obj["name"])
    if t == "ArrayLit":
        return ArrayLit(elements=[ast_from_obj(e) for e in obj["elements"]])
    if t == "ObjectLit":
        return ObjectLit(entries=[(k, ast_from_obj(v)) for (k, v) in obj["entries"]])
    if t == "Call":
        return Call(name=obj["name"], args=[ast_from_obj(a) for a in obj["args"]])

    raise ValueError(f"Unknown AST node type: {t}")
