"""Tree-walking evaluator for the Mp language.

The interpreter executes the AST produced by `mplang.parser` against an
`Environment`. Evaluation yields a runtime value from `mplang.types`, or a
`ReturnSignal` when a `return` statement ran. Every step that evaluates a
sub-node checks for a signal and hands it straight back to its caller, so a
`return` unwinds through blocks, loops and operands without using exceptions.
User function calls turn the signal back into a plain value; one that
reaches the top of a program becomes the program's result.

Runtime errors are raised as `InterpreterError` subclasses and abort the
whole evaluation.
"""

from __future__ import annotations

import sys
import threading
from typing import Any, Callable, List, Optional, Union

from .ast import (
    Program, Literal, ArrayLit, ObjectLit, Variable, BinaryOp, UnaryOp,
    Call, If, Block, While, ExprStmt, LetStmt, FuncDecl, ResultStmt,
    ReturnStmt, Node,
)
from .builtin_function import BuiltinFunction
from .environment import Environment
from .errors import InvalidOperation, ReturnSignal, TypeMismatch, UndefinedVariable
from .parser import parse_program
from .std import builtin_environment
from .types import (
    NIL, ArrayVal, BoolVal, FloatVal, IntVal, ObjectVal, Value, inspect, type_name,
)

Outcome = Union[Value, ReturnSignal]

# Each Mp call level costs about a dozen Python frames, so evaluation runs on a
# worker thread with a raised recursion limit and a stack large enough for it.
RECURSION_LIMIT = 50_000
EVAL_STACK_SIZE = 256 * 1024 * 1024


class UserFunction:
    """A function declared with `fn`.

    `frame` is the index of the frame the declaration ran in. Calls open an
    isolated frame whose parent is that frame, so the body sees its own
    parameters and, for function lookups only, the declaration's scope chain.
    """
    def __init__(self, name: str, params: List[str], body: Node, frame: int):
        self.name = name
        self.params = params
        self.body = body
        self.frame = frame

    def __repr__(self) -> str:
        return f"<function {self.name}>"


def run_with_deep_stack(fn: Callable[[], Any]) -> Any:
    """Call `fn` on a worker thread with a deep stack and return its result.

    Exceptions raised by `fn` are re-raised in the calling thread.
    """
    outcome = {}

    def target():
        try:
            outcome["value"] = fn()
        except BaseException as e:
            outcome["error"] = e

    old_limit = sys.getrecursionlimit()
    old_stack_size = threading.stack_size()
    threading.stack_size(EVAL_STACK_SIZE)
    sys.setrecursionlimit(max(old_limit, RECURSION_LIMIT))
    try:
        worker = threading.Thread(target=target, name="mplang-eval")
        worker.start()
        worker.join()
    finally:
        threading.stack_size(old_stack_size)
        sys.setrecursionlimit(old_limit)
    if "error" in outcome:
        raise outcome["error"]
    return outcome["value"]


def _trunc_div(a: int, b: int) -> int:
    quotient = abs(a) // abs(b)
    return quotient if (a < 0) == (b < 0) else -quotient


class Interpreter:
    """Core interpreter that executes Mp AST."""
    def __init__(self, env: Optional[Environment] = None, debug_level: int = 0,
                 debug_file: str = 'debug.txt'):
        self.env = env if env is not None else builtin_environment()
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w') if debug_level > 0 else None

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    # Public API
    def run(self, program: Program) -> Value:
        if self.debug_level >= 1:
            self.debug(f"run program ({len(program.body)} statements)")
        result = run_with_deep_stack(lambda: self.execute_block(program.body))
        if isinstance(result, ReturnSignal):
            result = result.value
        if self.debug_level >= 1:
            self.debug(f"program result {inspect(result)}")
        return result

    def execute_block(self, statements: List[Node]) -> Outcome:
        result: Outcome = NIL
        for stmt in statements:
            result = self.execute(stmt)
            # propagate return signals
            if isinstance(result, ReturnSignal):
                return result
        return result

    def execute(self, node: Node) -> Outcome:
        env = self.env
        if isinstance(node, LetStmt):
            value = self.evaluate(node.value)
            if isinstance(value, ReturnSignal):
                return value
            env.define(node.name, value)
            if self.debug_level >= 2:
                self.debug(f"let {node.name} = {inspect(value)}")
            return NIL
        if isinstance(node, FuncDecl):
            env.define_function(node.name, UserFunction(node.name, node.params, node.body, env.current))
            if self.debug_level >= 2:
                self.debug(f"define function {node.name}({', '.join(node.params)})")
            return NIL
        if isinstance(node, ExprStmt):
            value = self.evaluate(node.expr)
            if isinstance(value, ReturnSignal):
                return value
            return NIL
        if isinstance(node, ResultStmt):
            return self.evaluate(node.expr)
        if isinstance(node, ReturnStmt):
            if node.value is None:
                return ReturnSignal(NIL)
            value = self.evaluate(node.value)
            if isinstance(value, ReturnSignal):
                return value
            return ReturnSignal(value)
        return self.evaluate(node)

    def evaluate(self, node: Node) -> Outcome:
        env = self.env
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, Variable):
            return env.get(node.name)
        if isinstance(node, ArrayLit):
            items = []
            for element in node.elements:
                value = self.evaluate(element)
                if isinstance(value, ReturnSignal):
                    return value
                items.append(value)
            return ArrayVal(tuple(items))
        if isinstance(node, ObjectLit):
            entries = {}
            for key, expr in node.entries:
                value = self.evaluate(expr)
                if isinstance(value, ReturnSignal):
                    return value
                entries[key] = value
            return ObjectVal(entries)
        if isinstance(node, BinaryOp):
            if node.op == '=':
                return self.assign(node)
            left = self.evaluate(node.left)
            if isinstance(left, ReturnSignal):
                return left
            right = self.evaluate(node.right)
            if isinstance(right, ReturnSignal):
                return right
            return self.apply_binary_op(node.op, left, right)
        if isinstance(node, UnaryOp):
            operand = self.evaluate(node.operand)
            if isinstance(operand, ReturnSignal):
                return operand
            return self.apply_unary_op(node.op, operand)
        if isinstance(node, Call):
            return self.call_function(node)
        if isinstance(node, If):
            cond = self.evaluate(node.condition)
            if isinstance(cond, ReturnSignal):
                return cond
            if not isinstance(cond, BoolVal):
                raise TypeMismatch(f"if condition must be Boolean, got {type_name(cond)}")
            if self.debug_level >= 3:
                self.debug(f"if condition -> {inspect(cond)}")
            if cond.value:
                return self.evaluate(node.then_branch)
            if node.else_branch is not None:
                return self.evaluate(node.else_branch)
            return NIL
        if isinstance(node, Block):
            previous = env.push_scope()
            try:
                return self.execute_block(node.statements)
            finally:
                env.pop_scope(previous)
        if isinstance(node, While):
            return self.run_while(node)
        if isinstance(node, (ExprStmt, LetStmt, FuncDecl, ResultStmt, ReturnStmt)):
            return self.execute(node)
        raise NotImplementedError(f"evaluate: unexpected node type {type(node)}")

    def assign(self, node: BinaryOp) -> Outcome:
        target = node.left
        if not isinstance(target, Variable):
            raise InvalidOperation("assignment target must be a variable")
        value = self.evaluate(node.right)
        if isinstance(value, ReturnSignal):
            return value
        self.env.define(target.name, value)
        if self.debug_level >= 2:
            self.debug(f"assign {target.name} = {inspect(value)}")
        return value

    def run_while(self, node: While) -> Outcome:
        # The body shares the enclosing frame, so assignments persist across iterations.
        collected: List[Value] = []
        while True:
            cond = self.evaluate(node.condition)
            if isinstance(cond, ReturnSignal):
                return cond
            if not isinstance(cond, BoolVal):
                raise TypeMismatch(f"while condition must be Boolean, got {type_name(cond)}")
            if self.debug_level >= 3:
                self.debug(f"while condition -> {inspect(cond)}")
            if not cond.value:
                break
            res = self.execute_block(node.body.statements)
            if isinstance(res, ReturnSignal):
                return res
            collected.append(res)
        if not collected:
            return NIL
        return ArrayVal(tuple(collected))

    def call_function(self, node: Call) -> Outcome:
        args: List[Value] = []
        for arg in node.args:
            value = self.evaluate(arg)
            if isinstance(value, ReturnSignal):
                return value
            args.append(value)
        func = self.env.get_function(node.name)
        if self.debug_level >= 4:
            self.debug(f"call {node.name}({', '.join(inspect(a) for a in args)})")
        if isinstance(func, BuiltinFunction):
            result = func(args)
        elif isinstance(func, UserFunction):
            result = self.call_user_function(func, args)
        else:
            raise UndefinedVariable(node.name)
        if self.debug_level >= 4:
            self.debug(f"return from {node.name} -> {inspect(result)}")
        return result

    def call_user_function(self, func: UserFunction, args: List[Value]) -> Value:
        if len(args) != len(func.params):
            raise InvalidOperation(
                f"{func.name} expects {len(func.params)} arguments, got {len(args)}")
        env = self.env
        previous = env.push_scope(parent=func.frame, isolated=True)
        try:
            for param, arg in zip(func.params, args):
                env.define(param, arg)
            result = self.evaluate(func.body)
        finally:
            env.pop_scope(previous)
        if isinstance(result, ReturnSignal):
            return result.value
        return result

    def apply_unary_op(self, op: str, operand: Value) -> Value:
        if op == '-':
            match operand:
                case IntVal(n):
                    return IntVal(-n)
                case FloatVal(f):
                    return FloatVal(-f)
        raise InvalidOperation(f"cannot apply unary '{op}' to {type_name(operand)}")

    def apply_binary_op(self, op: str, a: Value, b: Value) -> Value:
        match (a, b):
            case (IntVal(x), IntVal(y)):
                if op == '/':
                    if y == 0:
                        raise InvalidOperation("division by zero")
                    return IntVal(_trunc_div(x, y))
                return self.apply_number_op(op, x, y, IntVal)
            case (FloatVal(x), FloatVal(y)):
                if op == '/':
                    if y == 0.0:
                        raise InvalidOperation("division by zero")
                    return FloatVal(x / y)
                return self.apply_number_op(op, x, y, FloatVal)
            case (BoolVal(x), BoolVal(y)):
                if op == '==':
                    return BoolVal(x == y)
                if op == '!=':
                    return BoolVal(x != y)
                raise InvalidOperation(f"cannot apply '{op}' to Boolean values")
        raise TypeMismatch(f"cannot apply '{op}' to {type_name(a)} and {type_name(b)}")

    def apply_number_op(self, op: str, x: Any, y: Any, wrap: Any) -> Value:
        if op == '+':
            return wrap(x + y)
        if op == '-':
            return wrap(x - y)
        if op == '*':
            return wrap(x * y)
        if op == '>':
            return BoolVal(x > y)
        if op == '>=':
            return BoolVal(x >= y)
        if op == '<':
            return BoolVal(x < y)
        if op == '<=':
            return BoolVal(x <= y)
        if op == '==':
            return BoolVal(x == y)
        if op == '!=':
            return BoolVal(x != y)
        raise InvalidOperation(f"unknown operator '{op}'")


def eval_with_env(program: Program, env: Environment) -> Value:
    """Evaluate `program` against a caller-owned environment (REPL sessions)."""
    return Interpreter(env=env).run(program)


def eval_program(program: Program, debug_level: int = 0) -> Value:
    """Evaluate `program` in a fresh environment holding only the built-ins."""
    interpreter = Interpreter(debug_level=debug_level)
    try:
        return interpreter.run(program)
    finally:
        interpreter.close()


def run_program(source: str, debug_level: int = 0) -> Value:
    """Convenience function to parse and run an Mp program from source string."""
    return eval_program(parse_program(source), debug_level=debug_level)
