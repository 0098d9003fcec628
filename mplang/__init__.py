# Mp language package
# This package provides a parser and tree-walking interpreter for Mp Lang.
from .errors import MpError, LexError, ParseError, InterpreterError
from .interpreter import Interpreter, eval_program, eval_with_env, run_program
from .lexer import tokenize
from .parser import parse, parse_program

__all__ = [
    'tokenize',
    'parse',
    'parse_program',
    'eval_program',
    'eval_with_env',
    'run_program',
    'Interpreter',
    'MpError',
    'LexError',
    'ParseError',
    'InterpreterError',
]
