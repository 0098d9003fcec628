import builtins
from typing import Any, List

from mplang.builtin_function import BuiltinFunction
from mplang.environment import Environment
from mplang.errors import InvalidOperation, TypeMismatch
from mplang.types import NIL, StrVal, to_string, type_name


def populate_io_builtins(env: Environment):
    """Register the console built-ins, `print` and `input`, in `env`."""

    def std_print(args: List[Any]) -> Any:
        print(' '.join(to_string(a) for a in args))
        return NIL

    def std_input(args: List[Any]) -> Any:
        if len(args) > 1:
            raise InvalidOperation(f'input expects at most 1 argument, got {len(args)}')
        prompt = ''
        if args:
            if not isinstance(args[0], StrVal):
                raise TypeMismatch(f'input prompt must be String, got {type_name(args[0])}')
            prompt = args[0].value
        try:
            return StrVal(builtins.input(prompt).strip())
        except EOFError:
            return StrVal('')

    env.define_function('print', BuiltinFunction('print', None, std_print))
    env.define_function('input', BuiltinFunction('input', None, std_input))
