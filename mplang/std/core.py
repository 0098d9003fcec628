"""Collection, conversion and random-number built-ins.

Each function takes the already evaluated argument list. Arity is checked by
`BuiltinFunction` before the function runs, except for the variadic ones
(`vector`, `random`), which check what they need themselves.
"""

import random
import re
from typing import Any, List

from mplang.builtin_function import BuiltinFunction
from mplang.environment import Environment
from mplang.errors import InvalidOperation, TypeMismatch
from mplang.types import (
    ArrayVal, FloatVal, IntVal, ObjectVal, StrVal, to_string, type_name,
)

I128_MIN = -(2 ** 127)
I128_MAX = 2 ** 127 - 1

_INT_TEXT = re.compile(r'[+-]?[0-9]+')


def std_vector(args: List[Any]) -> Any:
    return ArrayVal(tuple(args))


def std_push(args: List[Any]) -> Any:
    array, item = args
    if not isinstance(array, ArrayVal):
        raise TypeMismatch(f'push expects an Array, got {type_name(array)}')
    return ArrayVal(array.items + (item,))


def std_pop(args: List[Any]) -> Any:
    array = args[0]
    if not isinstance(array, ArrayVal):
        raise TypeMismatch(f'pop expects an Array, got {type_name(array)}')
    if not array.items:
        raise InvalidOperation('pop from an empty Array')
    return array.items[-1]


def std_len(args: List[Any]) -> Any:
    value = args[0]
    if isinstance(value, ArrayVal):
        return IntVal(len(value.items))
    if isinstance(value, StrVal):
        return IntVal(len(value.value))
    if isinstance(value, ObjectVal):
        return IntVal(len(value.entries))
    raise TypeMismatch(f'len expects an Array, String or Object, got {type_name(value)}')


def std_to_string(args: List[Any]) -> Any:
    return StrVal(to_string(args[0]))


def std_int(args: List[Any]) -> Any:
    value = args[0]
    if isinstance(value, IntVal):
        return value
    if isinstance(value, FloatVal):
        try:
            return IntVal(int(value.value))
        except (OverflowError, ValueError):
            raise InvalidOperation(f'cannot convert {value.value!r} to Int') from None
    if isinstance(value, StrVal):
        text = value.value.strip()
        if not _INT_TEXT.fullmatch(text):
            raise InvalidOperation(f'cannot parse Int from {value.value!r}')
        return IntVal(int(text))
    raise TypeMismatch(f'int expects a Number or String, got {type_name(value)}')


def std_float(args: List[Any]) -> Any:
    value = args[0]
    if isinstance(value, FloatVal):
        return value
    if isinstance(value, IntVal):
        try:
            return FloatVal(float(value.value))
        except OverflowError:
            raise InvalidOperation(f'{value.value} is too large for a Float') from None
    if isinstance(value, StrVal):
        try:
            return FloatVal(float(value.value.strip()))
        except ValueError:
            raise InvalidOperation(f'cannot parse Float from {value.value!r}') from None
    raise TypeMismatch(f'float expects a Number or String, got {type_name(value)}')


def _random_in(low: Any, high: Any) -> Any:
    if isinstance(low, IntVal) and isinstance(high, IntVal):
        if low.value >= high.value:
            raise InvalidOperation(f'random range [{low.value}, {high.value}) is empty')
        return IntVal(random.randrange(low.value, high.value))
    if isinstance(low, FloatVal) and isinstance(high, FloatVal):
        if not low.value < high.value:
            raise InvalidOperation(f'random range [{low.value!r}, {high.value!r}) is empty')
        result = low.value + random.random() * (high.value - low.value)
        # rounding can land exactly on the upper bound
        return FloatVal(result if result < high.value else low.value)
    raise TypeMismatch(f'random bounds must both be Int or both Float, '
                       f'got {type_name(low)} and {type_name(high)}')


def std_random(args: List[Any]) -> Any:
    if not args:
        return IntVal(random.randint(I128_MIN, I128_MAX))
    if len(args) == 1:
        bound = args[0]
        zero = FloatVal(0.0) if isinstance(bound, FloatVal) else IntVal(0)
        if not isinstance(bound, (IntVal, FloatVal)):
            raise TypeMismatch(f'random expects a Number, got {type_name(bound)}')
        return _random_in(zero, bound)
    if len(args) == 2:
        return _random_in(args[0], args[1])
    raise InvalidOperation(f'random expects 0, 1 or 2 arguments, got {len(args)}')


def populate_core_builtins(env: Environment):
    env.define_function('vector', BuiltinFunction('vector', None, std_vector))
    env.define_function('push', BuiltinFunction('push', 2, std_push))
    env.define_function('pop', BuiltinFunction('pop', 1, std_pop))
    env.define_function('len', BuiltinFunction('len', 1, std_len))
    env.define_function('toString', BuiltinFunction('toString', 1, std_to_string))
    env.define_function('int', BuiltinFunction('int', 1, std_int))
    env.define_function('float', BuiltinFunction('float', 1, std_float))
    env.define_function('random', BuiltinFunction('random', None, std_random))
