import builtins

import pytest

from mplang.builtin_function import BuiltinFunction
from mplang.errors import InvalidOperation, TypeMismatch
from mplang.interpreter import run_program
from mplang.std.core import I128_MAX, I128_MIN
from mplang.types import NIL, ArrayVal, FloatVal, IntVal, StrVal


def test_print_joins_with_spaces(capsys):
    assert run_program('print("a", 1, 2.5, true, [1, "b"])') == NIL
    assert capsys.readouterr().out == 'a 1 2.5 true [1, b]\n'


def test_print_without_arguments(capsys):
    run_program('print()')
    assert capsys.readouterr().out == '\n'


def test_input_reads_stripped_line(monkeypatch):
    monkeypatch.setattr(builtins, 'input', lambda prompt='': '  42 \n')
    assert run_program('int(input())') == IntVal(42)


def test_input_returns_empty_string_on_eof(monkeypatch):
    def raise_eof(prompt=''):
        raise EOFError

    monkeypatch.setattr(builtins, 'input', raise_eof)
    assert run_program('input("> ")') == StrVal('')


def test_input_prompt_must_be_string():
    with pytest.raises(TypeMismatch):
        run_program('input(1)')


def test_vector_push_pop():
    assert run_program('let v = vector(1,2,3); push(v,4); pop(v)') == IntVal(3)
    assert run_program('push(vector(1), 2)') == ArrayVal((IntVal(1), IntVal(2)))
    assert run_program('vector()') == ArrayVal(())


def test_push_and_pop_errors():
    with pytest.raises(InvalidOperation):
        run_program('pop(vector())')
    with pytest.raises(TypeMismatch):
        run_program('pop(1)')
    with pytest.raises(TypeMismatch):
        run_program('push("s", 1)')
    with pytest.raises(InvalidOperation):
        run_program('push(vector())')


def test_len():
    assert run_program('len("hello")') == IntVal(5)
    assert run_program('len([1, 2])') == IntVal(2)
    assert run_program('len({a: 1})') == IntVal(1)
    with pytest.raises(TypeMismatch):
        run_program('len(1)')


def test_to_string():
    assert run_program('toString(3.0)') == StrVal('3.0')
    assert run_program('toString(true)') == StrVal('true')
    assert run_program('toString(vector(1, "a"))') == StrVal('[1, a]')
    assert run_program('toString(if false { 1 })') == StrVal('nil')


def test_int_conversion():
    assert run_program('int(3.9)') == IntVal(3)
    assert run_program('int(-3.9)') == IntVal(-3)
    assert run_program('int(" -12 ")') == IntVal(-12)
    assert run_program('int(7)') == IntVal(7)
    with pytest.raises(InvalidOperation):
        run_program('int("1.5")')
    with pytest.raises(TypeMismatch):
        run_program('int(true)')


def test_float_conversion():
    assert run_program('float(2)') == FloatVal(2.0)
    assert run_program('float("2.5")') == FloatVal(2.5)
    with pytest.raises(InvalidOperation):
        run_program('float("x")')
    with pytest.raises(TypeMismatch):
        run_program('float([1])')


def test_random_ranges():
    for _ in range(50):
        value = run_program('random(10)')
        assert isinstance(value, IntVal) and 0 <= value.value < 10
        value = run_program('random(1.5)')
        assert isinstance(value, FloatVal) and 0.0 <= value.value < 1.5
        value = run_program('random(-3, 3)')
        assert isinstance(value, IntVal) and -3 <= value.value < 3
    assert run_program('random(5, 6)') == IntVal(5)
    value = run_program('random()')
    assert isinstance(value, IntVal) and I128_MIN <= value.value <= I128_MAX


def test_random_errors():
    with pytest.raises(TypeMismatch):
        run_program('random(1, 1.5)')
    with pytest.raises(TypeMismatch):
        run_program('random("a")')
    with pytest.raises(InvalidOperation):
        run_program('random(0)')
    with pytest.raises(InvalidOperation):
        run_program('random(2.0, 1.0)')
    with pytest.raises(InvalidOperation):
        run_program('random(1, 2, 3)')


def test_builtin_function_checks_arity():
    fn = BuiltinFunction('two', 2, lambda args: IntVal(len(args)))
    assert fn([IntVal(1), IntVal(2)]) == IntVal(2)
    with pytest.raises(InvalidOperation):
        fn([IntVal(1)])
    assert repr(fn) == '<builtin two>'
