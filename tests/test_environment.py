import pytest

from mplang.builtin_function import BuiltinFunction
from mplang.environment import Environment
from mplang.errors import UndefinedVariable
from mplang.std import builtin_environment
from mplang.types import IntVal


def test_define_and_get():
    env = Environment()
    env.define('x', IntVal(1))
    assert env.get('x') == IntVal(1)


def test_missing_name():
    env = Environment()
    with pytest.raises(UndefinedVariable) as exc:
        env.get('nope')
    assert exc.value.name == 'nope'


def test_child_scope_shadows_and_releases():
    env = Environment()
    env.define('x', IntVal(1))
    previous = env.push_scope()
    assert env.get('x') == IntVal(1)
    env.define('x', IntVal(2))
    assert env.get('x') == IntVal(2)
    env.pop_scope(previous)
    assert env.get('x') == IntVal(1)
    assert len(env.frames) == 1
    assert env.current == 0


def test_isolated_frame_hides_variables_but_not_functions():
    env = Environment()
    env.define('x', IntVal(1))
    func = BuiltinFunction('f', 0, lambda args: IntVal(0))
    env.define_function('f', func)
    previous = env.push_scope(isolated=True)
    with pytest.raises(UndefinedVariable):
        env.get('x')
    assert env.get_function('f') is func
    env.pop_scope(previous)


def test_explicit_parent_frame():
    env = Environment()
    outer = env.push_scope()
    env.define('y', IntVal(5))
    defining_frame = env.current
    inner = env.push_scope()
    env.define('y', IntVal(6))
    call = env.push_scope(parent=defining_frame)
    assert env.get('y') == IntVal(5)
    env.pop_scope(call)
    env.pop_scope(inner)
    env.pop_scope(outer)
    assert len(env.frames) == 1


def test_functions_and_variables_do_not_mix():
    env = Environment()
    env.define_function('f', BuiltinFunction('f', 0, lambda args: IntVal(0)))
    env.define('v', IntVal(1))
    with pytest.raises(UndefinedVariable):
        env.get('f')
    with pytest.raises(UndefinedVariable):
        env.get_function('v')
    with pytest.raises(UndefinedVariable):
        env.get_function('missing')


def test_builtins_live_in_root_frame():
    env = builtin_environment()
    for name in ('print', 'input', 'vector', 'push', 'pop', 'len', 'toString', 'int', 'float', 'random'):
        assert name in env.frames[0].bindings
    assert repr(env.get_function('print')) == '<builtin print>'
