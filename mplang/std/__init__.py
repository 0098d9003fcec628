from mplang.environment import Environment

from .core import populate_core_builtins
from .io import populate_io_builtins


def populate_builtins(env: Environment) -> Environment:
    """Register every built-in function in the root frame of `env`."""
    populate_io_builtins(env)
    populate_core_builtins(env)
    return env


def builtin_environment() -> Environment:
    return populate_builtins(Environment())
