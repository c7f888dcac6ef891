from lox.builtin_function import BuiltinFunction
from lox.environment import Environment

from .clock import native_clock


def populate_global_environment(env: Environment) -> Environment:
    """Register the native functions every program starts with."""
    env.define('clock', BuiltinFunction('clock', 0, native_clock))
    return env
