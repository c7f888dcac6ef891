"""Runtime values for Lox.

Lox values map onto Python objects: `None` is nil, `bool` and `str` are
themselves, and every number is a `float`. This module adds the object
model on top of that: user functions (closures), classes and instances.
Calling a function or class is the interpreter's job; the classes here only
hold state and answer lookups.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from .ast import Function
from .builtin_function import BuiltinFunction
from .environment import Environment
from .errors import LoxRuntimeError
from .tokens import Token


class LoxFunction:
    """A user-defined function or method together with its closure."""
    def __init__(self, declaration: Function, closure: Environment, is_initializer: bool = False):
        self.declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer

    @property
    def name(self) -> str:
        return self.declaration.name.lexeme

    def arity(self) -> int:
        return len(self.declaration.params)

    def bind(self, instance: 'LoxInstance') -> 'LoxFunction':
        """Return a copy of this method whose closure defines `this`."""
        env = Environment(self.closure)
        env.define('this', instance)
        return LoxFunction(self.declaration, env, self.is_initializer)

    def __repr__(self) -> str:
        return f"<fn {self.name}>"


class LoxClass:
    """Class metadata; calling it creates a `LoxInstance`."""
    def __init__(self, name: str, superclass: Optional['LoxClass'], methods: Dict[str, LoxFunction]):
        self.name = name
        self.superclass = superclass
        self.methods = methods

    def find_method(self, name: str) -> Optional[LoxFunction]:
        if name in self.methods:
            return self.methods[name]
        if self.superclass is not None:
            return self.superclass.find_method(name)
        return None

    def arity(self) -> int:
        initializer = self.find_method('init')
        if initializer is None:
            return 0
        return initializer.arity()

    def __repr__(self) -> str:
        return self.name


class LoxInstance:
    def __init__(self, klass: LoxClass):
        self.klass = klass
        self.fields: Dict[str, Any] = {}

    def get(self, name: Token) -> Any:
        # Fields shadow methods.
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]
        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)
        raise LoxRuntimeError(name, f"Undefined property '{name.lexeme}'.")

    def set(self, name: Token, value: Any):
        self.fields[name.lexeme] = value

    def __repr__(self) -> str:
        return f"{self.klass.name} instance"


def is_callable(value: Any) -> bool:
    return isinstance(value, (LoxFunction, LoxClass, BuiltinFunction))


def to_string(value: Any) -> str:
    """Render a runtime value the way `print` shows it."""
    if value is None:
        return 'nil'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float):
        text = repr(value)
        if text.endswith('.0'):
            text = text[:-2]
        return text
    if isinstance(value, str):
        return value
    return repr(value)


def type_name(value: Any) -> str:
    if value is None:
        return 'nil'
    if isinstance(value, bool):
        return 'boolean'
    if isinstance(value, float):
        return 'number'
    if isinstance(value, str):
        return 'string'
    if isinstance(value, LoxInstance):
        return 'instance'
    if isinstance(value, LoxClass):
        return 'class'
    return 'function'
