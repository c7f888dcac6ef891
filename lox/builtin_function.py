from dataclasses import dataclass
from typing import Any, Callable, List


@dataclass
class BuiltinFunction:
    """A callable implemented in Python and exposed to Lox code."""
    name: str
    arity: int
    fn: Callable[[List[Any]], Any]

    def __repr__(self) -> str:
        return "<native fn>"
