# Lox language package
# This package provides a parser, resolver and tree-walking interpreter for Lox.
from .errors import ErrorReporter, LoxError, LoxRuntimeError
from .interpreter import Interpreter, InterpreterConfig, run_program
from .parser import parse_program
from .resolver import Resolver
from .scanner import scan_tokens

__all__ = [
    'scan_tokens',
    'parse_program',
    'Resolver',
    'Interpreter',
    'InterpreterConfig',
    'ErrorReporter',
    'LoxError',
    'LoxRuntimeError',
    'run_program',
]
