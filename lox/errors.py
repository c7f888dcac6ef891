import sys
from typing import Any, Optional, TextIO

from lox.tokens import Token


class LoxError(Exception):
    """Base class for errors raised while processing Lox code."""


class ParseError(LoxError):
    """Raised inside the parser to unwind to the nearest declaration."""


class LoxRuntimeError(LoxError):
    """Exception type used to propagate Lox runtime errors."""
    def __init__(self, token: Token, message: str):
        super().__init__(message)
        self.token = token
        self.message = message


class ReturnSignal:
    """Result of executing a `return` statement.

    Statement execution hands this back to its caller instead of raising, so
    it only ever stops at a call boundary and never mixes with runtime errors.
    """
    __slots__ = ('value',)

    def __init__(self, value: Any):
        self.value = value

    def __repr__(self) -> str:
        return f"ReturnSignal({self.value!r})"


class ErrorReporter:
    """Collects diagnostics for one interpreter session.

    Syntax and resolution errors set `had_error`; runtime errors set
    `had_runtime_error`. Messages are written to `stream`, or to the
    current `sys.stderr` when no stream is given.
    """
    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream
        self.had_error = False
        self.had_runtime_error = False

    def _write(self, text: str):
        print(text, file=self.stream if self.stream is not None else sys.stderr)

    def error(self, line: int, message: str):
        self.report(line, '', message)

    def token_error(self, token: Token, message: str):
        if token.type == 'EOF':
            self.report(token.line, ' at end', message)
        else:
            self.report(token.line, f" at '{token.lexeme}'", message)

    def runtime_error(self, error: LoxRuntimeError):
        self._write(f"{error.message}\n[line {error.token.line}]")
        self.had_runtime_error = True

    def report(self, line: int, where: str, message: str):
        self._write(f"[line {line}] Error{where}: {message}")
        self.had_error = True

    def reset(self):
        self.had_error = False
        self.had_runtime_error = False
