"""Tree-walking interpreter for the Lox language.

The interpreter executes the statements produced by the parser, using the
scope distances computed by the resolver to find local variables. Every
`execute`/`evaluate` call receives the environment it runs in, so leaving
a block or a call never needs to restore any interpreter state: the
caller's environment is simply still the one it holds.

A `return` statement makes `execute` hand back a `ReturnSignal`, which
blocks and loops pass upward until the function call that is waiting for
it. Runtime errors are `LoxRuntimeError` exceptions; `interpret` stops at the
first one and reports it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .ast import (
    Expr, Stmt, Literal, Grouping, Unary, Binary, Logical, Variable, Assign,
    Call, Get, Set, This, Super, Expression, Print, Var, Block, If, While,
    Function, Return, Class,
)
from .builtin_function import BuiltinFunction
from .environment import Environment
from .errors import ErrorReporter, LoxRuntimeError, ReturnSignal
from .parser import parse_program
from .resolver import Resolver
from .scanner import scan_tokens
from .std import populate_global_environment
from .tokens import Token
from .types import LoxClass, LoxFunction, LoxInstance, is_callable, to_string, type_name


@dataclass
class InterpreterConfig:
    """Per-run settings chosen by the driver."""
    # The REPL echoes the value of bare expression statements.
    print_expressions: bool = False


class Interpreter:
    """Core interpreter that executes a resolved Lox AST."""
    def __init__(self, reporter: Optional[ErrorReporter] = None, debug_level: int = 0, debug_file: str = 'debug.txt'):
        self.reporter = reporter if reporter is not None else ErrorReporter()
        self.globals = populate_global_environment(Environment())
        self.locals: Dict[Expr, int] = {}
        self.config = InterpreterConfig()
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w') if debug_level > 0 else None

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    # Public API
    def interpret(self, statements: List[Stmt], resolved: Optional[Dict[Expr, int]] = None,
                  config: Optional[InterpreterConfig] = None) -> bool:
        """Run one batch of top-level statements.

        Returns False if the run stopped on a runtime error, which has
        already been reported.
        """
        if resolved:
            self.locals.update(resolved)
        self.config = config if config is not None else InterpreterConfig()
        if self.debug_level >= 1:
            self.debug(f"run {len(statements)} statements")
        try:
            self.execute_block(statements, self.globals)
        except LoxRuntimeError as error:
            if self.debug_level >= 1:
                self.debug(f"runtime error at line {error.token.line}: {error.message}")
            self.reporter.runtime_error(error)
            return False
        return True

    def execute_block(self, statements: List[Stmt], env: Environment) -> Optional[ReturnSignal]:
        for stmt in statements:
            result = self.execute(stmt, env)
            # propagate return signals
            if result is not None:
                return result
        return None

    def execute(self, stmt: Stmt, env: Environment) -> Optional[ReturnSignal]:
        if isinstance(stmt, Expression):
            value = self.evaluate(stmt.expression, env)
            if self.config.print_expressions:
                print(to_string(value))
            return None
        if isinstance(stmt, Print):
            value = self.evaluate(stmt.expression, env)
            print(to_string(value))
            return None
        if isinstance(stmt, Var):
            value = None
            if stmt.initializer is not None:
                value = self.evaluate(stmt.initializer, env)
            env.define(stmt.name.lexeme, value)
            if self.debug_level >= 2:
                self.debug(f"declare {stmt.name.lexeme}: {type_name(value)} = {to_string(value)}")
            return None
        if isinstance(stmt, Block):
            return self.execute_block(stmt.statements, Environment(env))
        if isinstance(stmt, If):
            cond = self.evaluate(stmt.condition, env)
            truthy = self.is_truthy(cond)
            if self.debug_level >= 3:
                self.debug(f"if condition {to_string(cond)} -> {truthy}")
            if truthy:
                return self.execute(stmt.then_branch, env)
            if stmt.else_branch is not None:
                return self.execute(stmt.else_branch, env)
            return None
        if isinstance(stmt, While):
            while self.is_truthy(self.evaluate(stmt.condition, env)):
                result = self.execute(stmt.body, env)
                if result is not None:
                    return result
            return None
        if isinstance(stmt, Function):
            function = LoxFunction(stmt, env)
            env.define(stmt.name.lexeme, function)
            if self.debug_level >= 2:
                self.debug(f"define function {stmt.name.lexeme}")
            return None
        if isinstance(stmt, Return):
            value = self.evaluate(stmt.value, env) if stmt.value is not None else None
            return ReturnSignal(value)
        if isinstance(stmt, Class):
            self.execute_class(stmt, env)
            return None
        raise NotImplementedError(f"execute: unexpected node type {type(stmt).__name__}")

    def execute_class(self, stmt: Class, env: Environment):
        superclass = None
        if stmt.superclass is not None:
            superclass = self.evaluate(stmt.superclass, env)
            if not isinstance(superclass, LoxClass):
                raise LoxRuntimeError(stmt.superclass.name, 'Superclass must be a class.')

        # Declared first so methods can refer to the class by name.
        env.define(stmt.name.lexeme, None)

        method_env = env
        if superclass is not None:
            method_env = Environment(env)
            method_env.define('super', superclass)

        methods: Dict[str, LoxFunction] = {}
        for method in stmt.methods:
            is_initializer = method.name.lexeme == 'init'
            methods[method.name.lexeme] = LoxFunction(method, method_env, is_initializer)

        klass = LoxClass(stmt.name.lexeme, superclass, methods)
        env.assign(stmt.name, klass)
        if self.debug_level >= 2:
            parent = f" < {superclass.name}" if superclass is not None else ''
            self.debug(f"define class {klass.name}{parent} with {len(methods)} methods")

    def evaluate(self, expr: Expr, env: Environment) -> Any:
        if isinstance(expr, Literal):
            return expr.value
        if isinstance(expr, Grouping):
            return self.evaluate(expr.expression, env)
        if isinstance(expr, Variable):
            return self.look_up_variable(expr.name, expr, env)
        if isinstance(expr, Assign):
            value = self.evaluate(expr.value, env)
            distance = self.locals.get(expr)
            if distance is not None:
                env.assign_at(distance, expr.name, value)
            else:
                self.globals.assign(expr.name, value)
            return value
        if isinstance(expr, Unary):
            right = self.evaluate(expr.right, env)
            if expr.operator.type == 'BANG':
                return not self.is_truthy(right)
            if expr.operator.type == 'MINUS':
                self.check_number_operand(expr.operator, right)
                return -right
            raise LoxRuntimeError(expr.operator, f"Unknown unary operator '{expr.operator.lexeme}'.")
        if isinstance(expr, Logical):
            left = self.evaluate(expr.left, env)
            # Short-circuit; the deciding operand itself is the result.
            if expr.operator.type == 'OR':
                if self.is_truthy(left):
                    return left
            elif not self.is_truthy(left):
                return left
            return self.evaluate(expr.right, env)
        if isinstance(expr, Binary):
            left = self.evaluate(expr.left, env)
            right = self.evaluate(expr.right, env)
            return self.apply_binary_op(expr.operator, left, right)
        if isinstance(expr, Call):
            callee = self.evaluate(expr.callee, env)
            arguments = [self.evaluate(argument, env) for argument in expr.arguments]
            try:
                return self.call_function(callee, arguments, expr.paren)
            except RecursionError:
                raise LoxRuntimeError(expr.paren, 'Stack overflow.') from None
        if isinstance(expr, Get):
            obj = self.evaluate(expr.object, env)
            if isinstance(obj, LoxInstance):
                return obj.get(expr.name)
            raise LoxRuntimeError(expr.name, 'Only instances have properties.')
        if isinstance(expr, Set):
            obj = self.evaluate(expr.object, env)
            if not isinstance(obj, LoxInstance):
                raise LoxRuntimeError(expr.name, 'Only instances have fields.')
            value = self.evaluate(expr.value, env)
            obj.set(expr.name, value)
            return value
        if isinstance(expr, This):
            return self.look_up_variable(expr.keyword, expr, env)
        if isinstance(expr, Super):
            distance = self.locals[expr]
            superclass = env.get_at(distance, 'super')
            # `this` is always bound one scope inside `super`.
            instance = env.get_at(distance - 1, 'this')
            method = superclass.find_method(expr.method.lexeme)
            if method is None:
                raise LoxRuntimeError(expr.method, f"Undefined property '{expr.method.lexeme}'.")
            return method.bind(instance)
        raise NotImplementedError(f"evaluate: unexpected node type {type(expr).__name__}")

    def look_up_variable(self, name: Token, expr: Expr, env: Environment) -> Any:
        distance = self.locals.get(expr)
        if distance is not None:
            return env.get_at(distance, name.lexeme)
        return self.globals.get(name)

    def call_function(self, callee: Any, arguments: List[Any], paren: Token) -> Any:
        if not is_callable(callee):
            raise LoxRuntimeError(paren, 'Can only call functions and classes.')
        arity = callee.arity if isinstance(callee, BuiltinFunction) else callee.arity()
        if len(arguments) != arity:
            raise LoxRuntimeError(paren, f"Expected {arity} arguments but got {len(arguments)}.")
        if self.debug_level >= 3:
            self.debug(f"call {to_string(callee)} with {len(arguments)} arguments")

        if isinstance(callee, BuiltinFunction):
            return callee.fn(arguments)
        if isinstance(callee, LoxClass):
            instance = LoxInstance(callee)
            initializer = callee.find_method('init')
            if initializer is not None:
                self.call_function(initializer.bind(instance), arguments, paren)
            return instance

        # Parent is the closure, never the caller's environment.
        call_env = Environment(callee.closure)
        for param, argument in zip(callee.declaration.params, arguments):
            call_env.define(param.lexeme, argument)
        result = self.execute_block(callee.declaration.body, call_env)
        if callee.is_initializer:
            return callee.closure.get_at(0, 'this')
        if result is not None:
            return result.value
        return None

    def is_truthy(self, value: Any) -> bool:
        if value is None:
            return False
        if isinstance(value, bool):
            return value
        return True

    def check_number_operand(self, operator: Token, operand: Any):
        if isinstance(operand, float):
            return
        raise LoxRuntimeError(operator, 'Operand must be a number.')

    def check_number_operands(self, operator: Token, a: Any, b: Any):
        if isinstance(a, float) and isinstance(b, float):
            return
        raise LoxRuntimeError(operator, 'Operands must be numbers.')

    def apply_binary_op(self, operator: Token, a: Any, b: Any) -> Any:
        op = operator.type
        if op == 'PLUS':
            if isinstance(a, float) and isinstance(b, float):
                return a + b
            if isinstance(a, str) and isinstance(b, str):
                return a + b
            # Mixed string/number concatenation stringifies the number.
            if isinstance(a, str) and isinstance(b, float):
                return a + to_string(b)
            if isinstance(a, float) and isinstance(b, str):
                return to_string(a) + b
            raise LoxRuntimeError(operator, 'Operands must be two numbers or two strings.')
        if op == 'EQUAL_EQUAL':
            return self.equal_values(a, b)
        if op == 'BANG_EQUAL':
            return not self.equal_values(a, b)

        self.check_number_operands(operator, a, b)
        if op == 'MINUS':
            return a - b
        if op == 'STAR':
            return a * b
        if op == 'SLASH':
            return divide(a, b)
        if op == 'GREATER':
            return a > b
        if op == 'GREATER_EQUAL':
            return a >= b
        if op == 'LESS':
            return a < b
        if op == 'LESS_EQUAL':
            return a <= b
        raise LoxRuntimeError(operator, f"Unknown operator '{operator.lexeme}'.")

    def equal_values(self, a: Any, b: Any) -> bool:
        if a is None and b is None:
            return True
        if a is None or b is None:
            return False
        # No coercion between types; Python would otherwise treat True == 1.0.
        if type(a) is not type(b):
            return False
        if isinstance(a, float):
            return numbers_equal(a, b)
        return a == b


def numbers_equal(a: float, b: float) -> bool:
    """Value equality of boxed doubles: NaN equals NaN, 0 and -0 differ."""
    if math.isnan(a) or math.isnan(b):
        return math.isnan(a) and math.isnan(b)
    return a == b and math.copysign(1.0, a) == math.copysign(1.0, b)


def divide(a: float, b: float) -> float:
    """IEEE-754 division; Python raises on a zero divisor where doubles do not."""
    try:
        return a / b
    except ZeroDivisionError:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)


def run_program(source: str, interpreter: Optional[Interpreter] = None,
                reporter: Optional[ErrorReporter] = None,
                config: Optional[InterpreterConfig] = None) -> ErrorReporter:
    """Scan, parse, resolve and run one piece of Lox source.

    Resolution is skipped after a syntax error and execution after any
    syntax or resolution error. The returned reporter tells which of these
    happened.
    """
    if reporter is None:
        reporter = interpreter.reporter if interpreter is not None else ErrorReporter()
    if interpreter is None:
        interpreter = Interpreter(reporter=reporter)
    interpreter.reporter = reporter
    tokens = scan_tokens(source, reporter)
    statements = parse_program(tokens, reporter)
    if reporter.had_error:
        return reporter
    resolver = Resolver(reporter)
    resolved = resolver.resolve(statements)
    if reporter.had_error:
        return reporter
    interpreter.interpret(statements, resolved, config)
    return reporter
