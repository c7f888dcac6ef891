"""Static variable resolution for Lox.

The resolver walks the program once before it runs, mirroring the scopes
the interpreter will create, but tracking only names. For every variable
reference that binds to a local scope it records how many scopes lie
between the reference and the declaration. References it cannot find are
left out of the map and are looked up in the globals at run time.

It also reports programs that are structurally wrong: redeclaring a name
in one block, reading a local in its own initializer, returning outside a
function or a value from an initializer, and misusing `this` or `super`.
Errors are reported and the walk continues.
"""

from __future__ import annotations

from typing import Dict, List

from .ast import (
    Expr, Stmt, Literal, Grouping, Unary, Binary, Logical, Variable, Assign,
    Call, Get, Set, This, Super, Expression, Print, Var, Block, If, While,
    Function, Return, Class,
)
from .errors import ErrorReporter
from .tokens import Token


# Function kinds
NO_FUNCTION = 'none'
FUNCTION = 'function'
METHOD = 'method'
INITIALIZER = 'initializer'

# Class kinds
NO_CLASS = 'none'
CLASS = 'class'
SUBCLASS = 'subclass'


class Resolver:
    def __init__(self, reporter: ErrorReporter):
        self.reporter = reporter
        # name -> False while declared, True once its initializer is resolved
        self.scopes: List[Dict[str, bool]] = []
        self.locals: Dict[Expr, int] = {}
        self.current_function = NO_FUNCTION
        self.current_class = NO_CLASS

    def resolve(self, statements: List[Stmt]) -> Dict[Expr, int]:
        for stmt in statements:
            self.resolve_stmt(stmt)
        return self.locals

    # Scopes

    def begin_scope(self):
        self.scopes.append({})

    def end_scope(self):
        self.scopes.pop()

    def declare(self, name: Token):
        if not self.scopes:
            return
        scope = self.scopes[-1]
        if name.lexeme in scope:
            self.reporter.token_error(name, 'Already a variable with this name in this scope.')
        scope[name.lexeme] = False

    def define(self, name: Token):
        if not self.scopes:
            return
        self.scopes[-1][name.lexeme] = True

    def resolve_local(self, expr: Expr, name: Token):
        for i in range(len(self.scopes) - 1, -1, -1):
            if name.lexeme in self.scopes[i]:
                self.locals[expr] = len(self.scopes) - 1 - i
                return

    def resolve_function(self, function: Function, kind: str):
        enclosing_function = self.current_function
        self.current_function = kind
        self.begin_scope()
        for param in function.params:
            self.declare(param)
            self.define(param)
        for stmt in function.body:
            self.resolve_stmt(stmt)
        self.end_scope()
        self.current_function = enclosing_function

    # Statements

    def resolve_stmt(self, stmt: Stmt):
        if isinstance(stmt, Block):
            self.begin_scope()
            for inner in stmt.statements:
                self.resolve_stmt(inner)
            self.end_scope()
            return
        if isinstance(stmt, Var):
            self.declare(stmt.name)
            if stmt.initializer is not None:
                self.resolve_expr(stmt.initializer)
            self.define(stmt.name)
            return
        if isinstance(stmt, Function):
            # Defined before the body so the function can call itself.
            self.declare(stmt.name)
            self.define(stmt.name)
            self.resolve_function(stmt, FUNCTION)
            return
        if isinstance(stmt, Class):
            self.resolve_class(stmt)
            return
        if isinstance(stmt, Expression):
            self.resolve_expr(stmt.expression)
            return
        if isinstance(stmt, Print):
            self.resolve_expr(stmt.expression)
            return
        if isinstance(stmt, If):
            self.resolve_expr(stmt.condition)
            self.resolve_stmt(stmt.then_branch)
            if stmt.else_branch is not None:
                self.resolve_stmt(stmt.else_branch)
            return
        if isinstance(stmt, While):
            self.resolve_expr(stmt.condition)
            self.resolve_stmt(stmt.body)
            return
        if isinstance(stmt, Return):
            if self.current_function == NO_FUNCTION:
                self.reporter.token_error(stmt.keyword, "Can't return from top-level code.")
            if stmt.value is not None:
                if self.current_function == INITIALIZER:
                    self.reporter.token_error(stmt.keyword, "Can't return a value from an initializer.")
                self.resolve_expr(stmt.value)
            return
        raise NotImplementedError(f"resolve: unexpected statement {type(stmt).__name__}")

    def resolve_class(self, stmt: Class):
        enclosing_class = self.current_class
        self.current_class = CLASS
        self.declare(stmt.name)
        self.define(stmt.name)

        if stmt.superclass is not None:
            if stmt.superclass.name.lexeme == stmt.name.lexeme:
                self.reporter.token_error(stmt.superclass.name, "A class can't inherit from itself.")
            self.current_class = SUBCLASS
            self.resolve_expr(stmt.superclass)
            self.begin_scope()
            self.scopes[-1]['super'] = True

        self.begin_scope()
        self.scopes[-1]['this'] = True
        for method in stmt.methods:
            kind = INITIALIZER if method.name.lexeme == 'init' else METHOD
            self.resolve_function(method, kind)
        self.end_scope()

        if stmt.superclass is not None:
            self.end_scope()
        self.current_class = enclosing_class

    # Expressions

    def resolve_expr(self, expr: Expr):
        if isinstance(expr, Variable):
            if self.scopes and self.scopes[-1].get(expr.name.lexeme) is False:
                self.reporter.token_error(expr.name, "Can't read local variable in its own initializer.")
            self.resolve_local(expr, expr.name)
            return
        if isinstance(expr, Assign):
            self.resolve_expr(expr.value)
            self.resolve_local(expr, expr.name)
            return
        if isinstance(expr, (Binary, Logical)):
            self.resolve_expr(expr.left)
            self.resolve_expr(expr.right)
            return
        if isinstance(expr, Unary):
            self.resolve_expr(expr.right)
            return
        if isinstance(expr, Grouping):
            self.resolve_expr(expr.expression)
            return
        if isinstance(expr, Call):
            self.resolve_expr(expr.callee)
            for argument in expr.arguments:
                self.resolve_expr(argument)
            return
        if isinstance(expr, Get):
            self.resolve_expr(expr.object)
            return
        if isinstance(expr, Set):
            self.resolve_expr(expr.value)
            self.resolve_expr(expr.object)
            return
        if isinstance(expr, This):
            if self.current_class == NO_CLASS:
                self.reporter.token_error(expr.keyword, "Can't use 'this' outside of a class.")
                return
            self.resolve_local(expr, expr.keyword)
            return
        if isinstance(expr, Super):
            if self.current_class == NO_CLASS:
                self.reporter.token_error(expr.keyword, "Can't use 'super' outside of a class.")
            elif self.current_class != SUBCLASS:
                self.reporter.token_error(expr.keyword, "Can't use 'super' in a class with no superclass.")
            self.resolve_local(expr, expr.keyword)
            return
        if isinstance(expr, Literal):
            return
        raise NotImplementedError(f"resolve: unexpected expression {type(expr).__name__}")
