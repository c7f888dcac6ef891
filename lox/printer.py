"""Render Lox AST nodes back into Lox source text.

Used for debugging output. Expressions print exactly as they parse:
`Grouping` nodes keep their parentheses and nothing else adds any, so
re-parsing `print_expr(expr)` gives back the same tree. Statements print
one per line with two-space indentation. A `for` loop comes back out as the
block and `while` loop the parser desugared it into.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, List

from .ast import (
    Expr, Stmt, Literal, Grouping, Unary, Binary, Logical, Variable, Assign,
    Call, Get, Set, This, Super, Expression, Print, Var, Block, If, While,
    Function, Return, Class,
)


def format_number(value: float) -> str:
    """Format a number as a Lox NUMBER token that reads back to the same value."""
    if value.is_integer():
        return str(int(value))
    text = repr(value)
    if 'e' in text:
        # Lox has no exponent syntax; spell out the digits instead.
        text = format(Decimal(text), 'f')
    return text


def format_literal(value: Any) -> str:
    if value is None:
        return 'nil'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float):
        if value < 0:
            # Only reachable for hand-built trees; the parser never makes one.
            return f"-{format_number(-value)}"
        return format_number(value)
    return f'"{value}"'


def print_expr(expr: Expr) -> str:
    if isinstance(expr, Literal):
        return format_literal(expr.value)
    if isinstance(expr, Grouping):
        return f"({print_expr(expr.expression)})"
    if isinstance(expr, Unary):
        return f"{expr.operator.lexeme}{print_expr(expr.right)}"
    if isinstance(expr, (Binary, Logical)):
        return f"{print_expr(expr.left)} {expr.operator.lexeme} {print_expr(expr.right)}"
    if isinstance(expr, Variable):
        return expr.name.lexeme
    if isinstance(expr, Assign):
        return f"{expr.name.lexeme} = {print_expr(expr.value)}"
    if isinstance(expr, Call):
        args = ', '.join(print_expr(a) for a in expr.arguments)
        return f"{print_expr(expr.callee)}({args})"
    if isinstance(expr, Get):
        return f"{print_expr(expr.object)}.{expr.name.lexeme}"
    if isinstance(expr, Set):
        return f"{print_expr(expr.object)}.{expr.name.lexeme} = {print_expr(expr.value)}"
    if isinstance(expr, This):
        return 'this'
    if isinstance(expr, Super):
        return f"super.{expr.method.lexeme}"
    raise TypeError(f"Unsupported node for printing: {type(expr).__name__}")


def _print_body(statements: List[Stmt], indent: int) -> List[str]:
    lines = ['{']
    for stmt in statements:
        lines.extend(_print_stmt(stmt, indent + 1))
    lines.append('  ' * indent + '}')
    return lines


def _print_function(function: Function, indent: int, keyword: str = '') -> List[str]:
    params = ', '.join(p.lexeme for p in function.params)
    body = _print_body(function.body, indent)
    body[0] = '  ' * indent + f"{keyword}{function.name.lexeme}({params}) {body[0]}"
    return body


def _print_stmt(stmt: Stmt, indent: int) -> List[str]:
    pad = '  ' * indent
    if isinstance(stmt, Expression):
        return [f"{pad}{print_expr(stmt.expression)};"]
    if isinstance(stmt, Print):
        return [f"{pad}print {print_expr(stmt.expression)};"]
    if isinstance(stmt, Var):
        if stmt.initializer is None:
            return [f"{pad}var {stmt.name.lexeme};"]
        return [f"{pad}var {stmt.name.lexeme} = {print_expr(stmt.initializer)};"]
    if isinstance(stmt, Block):
        lines = _print_body(stmt.statements, indent)
        lines[0] = pad + lines[0]
        return lines
    if isinstance(stmt, If):
        lines = [f"{pad}if ({print_expr(stmt.condition)})"]
        lines.extend(_print_stmt(stmt.then_branch, indent + 1))
        if stmt.else_branch is not None:
            lines.append(f"{pad}else")
            lines.extend(_print_stmt(stmt.else_branch, indent + 1))
        return lines
    if isinstance(stmt, While):
        lines = [f"{pad}while ({print_expr(stmt.condition)})"]
        lines.extend(_print_stmt(stmt.body, indent + 1))
        return lines
    if isinstance(stmt, Function):
        return _print_function(stmt, indent, 'fun ')
    if isinstance(stmt, Return):
        if stmt.value is None:
            return [f"{pad}return;"]
        return [f"{pad}return {print_expr(stmt.value)};"]
    if isinstance(stmt, Class):
        header = f"{pad}class {stmt.name.lexeme}"
        if stmt.superclass is not None:
            header += f" < {stmt.superclass.name.lexeme}"
        lines = [header + ' {']
        for method in stmt.methods:
            lines.extend(_print_function(method, indent + 1))
        lines.append(pad + '}')
        return lines
    raise TypeError(f"Unsupported node for printing: {type(stmt).__name__}")


def print_stmt(stmt: Stmt) -> str:
    return '\n'.join(_print_stmt(stmt, 0))


def print_program(statements: List[Stmt]) -> str:
    return '\n'.join(print_stmt(s) for s in statements)
