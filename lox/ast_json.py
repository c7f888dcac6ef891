"""JSON serialization/deserialization for the Lox AST.

This module converts between Lox AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. It supports a full
round-trip for all node types and for `Token`, line numbers included.
Because nodes compare by identity, the plain form is also what tests use
to check two trees for structural equality.
"""

from __future__ import annotations

from typing import Any, Dict, List

from .ast import (
    Stmt,
    Literal,
    Grouping,
    Unary,
    Binary,
    Logical,
    Variable,
    Assign,
    Call,
    Get,
    Set,
    This,
    Super,
    Expression,
    Print,
    Var,
    Block,
    If,
    While,
    Function,
    Return,
    Class,
)
from .tokens import Token


def token_to_obj(t: Token) -> Dict[str, Any]:
    return {"type": t.type, "lexeme": t.lexeme, "literal": t.literal, "line": t.line}


def token_from_obj(o: Dict[str, Any]) -> Token:
    return Token(o["type"], o["lexeme"], o.get("literal"), o["line"])


def ast_to_obj(node: Any) -> Any:
    # Primitives
    if node is None:
        return None
    if isinstance(node, (int, float, str, bool)):
        return node
    if isinstance(node, list):
        return [ast_to_obj(n) for n in node]

    if isinstance(node, Token):
        return {"__type__": "Token", "value": token_to_obj(node)}

    # Expressions
    if isinstance(node, Literal):
        return {"type": "Literal", "value": node.value}
    if isinstance(node, Grouping):
        return {"type": "Grouping", "expression": ast_to_obj(node.expression)}
    if isinstance(node, Unary):
        return {"type": "Unary", "operator": ast_to_obj(node.operator), "right": ast_to_obj(node.right)}
    if isinstance(node, (Binary, Logical)):
        return {
            "type": type(node).__name__,
            "left": ast_to_obj(node.left),
            "operator": ast_to_obj(node.operator),
            "right": ast_to_obj(node.right),
        }
    if isinstance(node, Variable):
        return {"type": "Variable", "name": ast_to_obj(node.name)}
    if isinstance(node, Assign):
        return {"type": "Assign", "name": ast_to_obj(node.name), "value": ast_to_obj(node.value)}
    if isinstance(node, Call):
        return {
            "type": "Call",
            "callee": ast_to_obj(node.callee),
            "paren": ast_to_obj(node.paren),
            "arguments": ast_to_obj(node.arguments),
        }
    if isinstance(node, Get):
        return {"type": "Get", "object": ast_to_obj(node.object), "name": ast_to_obj(node.name)}
    if isinstance(node, Set):
        return {
            "type": "Set",
            "object": ast_to_obj(node.object),
            "name": ast_to_obj(node.name),
            "value": ast_to_obj(node.value),
        }
    if isinstance(node, This):
        return {"type": "This", "keyword": ast_to_obj(node.keyword)}
    if isinstance(node, Super):
        return {"type": "Super", "keyword": ast_to_obj(node.keyword), "method": ast_to_obj(node.method)}

    # Statements
    if isinstance(node, Expression):
        return {"type": "Expression", "expression": ast_to_obj(node.expression)}
    if isinstance(node, Print):
        return {"type": "Print", "expression": ast_to_obj(node.expression)}
    if isinstance(node, Var):
        return {"type": "Var", "name": ast_to_obj(node.name), "initializer": ast_to_obj(node.initializer)}
    if isinstance(node, Block):
        return {"type": "Block", "statements": ast_to_obj(node.statements)}
    if isinstance(node, If):
        return {
            "type": "If",
            "condition": ast_to_obj(node.condition),
            "then_branch": ast_to_obj(node.then_branch),
            "else_branch": ast_to_obj(node.else_branch),
        }
    if isinstance(node, While):
        return {"type": "While", "condition": ast_to_obj(node.condition), "body": ast_to_obj(node.body)}
    if isinstance(node, Function):
        return {
            "type": "Function",
            "name": ast_to_obj(node.name),
            "params": ast_to_obj(node.params),
            "body": ast_to_obj(node.body),
        }
    if isinstance(node, Return):
        return {"type": "Return", "keyword": ast_to_obj(node.keyword), "value": ast_to_obj(node.value)}
    if isinstance(node, Class):
        return {
            "type": "Class",
            "name": ast_to_obj(node.name),
            "superclass": ast_to_obj(node.superclass),
            "methods": ast_to_obj(node.methods),
        }

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None or isinstance(obj, (int, float, str, bool)):
        return obj
    if isinstance(obj, list):
        return [ast_from_obj(o) for o in obj]
    if isinstance(obj, dict) and obj.get("__type__") == "Token":
        return token_from_obj(obj["value"])
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")

    # Expressions
    if t == "Literal":
        value = obj.get("value")
        # JSON has no float/int distinction; Lox numbers are always floats.
        if isinstance(value, int) and not isinstance(value, bool):
            value = float(value)
        return Literal(value=value)
    if t == "Grouping":
        return Grouping(expression=ast_from_obj(obj["expression"]))
    if t == "Unary":
        return Unary(operator=ast_from_obj(obj["operator"]), right=ast_from_obj(obj["right"]))
    if t == "Binary":
        return Binary(
            left=ast_from_obj(obj["left"]),
            operator=ast_from_obj(obj["operator"]),
            right=ast_from_obj(obj["right"]),
        )
    if t == "Logical":
        return Logical(
            left=ast_from_obj(obj["left"]),
            operator=ast_from_obj(obj["operator"]),
            right=ast_from_obj(obj["right"]),
        )
    if t == "Variable":
        return Variable(name=ast_from_obj(obj["name"]))
    if t == "Assign":
        return Assign(name=ast_from_obj(obj["name"]), value=ast_from_obj(obj["value"]))
    if t == "Call":
        return Call(
            callee=ast_from_obj(obj["callee"]),
            paren=ast_from_obj(obj["paren"]),
            arguments=ast_from_obj(obj["arguments"]),
        )
    if t == "Get":
        return Get(object=ast_from_obj(obj["object"]), name=ast_from_obj(obj["name"]))
    if t == "Set":
        return Set(
            object=ast_from_obj(obj["object"]),
            name=ast_from_obj(obj["name"]),
            value=ast_from_obj(obj["value"]),
        )
    if t == "This":
        return This(keyword=ast_from_obj(obj["keyword"]))
    if t == "Super":
        return Super(keyword=ast_from_obj(obj["keyword"]), method=ast_from_obj(obj["method"]))

    # Statements
    if t == "Expression":
        return Expression(expression=ast_from_obj(obj["expression"]))
    if t == "Print":
        return Print(expression=ast_from_obj(obj["expression"]))
    if t == "Var":
        return Var(name=ast_from_obj(obj["name"]), initializer=ast_from_obj(obj.get("initializer")))
    if t == "Block":
        return Block(statements=ast_from_obj(obj["statements"]))
    if t == "If":
        return If(
            condition=ast_from_obj(obj["condition"]),
            then_branch=ast_from_obj(obj["then_branch"]),
            else_branch=ast_from_obj(obj.get("else_branch")),
        )
    if t == "While":
        return While(condition=ast_from_obj(obj["condition"]), body=ast_from_obj(obj["body"]))
    if t == "Function":
        return Function(
            name=ast_from_obj(obj["name"]),
            params=ast_from_obj(obj["params"]),
            body=ast_from_obj(obj["body"]),
        )
    if t == "Return":
        return Return(keyword=ast_from_obj(obj["keyword"]), value=ast_from_obj(obj.get("value")))
    if t == "Class":
        return Class(
            name=ast_from_obj(obj["name"]),
            superclass=ast_from_obj(obj.get("superclass")),
            methods=ast_from_obj(obj["methods"]),
        )

    raise ValueError(f"Unknown AST node type: {t}")


def program_to_obj(statements: List[Any]) -> Dict[str, Any]:
    return {"type": "Program", "body": ast_to_obj(statements)}


def program_from_obj(obj: Dict[str, Any]) -> List[Any]:
    if not isinstance(obj, dict) or obj.get("type") != "Program":
        raise ValueError("Expected a Program object")
    if not isinstance(obj.get("body"), list):
        raise ValueError("Program body must be a list")
    statements = ast_from_obj(obj["body"])
    for stmt in statements:
        if not isinstance(stmt, Stmt):
            raise ValueError(f"Expected a statement, got {stmt!r}")
    return statements
