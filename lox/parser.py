"""Recursive-descent parser for the Lox language.

Each grammar rule is one `parse_*` method, ordered from the lowest
precedence (assignment) to the highest (primary). The parser looks at one
token at a time and never backtracks.

Syntax errors are reported to the `ErrorReporter` as soon as they are
found. The parser then raises `ParseError` to unwind to the enclosing
declaration, skips ahead to the next statement boundary and carries on, so a
single run can report several independent mistakes. `parse_program` never
lets a `ParseError` escape; declarations that failed to parse are left out of
its result.
"""

from __future__ import annotations

from typing import List, Optional

from .ast import (
    Expr, Stmt, Literal, Grouping, Unary, Binary, Logical, Variable, Assign,
    Call, Get, Set, This, Super, Expression, Print, Var, Block, If, While,
    Function, Return, Class,
)
from .errors import ErrorReporter, ParseError
from .tokens import Token


MAX_ARGUMENTS = 255

# Tokens that start a new statement; error recovery stops in front of them.
STATEMENT_STARTS = {'CLASS', 'FUN', 'VAR', 'FOR', 'IF', 'WHILE', 'PRINT', 'RETURN'}


class Parser:
    def __init__(self, tokens: List[Token], reporter: ErrorReporter):
        self.tokens = tokens
        self.reporter = reporter
        self.pos = 0

    # Token helpers

    def peek(self) -> Token:
        return self.tokens[self.pos]

    def previous(self) -> Token:
        return self.tokens[self.pos - 1]

    def is_at_end(self) -> bool:
        return self.peek().type == 'EOF'

    def advance(self) -> Token:
        if not self.is_at_end():
            self.pos += 1
        return self.previous()

    def match(self, *types: str) -> bool:
        if self.is_at_end():
            return False
        return self.peek().type in types

    def accept(self, *types: str) -> bool:
        """Consume the current token if it is one of `types`."""
        if self.match(*types):
            self.advance()
            return True
        return False

    def consume(self, expected: str, message: str) -> Token:
        if self.match(expected):
            return self.advance()
        raise self.error(self.peek(), message)

    def error(self, token: Token, message: str) -> ParseError:
        self.reporter.token_error(token, message)
        return ParseError(message)

    def synchronize(self):
        self.advance()
        while not self.is_at_end():
            if self.previous().type == 'SEMICOLON':
                return
            if self.peek().type in STATEMENT_STARTS:
                return
            self.advance()

    # Declarations

    def parse_program(self) -> List[Stmt]:
        statements: List[Stmt] = []
        while not self.is_at_end():
            stmt = self.parse_declaration()
            if stmt is not None:
                statements.append(stmt)
        return statements

    def parse_declaration(self) -> Optional[Stmt]:
        try:
            if self.match('CLASS'):
                return self.parse_class_decl()
            if self.match('FUN'):
                self.advance()
                return self.parse_function('function')
            if self.match('VAR'):
                return self.parse_var_decl()
            return self.parse_statement()
        except ParseError:
            self.synchronize()
            return None

    def parse_class_decl(self) -> Class:
        self.consume('CLASS', "Expect 'class'.")
        name = self.consume('IDENTIFIER', 'Expect class name.')
        superclass = None
        if self.accept('LESS'):
            superclass = Variable(self.consume('IDENTIFIER', 'Expect superclass name.'))
        self.consume('LEFT_BRACE', "Expect '{' before class body.")
        methods: List[Function] = []
        while not self.match('RIGHT_BRACE') and not self.is_at_end():
            methods.append(self.parse_function('method'))
        self.consume('RIGHT_BRACE', "Expect '}' after class body.")
        return Class(name, superclass, methods)

    def parse_function(self, kind: str) -> Function:
        # `kind` is 'function' or 'method' and only shapes the messages.
        name = self.consume('IDENTIFIER', f'Expect {kind} name.')
        self.consume('LEFT_PAREN', f"Expect '(' after {kind} name.")
        params: List[Token] = []
        if not self.match('RIGHT_PAREN'):
            while True:
                if len(params) >= MAX_ARGUMENTS:
                    self.error(self.peek(), f"Can't have more than {MAX_ARGUMENTS} parameters.")
                params.append(self.consume('IDENTIFIER', 'Expect parameter name.'))
                if not self.accept('COMMA'):
                    break
        self.consume('RIGHT_PAREN', "Expect ')' after parameters.")
        self.consume('LEFT_BRACE', f"Expect '{{' before {kind} body.")
        body = self.parse_block()
        return Function(name, params, body)

    def parse_var_decl(self) -> Var:
        self.consume('VAR', "Expect 'var'.")
        name = self.consume('IDENTIFIER', 'Expect variable name.')
        initializer: Optional[Expr] = None
        if self.accept('EQUAL'):
            initializer = self.parse_expression()
        self.consume('SEMICOLON', "Expect ';' after variable declaration.")
        return Var(name, initializer)

    # Statements

    def parse_statement(self) -> Stmt:
        if self.match('FOR'):
            return self.parse_for_stmt()
        if self.match('IF'):
            return self.parse_if_stmt()
        if self.match('PRINT'):
            return self.parse_print_stmt()
        if self.match('RETURN'):
            return self.parse_return_stmt()
        if self.match('WHILE'):
            return self.parse_while_stmt()
        if self.accept('LEFT_BRACE'):
            return Block(self.parse_block())
        return self.parse_expression_stmt()

    def parse_for_stmt(self) -> Stmt:
        """Parse a for loop and desugar it into a while loop."""
        self.consume('FOR', "Expect 'for'.")
        self.consume('LEFT_PAREN', "Expect '(' after 'for'.")
        initializer: Optional[Stmt]
        if self.accept('SEMICOLON'):
            initializer = None
        elif self.match('VAR'):
            initializer = self.parse_var_decl()
        else:
            initializer = self.parse_expression_stmt()

        condition: Optional[Expr] = None
        if not self.match('SEMICOLON'):
            condition = self.parse_expression()
        self.consume('SEMICOLON', "Expect ';' after loop condition.")

        increment: Optional[Expr] = None
        if not self.match('RIGHT_PAREN'):
            increment = self.parse_expression()
        self.consume('RIGHT_PAREN', "Expect ')' after for clauses.")

        body = self.parse_statement()
        if increment is not None:
            body = Block([body, Expression(increment)])
        if condition is None:
            condition = Literal(True)
        body = While(condition, body)
        if initializer is not None:
            body = Block([initializer, body])
        return body

    def parse_if_stmt(self) -> If:
        self.consume('IF', "Expect 'if'.")
        self.consume('LEFT_PAREN', "Expect '(' after 'if'.")
        condition = self.parse_expression()
        self.consume('RIGHT_PAREN', "Expect ')' after if condition.")
        then_branch = self.parse_statement()
        else_branch = None
        if self.accept('ELSE'):
            else_branch = self.parse_statement()
        return If(condition, then_branch, else_branch)

    def parse_print_stmt(self) -> Print:
        self.consume('PRINT', "Expect 'print'.")
        value = self.parse_expression()
        self.consume('SEMICOLON', "Expect ';' after value.")
        return Print(value)

    def parse_return_stmt(self) -> Return:
        keyword = self.consume('RETURN', "Expect 'return'.")
        value: Optional[Expr] = None
        if not self.match('SEMICOLON'):
            value = self.parse_expression()
        self.consume('SEMICOLON', "Expect ';' after return value.")
        return Return(keyword, value)

    def parse_while_stmt(self) -> While:
        self.consume('WHILE', "Expect 'while'.")
        self.consume('LEFT_PAREN', "Expect '(' after 'while'.")
        condition = self.parse_expression()
        self.consume('RIGHT_PAREN', "Expect ')' after condition.")
        body = self.parse_statement()
        return While(condition, body)

    def parse_block(self) -> List[Stmt]:
        """Parse the statements of a block whose '{' was already consumed."""
        statements: List[Stmt] = []
        while not self.match('RIGHT_BRACE') and not self.is_at_end():
            stmt = self.parse_declaration()
            if stmt is not None:
                statements.append(stmt)
        self.consume('RIGHT_BRACE', "Expect '}' after block.")
        return statements

    def parse_expression_stmt(self) -> Expression:
        expr = self.parse_expression()
        self.consume('SEMICOLON', "Expect ';' after expression.")
        return Expression(expr)

    # Expressions

    def parse_expression(self) -> Expr:
        return self.parse_assignment()

    def parse_assignment(self) -> Expr:
        expr = self.parse_logic_or()
        if self.match('EQUAL'):
            equals = self.advance()
            value = self.parse_assignment()
            if isinstance(expr, Variable):
                return Assign(expr.name, value)
            if isinstance(expr, Get):
                return Set(expr.object, expr.name, value)
            # Reported but not raised: the parser is not confused.
            self.error(equals, 'Invalid assignment target.')
        return expr

    def parse_logic_or(self) -> Expr:
        expr = self.parse_logic_and()
        while self.match('OR'):
            operator = self.advance()
            right = self.parse_logic_and()
            expr = Logical(expr, operator, right)
        return expr

    def parse_logic_and(self) -> Expr:
        expr = self.parse_equality()
        while self.match('AND'):
            operator = self.advance()
            right = self.parse_equality()
            expr = Logical(expr, operator, right)
        return expr

    def parse_equality(self) -> Expr:
        expr = self.parse_comparison()
        while self.match('BANG_EQUAL', 'EQUAL_EQUAL'):
            operator = self.advance()
            right = self.parse_comparison()
            expr = Binary(expr, operator, right)
        return expr

    def parse_comparison(self) -> Expr:
        expr = self.parse_term()
        while self.match('GREATER', 'GREATER_EQUAL', 'LESS', 'LESS_EQUAL'):
            operator = self.advance()
            right = self.parse_term()
            expr = Binary(expr, operator, right)
        return expr

    def parse_term(self) -> Expr:
        expr = self.parse_factor()
        while self.match('MINUS', 'PLUS'):
            operator = self.advance()
            right = self.parse_factor()
            expr = Binary(expr, operator, right)
        return expr

    def parse_factor(self) -> Expr:
        expr = self.parse_unary()
        while self.match('SLASH', 'STAR'):
            operator = self.advance()
            right = self.parse_unary()
            expr = Binary(expr, operator, right)
        return expr

    def parse_unary(self) -> Expr:
        if self.match('BANG', 'MINUS'):
            operator = self.advance()
            right = self.parse_unary()
            return Unary(operator, right)
        return self.parse_call()

    def parse_call(self) -> Expr:
        expr = self.parse_primary()
        while True:
            if self.accept('LEFT_PAREN'):
                expr = self.finish_call(expr)
                continue
            if self.accept('DOT'):
                name = self.consume('IDENTIFIER', "Expect property name after '.'.")
                expr = Get(expr, name)
                continue
            break
        return expr

    def finish_call(self, callee: Expr) -> Call:
        arguments: List[Expr] = []
        if not self.match('RIGHT_PAREN'):
            while True:
                if len(arguments) >= MAX_ARGUMENTS:
                    self.error(self.peek(), f"Can't have more than {MAX_ARGUMENTS} arguments.")
                arguments.append(self.parse_expression())
                if not self.accept('COMMA'):
                    break
        paren = self.consume('RIGHT_PAREN', "Expect ')' after arguments.")
        return Call(callee, paren, arguments)

    def parse_primary(self) -> Expr:
        token = self.peek()
        if self.accept('FALSE'):
            return Literal(False)
        if self.accept('TRUE'):
            return Literal(True)
        if self.accept('NIL'):
            return Literal(None)
        if self.accept('NUMBER', 'STRING'):
            return Literal(token.literal)
        if self.accept('SUPER'):
            self.consume('DOT', "Expect '.' after 'super'.")
            method = self.consume('IDENTIFIER', 'Expect superclass method name.')
            return Super(token, method)
        if self.accept('THIS'):
            return This(token)
        if self.accept('IDENTIFIER'):
            return Variable(token)
        if self.accept('LEFT_PAREN'):
            expr = self.parse_expression()
            self.consume('RIGHT_PAREN', "Expect ')' after expression.")
            return Grouping(expr)
        raise self.error(token, 'Expect expression.')


def parse_program(tokens: List[Token], reporter: ErrorReporter) -> List[Stmt]:
    """Parse a token stream into the list of top-level statements."""
    return Parser(tokens, reporter).parse_program()
