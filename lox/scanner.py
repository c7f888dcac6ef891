"""Scanner for the Lox language.

The scanner turns raw source text into the token stream consumed by the
parser. Lexing is delegated to a Lark grammar that only declares terminals;
the grammar is run through Lark's basic lexer (`Lark.lex`) and never parsed.
Keywords are declared as string terminals, which Lark matches against the
IDENTIFIER pattern so that `and` becomes AND while `android` stays an
identifier.

Errors do not stop the scan. An unexpected character is reported and lexing
restarts right after it, keeping line numbers in step with the original
source. An unterminated string is reported and swallows the rest of the
input, as it would in any other Lox implementation.
"""

from __future__ import annotations

from typing import List

from lark import Lark
from lark.exceptions import UnexpectedCharacters

from .errors import ErrorReporter
from .tokens import KEYWORDS, Token


LOX_TERMINALS = r"""
    start: _token*

    _token: LEFT_PAREN | RIGHT_PAREN | LEFT_BRACE | RIGHT_BRACE
          | COMMA | DOT | MINUS | PLUS | SEMICOLON | SLASH | STAR
          | BANG | BANG_EQUAL | EQUAL | EQUAL_EQUAL
          | GREATER | GREATER_EQUAL | LESS | LESS_EQUAL
          | IDENTIFIER | STRING | UNTERMINATED_STRING | NUMBER
          | AND | CLASS | ELSE | FALSE | FOR | FUN | IF | NIL | OR
          | PRINT | RETURN | SUPER | THIS | TRUE | VAR | WHILE

    LEFT_PAREN: "("
    RIGHT_PAREN: ")"
    LEFT_BRACE: "{"
    RIGHT_BRACE: "}"
    COMMA: ","
    DOT: "."
    MINUS: "-"
    PLUS: "+"
    SEMICOLON: ";"
    SLASH: "/"
    STAR: "*"
    BANG: "!"
    BANG_EQUAL: "!="
    EQUAL: "="
    EQUAL_EQUAL: "=="
    GREATER: ">"
    GREATER_EQUAL: ">="
    LESS: "<"
    LESS_EQUAL: "<="

    AND: "and"
    CLASS: "class"
    ELSE: "else"
    FALSE: "false"
    FOR: "for"
    FUN: "fun"
    IF: "if"
    NIL: "nil"
    OR: "or"
    PRINT: "print"
    RETURN: "return"
    SUPER: "super"
    THIS: "this"
    TRUE: "true"
    VAR: "var"
    WHILE: "while"

    IDENTIFIER: /[A-Za-z_][A-Za-z0-9_]*/
    NUMBER: /[0-9]+(\.[0-9]+)?/
    STRING.2: /"[^"]*"/
    UNTERMINATED_STRING: /"[^"]*\Z/

    COMMENT: /\/\/[^\n]*/
    WHITESPACE: /[ \t\r\n]+/
    %ignore COMMENT
    %ignore WHITESPACE
"""


LOX_LEXER = Lark(
    LOX_TERMINALS,
    parser='lalr',
    lexer='basic',
)


class Scanner:
    def __init__(self, source: str, reporter: ErrorReporter):
        self.source = source
        self.reporter = reporter
        self.tokens: List[Token] = []
        self.line = 1

    def scan_tokens(self) -> List[Token]:
        start = 0
        while start <= len(self.source):
            resume = self.scan_from(start)
            if resume is None:
                break
            start = resume
        self.tokens.append(Token('EOF', '', None, self.line))
        return self.tokens

    def scan_from(self, start: int):
        """Lex `source[start:]`, returning the offset to resume at after an error."""
        base_line = self.line
        try:
            for lark_token in LOX_LEXER.lex(self.source[start:]):
                self.add_token(lark_token, base_line)
        except UnexpectedCharacters as err:
            self.line = base_line + err.line - 1
            self.reporter.error(self.line, 'Unexpected character.')
            return start + err.pos_in_stream + 1
        self.line = base_line + self.source.count('\n', start)
        return None

    def add_token(self, lark_token, base_line: int):
        line = base_line + lark_token.line - 1
        kind = lark_token.type
        text = str(lark_token)
        if kind == 'UNTERMINATED_STRING':
            # Lox reports the line where the input ran out.
            self.reporter.error(line + text.count('\n'), 'Unterminated string.')
            return
        literal = None
        if kind == 'NUMBER':
            literal = float(text)
        elif kind == 'STRING':
            literal = text[1:-1]
        elif kind == 'IDENTIFIER' and text in KEYWORDS:
            kind = KEYWORDS[text]
        self.tokens.append(Token(kind, text, literal, line))


def scan_tokens(source: str, reporter: ErrorReporter) -> List[Token]:
    """Convert source code into a list of tokens ending with an EOF token."""
    return Scanner(source, reporter).scan_tokens()
