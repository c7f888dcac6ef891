from lox.ast import (
    Assign, Binary, Block, Call, Class, Expression, Function, Get, Grouping,
    Literal, Logical, Print, Set, Super, Unary, Var, Variable, While,
)
from lox.errors import ErrorReporter
from lox.parser import parse_program
from lox.scanner import scan_tokens


def parse(source, reporter=None):
    reporter = reporter if reporter is not None else ErrorReporter()
    return parse_program(scan_tokens(source, reporter), reporter)


def parse_expr(source):
    statements = parse(source + ';')
    assert len(statements) == 1 and isinstance(statements[0], Expression)
    return statements[0].expression


def test_precedence_and_left_associativity():
    expr = parse_expr('1 - 2 - 3 * 4')
    # (1 - 2) - (3 * 4)
    assert isinstance(expr, Binary) and expr.operator.lexeme == '-'
    assert isinstance(expr.left, Binary) and expr.left.operator.lexeme == '-'
    assert isinstance(expr.right, Binary) and expr.right.operator.lexeme == '*'


def test_comparison_binds_tighter_than_equality():
    expr = parse_expr('1 < 2 == true')
    assert expr.operator.type == 'EQUAL_EQUAL'
    assert expr.left.operator.type == 'LESS'


def test_logical_operators():
    expr = parse_expr('a or b and c')
    assert isinstance(expr, Logical) and expr.operator.type == 'OR'
    assert isinstance(expr.right, Logical) and expr.right.operator.type == 'AND'


def test_unary_is_right_associative():
    expr = parse_expr('!!-x')
    assert isinstance(expr, Unary) and expr.operator.type == 'BANG'
    assert isinstance(expr.right, Unary) and expr.right.operator.type == 'BANG'
    assert isinstance(expr.right.right, Unary) and expr.right.right.operator.type == 'MINUS'


def test_assignment_is_right_associative():
    expr = parse_expr('a = b = 1')
    assert isinstance(expr, Assign) and expr.name.lexeme == 'a'
    assert isinstance(expr.value, Assign) and expr.value.name.lexeme == 'b'


def test_property_assignment_becomes_set():
    expr = parse_expr('point.inner.x = 3')
    assert isinstance(expr, Set)
    assert expr.name.lexeme == 'x'
    assert isinstance(expr.object, Get) and expr.object.name.lexeme == 'inner'


def test_call_chain():
    expr = parse_expr('f(1)(2).g(a, b)')
    assert isinstance(expr, Call) and len(expr.arguments) == 2
    assert expr.paren.type == 'RIGHT_PAREN'
    assert isinstance(expr.callee, Get)
    inner = expr.callee.object
    assert isinstance(inner, Call) and isinstance(inner.callee, Call)


def test_grouping_and_super():
    expr = parse_expr('(super.method)')
    assert isinstance(expr, Grouping)
    assert isinstance(expr.expression, Super)
    assert expr.expression.method.lexeme == 'method'


def test_for_loop_is_desugared():
    statements = parse('for (var i = 0; i < 3; i = i + 1) print i;')
    assert len(statements) == 1
    outer = statements[0]
    assert isinstance(outer, Block)
    init, loop = outer.statements
    assert isinstance(init, Var)
    assert isinstance(loop, While)
    assert isinstance(loop.body, Block)
    body, increment = loop.body.statements
    assert isinstance(body, Print)
    assert isinstance(increment, Expression) and isinstance(increment.expression, Assign)


def test_for_loop_without_clauses():
    statements = parse('for (;;) print 1;')
    loop = statements[0]
    assert isinstance(loop, While)
    assert isinstance(loop.condition, Literal) and loop.condition.value is True
    assert isinstance(loop.body, Print)


def test_class_declaration():
    statements = parse('class B < A { init(x) { this.x = x; } get() { return this.x; } }')
    klass = statements[0]
    assert isinstance(klass, Class)
    assert klass.name.lexeme == 'B'
    assert isinstance(klass.superclass, Variable) and klass.superclass.name.lexeme == 'A'
    assert [m.name.lexeme for m in klass.methods] == ['init', 'get']
    assert all(isinstance(m, Function) for m in klass.methods)
    assert [p.lexeme for p in klass.methods[0].params] == ['x']


def test_identical_references_are_distinct_nodes():
    expr = parse_expr('a + a')
    assert expr.left is not expr.right
    assert expr.left != expr.right


def test_invalid_assignment_target_is_reported(capsys):
    reporter = ErrorReporter()
    statements = parse('1 + 2 = 3; print "next";', reporter)
    assert reporter.had_error
    assert capsys.readouterr().err == "[line 1] Error at '=': Invalid assignment target.\n"
    # Parsing carried on past the bad target.
    assert len(statements) == 2
    assert isinstance(statements[1], Print)


def test_recovers_and_reports_multiple_errors(capsys):
    reporter = ErrorReporter()
    source = 'var = 1;\nprint 2;\nprint (3;\nvar ok = 4;'
    statements = parse(source, reporter)
    err = capsys.readouterr().err.splitlines()
    assert err == [
        "[line 1] Error at '=': Expect variable name.",
        "[line 3] Error at ';': Expect ')' after expression.",
    ]
    assert [type(s) for s in statements] == [Print, Var]


def test_error_at_end(capsys):
    reporter = ErrorReporter()
    parse('print 1', reporter)
    assert capsys.readouterr().err == "[line 1] Error at end: Expect ';' after value.\n"


def test_too_many_arguments_is_reported_but_parsed(capsys):
    reporter = ErrorReporter()
    args = ', '.join(['1'] * 256)
    statements = parse(f'f({args});', reporter)
    assert reporter.had_error
    assert "Can't have more than 255 arguments." in capsys.readouterr().err
    assert len(statements[0].expression.arguments) == 256
