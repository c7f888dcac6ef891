import io
import math

import pytest

from lox.errors import ErrorReporter
from lox.interpreter import Interpreter, InterpreterConfig, divide, numbers_equal, run_program


def run(source, capsys):
    reporter = run_program(source)
    captured = capsys.readouterr()
    return captured.out.splitlines(), captured.err, reporter


def test_arithmetic_and_number_formatting(capsys):
    out, err, _ = run('print 1 + 2 * 3; print 10 / 4; print -3 - 0.5; print 2 * 1000000;', capsys)
    assert out == ['7', '2.5', '-3.5', '2000000']
    assert err == ''


def test_large_and_small_numbers_use_python_repr(capsys):
    source = 'print 10000000; print 10000000000000000000000; print 0.001; print 1 / 100000;'
    out, _, _ = run(source, capsys)
    assert out == ['10000000', '1e+22', '0.001', '1e-05']


def test_division_by_zero_follows_ieee(capsys):
    out, _, reporter = run('print 1 / 0; print -1 / 0; print 0 / 0;', capsys)
    assert out == ['inf', '-inf', 'nan']
    assert not reporter.had_runtime_error


def test_number_equality_compares_boxed_values(capsys):
    source = (
        'var n = 0 / 0;\n'
        'print n == n; print n != n; print n == 0 / 0; print n == 1;\n'
        'print 0 == -0; print 0 != -0; print -0 == -0; print 0.5 == 1 / 2;\n'
    )
    out, err, _ = run(source, capsys)
    assert out == ['true', 'false', 'true', 'false', 'false', 'true', 'true', 'true']
    assert err == ''


@pytest.mark.parametrize('a, b, expected', [
    (math.nan, math.nan, True),
    (math.nan, 1.0, False),
    (0.0, -0.0, False),
    (-0.0, -0.0, True),
    (math.inf, math.inf, True),
    (2.0, 2.0, True),
])
def test_numbers_equal(a, b, expected):
    assert numbers_equal(a, b) is expected


@pytest.mark.parametrize('a, b, expected', [
    (1.0, 0.0, math.inf),
    (-2.0, 0.0, -math.inf),
    (3.0, -0.0, -math.inf),
    (9.0, 3.0, 3.0),
])
def test_divide(a, b, expected):
    assert divide(a, b) == expected


def test_divide_zero_by_zero_is_nan():
    assert math.isnan(divide(0.0, 0.0))


def test_string_concatenation(capsys):
    out, err, _ = run('print "a" + "b"; print "n" + 1; print 2.5 + "x"; print "" + "";', capsys)
    assert out == ['ab', 'n1', '2.5x', '']
    assert err == ''


@pytest.mark.parametrize('expr', ['1 + true', '"a" + nil', 'nil + nil', 'true + "b"'])
def test_bad_plus_operands(capsys, expr):
    out, err, reporter = run(f'print {expr};', capsys)
    assert out == []
    assert err == 'Operands must be two numbers or two strings.\n[line 1]\n'
    assert reporter.had_runtime_error


def test_arithmetic_type_errors(capsys):
    _, err, _ = run('print -"x";', capsys)
    assert err == 'Operand must be a number.\n[line 1]\n'
    _, err, _ = run('\nprint 1 < "2";', capsys)
    assert err == 'Operands must be numbers.\n[line 2]\n'


def test_equality_never_raises(capsys):
    source = (
        'print nil == nil; print nil == false; print 1 == 1; print 1 == "1";'
        'print "a" == "a"; print true == 1; print clock == clock; print 1 != 2;'
    )
    out, err, _ = run(source, capsys)
    assert out == ['true', 'false', 'true', 'false', 'true', 'false', 'true', 'true']
    assert err == ''


def test_instances_compare_by_identity(capsys):
    out, _, _ = run('class A {} var a = A(); var b = A(); print a == a; print a == b;', capsys)
    assert out == ['true', 'false']


def test_truthiness(capsys):
    source = 'print !nil; print !false; print !0; print !""; print !clock;'
    out, _, _ = run(source, capsys)
    assert out == ['true', 'true', 'false', 'false', 'false']


def test_logical_operators_return_operands(capsys):
    source = 'print nil or "yes"; print 0 or "no"; print nil and boom; print 1 and 2; print false or nil;'
    out, err, _ = run(source, capsys)
    assert out == ['yes', '0', 'nil', '2', 'nil']
    assert err == ''


def test_short_circuit_skips_side_effects(capsys):
    source = (
        'var calls = 0;\n'
        'fun bump() { calls = calls + 1; return true; }\n'
        'true or bump(); false and bump(); false or bump();\n'
        'print calls;'
    )
    out, _, _ = run(source, capsys)
    assert out == ['1']


def test_undefined_variable(capsys):
    out, err, reporter = run('print "start";\nprint missing;\nprint "never";', capsys)
    assert out == ['start']
    assert err == "Undefined variable 'missing'.\n[line 2]\n"
    assert reporter.had_runtime_error and not reporter.had_error


def test_assign_to_undefined_global(capsys):
    _, err, _ = run('missing = 1;', capsys)
    assert err == "Undefined variable 'missing'.\n[line 1]\n"


def test_uninitialized_variable_is_nil(capsys):
    out, _, _ = run('var a; print a;', capsys)
    assert out == ['nil']


def test_arity_mismatch(capsys):
    _, err, _ = run('fun f(a, b) {}\nf(1);', capsys)
    assert err == 'Expected 2 arguments but got 1.\n[line 2]\n'
    _, err, _ = run('clock(1);', capsys)
    assert err == 'Expected 0 arguments but got 1.\n[line 1]\n'


def test_calling_non_callable(capsys):
    _, err, _ = run('"text"();', capsys)
    assert err == 'Can only call functions and classes.\n[line 1]\n'


def test_function_without_return_yields_nil(capsys):
    out, _, _ = run('fun f() { 1; } print f(); fun g() { return; } print g();', capsys)
    assert out == ['nil', 'nil']


def test_return_unwinds_loops_and_blocks(capsys):
    source = (
        'fun find() {\n'
        '  for (var i = 0; i < 10; i = i + 1) {\n'
        '    { if (i == 3) return i; }\n'
        '  }\n'
        '  return -1;\n'
        '}\n'
        'print find();'
    )
    out, _, _ = run(source, capsys)
    assert out == ['3']


def test_closures_capture_declaration_scope(capsys):
    source = (
        'var a = "global";\n'
        '{\n'
        '  fun show() { print a; }\n'
        '  show();\n'
        '  var a = "block";\n'
        '  show();\n'
        '}'
    )
    out, _, _ = run(source, capsys)
    assert out == ['global', 'global']


def test_recursion(capsys):
    out, _, _ = run('fun fact(n) { if (n <= 1) return 1; return n * fact(n - 1); } print fact(10);', capsys)
    assert out == ['3628800']


def test_stack_overflow_is_a_runtime_error(capsys):
    out, err, reporter = run('fun f() { f(); }\nf();\nprint "unreached";', capsys)
    assert out == []
    assert err == 'Stack overflow.\n[line 1]\n'
    assert reporter.had_runtime_error


def test_runtime_error_stops_at_first_failure(capsys):
    out, err, _ = run('print 1;\nprint nil + 1;\nprint 2;\nprint nil + 2;', capsys)
    assert out == ['1']
    assert err.count('[line') == 1


def test_syntax_error_prevents_execution(capsys):
    out, err, reporter = run('print "side effect";\nprint ;', capsys)
    assert out == []
    assert err == "[line 2] Error at ';': Expect expression.\n"
    assert reporter.had_error and not reporter.had_runtime_error


def test_resolve_error_prevents_execution(capsys):
    out, err, reporter = run('print "side effect";\nreturn 1;', capsys)
    assert out == []
    assert reporter.had_error


def test_clock_is_a_number(capsys):
    out, _, _ = run('var t = clock(); print t > 0; print clock;', capsys)
    assert out == ['true', '<native fn>']


def test_session_keeps_globals_between_runs(capsys):
    reporter = ErrorReporter()
    interpreter = Interpreter(reporter=reporter)
    config = InterpreterConfig(print_expressions=True)
    run_program('var count = 1;', interpreter, config=config)
    run_program('fun inc() { count = count + 1; return count; }', interpreter, config=config)
    run_program('inc();', interpreter, config=config)
    run_program('count * 10;', interpreter, config=config)
    assert capsys.readouterr().out == '2\n20\n'


def test_session_recovers_after_errors(capsys):
    reporter = ErrorReporter()
    interpreter = Interpreter(reporter=reporter)
    run_program('print undefined;', interpreter)
    assert reporter.had_runtime_error
    reporter.reset()
    run_program('var ok = "fine"; print ok;', interpreter)
    captured = capsys.readouterr()
    assert captured.out == 'fine\n'
    assert not reporter.had_error and not reporter.had_runtime_error


def test_expressions_are_not_echoed_by_default(capsys):
    out, _, _ = run('1 + 2;', capsys)
    assert out == []


def test_reporter_stream(capsys):
    stream = io.StringIO()
    run_program('print nil + 1;', reporter=ErrorReporter(stream))
    assert stream.getvalue() == 'Operands must be two numbers or two strings.\n[line 1]\n'
    assert capsys.readouterr().err == ''


def test_debug_log_written(tmp_path, capsys):
    log = tmp_path / 'debug.txt'
    interpreter = Interpreter(debug_level=3, debug_file=str(log))
    run_program('var a = 1;\nfun f(x) { if (x) return x; }\nf(a);\nprint nil + 1;', interpreter)
    interpreter.close()
    lines = log.read_text().splitlines()
    assert lines[0] == 'run 4 statements'
    assert 'declare a: number = 1' in lines
    assert 'define function f' in lines
    assert 'call <fn f> with 1 arguments' in lines
    assert 'if condition 1 -> True' in lines
    assert lines[-1] == 'runtime error at line 4: Operands must be two numbers or two strings.'
