from pathlib import Path

from lox import run_program


def test_program_5_control_flow(capsys):
    with open(Path(__file__).parent.parent / 'examples' / 'program_5.lox', 'r', encoding='utf-8') as f:
        source = f.read()
    reporter = run_program(source)
    out_lines = capsys.readouterr().out.strip().split('\n')
    assert not reporter.had_error and not reporter.had_runtime_error
    assert out_lines == [
        'while 0', 'while 1', 'while 2',
        'for 3', 'for 2', 'for 1',
        '0', '1',
        'default', 'first', 'nil', '2',
        'zero is truthy', 'empty string is truthy',
    ]
