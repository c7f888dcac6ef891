"""CLI entry point for the Lox interpreter.

Usage:
    python -m lox [-v|-vv|-vvv] [script]
    python -m lox [-v...] --emit-ast <script>
    python -m lox [-v...] --ast <ast_json_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --emit-ast    Parse the given .lox file and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file

Without a script the interpreter starts a REPL: each line is run on its
own, bare expressions print their value, and errors are reported without
ending the session.

Exit codes follow the usual Lox conventions: 64 for bad usage, 65 when
the program has a syntax or resolution error, 66 when the input file is
missing and 70 when it stopped on a runtime error. Debug information is
written to `debug.txt` in the current directory when verbosity is greater
than zero.
"""

import argparse
import json
import sys
from pathlib import Path

from .ast_json import program_from_obj, program_to_obj
from .errors import ErrorReporter
from .interpreter import Interpreter, InterpreterConfig, run_program
from .parser import parse_program
from .resolver import Resolver
from .scanner import scan_tokens

EXIT_USAGE = 64
EXIT_DATA_ERROR = 65
EXIT_NO_INPUT = 66
EXIT_SOFTWARE = 70

# Lox recursion goes through several Python frames per call.
RECURSION_LIMIT = 10000


def read_source(path: Path) -> str:
    if not path.exists():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(EXIT_NO_INPUT)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def exit_code(reporter: ErrorReporter) -> int:
    if reporter.had_error:
        return EXIT_DATA_ERROR
    if reporter.had_runtime_error:
        return EXIT_SOFTWARE
    return 0


def run_file(path: Path, debug_level: int) -> int:
    source = read_source(path)
    interpreter = Interpreter(debug_level=debug_level)
    try:
        reporter = run_program(source, interpreter)
    finally:
        interpreter.close()
    return exit_code(reporter)


def run_prompt(debug_level: int) -> int:
    interpreter = Interpreter(debug_level=debug_level)
    config = InterpreterConfig(print_expressions=True)
    try:
        while True:
            try:
                line = input('> ')
            except EOFError:
                print()
                break
            run_program(line, interpreter, config=config)
            # One bad line must not poison the next.
            interpreter.reporter.reset()
    finally:
        interpreter.close()
    return 0


def emit_ast(path: Path) -> int:
    source = read_source(path)
    reporter = ErrorReporter()
    statements = parse_program(scan_tokens(source, reporter), reporter)
    if reporter.had_error:
        return EXIT_DATA_ERROR
    out_path = path.with_name(path.name + '.ast.json')
    with open(out_path, 'w', encoding='utf-8') as out:
        json.dump(program_to_obj(statements), out, ensure_ascii=False, indent=2)
    print(str(out_path))
    return 0


def run_ast(path: Path, debug_level: int) -> int:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            statements = program_from_obj(json.load(f))
    except (json.JSONDecodeError, TypeError, ValueError, KeyError) as e:
        print(f"Error: invalid AST file {path}: {e}", file=sys.stderr)
        return EXIT_DATA_ERROR
    interpreter = Interpreter(debug_level=debug_level)
    reporter = interpreter.reporter
    try:
        resolved = Resolver(reporter).resolve(statements)
        if not reporter.had_error:
            interpreter.interpret(statements, resolved)
    finally:
        interpreter.close()
    return exit_code(reporter)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog='lox', description="Lox language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='LOX_FILE', help='emit AST JSON for the given .lox file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('script', nargs='?', help='Lox script to run; starts a REPL when omitted')
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        # argparse exits with 2; Lox drivers report usage errors as 64.
        if e.code:
            sys.exit(EXIT_USAGE)
        raise

    sys.setrecursionlimit(max(sys.getrecursionlimit(), RECURSION_LIMIT))

    if args.emit_ast:
        sys.exit(emit_ast(Path(args.emit_ast)))
    if args.ast:
        ast_path = Path(args.ast)
        if not ast_path.exists():
            print(f"Error: file {ast_path} not found", file=sys.stderr)
            sys.exit(EXIT_NO_INPUT)
        sys.exit(run_ast(ast_path, args.v))
    if args.script:
        sys.exit(run_file(Path(args.script), args.v))
    sys.exit(run_prompt(args.v))


if __name__ == '__main__':
    main()
