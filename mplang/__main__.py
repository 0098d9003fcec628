"""CLI entry point for the Mp interpreter.

Usage:
    python -m mplang [-v|-vv|-vvv|-vvvv] <program_file>
    python -m mplang [-v...] --emit-ast <program_file>
    python -m mplang [-v...] --ast <ast_json_file>
    python -m mplang

Options:
  -v            Increase debug verbosity (can be repeated)
  --emit-ast    Parse the given .mp file and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file

Running a program prints its result as `=> <value>`. Debug information is
written to `debug.txt` in the current directory when verbosity is greater
than zero. Without arguments an interactive session is started.
"""

import argparse
import json
import sys
from pathlib import Path

from .ast import Program
from .ast_json import ast_to_obj, ast_from_obj
from .errors import InterpreterError, LexError, ParseError
from .interpreter import Interpreter
from .parser import parse_program
from .repl import run_repl
from .types import inspect


def read_source(program_file: Path) -> str:
    if not program_file.exists():
        print(f"Error: file {program_file} not found", file=sys.stderr)
        sys.exit(1)
    with open(program_file, 'r', encoding='utf-8') as f:
        return f.read()


def parse_or_exit(source: str) -> Program:
    try:
        return parse_program(source)
    except LexError as e:
        print(f"Lexical error: {e}", file=sys.stderr)
    except ParseError as e:
        print(f"Grammar error: {e}", file=sys.stderr)
    sys.exit(1)


def execute(ast_program: Program, debug_level: int):
    interpreter = Interpreter(debug_level=debug_level)
    try:
        result = interpreter.run(ast_program)
    except (InterpreterError, RecursionError) as e:
        print(f"Execution error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        interpreter.close()
    print(f"=> {inspect(result)}")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Mp language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='MP_FILE', help='emit AST JSON for the given .mp file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='Mp program file (.mp) to execute')
    args = parser.parse_args(argv)

    # Emit AST mode
    if args.emit_ast:
        program_file = Path(args.emit_ast)
        ast_program = parse_or_exit(read_source(program_file))
        obj = ast_to_obj(ast_program)
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(obj, out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return

    # Execute from AST JSON
    if args.ast:
        ast_path = Path(args.ast)
        if not ast_path.exists():
            print(f"Error: file {ast_path} not found", file=sys.stderr)
            sys.exit(1)
        with open(ast_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        execute(ast_from_obj(data), args.v)
        return

    if not args.program:
        run_repl()
        return
    execute(parse_or_exit(read_source(Path(args.program))), args.v)


if __name__ == '__main__':
    main()
