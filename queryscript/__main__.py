"""CLI entry point for the QueryScript interpreter.

Usage:
    python -m queryscript [-v|-vv] <program_file>
    python -m queryscript [-v...] -e <source>
    python -m queryscript [-v...] --emit-ast <program_file>
    python -m queryscript [-v...] --ast <ast_json_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  -e SOURCE     Evaluate SOURCE given on the command line
  --emit-ast    Parse the given .qs file and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file
  --debug-file  Where debug output goes (default: debug.txt)

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero: `-v` logs each run and its result, `-vv`
adds the token trace, bindings and native calls. The rendering of the
program's final value is printed to standard output.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from .ast_json import ast_to_obj, ast_from_obj
from .errors import NestingTooDeep, QueryError
from .interpreter import Interpreter
from .parser import parse_program
from .types import to_string


def configure_logging(verbosity: int, debug_file: str) -> None:
    if verbosity <= 0:
        return
    handler = logging.FileHandler(debug_file, mode='w', encoding='utf-8')
    handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
    root = logging.getLogger('queryscript')
    root.addHandler(handler)
    root.setLevel(logging.INFO if verbosity == 1 else logging.DEBUG)


def read_file(path: Path) -> str:
    if not path.exists():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(1)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="QueryScript interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--debug-file', default='debug.txt', help='file receiving debug output (default: debug.txt)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('-e', dest='source', metavar='SOURCE', help='evaluate SOURCE')
    group.add_argument('--emit-ast', metavar='QS_FILE', help='emit AST JSON for the given .qs file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='QueryScript program file (.qs) to execute')
    args = parser.parse_args(argv)
    configure_logging(args.v, args.debug_file)

    # Emit AST mode
    if args.emit_ast:
        program_file = Path(args.emit_ast)
        source = read_file(program_file)
        try:
            ast_program = parse_program(source)
        except QueryError as e:
            print(e.describe(source), file=sys.stderr)
            sys.exit(1)
        try:
            text = json.dumps(ast_to_obj(ast_program), ensure_ascii=False, indent=2)
        except RecursionError:
            print(NestingTooDeep().describe(), file=sys.stderr)
            sys.exit(1)
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            out.write(text)
        print(str(out_path))
        return

    # Execute from AST JSON
    if args.ast:
        ast_path = Path(args.ast)
        text = read_file(ast_path)
        try:
            ast_program = ast_from_obj(json.loads(text))
        except RecursionError:
            print(NestingTooDeep().describe(), file=sys.stderr)
            sys.exit(1)
        except (ValueError, KeyError, TypeError) as e:
            # JSONDecodeError is a ValueError
            print(f"Error: invalid AST file {ast_path}: {e}", file=sys.stderr)
            sys.exit(1)
        try:
            result = Interpreter().run(ast_program)
        except QueryError as e:
            print(e.describe(), file=sys.stderr)
            sys.exit(1)
        print(to_string(result))
        return

    # Default: execute source given inline or from a file
    if args.source is not None:
        source = args.source
    elif args.program:
        source = read_file(Path(args.program))
    else:
        parser.error('missing program file; or use -e/--emit-ast/--ast')
    try:
        result = Interpreter().run(parse_program(source))
    except QueryError as e:
        print(e.describe(source), file=sys.stderr)
        sys.exit(1)
    print(to_string(result))


if __name__ == '__main__':
    main()
