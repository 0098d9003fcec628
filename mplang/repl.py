"""Line-based interactive shell for Mp.

Each entry is tokenized, parsed and evaluated in one environment that lives
for the whole session, so `let` and `fn` definitions carry over between
entries. An entry continues over several lines while a bracket, string or
block comment is left open. Errors are reported on stderr and the session
continues.
"""

import sys

from .environment import Environment
from .errors import InterpreterError, LexError, LexErrorKind, ParseError
from .interpreter import eval_with_env
from .lexer import TokenKind, tokenize
from .parser import parse
from .std import builtin_environment
from .types import inspect

PROMPT = '>> '
CONTINUATION_PROMPT = '.. '

_OPENERS = (TokenKind.LEFT_PAREN, TokenKind.LEFT_BRACE, TokenKind.LEFT_BRACKET)
_CLOSERS = (TokenKind.RIGHT_PAREN, TokenKind.RIGHT_BRACE, TokenKind.RIGHT_BRACKET)

HELP_TEXT = """Available commands:
  exit     - exit the program
  help     - display this help message
  clear    - clear the environment"""


class Session:
    def __init__(self):
        self.env: Environment = builtin_environment()

    def reset(self):
        self.env = builtin_environment()


def handle_command(line: str, session: Session) -> bool:
    """Run one REPL line. Returns False when the session should end."""
    cmd = line.strip()
    if not cmd:
        return True
    if cmd == 'exit':
        return False
    if cmd == 'help':
        print(HELP_TEXT)
        return True
    if cmd == 'clear':
        session.reset()
        print('Environment cleared.')
        return True
    try:
        tokens = tokenize(cmd)
    except LexError as e:
        print(f"Lexical error: {e}", file=sys.stderr)
        return True
    try:
        program = parse(tokens)
    except ParseError as e:
        print(f"Grammar error: {e}", file=sys.stderr)
        return True
    try:
        result = eval_with_env(program, session.env)
    except (InterpreterError, RecursionError) as e:
        print(f"Execution error: {e}", file=sys.stderr)
        return True
    print(f"=> {inspect(result)}")
    return True


def needs_more_input(source: str) -> bool:
    """True while `source` leaves a bracket, string or block comment open."""
    try:
        tokens = tokenize(source)
    except LexError as e:
        return e.kind in (LexErrorKind.UNCLOSED_STRING, LexErrorKind.UNCLOSED_COMMENT)
    depth = 0
    for tok in tokens:
        if tok.kind in _OPENERS:
            depth += 1
        elif tok.kind in _CLOSERS:
            depth -= 1
    return depth > 0


def run_repl(session: Session = None):
    session = session or Session()
    print("Welcome to Mp Lang! (type 'help' for help)")
    lines = []
    while True:
        try:
            line = input(CONTINUATION_PROMPT if lines else PROMPT)
        except KeyboardInterrupt:
            lines = []
            print("\nUse Ctrl-D to exit.")
            continue
        except EOFError:
            print("\nGoodbye!")
            break
        lines.append(line)
        entry = "\n".join(lines)
        if needs_more_input(entry):
            continue
        lines = []
        if not handle_command(entry, session):
            break
