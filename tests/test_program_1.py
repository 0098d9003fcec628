from pathlib import Path
from mplang.interpreter import parse_program, Interpreter
from mplang.types import NIL

EXAMPLES = Path(__file__).parent.parent / 'examples'


def test_program_1(capsys):
    source = (EXAMPLES / 'program_1.mp').read_text(encoding='utf-8')
    ast = parse_program(source)
    interp = Interpreter()
    result = interp.run(ast)
    out = capsys.readouterr().out.strip()
    assert out == 'Hello World!!'
    assert result == NIL
