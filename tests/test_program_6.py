from pathlib import Path
from mplang.interpreter import parse_program, Interpreter
from mplang.types import IntVal

EXAMPLES = Path(__file__).parent.parent / 'examples'


def test_program_6(capsys):
    source = (EXAMPLES / 'program_6.mp').read_text(encoding='utf-8')
    ast = parse_program(source)
    interp = Interpreter()
    result = interp.run(ast)
    out = capsys.readouterr().out.strip()
    assert out == 'true true false'
    assert result == IntVal(8)
