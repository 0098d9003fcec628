from pathlib import Path
from mplang.interpreter import parse_program, Interpreter
from mplang.types import IntVal

EXAMPLES = Path(__file__).parent.parent / 'examples'


def test_program_2(capsys):
    source = (EXAMPLES / 'program_2.mp').read_text(encoding='utf-8')
    ast = parse_program(source)
    interp = Interpreter()
    result = interp.run(ast)
    out = capsys.readouterr().out.strip()
    assert out.splitlines() == ['0', '1', '1', '2', '3', '5', '8', '13', '21', '34']
    assert result == IntVal(610)
