from pathlib import Path
from mplang.interpreter import parse_program, Interpreter

EXAMPLES = Path(__file__).parent.parent / 'examples'


def test_program_7(capsys):
    source = (EXAMPLES / 'program_7.mp').read_text(encoding='utf-8')
    ast = parse_program(source)
    interp = Interpreter()
    interp.run(ast)
    out = capsys.readouterr().out.strip()
    assert out.splitlines() == ['12', '1', 'outer']
