from pathlib import Path
from mplang.interpreter import parse_program, Interpreter

EXAMPLES = Path(__file__).parent.parent / 'examples'


def test_program_3(capsys):
    source = (EXAMPLES / 'program_3.mp').read_text(encoding='utf-8')
    ast = parse_program(source)
    interp = Interpreter()
    interp.run(ast)
    out = capsys.readouterr().out.strip()
    assert out.splitlines() == ['[1, 4, 9, 16, 25]', '5']
