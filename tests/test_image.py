import io
import pytest
from saiph.errors import ProgramError
from saiph.image import dump_data_memory
from saiph.image import format_registers
from saiph.image import load_data_image
from saiph.image import load_program
from saiph.image import parse_data_image


def test_parse_data_image():
    image = parse_data_image([
        '# address value',
        '0 7',
        '0x8 0xFFFFFFFF   # -1',
        '',
        '12 -20'
    ])
    assert image == {0: 7, 8: -1, 12: -20}


@pytest.mark.parametrize('line', ['4', '4 5 6', 'four 5'])
def test_bad_data_lines(line):
    with pytest.raises(ProgramError):
        parse_data_image([line])


def test_load_files(tmp_path):
    program = tmp_path / 'instructions.txt'
    program.write_text('addi x1,x0,1\r\n\nhalt\n')
    assert load_program(str(program)) == ['addi x1,x0,1', '', 'halt']

    data = tmp_path / 'data.txt'
    data.write_text('4 10\n')
    assert load_data_image(str(data)) == {4: 10}


def test_missing_or_empty_program(tmp_path):
    with pytest.raises(ProgramError):
        load_program(str(tmp_path / 'missing.txt'))
    empty = tmp_path / 'empty.txt'
    empty.write_text('')
    with pytest.raises(ProgramError):
        load_program(str(empty))
    with pytest.raises(ProgramError):
        load_data_image(str(tmp_path / 'missing.txt'))


def test_dump_skips_zero_words():
    f = io.StringIO()
    dump_data_memory([0, 42, 0, -1], f)
    assert f.getvalue().splitlines() == [
        'Address | Decimal    | Hexadecimal',
        '-----------------------------------',
        '0000004 | 42         | 0x0000002A',
        '0000012 | -1         | 0xFFFFFFFF'
    ]


def test_format_registers():
    assert format_registers([0, 5, 0, -3]) == ['  x1 = 5', '  x3 = -3']
