import os
from typing import Dict, List, TextIO
from saiph.errors import ProgramError
from saiph.program import to_int32


def load_program(filename: str) -> List[str]:
    if not os.path.isfile(filename):
        raise ProgramError(f'Could not open {filename}')
    with open(filename) as f:
        lines = [line.rstrip('\r\n') for line in f]
    if not lines:
        raise ProgramError(f'No instructions in {filename}')
    return lines


def _parse_int(text: str) -> int:
    return int(text, 0)


def parse_data_image(lines: List[str], name: str = '<data>') -> Dict[int, int]:
    """
    Parse an initial data memory image.

    One `address value` pair per line. Addresses are byte addresses, both
    fields can be decimal or hexadecimal (0x). `#` starts a comment.
    """
    image = {}
    for lineno, line in enumerate(lines, start=1):
        fields = line.split('#', 1)[0].split()
        if not fields:
            continue
        if len(fields) != 2:
            raise ProgramError(f'{name}:{lineno}: expected "address value", got "{line.strip()}"')
        try:
            address, value = (_parse_int(field) for field in fields)
        except ValueError:
            raise ProgramError(f'{name}:{lineno}: invalid number in "{line.strip()}"')
        image[address] = to_int32(value)
    return image


def load_data_image(filename: str) -> Dict[int, int]:
    if not os.path.isfile(filename):
        raise ProgramError(f'Could not open {filename}')
    with open(filename) as f:
        return parse_data_image(f.readlines(), filename)


def dump_data_memory(memory: List[int], f: TextIO) -> None:
    f.write('Address | Decimal    | Hexadecimal\n')
    f.write('-----------------------------------\n')
    for index, value in enumerate(memory):
        # zero words are skipped to keep the file readable
        if value != 0:
            f.write('%07d | %-10d | 0x%08X\n' % (index * 4, value, value & 0xFFFFFFFF))


def format_registers(registers: List[int]) -> List[str]:
    return [f'  x{i} = {value}' for i, value in enumerate(registers) if i != 0 and value != 0]
