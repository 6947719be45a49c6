#!/usr/bin/env python3

import os
import sys
import argparse
from saiph.driver import Driver
from saiph.driver import Outcome
from saiph.driver import Result
from saiph.errors import SimulationError
from saiph.image import load_program
from saiph.image import load_data_image
from saiph.image import dump_data_memory
from saiph.image import format_registers
from saiph.config.config import logo
from saiph.config.config import load_config

current_path = os.path.dirname(os.path.realpath(__file__))
sim_variants = ['small', 'default', 'large', 'custom']
config_files = {variant: f'{current_path}/configurations/saiph_{variant}.yml' for variant in sim_variants}

default_program = 'instructions.txt'
default_data    = 'data.txt'


def dump_name(program: str) -> str:
    path, name = os.path.split(program)
    return os.path.join(path, f'dump_{name}')


def print_report(program: str, result: Result) -> None:
    print(f'\n\033[0;32mTEST RESULT for {program}:\033[0;0m')
    print(f'Outcome: {result.outcome.value}')
    print(f'Total Cycles: {result.cycles}')
    print(f'Retired instructions: {result.retired}')
    print(f'CPI: {result.cpi:.2f}')
    print(f'Stalls: {result.stalls}')
    print(f'Flushes: {result.flushes}')
    print(f'Forwards: {result.forwards}')
    for line in format_registers(result.registers):
        print(line)


def run_simulation(args) -> int:
    # check arguments
    variant = args.variant
    if variant == 'custom':
        if args.config_file == '':
            raise RuntimeError('Configuration file empty for custom variant.')
        configfile = os.path.realpath(args.config_file)
    else:
        configfile = config_files[variant]

    # load configuration
    sim_config = load_config(variant, configfile, args.verbose)
    if args.trace:
        sim_config['simulation_trace'] = True

    # load the program and the initial data memory
    program = load_program(args.program)
    if args.data == default_data and not os.path.isfile(default_data):
        data = {}
    else:
        data = load_data_image(args.data)
    print(f'--- Loaded {len(program)} instructions from {args.program} ---')

    # run
    result = Driver(**sim_config).run(program, data)
    for cycle in result.trace:
        print('\n'.join(cycle.lines()))
    print_report(args.program, result)

    filename = args.dump or dump_name(args.program)
    with open(filename, 'w') as f:
        dump_data_memory(result.memory, f)
    print(f'Final data memory state dumped to {filename}')

    if result.outcome == Outcome.CYCLE_LIMIT:
        print(f'\033[1;31mError: exceeded the cycle limit ({result.cycles} cycles)\033[0m')
        return 1
    if result.outcome == Outcome.DRAINED:
        print('\033[1;33mWarning: no halt instruction retired, the program ran past its last instruction\033[0m')
    return 0


def main(argv=None) -> int:
    class custom_formatter(argparse.ArgumentDefaultsHelpFormatter, argparse.RawDescriptionHelpFormatter):
        pass

    parser = argparse.ArgumentParser(
        formatter_class=custom_formatter,
        description='''\033[1;33m{}\033[0m'''.format(logo)
    )

    # --------------------------------------------------------------------------
    # add arguments to parser
    parser.add_argument(
        'program',
        nargs='?',
        default=default_program,
        help='program file'
    )
    parser.add_argument(
        '--data',
        default=default_data,
        help='initial data memory image ("address value" per line)'
    )
    parser.add_argument(
        '--variant',
        choices=sim_variants,
        default='default',
        help='simulator variant'
    )
    parser.add_argument(
        '--config-file',
        default='',
        help='configuration file for custom variants'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='print the configuration file'
    )
    parser.add_argument(
        '--trace',
        action='store_true',
        help='print the state of each stage, every cycle'
    )
    parser.add_argument(
        '--dump',
        default='',
        help='file for the final data memory (default: dump_<program>)'
    )
    # --------------------------------------------------------------------------
    args = parser.parse_args(argv)

    try:
        return run_simulation(args)
    except SimulationError as error:
        print(f'\033[1;31mError: {error}\033[0m')
        return 2


if __name__ == '__main__':
    sys.exit(main())
