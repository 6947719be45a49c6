import pytest
from cli import main


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_run_program(workdir, capsys):
    (workdir / 'instructions.txt').write_text('lw x1,0(x0)\naddi x1,x1,1\nsw x1,4(x0)\nhalt\n')
    (workdir / 'data.txt').write_text('0 41\n')
    assert main([]) == 0
    out = capsys.readouterr().out
    assert 'Total Cycles: ' in out
    assert 'x1 = 42' in out
    dump = (workdir / 'dump_instructions.txt').read_text().splitlines()
    assert dump[2:] == ['0000000 | 41         | 0x00000029', '0000004 | 42         | 0x0000002A']


def test_missing_default_data_file_is_empty_memory(workdir):
    (workdir / 'prog.s').write_text('addi x1,x0,1\nhalt\n')
    assert main(['prog.s', '--dump', 'out.txt', '--trace']) == 0
    assert (workdir / 'out.txt').read_text().splitlines()[2:] == []


def test_cycle_limit_exit_status(workdir, tmp_path):
    configfile = tmp_path / 'tiny.yml'
    configfile.write_text('simulation:\n  max_cycles: 10\n')
    (workdir / 'loop.s').write_text('beq x0,x0,0\n')
    assert main(['loop.s', '--variant', 'custom', '--config-file', str(configfile)]) == 1


@pytest.mark.parametrize('args', [
    ['missing.s'],
    ['prog.s', '--data', 'missing.txt'],
])
def test_input_errors(workdir, args, capsys):
    (workdir / 'prog.s').write_text('halt\n')
    assert main(args) == 2
    assert 'Error' in capsys.readouterr().out


def test_custom_variant_needs_a_file(workdir):
    (workdir / 'prog.s').write_text('halt\n')
    with pytest.raises(RuntimeError):
        main(['prog.s', '--variant', 'custom'])


def test_program_without_halt_warns(workdir, capsys):
    (workdir / 'prog.s').write_text('addi x1,x0,1\n')
    assert main(['prog.s']) == 0
    out = capsys.readouterr().out
    assert 'Outcome: drained' in out
    assert 'Warning: no halt instruction retired' in out


def test_halted_program_does_not_warn(workdir, capsys):
    (workdir / 'prog.s').write_text('addi x1,x0,1\nhalt\n')
    assert main(['prog.s']) == 0
    assert 'Warning' not in capsys.readouterr().out
