"""Tests for the poincare-tools command line."""

from __future__ import annotations

import math
import sys
from pathlib import Path
from typing import Any

import pytest

from poincare_tools.cli import main as cli_main
from poincare_tools.rendering.commands import Scene

TRAJECTORY = 'p b top "start" 0.6 0.8 0 t 0.6 0 0.8 -0.6 0 0.8 q e bot "end"\n'


def _input(tmp_path: Path, text: str = TRAJECTORY) -> Path:
    path = tmp_path / 'paths.txt'
    path.write_text(text, encoding='utf-8')
    return path


def test_cli_options_reach_scene_params(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """View, appearance, axis, and arrow options are parsed into the job."""
    captured: dict[str, Any] = {}

    def _fake_build_scene(job):  # type: ignore[no-untyped-def]
        captured['job'] = job
        return Scene(job.params)

    monkeypatch.setattr('poincare_tools.cli.main.build_scene', _fake_build_scene)
    out = tmp_path / 'map.mp'
    monkeypatch.setattr(
        sys,
        'argv',
        [
            'poincare-tools',
            '-f',
            str(_input(tmp_path)),
            '-o',
            str(out),
            '--psi',
            '30',
            '--phi',
            '-10',
            '--normalize',
            '--shading',
            '0.5',
            '0.9',
            '--lightsource',
            '45',
            '60',
            '--axislabels',
            'Q',
            'rt',
            'U',
            'bot',
            'V',
            'top',
            '--axislengths',
            '0.2',
            '1.2',
            '0.2',
            '1.3',
            '0.2',
            '1.4',
            '--xtracoordsys',
            '10',
            '5',
            '--xtracoordsys_axislabel_z',
            'w_3',
            '--arrow',
            '1',
            '0',
            '0',
            '0',
            '1',
            '0',
            '1',
            '0.5',
            '--bezier',
            '--draw_hidden_dashed',
        ],
    )
    rc = cli_main.main()
    assert rc == 0
    job = captured['job']
    params = job.params
    assert job.fmt == 'mp'
    assert job.output_name == str(out)
    assert params.psi == pytest.approx(math.radians(30.0))
    assert params.phi == pytest.approx(math.radians(-10.0))
    assert params.normalize
    assert (params.lower_whiteness, params.upper_whiteness) == (0.5, 0.9)
    assert params.phi_source == pytest.approx(math.radians(45.0))
    assert params.theta_source == pytest.approx(math.radians(60.0))
    assert [(a.label, a.anchor) for a in params.axes] == [('Q', 'rgt'), ('U', 'bot'), ('V', 'top')]
    assert [a.pos_length for a in params.axes] == [1.2, 1.3, 1.4]
    assert params.extra_frame is not None
    assert params.extra_frame.dpsi == pytest.approx(math.radians(10.0))
    assert [a.label for a in params.extra_frame.axes] == [None, None, 'w_3']
    assert len(params.arrows) == 1
    assert params.arrows[0].style == 'dashed'
    assert params.use_bezier and params.draw_hidden_dashed
    assert '--psi' in job.command_line


def test_cli_writes_metapost(tmp_path: Path) -> None:
    """A MetaPost file is written for a .mp output name."""
    out = tmp_path / 'map.mp'
    rc = cli_main.main(['-f', str(_input(tmp_path)), '-o', str(out), '--rhodivisor', '5', '--phidivisor', '8'])
    assert rc == 0
    text = out.read_text(encoding='utf-8')
    assert 'beginfig(1);' in text
    assert 'label.top(btex start etex' in text
    assert text.endswith('end\n')


def test_cli_writes_eps_from_extension(tmp_path: Path) -> None:
    """The output format follows the file extension."""
    out = tmp_path / 'map.eps'
    rc = cli_main.main(['-f', str(_input(tmp_path)), '-o', str(out), '--rhodivisor', '5'])
    assert rc == 0
    assert out.read_text(encoding='utf-8').startswith('%!PS-Adobe-2.0 EPSF-2.0')


def test_cli_format_overrides_extension(tmp_path: Path) -> None:
    """--format wins over the file extension."""
    out = tmp_path / 'map.out'
    rc = cli_main.main(['-o', str(out), '--format', 'ps', '--rhodivisor', '5'])
    assert rc == 0
    assert out.read_text(encoding='utf-8').startswith('%!PS')


def test_cli_stdout(capsys: pytest.CaptureFixture[str]) -> None:
    """'-' writes to standard output."""
    rc = cli_main.main(['-o', '-', '--rhodivisor', '2', '--phidivisor', '3'])
    assert rc == 0
    assert 'beginfig(1);' in capsys.readouterr().out


def test_cli_default_outfile_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Without -o the output name comes from POINCARE_OUTFILE."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv('POINCARE_OUTFILE', 'env_map.mp')
    rc = cli_main.main(['--rhodivisor', '2', '--phidivisor', '3'])
    assert rc == 0
    assert (tmp_path / 'env_map.mp').exists()


def test_cli_syntax_error_leaves_no_output(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """A malformed trajectory file fails with exit code 1 and writes nothing."""
    out = tmp_path / 'map.mp'
    bad = _input(tmp_path, 'p b top "unterminated\n 1 0 0\n q\n')
    rc = cli_main.main(['-f', str(bad), '-o', str(out)])
    assert rc == 1
    assert not out.exists()
    err = capsys.readouterr().err
    assert err.startswith('Error:')
    assert 'paths.txt:1' in err


def test_cli_missing_input_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """An unreadable input file is reported, not raised."""
    rc = cli_main.main(['-f', str(tmp_path / 'nope.txt'), '-o', str(tmp_path / 'map.mp')])
    assert rc == 1
    assert 'Error:' in capsys.readouterr().err


def test_cli_too_many_arrows(tmp_path: Path) -> None:
    """More than 24 --arrow options fail."""
    argv = ['-o', str(tmp_path / 'map.mp')]
    for _ in range(25):
        argv += ['--arrow', '1', '0', '0', '0', '1', '0', '0', '1']
    assert cli_main.main(argv) == 1


def test_cli_bad_axis_label_position(tmp_path: Path) -> None:
    """Invalid axis label positions fail."""
    argv = ['-o', str(tmp_path / 'map.mp'), '--axislabels', 'a', 'middle', 'b', 'bot', 'c', 'top']
    assert cli_main.main(argv) == 1


def test_cli_version(capsys: pytest.CaptureFixture[str]) -> None:
    """--version prints the program version and exits."""
    with pytest.raises(SystemExit) as exc:
        cli_main.main(['--version'])
    assert exc.value.code == 0
    assert '1.24' in capsys.readouterr().out


def test_cli_png(tmp_path: Path) -> None:
    """Image formats are written in binary mode through matplotlib."""
    out = tmp_path / 'map.png'
    rc = cli_main.main(['-f', str(_input(tmp_path)), '-o', str(out), '--rhodivisor', '4', '--phidivisor', '6'])
    assert rc == 0
    assert out.read_bytes().startswith(b'\x89PNG')
