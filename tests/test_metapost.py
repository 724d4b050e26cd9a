"""Tests for MetaPost source output."""

from __future__ import annotations

from io import StringIO

from poincare_tools.params import SceneParams
from poincare_tools.parser import parse_trajectories
from poincare_tools.rendering.commands import Scene, StrokeCommand
from poincare_tools.rendering.metapost import MetaPostEmitter, write_metapost
from poincare_tools.rendering.scene import assemble_scene


def _render(text: str = '', command_line: list[str] | None = None, **kwargs: object) -> str:
    params = SceneParams(rho_divisor=3, phi_divisor=4, **kwargs)  # type: ignore[arg-type]
    scene = assemble_scene(parse_trajectories(text), params)
    out = StringIO()
    write_metapost(scene, out, 'map.mp', 'paths.txt', command_line)
    return out.getvalue()


def test_metapost_header_and_figure() -> None:
    """Header records files and angles; the figure is closed properly."""
    mp = _render()
    assert '% This Filename:  map.mp   [MetaPost source]' in mp
    assert '% Input Filename [Stokes parameters]:  paths.txt' in mp
    assert 'scalefactor := 6.000000 mm;' in mp
    assert 'rot_psi := -40.000000;' in mp
    assert 'rot_phi := 15.000000;' in mp
    assert 'radius := scalefactor;' in mp
    assert mp.index('beginfig(1);') < mp.index('endfig;')
    assert mp.endswith('endfig;\nend\n')


def test_metapost_records_command_line() -> None:
    """Command line options are listed in the header."""
    mp = _render(command_line=['-f', 'paths.txt', '--psi', '10'])
    assert '%     -f paths.txt --psi 10' in mp


def test_metapost_undefined_beta_written_as_zero() -> None:
    """beta is undefined at psi = 0 and written as 0.0."""
    mp = _render(psi=0.0)
    assert 'beta  := 0.0;' in mp


def test_metapost_fills_and_axis_labels() -> None:
    """Shading patches are filled; axis labels are TeX math with MetaPost suffixes."""
    mp = _render()
    assert mp.count('  fill (') == 3 * 4
    assert 'label.urt(btex $S_1$ etex' in mp


def test_metapost_trajectory_label_suffix() -> None:
    """Trajectory label anchors map to MetaPost label suffixes."""
    mp = _render('p 0 1 0 t l lrgt "A" 0 0 1 q e rgt "B"')
    assert 'label.lrt(btex A etex' in mp
    assert 'label.rt(btex B etex' in mp


def test_metapost_hidden_styles() -> None:
    """Hidden parts are gray by default and dashed black on request."""
    text = 'p -0.6 0.8 0 -0.6 0 0.8 q'
    gray = _render(text, psi=0.0, phi=0.0)
    assert 'draw p scaled radius withcolor 0.650000 [black,white];' in gray
    dashed = _render(text, psi=0.0, phi=0.0, draw_hidden_dashed=True)
    assert 'draw p scaled radius dashed evenly withcolor black;' in dashed


def test_metapost_path_arrows() -> None:
    """draw_paths_as_arrows ends the final run with drawarrow, optionally reversed."""
    text = 'p 0.6 0.8 0 0.6 0 0.8 q'
    plain = _render(text, psi=0.0, phi=0.0)
    arrows = _render(text, psi=0.0, phi=0.0, draw_paths_as_arrows=True)
    assert arrows.count('drawarrow p scaled radius') == plain.count('drawarrow p scaled radius') + 1
    assert 'drawarrow reverse p' not in arrows
    reverse = _render(text, psi=0.0, phi=0.0, draw_paths_as_arrows=True, reverse_arrow_paths=True)
    assert 'drawarrow reverse p scaled radius' in reverse


def test_metapost_bezier_joins() -> None:
    """Smooth paths use .. joins, polylines use --."""
    text = 'p 0.6 0.8 0 0.6 0.6 0.529 0.6 0 0.8 q'
    smooth = _render(text, psi=0.0, phi=0.0, use_bezier=True)
    assert 'p := (0.8000,0.0000)..(0.6000,0.5290)..(0.0000,0.8000);' in smooth
    plain = _render(text, psi=0.0, phi=0.0)
    assert 'p := (0.8000,0.0000)--(0.6000,0.5290)--(0.0000,0.8000);' in plain


def test_metapost_auxsource() -> None:
    """An auxiliary source is input just before endfig."""
    mp = _render(auxsource='extra.mp')
    assert mp.index('  input extra.mp') < mp.index('endfig;')


def test_metapost_pen_changes_only_when_needed() -> None:
    """Consecutive strokes of the same width share one pickup."""
    emitter_out = StringIO()
    emitter = MetaPostEmitter(emitter_out)
    emitter.begin(SceneParams())
    for _ in range(3):
        emitter.emit(StrokeCommand(((0.0, 0.0), (1.0, 0.0)), thickness=0.6))
    emitter.emit(StrokeCommand(((0.0, 0.0), (1.0, 0.0)), thickness=1.0))
    emitter.end()
    assert emitter_out.getvalue().count('pickup pencircle') == 2


def test_metapost_arrowhead_angle() -> None:
    """The arrowhead angle is set before the first arrow."""
    scene = Scene(
        SceneParams(),
        [StrokeCommand(((0.0, 0.0), (1.0, 0.0)), thickness=0.6, arrowhead=True, head_angle=45.0)],
    )
    out = StringIO()
    write_metapost(scene, out)
    mp = out.getvalue()
    assert mp.index('ahangle := 45.000000;') < mp.index('drawarrow p')
