"""Tests for Encapsulated PostScript output."""

from __future__ import annotations

import math
import re
from io import StringIO

import pytest

from poincare_tools.params import SceneParams
from poincare_tools.parser import parse_trajectories
from poincare_tools.rendering.commands import LabelCommand, Scene, StrokeCommand
from poincare_tools.rendering.postscript import (
    PostScriptEmitter,
    arrowhead_polygon,
    bezier_segments,
    write_postscript,
)
from poincare_tools.rendering.scene import assemble_scene


def _render(text: str = '', **kwargs: object) -> str:
    params = SceneParams(rho_divisor=4, phi_divisor=6, **kwargs)  # type: ignore[arg-type]
    scene = assemble_scene(parse_trajectories(text), params)
    out = StringIO()
    write_postscript(scene, out, title='test.eps')
    return out.getvalue()


def test_eps_structure() -> None:
    """Header, bounding box, prolog, and trailer are present."""
    ps = _render('p 0 1 0 0 0 1 q')
    lines = ps.splitlines()
    assert lines[0] == '%!PS-Adobe-2.0 EPSF-2.0'
    assert '%%Title: test.eps' in lines
    assert re.search(r'^%%BoundingBox: 0 0 \d+ \d+$', ps, re.MULTILINE)
    assert lines[-3:] == ['restore', 'showpage', '%%EOF']


def test_eps_contains_fills_curves_and_labels() -> None:
    """Shading fills, smooth equators, and axis labels all appear."""
    ps = _render()
    assert ps.count(' F\n') >= 4 * 6
    assert ' C\n' in ps
    assert '(S_1)' in ps


def test_eps_dashed_hidden_parts() -> None:
    """Dashed hidden strokes switch the dash pattern on and off again."""
    ps = _render('p -0.6 0.8 0 -0.6 0 0.8 q', psi=0.0, phi=0.0, draw_hidden_dashed=True)
    assert '[3 3] 0 setdash' in ps
    assert '[] 0 setdash' in ps


def test_eps_label_escaping() -> None:
    """Parentheses and backslashes in labels are escaped."""
    scene = Scene(SceneParams(), [LabelCommand((0.0, 0.0), r'a(b)\c', 'top')])
    out = StringIO()
    write_postscript(scene, out)
    assert r'(a\(b\)\\c)' in out.getvalue()


def test_bounding_box_covers_strokes() -> None:
    """The bounding box encloses every stroke vertex in device units."""
    emitter = PostScriptEmitter(StringIO())
    emitter.begin(SceneParams(scalefactor=10.0))
    emitter.emit(StrokeCommand(((0.0, 0.0), (1.0, -1.0)), thickness=2.0))
    xmin, ymin, xmax, ymax = emitter.bounding_box()
    scale = 10.0 * 72.0 / 25.4
    assert xmin <= 0.0 and ymax >= 0.0
    assert xmax >= scale and ymin <= -scale


def test_bounding_box_empty() -> None:
    """Nothing drawn gives an empty box."""
    emitter = PostScriptEmitter(StringIO())
    emitter.begin(SceneParams())
    assert emitter.bounding_box() == (0.0, 0.0, 0.0, 0.0)


def test_bezier_segments_straight_line() -> None:
    """Two points give one segment with control points on the chord."""
    (c1, c2, end) = bezier_segments(((0.0, 0.0), (6.0, 0.0)))[0]
    assert c1 == pytest.approx((1.0, 0.0))
    assert c2 == pytest.approx((5.0, 0.0))
    assert end == (6.0, 0.0)


def test_bezier_segments_pass_through_points() -> None:
    """Each segment ends on the next input point."""
    points = ((0.0, 0.0), (1.0, 1.0), (2.0, 0.0), (3.0, 1.0))
    segments = bezier_segments(points)
    assert [seg[2] for seg in segments] == list(points[1:])


def test_arrowhead_polygon() -> None:
    """The head sits at the path end with barbs at half the opening angle."""
    tip, a, b = arrowhead_polygon(((0.0, 0.0), (10.0, 0.0)), False, 60.0, 2.0)
    assert tip == (10.0, 0.0)
    corners = sorted([a, b], key=lambda p: p[1])
    assert corners[0] == pytest.approx((10.0 - 2.0 * math.cos(math.radians(30.0)), -1.0))
    assert corners[1] == pytest.approx((10.0 - 2.0 * math.cos(math.radians(30.0)), 1.0))


def test_arrowhead_polygon_reverse() -> None:
    """reverse puts the head at the first point, pointing backwards."""
    tip, a, _ = arrowhead_polygon(((0.0, 0.0), (10.0, 0.0)), True, 60.0, 2.0)
    assert tip == (0.0, 0.0)
    assert a[0] > 0.0


def test_arrowhead_polygon_zero_length() -> None:
    """A path without direction has no arrowhead."""
    assert arrowhead_polygon(((1.0, 1.0), (1.0, 1.0)), False, 30.0, 2.0) is None
