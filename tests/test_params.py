"""Tests for scene options and option-token parsing."""

from __future__ import annotations

import math

import pytest

from poincare_tools.config import get_default_outfile, get_log_level
from poincare_tools.errors import CapacityError
from poincare_tools.params import (
    ArrowSpec,
    ExtraFrame,
    Frame,
    SceneParams,
    parse_anchor,
    parse_arrow,
    parse_axis_labels,
    parse_axis_lengths,
)


def test_scene_defaults() -> None:
    """Default view and appearance options."""
    params = SceneParams()
    assert params.psi == pytest.approx(math.radians(-40.0))
    assert params.phi == pytest.approx(math.radians(15.0))
    assert (params.lower_whiteness, params.upper_whiteness) == (0.75, 0.99)
    assert params.hidden_graytone == 0.65
    assert (params.rho_divisor, params.phi_divisor) == (50, 80)
    assert params.scalefactor == 6.0
    assert [a.anchor for a in params.axes] == ['urgt'] * 3
    assert params.secondary_frame is None
    params.validate()


def test_axis_label_defaults() -> None:
    """Unset axis labels fall back to S_k, or S_k/S_0 when normalized."""
    params = SceneParams()
    assert params.axis_label(0) == 'S_1'
    params.normalize = True
    assert params.axis_label(2) == 'S_3/S_0'
    params.axes[1].label = 'Q'
    assert params.axis_label(1) == 'Q'


def test_secondary_frame_offsets_angles() -> None:
    """The secondary frame adds its angles to the primary ones."""
    params = SceneParams(psi=0.1, phi=0.2, extra_frame=ExtraFrame(dpsi=0.3, dphi=-0.1))
    frame = params.secondary_frame
    assert frame is not None
    assert frame.psi == pytest.approx(0.4)
    assert frame.phi == pytest.approx(0.1)
    assert [a.anchor for a in params.extra_frame.axes] == ['bot', 'bot', 'top']


def test_frame_display_angles() -> None:
    """alpha and beta follow their arctan definitions; beta is undefined at psi = 0."""
    frame = Frame.from_degrees(45.0, 30.0)
    assert frame.alpha == pytest.approx(math.atan(0.5))
    assert frame.beta == pytest.approx(math.atan(0.5))
    assert math.isnan(Frame(0.0, 0.3).beta)


@pytest.mark.parametrize(
    ('token', 'expected'),
    [('top', 'top'), ('lrgt', 'lrgt'), ('rt', 'rgt'), ('urt', 'urgt'), (' bot ', 'bot')],
)
def test_parse_anchor(token: str, expected: str) -> None:
    """Canonical names and MetaPost spellings are accepted."""
    assert parse_anchor(token) == expected


def test_parse_anchor_invalid() -> None:
    """Unknown positions raise ValueError."""
    with pytest.raises(ValueError, match='Invalid label position'):
        parse_anchor('center')


def test_parse_arrow() -> None:
    """Eight numbers give start, end, line type, and blackness."""
    arrow = parse_arrow([1, 0, 0, 0, 1, 0, 1, 0.25])
    assert arrow.start == (1.0, 0.0, 0.0)
    assert arrow.end == (0.0, 1.0, 0.0)
    assert arrow.style == 'dashed'
    assert arrow.gray == pytest.approx(0.75)


def test_parse_arrow_errors() -> None:
    """Wrong count or blackness outside [0, 1] are rejected."""
    with pytest.raises(ValueError):
        parse_arrow([1, 0, 0, 0, 1, 0, 0])
    with pytest.raises(ValueError, match='shade'):
        parse_arrow([1, 0, 0, 0, 1, 0, 0, 1.5])


@pytest.mark.parametrize(
    ('line_type', 'style'),
    [(-0.5, 'solid'), (0.0, 'solid'), (0.49, 'solid'), (0.5, 'dashed'), (1.49, 'dashed'),
     (1.5, None), (-0.6, None)],
)
def test_arrow_style_ranges(line_type: float, style: str | None) -> None:
    """Line type selects solid, dashed, or nothing by half-open ranges."""
    assert ArrowSpec((1.0, 0.0, 0.0), (0.0, 1.0, 0.0), line_type).style == style


def test_parse_axis_lengths() -> None:
    """Six lengths become three (inside, outside) pairs."""
    assert parse_axis_lengths([0.1, 1.5, 0.2, 1.4, 0.3, 1.3]) == [(0.1, 1.5), (0.2, 1.4), (0.3, 1.3)]
    with pytest.raises(ValueError):
        parse_axis_lengths([0.1, 1.5])
    with pytest.raises(ValueError):
        parse_axis_lengths([-0.1, 1.5, 0.1, 1.5, 0.1, 1.5])


def test_parse_axis_labels() -> None:
    """Six tokens become three (label, anchor) pairs."""
    pairs = parse_axis_labels(['Q', 'rt', 'U', 'bot', 'V', 'top'])
    assert pairs == [('Q', 'rgt'), ('U', 'bot'), ('V', 'top')]
    with pytest.raises(ValueError):
        parse_axis_labels(['Q', 'middle', 'U', 'bot', 'V', 'top'])


@pytest.mark.parametrize(
    'kwargs',
    [
        {'phi_divisor': 0},
        {'lower_whiteness': -0.1},
        {'upper_whiteness': 1.2},
        {'hidden_graytone': 2.0},
        {'path_thickness': 0.0},
        {'scalefactor': -1.0},
    ],
)
def test_validate_rejects_bad_values(kwargs: dict[str, float]) -> None:
    """Out-of-range options raise ValueError."""
    with pytest.raises(ValueError):
        SceneParams(**kwargs).validate()  # type: ignore[arg-type]


def test_validate_arrow_limit() -> None:
    """24 arrows are fine, 25 are not."""
    arrow = ArrowSpec((1.0, 0.0, 0.0), (0.0, 1.0, 0.0))
    SceneParams(arrows=[arrow] * 24).validate()
    with pytest.raises(CapacityError):
        SceneParams(arrows=[arrow] * 25).validate()


def test_log_level_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """POINCARE_TOOLS_LOG selects a level; unknown values are ignored."""
    monkeypatch.setenv('POINCARE_TOOLS_LOG', 'debug')
    assert get_log_level() == 'DEBUG'
    monkeypatch.setenv('POINCARE_TOOLS_LOG', 'chatty')
    assert get_log_level() is None
    monkeypatch.delenv('POINCARE_TOOLS_LOG')
    assert get_log_level() is None


def test_default_outfile_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """POINCARE_OUTFILE overrides the default output name."""
    monkeypatch.delenv('POINCARE_OUTFILE', raising=False)
    assert get_default_outfile() == 'aout.mp'
    monkeypatch.setenv('POINCARE_OUTFILE', 'map.eps')
    assert get_default_outfile() == 'map.eps'
