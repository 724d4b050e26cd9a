"""Scene configuration records and option-token parsing (CLI and API)."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Literal, cast

from poincare_tools.constants import (
    DEFAULT_ARROW_HEADANGLE,
    DEFAULT_ARROW_THICKNESS,
    DEFAULT_AXISLABEL_ANCHOR,
    DEFAULT_AXISLABELS,
    DEFAULT_COORD_AXIS_THICKNESS,
    DEFAULT_HIDDEN_GRAYTONE,
    DEFAULT_MAX_WHITENESS,
    DEFAULT_MIN_WHITENESS,
    DEFAULT_NEGATIVE_AXIS_LENGTH,
    DEFAULT_PATH_THICKNESS,
    DEFAULT_PHI_DIVISOR,
    DEFAULT_PHI_SOURCE,
    DEFAULT_POSITIVE_AXIS_LENGTH,
    DEFAULT_RHO_DIVISOR,
    DEFAULT_ROT_PHI,
    DEFAULT_ROT_PSI,
    DEFAULT_SCALEFACTOR,
    DEFAULT_THETA_SOURCE,
    EXTRA_AXISLABEL_ANCHORS,
    MAX_NUM_ARROWS,
    NORMALIZED_AXISLABELS,
)
from poincare_tools.errors import CapacityError

Anchor = Literal['top', 'ulft', 'lft', 'llft', 'bot', 'lrgt', 'rgt', 'urgt']
ANCHORS: tuple[str, ...] = ('top', 'ulft', 'lft', 'llft', 'bot', 'lrgt', 'rgt', 'urgt')

# MetaPost label suffixes (label.<suffix>) for each anchor
METAPOST_SUFFIX: dict[str, str] = {
    'top': 'top',
    'ulft': 'ulft',
    'lft': 'lft',
    'llft': 'llft',
    'bot': 'bot',
    'lrgt': 'lrt',
    'rgt': 'rt',
    'urgt': 'urt',
}

# Axis label positions are also accepted in MetaPost spelling (rt, lrt, urt)
_ANCHOR_ALIASES: dict[str, str] = {suffix: anchor for anchor, suffix in METAPOST_SUFFIX.items()}

LineStyle = Literal['solid', 'dashed']


def parse_anchor(token: str) -> Anchor:
    """Parse a label anchor keyword.

    Parameters:
        token: One of ``top ulft lft llft bot lrgt rgt urgt``; the MetaPost
            spellings ``rt lrt urt`` are accepted as aliases.

    Returns:
        Canonical anchor name.

    Raises:
        ValueError: If the token is not a known anchor.
    """
    key = token.strip()
    if key in ANCHORS:
        return cast(Anchor, key)
    if key in _ANCHOR_ALIASES:
        return cast(Anchor, _ANCHOR_ALIASES[key])
    raise ValueError(f'Invalid label position {token!r} (expected one of {" ".join(ANCHORS)})')


@dataclass(frozen=True)
class Frame:
    """Two-angle Euler viewing frame.

    Parameters:
        psi: First rotation, about the S3 axis (radians).
        phi: Second rotation, tilting the view (radians).
    """

    psi: float = DEFAULT_ROT_PSI
    phi: float = DEFAULT_ROT_PHI

    @classmethod
    def from_degrees(cls, psi_deg: float, phi_deg: float) -> Frame:
        return cls(math.radians(psi_deg), math.radians(phi_deg))

    def offset(self, dpsi: float, dphi: float) -> Frame:
        """Frame rotated by additional Euler angles (radians)."""
        return Frame(self.psi + dpsi, self.phi + dphi)

    @property
    def alpha(self) -> float:
        """Display-only angle arctan(sin(phi) tan(psi))."""
        return math.atan(math.sin(self.phi) * math.tan(self.psi))

    @property
    def beta(self) -> float:
        """Display-only angle arctan(sin(phi) / tan(psi)); nan where undefined."""
        t = math.tan(self.psi)
        if t == 0.0:
            return math.nan
        return math.atan(math.sin(self.phi) / t)


@dataclass
class ArrowSpec:
    """User arrow drawn as a great-circle-like arc on the sphere.

    Parameters:
        start: Stokes triplet of the arrow tail.
        end: Stokes triplet of the arrow head end.
        line_type: Style selector; [-0.5, 0.5) solid, [0.5, 1.5) dashed,
            anything else is not drawn.
        blackness: 0.0 white to 1.0 black.
    """

    start: tuple[float, float, float]
    end: tuple[float, float, float]
    line_type: float = 0.0
    blackness: float = 1.0

    @property
    def style(self) -> LineStyle | None:
        if -0.5 <= self.line_type < 0.5:
            return 'solid'
        if 0.5 <= self.line_type < 1.5:
            return 'dashed'
        return None

    @property
    def gray(self) -> float:
        return 1.0 - self.blackness


@dataclass
class AxisSpec:
    """One coordinate axis.

    Parameters:
        label: TeX math label, or None for the default (primary frame) or
            not drawn (secondary frame).
        anchor: Label position relative to the arrow tip.
        neg_length: Length of the dashed stub inside the sphere, from the
            centre towards the negative side.
        pos_length: Distance of the arrow tip from the centre (sphere radius 1).
    """

    label: str | None = None
    anchor: Anchor = cast(Anchor, DEFAULT_AXISLABEL_ANCHOR)
    neg_length: float = DEFAULT_NEGATIVE_AXIS_LENGTH
    pos_length: float = DEFAULT_POSITIVE_AXIS_LENGTH


def _default_axes() -> list[AxisSpec]:
    return [AxisSpec() for _ in range(3)]


def _default_extra_axes() -> list[AxisSpec]:
    return [AxisSpec(anchor=cast(Anchor, a)) for a in EXTRA_AXISLABEL_ANCHORS]


@dataclass
class ExtraFrame:
    """Secondary coordinate system, rotated from the primary frame.

    Parameters:
        dpsi: Additional first rotation (radians).
        dphi: Additional second rotation (radians).
        axes: x, y, z axes; only axes with a label are drawn.
    """

    dpsi: float = 0.0
    dphi: float = 0.0
    axes: list[AxisSpec] = field(default_factory=_default_extra_axes)


@dataclass
class SceneParams:
    """All options controlling one Poincare map.

    Angles are radians; thicknesses are PostScript points; whiteness and gray
    levels run from 0.0 (black) to 1.0 (white).
    """

    psi: float = DEFAULT_ROT_PSI
    phi: float = DEFAULT_ROT_PHI
    extra_frame: ExtraFrame | None = None
    normalize: bool = False
    phi_source: float = DEFAULT_PHI_SOURCE
    theta_source: float = DEFAULT_THETA_SOURCE
    lower_whiteness: float = DEFAULT_MIN_WHITENESS
    upper_whiteness: float = DEFAULT_MAX_WHITENESS
    hidden_graytone: float = DEFAULT_HIDDEN_GRAYTONE
    rho_divisor: int = DEFAULT_RHO_DIVISOR
    phi_divisor: int = DEFAULT_PHI_DIVISOR
    axes: list[AxisSpec] = field(default_factory=_default_axes)
    draw_axes_inside: bool = False
    path_thickness: float = DEFAULT_PATH_THICKNESS
    arrow_thickness: float = DEFAULT_ARROW_THICKNESS
    arrowhead_angle: float = DEFAULT_ARROW_HEADANGLE
    coord_axis_thickness: float = DEFAULT_COORD_AXIS_THICKNESS
    use_bezier: bool = False
    draw_hidden_dashed: bool = False
    draw_paths_as_arrows: bool = False
    reverse_arrow_paths: bool = False
    scalefactor: float = DEFAULT_SCALEFACTOR
    arrows: list[ArrowSpec] = field(default_factory=list)
    auxsource: str | None = None

    @property
    def frame(self) -> Frame:
        return Frame(self.psi, self.phi)

    @property
    def secondary_frame(self) -> Frame | None:
        if self.extra_frame is None:
            return None
        return self.frame.offset(self.extra_frame.dpsi, self.extra_frame.dphi)

    def axis_label(self, k: int) -> str:
        """Label of primary axis k (0, 1, 2), falling back to S_k or S_k/S_0."""
        label = self.axes[k].label
        if label:
            return label
        return (NORMALIZED_AXISLABELS if self.normalize else DEFAULT_AXISLABELS)[k]

    def validate(self) -> None:
        """Check option ranges.

        Raises:
            ValueError: Bad divisor, whiteness, gray level, or thickness.
            CapacityError: More than 24 user arrows.
        """
        if self.rho_divisor < 1 or self.phi_divisor < 1:
            raise ValueError(
                f'Shading divisors must be positive (rho={self.rho_divisor}, phi={self.phi_divisor})'
            )
        for name in ('lower_whiteness', 'upper_whiteness', 'hidden_graytone'):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f'{name} must be between 0 and 1 (got {value})')
        for name in ('path_thickness', 'arrow_thickness', 'coord_axis_thickness', 'scalefactor'):
            value = getattr(self, name)
            if not value > 0.0:
                raise ValueError(f'{name} must be positive (got {value})')
        if len(self.axes) != 3:
            raise ValueError(f'Expected 3 coordinate axes, got {len(self.axes)}')
        if len(self.arrows) > MAX_NUM_ARROWS:
            raise CapacityError(
                f'Too many arrows ({len(self.arrows)}); at most {MAX_NUM_ARROWS} are supported'
            )


def parse_arrow(values: list[float]) -> ArrowSpec:
    """Build an ArrowSpec from the eight ``--arrow`` numbers.

    Parameters:
        values: s1a s2a s3a s1b s2b s3b line_type blackness.

    Returns:
        ArrowSpec.

    Raises:
        ValueError: Wrong count or blackness outside [0, 1].
    """
    if len(values) != 8:
        raise ValueError(f'Arrow needs 8 numbers (start, end, line type, shade), got {len(values)}')
    s1a, s2a, s3a, s1b, s2b, s3b, line_type, blackness = (float(v) for v in values)
    if not 0.0 <= blackness <= 1.0:
        raise ValueError(f'Arrow shade must be between 0 and 1 (got {blackness})')
    return ArrowSpec((s1a, s2a, s3a), (s1b, s2b, s3b), line_type, blackness)


def parse_axis_lengths(values: list[float]) -> list[tuple[float, float]]:
    """Parse six axis lengths ``neg1 pos1 neg2 pos2 neg3 pos3``.

    Returns:
        Three ``(neg_length, pos_length)`` pairs.

    Raises:
        ValueError: Wrong count or negative length.
    """
    if len(values) != 6:
        raise ValueError(f'Axis lengths need 6 numbers, got {len(values)}')
    pairs = [(float(values[2 * k]), float(values[2 * k + 1])) for k in range(3)]
    for neg, pos in pairs:
        if neg < 0.0 or pos < 0.0:
            raise ValueError(f'Axis lengths must be non-negative (got {neg}, {pos})')
    return pairs


def parse_axis_labels(tokens: list[str]) -> list[tuple[str, Anchor]]:
    """Parse ``label1 pos1 label2 pos2 label3 pos3``.

    Returns:
        Three ``(label, anchor)`` pairs.

    Raises:
        ValueError: Wrong count or invalid position.
    """
    if len(tokens) != 6:
        raise ValueError(f'Axis labels need 6 tokens (label position x3), got {len(tokens)}')
    return [(tokens[2 * k], parse_anchor(tokens[2 * k + 1])) for k in range(3)]
