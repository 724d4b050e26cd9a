"""Assemble the complete Poincare map as an ordered list of draw commands.

Order: shaded sphere, equators, hidden runs of all trajectories, visible runs
of all trajectories, user arrows, coordinate axes, secondary axes. Hidden
parts of every trajectory are emitted before any visible part so that no
hidden stroke is painted over a visible one.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import replace
from typing import TYPE_CHECKING

from poincare_tools.constants import (
    ARROW_PARAM_STEP,
    DEFAULT_ARROW_HEADANGLE,
    EQUATOR_GRAY,
    EQUATOR_SAMPLES,
    INSIDE_AXIS_GRAY,
)
from poincare_tools.errors import NumericError
from poincare_tools.params import ArrowSpec, AxisSpec, Frame, SceneParams
from poincare_tools.rendering.commands import (
    DrawCommand,
    FillCommand,
    LabelCommand,
    Point2,
    Scene,
    StrokeCommand,
)
from poincare_tools.rendering.geometry import AXES, front_half_circle, project
from poincare_tools.rendering.segmentation import hidden_pass_commands, visible_pass_commands
from poincare_tools.rendering.vec_math import Vec3, _vlcom, _vnorm, _vscl
from poincare_tools.trajectory import Trajectory

if TYPE_CHECKING:
    import numpy as np

logger = logging.getLogger(__name__)


def light_direction(params: SceneParams) -> tuple[float, float, float]:
    """Unit vector towards the light source, in screen coordinates (z towards observer)."""
    st = math.sin(params.theta_source)
    return (
        st * math.cos(params.phi_source),
        st * math.sin(params.phi_source),
        math.cos(params.theta_source),
    )


def shading_values(params: SceneParams) -> np.ndarray:
    """Whiteness of every shading patch, shape (rho_divisor, phi_divisor).

    The sphere normal at the patch centre is ``(q cos(phim), q sin(phim),
    sqrt(1 - q**2))`` with ``q`` the radial mid-point; patches facing away from
    the light get the lower whiteness, the rest ``lower + (upper - lower) * prod**2``.
    """
    import numpy as np

    n_rho, n_phi = params.rho_divisor, params.phi_divisor
    drho = 1.0 / n_rho
    dphi = 2.0 * math.pi / n_phi
    q = (np.arange(n_rho, dtype=np.float64) + 0.5) * drho
    phim = (np.arange(n_phi, dtype=np.float64) + 0.5) * dphi
    qq, pp = np.meshgrid(q, phim, indexing='ij')
    nx = qq * np.cos(pp)
    ny = qq * np.sin(pp)
    nz = np.sqrt(np.clip(1.0 - qq * qq, 0.0, None))
    lx, ly, lz = light_direction(params)
    prod = nx * lx + ny * ly + nz * lz
    lower, upper = params.lower_whiteness, params.upper_whiteness
    return np.where(prod < 0.0, lower, lower + (upper - lower) * prod * prod)


def shading_commands(params: SceneParams) -> list[FillCommand]:
    """Quadrilateral patches of the shaded disk, radial bins outermost."""
    import numpy as np

    values = shading_values(params)
    n_rho, n_phi = values.shape
    drho = 1.0 / n_rho
    phi = np.arange(n_phi + 1, dtype=np.float64) * (2.0 * math.pi / n_phi)
    cphi, sphi = np.cos(phi), np.sin(phi)
    out: list[FillCommand] = []
    for i in range(n_rho):
        r0, r1 = i * drho, (i + 1) * drho
        for j in range(n_phi):
            polygon = (
                (float(r0 * cphi[j]), float(r0 * sphi[j])),
                (float(r1 * cphi[j]), float(r1 * sphi[j])),
                (float(r1 * cphi[j + 1]), float(r1 * sphi[j + 1])),
                (float(r0 * cphi[j + 1]), float(r0 * sphi[j + 1])),
            )
            out.append(FillCommand(polygon, float(values[i, j])))
    return out


def equator_commands(frame: Frame, params: SceneParams) -> list[StrokeCommand]:
    """Front halves of the great circles S3=0, S2=0, S1=0 seen in ``frame``."""
    out: list[StrokeCommand] = []
    for axis in (AXES[2], AXES[1], AXES[0]):
        points = tuple(project(p, frame) for p in front_half_circle(axis, frame, EQUATOR_SAMPLES))
        out.append(
            StrokeCommand(
                points=points,
                thickness=params.coord_axis_thickness,
                gray=EQUATOR_GRAY,
                smooth=True,
                kind='equator',
            )
        )
    return out


def _unit(v: Vec3, what: str) -> Vec3:
    n = _vnorm(v)
    if n == 0.0 or not math.isfinite(n):
        raise NumericError(f'Cannot normalize {what} {v}')
    return _vscl(1.0 / n, v)


def _arc(a: Vec3, b: Vec3, t0: float, t1: float, frame: Frame) -> tuple[Point2, ...]:
    """Project the chord a->b for t in [t0, t1], each sample pushed onto the unit sphere."""
    steps = int(round((t1 - t0) / ARROW_PARAM_STEP))
    points: list[Point2] = []
    for i in range(steps + 1):
        t = t0 + i * ARROW_PARAM_STEP
        s = _unit(_vlcom(1.0 - t, a, t, b), f'arrow sample at t={t:.2f}')
        points.append(project(s, frame))
    return tuple(points)


def arrow_commands(arrow: ArrowSpec, params: SceneParams) -> list[StrokeCommand]:
    """Two strokes for a user arrow; the first half carries the arrowhead at the midpoint."""
    style = arrow.style
    if style is None:
        logger.warning(
            'Arrow from %s to %s has line type %g outside [-0.5, 1.5); not drawn',
            arrow.start,
            arrow.end,
            arrow.line_type,
        )
        return []
    a: Vec3 = arrow.start
    b: Vec3 = arrow.end
    if params.normalize:
        a = _unit(a, 'arrow start')
        b = _unit(b, 'arrow end')
    frame = params.frame
    first = StrokeCommand(
        points=_arc(a, b, 0.0, 0.5, frame),
        thickness=params.arrow_thickness,
        gray=arrow.gray,
        dashed=style == 'dashed',
        arrowhead=True,
        smooth=True,
        kind='arrow',
        head_angle=params.arrowhead_angle,
    )
    return [first, replace(first, points=_arc(a, b, 0.5, 1.0, frame), arrowhead=False)]


def _axis_commands(
    axis_vec: Vec3, spec: AxisSpec, label: str, frame: Frame, params: SceneParams
) -> list[DrawCommand]:
    tip = project(axis_vec, frame)
    out: list[DrawCommand] = []
    if params.draw_axes_inside:
        start = project(_vscl(-spec.neg_length, axis_vec), frame)
        if start != tip:
            out.append(
                StrokeCommand(
                    points=(start, tip),
                    thickness=params.coord_axis_thickness,
                    gray=INSIDE_AXIS_GRAY,
                    dashed=True,
                    kind='axis_inside',
                )
            )
    end = (spec.pos_length * tip[0], spec.pos_length * tip[1])
    if end != tip:
        out.append(
            StrokeCommand(
                points=(tip, end),
                thickness=params.coord_axis_thickness,
                arrowhead=True,
                kind='axis',
                head_angle=DEFAULT_ARROW_HEADANGLE,
            )
        )
    else:
        logger.debug('Axis %s has zero projected length; arrow skipped', label)
    out.append(LabelCommand(end, label, spec.anchor, math=True))
    return out


def axes_commands(params: SceneParams) -> list[DrawCommand]:
    """Primary S1, S2, S3 axes with arrows and labels."""
    out: list[DrawCommand] = []
    for k in range(3):
        out.extend(_axis_commands(AXES[k], params.axes[k], params.axis_label(k), params.frame, params))
    return out


def secondary_axes_commands(params: SceneParams) -> list[DrawCommand]:
    """Axes of the secondary frame; only those with a label are drawn."""
    frame = params.secondary_frame
    if frame is None or params.extra_frame is None:
        return []
    out: list[DrawCommand] = []
    for k, spec in enumerate(params.extra_frame.axes):
        if spec.label:
            out.extend(_axis_commands(AXES[k], spec, spec.label, frame, params))
    return out


def assemble_scene(trajectories: Iterable[Trajectory], params: SceneParams) -> Scene:
    """Build every draw command of the map.

    Parameters:
        trajectories: Parsed trajectories (may be empty).
        params: Scene options.

    Returns:
        Scene with the ordered command list.

    Raises:
        ValueError: Invalid options.
        CapacityError: Too many arrows.
        NumericError: Non-finite projection.
        DegenerateGeometryError: Tick mark on a degenerate trajectory point.
    """
    params.validate()
    trajs = list(trajectories)
    frame = params.frame
    logger.debug(
        'Scene psi=%.4f phi=%.4f alpha=%.4f beta=%.4f', frame.psi, frame.phi, frame.alpha, frame.beta
    )
    commands: list[DrawCommand] = []
    commands.extend(shading_commands(params))
    commands.extend(equator_commands(frame, params))
    secondary = params.secondary_frame
    if secondary is not None:
        logger.debug(
            'Secondary frame alpha=%.4f beta=%.4f', secondary.alpha, secondary.beta
        )
        commands.extend(equator_commands(secondary, params))
    for traj in trajs:
        commands.extend(hidden_pass_commands(traj, params))
    for traj in trajs:
        commands.extend(visible_pass_commands(traj, params))
    for arrow in params.arrows:
        commands.extend(arrow_commands(arrow, params))
    commands.extend(axes_commands(params))
    commands.extend(secondary_axes_commands(params))
    logger.info(
        'Assembled %d draw commands for %d trajectories', len(commands), len(trajs)
    )
    return Scene(params=params, commands=commands)
