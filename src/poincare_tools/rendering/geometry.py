"""Projection of Stokes triplets onto the screen and visibility tests.

The view is a two-angle Euler rotation: ``psi`` about the S3 axis, then
``phi`` tilting towards the observer. Screen coordinates are in units of the
sphere radius.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from poincare_tools.constants import DEGENERACY_EPS, TICK_HALF_LENGTH
from poincare_tools.errors import DegenerateGeometryError, NumericError
from poincare_tools.params import Frame
from poincare_tools.rendering.vec_math import (
    Vec3,
    _vcrss,
    _vdot,
    _vlcom,
    _vnorm,
    _vscl,
    _vsub,
)

Point2 = tuple[float, float]

AXES: tuple[Vec3, Vec3, Vec3] = ((1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0))


def screen_basis(frame: Frame) -> tuple[Vec3, Vec3]:
    """Stokes-space directions of the screen x and y axes."""
    cpsi, spsi = math.cos(frame.psi), math.sin(frame.psi)
    cphi, sphi = math.cos(frame.phi), math.sin(frame.phi)
    return (spsi, cpsi, 0.0), (-cpsi * sphi, spsi * sphi, cphi)


def view_direction(frame: Frame) -> Vec3:
    """Unit vector from the sphere centre towards the observer."""
    cpsi, spsi = math.cos(frame.psi), math.sin(frame.psi)
    cphi, sphi = math.cos(frame.phi), math.sin(frame.phi)
    return (cpsi * cphi, -spsi * cphi, sphi)


def project(triplet: Sequence[float], frame: Frame, normalize: bool = False) -> Point2:
    """Project a Stokes triplet to screen coordinates.

    Parameters:
        triplet: (s1, s2, s3).
        frame: Viewing angles.
        normalize: Divide by the triplet norm (plot s/s0 instead of s).

    Returns:
        Screen point (x, y).

    Raises:
        NumericError: The result is NaN or infinite (e.g. zero triplet with normalize).
    """
    s1, s2, s3 = triplet[0], triplet[1], triplet[2]
    cpsi, spsi = math.cos(frame.psi), math.sin(frame.psi)
    cphi, sphi = math.cos(frame.phi), math.sin(frame.phi)
    x = s1 * spsi + s2 * cpsi
    y = -s1 * cpsi * sphi + s2 * spsi * sphi + s3 * cphi
    if normalize:
        snorm = math.sqrt(s1 * s1 + s2 * s2 + s3 * s3)
        if snorm == 0.0:
            raise NumericError(
                f'Cannot normalize zero Stokes triplet ({s1}, {s2}, {s3})'
            )
        x /= snorm
        y /= snorm
    if not (math.isfinite(x) and math.isfinite(y)):
        raise NumericError(
            f'Non-finite screen coordinates ({x}, {y}) for triplet ({s1}, {s2}, {s3}) '
            f'at psi={frame.psi}, phi={frame.phi}'
        )
    return (x, y)


def visible(triplet: Sequence[float], frame: Frame) -> bool:
    """True if the point faces the observer; points exactly on the limb count as visible."""
    d = view_direction(frame)
    return triplet[0] * d[0] + triplet[1] * d[1] + triplet[2] * d[2] >= 0.0


def tangent_and_normal(points: Sequence[Vec3], index: int) -> tuple[Vec3, Vec3]:
    """Unit tangent and unit surface-transverse normal at a trajectory point.

    The tangent is a forward difference at the first point, a backward
    difference at the last, and a central difference elsewhere, taken on the
    raw coordinates. The normal is ``normalize(s_hat x t_hat)``. A tangent
    shorter than DEGENERACY_EPS times the point norm counts as zero; the
    normal threshold applies to the cross product of unit vectors.

    Parameters:
        points: Trajectory points.
        index: 0-based point index.

    Returns:
        (t_hat, n_hat).

    Raises:
        IndexError: index out of range.
        DegenerateGeometryError: Fewer than two points, or a zero-length
            tangent, point, or normal.
    """
    n = len(points)
    if not 0 <= index < n:
        raise IndexError(f'Point index {index} out of range for {n} points')
    if n < 2:
        raise DegenerateGeometryError('Tangent needs a trajectory of at least two points')
    if index == 0:
        q = _vsub(points[1], points[0])
    elif index == n - 1:
        q = _vsub(points[n - 1], points[n - 2])
    else:
        q = _vsub(points[index + 1], points[index - 1])
    s = points[index]
    s0 = _vnorm(s)
    if s0 == 0.0:
        raise DegenerateGeometryError(f'Zero Stokes vector at point {index}')
    # Tangent threshold is relative to the point norm
    qn = _vnorm(q)
    if qn <= DEGENERACY_EPS * s0:
        raise DegenerateGeometryError(f'Zero-length tangent at point {index}')
    t_hat = _vscl(1.0 / qn, q)
    p = _vcrss(_vscl(1.0 / s0, s), t_hat)
    pn = _vnorm(p)
    if pn < DEGENERACY_EPS:
        raise DegenerateGeometryError(
            f'Tangent is parallel to the Stokes vector at point {index}'
        )
    return t_hat, _vscl(1.0 / pn, p)


def tick_endpoints(
    points: Sequence[Vec3], index: int, frame: Frame, normalize: bool = False
) -> tuple[Point2, Point2]:
    """Screen end points of the tick mark at a trajectory point.

    The tick runs through the normalized point along the transverse normal,
    TICK_HALF_LENGTH on each side, and is scaled back by the point's norm.

    Raises:
        DegenerateGeometryError: See ``tangent_and_normal``.
        NumericError: A projected end point is not finite.
    """
    _, n_hat = tangent_and_normal(points, index)
    s = points[index]
    s0 = _vnorm(s)
    s_hat = _vscl(1.0 / s0, s)
    a = _vscl(s0, _vlcom(1.0, s_hat, TICK_HALF_LENGTH, n_hat))
    b = _vscl(s0, _vlcom(1.0, s_hat, -TICK_HALF_LENGTH, n_hat))
    return project(a, frame, normalize), project(b, frame, normalize)


def front_half_circle(axis: Vec3, frame: Frame, samples: int) -> list[Vec3]:
    """Points of the visible half of the unit great circle orthogonal to ``axis``.

    Parameters:
        axis: Unit normal of the great circle's plane.
        frame: Viewing angles.
        samples: Number of points (at least 2), end points on the limb.

    Returns:
        Unit vectors ordered along the half circle.
    """
    d = view_direction(frame)
    w = _vlcom(1.0, d, -_vdot(d, axis), axis)
    wn = _vnorm(w)
    if wn < DEGENERACY_EPS:
        # Circle seen face-on: it is the limb, any half is the front half.
        w, _ = screen_basis(frame)
        w = _vlcom(1.0, w, -_vdot(w, axis), axis)
        wn = _vnorm(w)
    w = _vscl(1.0 / wn, w)
    u = _vcrss(axis, w)
    out: list[Vec3] = []
    for i in range(samples):
        t = -0.5 * math.pi + math.pi * i / (samples - 1)
        out.append(_vlcom(math.cos(t), w, math.sin(t), u))
    return out
