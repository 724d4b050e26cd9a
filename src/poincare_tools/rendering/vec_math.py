"""Small 3-vector helpers for Stokes space geometry."""

from __future__ import annotations

import math

Vec3 = tuple[float, float, float]


def _vdot(a: Vec3, b: Vec3) -> float:
    """Dot product of two 3-vectors."""
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def _vnorm(v: Vec3) -> float:
    """Euclidean norm of 3-vector."""
    return math.sqrt(v[0] * v[0] + v[1] * v[1] + v[2] * v[2])


def _vsub(a: Vec3, b: Vec3) -> Vec3:
    """Vector difference a - b."""
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def _vscl(s: float, v: Vec3) -> Vec3:
    """Scale vector: s * v."""
    return (s * v[0], s * v[1], s * v[2])


def _vlcom(a: float, v1: Vec3, b: float, v2: Vec3) -> Vec3:
    """Linear combination a*v1 + b*v2."""
    return (a * v1[0] + b * v2[0], a * v1[1] + b * v2[1], a * v1[2] + b * v2[2])


def _vcrss(a: Vec3, b: Vec3) -> Vec3:
    """Cross product a x b."""
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )

