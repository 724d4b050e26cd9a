"""Encapsulated PostScript output for an assembled Poincare map."""

from __future__ import annotations

import logging
import math
from typing import TextIO

from poincare_tools.constants import MM_TO_PT
from poincare_tools.params import SceneParams
from poincare_tools.rendering.commands import (
    DrawCommand,
    FillCommand,
    LabelCommand,
    Point2,
    Scene,
    StrokeCommand,
    TickCommand,
    emit_scene,
)

logger = logging.getLogger(__name__)

LABEL_FONT = 'Times-Roman'
LABEL_SIZE = 10.0
LABEL_GAP = 3.0
MARGIN = 6.0

# Label placement per anchor: (fraction of text width to shift, dy, extra dx)
_LABEL_OFFSETS: dict[str | None, tuple[float, float, float]] = {
    None: (-0.5, -0.35 * LABEL_SIZE, 0.0),
    'top': (-0.5, LABEL_GAP, 0.0),
    'bot': (-0.5, -LABEL_GAP - 0.7 * LABEL_SIZE, 0.0),
    'lft': (-1.0, -0.35 * LABEL_SIZE, -LABEL_GAP),
    'rgt': (0.0, -0.35 * LABEL_SIZE, LABEL_GAP),
    'ulft': (-1.0, LABEL_GAP, -LABEL_GAP),
    'urgt': (0.0, LABEL_GAP, LABEL_GAP),
    'llft': (-1.0, -LABEL_GAP - 0.7 * LABEL_SIZE, -LABEL_GAP),
    'lrgt': (0.0, -LABEL_GAP - 0.7 * LABEL_SIZE, LABEL_GAP),
}


def bezier_segments(points: tuple[Point2, ...]) -> list[tuple[Point2, Point2, Point2]]:
    """Cubic Bezier control points through all points (Catmull-Rom tangents).

    Returns:
        One ``(c1, c2, end)`` triple per segment, starting from ``points[0]``.
    """
    n = len(points)
    out: list[tuple[Point2, Point2, Point2]] = []
    for i in range(n - 1):
        p0 = points[max(i - 1, 0)]
        p1 = points[i]
        p2 = points[i + 1]
        p3 = points[min(i + 2, n - 1)]
        c1 = (p1[0] + (p2[0] - p0[0]) / 6.0, p1[1] + (p2[1] - p0[1]) / 6.0)
        c2 = (p2[0] - (p3[0] - p1[0]) / 6.0, p2[1] - (p3[1] - p1[1]) / 6.0)
        out.append((c1, c2, p2))
    return out


def arrowhead_polygon(
    points: tuple[Point2, ...], reverse: bool, angle_deg: float, length: float
) -> tuple[Point2, Point2, Point2] | None:
    """Tip and the two barb corners of a filled arrowhead, or None if no direction.

    Parameters:
        points: Path points in device units.
        reverse: Head at the first point instead of the last.
        angle_deg: Full opening angle of the head.
        length: Barb length in device units.
    """
    seq = points[::-1] if reverse else points
    tip = seq[-1]
    for prev in reversed(seq[:-1]):
        dx, dy = tip[0] - prev[0], tip[1] - prev[1]
        d = math.hypot(dx, dy)
        if d > 0.0:
            break
    else:
        return None
    ux, uy = dx / d, dy / d
    half = math.radians(angle_deg) / 2.0
    corners: list[Point2] = []
    for sign in (1.0, -1.0):
        c, s = math.cos(sign * half), math.sin(sign * half)
        bx, by = ux * c - uy * s, ux * s + uy * c
        corners.append((tip[0] - length * bx, tip[1] - length * by))
    return (tip, corners[0], corners[1])


def _escape(text: str) -> str:
    return text.replace('\\', '\\\\').replace('(', '\\(').replace(')', '\\)')


def _f(v: float) -> str:
    return f'{v:.2f}'


class PostScriptEmitter:
    """Command sink writing Encapsulated PostScript.

    Commands are buffered until ``end()`` because the bounding box must be
    written before any drawing.
    """

    def __init__(self, stream: TextIO, title: str = 'Poincare map') -> None:
        self._stream = stream
        self._title = title
        self._params = SceneParams()
        self._commands: list[DrawCommand] = []
        self._scale = 1.0

    def _emit(self, s: str) -> None:
        self._stream.write(s + '\n')

    def begin(self, params: SceneParams) -> None:
        self._params = params
        self._scale = params.scalefactor * MM_TO_PT
        self._commands = []

    def emit(self, command: DrawCommand) -> None:
        self._commands.append(command)

    def _dev(self, p: Point2) -> Point2:
        return (p[0] * self._scale, p[1] * self._scale)

    def _head_length(self, thickness: float) -> float:
        return 4.0 + 2.0 * thickness

    def bounding_box(self) -> tuple[float, float, float, float]:
        """Device-space extent (xmin, ymin, xmax, ymax) of everything drawn."""
        xs: list[float] = []
        ys: list[float] = []

        def add(p: Point2, pad_x: float = 0.0, pad_y: float = 0.0) -> None:
            xs.extend((p[0] - pad_x, p[0] + pad_x))
            ys.extend((p[1] - pad_y, p[1] + pad_y))

        for cmd in self._commands:
            if isinstance(cmd, FillCommand):
                for p in cmd.polygon:
                    add(self._dev(p))
            elif isinstance(cmd, StrokeCommand):
                pad = cmd.thickness / 2.0 + (self._head_length(cmd.thickness) if cmd.arrowhead else 0.0)
                for p in cmd.points:
                    add(self._dev(p), pad, pad)
            elif isinstance(cmd, TickCommand):
                add(self._dev(cmd.start), cmd.thickness, cmd.thickness)
                add(self._dev(cmd.end), cmd.thickness, cmd.thickness)
            elif isinstance(cmd, LabelCommand):
                width = 0.6 * LABEL_SIZE * len(cmd.text) + LABEL_GAP
                add(self._dev(cmd.position), width, LABEL_SIZE + LABEL_GAP)
        if not xs:
            return (0.0, 0.0, 0.0, 0.0)
        return (min(xs), min(ys), max(xs), max(ys))

    def _header(self, bbox: tuple[float, float, float, float]) -> None:
        xmin, ymin, xmax, ymax = bbox
        width = math.ceil(xmax - xmin + 2 * MARGIN)
        height = math.ceil(ymax - ymin + 2 * MARGIN)
        self._emit('%!PS-Adobe-2.0 EPSF-2.0')
        self._emit(f'%%Title: {self._title}')
        self._emit('%%Creator: poincare_tools')
        self._emit(f'%%BoundingBox: 0 0 {width} {height}')
        self._emit('%%EndComments')
        self._emit('/L {lineto} def')
        self._emit('/M {moveto} def')
        self._emit('/N {newpath} def')
        self._emit('/C {curveto} def')
        self._emit('/G {setgray} def')
        self._emit('/W {setlinewidth} def')
        self._emit('/S {stroke} def')
        self._emit('/F {closepath fill} def')
        self._emit('/Lbl {/gx exch def /dy exch def /fx exch def M')
        self._emit('  dup stringwidth pop fx mul gx add dy rmoveto show} def')
        self._emit('save')
        self._emit('1 setlinecap 1 setlinejoin')
        self._emit(f'{_f(MARGIN - xmin)} {_f(MARGIN - ymin)} translate')
        self._emit(f'/{LABEL_FONT} findfont {LABEL_SIZE:g} scalefont setfont')

    def _fill(self, cmd: FillCommand) -> None:
        pts = [self._dev(p) for p in cmd.polygon]
        self._emit(f'{cmd.gray:.4f} G N {_f(pts[0][0])} {_f(pts[0][1])} M')
        self._emit(' '.join(f'{_f(x)} {_f(y)} L' for x, y in pts[1:]) + ' F')

    def _stroke(self, cmd: StrokeCommand) -> None:
        pts = tuple(self._dev(p) for p in cmd.points)
        self._emit(f'{cmd.gray:.4f} G {cmd.thickness:g} W')
        if cmd.dashed:
            self._emit('[3 3] 0 setdash')
        self._emit(f'N {_f(pts[0][0])} {_f(pts[0][1])} M')
        if cmd.smooth and len(pts) > 2:
            for c1, c2, end in bezier_segments(pts):
                self._emit(
                    f'{_f(c1[0])} {_f(c1[1])} {_f(c2[0])} {_f(c2[1])} {_f(end[0])} {_f(end[1])} C'
                )
        else:
            for x, y in pts[1:]:
                self._emit(f'{_f(x)} {_f(y)} L')
        self._emit('S')
        if cmd.dashed:
            self._emit('[] 0 setdash')
        if cmd.arrowhead:
            head = arrowhead_polygon(pts, cmd.reverse, cmd.head_angle, self._head_length(cmd.thickness))
            if head is None:
                logger.debug('Arrowhead skipped on zero-length path')
                return
            tip, a, b = head
            self._emit(
                f'N {_f(tip[0])} {_f(tip[1])} M {_f(a[0])} {_f(a[1])} L {_f(b[0])} {_f(b[1])} L F'
            )

    def _tick(self, cmd: TickCommand) -> None:
        (xa, ya), (xb, yb) = self._dev(cmd.start), self._dev(cmd.end)
        self._emit(f'{cmd.gray:.4f} G {cmd.thickness:g} W')
        self._emit(f'N {_f(xa)} {_f(ya)} M {_f(xb)} {_f(yb)} L S')

    def _label(self, cmd: LabelCommand) -> None:
        x, y = self._dev(cmd.position)
        fx, dy, gx = _LABEL_OFFSETS[cmd.anchor]
        self._emit(f'0 G ({_escape(cmd.text)}) {_f(x)} {_f(y)} {fx:g} {_f(dy)} {_f(gx)} Lbl')

    def end(self) -> None:
        self._header(self.bounding_box())
        for cmd in self._commands:
            if isinstance(cmd, FillCommand):
                self._fill(cmd)
            elif isinstance(cmd, StrokeCommand):
                self._stroke(cmd)
            elif isinstance(cmd, TickCommand):
                self._tick(cmd)
            else:
                self._label(cmd)
        self._emit('restore')
        self._emit('showpage')
        self._emit('%%EOF')


def write_postscript(scene: Scene, stream: TextIO, title: str = 'Poincare map') -> None:
    """Write a scene as Encapsulated PostScript."""
    emit_scene(scene, PostScriptEmitter(stream, title))
