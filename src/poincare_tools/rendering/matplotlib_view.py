"""Matplotlib rendering of an assembled map (PNG, PDF, SVG)."""

from __future__ import annotations

import logging
from typing import IO, TYPE_CHECKING, Any

from poincare_tools.params import SceneParams
from poincare_tools.rendering.commands import (
    DrawCommand,
    FillCommand,
    LabelCommand,
    Scene,
    StrokeCommand,
    TickCommand,
    emit_scene,
)
from poincare_tools.rendering.postscript import arrowhead_polygon, bezier_segments

if TYPE_CHECKING:
    from matplotlib.axes import Axes
    from matplotlib.figure import Figure

logger = logging.getLogger(__name__)

IMAGE_FORMATS = ('png', 'pdf', 'svg')

# matplotlib text alignment (ha, va) per label anchor
_ALIGN: dict[str | None, tuple[str, str]] = {
    None: ('center', 'center'),
    'top': ('center', 'bottom'),
    'bot': ('center', 'top'),
    'lft': ('right', 'center'),
    'rgt': ('left', 'center'),
    'ulft': ('right', 'bottom'),
    'urgt': ('left', 'bottom'),
    'llft': ('right', 'top'),
    'lrgt': ('left', 'top'),
}

# Half-width of the plotted area in sphere radii
VIEW_EXTENT = 1.9


def _gray(level: float) -> str:
    return f'{min(max(level, 0.0), 1.0):.4f}'


class MatplotlibEmitter:
    """Command sink drawing onto a matplotlib figure saved at ``end()``.

    Parameters:
        output: Path or binary stream for ``savefig``.
        fmt: One of ``png``, ``pdf``, ``svg``.
        dpi: Raster resolution.
    """

    def __init__(self, output: str | IO[bytes], fmt: str = 'png', dpi: int = 300) -> None:
        if fmt not in IMAGE_FORMATS:
            raise ValueError(f'Unsupported image format {fmt!r} (expected one of {IMAGE_FORMATS})')
        self._output = output
        self._fmt = fmt
        self._dpi = dpi
        self._fig: Figure | None = None
        self._ax: Axes | None = None
        self._plt: Any = None
        self._path_cls: Any = None
        self._patch_cls: Any = None
        self._head_scale = 1.0

    def begin(self, params: SceneParams) -> None:
        try:
            import matplotlib

            matplotlib.use('Agg')
            import matplotlib.pyplot as plt
            from matplotlib.patches import PathPatch
            from matplotlib.path import Path
        except ImportError:
            raise ImportError('matplotlib is required for image output') from None
        size_in = 2.0 * VIEW_EXTENT * params.scalefactor / 25.4
        fig, ax = plt.subplots(figsize=(size_in, size_in))
        ax.set_xlim(-VIEW_EXTENT, VIEW_EXTENT)
        ax.set_ylim(-VIEW_EXTENT, VIEW_EXTENT)
        ax.set_aspect('equal')
        ax.axis('off')
        fig.subplots_adjust(left=0, right=1, bottom=0, top=1)
        self._plt = plt
        self._fig, self._ax = fig, ax
        self._path_cls, self._patch_cls = Path, PathPatch
        # points -> data units (sphere radius is scalefactor mm)
        self._head_scale = 25.4 / 72.0 / params.scalefactor

    def _axes(self) -> Axes:
        if self._ax is None:
            raise RuntimeError('MatplotlibEmitter.begin() was not called')
        return self._ax

    def _stroke(self, cmd: StrokeCommand) -> None:
        ax = self._axes()
        color = _gray(cmd.gray)
        style = '--' if cmd.dashed else '-'
        if cmd.smooth and len(cmd.points) > 2:
            verts = [cmd.points[0]]
            codes = [self._path_cls.MOVETO]
            for c1, c2, end in bezier_segments(cmd.points):
                verts.extend((c1, c2, end))
                codes.extend([self._path_cls.CURVE4] * 3)
            patch = self._patch_cls(
                self._path_cls(verts, codes),
                facecolor='none',
                edgecolor=color,
                linewidth=cmd.thickness,
                linestyle=style,
            )
            ax.add_patch(patch)
        else:
            xs = [p[0] for p in cmd.points]
            ys = [p[1] for p in cmd.points]
            ax.plot(xs, ys, color=color, linewidth=cmd.thickness, linestyle=style)
        if cmd.arrowhead:
            length = (4.0 + 2.0 * cmd.thickness) * self._head_scale
            head = arrowhead_polygon(cmd.points, cmd.reverse, cmd.head_angle, length)
            if head is not None:
                ax.fill([p[0] for p in head], [p[1] for p in head], color=color, linewidth=0)

    def emit(self, command: DrawCommand) -> None:
        ax = self._axes()
        if isinstance(command, FillCommand):
            ax.fill(
                [p[0] for p in command.polygon],
                [p[1] for p in command.polygon],
                color=_gray(command.gray),
                linewidth=0,
            )
        elif isinstance(command, StrokeCommand):
            self._stroke(command)
        elif isinstance(command, TickCommand):
            ax.plot(
                [command.start[0], command.end[0]],
                [command.start[1], command.end[1]],
                color=_gray(command.gray),
                linewidth=command.thickness,
            )
        else:
            self._label(command)

    def _label(self, cmd: LabelCommand) -> None:
        ha, va = _ALIGN[cmd.anchor]
        text = f'${cmd.text}$' if cmd.math else cmd.text
        self._axes().text(cmd.position[0], cmd.position[1], text, ha=ha, va=va, fontsize=8)

    def end(self) -> None:
        if self._fig is None:
            raise RuntimeError('MatplotlibEmitter.begin() was not called')
        self._fig.savefig(self._output, format=self._fmt, dpi=self._dpi)
        self._plt.close(self._fig)
        logger.debug('Saved %s image', self._fmt)
        self._fig = None
        self._ax = None


def write_image(scene: Scene, output: str | IO[bytes], fmt: str = 'png', dpi: int = 300) -> None:
    """Render a scene with matplotlib and save it."""
    emit_scene(scene, MatplotlibEmitter(output, fmt, dpi))
