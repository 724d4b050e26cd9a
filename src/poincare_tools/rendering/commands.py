"""Abstract draw commands and the sink protocol emitters implement.

Coordinates are screen coordinates in units of the sphere radius; emitters
apply the scale factor. Gray levels run from 0.0 (black) to 1.0 (white).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Protocol, Union

from poincare_tools.constants import DEFAULT_ARROW_HEADANGLE
from poincare_tools.params import Anchor, SceneParams

Point2 = tuple[float, float]

StrokeKind = Literal['hidden', 'visible', 'equator', 'arrow', 'axis', 'axis_inside']


@dataclass(frozen=True)
class FillCommand:
    """Filled polygon (one sphere shading patch)."""

    polygon: tuple[Point2, ...]
    gray: float


@dataclass(frozen=True)
class StrokeCommand:
    """Stroked polyline.

    Parameters:
        points: Screen points, at least two.
        thickness: Line width in points.
        gray: Stroke gray level.
        dashed: Draw with an even dash pattern.
        arrowhead: Put an arrowhead at the end of the path.
        reverse: With arrowhead, put it at the start instead.
        smooth: Interpolate the points with a smooth curve.
        kind: What the stroke belongs to, for emitters that style by layer.
        head_angle: Arrowhead opening angle in degrees.
    """

    points: tuple[Point2, ...]
    thickness: float
    gray: float = 0.0
    dashed: bool = False
    arrowhead: bool = False
    reverse: bool = False
    smooth: bool = False
    kind: StrokeKind = 'visible'
    head_angle: float = DEFAULT_ARROW_HEADANGLE


@dataclass(frozen=True)
class TickCommand:
    """Short tick segment across a trajectory."""

    start: Point2
    end: Point2
    thickness: float
    gray: float = 0.0


@dataclass(frozen=True)
class LabelCommand:
    """Text placed at a point.

    Parameters:
        position: Reference point.
        text: TeX text.
        anchor: Side of the point the text goes to; None centres it.
        math: Text is TeX math (axis labels), typeset as ``$text$``.
    """

    position: Point2
    text: str
    anchor: Anchor | None = None
    math: bool = False


DrawCommand = Union[FillCommand, StrokeCommand, TickCommand, LabelCommand]


@dataclass
class Scene:
    """Assembled scene: options plus the ordered command list."""

    params: SceneParams
    commands: list[DrawCommand] = field(default_factory=list)


class CommandSink(Protocol):
    """Consumer of an ordered command stream."""

    def begin(self, params: SceneParams) -> None: ...

    def emit(self, command: DrawCommand) -> None: ...

    def end(self) -> None: ...


class ListSink:
    """Sink that collects commands in a list."""

    def __init__(self) -> None:
        self.params: SceneParams | None = None
        self.commands: list[DrawCommand] = []
        self.finished = False

    def begin(self, params: SceneParams) -> None:
        self.params = params

    def emit(self, command: DrawCommand) -> None:
        self.commands.append(command)

    def end(self) -> None:
        self.finished = True


def emit_scene(scene: Scene, sink: CommandSink) -> None:
    """Replay a scene into a sink in order."""
    sink.begin(scene.params)
    for command in scene.commands:
        sink.emit(command)
    sink.end()
