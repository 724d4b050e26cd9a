"""MetaPost source output, compiled with ``mpost`` into ``<job>.1`` (EPS with TeX labels)."""

from __future__ import annotations

import math
from typing import TextIO

from poincare_tools.constants import DEFAULT_ARROW_HEADANGLE, VERSION
from poincare_tools.params import METAPOST_SUFFIX, SceneParams
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

# Points per output line inside a path expression
COORDS_PER_LINE = 3


def _pair(p: Point2) -> str:
    return f'({p[0]:1.4f},{p[1]:1.4f})'


def _color(gray: float) -> str:
    if gray == 0.0:
        return 'black'
    return f'{gray:f} [black,white]'


def _deg(angle: float) -> str:
    if not math.isfinite(angle):
        return '0.0'
    return f'{math.degrees(angle):f}'


class MetaPostEmitter:
    """Command sink writing one MetaPost figure.

    Parameters:
        stream: Output text stream.
        outfile: Output file name, shown in the header comment.
        infile: Trajectory file name, shown in the header comment.
        command_line: Arguments that produced the figure, shown in the header.
    """

    def __init__(
        self,
        stream: TextIO,
        outfile: str = '',
        infile: str = '',
        command_line: list[str] | None = None,
    ) -> None:
        self._stream = stream
        self._outfile = outfile
        self._infile = infile
        self._command_line = command_line or []
        self._params = SceneParams()
        self._pen: float | None = None
        self._ahangle: float | None = None

    def _emit(self, s: str) -> None:
        self._stream.write(s + '\n')

    def begin(self, params: SceneParams) -> None:
        self._params = params
        self._pen = None
        self._ahangle = None
        self._emit(f'% This Filename:  {self._outfile}   [MetaPost source]')
        self._emit('%')
        self._emit(f'% Input Filename [Stokes parameters]:  {self._infile}')
        self._emit(f'% This MetaPost source code was automatically generated by poincare-tools {VERSION}')
        if self._command_line:
            self._emit('% Full set of command line options that generated this code:')
            for i in range(0, len(self._command_line), 6):
                self._emit('%     ' + ' '.join(self._command_line[i : i + 6]))
        self._emit('%')
        self._emit('% Description:  Map of Stokes parameters, visualized as trajectories')
        self._emit('%               onto the Poincare sphere.  Compile with:  mpost <file>')
        self._emit('%')
        frame = params.frame
        self._emit(f'scalefactor := {params.scalefactor:f} mm;')
        self._emit(f'rot_psi := {_deg(frame.psi)};  % Rotation angle round z-axis (first rotation)')
        self._emit(f'rot_phi := {_deg(frame.phi)};  % Rotation angle round y-axis (second rotation)')
        self._emit(f'alpha := {_deg(frame.alpha)};    % == arctan(sin(rot_phi)*tan(rot_psi))')
        self._emit(f'beta  := {_deg(frame.beta)};    % == arctan(sin(rot_phi)/tan(rot_psi))')
        self._emit('')
        self._emit('%')
        self._emit('% Light source (degrees) and shading whiteness (0.0 black, 1.0 white)')
        self._emit('%')
        self._emit(f'phi_source := {_deg(params.phi_source)};')
        self._emit(f'theta_source := {_deg(params.theta_source)};')
        self._emit(f'upper_value := {params.upper_whiteness:f};')
        self._emit(f'lower_value := {params.lower_whiteness:f};')
        self._emit('radius := scalefactor;')
        self._emit('beginfig(1);')
        self._emit('  path p;')

    def _pickup(self, thickness: float) -> None:
        if thickness != self._pen:
            self._emit(f'  pickup pencircle scaled {thickness:f} pt;')
            self._pen = thickness

    def _path(self, points: tuple[Point2, ...], smooth: bool) -> str:
        join = '..' if smooth else '--'
        lines: list[str] = []
        for i in range(0, len(points), COORDS_PER_LINE):
            lines.append(join.join(_pair(p) for p in points[i : i + COORDS_PER_LINE]))
        return (join + '\n    ').join(lines)

    def _fill(self, cmd: FillCommand) -> None:
        path = '--'.join(_pair(p) for p in cmd.polygon)
        self._emit(f'  fill ({path}--cycle) scaled radius withcolor {cmd.gray:f}[black,white];')

    def _stroke(self, cmd: StrokeCommand) -> None:
        self._pickup(cmd.thickness)
        if cmd.arrowhead:
            angle = cmd.head_angle if cmd.head_angle else DEFAULT_ARROW_HEADANGLE
            if angle != self._ahangle:
                self._emit(f'  ahangle := {angle:f};')
                self._ahangle = angle
        self._emit(f'  p := {self._path(cmd.points, cmd.smooth)};')
        if cmd.arrowhead:
            op = 'drawarrow reverse p' if cmd.reverse else 'drawarrow p'
        else:
            op = 'draw p'
        dash = ' dashed evenly' if cmd.dashed else ''
        self._emit(f'  {op} scaled radius{dash} withcolor {_color(cmd.gray)};')

    def _tick(self, cmd: TickCommand) -> None:
        self._pickup(cmd.thickness)
        self._emit(
            f'  draw ({_pair(cmd.start)}--{_pair(cmd.end)}) scaled radius withcolor {_color(cmd.gray)};'
        )

    def _label(self, cmd: LabelCommand) -> None:
        op = f'label.{METAPOST_SUFFIX[cmd.anchor]}' if cmd.anchor else 'label'
        text = f'${cmd.text}$' if cmd.math else cmd.text
        self._emit(f'  {op}(btex {text} etex, {_pair(cmd.position)}*radius);')

    def emit(self, command: DrawCommand) -> None:
        if isinstance(command, FillCommand):
            self._fill(command)
        elif isinstance(command, StrokeCommand):
            self._stroke(command)
        elif isinstance(command, TickCommand):
            self._tick(command)
        else:
            self._label(command)

    def end(self) -> None:
        aux = self._params.auxsource
        if aux:
            self._emit('%')
            self._emit('% The following external file is included (using the --auxsource option):')
            self._emit(f'%    {aux}  [MetaPost source]')
            self._emit('%')
            self._emit(f'  input {aux}')
        self._emit('endfig;')
        self._emit('end')


def write_metapost(
    scene: Scene,
    stream: TextIO,
    outfile: str = '',
    infile: str = '',
    command_line: list[str] | None = None,
) -> None:
    """Write a scene as MetaPost source."""
    emit_scene(scene, MetaPostEmitter(stream, outfile, infile, command_line))
