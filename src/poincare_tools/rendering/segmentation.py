"""Split trajectories into hidden and visible runs and build their draw commands.

A run is a maximal stretch of consecutive points with the same visibility.
Hidden runs are drawn as they are; visible runs reach one point further on
each side (into the hidden neighbours) so the two kinds join without a gap.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from poincare_tools.params import SceneParams
from poincare_tools.rendering.commands import (
    DrawCommand,
    LabelCommand,
    Point2,
    StrokeCommand,
    TickCommand,
)
from poincare_tools.rendering.geometry import project, tick_endpoints, visible
from poincare_tools.trajectory import Trajectory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Run:
    """Inclusive 0-based index range with a shared visibility flag."""

    start: int
    stop: int
    visible: bool

    def __len__(self) -> int:
        return self.stop - self.start + 1


def classify(trajectory: Trajectory, params: SceneParams) -> list[bool]:
    """Compute and store the visibility flag of every point."""
    frame = params.frame
    trajectory.visible = [visible(p, frame) for p in trajectory.points]
    return trajectory.visible


def find_runs(flags: list[bool]) -> list[Run]:
    """Maximal runs of equal flags; together they cover every index once."""
    runs: list[Run] = []
    start = 0
    for k in range(1, len(flags) + 1):
        if k == len(flags) or flags[k] != flags[start]:
            runs.append(Run(start, k - 1, flags[start]))
            start = k
    return runs


def _extend(run: Run, last_index: int) -> Run:
    return Run(max(run.start - 1, 0), min(run.stop + 1, last_index), run.visible)


def _run_stroke(
    trajectory: Trajectory, run: Run, params: SceneParams
) -> StrokeCommand | None:
    """Stroke for one run, or None when it has fewer than two distinct screen points."""
    if len(run) < 2:
        logger.debug('Skipping single-point run at index %d', run.start)
        return None
    frame = params.frame
    points = tuple(
        project(trajectory.points[k], frame, params.normalize)
        for k in range(run.start, run.stop + 1)
    )
    if all(p == points[0] for p in points[1:]):
        logger.debug(
            'Skipping degenerate run ka=%d kb=%d (all points project to %s)',
            run.start,
            run.stop,
            points[0],
        )
        return None
    arrowhead = params.draw_paths_as_arrows and run.stop == trajectory.last_index
    if run.visible:
        gray, dashed = 0.0, False
    elif params.draw_hidden_dashed:
        gray, dashed = 0.0, True
    else:
        gray, dashed = params.hidden_graytone, False
    return StrokeCommand(
        points=points,
        thickness=params.path_thickness,
        gray=gray,
        dashed=dashed,
        arrowhead=arrowhead,
        reverse=arrowhead and params.reverse_arrow_paths,
        smooth=params.use_bezier,
        kind='visible' if run.visible else 'hidden',
        head_angle=params.arrowhead_angle,
    )


def tick_commands(
    trajectory: Trajectory, params: SceneParams, visible_pass: bool
) -> list[TickCommand]:
    """Tick marks whose point visibility matches the pass."""
    if len(trajectory.visible) != len(trajectory.points):
        classify(trajectory, params)
    out: list[TickCommand] = []
    for k in trajectory.ticks:
        if trajectory.visible[k] != visible_pass:
            continue
        a, b = tick_endpoints(trajectory.points, k, params.frame, params.normalize)
        out.append(
            TickCommand(
                start=a,
                end=b,
                thickness=params.path_thickness / 2.0,
                gray=0.0 if visible_pass else params.hidden_graytone,
            )
        )
    return out


def label_commands(trajectory: Trajectory, params: SceneParams) -> list[LabelCommand]:
    """Begin, interior, and end labels at their projected points."""
    out: list[LabelCommand] = []
    for label in trajectory.all_labels():
        pos: Point2 = project(trajectory.points[label.index], params.frame, params.normalize)
        out.append(LabelCommand(pos, label.text, label.anchor))
    return out


def hidden_pass_commands(trajectory: Trajectory, params: SceneParams) -> list[DrawCommand]:
    """Hidden runs then hidden ticks of one trajectory."""
    flags = classify(trajectory, params)
    out: list[DrawCommand] = []
    for run in find_runs(flags):
        if run.visible:
            continue
        logger.debug('Adding hidden subtrajectory from ka=%d to kb=%d', run.start, run.stop)
        stroke = _run_stroke(trajectory, run, params)
        if stroke is not None:
            out.append(stroke)
    out.extend(tick_commands(trajectory, params, visible_pass=False))
    return out


def visible_pass_commands(trajectory: Trajectory, params: SceneParams) -> list[DrawCommand]:
    """Extended visible runs, visible ticks, then all labels of one trajectory."""
    flags = classify(trajectory, params)
    out: list[DrawCommand] = []
    for run in find_runs(flags):
        if not run.visible:
            continue
        logger.debug('Adding visible subtrajectory from ka=%d to kb=%d', run.start, run.stop)
        stroke = _run_stroke(trajectory, _extend(run, trajectory.last_index), params)
        if stroke is not None:
            out.append(stroke)
    out.extend(tick_commands(trajectory, params, visible_pass=True))
    out.extend(label_commands(trajectory, params))
    return out
