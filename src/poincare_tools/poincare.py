"""Poincare map tool: parse trajectories, assemble the scene, write the chosen format."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, TextIO, cast

from poincare_tools.params import SceneParams
from poincare_tools.parser import parse_trajectories
from poincare_tools.rendering.commands import Scene
from poincare_tools.rendering.matplotlib_view import IMAGE_FORMATS, write_image
from poincare_tools.rendering.metapost import write_metapost
from poincare_tools.rendering.postscript import write_postscript
from poincare_tools.rendering.scene import assemble_scene
from poincare_tools.trajectory import Trajectory

logger = logging.getLogger(__name__)

TEXT_FORMATS = ('mp', 'ps', 'eps')
OUTPUT_FORMATS = TEXT_FORMATS + IMAGE_FORMATS


def format_from_filename(filename: str, default: str = 'mp') -> str:
    """Output format implied by a file extension (``.mp``, ``.eps``, ``.png``, ...).

    Unknown extensions fall back to ``default``.
    """
    suffix = Path(filename).suffix.lower().lstrip('.')
    if suffix in OUTPUT_FORMATS:
        return suffix
    return default


def is_binary_format(fmt: str) -> bool:
    return fmt in IMAGE_FORMATS


@dataclass
class PoincareJob:
    """Inputs of one map generation run.

    Parameters:
        params: Scene options.
        input_stream: Trajectory text; None draws the sphere without trajectories.
        input_name: Name of the trajectory input, for messages and headers.
        output_name: Name of the output file, for headers.
        fmt: Output format (``mp``, ``ps``, ``eps``, ``png``, ``pdf``, ``svg``).
        command_line: Arguments recorded in the MetaPost header.
    """

    params: SceneParams = field(default_factory=SceneParams)
    input_stream: TextIO | None = None
    input_name: str = '<input>'
    output_name: str = ''
    fmt: str = 'mp'
    command_line: list[str] = field(default_factory=list)


def build_scene(job: PoincareJob) -> Scene:
    """Parse the job's trajectories and assemble the full scene in memory.

    Raises:
        TrajectorySyntaxError, CapacityError: Bad trajectory input.
        NumericError, DegenerateGeometryError: Geometry failure.
        ValueError: Invalid options or output format.
    """
    if job.fmt not in OUTPUT_FORMATS:
        raise ValueError(f'Unknown output format {job.fmt!r} (expected one of {", ".join(OUTPUT_FORMATS)})')
    trajectories: list[Trajectory] = []
    if job.input_stream is not None:
        trajectories = parse_trajectories(job.input_stream, job.input_name)
        logger.info('Parsed %d trajectories from %s', len(trajectories), job.input_name)
    return assemble_scene(trajectories, job.params)


def write_scene(scene: Scene, job: PoincareJob, output: TextIO | IO[bytes]) -> None:
    """Write an assembled scene in the job's format to an open stream."""
    if job.fmt == 'mp':
        write_metapost(
            scene, cast(TextIO, output), job.output_name, job.input_name, job.command_line
        )
    elif job.fmt in ('ps', 'eps'):
        write_postscript(scene, cast(TextIO, output), title=job.output_name or 'Poincare map')
    else:
        write_image(scene, cast(IO[bytes], output), job.fmt)


def run_poincare(job: PoincareJob, output: TextIO | IO[bytes]) -> Scene:
    """Generate a Poincare map.

    The scene is assembled completely before anything is written, so a
    parse or geometry error leaves ``output`` untouched.

    Parameters:
        job: Options, trajectory input, and output format.
        output: Open text stream (mp, ps, eps) or binary stream (png, pdf, svg).

    Returns:
        The assembled scene.

    Raises:
        ValueError: Any PoincareError or invalid option.
    """
    scene = build_scene(job)
    write_scene(scene, job, output)
    return scene
