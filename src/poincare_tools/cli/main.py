"""CLI entry point: poincare-tools [options] (Poincare sphere maps of Stokes trajectories)."""

from __future__ import annotations

import argparse
import contextlib
import logging
import math
import sys
from typing import IO, NoReturn, TextIO, cast

from poincare_tools.config import get_default_outfile, get_log_level
from poincare_tools.constants import (
    DEFAULT_ARROW_HEADANGLE,
    DEFAULT_ARROW_THICKNESS,
    DEFAULT_HIDDEN_GRAYTONE,
    DEFAULT_PATH_THICKNESS,
    DEFAULT_PHI_DIVISOR,
    DEFAULT_RHO_DIVISOR,
    DEFAULT_SCALEFACTOR,
    VERSION,
)
from poincare_tools.params import (
    ExtraFrame,
    SceneParams,
    parse_arrow,
    parse_axis_labels,
    parse_axis_lengths,
)
from poincare_tools.poincare import (
    OUTPUT_FORMATS,
    PoincareJob,
    build_scene,
    format_from_filename,
    is_binary_format,
    write_scene,
)

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool = False) -> None:
    """Configure logging for CLI (stderr, level from --verbose or POINCARE_TOOLS_LOG)."""
    level = logging.DEBUG if verbose else logging.WARNING
    env_level = get_log_level()
    if env_level is not None:
        level = getattr(logging, env_level)
    logging.basicConfig(
        level=level,
        format='%(levelname)s: %(name)s: %(message)s',
        stream=sys.stderr,
    )
    # Keep matplotlib font and backend chatter out of --verbose output.
    logging.getLogger('matplotlib').setLevel(logging.WARNING)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='poincare-tools',
        description=(
            'Map trajectories of Stokes parameters onto the Poincare sphere '
            '(MetaPost, PostScript, or matplotlib image output).'
        ),
    )
    parser.add_argument('-V', '--version', action='version', version=f'%(prog)s {VERSION}')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging on stderr')
    io_group = parser.add_argument_group('input/output')
    io_group.add_argument('-f', '--inputfile', help='Trajectory file (p ... q paths)')
    io_group.add_argument(
        '-o',
        '--outputfile',
        default=None,
        help='Output file; "-" for stdout (default: POINCARE_OUTFILE or aout.mp)',
    )
    io_group.add_argument(
        '--format',
        choices=OUTPUT_FORMATS,
        default=None,
        help='Output format (default: from output file extension, else mp)',
    )
    io_group.add_argument('--auxsource', help='MetaPost file to input at the end of the figure')

    view = parser.add_argument_group('view')
    view.add_argument('--psi', '--rotatepsi', dest='psi', type=float, default=-40.0,
                      help='Rotation about the S3 axis in degrees (default -40)')
    view.add_argument('--phi', '--rotatephi', dest='phi', type=float, default=15.0,
                      help='Tilt towards the observer in degrees (default 15)')
    view.add_argument('-n', '--normalize', action='store_true',
                      help='Plot (s1,s2,s3)/s0 instead of (s1,s2,s3)')
    view.add_argument('--xtracoordsys', nargs=2, type=float, metavar=('DPSI', 'DPHI'),
                      help='Draw a secondary coordinate system rotated by DPSI, DPHI degrees')
    for axis in ('x', 'y', 'z'):
        view.add_argument(f'--xtracoordsys_axislabel_{axis}', metavar='LABEL',
                          help=f'Label of the secondary {axis} axis (axis drawn only if set)')
    view.add_argument('--xtracoordsys_axislengths', nargs=6, type=float,
                      metavar=('XMIN', 'XMAX', 'YMIN', 'YMAX', 'ZMIN', 'ZMAX'),
                      help='Inside and outside lengths of the secondary axes')
    view.add_argument('--axislengths', nargs=6, type=float,
                      metavar=('XMIN', 'XMAX', 'YMIN', 'YMAX', 'ZMIN', 'ZMAX'),
                      help='Inside and outside lengths of the S1, S2, S3 axes (default 0.1 1.5)')
    view.add_argument('--axislabels', nargs=6,
                      metavar=('S1', 'P1', 'S2', 'P2', 'S3', 'P3'),
                      help='TeX labels and positions (lft rt top bot ulft urt llft lrt) of the axes')
    view.add_argument('--draw_axes_inside', action='store_true',
                      help='Draw dashed axes inside the sphere')

    look = parser.add_argument_group('appearance')
    look.add_argument('--shading', nargs=2, type=float, metavar=('LOWER', 'UPPER'),
                      help='Minimum and maximum whiteness of the sphere (default 0.75 0.99)')
    look.add_argument('--lightsource', nargs=2, type=float, metavar=('PHI', 'THETA'),
                      help='Light source angles in degrees (default 30 30)')
    look.add_argument('--hiddengraytone', type=float, default=DEFAULT_HIDDEN_GRAYTONE,
                      help='Whiteness of hidden trajectory parts (default 0.65)')
    look.add_argument('--rhodivisor', type=int, default=DEFAULT_RHO_DIVISOR,
                      help='Radial shading bins (default 50)')
    look.add_argument('--phidivisor', type=int, default=DEFAULT_PHI_DIVISOR,
                      help='Angular shading bins (default 80)')
    look.add_argument('--scalefactor', type=float, default=DEFAULT_SCALEFACTOR,
                      help='Sphere radius in mm (default 6)')
    look.add_argument('--paththickness', type=float, default=DEFAULT_PATH_THICKNESS,
                      help='Trajectory line width in pt (default 1.0)')
    look.add_argument('--arrowthickness', type=float, default=DEFAULT_ARROW_THICKNESS,
                      help='User arrow line width in pt (default 0.6)')
    look.add_argument('--arrowheadangle', type=float, default=DEFAULT_ARROW_HEADANGLE,
                      help='Arrowhead opening angle in degrees (default 30)')
    look.add_argument('-b', '--bezier', action='store_true',
                      help='Join trajectory points with smooth curves')
    look.add_argument('--draw_hidden_dashed', action='store_true',
                      help='Draw hidden parts dashed black instead of gray')
    look.add_argument('--draw_paths_as_arrows', action='store_true',
                      help='End every trajectory with an arrowhead')
    look.add_argument('--reverse_arrow_paths', action='store_true',
                      help='Put trajectory arrowheads at the start instead')
    look.add_argument('--arrow', nargs=8, type=float, action='append',
                      metavar=('S1A', 'S2A', 'S3A', 'S1B', 'S2B', 'S3B', 'TYPE', 'SHADE'),
                      help='Arrow from A to B; TYPE 0 solid, 1 dashed; SHADE 0 white to 1 black '
                           '(repeatable, at most 24)')
    return parser


def params_from_args(args: argparse.Namespace) -> SceneParams:
    """Build SceneParams from parsed CLI arguments.

    Raises:
        ValueError: Invalid label position, arrow, or axis lengths.
    """
    params = SceneParams(
        psi=math.radians(args.psi),
        phi=math.radians(args.phi),
        normalize=args.normalize,
        hidden_graytone=args.hiddengraytone,
        rho_divisor=args.rhodivisor,
        phi_divisor=args.phidivisor,
        draw_axes_inside=args.draw_axes_inside,
        path_thickness=args.paththickness,
        arrow_thickness=args.arrowthickness,
        arrowhead_angle=args.arrowheadangle,
        use_bezier=args.bezier,
        draw_hidden_dashed=args.draw_hidden_dashed,
        draw_paths_as_arrows=args.draw_paths_as_arrows,
        reverse_arrow_paths=args.reverse_arrow_paths,
        scalefactor=args.scalefactor,
        auxsource=args.auxsource,
    )
    if args.shading is not None:
        params.lower_whiteness, params.upper_whiteness = args.shading
    if args.lightsource is not None:
        params.phi_source = math.radians(args.lightsource[0])
        params.theta_source = math.radians(args.lightsource[1])
    if args.axislengths is not None:
        for spec, (neg, pos) in zip(params.axes, parse_axis_lengths(args.axislengths)):
            spec.neg_length, spec.pos_length = neg, pos
    if args.axislabels is not None:
        for spec, (label, anchor) in zip(params.axes, parse_axis_labels(args.axislabels)):
            spec.label, spec.anchor = label, anchor
    if args.xtracoordsys is not None:
        extra = ExtraFrame(dpsi=math.radians(args.xtracoordsys[0]),
                           dphi=math.radians(args.xtracoordsys[1]))
        labels = (
            args.xtracoordsys_axislabel_x,
            args.xtracoordsys_axislabel_y,
            args.xtracoordsys_axislabel_z,
        )
        for spec, label in zip(extra.axes, labels):
            spec.label = label
        if args.xtracoordsys_axislengths is not None:
            for spec, (neg, pos) in zip(extra.axes, parse_axis_lengths(args.xtracoordsys_axislengths)):
                spec.neg_length, spec.pos_length = neg, pos
        params.extra_frame = extra
    elif any(
        v is not None
        for v in (
            args.xtracoordsys_axislabel_x,
            args.xtracoordsys_axislabel_y,
            args.xtracoordsys_axislabel_z,
            args.xtracoordsys_axislengths,
        )
    ):
        logger.warning('Secondary axis options given without --xtracoordsys; ignored')
    for values in args.arrow or []:
        params.arrows.append(parse_arrow(values))
    return params


def main(argv: list[str] | None = None) -> int:
    """Entry point for poincare-tools CLI.

    Parameters:
        argv: Arguments without the program name; None reads sys.argv.

    Returns:
        Exit code 0 on success, 1 on failure.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    outfile = args.outputfile or get_default_outfile()
    fmt = args.format or format_from_filename(outfile)
    command_line = list(sys.argv[1:] if argv is None else argv)

    with contextlib.ExitStack() as stack:
        try:
            params = params_from_args(args)
            input_stream: TextIO | None = None
            if args.inputfile:
                input_stream = stack.enter_context(open(args.inputfile, encoding='utf-8'))
            job = PoincareJob(
                params=params,
                input_stream=input_stream,
                input_name=args.inputfile or '<none>',
                output_name=outfile,
                fmt=fmt,
                command_line=command_line,
            )
            scene = build_scene(job)
        except (OSError, ValueError, RuntimeError) as e:
            print(f'Error: {e}', file=sys.stderr)
            return 1

        try:
            out: TextIO | IO[bytes]
            if outfile == '-':
                out = sys.stdout.buffer if is_binary_format(fmt) else sys.stdout
            elif is_binary_format(fmt):
                out = cast(IO[bytes], stack.enter_context(open(outfile, 'wb')))
            else:
                out = stack.enter_context(open(outfile, 'w', encoding='utf-8'))
            write_scene(scene, job, out)
        except (OSError, ValueError, RuntimeError, ImportError) as e:
            print(f'Error: {e}', file=sys.stderr)
            return 1
    logger.info('Wrote %s (%s, %d draw commands)', outfile, fmt, len(scene.commands))
    return 0


def cli_main() -> NoReturn:
    """Entry point for console_scripts; calls main() and exits with its return code."""
    sys.exit(main())


if __name__ == '__main__':
    sys.exit(main())
