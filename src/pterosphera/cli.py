"""
Command line for generating pterosphera parts.

Usage:
    python -m pterosphera case [--config FILE] [--output FILE] [--cells N]
    python -m pterosphera trackball [--with-ball] ...
    python -m pterosphera switch ...
    python -m pterosphera btu ...
    python -m pterosphera sensor [--for-cut] ...

Examples:
    # Render the default left half at a coarse resolution
    python -m pterosphera case --cells 80 --output bin/stl/left.stl

    # Trackball socket in ABS, with the ball for a fit preview
    python -m pterosphera trackball --material abs --with-ball -v
"""

import argparse
import logging
import sys
from dataclasses import replace

from .case import build_case
from .config import load_config
from .errors import PterospheraError
from .io.stl import export_mesh
from .settings import material_by_name
from .sockets import BTUUnit, SensorMount, SwitchSocket, build_socket
from .trackball import build_trackball_socket

logger = logging.getLogger("pterosphera")


def _render_settings(args, config):
    settings = config.render
    changes = {}
    if args.cells is not None:
        changes["mesh_cells"] = args.cells
    if args.material is not None:
        changes["material"] = material_by_name(args.material)
    if args.workers is not None:
        changes["workers"] = args.workers
    return replace(settings, **changes) if changes else settings


def cmd_case(args, config, settings):
    result = build_case(config.case, settings)
    logger.info("built %s case half: %d columns, floor at z=%.2f",
                config.case.hand.side.value, len(result.columns), result.floor_z)
    return result.solid


def cmd_trackball(args, config, settings):
    spec = config.case.trackball
    if spec is None:
        raise PterospheraError("configuration has no trackball section")
    return build_trackball_socket(spec, settings, render_trackball=args.with_ball)


def cmd_switch(args, config, settings):
    layout = config.case.layout
    return build_socket(SwitchSocket(config.case.switch, layout.column_width,
                                     layout.switch_height), settings)


def cmd_btu(args, config, settings):
    spec = config.case.trackball
    if spec is None:
        raise PterospheraError("configuration has no trackball section")
    return build_socket(BTUUnit(spec.btu), settings)


def cmd_sensor(args, config, settings):
    spec = config.case.trackball
    if spec is None or spec.sensor_mount is None:
        raise PterospheraError("configuration has no trackball sensor mount")
    return build_socket(SensorMount(spec.sensor_mount, for_cut=args.for_cut), settings)


COMMANDS = {
    "case": cmd_case,
    "trackball": cmd_trackball,
    "switch": cmd_switch,
    "btu": cmd_btu,
    "sensor": cmd_sensor,
}


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('-c', '--config', metavar='FILE',
                        help='YAML configuration (default: search order)')
    common.add_argument('-o', '--output', metavar='FILE',
                        help='Output STL file (default: pterosphera-<part>.stl)')
    common.add_argument('--cells', type=int, metavar='N',
                        help='Mesh cells along the longest axis')
    common.add_argument('--material', metavar='NAME',
                        help='Print material for shrinkage (generic, pla, abs)')
    common.add_argument('--workers', type=int, metavar='N',
                        help='Threads used to sample the mesh')
    common.add_argument('--ascii', action='store_true', help='Write ASCII STL')
    common.add_argument('-v', '--verbose', action='store_true', help='Debug logging')

    parser = argparse.ArgumentParser(
        prog='pterosphera',
        description='Generate printable pterosphera keyboard parts',
    )
    subparsers = parser.add_subparsers(dest='action', help='Part to generate')
    subparsers.add_parser('case', parents=[common], help='Complete case half')
    tb = subparsers.add_parser('trackball', parents=[common], help='Trackball socket')
    tb.add_argument('--with-ball', action='store_true', help='Include the trackball')
    subparsers.add_parser('switch', parents=[common], help='Single switch socket')
    subparsers.add_parser('btu', parents=[common], help='Ball transfer unit')
    sensor = subparsers.add_parser('sensor', parents=[common], help='Sensor mount')
    sensor.add_argument('--for-cut', action='store_true', help='Render the cutting die')
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.action is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    output = args.output or f"pterosphera-{args.action}.stl"
    try:
        config = load_config(args.config)
        settings = _render_settings(args, config)
        logger.info("generating %s from %s", args.action, config.source)
        solid = COMMANDS[args.action](args, config, settings)
        mesh = export_mesh(solid, settings, output, binary=not args.ascii,
                           name=f"pterosphera {args.action}")
    except (PterospheraError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logger.info("wrote %d triangles to %s", len(mesh.faces), output)
    return 0
