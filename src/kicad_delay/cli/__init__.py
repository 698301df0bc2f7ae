"""
Command-line interface for kicad-delay.

    kicad-delay profiles <project>    - List delay profiles and net classes
    kicad-delay trace <project>       - Delay of a straight track
    kicad-delay via <project>         - Delay of a via
    kicad-delay length <project>      - Track length for a target delay
    kicad-delay config                - Show effective configuration

Examples:
    kicad-delay profiles board.kicad_pro --format json
    kicad-delay trace board.kicad_pro --netclass DDR --layer F.Cu --length 25.4
    kicad-delay via board.kicad_pro --net DQ0 --from F.Cu --to In2.Cu --preset jlcpcb-4
    kicad-delay length board.kicad_pro --netclass DDR --layer In1.Cu --delay 150
"""

import argparse
import sys
from typing import List, Optional

from kicad_delay import __version__

__all__ = ["main", "create_parser"]

STACKUP_PRESETS = ["generic-2", "jlcpcb-4", "oshpark-4", "generic-6"]
TIME_UNITS = ["fs", "ps", "ns"]


def _add_net_arguments(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--netclass", help="Net class whose delay profile applies")
    group.add_argument("--net", help="Net name, resolved to its net class")


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for all commands."""
    parser = argparse.ArgumentParser(
        prog="kicad-delay",
        description="Propagation delay calculations from KiCad delay profiles",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--version", action="version", version=f"kicad-delay {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log calculation details")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # profiles
    profiles_parser = subparsers.add_parser("profiles", help="List delay profiles")
    profiles_parser.add_argument("project", help="Path to .kicad_pro file")
    profiles_parser.add_argument("--format", choices=["table", "json"], default=None)

    # trace
    trace_parser = subparsers.add_parser("trace", help="Delay of a straight track")
    trace_parser.add_argument("project", help="Path to .kicad_pro file")
    _add_net_arguments(trace_parser)
    trace_parser.add_argument("--layer", required=True, help="Copper layer (e.g., F.Cu)")
    trace_parser.add_argument("--length", type=float, required=True, help="Track length in mm")
    trace_parser.add_argument("--unit", choices=TIME_UNITS, help="Delay display unit")
    trace_parser.add_argument("--format", choices=["table", "json"], default=None)

    # via
    via_parser = subparsers.add_parser("via", help="Delay of a via")
    via_parser.add_argument("project", help="Path to .kicad_pro file")
    _add_net_arguments(via_parser)
    via_parser.add_argument("--from", dest="layer_from", required=True, help="Signal start layer")
    via_parser.add_argument("--to", dest="layer_to", required=True, help="Signal end layer")
    via_parser.add_argument("--via-from", help="Padstack start layer (default: F.Cu)")
    via_parser.add_argument("--via-to", help="Padstack end layer (default: B.Cu)")
    stackup_group = via_parser.add_mutually_exclusive_group()
    stackup_group.add_argument("--preset", choices=STACKUP_PRESETS, help="Stackup preset")
    stackup_group.add_argument("--stackup", help="Stackup JSON file (list of layer records)")
    via_parser.add_argument("--unit", choices=TIME_UNITS, help="Delay display unit")
    via_parser.add_argument("--format", choices=["table", "json"], default=None)

    # length
    length_parser = subparsers.add_parser("length", help="Track length for a target delay")
    length_parser.add_argument("project", help="Path to .kicad_pro file")
    _add_net_arguments(length_parser)
    length_parser.add_argument("--layer", required=True, help="Copper layer (e.g., F.Cu)")
    length_parser.add_argument(
        "--delay", type=float, required=True, help="Target delay in the display unit"
    )
    length_parser.add_argument("--unit", choices=TIME_UNITS, help="Delay unit")
    length_parser.add_argument("--format", choices=["table", "json"], default=None)

    # config
    config_parser = subparsers.add_parser("config", help="Show effective configuration")
    config_parser.add_argument(
        "--template", action="store_true", help="Print a documented config template"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the kicad-delay CLI."""
    from kicad_delay.exceptions import KiCadDelayError

    from .delay_cmd import COMMANDS

    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        return COMMANDS[args.command](args)
    except KiCadDelayError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
