"""Command line — build the geometry and physics list from a JSON config.

Usage::

    python main.py config.json --json geometry.json --csv placements.csv
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from collsim.constants import APP_NAME, APP_VERSION
from collsim.core.session import SetupSession
from collsim.errors import CollimatorSetupError
from collsim.export.csv_export import CsvExporter
from collsim.export.json_export import JsonExporter
from collsim.models.geometry import OverlapPolicy

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="collsim", description=f"{APP_NAME} {APP_VERSION}",
    )
    parser.add_argument("config", help="Setup configuration file (.json)")
    parser.add_argument("--json", dest="json_out", help="Write the geometry tree as JSON")
    parser.add_argument("--csv", dest="csv_out", help="Write the placement table as CSV")
    parser.add_argument(
        "--permissive", action="store_true",
        help="Log overlaps instead of aborting the build",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = JsonExporter().import_config(args.config)
        policy = OverlapPolicy.PERMISSIVE if args.permissive else config.overlap_policy
        session = SetupSession.from_config(config.dimensions, config.physics, policy)
        result = session.initialize()
    except (CollimatorSetupError, KeyError, ValueError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    engine = session.detector.placement_engine
    if args.json_out:
        JsonExporter().export_geometry(engine, args.json_out)
        logger.info("Geometry written to %s", args.json_out)
    if args.csv_out:
        CsvExporter().export_placements(engine, args.csv_out)
        logger.info("Placement table written to %s", args.csv_out)

    print(f"World: {result.world.name}")
    for module, offset in result.module_offsets.items():
        print(f"  {module:<10} z = {offset:10.4f} mm")
    print(f"Physics: {result.base_package} + {', '.join(result.extra_packages) or 'no extras'}")
    print(
        f"Cuts [mm]: gamma {result.cuts.gamma:g}, e- {result.cuts.electron:g}, "
        f"e+ {result.cuts.positron:g}"
    )
    if result.overlaps:
        print(f"Overlaps recorded: {len(result.overlaps)}")
    return 0
