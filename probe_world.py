# probe_world.py

"""
================================================================================
WORLD PROBE SCRIPT
================================================================================
A command-line tool for inspecting a generated world without a renderer:
describe a tile, search for the nearest tile of a biome, or summarize the
raster of one region in any view mode. Results are printed as JSON.

Usage:
    python probe_world.py --seed my-world tile 120 -45
    python probe_world.py --config path/to/config.json find 5 --start 0,0 --max 2048
    python probe_world.py region 0 0 --mode elevation
================================================================================
"""
import argparse
import json
import logging
import sys

import numpy as np

from biome_world import World
from biome_world import config as DEFAULTS
from biome_world.exceptions import BiomeWorldError


def _parse_tile(text: str) -> tuple:
    try:
        tx, ty = (int(part) for part in text.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected 'tx,ty', got {text!r}")
    return tx, ty


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Inspect a procedurally generated biome world.")
    parser.add_argument("--config", help="Path to a JSON file of world parameters.")
    parser.add_argument("--seed", help="World seed; overrides the config file.")
    parser.add_argument("--prototypes", help="Path to a CSV biome prototype table.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    commands = parser.add_subparsers(dest="command", required=True)

    tile = commands.add_parser("tile", help="Show the axes and biome of a tile.")
    tile.add_argument("tx", type=int)
    tile.add_argument("ty", type=int)

    find = commands.add_parser("find", help="Find the nearest tile of a biome.")
    find.add_argument("biome_id", type=int)
    find.add_argument("--start", type=_parse_tile, default=(0, 0), help="Start tile as 'tx,ty'.")
    find.add_argument("--max", type=int, default=DEFAULTS.DEFAULT_SEARCH_RADIUS_TILES,
                      help="Maximum Chebyshev radius in tiles.")

    region = commands.add_parser("region", help="Summarize the raster of one region.")
    region.add_argument("rx", type=int)
    region.add_argument("ry", type=int)
    region.add_argument("--mode", default=DEFAULTS.DEFAULT_VIEW_MODE, help="View mode or alias.")
    return parser


def load_config(args: argparse.Namespace) -> dict:
    """Merges the JSON config file (if any) with the command-line overrides."""
    config = {}
    if args.config:
        with open(args.config, 'r') as f:
            config = json.load(f)
    if args.seed is not None:
        config['seed'] = args.seed
    if args.prototypes:
        config['prototypes_path'] = args.prototypes
    return config


def run_command(world: World, args: argparse.Namespace) -> dict:
    if args.command == "tile":
        return world.describe_tile(args.tx, args.ty)

    if args.command == "find":
        result = world.find_nearest(args.biome_id, args.start, args.max)
        report = {
            'target_id': result.target_id,
            'found': result.found,
            'bounded': result.bounded,
            'tiles_examined': result.tiles_examined,
        }
        if result.found:
            report.update(tile=result.tile, distance=round(result.distance, 3), exact=result.exact)
            report['strides'] = [
                {'stride': s.stride, 'tiles_checked': s.tiles_checked, 'elapsed_ms': round(s.elapsed_ms, 3)}
                for s in result.stride_stats
            ]
        return report

    world.set_mode(args.mode)
    raster = world.get_region_raster(args.rx, args.ry)
    colors, counts = np.unique(raster.reshape(-1, 3), axis=0, return_counts=True)
    order = np.argsort(-counts, kind="stable")
    return {
        'region': (args.rx, args.ry),
        'mode': world.mode,
        'origin': world.regions.region_origin(args.rx, args.ry),
        'size': world.regions.region_size,
        'colors': [
            {'rgb': tuple(int(c) for c in colors[i]), 'tiles': int(counts[i])}
            for i in order
        ],
    }


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
    )
    logger = logging.getLogger("Probe")

    try:
        world = World(load_config(args), logger)
        report = run_command(world, args)
    except (OSError, json.JSONDecodeError) as e:
        logger.critical(f"Could not read configuration: {e}")
        return 2
    except BiomeWorldError as e:
        logger.error(str(e))
        return 1

    print(json.dumps(report, indent=4))
    return 0


if __name__ == '__main__':
    sys.exit(main())
