"""Inspect block, light and biome data of a world through chunk snapshots.

Examples:
  python3 -m chunksnap block --world ./data/world --x 0 --y 64 --z 0
  python3 -m chunksnap column --world ./data/world --x -448 --z 576 --registry reports/blocks.json
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .diagnostics import MalformedChunkReporter
from .errors import ChunkSnapError
from .region import WorldSnapshots
from .registry import BlockStateRegistry, SyntheticRegistry, load_blocks_report
from .settings import SnapSettings


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="chunksnap", description="Read chunk snapshots from world region files (.mca).")
    ap.add_argument("--world", required=True, help="World folder (contains region/)")
    ap.add_argument("--dimension", default="overworld", choices=("overworld", "nether", "end"))
    ap.add_argument("--registry", help="Path to a generated reports/blocks.json")
    ap.add_argument("--world-height", type=int, help="World height in blocks (default: CHUNKSNAP_WORLD_HEIGHT or 256)")
    ap.add_argument("--verbose", action="store_true", help="Log every skipped chunk")
    sub = ap.add_subparsers(dest="command", required=True)

    block = sub.add_parser("block", help="Print block state and light at (x,y,z)")
    block.add_argument("--x", required=True, type=int)
    block.add_argument("--y", required=True, type=int)
    block.add_argument("--z", required=True, type=int)

    column = sub.add_parser("column", help="Print height, biome and populated sections at (x,z)")
    column.add_argument("--x", required=True, type=int)
    column.add_argument("--z", required=True, type=int)
    return ap


def _registry(path: Optional[str]) -> BlockStateRegistry:
    if not path:
        return SyntheticRegistry()
    return load_blocks_report(Path(path))


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    settings = SnapSettings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    world = Path(args.world)
    if not world.exists():
        print(f"Missing world folder: {world}", file=sys.stderr)
        return 2

    try:
        world_height = args.world_height or settings.world_height
        snapshots = WorldSnapshots(
            world,
            _registry(args.registry),
            dimension=args.dimension,
            world_height=world_height,
            reporter=MalformedChunkReporter(verbose=args.verbose or settings.verbose),
        )
        x, z = args.x, args.z
        snap = snapshots.get_snapshot(x >> 4, z >> 4)
        if snap is None:
            print(f"ERROR: chunk not generated for x={x} z={z}", file=sys.stderr)
            return 1
        lx, lz = x & 15, z & 15
        if args.command == "block":
            y = args.y
            print(snap.get_block_type(lx, y, lz))
            print(f"sky_light={snap.get_block_sky_light(lx, y, lz)} emitted_light={snap.get_block_emitted_light(lx, y, lz)}")
        else:
            populated = [i - snap.section_offset for i in range(len(snap.sections)) if not snap.sections[i].is_empty]
            print(f"highest_y={snap.get_highest_block_y_at(lx, lz)}")
            print(f"biome={snap.get_biome(lx, lz)}")
            print(f"inhabited_ticks={snap.get_inhabited_ticks()}")
            print("sections=" + ",".join(str(s) for s in populated))
        return 0
    except (ChunkSnapError, ValueError, OSError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
