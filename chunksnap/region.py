"""Anvil region files and the world-level snapshot cache."""

from __future__ import annotations

import gzip
import logging
import struct
import threading
import zlib
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .diagnostics import MalformedChunkReporter
from .errors import MalformedSectionData, NBTError, RegionError
from .loader import load_snapshot
from .nbt import load_nbt_bytes
from .packing import decode_packed
from .registry import BlockStateRegistry
from .snapshot import DEFAULT_WORLD_HEIGHT, ChunkSnapshot

LOG = logging.getLogger("chunksnap.region")

SECTOR_BYTES = 4096
REGION_HEADER_BYTES = SECTOR_BYTES * 2
HEIGHTMAP_PREFERENCE = ("WORLD_SURFACE", "MOTION_BLOCKING")

_RECORD_KEYS = ("xPos", "zPos", "InhabitedTime", "HeightMap", "Biomes", "Sections")


class RegionFile:
    def __init__(self, path: Path):
        self.path = path
        with path.open("rb") as f:
            hdr = f.read(REGION_HEADER_BYTES)
        if len(hdr) < REGION_HEADER_BYTES:
            raise RegionError(f"short region header: {path}")
        self._locations = hdr[:SECTOR_BYTES]

    def read_chunk_bytes(self, cx: int, cz: int) -> Optional[bytes]:
        idx = (cx & 31) + (cz & 31) * 32
        loc = struct.unpack(">I", self._locations[idx * 4 : idx * 4 + 4])[0]
        offset = (loc >> 8) & 0xFFFFFF
        if offset == 0 or loc & 0xFF == 0:
            return None
        with self.path.open("rb") as f:
            f.seek(offset * SECTOR_BYTES)
            head = f.read(5)
            if len(head) < 5:
                raise RegionError(f"chunk offset out of bounds in {self.path}")
            length, ctype = struct.unpack(">IB", head)
            if length < 1:
                raise RegionError(f"empty chunk payload in {self.path}")
            data = f.read(length - 1)
        if ctype == 1:
            return gzip.decompress(data)
        if ctype == 2:
            return zlib.decompress(data)
        if ctype == 3:
            return data
        raise RegionError(f"unknown chunk compression type {ctype} in {self.path}")

    def read_chunk_nbt(self, cx: int, cz: int) -> Optional[Dict]:
        raw = self.read_chunk_bytes(cx, cz)
        if raw is None:
            return None
        return load_nbt_bytes(raw)


def _height_map_from_packed(heightmaps: Dict) -> List[int]:
    for key in HEIGHTMAP_PREFERENCE:
        longs = heightmaps.get(key)
        if not isinstance(longs, list) or not longs:
            continue
        try:
            return decode_packed(longs, 256)
        except MalformedSectionData as exc:
            LOG.debug("ignoring heightmap %s: %s", key, exc)
    return []


def record_from_nbt(root: Dict) -> Dict:
    """Flatten a region chunk tag tree into the chunk record layout.

    Chunks up to 1.17 keep their data under a ``Level`` compound. Worlds
    without an int ``HeightMap`` get one decoded from the packed
    ``Heightmaps`` long arrays.
    """
    level = root.get("Level")
    src = level if isinstance(level, dict) else root
    record = {k: src[k] for k in _RECORD_KEYS if k in src}
    if "HeightMap" not in record:
        hms = src.get("Heightmaps")
        if isinstance(hms, dict):
            record["HeightMap"] = _height_map_from_packed(hms)
    return record


class WorldSnapshots:
    """Reads and caches chunk snapshots from a world's region folder."""

    def __init__(
        self,
        world_dir: Path,
        registry: BlockStateRegistry,
        *,
        dimension: str = "overworld",
        world_height: int = DEFAULT_WORLD_HEIGHT,
        reporter: Optional[MalformedChunkReporter] = None,
    ):
        self.world_dir = world_dir
        if dimension == "overworld":
            self.region_dir = world_dir / "region"
        elif dimension == "nether":
            self.region_dir = world_dir / "DIM-1" / "region"
        elif dimension == "end":
            self.region_dir = world_dir / "DIM1" / "region"
        else:
            raise ValueError(f"unknown dimension: {dimension}")
        self.registry = registry
        self.world_height = world_height
        self.reporter = reporter or MalformedChunkReporter()
        self._lock = threading.Lock()
        self._region_cache: Dict[Tuple[int, int], Optional[RegionFile]] = {}
        self._chunk_cache: Dict[Tuple[int, int], Optional[ChunkSnapshot]] = {}

    def _get_region(self, rx: int, rz: int) -> Optional[RegionFile]:
        key = (rx, rz)
        if key in self._region_cache:
            return self._region_cache[key]
        path = self.region_dir / f"r.{rx}.{rz}.mca"
        rf = RegionFile(path) if path.exists() else None
        self._region_cache[key] = rf
        return rf

    def _read(self, cx: int, cz: int) -> Optional[ChunkSnapshot]:
        rf = self._get_region(cx >> 5, cz >> 5)
        if rf is None:
            return None
        try:
            root = rf.read_chunk_nbt(cx, cz)
        except (NBTError, RegionError, OSError, EOFError, zlib.error) as exc:
            LOG.warning("unreadable chunk x=%s,z=%s in %s: %s", cx, cz, rf.path, exc)
            return ChunkSnapshot.empty(cx, cz, self.world_height)
        if root is None:
            return None
        return load_snapshot(
            record_from_nbt(root),
            self.registry,
            world_height=self.world_height,
            reporter=self.reporter,
        )

    def get_snapshot(self, cx: int, cz: int) -> Optional[ChunkSnapshot]:
        """Return the snapshot of chunk (cx, cz), or None when it was never generated."""
        key = (cx, cz)
        with self._lock:
            if key in self._chunk_cache:
                return self._chunk_cache[key]
            snap = self._read(cx, cz)
            self._chunk_cache[key] = snap
            return snap
