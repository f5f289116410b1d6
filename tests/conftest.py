from __future__ import annotations

import struct
import sys
import zlib
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from chunksnap.packing import LEGACY, TIGHT, pack
from chunksnap.registry import BlockState, BlockStateRegistry


class FakeRegistry(BlockStateRegistry):
    """Deterministic registry: exact states, base names and global ids < 4096."""

    def __init__(self) -> None:
        self.states = {
            ("minecraft:oak_log", "axis=y"): BlockState("minecraft:oak_log", "axis=y", 77),
            ("minecraft:water", "level=0"): BlockState("minecraft:water", "level=0", 34),
        }
        self.bases = {
            "minecraft:stone": BlockState("minecraft:stone", "", 1),
            "minecraft:dirt": BlockState("minecraft:dirt", "", 10),
            "minecraft:oak_log": BlockState("minecraft:oak_log", "axis=x", 76),
        }
        self.state_calls: List[tuple] = []
        self.global_calls = 0

    def by_name_and_state(self, name, state):
        self.state_calls.append((name, state))
        return self.states.get((name, state))

    def by_base_name(self, name):
        return self.bases.get(name)

    def by_global_index(self, index):
        self.global_calls += 1
        if index >= 4096:
            return None
        return BlockState(f"global:{index}", "", index)


@pytest.fixture()
def registry() -> FakeRegistry:
    return FakeRegistry()


def make_section(
    y: int,
    palette: Optional[Sequence[dict]] = None,
    values: Optional[Sequence[int]] = None,
    *,
    bits: int = 4,
    kind: str = LEGACY,
    block_light: Optional[bytes] = None,
    sky_light: Optional[bytes] = None,
) -> Dict:
    sec: Dict = {"Y": y}
    if palette is not None:
        sec["Palette"] = list(palette)
        sec["BlockStates"] = pack(values if values is not None else [0] * 4096, bits, kind)
    if block_light is not None:
        sec["BlockLight"] = block_light
    if sky_light is not None:
        sec["SkyLight"] = sky_light
    return sec


def make_record(x: int = 0, z: int = 0, sections: Sequence[Dict] = (), **extra) -> Dict:
    record = {"xPos": x, "zPos": z, "HeightMap": list(range(256)), "Sections": list(sections)}
    record.update(extra)
    return record


def nibble_plane(value: int) -> bytes:
    return bytes([(value & 0xF) | ((value & 0xF) << 4)]) * 2048


# --- NBT / region writers for fixtures ---

TAG_BYTE, TAG_INT, TAG_LONG, TAG_BYTE_ARRAY, TAG_STRING, TAG_LIST, TAG_COMPOUND, TAG_INT_ARRAY, TAG_LONG_ARRAY = (
    1, 3, 4, 7, 8, 9, 10, 11, 12,
)


class Byte(int):
    pass


class Long(int):
    pass


class IntArray(list):
    pass


class LongArray(list):
    pass


def _tag_of(value) -> int:
    if isinstance(value, Byte):
        return TAG_BYTE
    if isinstance(value, Long):
        return TAG_LONG
    if isinstance(value, int):
        return TAG_INT
    if isinstance(value, (bytes, bytearray)):
        return TAG_BYTE_ARRAY
    if isinstance(value, str):
        return TAG_STRING
    if isinstance(value, IntArray):
        return TAG_INT_ARRAY
    if isinstance(value, LongArray):
        return TAG_LONG_ARRAY
    if isinstance(value, list):
        return TAG_LIST
    if isinstance(value, dict):
        return TAG_COMPOUND
    raise TypeError(f"cannot encode {type(value)!r}")


def _string(s: str) -> bytes:
    b = s.encode("utf-8")
    return struct.pack(">h", len(b)) + b


def _payload(value) -> bytes:
    tag = _tag_of(value)
    if tag == TAG_BYTE:
        return struct.pack(">b", value)
    if tag == TAG_INT:
        return struct.pack(">i", value)
    if tag == TAG_LONG:
        return struct.pack(">q", value)
    if tag == TAG_BYTE_ARRAY:
        return struct.pack(">i", len(value)) + bytes(value)
    if tag == TAG_STRING:
        return _string(value)
    if tag == TAG_INT_ARRAY:
        return struct.pack(f">i{len(value)}i", len(value), *value)
    if tag == TAG_LONG_ARRAY:
        return struct.pack(f">i{len(value)}q", len(value), *value)
    if tag == TAG_LIST:
        inner = _tag_of(value[0]) if value else 0
        return struct.pack(">bi", inner, len(value)) + b"".join(_payload(v) for v in value)
    out = b""
    for k, v in value.items():
        out += struct.pack(">b", _tag_of(v)) + _string(k) + _payload(v)
    return out + b"\x00"


def encode_nbt(root: dict) -> bytes:
    return struct.pack(">b", TAG_COMPOUND) + _string("") + _payload(root)


def write_region(path: Path, chunks: Dict[tuple, dict]) -> None:
    """Write ``{(local_x, local_z): root}`` as a zlib-compressed region file."""
    write_raw_region(path, {pos: (2, zlib.compress(encode_nbt(root))) for pos, root in chunks.items()})


def write_raw_region(path: Path, chunks: Dict[tuple, tuple]) -> None:
    """Write ``{(local_x, local_z): (compression_type, payload)}`` as a region file."""
    header = bytearray(8192)
    body = bytearray()
    sector = 2
    for (lx, lz), (ctype, data) in chunks.items():
        blob = struct.pack(">IB", len(data) + 1, ctype) + data
        n = (len(blob) + 4095) // 4096
        blob += bytes(n * 4096 - len(blob))
        idx = (lx & 31) + (lz & 31) * 32
        header[idx * 4 : idx * 4 + 4] = struct.pack(">I", (sector << 8) | n)
        body += blob
        sector += n
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(bytes(header) + bytes(body))
