from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .models import SectionEntry
from .packing import BLOCKS_PER_SECTION, choose_layout, unpack
from .palette import resolve_palette
from .registry import AIR, BlockState, BlockStateRegistry

LOG = logging.getLogger("chunksnap.section")

LIGHT_NIBBLE_BYTES = BLOCKS_PER_SECTION // 2
MAX_LIGHT = 15
# Above this width the packed values are global state ids, not palette slots.
MAX_PALETTE_BITS = 8

EMPTY_LIGHT = bytes(LIGHT_NIBBLE_BYTES)


def block_index(x: int, y: int, z: int) -> int:
    return ((y & 0xF) << 8) | (z << 4) | x


def _nibble(plane: bytes, x: int, y: int, z: int) -> int:
    b = plane[((y & 0xF) << 7) | (z << 3) | (x >> 1)]
    if x & 1:
        return (b >> 4) & 0x0F
    return b & 0x0F


@dataclass(frozen=True)
class Section:
    """One 16x16x16 slice of a chunk.

    ``states is None`` marks the empty variant: all air, full sky light and no
    emitted light. Only :data:`EMPTY_SECTION` should ever be built that way.
    """

    states: Optional[Tuple[BlockState, ...]] = None
    sky_light: bytes = EMPTY_LIGHT
    block_light: bytes = EMPTY_LIGHT

    @property
    def is_empty(self) -> bool:
        return self.states is None

    def block_type(self, x: int, y: int, z: int) -> BlockState:
        if self.states is None:
            return AIR
        return self.states[block_index(x, y, z)]

    def sky_light_at(self, x: int, y: int, z: int) -> int:
        if self.states is None:
            return MAX_LIGHT
        return _nibble(self.sky_light, x, y, z)

    def emitted_light_at(self, x: int, y: int, z: int) -> int:
        if self.states is None:
            return 0
        return _nibble(self.block_light, x, y, z)


EMPTY_SECTION = Section()
_ALL_AIR: Tuple[BlockState, ...] = (AIR,) * BLOCKS_PER_SECTION


def _light_plane(data: Optional[bytes], section_y: int, kind: str) -> bytes:
    if data is None:
        return EMPTY_LIGHT
    if len(data) != LIGHT_NIBBLE_BYTES:
        LOG.debug(
            "section y=%s: ignoring %s of %s bytes (expected %s)",
            section_y,
            kind,
            len(data),
            LIGHT_NIBBLE_BYTES,
        )
        return EMPTY_LIGHT
    return bytes(data)


def _global_states(raw: Sequence[int], registry: BlockStateRegistry) -> Tuple[BlockState, ...]:
    cache = {}
    out = []
    for v in raw:
        handle = cache.get(v)
        if handle is None:
            handle = registry.by_global_index(v) or AIR
            cache[v] = handle
        out.append(handle)
    return tuple(out)


def _palette_states(raw: Sequence[int], palette: Tuple[BlockState, ...]) -> Tuple[BlockState, ...]:
    n = len(palette)
    return tuple(palette[v] if v < n else AIR for v in raw)


def decode_states(entry: SectionEntry, registry: BlockStateRegistry) -> Tuple[BlockState, ...]:
    """Decode the block payload of ``entry``; raises MalformedSectionData."""
    if not entry.has_block_payload:
        return _ALL_AIR
    words = entry.block_states or []
    layout = choose_layout(len(words))
    raw = unpack(words, layout)
    if layout.bits > MAX_PALETTE_BITS:
        return _global_states(raw, registry)
    return _palette_states(raw, resolve_palette(entry.palette or [], registry))


def decode_section(entry: SectionEntry, registry: BlockStateRegistry) -> Section:
    if not entry.has_block_payload:
        return EMPTY_SECTION
    return Section(
        states=decode_states(entry, registry),
        sky_light=_light_plane(entry.sky_light, entry.y, "SkyLight"),
        block_light=_light_plane(entry.block_light, entry.y, "BlockLight"),
    )
