"""Immutable, thread-shareable view of one chunk.

A snapshot is decoded once from a persisted chunk record and then only read.
Every field is a tuple, ``bytes``, an int or a frozen dataclass, so worker
threads can read it concurrently without locking. Accessors never raise:
coordinates outside the chunk return air, full sky light, no emitted light,
height 0 and biome 0.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from .biome import COLUMNS_PER_CHUNK, extract_biomes
from .errors import ChunkDecodeError, MalformedSectionData
from .models import ChunkRecord
from .registry import AIR, BlockState, BlockStateRegistry
from .section import EMPTY_SECTION, MAX_LIGHT, Section, decode_section
from .stack import SectionStack

DEFAULT_WORLD_HEIGHT = 256

RecordLike = Union[ChunkRecord, Mapping[str, Any]]


def _in_chunk(x: int, z: int) -> bool:
    return 0 <= x <= 15 and 0 <= z <= 15


def _height_map(values: Sequence[int]) -> Tuple[int, ...]:
    hm = list(values[:COLUMNS_PER_CHUNK])
    hm.extend([0] * (COLUMNS_PER_CHUNK - len(hm)))
    return tuple(hm)


def _validate(record: RecordLike) -> ChunkRecord:
    if isinstance(record, ChunkRecord):
        return record
    try:
        return ChunkRecord.model_validate(record)
    except ValidationError as exc:
        x = record.get("xPos") if isinstance(record, Mapping) else None
        z = record.get("zPos") if isinstance(record, Mapping) else None
        raise ChunkDecodeError(x, z, f"invalid chunk record: {exc.error_count()} error(s)", exc) from exc


@dataclass(frozen=True)
class ChunkSnapshot:
    x: int
    z: int
    capture_time: int
    inhabited_ticks: int
    height_map: Tuple[int, ...]
    biome: Tuple[int, ...]
    sections: Tuple[Section, ...]
    section_offset: int = 0

    @classmethod
    def empty(
        cls,
        x: int,
        z: int,
        world_height: int = DEFAULT_WORLD_HEIGHT,
        capture_time: int = 0,
        inhabited_ticks: int = 0,
    ) -> "ChunkSnapshot":
        return cls(
            x=x,
            z=z,
            capture_time=capture_time,
            inhabited_ticks=inhabited_ticks,
            height_map=(0,) * COLUMNS_PER_CHUNK,
            biome=(0,) * COLUMNS_PER_CHUNK,
            sections=(EMPTY_SECTION,) * (world_height // 16 + 1),
        )

    @classmethod
    def from_record(
        cls,
        record: RecordLike,
        registry: BlockStateRegistry,
        world_height: int = DEFAULT_WORLD_HEIGHT,
    ) -> "ChunkSnapshot":
        """Decode a persisted chunk record.

        Raises :class:`ChunkDecodeError` when the record is invalid or any
        section's packed block states are malformed; no partial snapshot is
        ever returned.
        """
        rec = _validate(record)
        stack = SectionStack(world_height // 16)
        for entry in rec.sections:
            try:
                section = decode_section(entry, registry)
            except MalformedSectionData as exc:
                raise ChunkDecodeError(rec.x, rec.z, f"section y={entry.y}: {exc}", exc) from exc
            stack.place(entry.y, section)
        sections, offset = stack.freeze()
        return cls(
            x=rec.x,
            z=rec.z,
            capture_time=0,
            inhabited_ticks=rec.inhabited_time,
            height_map=_height_map(rec.height_map),
            biome=extract_biomes(rec.biomes),
            sections=sections,
            section_offset=offset,
        )

    def _section_at(self, y: int) -> Optional[Section]:
        idx = (y >> 4) + self.section_offset
        if idx < 0 or idx >= len(self.sections):
            return None
        return self.sections[idx]

    def get_x(self) -> int:
        return self.x

    def get_z(self) -> int:
        return self.z

    def get_block_type(self, x: int, y: int, z: int) -> BlockState:
        section = self._section_at(y)
        if section is None or not _in_chunk(x, z):
            return AIR
        return section.block_type(x, y, z)

    def get_block_sky_light(self, x: int, y: int, z: int) -> int:
        section = self._section_at(y)
        if section is None or not _in_chunk(x, z):
            return MAX_LIGHT
        return section.sky_light_at(x, y, z)

    def get_block_emitted_light(self, x: int, y: int, z: int) -> int:
        section = self._section_at(y)
        if section is None or not _in_chunk(x, z):
            return 0
        return section.emitted_light_at(x, y, z)

    def get_highest_block_y_at(self, x: int, z: int) -> int:
        if not _in_chunk(x, z):
            return 0
        return self.height_map[(z << 4) | x]

    def get_biome(self, x: int, z: int) -> int:
        if not _in_chunk(x, z):
            return 0
        return self.biome[(z << 4) | x]

    def get_capture_full_time(self) -> int:
        return self.capture_time

    def is_section_empty(self, section_y: int) -> bool:
        idx = section_y + self.section_offset
        if idx < 0 or idx >= len(self.sections):
            return True
        return self.sections[idx].is_empty

    def get_inhabited_ticks(self) -> int:
        return self.inhabited_ticks
