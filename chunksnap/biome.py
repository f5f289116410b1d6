from __future__ import annotations

from typing import Optional, Sequence, Tuple

COLUMNS_PER_CHUNK = 16 * 16

# Volumetric biome arrays hold 4x4x4-block cells, 16 cells per 4-block layer.
# The grid is sampled from the layer at y=16 (cell offset 64); this is a
# property of the 1.15-1.17 format, not a tunable.
BIOME_REFERENCE_OFFSET = 64


def _cell_offset(column: int) -> int:
    return ((column >> 4) & 0xC) + ((column >> 2) & 0x3)


def extract_biomes(biomes: Optional[Sequence[int]]) -> Tuple[int, ...]:
    """Return the 256 biome ids of a chunk, indexed ``z * 16 + x``."""
    grid = [0] * COLUMNS_PER_CHUNK
    if not biomes:
        return tuple(grid)
    if len(biomes) > COLUMNS_PER_CHUNK:
        for i in range(COLUMNS_PER_CHUNK):
            grid[i] = max(0, biomes[BIOME_REFERENCE_OFFSET + _cell_offset(i)])
    else:
        for i, value in enumerate(biomes):
            grid[i] = max(0, value)
    return tuple(grid)
