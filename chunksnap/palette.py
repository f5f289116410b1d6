from __future__ import annotations

from typing import Mapping, Optional, Sequence, Tuple

from .models import PaletteEntry
from .registry import AIR, BlockState, BlockStateRegistry


def property_string(properties: Mapping[str, object]) -> str:
    # Keep the mapping's iteration order; the registry decides how to match it.
    return ",".join(f"{key}={value}" for key, value in properties.items())


def resolve_entry(entry: PaletteEntry, registry: BlockStateRegistry) -> BlockState:
    handle: Optional[BlockState] = None
    if entry.properties is not None:
        handle = registry.by_name_and_state(entry.name, property_string(entry.properties))
    if handle is None:
        handle = registry.by_base_name(entry.name)
    return handle if handle is not None else AIR


def resolve_palette(entries: Sequence[PaletteEntry], registry: BlockStateRegistry) -> Tuple[BlockState, ...]:
    """Resolve every palette entry, keeping positions since packed values index into it."""
    return tuple(resolve_entry(entry, registry) for entry in entries)
