"""Immutable, thread-shareable chunk snapshots decoded from persisted chunk records."""

from .errors import ChunkDecodeError, ChunkSnapError, MalformedSectionData
from .loader import SnapshotLoader, load_snapshot, load_snapshots
from .models import ChunkRecord, PaletteEntry, SectionEntry
from .registry import AIR, BlockState, BlockStateRegistry, MemoryRegistry, load_blocks_report
from .snapshot import ChunkSnapshot

__all__ = [
    "AIR",
    "BlockState",
    "BlockStateRegistry",
    "ChunkDecodeError",
    "ChunkRecord",
    "ChunkSnapError",
    "ChunkSnapshot",
    "MalformedSectionData",
    "MemoryRegistry",
    "PaletteEntry",
    "SectionEntry",
    "SnapshotLoader",
    "load_blocks_report",
    "load_snapshot",
    "load_snapshots",
]

__version__ = "0.1.0"
