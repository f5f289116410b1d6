from __future__ import annotations

from typing import Optional


class ChunkSnapError(RuntimeError):
    """Base class for every error raised by chunksnap."""


class MalformedSectionData(ChunkSnapError):
    """Raised when a packed block-state array matches neither known layout."""

    def __init__(self, actual: int, expected_tight: int, expected_legacy: int) -> None:
        self.actual = actual
        self.expected_tight = expected_tight
        self.expected_legacy = expected_legacy
        super().__init__(
            f"expected state list of length {expected_tight} or {expected_legacy} but got {actual}"
        )


class ChunkDecodeError(ChunkSnapError):
    """Raised when a chunk record cannot be turned into a snapshot."""

    def __init__(self, x: Optional[int], z: Optional[int], reason: str, cause: Optional[Exception] = None) -> None:
        self.x = x
        self.z = z
        self.reason = reason
        self.cause = cause
        super().__init__(f"chunk x={x},z={z}: {reason}")


class NBTError(ChunkSnapError):
    pass


class RegionError(ChunkSnapError):
    pass
