"""Batch decoding of chunk records.

One bad chunk must never abort a batch: any :class:`ChunkDecodeError` is
reported and replaced with an all-empty snapshot of the same coordinates.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Iterable, List, Optional

from .diagnostics import MalformedChunkReporter
from .errors import ChunkDecodeError
from .registry import BlockStateRegistry
from .settings import SnapSettings
from .snapshot import DEFAULT_WORLD_HEIGHT, ChunkSnapshot, RecordLike

LOG = logging.getLogger("chunksnap.loader")

# Used when a caller passes no reporter, so the first skip is still a warning.
DEFAULT_REPORTER = MalformedChunkReporter()


def load_snapshot(
    record: RecordLike,
    registry: BlockStateRegistry,
    *,
    world_height: int = DEFAULT_WORLD_HEIGHT,
    reporter: Optional[MalformedChunkReporter] = None,
) -> ChunkSnapshot:
    try:
        return ChunkSnapshot.from_record(record, registry, world_height)
    except ChunkDecodeError as exc:
        (reporter or DEFAULT_REPORTER).report(exc)
        LOG.debug("substituting empty snapshot: %s", exc)
        x = exc.x if isinstance(exc.x, int) else 0
        z = exc.z if isinstance(exc.z, int) else 0
        return ChunkSnapshot.empty(x, z, world_height)


def load_snapshots(
    records: Iterable[RecordLike],
    registry: BlockStateRegistry,
    *,
    world_height: int = DEFAULT_WORLD_HEIGHT,
    reporter: Optional[MalformedChunkReporter] = None,
) -> List[ChunkSnapshot]:
    return [load_snapshot(r, registry, world_height=world_height, reporter=reporter) for r in records]


class SnapshotLoader:
    """Decodes independent chunks on a small thread pool.

    Each chunk is still decoded on exactly one worker; only finished,
    immutable snapshots cross threads.
    """

    def __init__(
        self,
        registry: BlockStateRegistry,
        settings: Optional[SnapSettings] = None,
        reporter: Optional[MalformedChunkReporter] = None,
    ) -> None:
        self.settings = settings or SnapSettings.from_env()
        self.registry = registry
        self.reporter = reporter or MalformedChunkReporter(verbose=self.settings.verbose)
        self._pool: Optional[ThreadPoolExecutor] = None

    def start(self) -> None:
        if self._pool is not None:
            return
        self._pool = ThreadPoolExecutor(max_workers=self.settings.workers, thread_name_prefix="chunksnap")

    def stop(self) -> None:
        if self._pool is None:
            return
        self._pool.shutdown(wait=True)
        self._pool = None

    def __enter__(self) -> "SnapshotLoader":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()

    def submit(self, record: RecordLike) -> "Future[ChunkSnapshot]":
        if self._pool is None:
            raise RuntimeError("SnapshotLoader is not started")
        return self._pool.submit(
            load_snapshot,
            record,
            self.registry,
            world_height=self.settings.world_height,
            reporter=self.reporter,
        )

    def load_all(self, records: Iterable[RecordLike]) -> List[ChunkSnapshot]:
        futures = [self.submit(r) for r in records]
        return [f.result() for f in futures]
