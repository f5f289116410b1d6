from __future__ import annotations

import logging
import threading
from typing import Optional

from .errors import ChunkDecodeError, MalformedSectionData

LOG = logging.getLogger("chunksnap.diagnostics")


class MalformedChunkReporter:
    """Logs skipped chunks; after the first of each kind only in verbose mode."""

    def __init__(self, verbose: bool = False, logger: Optional[logging.Logger] = None) -> None:
        self.verbose = verbose
        self._log = logger or LOG
        self._lock = threading.Lock()
        # Invalid records and malformed state lists are rate-limited separately.
        self._logged_kinds = set()
        self.count = 0

    def report(self, exc: ChunkDecodeError) -> bool:
        """Record a failed chunk; returns True when a message was emitted."""
        cause = exc.cause
        kind = "state_list" if isinstance(cause, MalformedSectionData) else "record"
        with self._lock:
            self.count += 1
            first = kind not in self._logged_kinds
            if not first and not self.verbose:
                return False
            self._logged_kinds.add(kind)

        if isinstance(cause, MalformedSectionData):
            self._log.warning(
                "Skipping chunk at x=%s,z=%s. Expected state list of length %s or %s but got %s. "
                "This can happen if the chunk was not yet converted to the 1.16 format, "
                "which can be fixed by visiting the chunk.",
                exc.x,
                exc.z,
                cause.expected_tight,
                cause.expected_legacy,
                cause.actual,
            )
        else:
            self._log.warning("Skipping chunk at x=%s,z=%s: %s", exc.x, exc.z, exc.reason)
        if first and not self.verbose:
            self._log.warning(
                "You will only see this message once. Enable verbose logging (CHUNKSNAP_VERBOSE=true) to see all messages."
            )
        return True
