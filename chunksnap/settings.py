from __future__ import annotations

import os
from dataclasses import dataclass

from .snapshot import DEFAULT_WORLD_HEIGHT


def _env_bool(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class SnapSettings:
    world_height: int
    verbose: bool
    log_level: str
    workers: int

    @classmethod
    def from_env(cls) -> "SnapSettings":
        world_height = int(os.environ.get("CHUNKSNAP_WORLD_HEIGHT", str(DEFAULT_WORLD_HEIGHT)))
        if world_height < 16 or world_height % 16:
            raise ValueError(f"CHUNKSNAP_WORLD_HEIGHT must be a positive multiple of 16, got {world_height}")
        workers = int(os.environ.get("CHUNKSNAP_WORKERS", "4"))
        if workers < 1:
            raise ValueError(f"CHUNKSNAP_WORKERS must be >= 1, got {workers}")
        return cls(
            world_height=world_height,
            verbose=_env_bool("CHUNKSNAP_VERBOSE"),
            log_level=os.environ.get("CHUNKSNAP_LOG_LEVEL", "INFO").upper(),
            workers=workers,
        )
