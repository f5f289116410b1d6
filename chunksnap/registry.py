"""Block-state handles and the registry interface the decoder resolves against."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

LOG = logging.getLogger("chunksnap.registry")

AIR_NAME = "minecraft:air"


@dataclass(frozen=True)
class BlockState:
    name: str
    state: str = ""
    global_index: int = -1

    @property
    def is_air(self) -> bool:
        return self.name == AIR_NAME

    def __str__(self) -> str:
        if self.state:
            return f"{self.name}[{self.state}]"
        return self.name


AIR = BlockState(AIR_NAME, "", 0)


def canonical_state(state: str) -> str:
    """Sort ``k=v`` pairs so lookups do not depend on property order."""
    if not state:
        return ""
    return ",".join(sorted(p for p in state.split(",") if p))


class BlockStateRegistry:
    """Lookup interface. Every method returns ``None`` when unresolved."""

    def by_name_and_state(self, name: str, state: str) -> Optional[BlockState]:
        return None

    def by_base_name(self, name: str) -> Optional[BlockState]:
        return None

    def by_global_index(self, index: int) -> Optional[BlockState]:
        return None


class MemoryRegistry(BlockStateRegistry):
    def __init__(self) -> None:
        self._by_state: Dict[Tuple[str, str], BlockState] = {}
        self._base: Dict[str, BlockState] = {}
        self._by_index: Dict[int, BlockState] = {}

    def __len__(self) -> int:
        return len(self._by_index)

    def register(self, name: str, state: str = "", global_index: int = -1, *, default: bool = False) -> BlockState:
        if global_index < 0:
            global_index = len(self._by_index)
        handle = BlockState(name, state, global_index)
        self._by_state[(name, canonical_state(state))] = handle
        self._by_index[global_index] = handle
        if default or name not in self._base:
            self._base[name] = handle
        return handle

    def by_name_and_state(self, name: str, state: str) -> Optional[BlockState]:
        return self._by_state.get((name, canonical_state(state)))

    def by_base_name(self, name: str) -> Optional[BlockState]:
        return self._base.get(name)

    def by_global_index(self, index: int) -> Optional[BlockState]:
        return self._by_index.get(index)


class SyntheticRegistry(BlockStateRegistry):
    """Accepts any name; used when no block report is available.

    Global indices cannot be resolved without a report, so they stay Air.
    """

    def by_name_and_state(self, name: str, state: str) -> Optional[BlockState]:
        return BlockState(name, state)

    def by_base_name(self, name: str) -> Optional[BlockState]:
        return BlockState(name)


def _report_states(name: str, entry: Dict) -> Iterable[Tuple[str, int, bool]]:
    states: List[Dict] = entry.get("states") or []
    for st in states:
        if not isinstance(st, dict) or not isinstance(st.get("id"), int):
            LOG.debug("skipping malformed report state for %s: %r", name, st)
            continue
        props = st.get("properties") or {}
        state = ",".join(f"{k}={v}" for k, v in props.items())
        yield state, int(st["id"]), bool(st.get("default", False))


def load_blocks_report(path: Path) -> MemoryRegistry:
    """Build a registry from the server's generated ``reports/blocks.json``."""
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ValueError(f"unable to read block report {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ValueError(f"block report {path} is not a JSON object")

    registry = MemoryRegistry()
    for name, entry in raw.items():
        if not isinstance(entry, dict):
            continue
        for state, index, is_default in _report_states(name, entry):
            registry.register(name, state, index, default=is_default)
    if registry.by_global_index(0) is None:
        registry.register(AIR.name, "", 0, default=True)
    LOG.info("loaded %s block states from %s", len(registry), path)
    return registry
