from __future__ import annotations

import json
from pathlib import Path

import pytest

from chunksnap.registry import AIR, MemoryRegistry, SyntheticRegistry, canonical_state, load_blocks_report

REPORT = {
    "minecraft:air": {"states": [{"id": 0, "default": True}]},
    "minecraft:stone": {"states": [{"id": 1, "default": True}]},
    "minecraft:oak_log": {
        "properties": {"axis": ["x", "y", "z"]},
        "states": [
            {"id": 76, "properties": {"axis": "x"}},
            {"id": 77, "properties": {"axis": "y"}, "default": True},
            {"id": 78, "properties": {"axis": "z"}},
        ],
    },
    "minecraft:oak_stairs": {
        "states": [
            {"id": 200, "properties": {"facing": "north", "half": "top"}, "default": True},
            {"id": 201, "properties": {"facing": "south", "half": "top"}},
        ]
    },
}


def test_canonical_state_sorts_pairs():
    assert canonical_state("half=top,facing=north") == "facing=north,half=top"
    assert canonical_state("") == ""


def test_memory_registry_lookups():
    reg = MemoryRegistry()
    stone = reg.register("minecraft:stone")
    log_x = reg.register("minecraft:oak_log", "axis=x")
    log_y = reg.register("minecraft:oak_log", "axis=y", default=True)
    assert reg.by_global_index(stone.global_index) is stone
    assert reg.by_name_and_state("minecraft:oak_log", "axis=x") is log_x
    assert reg.by_base_name("minecraft:oak_log") is log_y
    assert reg.by_base_name("minecraft:nope") is None
    assert len(reg) == 3


def test_load_blocks_report(tmp_path: Path):
    path = tmp_path / "blocks.json"
    path.write_text(json.dumps(REPORT), encoding="utf-8")
    reg = load_blocks_report(path)
    assert reg.by_global_index(0) == AIR
    assert reg.by_base_name("minecraft:oak_log").global_index == 77
    assert reg.by_name_and_state("minecraft:oak_log", "axis=z").global_index == 78
    # property order in the chunk may differ from the report
    assert reg.by_name_and_state("minecraft:oak_stairs", "half=top,facing=south").global_index == 201
    assert str(reg.by_global_index(201)) == "minecraft:oak_stairs[facing=south,half=top]"


def test_load_blocks_report_rejects_bad_json(tmp_path: Path):
    path = tmp_path / "blocks.json"
    path.write_text("{broken", encoding="utf-8")
    with pytest.raises(ValueError):
        load_blocks_report(path)


def test_synthetic_registry_accepts_any_name():
    reg = SyntheticRegistry()
    assert reg.by_name_and_state("mod:thing", "a=b").state == "a=b"
    assert reg.by_base_name("mod:thing").name == "mod:thing"
    assert reg.by_global_index(5) is None
