from __future__ import annotations

from chunksnap.models import PaletteEntry
from chunksnap.palette import property_string, resolve_palette
from chunksnap.registry import AIR


def _entry(name, properties=None):
    data = {"Name": name}
    if properties is not None:
        data["Properties"] = properties
    return PaletteEntry.model_validate(data)


def test_property_string_keeps_mapping_order():
    assert property_string({"facing": "north", "half": "top"}) == "facing=north,half=top"
    assert property_string({"half": "top", "facing": "north"}) == "half=top,facing=north"
    assert property_string({}) == ""


def test_resolution_order(registry):
    entries = [
        _entry("minecraft:oak_log", {"axis": "y"}),
        _entry("minecraft:oak_log", {"axis": "z"}),
        _entry("minecraft:stone"),
        _entry("mod:unknown_block", {"a": "b"}),
    ]
    out = resolve_palette(entries, registry)
    assert [h.global_index for h in out[:3]] == [77, 76, 1]
    assert out[3] is AIR


def test_absent_properties_skip_exact_lookup(registry):
    resolve_palette([_entry("minecraft:stone")], registry)
    assert registry.state_calls == []


def test_non_string_property_values_are_stringified(registry):
    out = resolve_palette([_entry("minecraft:water", {"level": 0})], registry)
    assert out[0].global_index == 34


def test_palette_preserves_length_and_order(registry):
    names = ["minecraft:dirt", "nope:a", "minecraft:stone", "nope:b", "minecraft:dirt"]
    out = resolve_palette([_entry(n) for n in names], registry)
    assert [h.name for h in out] == ["minecraft:dirt", "minecraft:air", "minecraft:stone", "minecraft:air", "minecraft:dirt"]
