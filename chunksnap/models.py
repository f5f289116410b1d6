"""Validated view of a persisted chunk record.

Field aliases are the tag names of the chunk format, so a tag tree read by
:mod:`chunksnap.nbt` (or any reader that yields dicts/lists) validates as-is.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

_RECORD_CONFIG = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class PaletteEntry(BaseModel):
    model_config = _RECORD_CONFIG

    name: str = Field(alias="Name")
    properties: Optional[Dict[str, str]] = Field(default=None, alias="Properties")

    @field_validator("properties", mode="before")
    @classmethod
    def stringify_values(cls, value):
        if isinstance(value, dict):
            return {str(k): str(v) for k, v in value.items()}
        return value


class SectionEntry(BaseModel):
    model_config = _RECORD_CONFIG

    # A section without a Y byte reads as 0, like a missing byte tag.
    y: int = Field(default=0, alias="Y", ge=-128, le=127)
    palette: Optional[List[PaletteEntry]] = Field(default=None, alias="Palette")
    block_states: Optional[List[int]] = Field(default=None, alias="BlockStates")
    block_light: Optional[bytes] = Field(default=None, alias="BlockLight")
    sky_light: Optional[bytes] = Field(default=None, alias="SkyLight")

    @field_validator("block_light", "sky_light", mode="before")
    @classmethod
    def coerce_light_arrays(cls, value):
        # Unusable light arrays become None; the section decoder then uses
        # the default plane instead of failing the chunk.
        if value is None or isinstance(value, bytes):
            return value
        if isinstance(value, bytearray):
            return bytes(value)
        if isinstance(value, (list, tuple)) and all(isinstance(v, int) for v in value):
            return bytes(v & 0xFF for v in value)
        return None

    @property
    def has_block_payload(self) -> bool:
        return self.palette is not None and self.block_states is not None


class ChunkRecord(BaseModel):
    model_config = _RECORD_CONFIG

    x: int = Field(alias="xPos")
    z: int = Field(alias="zPos")
    inhabited_time: int = Field(default=0, alias="InhabitedTime")
    height_map: List[int] = Field(default_factory=list, alias="HeightMap")
    biomes: Optional[List[int]] = Field(default=None, alias="Biomes")
    sections: List[SectionEntry] = Field(default_factory=list, alias="Sections")

    @field_validator("biomes", "height_map", mode="before")
    @classmethod
    def expand_byte_arrays(cls, value):
        # Pre-1.13 chunks store biomes as a byte array.
        if isinstance(value, (bytes, bytearray)):
            return list(value)
        return value
