"""Packed integer arrays as stored in chunk sections and heightmaps.

Two generations of the format pack ``entries`` fixed-width values into an
array of 64-bit words:

* tight: values are back to back in one bitstream and may straddle two words.
* legacy: each word holds ``64 // bits`` whole values, high bits are padding.

Neither carries a format tag; the bit width is implied by the array length, so
the layout is picked by comparing the length against both expectations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from .errors import MalformedSectionData

BLOCKS_PER_SECTION = 16 * 16 * 16
TIGHT = "tight"
LEGACY = "legacy"
MAX_BITS = 32

_U64 = (1 << 64) - 1


@dataclass(frozen=True)
class PackedLayout:
    kind: str
    bits: int
    entries: int = BLOCKS_PER_SECTION

    @property
    def word_count(self) -> int:
        if self.kind == TIGHT:
            return expected_tight_words(self.bits, self.entries)
        return expected_legacy_words(self.bits, self.entries)


def bits_per_entry(word_count: int, entries: int = BLOCKS_PER_SECTION) -> int:
    return (word_count * 64) // entries


def expected_tight_words(bits: int, entries: int = BLOCKS_PER_SECTION) -> int:
    return (entries * bits + 63) // 64


def expected_legacy_words(bits: int, entries: int = BLOCKS_PER_SECTION) -> int:
    per_word = 64 // bits
    return (entries + per_word - 1) // per_word


def choose_layout(word_count: int, entries: int = BLOCKS_PER_SECTION) -> PackedLayout:
    bits = bits_per_entry(word_count, entries)
    if bits < 1 or bits > MAX_BITS:
        raise MalformedSectionData(word_count, 0, 0)
    tight = expected_tight_words(bits, entries)
    legacy = expected_legacy_words(bits, entries)
    if word_count == tight:
        return PackedLayout(TIGHT, bits, entries)
    if word_count == legacy:
        return PackedLayout(LEGACY, bits, entries)
    raise MalformedSectionData(word_count, tight, legacy)


def _unpack_tight(words: List[int], bits: int, entries: int) -> List[int]:
    mask = (1 << bits) - 1
    out = [0] * entries
    for i in range(entries):
        bit_index = i * bits
        wi = bit_index >> 6
        start = bit_index & 63
        v = words[wi] >> start
        spill = start + bits - 64
        if spill > 0:
            v |= words[wi + 1] << (64 - start)
        out[i] = v & mask
    return out


def _unpack_legacy(words: List[int], bits: int, entries: int) -> List[int]:
    mask = (1 << bits) - 1
    per_word = 64 // bits
    out = [0] * entries
    for i in range(entries):
        wi, slot = divmod(i, per_word)
        out[i] = (words[wi] >> (slot * bits)) & mask
    return out


def unpack(words: Sequence[int], layout: PackedLayout) -> List[int]:
    if len(words) != layout.word_count:
        raise MalformedSectionData(
            len(words),
            expected_tight_words(layout.bits, layout.entries),
            expected_legacy_words(layout.bits, layout.entries),
        )
    # Tag-tree longs are signed; the bit packing is unsigned.
    unsigned = [w & _U64 for w in words]
    if layout.kind == TIGHT:
        return _unpack_tight(unsigned, layout.bits, layout.entries)
    return _unpack_legacy(unsigned, layout.bits, layout.entries)


def decode_packed(words: Sequence[int], entries: int = BLOCKS_PER_SECTION) -> List[int]:
    return unpack(words, choose_layout(len(words), entries))


def to_signed64(v: int) -> int:
    v &= _U64
    return v - (1 << 64) if v & (1 << 63) else v


def pack(values: Sequence[int], bits: int, kind: str) -> List[int]:
    """Inverse of :func:`unpack`; returns signed words like a long array tag."""
    if not 1 <= bits <= MAX_BITS:
        raise ValueError(f"bits must be in 1..{MAX_BITS}, got {bits}")
    mask = (1 << bits) - 1
    entries = len(values)
    if kind == TIGHT:
        words = [0] * expected_tight_words(bits, entries)
        for i, value in enumerate(values):
            bit_index = i * bits
            wi = bit_index >> 6
            start = bit_index & 63
            v = value & mask
            words[wi] |= (v << start) & _U64
            if start + bits > 64:
                words[wi + 1] |= v >> (64 - start)
    elif kind == LEGACY:
        per_word = 64 // bits
        words = [0] * expected_legacy_words(bits, entries)
        for i, value in enumerate(values):
            wi, slot = divmod(i, per_word)
            words[wi] |= (value & mask) << (slot * bits)
    else:
        raise ValueError(f"unknown layout {kind!r}")
    return [to_signed64(w) for w in words]
