"""Minimal big-endian NBT reader producing plain dicts, lists, ints and bytes."""

from __future__ import annotations

import gzip
import struct
from typing import Dict

from .errors import NBTError

TAG_END = 0
TAG_BYTE = 1
TAG_SHORT = 2
TAG_INT = 3
TAG_LONG = 4
TAG_FLOAT = 5
TAG_DOUBLE = 6
TAG_BYTE_ARRAY = 7
TAG_STRING = 8
TAG_LIST = 9
TAG_COMPOUND = 10
TAG_INT_ARRAY = 11
TAG_LONG_ARRAY = 12


class _Buf:
    __slots__ = ("b", "o")

    def __init__(self, b: bytes):
        self.b = b
        self.o = 0

    def take(self, n: int) -> bytes:
        if n < 0 or self.o + n > len(self.b):
            raise NBTError("unexpected EOF")
        v = self.b[self.o : self.o + n]
        self.o += n
        return v

    def unpack(self, fmt: str, size: int):
        return struct.unpack(fmt, self.take(size))[0]

    def read_u8(self) -> int:
        return self.take(1)[0]

    def read_i32(self) -> int:
        return self.unpack(">i", 4)

    def read_length(self, what: str) -> int:
        ln = self.read_i32()
        if ln < 0:
            raise NBTError(f"negative {what} length")
        return ln

    def read_string(self) -> str:
        ln = self.unpack(">h", 2)
        if ln < 0:
            raise NBTError("negative string length")
        try:
            return self.take(ln).decode("utf-8", errors="strict")
        except UnicodeDecodeError as exc:
            raise NBTError(f"invalid string: {exc}") from exc


_SCALARS = {
    TAG_BYTE: (">b", 1),
    TAG_SHORT: (">h", 2),
    TAG_INT: (">i", 4),
    TAG_LONG: (">q", 8),
    TAG_FLOAT: (">f", 4),
    TAG_DOUBLE: (">d", 8),
}


def _read_tag_payload(tag: int, buf: _Buf):
    scalar = _SCALARS.get(tag)
    if scalar is not None:
        return buf.unpack(*scalar)
    if tag == TAG_BYTE_ARRAY:
        return buf.take(buf.read_length("byte array"))
    if tag == TAG_STRING:
        return buf.read_string()
    if tag == TAG_LIST:
        inner = buf.read_u8()
        ln = buf.read_length("list")
        return [_read_tag_payload(inner, buf) for _ in range(ln)]
    if tag == TAG_COMPOUND:
        out = {}
        while True:
            t = buf.read_u8()
            if t == TAG_END:
                return out
            name = buf.read_string()
            out[name] = _read_tag_payload(t, buf)
    if tag == TAG_INT_ARRAY:
        ln = buf.read_length("int array")
        return list(struct.unpack(f">{ln}i", buf.take(4 * ln)))
    if tag == TAG_LONG_ARRAY:
        ln = buf.read_length("long array")
        return list(struct.unpack(f">{ln}q", buf.take(8 * ln)))
    raise NBTError(f"unknown tag {tag}")


def load_nbt_bytes(raw: bytes) -> Dict:
    """Parse an uncompressed or gzipped NBT blob with a compound root."""
    if raw[:2] == b"\x1f\x8b":
        raw = gzip.decompress(raw)
    buf = _Buf(raw)
    root_t = buf.read_u8()
    if root_t != TAG_COMPOUND:
        raise NBTError(f"unexpected root tag: {root_t}")
    _ = buf.read_string()
    root = _read_tag_payload(TAG_COMPOUND, buf)
    if not isinstance(root, dict):
        raise NBTError("root compound parse failed")
    return root
