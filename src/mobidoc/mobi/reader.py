"""Bounds-checked big-endian access over a raw byte buffer."""

from __future__ import annotations

import struct
from typing import Union

from mobidoc.errors import OutOfRangeError

Buffer = Union[bytes, bytearray, memoryview]

_U16 = struct.Struct(">H")
_U32 = struct.Struct(">I")


class ByteReader:
    """Read-only view over a MOBI buffer. Every read is range checked."""

    def __init__(self, data: Buffer) -> None:
        self._data = bytes(data)

    def __len__(self) -> int:
        return len(self._data)

    @property
    def data(self) -> bytes:
        return self._data

    def has(self, offset: int, length: int) -> bool:
        return offset >= 0 and length >= 0 and offset + length <= len(self._data)

    def _check(self, start: int, end: int) -> None:
        if start < 0 or end < start or end > len(self._data):
            raise OutOfRangeError(
                f"[{start}, {end}) outside buffer of {len(self._data)} bytes"
            )

    def read_u16(self, offset: int) -> int:
        self._check(offset, offset + 2)
        return _U16.unpack_from(self._data, offset)[0]

    def read_u32(self, offset: int) -> int:
        self._check(offset, offset + 4)
        return _U32.unpack_from(self._data, offset)[0]

    def read_slice(self, start: int, end: int) -> bytes:
        self._check(start, end)
        return self._data[start:end]

    def read_ascii(self, offset: int, length: int) -> str:
        return self.read_slice(offset, offset + length).decode("ascii", errors="replace")
