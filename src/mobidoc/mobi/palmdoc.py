"""PalmDOC text record decompression."""

from __future__ import annotations

import logging
from typing import Iterator

from mobidoc.models import Compression, ContainerHeader, PalmDocHeader

from .reader import ByteReader

log = logging.getLogger(__name__)


def decompress(data: bytes) -> bytes:
    """Decode one PalmDOC (LZ77-style) compressed record.

    Corrupt input truncates the output instead of raising.
    """
    out = bytearray()
    n = len(data)
    i = 0
    while i < n:
        c = data[i]
        if c == 0x00 or 0x09 <= c <= 0x7F:
            out.append(c)
            i += 1
        elif c <= 0x08:
            # next c bytes are literal
            out += data[i + 1 : i + 1 + c]
            i += c + 1
        elif c <= 0xBF:
            if i + 1 >= n:
                break
            pair = ((c & 0x3F) << 8) | data[i + 1]
            distance = pair >> 3
            length = (pair & 0x07) + 3
            for _ in range(length):
                src = len(out) - distance
                if src < 0 or src >= len(out):
                    break
                out.append(out[src])
            i += 2
        else:
            out.append(0x20)
            out.append(c ^ 0x80)
            i += 1
    return bytes(out)


def iter_text_records(
    reader: ByteReader, container: ContainerHeader
) -> Iterator[tuple[int, bytes]]:
    """Yield ``(index, raw bytes)`` for every readable record after record 0."""
    offsets = container.record_offsets
    for i in range(1, len(offsets)):
        start = offsets[i]
        end = offsets[i + 1] if i + 1 < len(offsets) else len(reader)
        if not (start < end <= len(reader)):
            log.debug("Skipping record %d with range [%d, %d)", i, start, end)
            continue
        yield i, reader.read_slice(start, end)


def decompress_records(
    reader: ByteReader, container: ContainerHeader, palmdoc: PalmDocHeader
) -> list[bytes]:
    """Decompress text records ``1..palmdoc.record_count`` in order."""
    if palmdoc.compression is Compression.HUFF_CDIC_UNSUPPORTED:
        log.warning("HuffCDIC compression is not supported; records passed through")

    records: list[bytes] = []
    for index, raw in iter_text_records(reader, container):
        if index > palmdoc.record_count:
            break
        if palmdoc.compression is Compression.PALMDOC:
            records.append(decompress(raw))
        else:
            records.append(raw)
    return records
