"""Shared fixtures for tests."""

from __future__ import annotations

import struct
from pathlib import Path
from typing import Optional

import pytest

from mobidoc.config import AppConfig

MOBI_HEADER_LENGTH = 232


def palmdoc_compress(data: bytes) -> bytes:
    """Reference PalmDOC encoder used to exercise the decoder."""
    out = bytearray()
    i = 0
    n = len(data)
    while i < n:
        # back-reference: longest earlier match within the 2047-byte window
        if i > 0:
            found = False
            for length in range(min(10, n - i), 2, -1):
                chunk = data[i : i + length]
                j = data.rfind(chunk, max(0, i - 2047), i)
                if j != -1 and j + length <= i:
                    compound = ((i - j) << 3) | (length - 3)
                    out.append(0x80 | (compound >> 8))
                    out.append(compound & 0xFF)
                    i += length
                    found = True
                    break
            if found:
                continue

        c = data[i]
        if c == 0x20 and i + 1 < n and 0x40 <= data[i + 1] <= 0x7F:
            out.append(data[i + 1] ^ 0x80)
            i += 2
            continue
        if c == 0 or 0x09 <= c <= 0x7F:
            out.append(c)
            i += 1
            continue

        # literal run of up to 8 bytes
        run = bytearray([c])
        j = i + 1
        while j < n and len(run) < 8 and not (data[j] == 0 or 0x09 <= data[j] <= 0x7F):
            run.append(data[j])
            j += 1
        out.append(len(run))
        out += run
        i += len(run)
    return bytes(out)


def build_exth(records: list[tuple[int, bytes]]) -> bytes:
    body = b"".join(
        struct.pack(">II", rtype, len(value) + 8) + value for rtype, value in records
    )
    block = b"EXTH" + struct.pack(">II", len(body) + 12, len(records)) + body
    return block + b"\x00" * (-len(block) % 4)


def build_mobi(
    text_records: list[bytes],
    *,
    name: bytes = b"Test_Book",
    compression: int = 1,
    encoding: int = 65001,
    title: Optional[bytes] = None,
    exth: Optional[list[tuple[int, bytes]]] = None,
    exth_raw: Optional[bytes] = None,
    with_mobi_header: bool = True,
    db_type: bytes = b"BOOK",
    creator: bytes = b"MOBI",
    text_record_count: Optional[int] = None,
    encryption: int = 0,
) -> bytes:
    """Assemble a Palm database holding a MOBI record 0 and text records."""
    count = len(text_records) if text_record_count is None else text_record_count
    palmdoc = struct.pack(
        ">HHIHHHH",
        compression,
        0,
        sum(len(r) for r in text_records),
        count,
        4096,
        encryption,
        0,
    )

    record0 = bytearray(palmdoc)
    if with_mobi_header:
        exth_block = exth_raw if exth_raw is not None else b""
        if exth is not None:
            exth_block = build_exth(exth)
        header = bytearray(MOBI_HEADER_LENGTH)
        header[0:4] = b"MOBI"
        struct.pack_into(">III", header, 4, MOBI_HEADER_LENGTH, 2, encoding)
        struct.pack_into(">I", header, 108, len(text_records) + 1)
        struct.pack_into(">I", header, 128, 0x40 if exth_block else 0)
        if title:
            title_offset = len(palmdoc) + MOBI_HEADER_LENGTH + len(exth_block)
            struct.pack_into(">II", header, 84, title_offset, len(title))
        record0 += header + exth_block + (title or b"")
    record0 += b"\x00" * 4

    records = [bytes(record0)] + list(text_records)
    table_size = 78 + 8 * len(records) + 2
    offsets = []
    pos = table_size
    for rec in records:
        offsets.append(pos)
        pos += len(rec)

    head = bytearray(78)
    head[0:32] = name[:31].ljust(32, b"\x00")
    struct.pack_into(">HH", head, 32, 0, 0)
    struct.pack_into(">II", head, 36, 1_700_000_000, 1_700_000_100)
    head[60:64] = db_type
    head[64:68] = creator
    struct.pack_into(">H", head, 76, len(records))

    table = b"".join(struct.pack(">II", off, i * 2) for i, off in enumerate(offsets))
    return bytes(head) + table + b"\x00\x00" + b"".join(records)


@pytest.fixture
def make_mobi():
    return build_mobi


@pytest.fixture
def compress():
    return palmdoc_compress


@pytest.fixture
def config(tmp_path: Path) -> AppConfig:
    return AppConfig(
        data_dir=tmp_path / "data",
        config_dir=tmp_path / "config",
    )
