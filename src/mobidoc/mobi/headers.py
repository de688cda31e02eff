"""Fixed-layout headers: Palm database, PalmDOC and MOBI."""

from __future__ import annotations

import logging

from mobidoc.errors import InvalidFileError, NoRecordsError, OutOfRangeError
from mobidoc.models import (
    Compression,
    ContainerHeader,
    MobiHeader,
    PalmDocHeader,
    TextEncoding,
)

from .reader import ByteReader

log = logging.getLogger(__name__)

MIN_FILE_SIZE = 100
NAME_LENGTH = 32
RECORD_COUNT_OFFSET = 76
RECORD_TABLE_OFFSET = 78
RECORD_ENTRY_SIZE = 8

# MOBI header starts after the 16-byte PalmDOC header in record 0
MOBI_HEADER_OFFSET = 16


def parse_container_header(reader: ByteReader) -> ContainerHeader:
    """Read the Palm database header and its record offset table."""
    if len(reader) < MIN_FILE_SIZE:
        raise InvalidFileError(f"file is only {len(reader)} bytes")

    try:
        raw_name = reader.read_slice(0, NAME_LENGTH).rstrip(b"\x00")
        count = reader.read_u16(RECORD_COUNT_OFFSET)
        offsets = tuple(
            reader.read_u32(RECORD_TABLE_OFFSET + i * RECORD_ENTRY_SIZE)
            for i in range(count)
        )
        header = ContainerHeader(
            name=raw_name.decode("utf-8", errors="replace"),
            attributes=reader.read_u16(32),
            version=reader.read_u16(34),
            creation_date=reader.read_u32(36),
            modification_date=reader.read_u32(40),
            db_type=reader.read_ascii(60, 4),
            creator=reader.read_ascii(64, 4),
            record_offsets=offsets,
        )
    except OutOfRangeError as e:
        raise InvalidFileError(f"truncated record table ({e.detail})") from e

    if not header.record_offsets:
        raise NoRecordsError()

    log.debug(
        "Container %r: %s/%s, %d records",
        header.name,
        header.db_type,
        header.creator,
        header.record_count,
    )
    return header


def parse_palmdoc_header(reader: ByteReader, offset: int) -> PalmDocHeader:
    """Read the PalmDOC header at the start of record 0."""
    try:
        header = PalmDocHeader(
            compression=Compression.from_code(reader.read_u16(offset)),
            text_length=reader.read_u32(offset + 4),
            record_count=reader.read_u16(offset + 8),
            record_size=reader.read_u16(offset + 10),
            encryption_type=reader.read_u16(offset + 12),
        )
    except OutOfRangeError as e:
        raise InvalidFileError(f"record 0 is truncated ({e.detail})") from e

    if header.encryption_type:
        log.warning(
            "Encryption type %d is not supported; text will be unreadable",
            header.encryption_type,
        )
    return header


def parse_mobi_header(reader: ByteReader, offset: int) -> MobiHeader:
    """Read the MOBI header starting at ``offset``.

    A missing or unreadable header is not an error: MOBI fields are optional
    metadata, so the all-default header is returned instead.
    """
    try:
        identifier = reader.read_ascii(offset, 4)
    except OutOfRangeError:
        return MobiHeader()
    if identifier != "MOBI":
        log.debug("No MOBI header at %d (found %r)", offset, identifier)
        return MobiHeader()

    try:
        header_length = reader.read_u32(offset + 4)
        mobi_type = reader.read_u32(offset + 8)
        encoding = TextEncoding.from_code(reader.read_u32(offset + 12))
    except OutOfRangeError:
        log.debug("MOBI header at %d is truncated", offset)
        return MobiHeader()

    first_image_record = _optional_u32(reader, offset + 108)
    exth_flags = _optional_u32(reader, offset + 128)

    return MobiHeader(
        identifier_valid=True,
        header_length=header_length,
        mobi_type=mobi_type,
        text_encoding=encoding,
        first_image_record=first_image_record,
        full_title=_read_full_title(reader, offset, encoding),
        exth_flags=exth_flags,
    )


def _optional_u32(reader: ByteReader, offset: int) -> int:
    try:
        return reader.read_u32(offset)
    except OutOfRangeError:
        return 0


def _read_full_title(reader: ByteReader, offset: int, encoding: TextEncoding) -> str:
    # Title offset is relative to the start of record 0
    name_offset = _optional_u32(reader, offset + 84)
    name_length = _optional_u32(reader, offset + 88)
    if not name_offset or not name_length:
        return ""

    start = offset - MOBI_HEADER_OFFSET + name_offset
    try:
        raw = reader.read_slice(start, start + name_length)
    except OutOfRangeError:
        log.debug("Full title range [%d, +%d) is out of bounds", start, name_length)
        return ""
    return raw.decode(encoding.codec, errors="replace").strip("\x00")
