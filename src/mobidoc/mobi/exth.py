"""EXTH metadata block parsing."""

from __future__ import annotations

import logging

from mobidoc.errors import OutOfRangeError
from mobidoc.models import ExthMetadata, TextEncoding

from .reader import ByteReader

log = logging.getLogger(__name__)

EXTH_IDENTIFIER = "EXTH"
RECORD_HEADER_SIZE = 8

# EXTH record type -> ExthMetadata field
EXTH_FIELDS = {
    100: "author",
    101: "publisher",
    103: "description",
    104: "isbn",
    524: "language",
}


def parse_exth(
    reader: ByteReader,
    offset: int,
    encoding: TextEncoding = TextEncoding.UTF8,
) -> ExthMetadata:
    """Collect the known EXTH fields found at ``offset``.

    Truncated or malformed blocks yield whatever was read before the damage.
    """
    if not reader.has(offset, 12):
        return ExthMetadata()
    if reader.read_ascii(offset, 4) != EXTH_IDENTIFIER:
        log.debug("EXTH flag set but no EXTH block at %d", offset)
        return ExthMetadata()

    record_count = reader.read_u32(offset + 8)
    pos = offset + 12
    values: dict[str, str] = {}

    for i in range(record_count):
        try:
            record_type = reader.read_u32(pos)
            record_length = reader.read_u32(pos + 4)
            if record_length < RECORD_HEADER_SIZE:
                log.debug("EXTH record %d has invalid length %d", i, record_length)
                break
            payload = reader.read_slice(
                pos + RECORD_HEADER_SIZE, pos + record_length
            )
        except OutOfRangeError:
            log.debug("EXTH block truncated after %d of %d records", i, record_count)
            break

        name = EXTH_FIELDS.get(record_type)
        if name and payload:
            values[name] = payload.decode(encoding.codec, errors="replace").strip(
                "\x00"
            )
        pos += record_length

    return ExthMetadata(**values)
