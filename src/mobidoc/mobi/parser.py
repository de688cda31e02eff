"""MOBI/PalmDOC decoding: raw bytes in, structured Document out."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from mobidoc.models import Document, ExthMetadata, Metadata

from .assembler import assemble_text
from .exth import parse_exth
from .headers import (
    MIN_FILE_SIZE,
    MOBI_HEADER_OFFSET,
    parse_container_header,
    parse_mobi_header,
    parse_palmdoc_header,
)
from .palmdoc import decompress_records
from .reader import Buffer, ByteReader
from .segmenter import (
    DUPLICATE_WINDOW,
    MAX_TITLE_LENGTH,
    extract_css,
    segment_chapters,
    strip_control_chars,
)

log = logging.getLogger(__name__)

# (type, creator) pairs found at bytes 60-67
MOBI_SIGNATURES = frozenset([("BOOK", "MOBI"), ("TEXt", "REAd")])


def is_mobi_file(data: Buffer) -> bool:
    """Check the Palm database type/creator signature."""
    if len(data) < MIN_FILE_SIZE:
        return False
    raw = bytes(data[60:68])
    db_type = raw[:4].decode("ascii", errors="replace")
    creator = raw[4:].decode("ascii", errors="replace")
    return (db_type, creator) in MOBI_SIGNATURES


def parse_mobi(
    data: Buffer,
    *,
    fallback_title: str = "",
    duplicate_window: Optional[int] = None,
    max_title_length: Optional[int] = None,
) -> Document:
    """Decode a MOBI/PalmDOC buffer.

    Raises InvalidFileError, NoRecordsError or EncodingFailureError. Every
    other defect in the file lowers the quality of the result instead.
    ``fallback_title`` stands in for an empty container name.
    """
    reader = ByteReader(data)
    container = parse_container_header(reader)
    name = container.name or fallback_title

    record0 = container.record_offsets[0]
    palmdoc = parse_palmdoc_header(reader, record0)
    mobi = parse_mobi_header(reader, record0 + MOBI_HEADER_OFFSET)

    exth = ExthMetadata()
    if mobi.identifier_valid and mobi.has_exth:
        exth = parse_exth(
            reader,
            record0 + MOBI_HEADER_OFFSET + mobi.header_length,
            mobi.text_encoding,
        )

    records = decompress_records(reader, container, palmdoc)
    text = assemble_text(records, mobi.text_encoding)
    html = strip_control_chars(text)

    chapters = segment_chapters(
        html,
        fallback_title=name,
        duplicate_window=(
            DUPLICATE_WINDOW if duplicate_window is None else duplicate_window
        ),
        max_title_length=(
            MAX_TITLE_LENGTH if max_title_length is None else max_title_length
        ),
    )
    log.info(
        "Parsed %r: %d records, %d chars, %d chapters",
        container.name,
        len(records),
        len(html),
        len(chapters),
    )
    return Document(
        metadata=Metadata.merge(name, mobi, exth),
        chapters=tuple(chapters),
        raw_markup=html,
        css=extract_css(html),
    )


async def parse_mobi_async(data: Buffer, **kwargs) -> Document:
    """Run :func:`parse_mobi` in a worker thread."""
    return await asyncio.to_thread(parse_mobi, data, **kwargs)
