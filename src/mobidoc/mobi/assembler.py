"""Join decompressed text records and decode them to a string."""

from __future__ import annotations

import logging
from typing import Iterable

from mobidoc.errors import EncodingFailureError
from mobidoc.models import TextEncoding

log = logging.getLogger(__name__)


def assemble_text(records: Iterable[bytes], encoding: TextEncoding) -> str:
    """Decode the concatenated records, retrying as UTF-8 on failure."""
    combined = b"".join(records)
    try:
        return combined.decode(encoding.codec)
    except UnicodeDecodeError as e:
        if encoding is TextEncoding.UTF8:
            raise EncodingFailureError(str(e)) from e
        log.warning("Text is not valid %s, retrying as UTF-8", encoding.codec)

    try:
        return combined.decode("utf-8")
    except UnicodeDecodeError as e:
        raise EncodingFailureError(str(e)) from e
