"""Exceptions raised while decoding MOBI containers."""

from __future__ import annotations


class MobiParserError(Exception):
    """Base for every failure that aborts a parse."""

    message = "Failed to parse MOBI file"

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(f"{self.message}: {detail}" if detail else self.message)


class InvalidFileError(MobiParserError):
    message = "Invalid MOBI file format"


class NoRecordsError(MobiParserError):
    message = "No records found in file"


class EncodingFailureError(MobiParserError):
    message = "Failed to decode text content"


class OutOfRangeError(MobiParserError):
    """A read fell outside the buffer. Recovered by the caller where possible."""

    message = "Read outside buffer"
