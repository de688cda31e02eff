"""Data models for parsed MOBI documents."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum


class Compression(Enum):
    NONE = 1
    PALMDOC = 2
    HUFF_CDIC_UNSUPPORTED = 17480

    @classmethod
    def from_code(cls, code: int) -> Compression:
        if code == cls.NONE.value:
            return cls.NONE
        if code == cls.PALMDOC.value:
            return cls.PALMDOC
        # HuffCDIC and anything unknown are passed through undecoded
        return cls.HUFF_CDIC_UNSUPPORTED


class TextEncoding(Enum):
    CP1252 = 1252
    UTF8 = 65001

    @classmethod
    def from_code(cls, code: int) -> TextEncoding:
        return cls.CP1252 if code == cls.CP1252.value else cls.UTF8

    @property
    def codec(self) -> str:
        return "cp1252" if self is TextEncoding.CP1252 else "utf-8"


@dataclass(frozen=True)
class ContainerHeader:
    """Palm database header plus its record offset table."""

    name: str
    attributes: int = 0
    version: int = 0
    creation_date: int = 0
    modification_date: int = 0
    db_type: str = ""
    creator: str = ""
    record_offsets: tuple[int, ...] = ()

    @property
    def record_count(self) -> int:
        return len(self.record_offsets)


@dataclass(frozen=True)
class PalmDocHeader:
    compression: Compression
    text_length: int = 0
    record_count: int = 0
    record_size: int = 0  # informational
    encryption_type: int = 0  # informational, never decrypted


@dataclass(frozen=True)
class MobiHeader:
    identifier_valid: bool = False
    header_length: int = 0
    mobi_type: int = 0
    text_encoding: TextEncoding = TextEncoding.UTF8
    first_image_record: int = 0
    full_title: str = ""
    exth_flags: int = 0

    @property
    def has_exth(self) -> bool:
        return bool(self.exth_flags & 0x40)


@dataclass(frozen=True)
class ExthMetadata:
    author: str = ""
    publisher: str = ""
    description: str = ""
    isbn: str = ""
    language: str = ""


@dataclass(frozen=True)
class Metadata:
    title: str
    author: str = "Unknown"
    publisher: str = ""
    language: str = "en"
    isbn: str = ""
    description: str = ""

    @classmethod
    def merge(
        cls, container_name: str, mobi: MobiHeader, exth: ExthMetadata
    ) -> Metadata:
        return cls(
            title=mobi.full_title or container_name,
            author=exth.author or "Unknown",
            publisher=exth.publisher,
            language=exth.language or "en",
            isbn=exth.isbn,
            description=exth.description,
        )


@dataclass(frozen=True)
class Chapter:
    """One segment of the assembled markup."""

    index: int
    title: str
    plain_text: str = ""
    raw_markup: str = ""

    @property
    def id(self) -> str:
        return f"chapter-{self.index}"


@dataclass(frozen=True)
class Document:
    """Full parsed book structure."""

    metadata: Metadata
    chapters: tuple[Chapter, ...] = field(default_factory=tuple)
    raw_markup: str = ""
    css: str = ""

    @property
    def total_chapters(self) -> int:
        return len(self.chapters)

    @property
    def toc(self) -> list[tuple[int, str]]:
        return [(ch.index, ch.title) for ch in self.chapters]

    def chapter(self, index: int) -> Chapter | None:
        if 0 <= index < len(self.chapters):
            return self.chapters[index]
        return None

    def to_dict(self) -> dict:
        return {
            "metadata": asdict(self.metadata),
            "chapters": [
                {
                    "id": ch.id,
                    "title": ch.title,
                    "plain_text": ch.plain_text,
                    "raw_markup": ch.raw_markup,
                }
                for ch in self.chapters
            ],
            "raw_markup": self.raw_markup,
            "css": self.css,
        }
