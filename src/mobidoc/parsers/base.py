"""Base parser interface for file-backed ebook formats."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from mobidoc.models import Document


class BaseParser(ABC):
    """Abstract base for format-specific parsers."""

    SUPPORTED_EXTENSIONS: tuple[str, ...] = ()

    @abstractmethod
    def parse_bytes(self, data: bytes, name: str = "") -> Document:
        """Parse an in-memory buffer and return the structured document."""

    def parse(self, file_path: Path) -> Document:
        """Read ``file_path`` and parse its contents."""
        return self.parse_bytes(file_path.read_bytes(), name=file_path.stem)

    @classmethod
    def can_handle(cls, file_path: Path) -> bool:
        return file_path.suffix.lower() in cls.SUPPORTED_EXTENSIONS


def get_parser(file_path: Path) -> BaseParser:
    """Return the appropriate parser for a file."""
    from mobidoc.parsers.mobi_parser import MobiParser

    parsers: list[type[BaseParser]] = [MobiParser]
    for parser_cls in parsers:
        if parser_cls.can_handle(file_path):
            return parser_cls()

    supported = []
    for p in parsers:
        supported.extend(p.SUPPORTED_EXTENSIONS)
    raise ValueError(
        f"Unsupported format: {file_path.suffix}. Supported: {', '.join(supported)}"
    )
