"""MOBI parser backed by the native PalmDOC decoder."""

from __future__ import annotations

from typing import Optional

from mobidoc.config import AppConfig
from mobidoc.mobi.parser import parse_mobi
from mobidoc.models import Document

from .base import BaseParser


class MobiParser(BaseParser):
    SUPPORTED_EXTENSIONS = (".mobi", ".prc", ".azw", ".pdb")

    def __init__(self, config: Optional[AppConfig] = None) -> None:
        self._config = config

    def parse_bytes(self, data: bytes, name: str = "") -> Document:
        kwargs = {}
        if self._config is not None:
            kwargs = {
                "duplicate_window": self._config.duplicate_window,
                "max_title_length": self._config.max_title_length,
            }
        # File name stands in when the container carries no name
        return parse_mobi(data, fallback_title=name, **kwargs)
