"""Tests for data models."""

from mobidoc.models import (
    Chapter,
    Compression,
    Document,
    ExthMetadata,
    Metadata,
    MobiHeader,
    TextEncoding,
)


class TestEnums:
    def test_compression_from_code(self):
        assert Compression.from_code(1) is Compression.NONE
        assert Compression.from_code(2) is Compression.PALMDOC
        assert Compression.from_code(17480) is Compression.HUFF_CDIC_UNSUPPORTED
        assert Compression.from_code(0) is Compression.HUFF_CDIC_UNSUPPORTED

    def test_text_encoding(self):
        assert TextEncoding.from_code(1252) is TextEncoding.CP1252
        assert TextEncoding.from_code(65001) is TextEncoding.UTF8
        assert TextEncoding.from_code(0) is TextEncoding.UTF8
        assert TextEncoding.CP1252.codec == "cp1252"


class TestMobiHeader:
    def test_defaults(self):
        header = MobiHeader()
        assert not header.identifier_valid
        assert header.text_encoding is TextEncoding.UTF8
        assert not header.has_exth

    def test_exth_flag(self):
        assert MobiHeader(exth_flags=0x50).has_exth
        assert not MobiHeader(exth_flags=0x10).has_exth


class TestMetadata:
    def test_merge_prefers_embedded_values(self):
        meta = Metadata.merge(
            "CONTAINER",
            MobiHeader(identifier_valid=True, full_title="Emma"),
            ExthMetadata(author="Jane Austen", language="en-GB", isbn="123"),
        )
        assert meta.title == "Emma"
        assert meta.author == "Jane Austen"
        assert meta.language == "en-GB"
        assert meta.isbn == "123"

    def test_merge_fallbacks(self):
        meta = Metadata.merge("CONTAINER", MobiHeader(), ExthMetadata())
        assert meta.title == "CONTAINER"
        assert meta.author == "Unknown"
        assert meta.language == "en"
        assert meta.description == ""


class TestDocument:
    def _doc(self) -> Document:
        return Document(
            metadata=Metadata(title="T"),
            chapters=(
                Chapter(index=0, title="One", plain_text="a", raw_markup="<p>a</p>"),
                Chapter(index=1, title="Two", plain_text="b", raw_markup="<p>b</p>"),
            ),
            raw_markup="<p>a</p><p>b</p>",
        )

    def test_chapter_ids(self):
        assert [ch.id for ch in self._doc().chapters] == ["chapter-0", "chapter-1"]

    def test_toc(self):
        doc = self._doc()
        assert doc.total_chapters == 2
        assert doc.toc == [(0, "One"), (1, "Two")]

    def test_chapter_lookup(self):
        doc = self._doc()
        assert doc.chapter(1).title == "Two"
        assert doc.chapter(2) is None
        assert doc.chapter(-1) is None

    def test_to_dict(self):
        payload = self._doc().to_dict()
        assert payload["metadata"]["title"] == "T"
        assert payload["metadata"]["author"] == "Unknown"
        assert payload["chapters"][1] == {
            "id": "chapter-1",
            "title": "Two",
            "plain_text": "b",
            "raw_markup": "<p>b</p>",
        }
        assert payload["css"] == ""

    def test_empty_defaults(self):
        doc = Document(metadata=Metadata(title="T"))
        assert doc.chapters == ()
        assert doc.toc == []
