"""Split assembled MOBI markup into chapters."""

from __future__ import annotations

import logging
import re
import unicodedata
import warnings
from dataclasses import dataclass, replace
from typing import Iterator, Optional

from bs4 import BeautifulSoup, XMLParsedAsHTMLWarning

from mobidoc.models import Chapter

warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)

log = logging.getLogger(__name__)

DUPLICATE_WINDOW = 100
MAX_TITLE_LENGTH = 200
FALLBACK_TITLE = "Content"

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")
_TAG = re.compile(r"<[^>]+>")
_WHITESPACE = re.compile(r"\s+")
_STYLE_BLOCK = re.compile(r"<style[^>]*>.*?</style>", re.IGNORECASE | re.DOTALL)
_ENTITIES = (
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
)


@dataclass(frozen=True)
class HeadingRule:
    """Matches ``<tag ...>title</closing>`` where the title holds no tags."""

    tags: tuple[str, ...]
    class_contains: Optional[str] = None
    max_title_length: int = MAX_TITLE_LENGTH


@dataclass(frozen=True)
class Marker:
    position: int
    title: str


HEADING_RULES: tuple[HeadingRule, ...] = (
    HeadingRule(tags=("h1", "h2")),
    HeadingRule(tags=("p",), class_contains="chapter"),
)


def clean_text(html: str) -> str:
    """Strip tags, decode the common entities and collapse whitespace."""
    text = _TAG.sub(" ", html)
    for entity, char in _ENTITIES:
        text = text.replace(entity, char)
    return _WHITESPACE.sub(" ", text).strip()


def strip_control_chars(text: str) -> str:
    return _CONTROL_CHARS.sub("", text)


def extract_css(html: str) -> str:
    """Concatenate the contents of every closed ``<style>`` element."""
    css = []
    for block in _STYLE_BLOCK.finditer(html):
        # only closed blocks; lxml runs an unclosed <style> to the end of input
        tag = BeautifulSoup(block.group(0), "lxml").find("style")
        if tag is not None:
            css.append(tag.get_text() + "\n")
    return "".join(css)


def _title_length(title: str) -> int:
    # composed form approximates user-perceived characters
    return len(unicodedata.normalize("NFC", title))


def _starts_with_tag(html: str, pos: int, tags: tuple[str, ...]) -> str:
    for tag in tags:
        if html[pos : pos + len(tag)].lower() == tag:
            return tag
    return ""


def _class_matches(attrs: str, needle: str) -> bool:
    attrs = attrs.lower()
    start = attrs.find('class="')
    while start != -1:
        value_start = start + len('class="')
        value_end = attrs.find('"', value_start)
        if value_end == -1:
            return False
        if needle in attrs[value_start:value_end]:
            return True
        start = attrs.find('class="', start + 1)
    return False


def _match_at(html: str, lt: int, rule: HeadingRule) -> Optional[tuple[int, str]]:
    """Try ``rule`` at the ``<`` found at ``lt``; return (end, title) on success."""
    tag = _starts_with_tag(html, lt + 1, rule.tags)
    if not tag:
        return None
    gt = html.find(">", lt + 1)
    if gt == -1:
        return None
    if rule.class_contains and not _class_matches(
        html[lt + 1 + len(tag) : gt], rule.class_contains
    ):
        return None

    title_end = html.find("<", gt + 1)
    if title_end == -1 or title_end == gt + 1:
        return None
    if html[title_end + 1 : title_end + 2] != "/":
        return None
    closing = _starts_with_tag(html, title_end + 2, rule.tags)
    close_gt = title_end + 2 + len(closing)
    if not closing or html[close_gt : close_gt + 1] != ">":
        return None
    return close_gt + 1, html[gt + 1 : title_end]


def find_markers(html: str, rule: HeadingRule) -> Iterator[Marker]:
    """Yield non-overlapping heading matches for ``rule`` in document order."""
    pos = 0
    while True:
        lt = html.find("<", pos)
        if lt == -1:
            return
        match = _match_at(html, lt, rule)
        if match is None:
            pos = lt + 1
            continue
        end, title = match
        pos = end
        title = title.strip()
        if not title or _title_length(title) >= rule.max_title_length:
            continue
        yield Marker(position=lt, title=clean_text(title))


def dedupe_markers(
    markers: list[Marker], window: int = DUPLICATE_WINDOW
) -> list[Marker]:
    """Sort markers and drop any within ``window`` chars of its predecessor."""
    ordered = sorted(markers, key=lambda m: m.position)
    return [
        m
        for i, m in enumerate(ordered)
        if i == 0 or m.position - ordered[i - 1].position > window
    ]


def segment_chapters(
    html: str,
    fallback_title: str = "",
    duplicate_window: int = DUPLICATE_WINDOW,
    max_title_length: int = MAX_TITLE_LENGTH,
) -> list[Chapter]:
    """Split ``html`` at heading markers.

    Slices are contiguous and cover ``html`` exactly; text before the first
    marker belongs to the first chapter.
    """
    rules = HEADING_RULES
    if max_title_length != MAX_TITLE_LENGTH:
        rules = tuple(replace(r, max_title_length=max_title_length) for r in rules)

    found: list[Marker] = []
    for rule in rules:
        found.extend(find_markers(html, rule))
    markers = dedupe_markers(found, duplicate_window)
    log.debug("Found %d heading markers, kept %d", len(found), len(markers))

    if not markers:
        return [
            Chapter(
                index=0,
                title=fallback_title or FALLBACK_TITLE,
                plain_text=clean_text(html),
                raw_markup=html,
            )
        ]

    chapters: list[Chapter] = []
    for i, marker in enumerate(markers):
        start = 0 if i == 0 else marker.position
        end = markers[i + 1].position if i + 1 < len(markers) else len(html)
        chunk = html[start:end]
        chapters.append(
            Chapter(
                index=i,
                title=marker.title,
                plain_text=clean_text(chunk),
                raw_markup=chunk,
            )
        )
    return chapters
