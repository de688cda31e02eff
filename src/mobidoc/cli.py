"""mobidoc - inspect MOBI/PalmDOC ebooks from the command line."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from mobidoc.config import AppConfig, load_config
from mobidoc.errors import MobiParserError
from mobidoc.mobi.parser import is_mobi_file
from mobidoc.models import Document
from mobidoc.parsers.mobi_parser import MobiParser

log = logging.getLogger("mobidoc.cli")

EXIT_ERROR = 1
EXIT_NOT_MOBI = 2


def _setup_logging(config: AppConfig, verbose: bool = False) -> None:
    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    handler = logging.FileHandler(config.log_path, encoding="utf-8")
    handler.setFormatter(formatter)
    root = logging.getLogger("mobidoc")
    for old in list(root.handlers):
        root.removeHandler(old)
        old.close()
    root.setLevel(logging.DEBUG if verbose else config.log_level)
    root.addHandler(handler)
    if verbose:
        stream = logging.StreamHandler(sys.stderr)
        stream.setFormatter(formatter)
        root.addHandler(stream)


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mobidoc", description="Decode a MOBI/PalmDOC ebook."
    )
    parser.add_argument("file", type=Path, help="path to a .mobi/.prc/.azw file")
    parser.add_argument(
        "--json", action="store_true", help="print the document as JSON"
    )
    parser.add_argument(
        "--markup",
        action="store_true",
        help="include raw markup and CSS in JSON output",
    )
    parser.add_argument(
        "--chapter", type=int, default=None, help="print one chapter's text"
    )
    parser.add_argument(
        "--force", action="store_true", help="parse even without a MOBI signature"
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def _to_json(document: Document, include_markup: bool) -> str:
    payload = document.to_dict()
    if not include_markup:
        payload.pop("raw_markup")
        payload.pop("css")
        for ch in payload["chapters"]:
            ch.pop("raw_markup")
    return json.dumps(payload, ensure_ascii=False, indent=2)


def _summary(document: Document) -> str:
    meta = document.metadata
    lines = [
        f"Title:     {meta.title}",
        f"Author:    {meta.author}",
        f"Language:  {meta.language}",
    ]
    if meta.publisher:
        lines.append(f"Publisher: {meta.publisher}")
    if meta.isbn:
        lines.append(f"ISBN:      {meta.isbn}")
    lines.append(f"Chapters:  {document.total_chapters}")
    for index, title in document.toc:
        lines.append(f"  {index + 1:>4}. {title}")
    return "\n".join(lines)


def run(argv: Optional[list[str]] = None, config: Optional[AppConfig] = None) -> int:
    args = _build_arg_parser().parse_args(argv)
    config = config or load_config()
    _setup_logging(config, verbose=args.verbose)

    file_path: Path = args.file.expanduser()
    try:
        data = file_path.read_bytes()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    if not args.force and not is_mobi_file(data):
        print(f"Error: {file_path} is not a MOBI file", file=sys.stderr)
        return EXIT_NOT_MOBI

    try:
        document = MobiParser(config).parse_bytes(data, name=file_path.stem)
    except MobiParserError as e:
        log.error("Failed to parse %s: %s", file_path, e)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    if args.chapter is not None:
        chapter = document.chapter(args.chapter)
        if chapter is None:
            print(
                f"Error: chapter {args.chapter} out of range "
                f"(0-{document.total_chapters - 1})",
                file=sys.stderr,
            )
            return EXIT_ERROR
        print(chapter.title)
        print()
        print(chapter.plain_text)
    elif args.json:
        print(_to_json(document, args.markup))
    else:
        print(_summary(document))
    return 0


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
