"""Whole-manifest parsing and formatting.

A manifest (``RELEASES``) is a UTF-8 text file with one release entry per
line. ``#`` starts a comment that runs to the end of the line; blank lines
are ignored. Parsing is fail-fast: the first bad line aborts the whole
document and nothing parsed before it is returned.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

from releasefile.common.errors import IoFailure, ParseError
from releasefile.common.types import ReleaseEntry
from releasefile.manifest.formatter import format_entry
from releasefile.manifest.parser import parse_line


log = logging.getLogger(__name__)

HEADER = (
    "# SHA256 of the file                                             "
    "Name       Version Size  [delta/full] release%"
)

_COMMENT_RE = re.compile(r"#.*$")


def parse_document(content: str) -> list[ReleaseEntry]:
    entries: list[ReleaseEntry] = []
    # Only LF and CRLF end a line; other Unicode breaks stay inside it.
    for line_number, raw in enumerate(content.split("\n"), start=1):
        if raw.endswith("\r"):
            raw = raw[:-1]
        line = _COMMENT_RE.sub("", raw)
        if not line.strip():
            continue
        try:
            entries.append(parse_line(line))
        except ParseError as exc:
            exc.line_number = line_number
            raise
    log.debug("Parsed %d release entries", len(entries))
    return entries


def format_document(entries: Iterable[ReleaseEntry]) -> str:
    return HEADER + "\n" + "\n".join(format_entry(entry) for entry in entries)


def read_manifest(path: Path) -> list[ReleaseEntry]:
    try:
        # Tolerate a UTF-8 BOM left behind by Windows editors.
        content = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise IoFailure(f"Could not read manifest {path}: {exc}") from exc
    return parse_document(content)


def write_manifest(path: Path, entries: Iterable[ReleaseEntry]) -> None:
    text = format_document(entries)
    tmp = path.with_name(path.name + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tmp.open("w", encoding="utf-8", newline="\n") as fh:
            fh.write(text)
        tmp.replace(path)
    except OSError as exc:
        raise IoFailure(f"Could not write manifest {path}: {exc}") from exc
    log.info("Wrote manifest %s", path)
