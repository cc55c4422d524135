"""Release manifest parsing, formatting and file hashing."""

from releasefile.manifest.builder import build_from_directory, build_from_file, build_from_package
from releasefile.manifest.document import (
    HEADER,
    format_document,
    parse_document,
    read_manifest,
    write_manifest,
)
from releasefile.manifest.formatter import format_entry
from releasefile.manifest.parser import parse_line

__all__ = [
    "HEADER",
    "build_from_directory",
    "build_from_file",
    "build_from_package",
    "format_document",
    "format_entry",
    "parse_document",
    "parse_line",
    "read_manifest",
    "write_manifest",
]
