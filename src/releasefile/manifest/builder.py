"""Release entries computed from files on disk."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from releasefile.common.errors import InvalidName, IoFailure, UnsafePath
from releasefile.common.hashing import DEFAULT_CHUNK_SIZE, sha256_stream
from releasefile.common.manifest_security import validate_artifact_path
from releasefile.common.types import ReleaseEntry
from releasefile.common.versions import parse_package_filename


log = logging.getLogger(__name__)

DEFAULT_PACKAGE_PATTERN = "*.nupkg"


def build_from_file(path: Path | str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> ReleaseEntry:
    """Hash ``path`` and return a full, fully-released entry at version 0.0.0.

    Only ``IoFailure`` is raised, including for a file name a manifest cannot
    hold (not valid UTF-8, or starting with ``https:``).

    The recorded length is the number of bytes actually hashed. If the file
    changes size while it is read, the mismatch is logged and the streamed
    count wins, so digest and length always describe the same bytes.
    """
    path = Path(path)
    try:
        with path.open("rb") as fh:
            stat_size = os.fstat(fh.fileno()).st_size
            digest, length = sha256_stream(fh, chunk_size=chunk_size)
    except OSError as exc:
        raise IoFailure(f"Could not hash {path}: {exc}") from exc

    if length != stat_size:
        log.warning(
            "Size of %s changed while hashing: stat=%d streamed=%d; using streamed size.",
            path,
            stat_size,
            length,
        )
    log.debug("Hashed %s (%d bytes)", path, length)
    try:
        return ReleaseEntry.for_file(digest, path.name, length)
    except InvalidName as exc:
        raise IoFailure(f"File name {path.name!r} cannot be recorded in a manifest: {exc}") from exc


def build_from_package(path: Path | str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> ReleaseEntry:
    entry = build_from_file(path, chunk_size=chunk_size)
    parsed = parse_package_filename(entry.filename_or_url)
    if parsed is None:
        log.debug("%s does not follow the package naming convention", entry.filename_or_url)
        return entry
    return entry.evolve(version=parsed.version, is_delta=parsed.is_delta)


def build_from_directory(
    directory: Path | str,
    pattern: str = DEFAULT_PACKAGE_PATTERN,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> list[ReleaseEntry]:
    directory = Path(directory)
    if not directory.is_dir():
        raise IoFailure(f"Not a directory: {directory}")
    try:
        candidates = [p for p in directory.glob(pattern) if p.is_file()]
    except OSError as exc:
        raise IoFailure(f"Could not list {directory}: {exc}") from exc

    # Names are recorded relative to the directory so recursive patterns keep
    # their subdirectories.
    relative: dict[Path, str] = {}
    for path in candidates:
        try:
            relative[path] = validate_artifact_path(path.relative_to(directory).as_posix()).as_posix()
        except (ValueError, UnsafePath) as exc:
            raise IoFailure(f"Pattern {pattern!r} matched {path} outside {directory}") from exc

    entries: list[ReleaseEntry] = []
    for path in sorted(candidates, key=relative.__getitem__):
        entry = build_from_package(path, chunk_size=chunk_size)
        if relative[path] != entry.filename_or_url:
            try:
                entry = entry.evolve(filename_or_url=relative[path])
            except InvalidName as exc:
                raise IoFailure(f"Path {relative[path]!r} cannot be recorded in a manifest: {exc}") from exc
        entries.append(entry)
    log.info("Built %d release entries from %s", len(entries), directory)
    return entries
