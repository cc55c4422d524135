from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from releasefile.common.errors import IntegrityMismatch
from releasefile.common.hashing import DEFAULT_CHUNK_SIZE
from releasefile.common.manifest_security import validate_artifact_path
from releasefile.common.types import ReleaseEntry
from releasefile.manifest.builder import build_from_file


log = logging.getLogger(__name__)


def verify_file(entry: ReleaseEntry, path: Path | str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
    actual = build_from_file(path, chunk_size=chunk_size)
    if actual.length != entry.length:
        raise IntegrityMismatch(
            f"Size mismatch for {entry.filename_or_url}: {actual.length} != {entry.length}"
        )
    if actual.sha256 != entry.sha256:
        raise IntegrityMismatch(
            f"Checksum mismatch for {entry.filename_or_url}: {actual.sha256_hex} != {entry.sha256_hex}"
        )
    log.debug("Verified %s", path)


def verify_directory(
    entries: Iterable[ReleaseEntry],
    directory: Path | str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> list[Path]:
    directory = Path(directory)
    verified: list[Path] = []
    for entry in entries:
        if entry.is_url:
            log.debug("Skipping remote artifact %s", entry.filename_or_url)
            continue
        path = directory.joinpath(*validate_artifact_path(entry.filename_or_url).parts)
        verify_file(entry, path, chunk_size=chunk_size)
        verified.append(path)
    return verified
