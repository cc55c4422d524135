from __future__ import annotations

import hashlib
from typing import BinaryIO, NamedTuple


DEFAULT_CHUNK_SIZE = 1024 * 1024


class StreamDigest(NamedTuple):
    digest: bytes
    length: int


def sha256_stream(fh: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE) -> StreamDigest:
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    h = hashlib.sha256()
    length = 0
    while True:
        data = fh.read(chunk_size)
        if not data:
            break
        h.update(data)
        length += len(data)
    return StreamDigest(h.digest(), length)

