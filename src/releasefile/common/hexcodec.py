from __future__ import annotations

import re

from releasefile.common.errors import MalformedHex


_HEX_RE = re.compile(r"[0-9a-fA-F]*")


def encode(data: bytes) -> str:
    return bytes(data).hex()


def decode(text: str) -> bytes:
    if not _HEX_RE.fullmatch(text):
        raise MalformedHex(f"Not a hex string: {text!r}")
    if len(text) % 2:
        raise MalformedHex(f"Hex string has odd length {len(text)}: {text!r}")
    return bytes.fromhex(text)
