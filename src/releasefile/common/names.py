"""Percent-encoding of artifact names in manifest lines.

Local names are stored decoded and written percent-encoded so a name never
contains the whitespace that separates manifest fields. Remote references are
literal ``https:`` URLs and pass through untouched.

The transform is exact for ASCII/UTF-8 names without control characters. A
local file whose name itself starts with ``https:`` cannot be represented.
"""

from __future__ import annotations

import re
from urllib.parse import quote, unquote, urlsplit

from releasefile.common.errors import InvalidName


SCHEME_MARKER = "https:"

_SCHEME_RE = re.compile(r"^https:")
_WHITESPACE_RE = re.compile(r"\s")

# Path characters left as-is when encoding a local name.
_SAFE_PATH_CHARS = "/!$&'()*+,;=:@"


def is_url(name: str) -> bool:
    return bool(_SCHEME_RE.match(name))


def validate_url(url: str) -> str:
    if _WHITESPACE_RE.search(url):
        raise InvalidName(f"URL contains whitespace: {url!r}")
    try:
        parsed = urlsplit(url)
        # Accessing port validates it.
        host, _port = parsed.hostname, parsed.port
    except ValueError as exc:
        raise InvalidName(f"Malformed URL {url!r}: {exc}") from exc
    if parsed.scheme.lower() != "https":
        raise InvalidName(f"URL must use the https scheme: {url!r}")
    if not parsed.netloc or not host:
        raise InvalidName(f"URL has no host: {url!r}")
    return url


def decode_name(raw: str) -> str:
    if is_url(raw):
        return validate_url(raw)

    if "?" in raw or "#" in raw:
        raise InvalidName(f"Unencoded '?' or '#' in file name: {raw!r}")
    # Decode through a local file URI; its path always gains one leading "/".
    path = urlsplit("file:///" + raw).path
    if path.startswith("/"):
        path = path[1:]
    try:
        name = unquote(path, encoding="utf-8", errors="strict")
    except UnicodeDecodeError as exc:
        raise InvalidName(f"File name is not valid percent-encoded UTF-8: {raw!r}") from exc
    if not name:
        raise InvalidName("File name is empty.")
    return name


def encode_name(name: str) -> str:
    if is_url(name):
        return name
    return quote(name, safe=_SAFE_PATH_CHARS, encoding="utf-8", errors="strict")
