"""Parsing of single manifest lines.

Fields are checked in a fixed order so that a line with several bad fields
always reports the same error: token count, package type, name, version,
length, percentage, and finally the hash.
"""

from __future__ import annotations

import logging
import re

from releasefile.common import hexcodec
from releasefile.common.errors import (
    InvalidEntryFormat,
    InvalidLength,
    InvalidPackageType,
    InvalidPercentage,
    MalformedHash,
    MalformedHex,
)
from releasefile.common.names import decode_name
from releasefile.common.types import FULL_PERCENTAGE, MAX_LENGTH, SHA256_SIZE, ReleaseEntry
from releasefile.common.versions import parse_version


log = logging.getLogger(__name__)

PACKAGE_TYPE_DELTA = "delta"
PACKAGE_TYPE_FULL = "full"

_DIGITS_RE = re.compile(r"[0-9]+")


def _parse_package_type(token: str) -> bool:
    if token == PACKAGE_TYPE_DELTA:
        return True
    if token == PACKAGE_TYPE_FULL:
        return False
    raise InvalidPackageType(f"Package type must be 'delta' or 'full', got {token!r}")


def _parse_length(token: str) -> int:
    if not _DIGITS_RE.fullmatch(token):
        raise InvalidLength(f"Size must be a non-negative integer, got {token!r}")
    value = int(token)
    if value > MAX_LENGTH:
        raise InvalidLength(f"Size does not fit 64 bits: {token}")
    return value


def _parse_percentage(token: str | None) -> int:
    if token is None:
        return FULL_PERCENTAGE
    if not token.endswith("%"):
        raise InvalidPercentage(f"Release percentage must end with '%', got {token!r}")
    digits = token[:-1]
    if not _DIGITS_RE.fullmatch(digits):
        raise InvalidPercentage(f"Release percentage is not a non-negative integer: {token!r}")
    value = int(digits)
    if value > FULL_PERCENTAGE:
        raise InvalidPercentage(f"Release percentage must be within 0-100, got {token!r}")
    return value


def _parse_sha256(token: str) -> bytes:
    try:
        digest = hexcodec.decode(token)
    except MalformedHex as exc:
        raise MalformedHash(f"Invalid SHA256 hash {token!r}: {exc}") from exc
    if len(digest) != SHA256_SIZE:
        raise MalformedHash(f"SHA256 hash must be {SHA256_SIZE * 2} hex characters, got {len(token)}")
    return digest


def parse_line(line: str) -> ReleaseEntry:
    tokens = line.split()
    if len(tokens) not in (5, 6):
        raise InvalidEntryFormat(f"Expected 5 or 6 fields in release entry, found {len(tokens)}: {line.strip()!r}")

    hash_token, name_token, version_token, length_token, type_token = tokens[:5]
    percentage_token = tokens[5] if len(tokens) == 6 else None

    is_delta = _parse_package_type(type_token)
    filename_or_url = decode_name(name_token)
    version = parse_version(version_token)
    length = _parse_length(length_token)
    percentage = _parse_percentage(percentage_token)
    sha256 = _parse_sha256(hash_token)

    entry = ReleaseEntry(
        sha256=sha256,
        filename_or_url=filename_or_url,
        version=version,
        length=length,
        is_delta=is_delta,
        percentage=percentage,
    )
    log.debug("Parsed release entry %s %s", entry.filename_or_url, entry.version)
    return entry
