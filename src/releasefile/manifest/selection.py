from __future__ import annotations

import uuid
from typing import Iterable

import semver

from releasefile.common.types import ReleaseEntry
from releasefile.common.versions import parse_version


def latest_full_release(entries: Iterable[ReleaseEntry]) -> ReleaseEntry | None:
    latest: ReleaseEntry | None = None
    for entry in entries:
        if entry.is_delta:
            continue
        if latest is None or entry.version > latest.version:
            latest = entry
    return latest


def entries_for_user(entries: Iterable[ReleaseEntry], user_id: uuid.UUID) -> list[ReleaseEntry]:
    return [entry for entry in entries if entry.is_offered_to(user_id)]


def deltas_after(entries: Iterable[ReleaseEntry], version: semver.Version | str) -> list[ReleaseEntry]:
    """Delta packages newer than ``version``, in the order they apply."""
    if isinstance(version, str):
        version = parse_version(version)
    newer = [entry for entry in entries if entry.is_delta and entry.version > version]
    return sorted(newer, key=lambda entry: entry.version)
