from __future__ import annotations

import re
from pathlib import PurePosixPath
from typing import NamedTuple

import semver

from releasefile.common.errors import InvalidVersion


ZERO_VERSION = semver.Version(0, 0, 0)

# <name>-<semver>-<full|delta>.<ext>, e.g. MyApp-1.2.0-beta.1-delta.nupkg
_PACKAGE_FILENAME_RE = re.compile(
    r"^(?P<name>.+?)-(?P<version>\d+\.\d+\.\d+(?:-[0-9A-Za-z.-]+?)?(?:\+[0-9A-Za-z.-]+?)?)"
    r"-(?P<kind>full|delta)\.(?P<ext>[^.]+)$"
)


class PackageFilename(NamedTuple):
    name: str
    version: semver.Version
    is_delta: bool


def parse_version(text: str) -> semver.Version:
    try:
        return semver.Version.parse(text)
    except (TypeError, ValueError) as exc:
        raise InvalidVersion(f"Invalid semantic version {text!r}: {exc}") from exc


def format_version(version: semver.Version) -> str:
    return str(version)


def parse_package_filename(filename: str) -> PackageFilename | None:
    """Split a conventionally named package file into name, version and kind.

    Returns None when the basename does not follow the convention or its
    version part is not a valid semantic version.
    """
    basename = PurePosixPath(filename.replace("\\", "/")).name
    match = _PACKAGE_FILENAME_RE.match(basename)
    if match is None:
        return None
    try:
        version = semver.Version.parse(match.group("version"))
    except ValueError:
        return None
    return PackageFilename(
        name=match.group("name"),
        version=version,
        is_delta=match.group("kind") == "delta",
    )
