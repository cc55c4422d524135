from __future__ import annotations

import dataclasses
import uuid
from dataclasses import dataclass
from pathlib import PurePosixPath
from urllib.parse import unquote, urlsplit

import semver

from releasefile.common import hexcodec
from releasefile.common.errors import (
    InvalidLength,
    InvalidName,
    InvalidPercentage,
    InvalidVersion,
    MalformedHash,
)
from releasefile.common.names import is_url, validate_url
from releasefile.common.versions import ZERO_VERSION, parse_package_filename, parse_version


SHA256_SIZE = 32
MAX_LENGTH = 2**64 - 1
FULL_PERCENTAGE = 100
_UINT32_MAX = 0xFFFFFFFF


@dataclass(frozen=True)
class ReleaseEntry:
    """One artifact line of a release manifest.

    Instances are immutable and validated on construction; use ``evolve`` to
    derive a changed copy.
    """

    sha256: bytes
    filename_or_url: str
    version: semver.Version
    length: int
    is_delta: bool = False
    percentage: int = FULL_PERCENTAGE

    def __post_init__(self) -> None:
        if not isinstance(self.sha256, (bytes, bytearray)) or len(self.sha256) != SHA256_SIZE:
            raise MalformedHash(f"SHA256 digest must be {SHA256_SIZE} bytes.")
        object.__setattr__(self, "sha256", bytes(self.sha256))

        name = self.filename_or_url
        if not isinstance(name, str) or not name:
            raise InvalidName("Artifact name cannot be empty.")
        if is_url(name):
            validate_url(name)
        else:
            try:
                name.encode("utf-8")
            except UnicodeEncodeError as exc:
                raise InvalidName(f"Artifact name is not valid UTF-8: {name!r}") from exc

        if isinstance(self.version, str):
            object.__setattr__(self, "version", parse_version(self.version))
        elif not isinstance(self.version, semver.Version):
            raise InvalidVersion(f"Unsupported version value: {self.version!r}")

        if isinstance(self.length, bool) or not isinstance(self.length, int):
            raise InvalidLength(f"Length must be an integer: {self.length!r}")
        if not 0 <= self.length <= MAX_LENGTH:
            raise InvalidLength(f"Length out of range: {self.length}")

        if isinstance(self.percentage, bool) or not isinstance(self.percentage, int):
            raise InvalidPercentage(f"Percentage must be an integer: {self.percentage!r}")
        if not 0 <= self.percentage <= FULL_PERCENTAGE:
            raise InvalidPercentage(f"Percentage must be within 0-100: {self.percentage}")

        object.__setattr__(self, "is_delta", bool(self.is_delta))

    @classmethod
    def for_file(cls, sha256: bytes, filename: str, length: int) -> "ReleaseEntry":
        return cls(sha256=sha256, filename_or_url=filename, version=ZERO_VERSION, length=length)

    def evolve(self, **changes) -> "ReleaseEntry":
        return dataclasses.replace(self, **changes)

    @property
    def sha256_hex(self) -> str:
        return hexcodec.encode(self.sha256)

    @property
    def is_url(self) -> bool:
        return is_url(self.filename_or_url)

    @property
    def is_full(self) -> bool:
        return not self.is_delta

    @property
    def basename(self) -> str:
        if self.is_url:
            return unquote(PurePosixPath(urlsplit(self.filename_or_url).path).name)
        return PurePosixPath(self.filename_or_url.replace("\\", "/")).name

    @property
    def package_name(self) -> str:
        parsed = parse_package_filename(self.basename)
        if parsed is not None:
            return parsed.name
        return PurePosixPath(self.basename).stem

    def is_offered_to(self, user_id: uuid.UUID) -> bool:
        # A user falls in the rollout when the first field of their id, scaled
        # to [0, 1], is below the release fraction.
        if self.percentage >= FULL_PERCENTAGE:
            return True
        if self.percentage <= 0:
            return False
        return (user_id.time_low / _UINT32_MAX) < (self.percentage / FULL_PERCENTAGE)
