from __future__ import annotations

from releasefile.common import hexcodec
from releasefile.common.names import encode_name
from releasefile.common.types import FULL_PERCENTAGE, ReleaseEntry
from releasefile.common.versions import format_version
from releasefile.manifest.parser import PACKAGE_TYPE_DELTA, PACKAGE_TYPE_FULL


def format_entry(entry: ReleaseEntry) -> str:
    fields = [
        hexcodec.encode(entry.sha256),
        encode_name(entry.filename_or_url),
        format_version(entry.version),
        str(entry.length),
        PACKAGE_TYPE_DELTA if entry.is_delta else PACKAGE_TYPE_FULL,
    ]
    if entry.percentage != FULL_PERCENTAGE:
        fields.append(f"{entry.percentage}%")
    return " ".join(fields)
