from releasefile.common.config import RuntimeConfig
from releasefile.common.errors import (
    FeedError,
    IntegrityMismatch,
    InvalidEntryFormat,
    InvalidLength,
    InvalidName,
    InvalidPackageType,
    InvalidPercentage,
    InvalidVersion,
    IoFailure,
    MalformedHash,
    MalformedHex,
    ParseError,
    ReleaseFileError,
    SignatureError,
    UnsafePath,
)
from releasefile.common.types import ReleaseEntry

__all__ = [
    "RuntimeConfig",
    "ReleaseEntry",
    "ReleaseFileError",
    "ParseError",
    "MalformedHex",
    "MalformedHash",
    "InvalidName",
    "InvalidVersion",
    "InvalidLength",
    "InvalidPackageType",
    "InvalidPercentage",
    "InvalidEntryFormat",
    "IoFailure",
    "IntegrityMismatch",
    "FeedError",
    "SignatureError",
    "UnsafePath",
]
