from __future__ import annotations


class ReleaseFileError(Exception):
    """Base class for every error raised by releasefile.

    Each subclass carries a stable ``kind`` tag so callers can dispatch on it
    without importing the concrete class.
    """

    kind = "ReleaseFileError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class MalformedHex(ReleaseFileError, ValueError):
    kind = "MalformedHex"


class ParseError(ReleaseFileError, ValueError):
    """Raised when manifest text does not match the entry grammar."""

    kind = "ParseError"
    line_number: int | None = None

    def __str__(self) -> str:
        if self.line_number is None:
            return self.message
        return f"line {self.line_number}: {self.message}"


class MalformedHash(ParseError):
    kind = "MalformedHash"


class InvalidName(ParseError):
    kind = "InvalidName"


class InvalidVersion(ParseError):
    kind = "InvalidVersion"


class InvalidLength(ParseError):
    kind = "InvalidLength"


class InvalidPackageType(ParseError):
    kind = "InvalidPackageType"


class InvalidPercentage(ParseError):
    kind = "InvalidPercentage"


class InvalidEntryFormat(ParseError):
    kind = "InvalidEntryFormat"


class IoFailure(ReleaseFileError):
    kind = "IoFailure"


class IntegrityMismatch(ReleaseFileError):
    kind = "IntegrityMismatch"


class FeedError(ReleaseFileError):
    kind = "FeedError"


class SignatureError(ReleaseFileError):
    kind = "SignatureError"


class UnsafePath(ReleaseFileError):
    kind = "UnsafePath"
