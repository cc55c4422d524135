from __future__ import annotations

import base64
from pathlib import PurePosixPath
from typing import Iterable
from urllib.parse import urlparse

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey, Ed25519PublicKey

from releasefile.common.errors import FeedError, SignatureError, UnsafePath


SIGNATURE_SUFFIX = ".sig"


def _normalize_host(host: str) -> str:
    return str(host or "").strip().lower().rstrip(".")


def _is_allowed_host(host: str, allowed_hosts: Iterable[str]) -> bool:
    normalized = _normalize_host(host)
    if not normalized:
        return False
    allowed = {_normalize_host(v) for v in allowed_hosts}
    if normalized in allowed:
        return True
    return any(normalized.endswith("." + entry) for entry in allowed)


def validate_trusted_url(url: str, allowed_hosts: Iterable[str], allow_http: bool = False) -> None:
    parsed = urlparse(str(url))
    scheme = (parsed.scheme or "").lower()
    if scheme != "https" and not (allow_http and scheme == "http"):
        raise FeedError(f"Untrusted URL scheme for release feed: {url}")
    host = parsed.hostname or ""
    if not _is_allowed_host(host, allowed_hosts):
        raise FeedError(f"Untrusted release feed host: {host or '<none>'}")


def _manifest_bytes(text: str) -> bytes:
    return text.encode("utf-8")


def _decode_private_key(value: str) -> Ed25519PrivateKey:
    text = str(value or "").strip()
    if not text:
        raise SignatureError("Manifest signing key is empty.")

    if text.startswith("-----BEGIN"):
        try:
            key = serialization.load_pem_private_key(text.encode("utf-8"), password=None)
        except (TypeError, ValueError) as exc:
            raise SignatureError(f"Manifest signing key could not be loaded: {exc}") from exc
        if not isinstance(key, Ed25519PrivateKey):
            raise SignatureError("Manifest signing key must be an Ed25519 private key.")
        return key

    try:
        raw = base64.b64decode(text, validate=True)
    except ValueError as exc:
        raise SignatureError("Manifest signing key must be PEM or base64-encoded raw Ed25519 key.") from exc
    if len(raw) != 32:
        raise SignatureError("Base64 manifest signing key must decode to 32 bytes.")
    return Ed25519PrivateKey.from_private_bytes(raw)


def public_key_for(private_key_value: str) -> str:
    key = _decode_private_key(private_key_value)
    raw = key.public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )
    return base64.b64encode(raw).decode("ascii")


def sign_manifest_text(text: str, private_key_value: str) -> str:
    key = _decode_private_key(private_key_value)
    signature = key.sign(_manifest_bytes(text))
    return base64.b64encode(signature).decode("ascii")


def verify_manifest_text(text: str, signature_b64: str, public_key_b64: str) -> None:
    signature_b64 = str(signature_b64 or "").strip()
    if not signature_b64:
        raise SignatureError("Manifest signature is missing.")

    try:
        signature = base64.b64decode(signature_b64, validate=True)
    except ValueError as exc:
        raise SignatureError("Manifest signature is not valid base64.") from exc

    try:
        pub_raw = base64.b64decode(str(public_key_b64 or "").strip(), validate=True)
    except ValueError as exc:
        raise SignatureError("Manifest public key is not valid base64.") from exc
    if len(pub_raw) != 32:
        raise SignatureError("Manifest public key must be 32 bytes.")

    pub = Ed25519PublicKey.from_public_bytes(pub_raw)
    try:
        pub.verify(signature, _manifest_bytes(text))
    except InvalidSignature as exc:
        raise SignatureError("Manifest signature verification failed.") from exc


def validate_artifact_path(name: str) -> PurePosixPath:
    # Normalize as posix to avoid platform-dependent traversal quirks.
    normalized = str(name or "").replace("\\", "/").strip()
    if not normalized:
        raise UnsafePath("Manifest contains an empty artifact path.")

    path = PurePosixPath(normalized)
    parts = path.parts
    if not parts:
        raise UnsafePath("Artifact path has no parts.")
    if path.is_absolute():
        raise UnsafePath(f"Artifact path is absolute: {name}")
    if any(part in {"..", ""} for part in parts):
        raise UnsafePath(f"Artifact path contains traversal segment: {name}")
    if ":" in parts[0]:
        raise UnsafePath(f"Artifact path contains drive designator: {name}")
    return path
