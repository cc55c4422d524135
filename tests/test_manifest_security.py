from __future__ import annotations

import base64
import unittest

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from releasefile.common.errors import FeedError, SignatureError, UnsafePath
from releasefile.common.manifest_security import (
    public_key_for,
    sign_manifest_text,
    validate_artifact_path,
    validate_trusted_url,
    verify_manifest_text,
)
from releasefile.manifest.document import HEADER


MANIFEST = HEADER + "\n" + "ef" * 32 + " MyApp-1.0.0-full.nupkg 1.0.0 100 full"


def _raw_private_key() -> str:
    key = Ed25519PrivateKey.generate()
    raw = key.private_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PrivateFormat.Raw,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return base64.b64encode(raw).decode("ascii")


def _pem_private_key() -> str:
    key = Ed25519PrivateKey.generate()
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")


class ManifestSignatureTests(unittest.TestCase):
    def test_sign_and_verify(self) -> None:
        for private_key in (_raw_private_key(), _pem_private_key()):
            signature = sign_manifest_text(MANIFEST, private_key)
            verify_manifest_text(MANIFEST, signature, public_key_for(private_key))

    def test_tampered_manifest_detected(self) -> None:
        private_key = _raw_private_key()
        signature = sign_manifest_text(MANIFEST, private_key)
        tampered = MANIFEST.replace(" 100 ", " 101 ")
        with self.assertRaises(SignatureError) as ctx:
            verify_manifest_text(tampered, signature, public_key_for(private_key))
        self.assertIn("verification failed", str(ctx.exception))

    def test_wrong_key_detected(self) -> None:
        signature = sign_manifest_text(MANIFEST, _raw_private_key())
        with self.assertRaises(SignatureError):
            verify_manifest_text(MANIFEST, signature, public_key_for(_raw_private_key()))

    def test_malformed_inputs(self) -> None:
        public_key = public_key_for(_raw_private_key())
        with self.assertRaises(SignatureError):
            verify_manifest_text(MANIFEST, "", public_key)
        with self.assertRaises(SignatureError):
            verify_manifest_text(MANIFEST, "not base64!", public_key)
        with self.assertRaises(SignatureError):
            verify_manifest_text(MANIFEST, "AAAA", "AAAA")
        with self.assertRaises(SignatureError):
            sign_manifest_text(MANIFEST, "")
        with self.assertRaises(SignatureError):
            sign_manifest_text(MANIFEST, base64.b64encode(b"short").decode("ascii"))


class TrustedUrlTests(unittest.TestCase):
    HOSTS = ("github.com", "objects.githubusercontent.com")

    def test_allowed_hosts_and_subdomains(self) -> None:
        validate_trusted_url("https://github.com/a/b/RELEASES", self.HOSTS)
        validate_trusted_url("https://api.github.com/x", self.HOSTS)
        validate_trusted_url("https://GITHUB.COM./x", self.HOSTS)

    def test_rejected_urls(self) -> None:
        for url in ("https://notgithub.com/x", "http://github.com/x", "ftp://github.com/x", "https:///x"):
            with self.subTest(url=url):
                with self.assertRaises(FeedError):
                    validate_trusted_url(url, self.HOSTS)

    def test_http_allowed_when_enabled(self) -> None:
        validate_trusted_url("http://github.com/x", self.HOSTS, allow_http=True)
        with self.assertRaises(FeedError):
            validate_trusted_url("ftp://github.com/x", self.HOSTS, allow_http=True)


class ArtifactPathTests(unittest.TestCase):
    def test_relative_paths_accepted(self) -> None:
        self.assertEqual(validate_artifact_path("a.nupkg").as_posix(), "a.nupkg")
        self.assertEqual(validate_artifact_path("win\\x64/a.nupkg").parts, ("win", "x64", "a.nupkg"))

    def test_unsafe_paths_rejected(self) -> None:
        for name in ("", "  ", "../x", "a/../../x", "/etc/passwd", "C:/x", "C:x", "\\\\server\\share\\x"):
            with self.subTest(name=name):
                with self.assertRaises(UnsafePath):
                    validate_artifact_path(name)


if __name__ == "__main__":
    unittest.main()
