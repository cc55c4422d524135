from __future__ import annotations

import base64
import contextlib
import io
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from releasefile.common.manifest_security import public_key_for
from releasefile.manifest.document import HEADER, read_manifest
from releasefile.tool.cli import EXIT_INVALID, EXIT_IO, EXIT_OK, main


CONTENT_SHA256 = "c7be1ed902fb8dd4d48997c6452f5d7e509fbcdbe2808b16bcf4edce4c07d14e"


def _run(argv: list[str], env: dict[str, str] | None = None) -> tuple[int, str]:
    out = io.StringIO()
    with mock.patch.dict(os.environ, env or {}, clear=True):
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(io.StringIO()):
            code = main(argv)
    return code, out.getvalue()


class CliTests(unittest.TestCase):
    def test_hash(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "my app.7z"
            path.write_bytes(b"This is a test")
            code, out = _run(["hash", str(path), "--set-version", "1.2.3", "--delta", "--percentage", "20"])
        self.assertEqual(code, EXIT_OK)
        self.assertEqual(out.strip(), f"{CONTENT_SHA256} my%20app.7z 1.2.3 14 delta 20%")

    def test_hash_missing_file(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            code, _ = _run(["hash", str(Path(td) / "missing")])
        self.assertEqual(code, EXIT_IO)

    def test_hash_bad_percentage(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "a.7z"
            path.write_bytes(b"x")
            code, _ = _run(["hash", str(path), "--percentage", "150"])
        self.assertEqual(code, EXIT_INVALID)

    def test_build_check_and_verify(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            root = Path(td)
            (root / "MyApp-1.0.0-full.nupkg").write_bytes(b"one")
            (root / "MyApp-1.1.0-delta.nupkg").write_bytes(b"two")
            (root / "MyApp-1.1.0-full.nupkg").write_bytes(b"three")
            manifest = root / "RELEASES"

            code, _ = _run(["build", str(root), "--output", str(manifest)])
            self.assertEqual(code, EXIT_OK)
            entries = read_manifest(manifest)
            self.assertEqual(len(entries), 3)
            self.assertTrue(manifest.read_text(encoding="utf-8").startswith(HEADER))

            code, out = _run(["check", str(manifest)])
            self.assertEqual(code, EXIT_OK)
            self.assertIn("3 entries (2 full, 1 delta, 0 staged)", out)
            self.assertIn("latest full release: 1.1.0", out)

            code, out = _run(["verify", str(manifest)])
            self.assertEqual(code, EXIT_OK)
            self.assertIn("Verified 3 artifacts", out)

            (root / "MyApp-1.1.0-full.nupkg").write_bytes(b"tampered")
            code, _ = _run(["verify", str(manifest)])
            self.assertEqual(code, EXIT_INVALID)

    def test_build_to_stdout(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            (Path(td) / "MyApp-1.0.0-full.nupkg").write_bytes(b"one")
            code, out = _run(["build", td])
        self.assertEqual(code, EXIT_OK)
        self.assertEqual(len(out.strip().splitlines()), 2)

    def test_check_invalid_manifest(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            manifest = Path(td) / "RELEASES"
            manifest.write_text("ab" * 32 + " a.7z 1.0.0 1 patch\n", encoding="utf-8")
            code, _ = _run(["check", str(manifest)])
        self.assertEqual(code, EXIT_INVALID)

    def test_fetch_without_url(self) -> None:
        code, _ = _run(["fetch"])
        self.assertEqual(code, EXIT_IO)

    def test_sign_and_verify_signature(self) -> None:
        raw = Ed25519PrivateKey.generate().private_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PrivateFormat.Raw,
            encryption_algorithm=serialization.NoEncryption(),
        )
        private_key = base64.b64encode(raw).decode("ascii")
        with tempfile.TemporaryDirectory() as td:
            manifest = Path(td) / "RELEASES"
            manifest.write_text(HEADER + "\n" + "ab" * 32 + " a.7z 1.0.0 1 full", encoding="utf-8")

            code, _ = _run(["sign", str(manifest)], env={"RELEASEFILE_SIGNING_KEY": private_key})
            self.assertEqual(code, EXIT_OK)
            self.assertTrue((Path(td) / "RELEASES.sig").exists())

            public_key = public_key_for(private_key)
            code, out = _run(["verify-signature", str(manifest), "--public-key", public_key])
            self.assertEqual(code, EXIT_OK)
            self.assertIn("Signature OK", out)

            manifest.write_text(HEADER + "\n" + "ab" * 32 + " a.7z 1.0.1 1 full", encoding="utf-8")
            code, _ = _run(["verify-signature", str(manifest), "--public-key", public_key])
            self.assertEqual(code, EXIT_INVALID)

    def test_sign_without_key(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            manifest = Path(td) / "RELEASES"
            manifest.write_text(HEADER + "\n", encoding="utf-8")
            code, _ = _run(["sign", str(manifest)])
        self.assertEqual(code, EXIT_INVALID)


if __name__ == "__main__":
    unittest.main()
