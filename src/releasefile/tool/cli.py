from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from releasefile import __version__ as RELEASEFILE_VERSION
from releasefile.common.config import RuntimeConfig
from releasefile.common.errors import (
    FeedError,
    IntegrityMismatch,
    IoFailure,
    ParseError,
    ReleaseFileError,
    SignatureError,
)
from releasefile.common.logging_utils import configure_logging
from releasefile.common.manifest_security import (
    SIGNATURE_SUFFIX,
    sign_manifest_text,
    verify_manifest_text,
)
from releasefile.common.versions import parse_version
from releasefile.manifest.builder import DEFAULT_PACKAGE_PATTERN, build_from_directory, build_from_file
from releasefile.manifest.document import format_document, read_manifest, write_manifest
from releasefile.manifest.formatter import format_entry
from releasefile.manifest.selection import latest_full_release
from releasefile.manifest.verify import verify_directory
from releasefile.tool.feed_service import FeedClient


log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID = 2
EXIT_IO = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="releasefile", description="Release manifest tooling")
    parser.add_argument("--version", action="version", version=f"%(prog)s {RELEASEFILE_VERSION}")
    parser.add_argument("--log-level", default=None, help="Log level (default from RELEASEFILE_LOG_LEVEL).")
    sub = parser.add_subparsers(dest="command", required=True)

    p_hash = sub.add_parser("hash", help="Print a release entry for each file.")
    p_hash.add_argument("files", nargs="+", type=Path)
    p_hash.add_argument("--set-version", dest="entry_version", default=None, help="Semantic version to record.")
    p_hash.add_argument("--delta", action="store_true", help="Mark the entries as delta packages.")
    p_hash.add_argument("--percentage", type=int, default=100, help="Staged rollout percentage.")

    p_build = sub.add_parser("build", help="Write a manifest for a directory of packages.")
    p_build.add_argument("directory", type=Path)
    p_build.add_argument("--pattern", default=DEFAULT_PACKAGE_PATTERN)
    p_build.add_argument("--output", type=Path, default=None)

    p_check = sub.add_parser("check", help="Parse a manifest and print a summary.")
    p_check.add_argument("manifest", type=Path)

    p_verify = sub.add_parser("verify", help="Verify local artifacts against a manifest.")
    p_verify.add_argument("manifest", type=Path)
    p_verify.add_argument("--dir", dest="directory", type=Path, default=None)

    p_fetch = sub.add_parser("fetch", help="Fetch and print the manifest of a release feed.")
    p_fetch.add_argument("feed_url", nargs="?", default=None)

    p_sign = sub.add_parser("sign", help="Write a detached Ed25519 signature for a manifest.")
    p_sign.add_argument("manifest", type=Path)
    p_sign.add_argument("--output", type=Path, default=None)

    p_vsig = sub.add_parser("verify-signature", help="Check a manifest's detached signature.")
    p_vsig.add_argument("manifest", type=Path)
    p_vsig.add_argument("--public-key", required=True, help="Base64 raw Ed25519 public key.")
    p_vsig.add_argument("--signature", type=Path, default=None)
    return parser


def _signature_path(manifest: Path, override: Path | None) -> Path:
    return override or manifest.with_name(manifest.name + SIGNATURE_SUFFIX)


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise IoFailure(f"Could not read {path}: {exc}") from exc


def _cmd_hash(args: argparse.Namespace, runtime: RuntimeConfig) -> int:
    changes: dict[str, object] = {"is_delta": args.delta, "percentage": args.percentage}
    if args.entry_version:
        changes["version"] = parse_version(args.entry_version)
    for path in args.files:
        entry = build_from_file(path, chunk_size=runtime.hash_chunk_size).evolve(**changes)
        print(format_entry(entry))
    return EXIT_OK


def _cmd_build(args: argparse.Namespace, runtime: RuntimeConfig) -> int:
    entries = build_from_directory(args.directory, pattern=args.pattern, chunk_size=runtime.hash_chunk_size)
    if args.output is None:
        print(format_document(entries))
    else:
        write_manifest(args.output, entries)
    return EXIT_OK


def _cmd_check(args: argparse.Namespace, runtime: RuntimeConfig) -> int:
    entries = read_manifest(args.manifest)
    full = sum(1 for e in entries if e.is_full)
    staged = sum(1 for e in entries if e.percentage < 100)
    latest = latest_full_release(entries)
    print(f"{args.manifest}: {len(entries)} entries ({full} full, {len(entries) - full} delta, {staged} staged)")
    if latest is not None:
        print(f"latest full release: {latest.version} ({latest.filename_or_url})")
    return EXIT_OK


def _cmd_verify(args: argparse.Namespace, runtime: RuntimeConfig) -> int:
    entries = read_manifest(args.manifest)
    directory = args.directory or args.manifest.parent
    verified = verify_directory(entries, directory, chunk_size=runtime.hash_chunk_size)
    print(f"Verified {len(verified)} artifacts in {directory}")
    return EXIT_OK


def _cmd_fetch(args: argparse.Namespace, runtime: RuntimeConfig) -> int:
    feed_url = args.feed_url or runtime.feed_url
    if not feed_url:
        raise FeedError("No feed URL given and RELEASEFILE_FEED_URL is not set.")
    entries = FeedClient(runtime).fetch_manifest(feed_url)
    print(format_document(entries))
    return EXIT_OK


def _cmd_sign(args: argparse.Namespace, runtime: RuntimeConfig) -> int:
    text = _read_text(args.manifest)
    signature = sign_manifest_text(text, runtime.signing_key)
    out = _signature_path(args.manifest, args.output)
    try:
        out.write_text(signature + "\n", encoding="ascii")
    except OSError as exc:
        raise IoFailure(f"Could not write signature {out}: {exc}") from exc
    log.info("Signed %s -> %s", args.manifest, out)
    return EXIT_OK


def _cmd_verify_signature(args: argparse.Namespace, runtime: RuntimeConfig) -> int:
    text = _read_text(args.manifest)
    signature = _read_text(_signature_path(args.manifest, args.signature))
    verify_manifest_text(text, signature, args.public_key)
    print(f"Signature OK: {args.manifest}")
    return EXIT_OK


_COMMANDS = {
    "hash": _cmd_hash,
    "build": _cmd_build,
    "check": _cmd_check,
    "verify": _cmd_verify,
    "fetch": _cmd_fetch,
    "sign": _cmd_sign,
    "verify-signature": _cmd_verify_signature,
}


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    runtime = RuntimeConfig.from_env()
    configure_logging(runtime.log_dir, level=args.log_level or runtime.log_level)

    try:
        return _COMMANDS[args.command](args, runtime)
    except (ParseError, IntegrityMismatch, SignatureError) as exc:
        log.error("%s: %s", exc.kind, exc)
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_INVALID
    except (IoFailure, FeedError) as exc:
        log.error("%s: %s", exc.kind, exc)
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_IO
    except ReleaseFileError as exc:
        log.error("%s: %s", exc.kind, exc)
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_INVALID
