from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from releasefile.common.hashing import DEFAULT_CHUNK_SIZE


DEFAULT_MANIFEST_NAME = "RELEASES"

# Hosts a feed may be served from, including redirected GitHub release assets.
DEFAULT_TRUSTED_HOSTS: tuple[str, ...] = (
    "github.com",
    "release-assets.githubusercontent.com",
    "objects.githubusercontent.com",
    "github-releases.githubusercontent.com",
)


def _env_flag(name: str, default: str = "0") -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _env_hosts(name: str) -> tuple[str, ...]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return DEFAULT_TRUSTED_HOSTS
    return tuple(host.strip() for host in raw.split(",") if host.strip())


@dataclass(frozen=True)
class RuntimeConfig:
    feed_url: str = ""
    manifest_name: str = DEFAULT_MANIFEST_NAME
    hash_chunk_size: int = DEFAULT_CHUNK_SIZE
    connect_timeout_seconds: int = 10
    read_timeout_seconds: int = 60
    max_retries: int = 3
    trusted_hosts: tuple[str, ...] = DEFAULT_TRUSTED_HOSTS
    allow_insecure_http: bool = False
    log_level: str = "INFO"
    log_dir: Path | None = None
    signing_key: str = ""

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        log_dir = os.environ.get("RELEASEFILE_LOG_DIR", "").strip()
        return cls(
            feed_url=os.environ.get("RELEASEFILE_FEED_URL", "").strip(),
            manifest_name=os.environ.get("RELEASEFILE_MANIFEST_NAME", DEFAULT_MANIFEST_NAME).strip()
            or DEFAULT_MANIFEST_NAME,
            hash_chunk_size=int(os.environ.get("RELEASEFILE_HASH_CHUNK", str(DEFAULT_CHUNK_SIZE))),
            connect_timeout_seconds=int(os.environ.get("RELEASEFILE_CONNECT_TIMEOUT", "10")),
            read_timeout_seconds=int(os.environ.get("RELEASEFILE_READ_TIMEOUT", "60")),
            max_retries=int(os.environ.get("RELEASEFILE_MAX_RETRIES", "3")),
            trusted_hosts=_env_hosts("RELEASEFILE_TRUSTED_HOSTS"),
            allow_insecure_http=_env_flag("RELEASEFILE_ALLOW_HTTP"),
            log_level=os.environ.get("RELEASEFILE_LOG_LEVEL", "INFO").strip() or "INFO",
            log_dir=Path(log_dir) if log_dir else None,
            signing_key=os.environ.get("RELEASEFILE_SIGNING_KEY", ""),
        )
