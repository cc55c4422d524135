from __future__ import annotations

import logging
from urllib.parse import urljoin, urlsplit

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from releasefile.common.config import RuntimeConfig
from releasefile.common.errors import FeedError
from releasefile.common.manifest_security import validate_trusted_url
from releasefile.common.names import encode_name
from releasefile.common.types import ReleaseEntry
from releasefile.manifest.document import parse_document


log = logging.getLogger(__name__)


class FeedClient:
    """Reads the manifest of a remote release feed.

    Only the manifest text is transferred; artifacts are left to the caller.
    """

    def __init__(self, runtime: RuntimeConfig, session: requests.Session | None = None):
        self.runtime = runtime
        self.session = session or requests.Session()
        retry = Retry(
            total=runtime.max_retries,
            connect=runtime.max_retries,
            read=runtime.max_retries,
            status=runtime.max_retries,
            backoff_factor=0.5,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=frozenset({"GET", "HEAD"}),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    def manifest_url(self, feed_url: str) -> str:
        path = urlsplit(feed_url).path
        if path.rstrip("/").rsplit("/", 1)[-1] == self.runtime.manifest_name:
            return feed_url
        return feed_url.rstrip("/") + "/" + self.runtime.manifest_name

    def _validate(self, url: str) -> None:
        validate_trusted_url(
            url,
            self.runtime.trusted_hosts,
            allow_http=self.runtime.allow_insecure_http,
        )

    def fetch_text(self, feed_url: str) -> str:
        url = self.manifest_url(feed_url)
        log.info("Fetching manifest from %s", url)
        self._validate(url)
        try:
            resp = self.session.get(
                url,
                timeout=(self.runtime.connect_timeout_seconds, self.runtime.read_timeout_seconds),
            )
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise FeedError(f"Could not fetch manifest from {url}: {exc}") from exc
        self._validate(str(resp.url))
        resp.encoding = "utf-8-sig"
        return resp.text

    def fetch_manifest(self, feed_url: str) -> list[ReleaseEntry]:
        entries = parse_document(self.fetch_text(feed_url))
        log.info("Feed %s lists %d release entries", feed_url, len(entries))
        return entries

    def resolve_artifact_url(self, entry: ReleaseEntry, feed_url: str) -> str:
        if entry.is_url:
            return entry.filename_or_url
        base = self.manifest_url(feed_url)
        return urljoin(base, "./" + encode_name(entry.filename_or_url))
