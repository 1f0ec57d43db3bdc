"""
Latest Vaadin version lookup.

Order of precedence: pinned version from settings, the latest GitHub
release of the platform repository, then the newest docs corpus directory.
"""

import logging
import re
import time
from typing import Callable, Dict, List, Optional

import requests

from vaadin_skills.docs.errors import DocsError

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"^v?(\d+(?:\.\d+)*(?:[.-][\w.]+)?)$")


def _major(version: str) -> str:
    return version.split(".", 1)[0].split("-", 1)[0]


class VersionResolver:
    """Resolve and cache the latest framework version."""

    def __init__(
        self,
        releases_url: str,
        pinned_version: str = "",
        corpus_versions: Optional[Callable[[], List[str]]] = None,
        cache_ttl: float = 3600,
        timeout: float = 10,
    ):
        self.releases_url = releases_url
        self.pinned_version = pinned_version
        self.corpus_versions = corpus_versions
        self.cache_ttl = cache_ttl
        self.timeout = timeout
        self._cached: Optional[Dict] = None
        self._cached_at = 0.0

    def latest(self) -> Dict:
        """Return {version, major, source, released_at}."""
        if self.pinned_version:
            version = self.pinned_version.lstrip("v")
            return {"version": version, "major": _major(version), "source": "config", "released_at": None}

        now = time.time()
        if self._cached is not None and now - self._cached_at < self.cache_ttl:
            return dict(self._cached)

        release = self._fetch_latest_release()
        if release is not None:
            self._cached = release
            self._cached_at = now
            return dict(release)

        return self._from_corpus()

    def clear_cache(self):
        self._cached = None
        self._cached_at = 0.0

    def _fetch_latest_release(self) -> Optional[Dict]:
        try:
            resp = requests.get(
                self.releases_url,
                headers={"Accept": "application/vnd.github+json"},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("Latest release lookup failed: %s", e)
            return None

        tag = str(data.get("tag_name", "")).strip() if isinstance(data, dict) else ""
        match = _TAG_RE.match(tag)
        if not match:
            logger.warning("Unexpected release tag %r from %s", tag, self.releases_url)
            return None

        version = match.group(1)
        logger.info("Latest Vaadin release: %s", version)
        return {
            "version": version,
            "major": _major(version),
            "source": "github",
            "released_at": data.get("published_at"),
        }

    def _from_corpus(self) -> Dict:
        versions = self.corpus_versions() if self.corpus_versions else []
        if not versions:
            raise DocsError("Latest Vaadin version is unknown: release lookup failed and no docs are indexed")
        newest = max(versions, key=int)
        return {"version": newest, "major": newest, "source": "corpus", "released_at": None}
