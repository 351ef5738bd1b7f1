"""TMDB catalog proxy.

The browser asks for a category; the server adds its API key, makes one request to
TMDB and passes the JSON body through untouched. The key never leaves the server:
it is not echoed in responses and is redacted from log lines.
"""

from __future__ import annotations

from typing import Dict

import requests

from flickhub.errors import NotFoundError, UpstreamError


DEFAULT_BASE_URL = "https://api.themoviedb.org/3"

CATEGORY_PATHS: Dict[str, str] = {
    "trending": "/trending/movie/week",
    "top-rated": "/movie/top_rated",
    "now-playing": "/movie/now_playing",
    "tv-popular": "/tv/popular",
    "upcoming": "/movie/upcoming",
}


def _debug(msg: str) -> None:
    print(f"[tmdb] {msg}")


class CatalogProxy:
    def __init__(
        self,
        api_key: str | None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        language: str = "en-US",
        timeout: float = 30.0,
    ):
        self._api_key = (api_key or "").strip()
        self.base_url = base_url.rstrip("/")
        self.language = language
        self.timeout = timeout

    def _redact(self, text: str) -> str:
        if not self._api_key:
            return text
        return text.replace(self._api_key, "***")

    def fetch(self, category: str) -> bytes:
        """Fetch one catalog listing and return the upstream JSON body verbatim.

        Raises:
            NotFoundError: unknown category (no upstream call is made)
            UpstreamError: key missing, network failure, non-2xx, or non-JSON body
        """
        path = CATEGORY_PATHS.get(category)
        if path is None:
            raise NotFoundError("Unknown category.")
        if not self._api_key:
            _debug("TMDB_API_KEY is not configured")
            raise UpstreamError()

        url = f"{self.base_url}{path}"
        params = {"api_key": self._api_key, "language": self.language}
        try:
            r = requests.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            # requests puts the full URL (with api_key) into exception messages.
            _debug(f"TMDB fetch error ({category}): {type(e).__name__}: {self._redact(str(e))}")
            raise UpstreamError() from None

        if not 200 <= r.status_code < 300:
            _debug(f"TMDB fetch error ({category}): HTTP {r.status_code}")
            raise UpstreamError()

        try:
            r.json()
        except ValueError:
            _debug(f"TMDB fetch error ({category}): response is not JSON")
            raise UpstreamError() from None

        return r.content
