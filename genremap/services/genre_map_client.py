"""HTTP access to the genre-map site.

Implements :class:`IGenrePageSource` on top of a shared
``httpx.AsyncClient``.  The client is injected via the constructor (one
connection pool for the whole run) and is owned by the caller, which is
responsible for closing it.

Unlike the best-effort scrape providers elsewhere, failures are *raised*
as :class:`FetchError`: one missing genre page must stop the run rather
than silently produce an incomplete row.
"""

from __future__ import annotations

from urllib.parse import quote_plus

import httpx

from genremap.config.settings import Settings
from genremap.interfaces.page_source import IGenrePageSource
from genremap.utils.errors import FetchError
from genremap.utils.logging import get_logger


def make_http_client(settings: Settings) -> httpx.AsyncClient:
    """Create an httpx.AsyncClient sized for one host and many concurrent units.

    Every request goes to the same host, so the pool allows as many
    keep-alive connections as total connections.
    """
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        limits=httpx.Limits(
            max_connections=settings.http_max_connections,
            max_keepalive_connections=settings.http_max_connections,
            keepalive_expiry=settings.http_keepalive_expiry_seconds,
        ),
        headers={
            "User-Agent": settings.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        },
        follow_redirects=True,
    )


def genre_slug(genre_name: str) -> str:
    """URL-encode *genre_name* the way the site names its detail pages."""
    return quote_plus(genre_name.replace(" ", ""))


class GenreMapClient(IGenrePageSource):
    """Fetches listing and detail pages from the genre-map site.

    Parameters
    ----------
    http_client:
        Shared ``httpx.AsyncClient``; not closed by this class.
    settings:
        Supplies the base URL and path templates.
    """

    def __init__(self, http_client: httpx.AsyncClient, settings: Settings) -> None:
        self._http = http_client
        self._base_url = settings.base_url.rstrip("/")
        self._listing_path = settings.listing_path
        self._detail_template = settings.detail_path_template
        self._logger = get_logger(__name__)

    def listing_url(self) -> str:
        return self._base_url + self._listing_path

    def detail_url(self, genre_name: str) -> str:
        return self._base_url + self._detail_template.format(genre=genre_slug(genre_name))

    async def fetch_listing(self) -> str:
        return await self._get(self.listing_url())

    async def fetch_detail(self, genre_name: str) -> str:
        return await self._get(self.detail_url(genre_name))

    async def _get(self, url: str) -> str:
        """GET *url* and return the body text, raising FetchError on any failure."""
        try:
            response = await self._http.get(url)
        except httpx.HTTPError as exc:
            raise FetchError(
                message=f"GET {url} failed: {exc!r}", provider_name="http"
            ) from exc

        if not response.is_success:
            raise FetchError(
                message=f"GET {url} returned HTTP {response.status_code}",
                provider_name="http",
            )

        self._logger.debug("page_fetched", url=url, bytes=len(response.content))
        return response.text
