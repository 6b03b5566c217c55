"""Abstract base class for genre-map page sources.

The orchestrator fetches exactly two kinds of document: the single listing
page and one detail page per genre.  Keeping that behind an interface lets
tests inject canned HTML instead of a real HTTP client.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class IGenrePageSource(ABC):
    """Contract for fetching genre-map HTML documents."""

    @abstractmethod
    async def fetch_listing(self) -> str:
        """Return the HTML of the genre listing (index) page.

        Raises
        ------
        FetchError
            On transport failure or a non-success HTTP status.
        """

    @abstractmethod
    async def fetch_detail(self, genre_name: str) -> str:
        """Return the HTML of the detail page for *genre_name*.

        Raises
        ------
        FetchError
            On transport failure or a non-success HTTP status.
        """

    @abstractmethod
    def detail_url(self, genre_name: str) -> str:
        """Return the absolute URL of the detail page for *genre_name*."""
