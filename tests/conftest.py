"""Shared pytest fixtures for the genremap test suite."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import pytest

from genremap.interfaces.page_source import IGenrePageSource
from genremap.models.genre import GenreRecord
from genremap.utils.errors import FetchError

# ---------------------------------------------------------------------------
# HTML builders
# ---------------------------------------------------------------------------


def genre_div(
    name: str,
    color: str = "#a48a12",
    top: str = "20px",
    left: str = "900px",
    font_size: str = "112%",
    href: str | None = None,
) -> str:
    """Render one listing-page genre element the way the site does."""
    href = href or f"engenremap-{name.replace(' ', '')}.html"
    return (
        f'<div id="item{abs(hash(name)) % 10000}" class="genre scanme" '
        f'style="color: {color}; top: {top}; left: {left}; font-size: {font_size}">'
        f'{name}<a class="navlink" href="{href}">»</a></div>'
    )


def listing_html(names: list[str]) -> str:
    return "<html><body><div class=\"canvas\">" + "".join(
        genre_div(name) for name in names
    ) + "</div></body></html>"


def detail_html(
    artists: list[tuple[str, str]] | None = None,
    similar: list[tuple[str, str]] | None = None,
    opposite: list[tuple[str, str]] | None = None,
    playlist: str = "https://open.spotify.com/playlist/abc",
) -> str:
    """Render a detail page; each entry is ``(label, font-size percent)``."""
    parts = [f'<div class="title"><a href="{playlist}">playlist</a></div>']
    for label, weight in artists or []:
        parts.append(
            f'<div class="genre scanme" style="font-size: {weight}%">'
            f'{label}<a class="navlink">»</a></div>'
        )
    for i, (label, weight) in enumerate(similar or []):
        parts.append(
            f'<div class="genre" id="nearby{i}" style="font-size: {weight}%">'
            f'{label}<a class="navlink">»</a></div>'
        )
    for i, (label, weight) in enumerate(opposite or []):
        parts.append(
            f'<div class="genre" id="mirror{i}" style="font-size: {weight}%">'
            f'{label}<a class="navlink">»</a></div>'
        )
    return "<html><body>" + "".join(parts) + "</body></html>"


# ---------------------------------------------------------------------------
# Fake page source
# ---------------------------------------------------------------------------


class FakePageSource(IGenrePageSource):
    """In-memory page source with per-genre canned HTML or errors.

    ``details`` maps a genre name to either an HTML string or an exception
    instance to raise.  Genres without an entry get an empty detail page.
    ``delays`` optionally maps a genre name to seconds to sleep before
    answering, to simulate slow pages.
    """

    def __init__(
        self,
        listing: str | Exception,
        details: dict[str, Any] | None = None,
        delays: dict[str, float] | None = None,
    ) -> None:
        self._listing = listing
        self._details = details or {}
        self._delays = delays or {}
        self.detail_requests: list[str] = []
        self.active = 0
        self.peak_active = 0

    async def fetch_listing(self) -> str:
        if isinstance(self._listing, Exception):
            raise self._listing
        return self._listing

    async def fetch_detail(self, genre_name: str) -> str:
        self.detail_requests.append(genre_name)
        self.active += 1
        self.peak_active = max(self.peak_active, self.active)
        try:
            await asyncio.sleep(self._delays.get(genre_name, 0))
            answer = self._details.get(genre_name, detail_html())
            if isinstance(answer, Exception):
                raise answer
            return answer
        finally:
            self.active -= 1

    def detail_url(self, genre_name: str) -> str:
        return f"fake://{genre_name}"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def sample_record() -> GenreRecord:
    return GenreRecord(
        name="deep house",
        playlist="https://open.spotify.com/playlist/deephouse",
        font_size="112%",
        color_hex="#a48a12",
        color_rgb="rgb(164, 138, 18)",
        top="20px",
        left="900px",
        artist_weights=["80", "64"],
        artists=["Larry Heard", "Kerri Chandler"],
        sim_weights=["120"],
        sim_genres=["chicago house"],
        opp_weights=["60"],
        opp_genres=["black metal"],
    )


@pytest.fixture
def make_records():
    """Factory for ``n`` minimal listing records named ``genre-0`` ... ``genre-n``."""

    def _make(n: int) -> list[GenreRecord]:
        return [GenreRecord(name=f"genre-{i}") for i in range(n)]

    return _make


@pytest.fixture
def fetch_error() -> FetchError:
    return FetchError(message="GET fake://broken returned HTTP 503", provider_name="http")
