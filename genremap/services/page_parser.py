"""HTML parsing for the genre-map listing and detail pages.

Both pages render every genre (or artist) as an absolutely positioned
``<div class="genre ...">`` whose inline ``style`` carries its colour,
position and font size.  The font size doubles as a weight: bigger text
means a stronger association.

Listing page (``engenremap.html``):
    ``div.genre.scanme``: one per genre; text is the genre name followed
    by a ``»`` navigation link to the genre's detail page.

Detail page (``engenremap-<genre>.html``):
    ``div.genre.scanme``           : artists of the genre
    ``div.genre:not(.scanme)#…nearby…``: similar genres
    ``div.genre:not(.scanme)#…mirror…``: opposite genres
    ``<a>playlist</a>``             : link to the genre's playlist

All functions here are pure (no I/O, no shared state); the pipeline runs
them in worker threads.  Applying the shared artist-weight cache is a
separate step (:func:`apply_artist_weights`).
"""

from __future__ import annotations

import re
from typing import NamedTuple

from bs4 import BeautifulSoup, Tag

from genremap.models.genre import GenreDetail, GenreRecord
from genremap.providers.cache.artist_weight_cache import ArtistWeightCache
from genremap.utils.errors import ParseError

_FONT_SIZE_RE = re.compile(r"font-size:([^;]+)")
_COLOR_RE = re.compile(r"color:([^;]+)")
_TOP_RE = re.compile(r"top:([^;]+)")
_LEFT_RE = re.compile(r"left:([^;]+)")
_HEX_RE = re.compile(r"^#([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})")

_NAV_MARKER = "»"
_PLAYLIST_LINK_TEXT = "playlist"


class StyleAttributes(NamedTuple):
    """Display attributes extracted from an inline ``style`` value."""

    font_size: str = ""
    color_hex: str = ""
    color_rgb: str = ""
    top: str = ""
    left: str = ""


def _first_group(pattern: re.Pattern[str], style: str) -> str:
    match = pattern.search(style)
    return match.group(1).strip() if match else ""


def hex_to_rgb(color_hex: str) -> tuple[int, int, int]:
    """Convert ``#rrggbb`` to an ``(r, g, b)`` tuple.

    Malformed input yields ``(0, 0, 0)`` rather than raising; colour is a
    cosmetic column and must not fail a whole genre.
    """
    match = _HEX_RE.match(color_hex.strip())
    if not match:
        return (0, 0, 0)
    r, g, b = (int(part, 16) for part in match.groups())
    return (r, g, b)


def extract_style_attributes(style: str) -> StyleAttributes:
    """Pull font size, colour (hex + ``rgb(...)``) and position from *style*."""
    color_hex = _first_group(_COLOR_RE, style)
    color_rgb = ""
    if color_hex:
        r, g, b = hex_to_rgb(color_hex)
        color_rgb = f"rgb({r}, {g}, {b})"
    return StyleAttributes(
        font_size=_first_group(_FONT_SIZE_RE, style),
        color_hex=color_hex,
        color_rgb=color_rgb,
        top=_first_group(_TOP_RE, style),
        left=_first_group(_LEFT_RE, style),
    )


def extract_weight(style: str) -> str:
    """Return the font-size percentage of *style* without the ``%`` sign."""
    return _first_group(_FONT_SIZE_RE, style).removesuffix("%")


def _clean_label(element: Tag) -> str:
    """Stripped element text with the trailing ``»`` navigation marker removed."""
    return element.get_text().strip().removesuffix(_NAV_MARKER)


def _style_of(element: Tag) -> str:
    style = element.get("style", "")
    return style if isinstance(style, str) else " ".join(style)


def _make_soup(html: str | bytes, what: str) -> BeautifulSoup:
    try:
        return BeautifulSoup(html, "html.parser")
    except Exception as exc:  # html.parser raises assorted errors on garbage input
        raise ParseError(message=f"cannot parse {what}: {exc}", provider_name="parser") from exc


class GenrePageParser:
    """Stateless parser for genre-map documents."""

    def parse_listing(self, html: str | bytes) -> list[GenreRecord]:
        """Parse the index page into listing records (display attributes only).

        Raises
        ------
        ParseError
            If the document contains no genre elements at all; an empty map
            means the page layout changed or an error page was served.
        """
        soup = _make_soup(html, "genre listing")
        records: list[GenreRecord] = []

        for div in soup.select("div.genre.scanme"):
            name = _clean_label(div)
            link = div.find("a")
            playlist = ""
            if isinstance(link, Tag):
                href = link.get("href", "")
                playlist = href if isinstance(href, str) else ""
            attrs = extract_style_attributes(_style_of(div))
            records.append(
                GenreRecord(
                    name=name,
                    playlist=playlist,
                    font_size=attrs.font_size,
                    color_hex=attrs.color_hex,
                    color_rgb=attrs.color_rgb,
                    top=attrs.top,
                    left=attrs.left,
                )
            )

        if not records:
            raise ParseError(
                message="genre listing contains no div.genre.scanme elements",
                provider_name="parser",
            )
        return records

    def parse_detail(self, html: str | bytes) -> GenreDetail:
        """Parse a genre detail page into raw (uncached) weighted lists."""
        soup = _make_soup(html, "genre detail page")

        playlist = ""
        for link in soup.find_all("a"):
            if link.get_text() == _PLAYLIST_LINK_TEXT:
                href = link.get("href", "")
                playlist = href if isinstance(href, str) else ""

        artists: list[str] = []
        artist_weights: list[str] = []
        for div in soup.select("div.genre.scanme"):
            artists.append(_clean_label(div))
            artist_weights.append(extract_weight(_style_of(div)))

        sim_genres: list[str] = []
        sim_weights: list[str] = []
        opp_genres: list[str] = []
        opp_weights: list[str] = []
        for div in soup.select("div.genre:not(.scanme)"):
            element_id = div.get("id", "")
            element_id = element_id if isinstance(element_id, str) else ""
            weight = extract_weight(_style_of(div))
            label = _clean_label(div)
            if "nearby" in element_id:
                sim_genres.append(label)
                sim_weights.append(weight)
            elif "mirror" in element_id:
                opp_genres.append(label)
                opp_weights.append(weight)

        return GenreDetail(
            playlist=playlist,
            artist_weights=artist_weights,
            artists=artists,
            sim_weights=sim_weights,
            sim_genres=sim_genres,
            opp_weights=opp_weights,
            opp_genres=opp_genres,
        )


def apply_artist_weights(detail: GenreDetail, cache: ArtistWeightCache) -> GenreDetail:
    """Replace each artist weight with the run-wide first-observed weight.

    The cache lock is taken once per artist, and only around the lookup.
    """
    weights = [
        cache.get_or_set(artist, weight)
        for artist, weight in zip(detail.artists, detail.artist_weights)
    ]
    return detail.model_copy(update={"artist_weights": weights})
