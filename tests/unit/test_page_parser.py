"""Unit tests for the genre-map HTML parser."""

from __future__ import annotations

import pytest

from genremap.models.genre import GenreDetail
from genremap.providers.cache.artist_weight_cache import ArtistWeightCache
from genremap.services.page_parser import (
    GenrePageParser,
    StyleAttributes,
    apply_artist_weights,
    extract_style_attributes,
    extract_weight,
    hex_to_rgb,
)
from genremap.utils.errors import ParseError
from tests.conftest import detail_html, genre_div, listing_html


# ======================================================================
# Style helpers
# ======================================================================


class TestHexToRgb:
    @pytest.mark.parametrize(
        "color_hex, expected",
        [
            ("#a48a12", (164, 138, 18)),
            ("#FFFFFF", (255, 255, 255)),
            ("#000000", (0, 0, 0)),
            (" #0a0b0c ", (10, 11, 12)),
        ],
    )
    def test_valid(self, color_hex: str, expected: tuple[int, int, int]) -> None:
        assert hex_to_rgb(color_hex) == expected

    @pytest.mark.parametrize("color_hex", ["", "red", "#12", "a48a12", "#zzzzzz"])
    def test_malformed_yields_black(self, color_hex: str) -> None:
        assert hex_to_rgb(color_hex) == (0, 0, 0)


class TestExtractStyleAttributes:
    def test_full_style(self) -> None:
        attrs = extract_style_attributes(
            "color: #a48a12; top: 20px; left: 900px; font-size: 112%"
        )
        assert attrs == StyleAttributes(
            font_size="112%",
            color_hex="#a48a12",
            color_rgb="rgb(164, 138, 18)",
            top="20px",
            left="900px",
        )

    def test_missing_color_leaves_rgb_empty(self) -> None:
        attrs = extract_style_attributes("top: 5px; left: 6px")
        assert attrs.color_hex == ""
        assert attrs.color_rgb == ""
        assert attrs.top == "5px"
        assert attrs.font_size == ""

    def test_empty_style(self) -> None:
        assert extract_style_attributes("") == StyleAttributes()


class TestExtractWeight:
    def test_strips_percent(self) -> None:
        assert extract_weight("font-size: 80%") == "80"

    def test_no_font_size(self) -> None:
        assert extract_weight("color: #ffffff") == ""


# ======================================================================
# Listing page
# ======================================================================


class TestParseListing:
    @pytest.fixture()
    def parser(self) -> GenrePageParser:
        return GenrePageParser()

    def test_one_record_per_genre(self, parser: GenrePageParser) -> None:
        records = parser.parse_listing(listing_html(["pop", "deep house", "gqom"]))
        assert [r.name for r in records] == ["pop", "deep house", "gqom"]

    def test_display_attributes(self, parser: GenrePageParser) -> None:
        html = "<html><body>" + genre_div(
            "deep house",
            color="#0a0b0c",
            top="1520px",
            left="330px",
            font_size="140%",
            href="engenremap-deephouse.html",
        ) + "</body></html>"

        (record,) = parser.parse_listing(html)

        assert record.name == "deep house"
        assert record.playlist == "engenremap-deephouse.html"
        assert record.font_size == "140%"
        assert record.color_hex == "#0a0b0c"
        assert record.color_rgb == "rgb(10, 11, 12)"
        assert record.top == "1520px"
        assert record.left == "330px"
        assert record.artists == []

    def test_ignores_genre_divs_without_scanme(self, parser: GenrePageParser) -> None:
        html = listing_html(["pop"]).replace(
            "</body>", '<div class="genre">not a genre</div></body>'
        )
        assert [r.name for r in parser.parse_listing(html)] == ["pop"]

    def test_label_keeps_text_left_after_marker_removal(self, parser: GenrePageParser) -> None:
        html = (
            '<div class="genre scanme" style="top: 1px">  '
            'nu disco <a href="engenremap-nudisco.html">»</a> </div>'
            '<div class="genre scanme" style="top: 2px"><a href="x">»</a></div>'
        )

        records = parser.parse_listing(html)

        assert [r.name for r in records] == ["nu disco ", ""]
        assert records[1].playlist == "x"

    def test_empty_listing_raises(self, parser: GenrePageParser) -> None:
        with pytest.raises(ParseError, match="no div.genre.scanme"):
            parser.parse_listing("<html><body><p>Service unavailable</p></body></html>")


# ======================================================================
# Detail page
# ======================================================================


class TestParseDetail:
    @pytest.fixture()
    def parser(self) -> GenrePageParser:
        return GenrePageParser()

    def test_full_detail(self, parser: GenrePageParser) -> None:
        html = detail_html(
            artists=[("Larry Heard", "80"), ("Kerri Chandler", "64")],
            similar=[("chicago house", "120")],
            opposite=[("black metal", "60"), ("grindcore", "55")],
            playlist="https://open.spotify.com/playlist/deephouse",
        )

        detail = parser.parse_detail(html)

        assert detail == GenreDetail(
            playlist="https://open.spotify.com/playlist/deephouse",
            artist_weights=["80", "64"],
            artists=["Larry Heard", "Kerri Chandler"],
            sim_weights=["120"],
            sim_genres=["chicago house"],
            opp_weights=["60", "55"],
            opp_genres=["black metal", "grindcore"],
        )

    def test_page_without_related_genres(self, parser: GenrePageParser) -> None:
        detail = parser.parse_detail(detail_html(playlist="pl"))
        assert detail.playlist == "pl"
        assert detail.artists == []
        assert detail.sim_genres == []
        assert detail.opp_genres == []

    def test_playlist_link_needs_exact_text(self, parser: GenrePageParser) -> None:
        html = '<a href="x">my playlist</a><a href="y">Playlist</a>'
        assert parser.parse_detail(html).playlist == ""

    def test_genre_without_known_id_is_ignored(self, parser: GenrePageParser) -> None:
        html = '<div class="genre" id="other1" style="font-size: 90%">ambient</div>'
        detail = parser.parse_detail(html)
        assert detail.sim_genres == []
        assert detail.opp_genres == []


class TestApplyArtistWeights:
    def test_first_observed_weight_wins(self) -> None:
        cache = ArtistWeightCache()
        first = GenreDetail(artists=["X", "Y"], artist_weights=["80", "30"])
        second = GenreDetail(artists=["X"], artist_weights=["50"])

        assert apply_artist_weights(first, cache).artist_weights == ["80", "30"]
        assert apply_artist_weights(second, cache).artist_weights == ["80"]

    def test_input_detail_is_unchanged(self) -> None:
        cache = ArtistWeightCache()
        cache.get_or_set("X", "80")
        detail = GenreDetail(artists=["X"], artist_weights=["50"])

        apply_artist_weights(detail, cache)

        assert detail.artist_weights == ["50"]
