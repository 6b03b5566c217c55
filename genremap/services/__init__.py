"""Services: the genre-map HTTP client and the HTML page parser."""

from genremap.services.genre_map_client import GenreMapClient, genre_slug, make_http_client
from genremap.services.page_parser import (
    GenrePageParser,
    StyleAttributes,
    apply_artist_weights,
    extract_style_attributes,
    extract_weight,
    hex_to_rgb,
)

__all__ = [
    "GenreMapClient",
    "GenrePageParser",
    "StyleAttributes",
    "apply_artist_weights",
    "extract_style_attributes",
    "extract_weight",
    "genre_slug",
    "hex_to_rgb",
    "make_http_client",
]
