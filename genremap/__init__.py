"""genremap: concurrent scraper for a genre-map site, writing one CSV row per genre."""

__version__ = "0.1.0"
