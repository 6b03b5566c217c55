# =============================================================================
# genremap/cli/__init__.py: CLI Package
# =============================================================================
#
# Command-line entry points for the genre-map scraper.  The CLI layer only
# parses flags, builds the collaborators (settings, HTTP client, CSV sink)
# and hands them to GenreMapPipeline; it owns no pipeline logic itself.
#
# All CLI modules use argparse for argument parsing (not Click/Typer).
# =============================================================================

"""CLI tools for the genremap pipeline.

- ``python -m genremap.cli`` / ``genremap-scrape``: scrape the whole genre
  map into a CSV file.
"""
