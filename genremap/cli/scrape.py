# =============================================================================
# genremap/cli/scrape.py: Genre Map Scraper CLI
# =============================================================================
#
# One-shot command that scrapes every genre on the genre map into a CSV
# file.  The CLI builds the collaborators and hands them to
# GenreMapPipeline:
#
#   settings   : config/config.yaml + GENREMAP_* env vars + CLI flags
#   HTTP client: one shared httpx.AsyncClient (closed when the run ends)
#   sink       : CsvRecordSink at --output
#
# Exit codes:
#   0  every genre was written
#   1  fatal error (config, sink open, listing, batch writer crash)
#   2  the run is incomplete: a genre failed (rows flushed before the
#      failure remain in the output file) or a batch could not be written
# =============================================================================

"""CLI for scraping the genre map into a CSV file.

Usage::

    # Scrape with the defaults from config/config.yaml
    python -m genremap.cli

    # Write elsewhere, with 8 concurrent units and one request per 100 ms
    genremap-scrape --output data/genres.csv --concurrency 8 --interval 0.1

    # Structured JSON logs on stderr
    genremap-scrape --json-logs --log-level DEBUG
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from genremap.config.loader import load_settings
from genremap.config.settings import Settings
from genremap.models.report import RunReport
from genremap.pipeline.orchestrator import GenreMapPipeline
from genremap.providers.sink.csv_sink import CsvRecordSink
from genremap.services.genre_map_client import GenreMapClient, make_http_client
from genremap.utils.errors import GenreMapError
from genremap.utils.logging import configure_logging

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_INCOMPLETE = 2


# ---------------------------------------------------------------------------
# Run
# ---------------------------------------------------------------------------


async def _run(settings: Settings) -> RunReport:
    """Run one scrape with a freshly built HTTP client and CSV sink."""
    async with make_http_client(settings) as http_client:
        pipeline = GenreMapPipeline(
            page_source=GenreMapClient(http_client, settings),
            sink=CsvRecordSink(settings.output_path),
            settings=settings,
        )
        return await pipeline.run()


def _print_summary(report: RunReport) -> None:
    dispatch = report.dispatch
    print()
    print("=" * 60)
    print("  GENRE MAP SCRAPE" + ("" if report.ok else " (INCOMPLETE)"))
    print("=" * 60)
    print(f"  Output:          {report.output_path}")
    print(f"  Genres listed:   {report.listed:,}")
    print(f"  Rows written:    {report.rows_written:,}")
    print(f"  Failed:          {dispatch.failed:,}")
    print(f"  Cancelled:       {dispatch.cancelled:,}")
    print(f"  Flushes:         {len(report.flush_sizes)}")
    if report.flush_failures:
        print(f"  Flush failures:  {report.flush_failures}")
    print(f"  Elapsed:         {report.elapsed_seconds:.1f}s")
    if dispatch.first_error:
        print(f"  First error:     {dispatch.first_error}")
    print("=" * 60)


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="genremap-scrape",
        description="Scrape every genre of the genre map into a CSV file.",
    )
    parser.add_argument(
        "--config",
        default="config/config.yaml",
        help="YAML config file (default: config/config.yaml)",
    )
    parser.add_argument(
        "--output",
        dest="output_path",
        default=None,
        help="CSV output path (default from config: genres.csv)",
    )
    parser.add_argument(
        "--concurrency",
        dest="max_concurrency",
        type=int,
        default=None,
        help="Maximum concurrent units; 0 = number of CPUs",
    )
    parser.add_argument(
        "--batch-size",
        dest="batch_size",
        type=int,
        default=None,
        help="Records per CSV flush (default from config: 250)",
    )
    parser.add_argument(
        "--interval",
        dest="rate_interval_seconds",
        type=float,
        default=None,
        help="Seconds between requests (default from config: 0.05)",
    )
    parser.add_argument(
        "--base-url",
        dest="base_url",
        default=None,
        help="Genre map site root (default from config)",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Log level (default from config: INFO)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        dest="json_logs",
        help="Emit structured JSON logs on stderr",
    )
    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the genre map scraper."""
    args = _build_parser().parse_args(argv)

    try:
        settings = load_settings(
            args.config,
            output_path=args.output_path,
            max_concurrency=args.max_concurrency,
            batch_size=args.batch_size,
            rate_interval_seconds=args.rate_interval_seconds,
            base_url=args.base_url,
            log_level=args.log_level,
        )
    except GenreMapError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(EXIT_FATAL)

    configure_logging(
        log_level=settings.log_level,
        json_output=args.json_logs or settings.app_env == "production",
    )

    try:
        report = asyncio.run(_run(settings))
    except GenreMapError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(EXIT_FATAL)
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        sys.exit(EXIT_FATAL)

    _print_summary(report)
    sys.exit(EXIT_OK if report.ok else EXIT_INCOMPLETE)


if __name__ == "__main__":
    main()
