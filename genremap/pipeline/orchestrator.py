"""Central orchestrator for one genre-map scrape run.

Wires the run-scoped components together and drives them in a fixed order:

    1. Open the sink                   : failure is fatal (SinkError)
    2. Fetch + parse the genre listing : failure is fatal (FetchError/ParseError)
    3. Start the BatchWriter task      : sole consumer of the funnel
    4. Dispatch one unit per genre     : fail-fast on the first unit error
    5. Close the funnel                : only after every unit has settled
    6. Wait for the final flush, close the sink, return a RunReport

Every shared component (cancel scope, rate limiter, artist-weight cache,
funnel) is created fresh inside :meth:`GenreMapPipeline.run`, so a pipeline
object can be run more than once without state leaking between runs.

Per-genre failures never raise out of ``run``: they are reported through
``RunReport.dispatch``.  Rows flushed before the failure stay in the file.
"""

from __future__ import annotations

import asyncio
import time

import structlog

from genremap.config.settings import Settings
from genremap.interfaces.page_source import IGenrePageSource
from genremap.interfaces.record_sink import IRecordSink
from genremap.models.genre import GenreDetail, GenreRecord
from genremap.models.report import RunReport
from genremap.pipeline.batch_writer import BatchWriter
from genremap.pipeline.dispatcher import TaskDispatcher
from genremap.pipeline.funnel import ResultFunnel
from genremap.pipeline.rate_limiter import TokenBucketRateLimiter
from genremap.providers.cache.artist_weight_cache import ArtistWeightCache
from genremap.services.page_parser import GenrePageParser, apply_artist_weights
from genremap.utils.concurrency import CancelScope
from genremap.utils.errors import PipelineError
from genremap.utils.logging import get_logger


class GenreMapPipeline:
    """Fetch → enrich → persist pipeline for the genre map.

    All collaborators are injected; the orchestrator never creates network
    clients or files itself.

    Parameters
    ----------
    page_source:
        Fetches the listing and detail HTML.
    sink:
        Unopened record sink; opened and closed by :meth:`run`.
    settings:
        Batch size, rate-limit and concurrency configuration.
    parser:
        HTML parser; defaults to :class:`GenrePageParser`.
    """

    def __init__(
        self,
        page_source: IGenrePageSource,
        sink: IRecordSink,
        settings: Settings,
        parser: GenrePageParser | None = None,
    ) -> None:
        self._source = page_source
        self._sink = sink
        self._settings = settings
        self._parser = parser or GenrePageParser()
        self._logger: structlog.BoundLogger = get_logger(__name__)
        # Populated by run(); exposed for inspection after a run.
        self.artist_cache: ArtistWeightCache | None = None

    async def run(self) -> RunReport:
        """Execute one full scrape run.

        Raises
        ------
        SinkError
            If the sink cannot be opened (nothing has been fetched yet).
        FetchError, ParseError
            If the genre listing cannot be fetched or parsed.
        PipelineError
            If the batch writer crashes with anything but a sink error.
        """
        started = time.monotonic()
        settings = self._settings

        scope = CancelScope()
        limiter = TokenBucketRateLimiter(
            interval=settings.rate_interval_seconds, burst=settings.rate_burst
        )
        cache = ArtistWeightCache()
        self.artist_cache = cache

        # -- 1. Sink ------------------------------------------------------
        self._sink.open()

        writer_task: asyncio.Task[int] | None = None
        try:
            # -- 2. Listing -------------------------------------------------
            genres = await self._load_listing(limiter)

            # -- 3-5. Writer + dispatch ---------------------------------------
            funnel = ResultFunnel(capacity=settings.batch_size)
            writer = BatchWriter(
                funnel,
                self._sink,
                threshold=settings.batch_size,
                expected_total=len(genres),
            )
            writer_task = asyncio.create_task(writer.run(), name="batch-writer")
            writer_task.add_done_callback(lambda task: self._on_writer_done(task, scope))

            dispatcher = TaskDispatcher(
                limiter,
                funnel,
                scope,
                concurrency=settings.resolved_concurrency(),
                progress_log_every=settings.progress_log_every,
            )

            async def enrich(item: GenreRecord) -> GenreRecord:
                return await self._enrich(item, cache)

            dispatch_report = await dispatcher.run(genres, enrich)

            # -- 6. Drain -------------------------------------------------
            await self._close_funnel(funnel, writer_task)
            try:
                rows_written = await writer_task
            except Exception as exc:
                raise PipelineError(message=f"batch writer crashed: {exc!r}") from exc
        finally:
            if writer_task is not None and not writer_task.done():
                writer_task.cancel()
            self._sink.close()

        report = RunReport(
            output_path=self._sink.location,
            listed=len(genres),
            dispatch=dispatch_report,
            rows_written=rows_written,
            flush_sizes=writer.flush_sizes,
            flush_failures=writer.flush_failures,
            elapsed_seconds=round(time.monotonic() - started, 3),
        )

        log = self._logger.info if report.ok else self._logger.error
        log(
            "run_complete" if report.ok else "run_failed",
            listed=report.listed,
            rows_written=report.rows_written,
            failed=dispatch_report.failed,
            cancelled=dispatch_report.cancelled,
            first_error=dispatch_report.first_error,
            artists_cached=len(cache),
            elapsed_seconds=report.elapsed_seconds,
        )
        return report

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def _load_listing(self, limiter: TokenBucketRateLimiter) -> list[GenreRecord]:
        """Fetch and parse the genre listing; any failure here is fatal."""
        await limiter.acquire()
        html = await self._source.fetch_listing()
        genres = await asyncio.to_thread(self._parser.parse_listing, html)
        self._logger.info("listing_fetched", genres=len(genres))
        return genres

    async def _enrich(self, item: GenreRecord, cache: ArtistWeightCache) -> GenreRecord:
        """Fetch, parse and cache-normalise one genre's detail page."""
        html = await self._source.fetch_detail(item.name)
        detail = await asyncio.to_thread(self._parse_detail, html, cache)
        return item.enrich(detail)

    def _parse_detail(self, html: str, cache: ArtistWeightCache) -> GenreDetail:
        # Runs in a worker thread: parsing and the cache lookups together.
        return apply_artist_weights(self._parser.parse_detail(html), cache)

    async def _close_funnel(
        self, funnel: ResultFunnel, writer_task: asyncio.Task[int]
    ) -> None:
        """Close the funnel unless the writer has already died.

        ``close`` blocks while the funnel is full, which would never end if
        the only consumer had crashed.
        """
        close_task = asyncio.ensure_future(funnel.close())
        await asyncio.wait({close_task, writer_task}, return_when=asyncio.FIRST_COMPLETED)
        if not close_task.done():
            close_task.cancel()

    def _on_writer_done(self, task: asyncio.Task[int], scope: CancelScope) -> None:
        """Cancel the run if the writer stops before the funnel is closed."""
        if task.cancelled():
            scope.cancel(reason="batch writer was cancelled")
            return
        exc = task.exception()
        if exc is not None:
            self._logger.error("batch_writer_crashed", error=str(exc))
            scope.cancel(reason=f"batch writer crashed: {exc}")

