"""Custom exception hierarchy for genremap.

All application exceptions inherit from :class:`GenreMapError`, which
carries an optional ``provider_name`` so error handlers can identify which
collaborator (e.g. "http", "csv", "parser") caused the failure.

The hierarchy is organized by pipeline stage:

    GenreMapError  (base -- catch-all for any genremap error)
    +-- ConfigurationError      (startup / invalid settings)
    +-- FetchError              (network failure or non-2xx response)
    +-- ParseError              (listing or detail page could not be parsed)
    +-- SinkError               (output file could not be opened or written)
    +-- PipelineError           (funnel misuse, orchestration failure)
    +-- PipelineCancelledError  (a unit observed run-wide cancellation)
    +-- ItemProcessingError     (per-genre wrapper around any of the above)

Fatal vs. per-item failures:
    ``SinkError`` raised while opening the sink and ``FetchError`` /
    ``ParseError`` raised while loading the listing abort the run before
    any concurrent work starts.  Failures inside a dispatched unit are
    wrapped in ``ItemProcessingError`` and trigger fail-fast cancellation.
"""


class GenreMapError(Exception):
    """Base exception for all genremap errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which collaborator triggered the error.
    The ``__str__`` method prefixes the provider name in brackets for
    structured log output, e.g. ``[http] GET ... returned 503``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Startup errors
# ---------------------------------------------------------------------------

class ConfigurationError(GenreMapError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Fetch / parse errors
# ---------------------------------------------------------------------------

class FetchError(GenreMapError):
    """Raised when a page cannot be fetched (transport error or HTTP status)."""

    def __init__(
        self,
        message: str = "Page fetch failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ParseError(GenreMapError):
    """Raised when a fetched document does not have the expected structure."""

    def __init__(
        self,
        message: str = "Document parsing failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Output errors
# ---------------------------------------------------------------------------

class SinkError(GenreMapError):
    """Raised when the output sink cannot be opened or written."""

    def __init__(
        self,
        message: str = "Output sink failure",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Orchestration errors
# ---------------------------------------------------------------------------

class PipelineError(GenreMapError):
    """Raised when pipeline orchestration fails (funnel misuse, etc.)."""

    def __init__(
        self,
        message: str = "Pipeline orchestration failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class PipelineCancelledError(PipelineError):
    """Raised at a suspension point once the run has been cancelled.

    This is *not* ``asyncio.CancelledError``: units are never force-killed,
    they notice the shared cancel signal while waiting for a slot, a rate
    limiter permit, or room in the funnel and unwind with this error.
    """

    def __init__(
        self,
        message: str = "Pipeline run was cancelled",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ItemProcessingError(GenreMapError):
    """Wraps any failure of a single dispatched unit with its genre name.

    The original exception is kept on ``cause`` (and chained via
    ``raise ... from``) so the first error reported by the dispatcher
    still shows the underlying network or parse problem.
    """

    def __init__(
        self,
        item_name: str,
        cause: BaseException,
        provider_name: str | None = None,
    ) -> None:
        self._item_name = item_name
        self._cause = cause
        super().__init__(
            message=f"error processing {item_name!r}: {cause}",
            provider_name=provider_name,
        )
        self.__cause__ = cause

    @property
    def item_name(self) -> str:
        return self._item_name

    @property
    def cause(self) -> BaseException:
        return self._cause

    @property
    def cancelled(self) -> bool:
        """True when the unit only aborted because the run was cancelled."""
        return isinstance(self._cause, PipelineCancelledError)
