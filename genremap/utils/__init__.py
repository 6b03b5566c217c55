"""Utility modules for genremap.

Available utility modules (all re-exported here for convenience):

- **errors** -- Domain-specific exception hierarchy rooted at GenreMapError;
  each pipeline stage raises its own subclass so the orchestrator can tell
  fatal startup failures from per-genre failures.
- **concurrency** -- the run-wide ``CancelScope`` that turns every
  suspension point of a dispatched unit into a cancellable wait.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
"""

# -- Domain exception hierarchy --------------------------------------------
from genremap.utils.errors import (
    ConfigurationError,
    FetchError,
    GenreMapError,
    ItemProcessingError,
    ParseError,
    PipelineCancelledError,
    PipelineError,
    SinkError,
)

# -- Cooperative cancellation ----------------------------------------------
from genremap.utils.concurrency import CancelScope

# -- Structured logging setup ----------------------------------------------
from genremap.utils.logging import configure_logging, get_logger

__all__ = [
    "CancelScope",
    "ConfigurationError",
    "FetchError",
    "GenreMapError",
    "ItemProcessingError",
    "ParseError",
    "PipelineCancelledError",
    "PipelineError",
    "SinkError",
    "configure_logging",
    "get_logger",
]
