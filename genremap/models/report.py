"""Run outcome models.

``DispatchReport`` summarises one TaskDispatcher join; ``RunReport`` wraps
it with the listing and sink statistics collected by the orchestrator.
Both are frozen snapshots built after all work has settled.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class DispatchReport(BaseModel):
    """Outcome of dispatching every work item of a run."""

    model_config = ConfigDict(frozen=True)

    total: int = 0
    succeeded: int = 0
    # Units that failed on their own (network, parse, ...).
    failed: int = 0
    # Units that aborted because another unit's failure cancelled the run.
    cancelled: int = 0
    # Highest number of units simultaneously past the admission gate.
    peak_active: int = 0
    first_error: str | None = None
    first_error_item: str | None = None

    @property
    def ok(self) -> bool:
        return self.failed == 0 and self.cancelled == 0


class RunReport(BaseModel):
    """Everything the CLI needs to summarise a finished run."""

    model_config = ConfigDict(frozen=True)

    output_path: str
    listed: int
    dispatch: DispatchReport
    rows_written: int
    flush_sizes: list[int] = Field(default_factory=list)
    flush_failures: int = 0
    elapsed_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        """True only when every genre was enriched and every batch was written."""
        return self.dispatch.ok and self.flush_failures == 0
