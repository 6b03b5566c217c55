"""Concurrent fetch-aggregate-persist pipeline.

- **rate_limiter** -- global token-bucket limiter shared by every unit.
- **dispatcher** -- bounded-concurrency, fail-fast dispatch of one unit per genre.
- **funnel** -- bounded fan-in channel from units to the writer.
- **batch_writer** -- single consumer flushing records to the sink in batches.
- **orchestrator** -- wires the above together for one run.
"""

from genremap.pipeline.batch_writer import BatchWriter
from genremap.pipeline.dispatcher import ProcessFn, TaskDispatcher
from genremap.pipeline.funnel import ResultFunnel
from genremap.pipeline.orchestrator import GenreMapPipeline
from genremap.pipeline.rate_limiter import TokenBucketRateLimiter

__all__ = [
    "BatchWriter",
    "GenreMapPipeline",
    "ProcessFn",
    "ResultFunnel",
    "TaskDispatcher",
    "TokenBucketRateLimiter",
]
