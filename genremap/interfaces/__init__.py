"""Public interface definitions for the pipeline's external collaborators.

Every external resource the pipeline touches is accessed through an
abstract base class defined in this package; concrete adapters are injected
by the CLI at startup and replaced with fakes in tests.

    Interface          →  Concrete implementation
    ─────────────────────────────────────────────────────────
    IGenrePageSource   →  GenreMapClient (services/genre_map_client.py)
    IRecordSink        →  CsvRecordSink (providers/sink/csv_sink.py)
"""

from genremap.interfaces.page_source import IGenrePageSource
from genremap.interfaces.record_sink import IRecordSink

__all__ = [
    "IGenrePageSource",
    "IRecordSink",
]
