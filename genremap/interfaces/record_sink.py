"""Abstract base class for record sinks.

Defines the contract for persisting enriched genre records.  The BatchWriter
only ever talks to this interface, so the CSV file can be swapped for another
columnar target without touching pipeline code.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from genremap.models.genre import GenreRecord


class IRecordSink(ABC):
    """Contract for append-only record storage.

    Lifecycle: :meth:`open` once before any work starts, any number of
    :meth:`write_rows` calls from a single consumer, then :meth:`close`.
    """

    @abstractmethod
    def open(self) -> None:
        """Prepare the sink for writing (create the file, write the header).

        Raises
        ------
        SinkError
            If the sink cannot be opened.  The pipeline treats this as fatal.
        """

    @abstractmethod
    def write_rows(self, records: Sequence[GenreRecord]) -> None:
        """Append *records* in one bulk operation and make them durable.

        Raises
        ------
        SinkError
            If the write fails.  The BatchWriter logs it and continues.
        """

    @abstractmethod
    def close(self) -> None:
        """Release the underlying resource.  Safe to call more than once."""

    @property
    @abstractmethod
    def location(self) -> str:
        """Human-readable location of the sink (e.g. a file path)."""
