"""CSV file sink for enriched genre records.

Writes one header row when opened and then appends rows in bulk, one call
per flushed batch.  List-valued fields are serialised by joining their
elements with ``|``; :func:`split_list_field` is the inverse, so a weight
list and its name list split back into aligned lists of equal length.

The file is truncated on open: every run produces a fresh snapshot of the
genre map.
"""

from __future__ import annotations

import csv
from collections.abc import Sequence
from pathlib import Path
from typing import IO, Any

from genremap.interfaces.record_sink import IRecordSink
from genremap.models.genre import GenreRecord
from genremap.utils.errors import SinkError
from genremap.utils.logging import get_logger

LIST_DELIMITER = "|"

# (header, GenreRecord field) in output order.
_COLUMN_FIELDS: tuple[tuple[str, str], ...] = (
    ("Genre", "name"),
    ("Playlist", "playlist"),
    ("FontSize", "font_size"),
    ("ColorHex", "color_hex"),
    ("ColorRGB", "color_rgb"),
    ("Top", "top"),
    ("Left", "left"),
    ("ArtistWeights", "artist_weights"),
    ("Artists", "artists"),
    ("SimWeights", "sim_weights"),
    ("SimGenres", "sim_genres"),
    ("OppWeights", "opp_weights"),
    ("OppGenres", "opp_genres"),
)

CSV_COLUMNS: list[str] = [header for header, _ in _COLUMN_FIELDS]

_LIST_FIELDS = frozenset(
    {
        "artist_weights",
        "artists",
        "sim_weights",
        "sim_genres",
        "opp_weights",
        "opp_genres",
    }
)


def join_list_field(values: Sequence[str]) -> str:
    """Serialise a list field for a single CSV cell."""
    return LIST_DELIMITER.join(values)


def split_list_field(value: str) -> list[str]:
    """Inverse of :func:`join_list_field`; an empty cell is an empty list."""
    if not value:
        return []
    return value.split(LIST_DELIMITER)


def record_to_row(record: GenreRecord) -> list[str]:
    """Convert *record* into a CSV row in :data:`CSV_COLUMNS` order."""
    row: list[str] = []
    for _, field in _COLUMN_FIELDS:
        value = getattr(record, field)
        row.append(join_list_field(value) if field in _LIST_FIELDS else value)
    return row


def row_to_record(row: dict[str, str]) -> GenreRecord:
    """Rebuild a :class:`GenreRecord` from a ``csv.DictReader`` row."""
    values: dict[str, object] = {}
    for header, field in _COLUMN_FIELDS:
        cell = row.get(header) or ""
        values[field] = split_list_field(cell) if field in _LIST_FIELDS else cell
    return GenreRecord(**values)


def load_records(path: str | Path) -> list[GenreRecord]:
    """Read every data row of a CSV written by :class:`CsvRecordSink`."""
    with Path(path).open(newline="", encoding="utf-8") as fh:
        return [row_to_record(row) for row in csv.DictReader(fh)]


class CsvRecordSink(IRecordSink):
    """Append-only CSV sink with a fixed header row.

    Parameters
    ----------
    path:
        Output file path.  Parent directories are created on open.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._fh: IO[str] | None = None
        self._writer: Any = None
        self._rows_written = 0
        self._logger = get_logger(__name__)

    # ------------------------------------------------------------------
    # IRecordSink implementation
    # ------------------------------------------------------------------

    def open(self) -> None:
        """Create (truncate) the file and write the header row."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._fh = self._path.open("w", newline="", encoding="utf-8")
            self._writer = csv.writer(self._fh)
            self._writer.writerow(CSV_COLUMNS)
            self._fh.flush()
        except OSError as exc:
            self.close()
            raise SinkError(
                message=f"cannot create {self._path}: {exc}", provider_name="csv"
            ) from exc
        self._logger.info("csv_sink_opened", path=str(self._path))

    def write_rows(self, records: Sequence[GenreRecord]) -> None:
        """Append *records* and flush them to disk."""
        if self._fh is None or self._writer is None:
            raise SinkError(message="sink is not open", provider_name="csv")
        try:
            self._writer.writerows(record_to_row(r) for r in records)
            self._fh.flush()
        except (OSError, csv.Error) as exc:
            raise SinkError(
                message=f"cannot write {len(records)} rows to {self._path}: {exc}",
                provider_name="csv",
            ) from exc
        self._rows_written += len(records)

    def close(self) -> None:
        if self._fh is None:
            return
        try:
            self._fh.close()
        finally:
            self._fh = None
            self._writer = None
        self._logger.info(
            "csv_sink_closed", path=str(self._path), rows_written=self._rows_written
        )

    @property
    def location(self) -> str:
        return str(self._path)

    @property
    def rows_written(self) -> int:
        return self._rows_written
