"""Record sink providers.

CsvRecordSink writes the fixed 13-column genre CSV; list-valued fields are
``|``-joined within a cell.
"""

from genremap.providers.sink.csv_sink import (
    CSV_COLUMNS,
    LIST_DELIMITER,
    CsvRecordSink,
    load_records,
    record_to_row,
    split_list_field,
)

__all__ = [
    "CSV_COLUMNS",
    "LIST_DELIMITER",
    "CsvRecordSink",
    "load_records",
    "record_to_row",
    "split_list_field",
]
