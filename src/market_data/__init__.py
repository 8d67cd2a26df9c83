"""Market data collaborators: spreadsheet reader and local record store."""

from .reader import NoUsableDataError, load_records, read_rows
from .store import RecordStore

__all__ = [
    "NoUsableDataError",
    "RecordStore",
    "load_records",
    "read_rows",
]
