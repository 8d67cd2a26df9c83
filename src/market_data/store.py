"""JSON-file persistence for normalized price records.

Records are stored verbatim (ISO text dates included) and validated back
through PriceRecord on load, so loaded records equal the saved ones.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path

from ..analytics.normalizer import UnreadableSourceError
from ..common.config import settings
from ..common.models import PriceRecord

logger = logging.getLogger(__name__)

STORE_VERSION = 1


class RecordStore:
    """Save and restore a record set in a single JSON file.

    Usage:
        store = RecordStore()
        store.save(records)
        records = store.load()
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path) if path else settings.storage.store_abs_path

    def save(self, records: Sequence[PriceRecord]) -> int:
        """Write ``records``, replacing any stored set. Returns the count."""
        payload = {
            "version": STORE_VERSION,
            "saved_at": datetime.now(timezone.utc).isoformat(),
            "records": [r.model_dump(mode="json") for r in records],
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        logger.info("Saved %d records to %s", len(records), self.path)
        return len(records)

    def load(self) -> list[PriceRecord] | None:
        """Stored records, or None when nothing has been saved.

        Raises:
            UnreadableSourceError: The store exists but is corrupt.
        """
        if not self.path.exists():
            return None
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
            records = [PriceRecord.model_validate(item) for item in payload["records"]]
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise UnreadableSourceError(f"Corrupt record store {self.path}: {e}") from e
        logger.info("Loaded %d records from %s", len(records), self.path)
        return records

    def clear(self) -> None:
        """Remove the stored record set."""
        self.path.unlink(missing_ok=True)
        logger.info("Cleared record store %s", self.path)
