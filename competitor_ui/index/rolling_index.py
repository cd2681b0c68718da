"""Rolling report index: the most recent metadata records, newest first."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from competitor_ui.models.report import MetadataRecord

logger = logging.getLogger(__name__)

DEFAULT_RETENTION = 50


class ReportIndex:
    """Read-merge-write access to a JSON array of metadata records.

    A missing or unparseable index file is treated as empty.
    """

    def __init__(self, path: Path, retention: int = DEFAULT_RETENTION):
        self.path = path
        self.retention = retention

    def load(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Failed to load report index %s: %s. Starting empty.", self.path, e)
            return []
        if not isinstance(data, list):
            logger.warning("Report index %s is not a JSON array. Starting empty.", self.path)
            return []
        return [entry for entry in data if isinstance(entry, dict)]

    def save(self, entries: list[dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(entries[: self.retention], f, indent=2, ensure_ascii=False)
        logger.debug("Saved report index to %s", self.path)

    def prepend(self, record: MetadataRecord | dict[str, Any]) -> list[dict[str, Any]]:
        """Put ``record`` at the front, trim to retention, and write the file."""
        entry = record.to_json_dict() if isinstance(record, MetadataRecord) else dict(record)
        entries = [e for e in self.load() if e.get("id") != entry.get("id")]
        entries.insert(0, entry)
        entries = entries[: self.retention]
        self.save(entries)
        logger.info("Report index updated: %s (%d entries)", self.path, len(entries))
        return entries
