"""Rebuild the report index from the ``*.meta.json`` files on disk."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from competitor_ui.index.rolling_index import DEFAULT_RETENTION, ReportIndex

logger = logging.getLogger(__name__)

META_SUFFIX = ".meta.json"


def _thumbnails(meta: dict[str, Any], reports_dir: Path) -> list[dict[str, str]]:
    """Fold screenshots that still exist, as paths relative to ``reports_dir``."""
    thumbs = []
    for ref in meta.get("screenshotPaths") or []:
        if not isinstance(ref, dict) or not ref.get("fold"):
            continue
        file_name = Path(ref["fold"]).name
        expected = reports_dir / "screenshots" / str(meta.get("id", "")) / file_name
        if expected.exists():
            thumbs.append({
                "url": ref.get("url", ""),
                "viewport": ref.get("viewport", ""),
                "foldPath": expected.relative_to(reports_dir).as_posix(),
            })
    return thumbs


def rebuild_index(
    reports_dir: Path,
    index_path: Path | None = None,
    retention: int = DEFAULT_RETENTION,
) -> list[dict[str, Any]]:
    """Scan ``reports_dir`` for metadata files and rewrite the index.

    ``screenshotPaths`` is replaced by ``thumbnails``; entries are sorted
    newest first. Unreadable metadata files are skipped.
    """
    index = ReportIndex(index_path or reports_dir / "index.json", retention=retention)
    if not reports_dir.is_dir():
        logger.info("No reports directory at %s", reports_dir)
        index.save([])
        return []

    meta_files = sorted(reports_dir.glob(f"*{META_SUFFIX}"))
    logger.info("Found %d report(s) in %s", len(meta_files), reports_dir)

    entries: list[dict[str, Any]] = []
    for meta_path in meta_files:
        try:
            with open(meta_path, encoding="utf-8") as f:
                meta = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Skipping unreadable metadata %s: %s", meta_path, e)
            continue
        if not isinstance(meta, dict):
            logger.warning("Skipping malformed metadata %s", meta_path)
            continue

        thumbnails = _thumbnails(meta, reports_dir)
        entry = {k: v for k, v in meta.items() if k != "screenshotPaths"}
        if thumbnails:
            entry["thumbnails"] = thumbnails
        entries.append(entry)
        logger.debug("Indexed %s", meta.get("id", meta_path.name))

    entries.sort(key=lambda e: str(e.get("timestamp") or ""), reverse=True)
    entries = entries[:retention]
    index.save(entries)
    logger.info("Indexed %d report(s) into %s", len(entries), index.path)
    return entries
