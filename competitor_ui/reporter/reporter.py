"""Report generation orchestration."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from competitor_ui.models.analysis import Analysis, ComparisonResult
from competitor_ui.models.capture import CaptureFailure, CaptureResult
from competitor_ui.models.preset import Preset
from competitor_ui.models.report import MetadataRecord, Report
from competitor_ui.utils.timestamps import utc_timestamp

from .html_report import render_report_html
from .metadata import build_metadata_record

logger = logging.getLogger(__name__)


class Reporter:
    """Writes the HTML report and its metadata record, paired by run id."""

    def __init__(self, output_dir: Path):
        self.output_dir = output_dir

    def report_path(self, run_id: str) -> Path:
        return self.output_dir / f"{run_id}.html"

    def meta_path(self, run_id: str) -> Path:
        return self.output_dir / f"{run_id}.meta.json"

    def generate(
        self,
        run_id: str,
        captures: list[CaptureResult],
        analyses: list[Analysis],
        comparison: ComparisonResult | None,
        preset: Preset,
        urls: list[str],
        viewports: list[str],
    ) -> tuple[Report, MetadataRecord]:
        """Render and write both files. Returns the Report and the record written."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        timestamp = utc_timestamp()
        failures = [c for c in captures if isinstance(c, CaptureFailure)]

        document = render_report_html(
            analyses, comparison,
            run_id=run_id,
            timestamp=timestamp,
            preset=preset,
            capture_failures=failures,
        )
        report_path = self.report_path(run_id)
        with open(report_path, "w", encoding="utf-8") as f:
            f.write(document)
        logger.info("HTML report: %s", report_path)

        record = build_metadata_record(
            run_id=run_id,
            timestamp=timestamp,
            preset_name=preset.name or preset.id,
            urls=urls,
            viewports=viewports,
            analyses=analyses,
            comparison=comparison,
        )
        meta_path = self.meta_path(run_id)
        with open(meta_path, "w", encoding="utf-8") as f:
            json.dump(record.to_json_dict(), f, indent=2, ensure_ascii=False)
        logger.info("Metadata: %s", meta_path)

        report = Report(
            id=run_id,
            timestamp=timestamp,
            report_path=str(report_path),
            meta_path=str(meta_path),
        )
        return report, record
