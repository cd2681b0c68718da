"""Derive the durable metadata record from a run's analyses."""

from __future__ import annotations

from competitor_ui.models.analysis import Analysis, ComparisonResult, ScoredAnalysis
from competitor_ui.models.report import (
    ComparisonSummary,
    MetadataRecord,
    ScoreEntry,
    ScreenshotRef,
)


def build_metadata_record(
    run_id: str,
    timestamp: str,
    preset_name: str,
    urls: list[str],
    viewports: list[str],
    analyses: list[Analysis],
    comparison: ComparisonResult | None,
) -> MetadataRecord:
    """Build the record; nothing in it is authored separately from the analyses.

    ``scores`` only lists analyses with a numeric overall score. Every analysis
    comes from a successful capture, so each contributes its fold screenshot.
    """
    scores = [
        ScoreEntry(url=a.url, viewport=a.viewport, score=a.overall_score)
        for a in analyses
        if isinstance(a, ScoredAnalysis) and a.overall_score is not None
    ]
    screenshot_paths = [
        ScreenshotRef(url=a.url, viewport=a.viewport, fold=a.screenshots.fold)
        for a in analyses
    ]
    return MetadataRecord(
        id=run_id,
        timestamp=timestamp,
        preset=preset_name,
        urls=list(dict.fromkeys(urls)),
        viewports=list(dict.fromkeys(viewports)),
        scores=scores,
        comparison=ComparisonSummary(winner=comparison.winner) if comparison else None,
        screenshot_paths=screenshot_paths,
    )
