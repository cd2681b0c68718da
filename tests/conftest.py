"""Pytest configuration and shared fixtures."""

import json
from pathlib import Path
from unittest.mock import Mock

import pytest

from competitor_ui.models.analysis import (
    ComparisonResult,
    DimensionScore,
    FailedAnalysis,
    RankingEntry,
    ScoredAnalysis,
)
from competitor_ui.models.capture import (
    CaptureFailure,
    CaptureSuccess,
    PageMetadata,
    Screenshots,
    ViewportSize,
)
from competitor_ui.models.config import AnalysisConfig
from competitor_ui.models.preset import Dimension, Preset

# Smallest valid PNG (1x1 transparent pixel)
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c6360000002000100e221bc330000000049454e44ae426082"
)


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def analysis_config(tmp_path: Path) -> AnalysisConfig:
    """Config with pacing disabled and output under tmp_path."""
    return AnalysisConfig(
        api_key="test-key",
        output_dir=str(tmp_path / "reports"),
        capture_delay_seconds=0,
        scoring_delay_seconds=0,
        settle_ms=0,
        fallback_settle_ms=0,
    )


# ============================================================================
# Preset Fixtures
# ============================================================================


@pytest.fixture
def preset() -> Preset:
    return Preset(
        id="test",
        name="Test Preset",
        version="1.0",
        dimensions=[
            Dimension(id="layout", name="Layout", weight=0.6,
                      description="Page structure", criteria=["Clear grid"]),
            Dimension(id="cta", name="Call to Action", weight=0.4,
                      description="Primary action", criteria=["Visible above the fold"]),
        ],
    )


def write_preset(directory: Path, stem: str, **data) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{stem}.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


# ============================================================================
# Capture / Analysis Fixtures
# ============================================================================


def make_capture(tmp_path: Path, url: str = "https://example.com",
                 viewport: str = "desktop", title: str = "Example") -> CaptureSuccess:
    """A successful capture backed by real (tiny) PNG files."""
    shot_dir = tmp_path / "shots"
    shot_dir.mkdir(parents=True, exist_ok=True)
    stem = f"{url.split('//')[-1].replace('/', '_')}__{viewport}"
    full = shot_dir / f"{stem}__full.png"
    fold = shot_dir / f"{stem}__fold.png"
    full.write_bytes(PNG_BYTES)
    fold.write_bytes(PNG_BYTES)
    return CaptureSuccess(
        url=url,
        viewport=viewport,
        screenshots=Screenshots(full=str(full), fold=str(fold)),
        metadata=PageMetadata(
            title=title,
            description="An example page",
            timestamp="2025-01-01T00:00:00.000Z",
            viewport_size=ViewportSize(width=1440, height=900),
        ),
    )


def make_failure(url: str = "https://broken.example", viewport: str = "desktop") -> CaptureFailure:
    return CaptureFailure(url=url, viewport=viewport, error="net::ERR_NAME_NOT_RESOLVED",
                          timestamp="2025-01-01T00:00:00.000Z")


def make_scored(capture: CaptureSuccess, overall: int | None = 4, **kwargs) -> ScoredAnalysis:
    defaults = {
        "summary": "Clean layout with a strong hero.",
        "overall_score": overall,
        "dimensions": {
            "layout": DimensionScore(dimension_id="layout", score=4, findings="Consistent grid",
                                     highlights=["12-column grid"]),
        },
        "strengths": ["Strong hero"],
        "weaknesses": ["Dense footer"],
        "unique_patterns": ["Sticky pricing toggle"],
    }
    defaults.update(kwargs)
    return ScoredAnalysis(
        url=capture.url, viewport=capture.viewport,
        metadata=capture.metadata, screenshots=capture.screenshots,
        **defaults,
    )


def make_failed(capture: CaptureSuccess, error: str = "No JSON object found in AI response") -> FailedAnalysis:
    return FailedAnalysis(
        url=capture.url, viewport=capture.viewport,
        metadata=capture.metadata, screenshots=capture.screenshots,
        error=error, raw_response="I cannot evaluate this page.",
    )


@pytest.fixture
def capture_success(tmp_path: Path) -> CaptureSuccess:
    return make_capture(tmp_path)


@pytest.fixture
def comparison() -> ComparisonResult:
    return ComparisonResult(
        winner="https://a.example",
        ranking=[
            RankingEntry(url="https://a.example", score=4.5, justification="Clearer CTA"),
            RankingEntry(url="https://b.example", score=3, justification="Busy hero"),
        ],
        key_differences=["A uses a single CTA"],
        recommendations=["Reduce hero copy on B"],
    )


# ============================================================================
# AI Fixtures
# ============================================================================


ANALYSIS_JSON = json.dumps({
    "summary": "Solid landing page.",
    "overall_score": 4,
    "dimensions": {
        "layout": {"score": 4, "findings": "Clear grid", "highlights": ["Hero"]},
        "cta": {"score": 5, "findings": "Obvious button", "highlights": []},
    },
    "strengths": ["Clear CTA"],
    "weaknesses": ["Small text"],
    "unique_patterns": ["Animated logo wall"],
})

COMPARISON_JSON = json.dumps({
    "winner": "https://a.example",
    "ranking": [
        {"url": "https://a.example", "score": 4, "justification": "Cleaner"},
        {"url": "https://b.example", "score": 3, "justification": "Cluttered"},
    ],
    "key_differences": ["Hero density"],
    "recommendations": ["Simplify B"],
})


@pytest.fixture
def ai_client() -> Mock:
    """Stand-in for AIClient returning well-formed JSON for both call types."""
    client = Mock()
    client.complete_with_image.return_value = ANALYSIS_JSON
    client.complete.return_value = COMPARISON_JSON
    return client
