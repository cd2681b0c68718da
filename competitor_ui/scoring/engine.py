"""Scoring engine: rubric-driven vision scoring and cross-URL comparison."""

from __future__ import annotations

import base64
import logging
import time
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError

from competitor_ui.ai.client import AIClient
from competitor_ui.ai.parsing import extract_json_object
from competitor_ui.ai.prompts.analysis import ANALYSIS_SYSTEM_PROMPT, build_analysis_prompt
from competitor_ui.ai.prompts.comparison import (
    COMPARISON_SYSTEM_PROMPT,
    build_comparison_prompt,
)
from competitor_ui.errors import ScoringError
from competitor_ui.models.analysis import (
    Analysis,
    ComparisonResult,
    DimensionScore,
    FailedAnalysis,
    ScoredAnalysis,
)
from competitor_ui.models.capture import CaptureResult, CaptureSuccess
from competitor_ui.models.config import AnalysisConfig
from competitor_ui.models.preset import Preset
from competitor_ui.pacing import RateLimiter

logger = logging.getLogger(__name__)

COMPARISON_VIEWPORT = "desktop"


class ScoringOutcome(BaseModel):
    analyses: list[Analysis] = Field(default_factory=list)
    comparison: Optional[ComparisonResult] = None


class ScoringEngine:
    """Scores successful captures one model call at a time.

    Every failure (unreadable image, API error, unparseable response) is
    recorded as a FailedAnalysis for that item only; nothing is retried.
    """

    def __init__(
        self,
        ai_client: AIClient | None,
        config: AnalysisConfig,
        limiter: RateLimiter | None = None,
    ):
        self.ai_client = ai_client
        self.config = config
        self.limiter = limiter or RateLimiter(config.scoring_delay_seconds, name="scoring")

    def score(
        self,
        captures: list[CaptureResult],
        preset: Preset,
        compare: bool = False,
    ) -> ScoringOutcome:
        successes = [c for c in captures if isinstance(c, CaptureSuccess)]
        if not successes:
            logger.info("No successful captures to analyze")
            return ScoringOutcome()

        analyses: list[Analysis] = []
        start = time.time()
        for capture in successes:
            logger.info("Analyzing %s [%s]...", capture.url, capture.viewport)
            analysis = self._analyze(capture, preset)
            if isinstance(analysis, ScoredAnalysis):
                logger.info("Analysis complete: score %s",
                            analysis.overall_score if analysis.overall_score is not None else "N/A")
            analyses.append(analysis)
        logger.info("Analyzed %d pages in %.1fs", len(analyses), time.time() - start)

        comparison = None
        if compare:
            comparison = self._compare(analyses)
        return ScoringOutcome(analyses=analyses, comparison=comparison)

    def _analyze(self, capture: CaptureSuccess, preset: Preset) -> Analysis:
        base = {
            "url": capture.url,
            "viewport": capture.viewport,
            "metadata": capture.metadata,
            "screenshots": capture.screenshots,
        }

        image = _load_image_base64(capture.screenshots.fold)
        if image is None:
            logger.error("Fold screenshot unreadable for %s: %s",
                         capture.url, capture.screenshots.fold)
            return FailedAnalysis(**base, error="Fold screenshot could not be read")
        if self.ai_client is None:
            return FailedAnalysis(**base, error="AI client unavailable")

        text: str | None = None
        try:
            with self.limiter:
                text = self.ai_client.complete_with_image(
                    system_prompt=ANALYSIS_SYSTEM_PROMPT,
                    user_message=build_analysis_prompt(preset, capture.metadata, capture.url),
                    image_base64=image,
                    max_tokens=self.config.ai_max_tokens,
                )
            data = extract_json_object(text)
            return build_scored_analysis(capture, preset, data)
        except ScoringError as e:
            logger.error("Analysis error for %s: %s", capture.url, e)
            return FailedAnalysis(**base, error=str(e), raw_response=e.raw_response)
        except Exception as e:
            logger.error("Analysis error for %s: %s", capture.url, e)
            return FailedAnalysis(**base, error=str(e), raw_response=text)

    def _compare(self, analyses: list[Analysis]) -> ComparisonResult | None:
        desktop = [a for a in analyses if a.viewport == COMPARISON_VIEWPORT]
        if len(desktop) < 2:
            logger.info("Comparison skipped: %d %s analyses (need 2)",
                        len(desktop), COMPARISON_VIEWPORT)
            return None
        if self.ai_client is None:
            logger.warning("Comparison skipped: AI client unavailable")
            return None

        logger.info("Comparing %d %s analyses...", len(desktop), COMPARISON_VIEWPORT)
        try:
            with self.limiter:
                text = self.ai_client.complete(
                    system_prompt=COMPARISON_SYSTEM_PROMPT,
                    user_message=build_comparison_prompt(desktop),
                    max_tokens=self.config.ai_comparison_max_tokens,
                )
            result = ComparisonResult.model_validate(extract_json_object(text))
        except (ScoringError, ValidationError) as e:
            logger.error("Comparison response unusable: %s", e)
            return None
        except Exception as e:
            logger.error("Comparison error: %s", e)
            return None

        if not result.winner and result.ranking:
            result = result.model_copy(update={"winner": result.ranking[0].url})
        logger.info("Comparison winner: %s", result.winner or "(none)")
        return result


def build_scored_analysis(
    capture: CaptureSuccess, preset: Preset, data: dict[str, Any]
) -> ScoredAnalysis:
    """Turn the model's JSON into a ScoredAnalysis, coercing sloppy values."""
    raw_dims = data.get("dimensions")
    dimensions: dict[str, DimensionScore] = {}
    if isinstance(raw_dims, dict):
        for dim in preset.dimensions:
            entry = raw_dims.get(dim.id)
            if isinstance(entry, dict):
                score = coerce_score(entry.get("score"))
                findings = entry.get("findings") or ""
                highlights = _string_list(entry.get("highlights"))
            else:
                score, findings, highlights = coerce_score(entry), "", []
            if score is None:
                continue
            dimensions[dim.id] = DimensionScore(
                dimension_id=dim.id,
                score=score,
                findings=str(findings),
                highlights=highlights,
            )
        extra = set(raw_dims) - set(dimensions) - set(preset.dimension_ids())
        if extra:
            logger.debug("Ignoring dimensions not in preset: %s", sorted(extra))

    overall = data.get("overall_score", data.get("overallScore"))
    return ScoredAnalysis(
        url=capture.url,
        viewport=capture.viewport,
        metadata=capture.metadata,
        screenshots=capture.screenshots,
        summary=str(data.get("summary") or ""),
        overall_score=coerce_score(overall),
        dimensions=dimensions,
        strengths=_string_list(data.get("strengths")),
        weaknesses=_string_list(data.get("weaknesses")),
        unique_patterns=_string_list(data.get("unique_patterns", data.get("uniquePatterns"))),
    )


def coerce_score(value: Any) -> int | None:
    """Round a model-supplied score into 1..5; None for anything non-numeric."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        score = round(float(value))
    except (TypeError, ValueError, OverflowError):
        return None
    return max(1, min(5, score))


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if v is not None and str(v).strip()]


def _load_image_base64(path: str) -> str | None:
    try:
        return base64.b64encode(Path(path).read_bytes()).decode()
    except OSError:
        return None
