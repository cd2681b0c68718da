"""Run coordinator: sequences preset resolution, capture, scoring, reporting and indexing."""

from __future__ import annotations

import asyncio
import logging
import time
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Protocol

from pydantic import BaseModel, Field

from competitor_ui.ai.client import AIClient
from competitor_ui.capture.engine import CaptureEngine
from competitor_ui.capture.viewports import DEFAULT_VIEWPORT
from competitor_ui.errors import CompetitorUIError, FatalCaptureFailure
from competitor_ui.index.rolling_index import ReportIndex
from competitor_ui.models.analysis import ScoredAnalysis
from competitor_ui.models.capture import CaptureResult, CaptureSuccess
from competitor_ui.models.config import AnalysisConfig
from competitor_ui.presets.resolver import PresetResolver
from competitor_ui.reporter.reporter import Reporter
from competitor_ui.scoring.engine import ScoringEngine
from competitor_ui.utils.timestamps import new_run_id

logger = logging.getLogger(__name__)


class RunStage(str, Enum):
    RESOLVING_PRESET = "resolving-preset"
    CAPTURING = "capturing"
    SCORING = "scoring"
    REPORTING = "reporting"
    INDEXING = "indexing"
    DONE = "done"
    FAILED = "failed"


class Capturer(Protocol):
    async def capture(self, urls: list[str], viewports: list[str]) -> list[CaptureResult]: ...


class RunSummary(BaseModel):
    run_id: str
    stage: RunStage
    duration_seconds: float = 0.0
    preset: str = ""
    urls: list[str] = Field(default_factory=list)
    viewports: list[str] = Field(default_factory=list)
    captures_total: int = 0
    captures_succeeded: int = 0
    analyses_total: int = 0
    analyses_scored: int = 0
    comparison_winner: Optional[str] = None
    report_path: str = ""
    meta_path: str = ""
    index_path: str = ""


class RunCoordinator:
    """Runs the full analysis pipeline for one batch of URLs.

    Only two conditions end a run early: a ConfigError (missing credential or
    unusable default preset) and a FatalCaptureFailure (nothing captured).
    Everything else is recorded in the report and the run completes.
    """

    def __init__(
        self,
        config: AnalysisConfig,
        ai_client: AIClient | None = None,
        resolver: PresetResolver | None = None,
        capture_engine_factory: Callable[[Path], Capturer] | None = None,
    ):
        self.config = config
        # Credentials are checked before any other work; AIClient raises ConfigError.
        self.ai_client = ai_client or AIClient(
            api_key=config.api_key,
            model=config.ai_model,
            max_tokens=config.ai_max_tokens,
            timeout=config.ai_timeout_seconds,
            debug_dir=config.debug_dir,
        )
        self.resolver = resolver or PresetResolver(
            presets_dir=config.presets_dir,
            default_preset=config.default_preset,
        )
        self._capture_engine_factory = capture_engine_factory or (
            lambda screenshot_dir: CaptureEngine(config, screenshot_dir)
        )
        self.reporter = Reporter(config.output_path)
        self.index = ReportIndex(config.index_path, retention=config.index_retention)
        self.stage: RunStage | None = None

    def run(
        self,
        urls: list[str],
        viewports: list[str] | None = None,
        preset_name: str | None = None,
        compare: bool = False,
    ) -> RunSummary:
        """Execute resolve → capture → score → report → index."""
        return asyncio.run(self._run_pipeline(
            urls, viewports or [DEFAULT_VIEWPORT], preset_name, compare,
        ))

    def _enter(self, stage: RunStage) -> None:
        self.stage = stage
        logger.debug("Run stage: %s", stage.value)

    async def _run_pipeline(
        self,
        urls: list[str],
        viewports: list[str],
        preset_name: str | None,
        compare: bool,
    ) -> RunSummary:
        if not urls:
            raise ValueError("At least one URL is required")
        if compare and len(set(urls)) < 2:
            raise ValueError("Comparison mode requires at least 2 URLs")

        start = time.time()
        run_id = new_run_id()
        screenshot_dir = self.config.screenshots_root / run_id
        logger.info("=== Competitor UI analysis %s ===", run_id)
        logger.info("URLs: %s | Viewports: %s | Preset: %s",
                    ", ".join(urls), ", ".join(viewports),
                    preset_name or self.config.default_preset)

        try:
            # Stage 1: Preset
            self._enter(RunStage.RESOLVING_PRESET)
            logger.info("--- Stage 1: Resolve preset ---")
            preset = self.resolver.resolve(preset_name)
            logger.info("Loaded: %s v%s (%d dimensions)",
                        preset.name, preset.version, len(preset.dimensions))

            # Stage 2: Capture
            self._enter(RunStage.CAPTURING)
            logger.info("--- Stage 2: Capture (%d pairs) ---", len(urls) * len(viewports))
            stage_start = time.time()
            engine = self._capture_engine_factory(screenshot_dir)
            captures = await engine.capture(urls, viewports)
            succeeded = sum(1 for c in captures if isinstance(c, CaptureSuccess))
            logger.info("--- Stage 2 complete: %d/%d captured in %.1fs ---",
                        succeeded, len(captures), time.time() - stage_start)
            if succeeded == 0:
                raise FatalCaptureFailure(attempted=len(captures))
        except CompetitorUIError:
            self._enter(RunStage.FAILED)
            raise

        # Stage 3: Score
        self._enter(RunStage.SCORING)
        logger.info("--- Stage 3: Score ---")
        stage_start = time.time()
        scoring = ScoringEngine(self.ai_client, self.config)
        outcome = scoring.score(captures, preset, compare=compare)
        scored = sum(1 for a in outcome.analyses if isinstance(a, ScoredAnalysis))
        logger.info("--- Stage 3 complete: %d/%d scored in %.1fs ---",
                    scored, len(outcome.analyses), time.time() - stage_start)

        # Stage 4: Report
        self._enter(RunStage.REPORTING)
        logger.info("--- Stage 4: Report ---")
        report, record = self.reporter.generate(
            run_id=run_id,
            captures=captures,
            analyses=outcome.analyses,
            comparison=outcome.comparison,
            preset=preset,
            urls=urls,
            viewports=viewports,
        )

        # Stage 5: Index
        self._enter(RunStage.INDEXING)
        logger.info("--- Stage 5: Update index ---")
        self.index.prepend(record)

        self._enter(RunStage.DONE)
        duration = time.time() - start
        logger.info("=== Analysis complete in %.1fs ===", duration)

        return RunSummary(
            run_id=run_id,
            stage=self.stage,
            duration_seconds=round(duration, 2),
            preset=record.preset,
            urls=record.urls,
            viewports=record.viewports,
            captures_total=len(captures),
            captures_succeeded=succeeded,
            analyses_total=len(outcome.analyses),
            analyses_scored=scored,
            comparison_winner=outcome.comparison.winner if outcome.comparison else None,
            report_path=report.report_path,
            meta_path=report.meta_path,
            index_path=str(self.index.path),
        )
