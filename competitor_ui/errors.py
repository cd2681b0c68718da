"""Exception taxonomy for the analysis pipeline.

Only ConfigError and FatalCaptureFailure ever escape a stage. CaptureError and
ScoringError are raised inside their engines and turned into failure markers
before the stage returns.
"""

from __future__ import annotations


class CompetitorUIError(Exception):
    """Base class for all pipeline errors."""


class ConfigError(CompetitorUIError):
    """Missing credential or an unusable preset definition."""


class CaptureError(CompetitorUIError):
    """A single (URL, viewport) capture could not be completed."""


class ScoringError(CompetitorUIError):
    """A model call or its response could not produce a usable result."""

    def __init__(self, message: str, raw_response: str | None = None):
        super().__init__(message)
        self.raw_response = raw_response


class FatalCaptureFailure(CompetitorUIError):
    """No capture in the whole batch succeeded."""

    def __init__(self, attempted: int):
        super().__init__(f"No screenshots captured successfully ({attempted} attempted)")
        self.attempted = attempted
