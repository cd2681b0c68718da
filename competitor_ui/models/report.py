"""Report and metadata record structures.

MetadataRecord is the durable contract read by the dashboard and the
re-indexer, so it serializes with camelCase keys (``model_dump(by_alias=True)``).
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ScoreEntry(BaseModel):
    url: str
    viewport: str
    score: int


class ScreenshotRef(BaseModel):
    url: str
    viewport: str
    fold: str


class ComparisonSummary(BaseModel):
    winner: str


class MetadataRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    timestamp: str
    preset: str
    urls: list[str] = Field(default_factory=list)
    viewports: list[str] = Field(default_factory=list)
    scores: list[ScoreEntry] = Field(default_factory=list)
    comparison: Optional[ComparisonSummary] = None
    screenshot_paths: list[ScreenshotRef] = Field(
        default_factory=list, alias="screenshotPaths"
    )

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True)


class Report(BaseModel):
    id: str
    timestamp: str
    report_path: str
    meta_path: str
