"""Scoring output data structures."""

from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, Field

from competitor_ui.models.capture import PageMetadata, Screenshots


class DimensionScore(BaseModel):
    dimension_id: str
    score: int = Field(ge=1, le=5)
    findings: str = ""
    highlights: list[str] = Field(default_factory=list)


class ScoredAnalysis(BaseModel):
    status: Literal["scored"] = "scored"
    url: str
    viewport: str
    metadata: PageMetadata
    screenshots: Screenshots
    summary: str = ""
    overall_score: Optional[int] = Field(default=None, ge=1, le=5)
    dimensions: dict[str, DimensionScore] = Field(default_factory=dict)
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    unique_patterns: list[str] = Field(default_factory=list)


class FailedAnalysis(BaseModel):
    status: Literal["error"] = "error"
    url: str
    viewport: str
    metadata: PageMetadata
    screenshots: Screenshots
    error: str
    raw_response: Optional[str] = None


Analysis = Annotated[
    Union[ScoredAnalysis, FailedAnalysis], Field(discriminator="status")
]


class RankingEntry(BaseModel):
    url: str
    score: Optional[float] = None
    justification: str = Field(
        default="", validation_alias=AliasChoices("justification", "reason")
    )


class ComparisonResult(BaseModel):
    winner: str = ""
    ranking: list[RankingEntry] = Field(default_factory=list)
    key_differences: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("key_differences", "keyDifferences"),
    )
    recommendations: list[str] = Field(default_factory=list)
