"""Capture result data structures produced by the capture engine."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class ViewportSize(BaseModel):
    width: int
    height: int


class Screenshots(BaseModel):
    full: str  # file paths
    fold: str


class PageMetadata(BaseModel):
    title: str = ""
    description: str = ""
    timestamp: str = ""
    viewport_size: ViewportSize


class CaptureSuccess(BaseModel):
    status: Literal["captured"] = "captured"
    url: str
    viewport: str
    screenshots: Screenshots
    metadata: PageMetadata


class CaptureFailure(BaseModel):
    status: Literal["failed"] = "failed"
    url: str
    viewport: str
    error: str
    timestamp: str = ""


CaptureResult = Annotated[
    Union[CaptureSuccess, CaptureFailure], Field(discriminator="status")
]
