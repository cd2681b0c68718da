"""Configuration models for competitor UI analysis."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

API_KEY_ENV = "ANTHROPIC_API_KEY"
OUTPUT_DIR_ENV = "COMPETITOR_DATA_DIR"
MODEL_ENV = "COMPETITOR_UI_MODEL"

DEFAULT_MODEL = "claude-sonnet-4-20250514"


class ViewportConfig(BaseModel):
    name: str = "desktop"
    width: int = 1440
    height: int = 900

    def size(self) -> dict[str, int]:
        return {"width": self.width, "height": self.height}


class AnalysisConfig(BaseModel):
    # Credentials
    api_key: Optional[str] = Field(default=None, repr=False)

    # AI settings
    ai_model: str = DEFAULT_MODEL
    ai_max_tokens: int = 4096
    ai_comparison_max_tokens: int = 2048
    ai_timeout_seconds: float = 60.0

    # Output
    output_dir: str = "./competitor-reports"
    index_retention: int = 50

    # Presets
    presets_dir: Optional[str] = None
    default_preset: str = "default"

    # Capture timing (milliseconds, Playwright units)
    navigation_timeout_ms: int = 20000
    fallback_settle_ms: int = 3000
    settle_ms: int = 2000
    block_trackers: bool = True
    locale: str = "en-US"
    user_agent: Optional[str] = None

    # Pacing between consecutive external calls (seconds)
    capture_delay_seconds: float = 3.0
    scoring_delay_seconds: float = 1.0

    @property
    def output_path(self) -> Path:
        return Path(self.output_dir)

    @property
    def screenshots_root(self) -> Path:
        return self.output_path / "screenshots"

    @property
    def index_path(self) -> Path:
        return self.output_path / "index.json"

    @property
    def debug_dir(self) -> Path:
        return self.output_path / "debug"

    def with_env(self) -> "AnalysisConfig":
        """Return a copy with environment overrides applied.

        The API key only comes from the environment when the config does not
        already carry one; output dir and model env vars always win.
        """
        updates: dict = {}
        if not self.api_key and os.environ.get(API_KEY_ENV):
            updates["api_key"] = os.environ[API_KEY_ENV]
        if os.environ.get(OUTPUT_DIR_ENV):
            updates["output_dir"] = os.environ[OUTPUT_DIR_ENV]
        if os.environ.get(MODEL_ENV):
            updates["ai_model"] = os.environ[MODEL_ENV]
        return self.model_copy(update=updates)

    @classmethod
    def from_env(cls) -> "AnalysisConfig":
        return cls().with_env()

    @classmethod
    def load(cls, path: str | Path) -> "AnalysisConfig":
        """Load config from a JSON file, then apply environment overrides."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls(**data).with_env()

    def save(self, path: str | Path) -> None:
        """Save config to a JSON file. The API key is never written."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(exclude={"api_key"}), f, indent=2)
