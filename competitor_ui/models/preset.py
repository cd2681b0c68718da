"""Research preset (scoring rubric) data structures."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class Dimension(BaseModel):
    id: str
    name: str
    weight: float = 1.0
    description: str = ""
    criteria: list[str] = Field(default_factory=list)


class Preset(BaseModel):
    id: str = ""
    name: str = ""
    version: str = ""
    description: str = ""
    dimensions: list[Dimension] = Field(default_factory=list)
    extends: Optional[str] = None
    extra_dimensions: list[Dimension] = Field(default_factory=list)

    def own_dimensions(self) -> list[Dimension]:
        """Dimensions declared by this preset itself, ignoring any parent."""
        return [*self.dimensions, *self.extra_dimensions]

    def dimension_ids(self) -> list[str]:
        return [d.id for d in self.dimensions]
