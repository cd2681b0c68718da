"""Named viewport profiles."""

from __future__ import annotations

import logging

from competitor_ui.models.config import ViewportConfig

logger = logging.getLogger(__name__)

DEFAULT_VIEWPORT = "desktop"

VIEWPORT_PRESETS: dict[str, tuple[int, int]] = {
    "desktop": (1440, 900),
    "tablet": (834, 1112),
    "mobile": (375, 812),
}


def resolve_viewport(name: str) -> ViewportConfig:
    """Map a viewport name to pixel dimensions.

    Unknown names keep their name but get the desktop dimensions.
    """
    dims = VIEWPORT_PRESETS.get(name)
    if dims is None:
        logger.warning("Unknown viewport '%s', using %s dimensions", name, DEFAULT_VIEWPORT)
        dims = VIEWPORT_PRESETS[DEFAULT_VIEWPORT]
    width, height = dims
    return ViewportConfig(name=name, width=width, height=height)


def parse_viewport_list(raw: str | None) -> list[str]:
    """Split a comma-separated viewport list; empty input means desktop only."""
    if not raw:
        return [DEFAULT_VIEWPORT]
    names = [v.strip() for v in raw.split(",") if v.strip()]
    return list(dict.fromkeys(names)) or [DEFAULT_VIEWPORT]
