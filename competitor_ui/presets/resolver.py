"""Preset resolver: loads rubric presets and flattens their ``extends`` chains."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path

from pydantic import ValidationError

from competitor_ui.errors import ConfigError
from competitor_ui.models.preset import Preset

logger = logging.getLogger(__name__)

BUILTIN_PRESETS_DIR = Path(__file__).resolve().parent
DEFAULT_PRESET = "default"

_NAME_RE = re.compile(r"^[A-Za-z0-9_-]+$")


class PresetResolver:
    """Resolves preset names to fully merged Preset objects.

    Presets are looked up in ``presets_dir`` (if given) and then in the
    presets bundled with the package. A missing or unreadable preset falls
    back to the default preset; only a broken default is fatal.
    """

    def __init__(
        self,
        presets_dir: str | Path | None = None,
        default_preset: str = DEFAULT_PRESET,
        builtin_dir: Path = BUILTIN_PRESETS_DIR,
    ):
        self.search_dirs: list[Path] = []
        if presets_dir:
            self.search_dirs.append(Path(presets_dir))
        self.search_dirs.append(builtin_dir)
        self.default_preset = default_preset

    def resolve(self, name: str | None = None) -> Preset:
        """Return the named preset with its inheritance chain merged in."""
        return self._resolve(name or self.default_preset, chain=())

    def available(self) -> list[str]:
        """Preset ids found on the search path, first directory wins."""
        seen: dict[str, None] = {}
        for directory in self.search_dirs:
            if not directory.is_dir():
                continue
            for path in sorted(directory.glob("*.json")):
                seen.setdefault(path.stem, None)
        return list(seen)

    # ------------------------------------------------------------------

    def _resolve(self, name: str, chain: tuple[str, ...]) -> Preset:
        if name in chain:
            cycle = " -> ".join([*chain, name])
            raise ConfigError(f"Circular preset inheritance: {cycle}")

        preset = self._load(name)
        if preset is None:
            if name == self.default_preset:
                raise ConfigError(
                    f"Default preset '{self.default_preset}' not found or unreadable"
                )
            logger.warning("Preset '%s' not found, falling back to '%s'",
                           name, self.default_preset)
            return self._resolve(self.default_preset, chain)

        chain = (*chain, name)
        if not preset.extends:
            merged = preset.model_copy(
                update={"dimensions": preset.own_dimensions(), "extra_dimensions": []}
            )
            _check_unique_ids(merged, name)
            return merged

        parent = self._resolve(preset.extends, chain)
        merged = Preset(
            id=preset.id or parent.id,
            name=preset.name or parent.name,
            version=preset.version or parent.version,
            description=preset.description or parent.description,
            dimensions=[*parent.dimensions, *preset.own_dimensions()],
            extends=None,
        )
        _check_unique_ids(merged, name)
        logger.debug("Resolved preset '%s' via '%s' (%d dimensions)",
                     name, preset.extends, len(merged.dimensions))
        return merged

    def _find_file(self, name: str) -> Path | None:
        if not _NAME_RE.match(name):
            return None
        for directory in self.search_dirs:
            path = directory / f"{name}.json"
            if path.is_file():
                return path
        return None

    def _load(self, name: str) -> Preset | None:
        path = self._find_file(name)
        if path is None:
            return None
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            preset = Preset(**data)
        except (OSError, json.JSONDecodeError, ValidationError, TypeError) as e:
            logger.warning("Failed to load preset %s: %s", path, e)
            return None
        if not preset.id:
            preset = preset.model_copy(update={"id": name})
        return preset


def _check_unique_ids(preset: Preset, name: str) -> None:
    seen: set[str] = set()
    for dim in preset.dimensions:
        if dim.id in seen:
            raise ConfigError(f"Preset '{name}' declares dimension '{dim.id}' more than once")
        seen.add(dim.id)
