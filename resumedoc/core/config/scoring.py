from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Mapping

import yaml

_DEFAULT_SCORING_CONFIG_PATH = Path(__file__).resolve().parents[3] / "config" / "scoring.yaml"


def lookup_value(config: Mapping[str, Any] | None, path: str, default: Any = None) -> Any:
    """Get nested config value using dot path notation, e.g. 'keywords.category_weights.soft'."""
    if not path or not config:
        return default

    current: Any = config
    for key in path.split("."):
        if not isinstance(current, Mapping):
            return default
        if key not in current:
            return default
        current = current[key]
    return current


class ScoringConfigCache:
    """Lazily loads config/scoring.yaml and keeps it until invalidated."""

    def __init__(self, path: str | Path | None = None):
        resolved = Path(path) if path else _DEFAULT_SCORING_CONFIG_PATH
        if not resolved.is_absolute() and not resolved.exists():
            resolved = Path(__file__).resolve().parents[3] / resolved
        self.path = resolved
        self._config: dict[str, Any] | None = None
        self._lock = threading.Lock()

    def get(self) -> dict[str, Any]:
        with self._lock:
            if self._config is None:
                self._config = self._load()
            return self._config

    def value(self, path: str, default: Any = None) -> Any:
        return lookup_value(self.get(), path, default)

    def invalidate(self) -> None:
        with self._lock:
            self._config = None

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            raise RuntimeError(
                f"Scoring config not found at '{self.path}'. "
                "Expected file: config/scoring.yaml"
            )

        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise RuntimeError(f"Failed to read scoring config '{self.path}': {exc}") from exc

        try:
            parsed = yaml.safe_load(raw)
        except yaml.YAMLError as exc:
            raise RuntimeError(f"Invalid YAML in scoring config '{self.path}': {exc}") from exc

        if not isinstance(parsed, dict):
            raise RuntimeError(
                f"Invalid scoring config '{self.path}': expected a top-level mapping."
            )
        return parsed
