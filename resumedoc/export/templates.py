from __future__ import annotations

import json
import threading
from pathlib import Path

from pydantic import ValidationError

from resumedoc.schemas.render import TemplateMeta

_DEFAULT_TEMPLATES_PATH = Path(__file__).resolve().parents[2] / "templates" / "templates.json"


class TemplateCatalog:
    """Template metadata read once from templates.json and kept until invalidated."""

    def __init__(self, path: str | Path | None = None):
        resolved = Path(path) if path else _DEFAULT_TEMPLATES_PATH
        if not resolved.is_absolute() and not resolved.exists():
            resolved = Path(__file__).resolve().parents[2] / resolved
        self.path = resolved
        self._templates: list[TemplateMeta] | None = None
        self._lock = threading.Lock()

    def get(self) -> list[TemplateMeta]:
        with self._lock:
            if self._templates is None:
                self._templates = self._load()
            return list(self._templates)

    def find(self, template_id: str) -> TemplateMeta | None:
        for template in self.get():
            if template.id == template_id:
                return template
        return None

    def invalidate(self) -> None:
        with self._lock:
            self._templates = None

    def _load(self) -> list[TemplateMeta]:
        if not self.path.exists():
            raise RuntimeError(f"Template catalog not found at '{self.path}'.")
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise RuntimeError(f"Failed to read template catalog '{self.path}': {exc}") from exc

        items = data.get("templates") if isinstance(data, dict) else data
        if not isinstance(items, list):
            raise RuntimeError(f"Invalid template catalog '{self.path}': expected a 'templates' list.")
        try:
            return [TemplateMeta.model_validate(item) for item in items]
        except ValidationError as exc:
            raise RuntimeError(f"Invalid template entry in '{self.path}': {exc}") from exc
