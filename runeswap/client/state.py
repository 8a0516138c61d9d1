"""Client preferences kept across sessions (background image, last search query).

The store is loaded once when it is created and written back on every change,
nothing else touches the file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from loguru import logger
from pydantic import BaseModel


class Preferences(BaseModel):
    background_image: Optional[str] = None
    search_query: str = ""


class PreferencesStore:
    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self.preferences = self.load()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Preferences:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return Preferences()
        except OSError as exc:
            logger.warning("Cannot read preferences {path}: {error}", path=self._path, error=exc)
            return Preferences()
        try:
            return Preferences.model_validate_json(raw)
        except ValueError as exc:
            logger.warning("Ignoring corrupt preferences {path}: {error}", path=self._path, error=exc)
            return Preferences()

    def _save(self) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(self.preferences.model_dump_json(exclude_none=True), encoding="utf-8")
        except OSError as exc:
            logger.warning("Failed to save preferences {path}: {error}", path=self._path, error=exc)

    def _update(self, **changes) -> None:
        updated = self.preferences.model_copy(update=changes)
        if updated == self.preferences:
            return
        self.preferences = updated
        self._save()

    def set_background_image(self, image: str | None) -> None:
        self._update(background_image=image or None)

    def clear_background_image(self) -> None:
        self._update(background_image=None)

    def set_search_query(self, query: str) -> None:
        self._update(search_query=query)


__all__ = ["Preferences", "PreferencesStore"]
