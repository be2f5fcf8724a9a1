"""Settings file management with validation and change notifications."""

from __future__ import annotations

import os
import sys
from copy import deepcopy
from pathlib import Path
from typing import Any

from jsonschema import ValidationError

from ..config import APP_DIR_NAME
from ..errors import SettingsLoadError, SettingsValidationError
from ..utils.jsonio import read_json, write_json
from ..utils.signal import Signal
from .schema import DEFAULT_SETTINGS, merge_with_defaults, validate_settings


def default_settings_path() -> Path:
    """Return the default settings.json location for the current platform."""

    if os.name == "nt":
        base = os.environ.get("APPDATA")
        if base:
            return Path(base) / APP_DIR_NAME / "settings.json"
        return Path.home() / "AppData" / "Roaming" / APP_DIR_NAME / "settings.json"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_DIR_NAME / "settings.json"
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / APP_DIR_NAME / "settings.json"
    return Path.home() / ".config" / APP_DIR_NAME / "settings.json"


def default_cache_root() -> Path:
    """Return the per-user cache directory that holds the image namespaces."""

    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA")
        if base:
            return Path(base) / APP_DIR_NAME / "Cache"
        return Path.home() / "AppData" / "Local" / APP_DIR_NAME / "Cache"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Caches" / APP_DIR_NAME
    base = os.environ.get("XDG_CACHE_HOME")
    if base:
        return Path(base) / APP_DIR_NAME
    return Path.home() / ".cache" / APP_DIR_NAME


class SettingsManager:
    """Load, validate and persist user settings."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path
        self._data: dict[str, Any] = deepcopy(DEFAULT_SETTINGS)
        self.settingsChanged = Signal("settingsChanged")

    @property
    def path(self) -> Path:
        return self._path or default_settings_path()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def load(self, *, persist: bool = True) -> None:
        """Load the settings JSON from disk, creating defaults if missing."""

        path = self.path
        self._path = path
        payload = None
        if path.exists():
            try:
                payload = read_json(path)
            except (OSError, ValueError) as exc:
                raise SettingsLoadError(f"Cannot read {path}: {exc}") from exc
            if not isinstance(payload, dict):
                raise SettingsLoadError(f"{path} does not contain a JSON object")
        try:
            self._data = merge_with_defaults(payload)
        except ValidationError as exc:
            raise SettingsValidationError(exc.message) from exc
        if persist:
            self._write()

    def get(self, key: str, default: Any | None = None) -> Any:
        """Return the value for *key*, supporting dotted access for nested keys."""

        target: Any = self._data
        for part in key.split("."):
            if not isinstance(target, dict) or part not in target:
                return default
            target = target[part]
        return target

    def set(self, key: str, value: Any) -> None:
        """Update *key* with *value*, validate and persist the change."""

        if isinstance(value, Path):
            value = str(value)
        candidate = deepcopy(self._data)
        parts = key.split(".")
        target: dict[str, Any] = candidate
        for part in parts[:-1]:
            branch = target.get(part)
            if not isinstance(branch, dict):
                branch = {}
                target[part] = branch
            target = branch
        target[parts[-1]] = value
        try:
            validate_settings(candidate)
        except ValidationError as exc:
            raise SettingsValidationError(exc.message) from exc
        self._data = candidate
        self._write()
        self.settingsChanged.emit(key, value)

    def cache_root(self) -> Path:
        configured = self.get("cache_root")
        return Path(configured) if configured else default_cache_root()

    def save(self) -> None:
        """Persist the current settings without changing them."""
        self._write()

    def as_dict(self) -> dict[str, Any]:
        return deepcopy(self._data)

    def _write(self) -> None:
        try:
            write_json(self.path, self._data)
        except OSError as exc:
            raise SettingsLoadError(f"Cannot write {self.path}: {exc}") from exc
