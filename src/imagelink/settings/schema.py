"""Schema helpers for the application settings file."""

from __future__ import annotations

import os
from copy import deepcopy
from typing import Any

from jsonschema import Draft202012Validator

from imagelink.config import (
    IMAGE_CACHE_CAPACITY,
    IMAGE_JPEG_QUALITY,
    MANIFEST_URL,
    REQUEST_TIMEOUT_SEC,
    THUMBNAIL_CACHE_CAPACITY,
    THUMBNAIL_JPEG_QUALITY,
)

_QUALITY = {"type": "integer", "minimum": 1, "maximum": 100}
_CAPACITY = {"type": "integer", "minimum": 1}

SETTINGS_SCHEMA: dict[str, Any] = {
    "$id": "imagelink/settings.schema.json",
    "type": "object",
    "required": ["schema", "manifest_url", "cache", "network"],
    "properties": {
        "schema": {"const": "imagelink/settings@1"},
        "manifest_url": {"type": "string", "pattern": "^[Hh][Tt][Tt][Pp][Ss]?://"},
        "cache_root": {"type": ["string", "null"]},
        "cache": {
            "type": "object",
            "properties": {
                "image_capacity": _CAPACITY,
                "thumbnail_capacity": _CAPACITY,
                "image_quality": _QUALITY,
                "thumbnail_quality": _QUALITY,
            },
            "additionalProperties": True,
        },
        "network": {
            "type": "object",
            "properties": {
                "timeout": {"type": "number", "exclusiveMinimum": 0},
            },
            "additionalProperties": True,
        },
    },
    "additionalProperties": True,
}

DEFAULT_SETTINGS: dict[str, Any] = {
    "schema": "imagelink/settings@1",
    "manifest_url": MANIFEST_URL,
    "cache_root": None,
    "cache": {
        "image_capacity": IMAGE_CACHE_CAPACITY,
        "thumbnail_capacity": THUMBNAIL_CACHE_CAPACITY,
        "image_quality": IMAGE_JPEG_QUALITY,
        "thumbnail_quality": THUMBNAIL_JPEG_QUALITY,
    },
    "network": {
        "timeout": REQUEST_TIMEOUT_SEC,
    },
}

_validator = Draft202012Validator(SETTINGS_SCHEMA)
_NESTED_SECTIONS = ("cache", "network")


def merge_with_defaults(data: dict[str, Any] | None) -> dict[str, Any]:
    """Merge *data* with :data:`DEFAULT_SETTINGS` and validate the result."""

    merged = deepcopy(DEFAULT_SETTINGS)
    if data:
        for key, value in data.items():
            if key in _NESTED_SECTIONS and isinstance(value, dict):
                target = merged.setdefault(key, {})
                for sub_key, sub_value in value.items():
                    target[sub_key] = sub_value
                continue
            if key == "cache_root" and value not in {None, ""}:
                try:
                    merged[key] = os.fspath(value)
                except TypeError:
                    continue
                continue
            merged[key] = value
    _validator.validate(merged)
    return merged


def validate_settings(data: dict[str, Any]) -> None:
    """Validate *data* against the settings schema."""

    _validator.validate(data)


__all__ = ["DEFAULT_SETTINGS", "SETTINGS_SCHEMA", "merge_with_defaults", "validate_settings"]
