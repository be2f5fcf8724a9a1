"""Manifest entries: validated http(s) image URLs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List
from urllib.parse import SplitResult, urlsplit

from imagelink.config import ALLOWED_SCHEMES, IMAGE_EXTENSIONS
from imagelink.errors import InvalidURLError


@dataclass(frozen=True)
class SourceURL:
    """An image reference taken from the manifest.

    Equality and hashing use the raw string only.
    """

    raw: str
    _parts: SplitResult | None = field(default=None, init=False, repr=False, compare=False, hash=False)

    def __post_init__(self) -> None:
        try:
            parts = urlsplit(self.raw)
            # Accessing ``port`` validates it; a bad port makes the URL malformed.
            parts.port
        except ValueError:
            parts = None
        object.__setattr__(self, "_parts", parts)

    @classmethod
    def parse(cls, raw: str) -> "SourceURL":
        """Return a :class:`SourceURL` for *raw* or raise :class:`InvalidURLError`."""
        candidate = cls(raw)
        if not candidate.is_valid:
            raise InvalidURLError(f"Invalid URL: {raw!r}")
        return candidate

    @property
    def url(self) -> SplitResult | None:
        return self._parts

    @property
    def is_valid(self) -> bool:
        parts = self._parts
        if parts is None:
            return False
        return parts.scheme.lower() in ALLOWED_SCHEMES and bool(parts.netloc)

    @property
    def is_image_url(self) -> bool:
        """Heuristic: known image extension, or ``images`` anywhere in the URL."""
        if not self.is_valid:
            return False
        extension = self.raw.rsplit(".", 1)[-1].lower() if "." in self.raw else ""
        return extension in IMAGE_EXTENSIONS or "images" in self.raw

    def __str__(self) -> str:
        return self.raw


def parse_manifest(text: str) -> List[SourceURL]:
    """Return the valid URLs of a newline-separated manifest, in order.

    Lines are trimmed; blank lines and invalid URLs are dropped silently.
    """

    entries: List[SourceURL] = []
    for line in text.splitlines():
        trimmed = line.strip()
        if not trimmed:
            continue
        candidate = SourceURL(trimmed)
        if candidate.is_valid:
            entries.append(candidate)
    return entries
