"""Content-addressed cache keys derived from URL strings."""

from __future__ import annotations

from typing import TYPE_CHECKING

import xxhash

if TYPE_CHECKING:  # pragma: no cover - only for type checking
    from imagelink.models.types import Size


def url_key(url: str) -> str:
    """Return the XXH3 128-bit hex digest of *url*.

    Used for stable file naming only; it is not a security boundary.
    """

    return xxhash.xxh3_128(url.encode("utf-8", "surrogatepass")).hexdigest()


def thumbnail_key(url: str, size: "Size") -> str:
    """Return the key of the *size* thumbnail of *url*."""

    return f"{url_key(url)}_{size.width}x{size.height}"
