from .source_url import SourceURL, parse_manifest
from .types import (
    CachedImage,
    CacheNamespace,
    ConnectivitySnapshot,
    ConnectivityState,
    Size,
    TransportType,
)

__all__ = [
    "CacheNamespace",
    "CachedImage",
    "ConnectivitySnapshot",
    "ConnectivityState",
    "Size",
    "SourceURL",
    "TransportType",
    "parse_manifest",
]
