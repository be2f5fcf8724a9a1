from dataclasses import dataclass, field

from .bus import Event


@dataclass(kw_only=True)
class ManifestLoadedEvent(Event):
    manifest_url: str = ""
    urls: list[str] = field(default_factory=list)


@dataclass(kw_only=True)
class CacheClearedEvent(Event):
    cache_root: str = ""


@dataclass(kw_only=True)
class ImageLoadedEvent(Event):
    url: str = ""
    key: str = ""
    tier: str = ""
