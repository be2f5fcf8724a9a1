from .bus import Event, EventBus, Subscription
from .gallery_events import CacheClearedEvent, ImageLoadedEvent, ManifestLoadedEvent

__all__ = [
    "CacheClearedEvent",
    "Event",
    "EventBus",
    "ImageLoadedEvent",
    "ManifestLoadedEvent",
    "Subscription",
]
