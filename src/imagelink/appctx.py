"""Application-wide wiring of the caching and manifest services."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from .application.services.image_loading_service import ImageLoadingService
from .application.services.manifest_loader import ManifestLoader
from .errors.handler import ErrorHandler
from .events.bus import EventBus
from .infrastructure.services.cache_stats import CacheStatsCollector
from .infrastructure.services.connectivity import ConnectivityMonitor
from .infrastructure.services.disk_cache import DiskImageStore
from .infrastructure.services.fetcher import HttpFetcher
from .infrastructure.services.memory_cache import MemoryImageCache

if TYPE_CHECKING:  # pragma: no cover - only for type checking
    from .settings.manager import SettingsManager
    from .infrastructure.services.qt_reachability import QtReachabilitySource

LOGGER = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Container object shared by the CLI and any front end."""

    settings: "SettingsManager"
    events: EventBus
    errors: ErrorHandler
    connectivity: ConnectivityMonitor
    fetcher: HttpFetcher
    images: ImageLoadingService
    manifest: ManifestLoader
    stats: CacheStatsCollector
    reachability: Optional["QtReachabilitySource"] = field(default=None)
    _qt_app: Any = field(default=None, repr=False)

    @classmethod
    def create(
        cls,
        settings: "SettingsManager",
        *,
        connectivity: ConnectivityMonitor | None = None,
        fetcher: HttpFetcher | None = None,
        auto_retry: bool = True,
    ) -> "AppContext":
        events = EventBus()
        errors = ErrorHandler(logging.getLogger("imagelink"), events)
        connectivity = connectivity or ConnectivityMonitor()
        fetcher = fetcher or HttpFetcher(timeout=float(settings.get("network.timeout")))
        stats = CacheStatsCollector()

        disk = DiskImageStore(settings.cache_root())
        disk.ensure_directories()
        images = ImageLoadingService(
            fetcher=fetcher,
            disk_store=disk,
            image_cache=MemoryImageCache(int(settings.get("cache.image_capacity"))),
            thumbnail_cache=MemoryImageCache(int(settings.get("cache.thumbnail_capacity"))),
            stats=stats,
            event_bus=events,
            image_quality=int(settings.get("cache.image_quality")),
            thumbnail_quality=int(settings.get("cache.thumbnail_quality")),
        )
        manifest = ManifestLoader(
            fetcher=fetcher,
            connectivity=connectivity,
            manifest_url=settings.get("manifest_url"),
            event_bus=events,
            error_handler=errors,
            auto_retry=auto_retry,
        )
        return cls(
            settings=settings,
            events=events,
            errors=errors,
            connectivity=connectivity,
            fetcher=fetcher,
            images=images,
            manifest=manifest,
            stats=stats,
        )

    def watch_reachability(self) -> bool:
        """Feed the monitor from Qt's network information backend."""

        from PySide6.QtCore import QCoreApplication

        from .infrastructure.services.qt_reachability import QtReachabilitySource

        if QCoreApplication.instance() is None:
            # Keep a reference; the backend needs a living application object.
            self._qt_app = QCoreApplication([])
        self.reachability = QtReachabilitySource(self.connectivity)
        return self.reachability.start()

    def close(self) -> None:
        if self.reachability is not None:
            self.reachability.stop()
        self.manifest.shutdown()
        self.images.shutdown()
        self.fetcher.close()
        self.events.shutdown()
