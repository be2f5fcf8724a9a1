"""Three-tier image service: L1 memory, L2 disk, L3 network.

Full-resolution images and thumbnails use separate memory caches and separate
disk namespaces.  A thumbnail miss on both tiers loads the full image (through
its own tiers) and derives the thumbnail from it.

Concurrent loads of the same key share a single in-flight fetch or
derivation; every waiter receives the same image or the same exception.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional, TypeVar

from imagelink.application.interfaces import IFetcher
from imagelink.config import (
    IMAGE_CACHE_CAPACITY,
    IMAGE_JPEG_QUALITY,
    LOADER_MAX_WORKERS,
    THUMBNAIL_CACHE_CAPACITY,
    THUMBNAIL_JPEG_QUALITY,
)
from imagelink.events.bus import EventBus
from imagelink.events.gallery_events import CacheClearedEvent, ImageLoadedEvent
from imagelink.infrastructure.services.cache_stats import CacheStatsCollector
from imagelink.infrastructure.services.disk_cache import DiskImageStore
from imagelink.infrastructure.services.memory_cache import MemoryImageCache
from imagelink.infrastructure.services.thumbnail_generator import ThumbnailDeriver
from imagelink.models.source_url import SourceURL
from imagelink.models.types import CachedImage, CacheNamespace, Size
from imagelink.utils.hashutils import thumbnail_key, url_key

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

ImageCallback = Callable[[CachedImage], None]
ErrorCallback = Callable[[Exception], None]


class LoadRequest:
    """Handle for one caller's asynchronous load.

    :meth:`cancel` only detaches this caller: its callbacks are not invoked,
    while a fetch shared with other callers keeps running and still populates
    the caches once complete.
    """

    def __init__(self, url: str, size: Size | None = None) -> None:
        self.url = url
        self.size = size
        self._cancelled = threading.Event()
        self._future: Optional[Future] = None

    def _attach(self, future: Future) -> None:
        self._future = future

    def cancel(self) -> None:
        self._cancelled.set()
        if self._future is not None:
            self._future.cancel()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def done(self) -> bool:
        return self._future is not None and self._future.done()

    def result(self, timeout: float | None = None) -> CachedImage | None:
        """Block until the load finishes; ``None`` if it was cancelled."""
        if self._future is None or self._future.cancelled() or self.cancelled:
            return None
        return self._future.result(timeout)


class _InFlight:
    """Single-flight map: one running computation per key."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._futures: dict[str, Future] = {}

    def run(self, key: str, compute: Callable[[], T]) -> T:
        with self._lock:
            future = self._futures.get(key)
            owner = future is None
            if owner:
                future = Future()
                self._futures[key] = future
        if not owner:
            LOGGER.debug("Joining in-flight load for %s", key)
            return future.result()

        try:
            value = compute()
        except BaseException as exc:
            future.set_exception(exc)
            raise
        else:
            future.set_result(value)
            return value
        finally:
            with self._lock:
                self._futures.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._futures)


class ImageLoadingService:
    """Entry point for loading gallery images and thumbnails by URL."""

    def __init__(
        self,
        fetcher: IFetcher,
        disk_store: DiskImageStore,
        image_cache: MemoryImageCache | None = None,
        thumbnail_cache: MemoryImageCache | None = None,
        deriver: ThumbnailDeriver | None = None,
        executor: ThreadPoolExecutor | None = None,
        stats: CacheStatsCollector | None = None,
        event_bus: EventBus | None = None,
        image_quality: int = IMAGE_JPEG_QUALITY,
        thumbnail_quality: int = THUMBNAIL_JPEG_QUALITY,
    ):
        self._fetcher = fetcher
        self._disk = disk_store
        self._images = image_cache or MemoryImageCache(IMAGE_CACHE_CAPACITY)
        self._thumbnails = thumbnail_cache or MemoryImageCache(THUMBNAIL_CACHE_CAPACITY)
        self._deriver = deriver or ThumbnailDeriver()
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=LOADER_MAX_WORKERS, thread_name_prefix="imagelink-loader"
        )
        self._stats = stats
        self._events = event_bus
        self._image_quality = image_quality
        self._thumbnail_quality = thumbnail_quality
        self._in_flight = _InFlight()

    @property
    def image_cache(self) -> MemoryImageCache:
        return self._images

    @property
    def thumbnail_cache(self) -> MemoryImageCache:
        return self._thumbnails

    @property
    def disk_store(self) -> DiskImageStore:
        return self._disk

    @property
    def stats(self) -> CacheStatsCollector | None:
        return self._stats

    def shutdown(self) -> None:
        """Shut down the internal executor if it was created by this service.

        Callers that supply their own executor are responsible for its
        lifecycle; calling ``shutdown()`` on those instances is a no-op.
        """
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)

    # ------------------------------------------------------------------
    # Synchronous API
    # ------------------------------------------------------------------

    def load_full(self, url: str | SourceURL) -> CachedImage:
        """Return the full-resolution image for *url*.

        Raises the fetcher's errors unchanged, or :class:`DecodeError` when the
        downloaded bytes are not an image.
        """
        url = str(url)
        key = url_key(url)

        cached = self._images.get(key)
        if cached is not None:
            self._record_hit("image.memory")
            return cached
        self._record_miss("image.memory")

        stored = self._disk.load_image(CacheNamespace.IMAGES, key)
        if stored is not None:
            self._record_hit("image.disk")
            self._images.put(key, stored)  # backfill L1
            self._announce(url, key, "disk")
            return stored
        self._record_miss("image.disk")

        return self._in_flight.run(key, lambda: self._fetch_full(url, key))

    def load_thumbnail(self, url: str | SourceURL, size: Size) -> CachedImage:
        """Return the *size* thumbnail of *url*, deriving it on a full miss."""
        url = str(url)
        key = thumbnail_key(url, size)

        cached = self._thumbnails.get(key)
        if cached is not None:
            self._record_hit("thumbnail.memory")
            return cached
        self._record_miss("thumbnail.memory")

        stored = self._disk.load_image(CacheNamespace.THUMBNAILS, key)
        if stored is not None:
            self._record_hit("thumbnail.disk")
            self._thumbnails.put(key, stored)  # backfill L1
            self._announce(url, key, "disk")
            return stored
        self._record_miss("thumbnail.disk")

        return self._in_flight.run(key, lambda: self._derive_thumbnail(url, key, size))

    def clear_cache(self) -> None:
        """Empty both memory tiers and both disk namespaces."""
        self._images.clear()
        self._thumbnails.clear()
        self._disk.clear_all()
        LOGGER.info("Cleared image caches under %s", self._disk.root)
        if self._events is not None:
            self._events.publish(CacheClearedEvent(cache_root=str(self._disk.root)))

    # ------------------------------------------------------------------
    # Asynchronous API
    # ------------------------------------------------------------------

    def request_full(
        self,
        url: str | SourceURL,
        callback: ImageCallback,
        on_error: ErrorCallback | None = None,
    ) -> LoadRequest:
        request = LoadRequest(str(url))
        return self._submit(request, lambda: self.load_full(request.url), callback, on_error)

    def request_thumbnail(
        self,
        url: str | SourceURL,
        size: Size,
        callback: ImageCallback,
        on_error: ErrorCallback | None = None,
    ) -> LoadRequest:
        request = LoadRequest(str(url), size)
        return self._submit(
            request, lambda: self.load_thumbnail(request.url, size), callback, on_error
        )

    def _submit(
        self,
        request: LoadRequest,
        load: Callable[[], CachedImage],
        callback: ImageCallback,
        on_error: ErrorCallback | None,
    ) -> LoadRequest:
        def _task() -> CachedImage | None:
            if request.cancelled:
                return None
            try:
                image = load()
            except Exception as exc:
                if request.cancelled:
                    return None
                if on_error is None:
                    LOGGER.warning("Loading %s failed: %s", request.url, exc)
                else:
                    on_error(exc)
                raise
            if not request.cancelled:
                callback(image)
            return image

        request._attach(self._executor.submit(_task))
        return request

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _fetch_full(self, url: str, key: str) -> CachedImage:
        # A flight that finished after our tier checks may already have filled L1.
        cached = self._images.get(key)
        if cached is not None:
            return cached
        try:
            data = self._fetcher.fetch_bytes(url)
        except Exception:
            if self._stats:
                self._stats.record_fetch(ok=False)
            raise
        if self._stats:
            self._stats.record_fetch(ok=True)

        image = CachedImage.decode(key, data)
        self._images.put(key, image)
        self._persist(CacheNamespace.IMAGES, image, self._image_quality)
        self._announce(url, key, "network")
        return image

    def _derive_thumbnail(self, url: str, key: str, size: Size) -> CachedImage:
        cached = self._thumbnails.get(key)
        if cached is not None:
            return cached
        source = self.load_full(url)
        thumbnail = self._deriver.derive(source, size)
        self._thumbnails.put(key, thumbnail)
        self._persist(CacheNamespace.THUMBNAILS, thumbnail, self._thumbnail_quality)
        self._announce(url, key, "derived")
        return thumbnail

    def _persist(self, namespace: CacheNamespace, image: CachedImage, quality: int) -> None:
        try:
            data = image.encode(quality)
        except (OSError, ValueError) as exc:
            LOGGER.warning("Cannot encode %s for the disk cache: %s", image.key, exc)
            return
        self._disk.save(namespace, image.key, data)

    def _announce(self, url: str, key: str, tier: str) -> None:
        if self._events is not None:
            self._events.publish(ImageLoadedEvent(url=url, key=key, tier=tier))

    def _record_hit(self, tier: str) -> None:
        if self._stats:
            self._stats.record_hit(tier)

    def _record_miss(self, tier: str) -> None:
        if self._stats:
            self._stats.record_miss(tier)
