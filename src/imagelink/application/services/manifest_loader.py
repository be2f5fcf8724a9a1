"""Connectivity-aware loading of the image manifest."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import List, Optional

from imagelink.application.interfaces import IFetcher
from imagelink.config import MANIFEST_URL
from imagelink.errors import ImageLinkError, NoConnectivityError
from imagelink.errors.handler import ErrorHandler, ErrorSeverity
from imagelink.events.bus import EventBus
from imagelink.events.gallery_events import ManifestLoadedEvent
from imagelink.infrastructure.services.connectivity import ConnectivityMonitor
from imagelink.models.source_url import SourceURL, parse_manifest
from imagelink.models.types import ConnectivitySnapshot
from imagelink.utils.signal import ObservableProperty

LOGGER = logging.getLogger(__name__)

NO_CONNECTION_MESSAGE = "No internet connection. Please check your connection."
LOAD_FAILED_MESSAGE = "Failed to load the image list: {error}"


class ManifestLoader:
    """Fetch the manifest and expose the gallery's list state.

    ``entries``, ``is_loading`` and ``error`` are observable so a view can bind
    to them.  Failures never retry on their own; the only automatic retry
    happens when the connectivity monitor reports a connection while the list
    is empty or an error is shown.
    """

    def __init__(
        self,
        fetcher: IFetcher,
        connectivity: ConnectivityMonitor,
        manifest_url: str = MANIFEST_URL,
        event_bus: Optional[EventBus] = None,
        error_handler: Optional[ErrorHandler] = None,
        executor: Optional[Executor] = None,
        auto_retry: bool = True,
    ):
        self._fetcher = fetcher
        self._connectivity = connectivity
        self._manifest_url = manifest_url
        self._events = event_bus
        self._errors = error_handler
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="imagelink-manifest"
        )
        self._load_lock = threading.Lock()

        self.entries = ObservableProperty([], name="entries")
        self.is_loading = ObservableProperty(False, name="is_loading")
        self.error = ObservableProperty(None, name="error")

        self._auto_retry = auto_retry
        if auto_retry:
            connectivity.changed.connect(self._on_connectivity_changed)

    @property
    def manifest_url(self) -> str:
        return self._manifest_url

    def shutdown(self) -> None:
        if self._auto_retry:
            self._connectivity.changed.disconnect(self._on_connectivity_changed)
        if self._owns_executor:
            self._executor.shutdown(wait=False)

    def fetch_entries(self) -> List[SourceURL]:
        """Download and parse the manifest.

        Raises :class:`NoConnectivityError` without touching the network when
        the monitor reports no connection; otherwise the fetcher's errors
        propagate unchanged.
        """
        if not self._connectivity.is_connected:
            raise NoConnectivityError(NO_CONNECTION_MESSAGE)
        text = self._fetcher.fetch_text(self._manifest_url)
        entries = parse_manifest(text)
        LOGGER.info("Manifest %s lists %d image(s)", self._manifest_url, len(entries))
        return entries

    def load(self) -> bool:
        """Refresh the observable state; returns ``True`` on success.

        A call made while another load is running is ignored.
        """
        with self._load_lock:
            if not self.is_loading.set(True):
                return False
        try:
            try:
                entries = self.fetch_entries()
            except NoConnectivityError as exc:
                self.error.value = self._report(exc, NO_CONNECTION_MESSAGE, ErrorSeverity.WARNING)
                return False
            except ImageLinkError as exc:
                message = LOAD_FAILED_MESSAGE.format(error=exc)
                self.error.value = self._report(exc, message, ErrorSeverity.ERROR)
                return False
            self.error.value = None
            self.entries.value = entries
            if self._events is not None:
                self._events.publish(ManifestLoadedEvent(
                    manifest_url=self._manifest_url,
                    urls=[entry.raw for entry in entries],
                ))
            return True
        finally:
            self.is_loading.value = False

    def retry(self) -> bool:
        return self.load()

    def refresh(self) -> bool:
        """Drop the current list and load it again."""
        self.entries.value = []
        return self.load()

    def _report(self, error: Exception, message: str, severity: ErrorSeverity) -> str:
        if self._errors is not None:
            return self._errors.handle(
                error, severity, message=message, context={"manifest_url": self._manifest_url}
            )
        LOGGER.warning("%s (%s)", message, error)
        return message

    def _on_connectivity_changed(self, snapshot: ConnectivitySnapshot) -> None:
        if not snapshot.is_connected:
            return
        if self.entries.value and self.error.value is None:
            return
        LOGGER.debug("Connectivity restored; retrying manifest load")
        self._executor.submit(self.load)
