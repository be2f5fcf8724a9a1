"""Feed :class:`ConnectivityMonitor` from Qt's ``QNetworkInformation``."""

from __future__ import annotations

import logging
from typing import Any, Optional

from PySide6.QtNetwork import QNetworkInformation

from imagelink.infrastructure.services.connectivity import ConnectivityMonitor
from imagelink.models.types import ConnectivityState, TransportType

LOGGER = logging.getLogger(__name__)

_Reachability = QNetworkInformation.Reachability
_Medium = QNetworkInformation.TransportMedium

# ``Unknown`` counts as connected; requests then fail with their own errors.
_CONNECTED_REACHABILITY = {_Reachability.Online, _Reachability.Unknown}

_TRANSPORTS = {
    _Medium.WiFi: TransportType.WIFI,
    _Medium.Cellular: TransportType.CELLULAR,
    _Medium.Ethernet: TransportType.WIRED,
}


def _load_backend() -> Optional[Any]:
    if QNetworkInformation.loadDefaultBackend():
        return QNetworkInformation.instance()
    return None


def state_from_reachability(reachability: Any) -> ConnectivityState:
    if reachability in _CONNECTED_REACHABILITY:
        return ConnectivityState.CONNECTED
    return ConnectivityState.DISCONNECTED


def transport_from_medium(medium: Any) -> TransportType:
    return _TRANSPORTS.get(medium, TransportType.UNKNOWN)


class QtReachabilitySource:
    """Forward Qt reachability/transport signals to a monitor.

    Requires a ``QCoreApplication`` for the default backend; signals are
    delivered by the Qt event loop.  When the platform offers no backend the
    monitor is marked connected with an unknown transport.
    """

    def __init__(
        self,
        monitor: ConnectivityMonitor,
        information: Optional[Any] = None,
    ) -> None:
        self._monitor = monitor
        self._info = information
        self._started = False

    def start(self) -> bool:
        """Seed the monitor and subscribe; returns ``False`` without a backend."""
        if self._started:
            return self._info is not None
        self._started = True
        if self._info is None:
            self._info = _load_backend()
        if self._info is None:
            LOGGER.warning("No network information backend; assuming connectivity")
            self._monitor.update(ConnectivityState.CONNECTED, TransportType.UNKNOWN)
            return False

        self._info.reachabilityChanged.connect(self._on_reachability_changed)
        self._info.transportMediumChanged.connect(self._on_transport_changed)
        self._publish()
        return True

    def stop(self) -> None:
        if self._info is None or not self._started:
            return
        try:
            self._info.reachabilityChanged.disconnect(self._on_reachability_changed)
            self._info.transportMediumChanged.disconnect(self._on_transport_changed)
        except (RuntimeError, TypeError) as exc:
            LOGGER.debug("Reachability signals already disconnected: %s", exc)
        self._started = False

    def _on_reachability_changed(self, _reachability: Any) -> None:
        self._publish()

    def _on_transport_changed(self, _medium: Any) -> None:
        self._publish()

    def _publish(self) -> None:
        self._monitor.update(
            state_from_reachability(self._info.reachability()),
            transport_from_medium(self._info.transportMedium()),
        )
