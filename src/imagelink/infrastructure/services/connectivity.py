"""Observable network reachability state.

:class:`ConnectivityMonitor` holds the most recently observed state and
broadcasts every observation through :attr:`ConnectivityMonitor.changed`.
It never polls on its own; platform adapters such as
:class:`imagelink.infrastructure.services.qt_reachability.QtReachabilitySource`
push updates into it.  Consumers receive the monitor explicitly, so tests can
substitute a monitor in any state.
"""

from __future__ import annotations

import logging
import threading

from imagelink.models.types import ConnectivitySnapshot, ConnectivityState, TransportType
from imagelink.utils.signal import Signal

LOGGER = logging.getLogger(__name__)


class ConnectivityMonitor:
    """Current reachability plus a change notification.

    ``changed`` fires with a :class:`ConnectivitySnapshot` on every update,
    including updates that merely re-affirm the current state, so handlers
    must tolerate duplicates.  Updates are serialised: a handler never sees an
    older snapshot after a newer one.
    """

    def __init__(
        self,
        state: ConnectivityState = ConnectivityState.DISCONNECTED,
        transport: TransportType = TransportType.UNKNOWN,
    ) -> None:
        self._snapshot = ConnectivitySnapshot(state=state, transport=transport)
        self._update_lock = threading.RLock()
        self.changed = Signal("connectivity.changed")

    @property
    def is_connected(self) -> bool:
        return self._snapshot.is_connected

    @property
    def state(self) -> ConnectivityState:
        return self._snapshot.state

    @property
    def transport(self) -> TransportType:
        return self._snapshot.transport

    def snapshot(self) -> ConnectivitySnapshot:
        return self._snapshot

    def update(
        self,
        state: ConnectivityState,
        transport: TransportType | None = None,
    ) -> None:
        """Record an observation from a network-interface signal source."""
        with self._update_lock:
            previous = self._snapshot
            snapshot = ConnectivitySnapshot(
                state=state,
                transport=previous.transport if transport is None else transport,
            )
            self._snapshot = snapshot
            if snapshot != previous:
                LOGGER.info(
                    "Connectivity %s -> %s (%s)",
                    previous.state.value,
                    snapshot.state.value,
                    snapshot.transport.value,
                )
            self.changed.emit(snapshot)
