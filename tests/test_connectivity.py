"""Tests for ConnectivityMonitor and the Qt reachability adapter."""

from __future__ import annotations

import threading
from unittest.mock import MagicMock

import pytest

from imagelink.infrastructure.services.connectivity import ConnectivityMonitor
from imagelink.models.types import ConnectivitySnapshot, ConnectivityState, TransportType


class TestConnectivityMonitor:
    def test_defaults_to_disconnected(self):
        monitor = ConnectivityMonitor()
        assert not monitor.is_connected
        assert monitor.transport is TransportType.UNKNOWN

    def test_update_changes_state(self):
        monitor = ConnectivityMonitor()
        monitor.update(ConnectivityState.CONNECTED, TransportType.WIFI)
        assert monitor.is_connected
        assert monitor.state is ConnectivityState.CONNECTED
        assert monitor.snapshot() == ConnectivitySnapshot(
            ConnectivityState.CONNECTED, TransportType.WIFI
        )

    def test_transport_kept_when_not_given(self):
        monitor = ConnectivityMonitor(ConnectivityState.CONNECTED, TransportType.CELLULAR)
        monitor.update(ConnectivityState.DISCONNECTED)
        assert monitor.transport is TransportType.CELLULAR

    def test_notifies_every_update_including_duplicates(self):
        monitor = ConnectivityMonitor()
        seen: list[ConnectivitySnapshot] = []
        monitor.changed.connect(seen.append)
        monitor.update(ConnectivityState.CONNECTED)
        monitor.update(ConnectivityState.CONNECTED)
        monitor.update(ConnectivityState.DISCONNECTED)
        assert [s.state for s in seen] == [
            ConnectivityState.CONNECTED,
            ConnectivityState.CONNECTED,
            ConnectivityState.DISCONNECTED,
        ]

    def test_handler_can_read_state(self):
        monitor = ConnectivityMonitor()
        observed = []
        monitor.changed.connect(lambda _snap: observed.append(monitor.is_connected))
        monitor.update(ConnectivityState.CONNECTED)
        assert observed == [True]

    def test_concurrent_updates_all_notify(self):
        monitor = ConnectivityMonitor()
        seen: list[ConnectivitySnapshot] = []
        monitor.changed.connect(seen.append)

        def _worker():
            for _ in range(200):
                monitor.update(ConnectivityState.CONNECTED, TransportType.WIRED)

        threads = [threading.Thread(target=_worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(seen) == 800
        assert monitor.snapshot() == ConnectivitySnapshot(
            ConnectivityState.CONNECTED, TransportType.WIRED
        )


class TestQtReachabilitySource:
    @pytest.fixture(autouse=True)
    def _qt(self):
        pytest.importorskip("PySide6.QtNetwork")

    def _info(self, reachability, medium):
        info = MagicMock()
        info.reachability.return_value = reachability
        info.transportMedium.return_value = medium
        return info

    def test_state_mapping(self):
        from PySide6.QtNetwork import QNetworkInformation

        from imagelink.infrastructure.services.qt_reachability import state_from_reachability

        R = QNetworkInformation.Reachability
        assert state_from_reachability(R.Online) is ConnectivityState.CONNECTED
        assert state_from_reachability(R.Unknown) is ConnectivityState.CONNECTED
        assert state_from_reachability(R.Disconnected) is ConnectivityState.DISCONNECTED
        assert state_from_reachability(R.Local) is ConnectivityState.DISCONNECTED

    def test_transport_mapping(self):
        from PySide6.QtNetwork import QNetworkInformation

        from imagelink.infrastructure.services.qt_reachability import transport_from_medium

        M = QNetworkInformation.TransportMedium
        assert transport_from_medium(M.WiFi) is TransportType.WIFI
        assert transport_from_medium(M.Cellular) is TransportType.CELLULAR
        assert transport_from_medium(M.Ethernet) is TransportType.WIRED
        assert transport_from_medium(M.Bluetooth) is TransportType.UNKNOWN

    def test_start_seeds_monitor_and_forwards_changes(self):
        from PySide6.QtNetwork import QNetworkInformation

        from imagelink.infrastructure.services.qt_reachability import QtReachabilitySource

        R = QNetworkInformation.Reachability
        M = QNetworkInformation.TransportMedium
        info = self._info(R.Online, M.WiFi)
        monitor = ConnectivityMonitor()
        source = QtReachabilitySource(monitor, information=info)

        assert source.start() is True
        assert monitor.snapshot() == ConnectivitySnapshot(
            ConnectivityState.CONNECTED, TransportType.WIFI
        )

        handler = info.reachabilityChanged.connect.call_args[0][0]
        info.reachability.return_value = R.Disconnected
        handler(R.Disconnected)
        assert not monitor.is_connected

        source.stop()
        info.reachabilityChanged.disconnect.assert_called_once()

    def test_missing_backend_assumes_connectivity(self, monkeypatch):
        from imagelink.infrastructure.services import qt_reachability

        monkeypatch.setattr(qt_reachability, "_load_backend", lambda: None)
        monitor = ConnectivityMonitor()
        source = qt_reachability.QtReachabilitySource(monitor)
        assert source.start() is False
        assert monitor.is_connected
        assert monitor.transport is TransportType.UNKNOWN
