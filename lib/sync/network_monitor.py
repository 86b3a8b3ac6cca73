# =============================================================================
# lib/sync/network_monitor.py - Connectivity Monitor
# =============================================================================
# Tracks whether the API is reachable and notifies subscribers when that
# changes. Reachability is probed with an HTTP GET against the liveness
# endpoint; a background thread repeats the probe on an interval.
#
# Usage:
#   monitor = get_network_monitor()
#   unsubscribe = monitor.subscribe(lambda status: print(status))
#   monitor.start_polling()
# =============================================================================

from __future__ import annotations

import logging
import threading
from typing import Callable, Literal

import httpx

from app.config import settings

logger = logging.getLogger(__name__)

NetworkStatus = Literal["online", "offline"]
StatusListener = Callable[[NetworkStatus], None]

DEFAULT_CHECK_INTERVAL_MS = 5000


class NetworkMonitor:
    """
    Online/offline state with change notifications.

    Listeners are only called when the status actually flips. A listener
    that raises is logged and skipped; the rest still run.
    """

    def __init__(
        self,
        health_url: str,
        check_interval_ms: int = DEFAULT_CHECK_INTERVAL_MS,
        timeout: float = 5.0,
        initial_status: NetworkStatus = "online",
    ):
        self.health_url = health_url
        self.check_interval_ms = check_interval_ms
        self.timeout = timeout
        self._status: NetworkStatus = initial_status
        self._listeners: list[StatusListener] = []
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    # -------------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------------

    def get_status(self) -> NetworkStatus:
        return self._status

    def is_online(self) -> bool:
        return self._status == "online"

    def is_offline(self) -> bool:
        return self._status == "offline"

    def check_connection(self) -> NetworkStatus:
        """Probe the health URL once and update the status."""
        try:
            response = httpx.get(self.health_url, timeout=self.timeout)
            status: NetworkStatus = "online" if response.status_code < 500 else "offline"
        except httpx.HTTPError as e:
            logger.debug(f"Connectivity probe failed: {e}")
            status = "offline"

        self._set_status(status)
        return status

    def _set_status(self, status: NetworkStatus) -> None:
        with self._lock:
            if status == self._status:
                return
            self._status = status
            listeners = list(self._listeners)

        logger.info(f"Network status changed to {status}")
        for listener in listeners:
            try:
                listener(status)
            except Exception as e:
                logger.error(f"Network status listener failed: {e}")

    # -------------------------------------------------------------------------
    # Subscriptions
    # -------------------------------------------------------------------------

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        """
        Register a status listener.

        Returns:
            A callable that removes the listener again
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    # -------------------------------------------------------------------------
    # Polling
    # -------------------------------------------------------------------------

    def start_polling(self) -> None:
        """Start the background probe loop. No-op if already running."""
        if self._thread is not None and self._thread.is_alive():
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._poll, name="network-monitor", daemon=True)
        self._thread.start()

    def _poll(self) -> None:
        while not self._stop_event.is_set():
            self.check_connection()
            self._stop_event.wait(self.check_interval_ms / 1000)

    def stop_polling(self) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=self.timeout + 1)
            self._thread = None

    def destroy(self) -> None:
        """Stop polling and drop every listener."""
        self.stop_polling()
        with self._lock:
            self._listeners.clear()


_monitor: NetworkMonitor | None = None


def get_network_monitor() -> NetworkMonitor:
    """Shared monitor probing this deployment's liveness endpoint."""
    global _monitor
    if _monitor is None:
        _monitor = NetworkMonitor(
            health_url=f"{settings.APP_URL.rstrip('/')}/api/v1/health/live",
            check_interval_ms=settings.NETWORK_CHECK_INTERVAL_MS,
        )
    return _monitor
