"""PluginMonitor: periodic, non-overlapping synchronization of the plugins directory."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from .synchronizer import DirectorySynchronizer

if TYPE_CHECKING:
    from .models import SyncReport
    from .registry import PluginRegistry

log = logging.getLogger(__name__)


class PluginMonitor:
    """Periodically check the plugins directory on a single background thread.

    The first cycle runs immediately; each later one starts ``interval``
    seconds after the previous one finished. ``trigger()`` asks for an early
    cycle; requests made while a cycle runs collapse into one.
    """

    def __init__(
        self,
        registry: PluginRegistry,
        synchronizer: DirectorySynchronizer | None = None,
        interval: float | None = None,
    ):
        self.registry = registry
        self.synchronizer = synchronizer or DirectorySynchronizer(registry)
        self.interval = interval
        self.cycles = 0
        self.last_report: SyncReport | None = None
        # Prevents two cycles from running in parallel. Not reentrant.
        self._cycle_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self._stop_event: threading.Event | None = None
        self._wake_event: threading.Event | None = None
        self._task_running = False

    @property
    def poll_interval(self) -> float:
        if self.interval is not None:
            return self.interval
        return self.registry.config.poll_interval

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def is_task_running(self) -> bool:
        return self._task_running

    def start(self) -> None:
        """Start periodically checking the plugin directory, restarting if already running."""
        with self._state_lock:
            self._shutdown()
            interval = self.poll_interval
            stop_event = threading.Event()
            wake_event = threading.Event()
            thread = threading.Thread(
                target=self._loop,
                args=(interval, stop_event, wake_event),
                name="pluginwatch-monitor",
                daemon=True,
            )
            self._stop_event = stop_event
            self._wake_event = wake_event
            self._thread = thread
            thread.start()
        log.info(
            "Monitoring %s every %.0fs", self.registry.plugins_directory, interval
        )

    def stop(self, timeout: float | None = None) -> None:
        """Stop the timer, waiting for an in-flight cycle to finish."""
        with self._state_lock:
            self._shutdown(timeout)

    def trigger(self) -> None:
        """Request a cycle as soon as possible. Pending requests are coalesced."""
        wake_event = self._wake_event
        if wake_event is not None:
            wake_event.set()

    def _shutdown(self, timeout: float | None = None) -> None:
        thread, stop_event, wake_event = self._thread, self._stop_event, self._wake_event
        self._thread = self._stop_event = self._wake_event = None
        if thread is None:
            return
        stop_event.set()
        wake_event.set()
        if thread is not threading.current_thread():
            thread.join(timeout)

    def _loop(
        self, interval: float, stop_event: threading.Event, wake_event: threading.Event
    ) -> None:
        while not stop_event.is_set():
            self.run_cycle()
            wake_event.wait(interval)
            wake_event.clear()

    def run_cycle(self) -> SyncReport | None:
        """Run one synchronization cycle now. Exceptions are logged, never raised."""
        with self._cycle_lock:
            self._task_running = True
            try:
                report = self.synchronizer.synchronize()
                self.last_report = report
                return report
            except Exception:
                log.exception("An unexpected exception occurred while monitoring plugins")
                return None
            finally:
                self.cycles += 1
                self._task_running = False
