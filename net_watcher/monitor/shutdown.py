"""
Signal-driven shutdown watcher.

Turns the first SIGINT/SIGTERM into a cancellation token the monitor loop
polls between probes. The loop, not the signal handler, reads the final
statistics and decides what to return.
"""

import signal
import threading
from enum import Enum

from loguru import logger

WATCHED_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class WatcherState(str, Enum):
    WAITING = "waiting"
    TERMINATED = "terminated"


class ShutdownWatcher:
    """One-shot WAITING -> TERMINATED transition on a termination signal."""

    def __init__(self, signals: tuple[signal.Signals, ...] = WATCHED_SIGNALS):
        self.signals = signals
        self.token = threading.Event()
        self.state = WatcherState.WAITING
        self.signal_name: str | None = None
        self._previous: dict[signal.Signals, object] = {}

    def __enter__(self):
        """Context manager entry - install handlers."""
        self.install()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - restore previous handlers."""
        self.restore()

    def install(self) -> None:
        """Register handlers. Must be called from the main thread."""
        for sig in self.signals:
            self._previous[sig] = signal.signal(sig, self._handle)
        logger.debug(f"Shutdown watcher armed for {[s.name for s in self.signals]}")

    def restore(self) -> None:
        for sig, handler in self._previous.items():
            signal.signal(sig, handler)
        self._previous.clear()

    def _handle(self, signum, frame) -> None:
        self.trigger(signal.Signals(signum).name)

    def trigger(self, reason: str = "manual") -> bool:
        """
        Move to TERMINATED and set the token.

        Returns:
            True on the first call, False once already terminated
        """
        # Runs inside a signal handler: flag flips only, no logging
        if self.state is WatcherState.TERMINATED:
            return False
        self.state = WatcherState.TERMINATED
        self.signal_name = reason
        self.token.set()
        return True

    @property
    def terminated(self) -> bool:
        return self.token.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until a shutdown is requested or `timeout` elapses."""
        return self.token.wait(timeout)
