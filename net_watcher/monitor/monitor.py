"""
The ping-and-statistics loop.

One loop serves both the console-only and the console+telemetry setups:
the reporter decides where each sample goes, and extra on-sample hooks can
be attached without touching the loop.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from loguru import logger

from net_watcher.monitor.influx_client import InfluxWriter
from net_watcher.monitor.prober import Prober
from net_watcher.monitor.shutdown import ShutdownWatcher
from net_watcher.monitor.stats_models import Statistics, StatisticsSnapshot

SampleHook = Callable[[StatisticsSnapshot], None]


class Reporter(Protocol):
    def report(self, snapshot: StatisticsSnapshot) -> None: ...


class ConsoleReporter:
    """Print one line per reply."""

    def __init__(self, console=None):
        self.console = console or logger.bind(console=True)

    def report(self, snapshot: StatisticsSnapshot) -> None:
        self.console.info(
            f"Endpoint: {snapshot.endpoint}, IP Addr: {snapshot.address}, RTT: {snapshot.value:.3f} "
        )


class InfluxReporter(ConsoleReporter):
    """Console line plus a heartbeat point per reply."""

    def __init__(self, writer: InfluxWriter, console=None):
        super().__init__(console)
        self.writer = writer

    def report(self, snapshot: StatisticsSnapshot) -> None:
        super().report(snapshot)
        self.writer.write_heartbeat(snapshot)


@dataclass
class Summary:
    """What the loop hands back once it stops."""

    snapshot: StatisticsSnapshot
    reason: str | None = None

    def __str__(self) -> str:
        return self.snapshot.format_summary()


class Monitor:
    """Drive the prober until the shutdown watcher fires."""

    def __init__(
        self,
        stats: Statistics,
        prober: Prober,
        reporter: Reporter,
        watcher: ShutdownWatcher,
        on_sample: list[SampleHook] | None = None,
        interval: float = 0.0,
    ):
        """
        Initialize monitor.

        Args:
            stats: Statistics record owned by this monitor
            prober: Sends one echo per call
            reporter: Receives every successful sample
            watcher: Cancellation source, checked between probes
            on_sample: Extra callbacks run after the reporter
            interval: Minimum seconds per attempt; a fast reply waits out the rest
        """
        self.stats = stats
        self.prober = prober
        self.reporter = reporter
        self.watcher = watcher
        self.on_sample = list(on_sample or [])
        self.interval = interval

    def run_once(self) -> float | None:
        """
        One attempt: count it, probe, fold in the reply if there was one.

        A reply that lands after shutdown was requested is discarded, so the
        summary holds the values from the moment the signal arrived.

        Returns:
            RTT in milliseconds, or None on timeout or shutdown
        """
        attempt = self.stats.record_attempt()
        rtt = self.prober.probe()

        if self.watcher.terminated:
            logger.debug(f"Attempt {attempt}: shutdown requested, reply {rtt} discarded")
            return None

        if rtt is None:
            logger.debug(f"Attempt {attempt}: no reply from {self.stats.address}")
            return None

        snapshot = self.stats.record_reply(rtt)
        self.reporter.report(snapshot)
        for hook in self.on_sample:
            hook(snapshot)

        return rtt

    def run(self, max_attempts: int | None = None) -> Summary:
        """
        Probe once per interval until cancelled.

        Args:
            max_attempts: Stop after this many attempts (None = forever)

        Returns:
            Summary built from a final snapshot
        """
        logger.info(f"Monitoring {self.stats.endpoint} ({self.stats.address}) every {self.interval}s")
        attempts = 0

        while not self.watcher.terminated:
            started = time.monotonic()
            self.run_once()
            attempts += 1

            if max_attempts is not None and attempts >= max_attempts:
                break

            # A signal wakes the wait immediately
            remaining = self.interval - (time.monotonic() - started)
            if remaining > 0:
                self.watcher.wait(remaining)

        summary = Summary(snapshot=self.stats.snapshot(), reason=self.watcher.signal_name)
        logger.info(f"Monitor stopped ({summary.reason or 'attempt limit'}): {summary.snapshot.model_dump()}")
        return summary
