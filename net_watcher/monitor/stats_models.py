"""
Round-trip statistics for a single monitored endpoint using Pydantic.

`Statistics` is the one mutable record owned by the monitor loop. Every
read and write goes through its lock, so a snapshot taken from another
context never sees a half-applied reply.
"""

import threading
from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr


class StatisticsSnapshot(BaseModel):
    """Immutable point-in-time copy of the statistics record."""

    model_config = ConfigDict(frozen=True)

    source: str = ""
    endpoint: str = ""
    address: str = ""
    count: int = Field(0, ge=0)
    min: float = 0.0
    max: float = 0.0
    avg: float = 0.0
    value: float = 0.0
    elapsed: timedelta = Field(default_factory=timedelta, exclude=True)

    def format_summary(self) -> str:
        """Render the shutdown summary block."""
        return (
            "\r----\n"
            f"Statistics: elapsed={self.elapsed} count={self.count} "
            f"min={self.min:.3f} max={self.max:.3f} avg={self.avg:.3f}\n"
        )


class Statistics(BaseModel):
    """Running RTT statistics for one endpoint."""

    model_config = ConfigDict(validate_assignment=True)

    source: str = Field("", description="Hostname label used for telemetry tags")
    endpoint: str = Field("", description="Target as given by configuration")
    address: str = Field("", description="Resolved network address")
    count: int = Field(0, ge=0, description="Ping attempts issued")
    min: float = Field(0.0, ge=0, description="Lowest RTT in ms, 0 until the first reply")
    max: float = Field(0.0, ge=0, description="Highest RTT in ms")
    avg: float = Field(0.0, ge=0, description="Smoothed RTT in ms: avg = (avg + value) / 2")
    value: float = Field(0.0, ge=0, description="Latest RTT in ms")
    start: datetime = Field(default_factory=datetime.now, frozen=True, exclude=True)

    _lock: threading.Lock = PrivateAttr(default_factory=threading.Lock)

    def record_attempt(self) -> int:
        """Count one probe attempt, before it is sent. Returns the new count."""
        with self._lock:
            self.count += 1
            return self.count

    def record_reply(self, rtt_ms: float) -> StatisticsSnapshot:
        """
        Fold one reply latency into the record.

        Args:
            rtt_ms: Round-trip time in milliseconds

        Returns:
            Snapshot taken right after the update
        """
        with self._lock:
            self.value = rtt_ms

            # 0 means "unset", so the first reply always lands here
            if self.value < self.min or self.min == 0:
                self.min = self.value

            if self.value > self.max:
                self.max = self.value

            self.avg = (self.avg + self.value) / 2

            return self._snapshot_locked()

    def snapshot(self) -> StatisticsSnapshot:
        """Consistent copy of the record, safe to call from any thread."""
        with self._lock:
            return self._snapshot_locked()

    def _snapshot_locked(self) -> StatisticsSnapshot:
        return StatisticsSnapshot(
            elapsed=datetime.now() - self.start,
            **self.model_dump(),
        )
