"""
InfluxDB heartbeat writer.

Each successful reply becomes one `heartbeat` point, serialised to line
protocol by influxdb_client and pushed to the v2 write endpoint with httpx.
Writes are fire-and-forget: failures are logged and the point is dropped.
"""

from datetime import datetime, timezone

import httpx
from influxdb_client import Point, WritePrecision
from loguru import logger

from net_watcher.monitor.settings import InfluxSettings
from net_watcher.monitor.stats_models import StatisticsSnapshot

MEASUREMENT = "heartbeat"
UNIT = "response_time"


def build_heartbeat(snapshot: StatisticsSnapshot, when: datetime | None = None) -> Point:
    """Build the heartbeat point for the latest sample in `snapshot`."""
    when = when or datetime.now(timezone.utc)
    return (
        Point(MEASUREMENT)
        .tag("source", snapshot.source)
        .tag("endpoint", snapshot.endpoint)
        .tag("address", snapshot.address)
        .tag("unit", UNIT)
        .field("rtt", float(snapshot.value))
        .time(when, WritePrecision.NS)
    )


class InfluxWriter:
    """Client for the InfluxDB write API using httpx."""

    def __init__(
        self,
        url: str,
        token: str,
        bucket: str,
        org: str = "",
        timeout: float = 5.0,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Initialize writer.

        Args:
            url: InfluxDB base URL, e.g. http://influx:8086
            token: API token (user:password against InfluxDB 1.8)
            bucket: Target bucket (database/retention-policy on 1.8)
            org: Organization, empty on 1.8
            timeout: Per-write timeout in seconds
            transport: Optional httpx transport, used by tests
        """
        self.url = url.rstrip("/")
        self.bucket = bucket
        self.org = org
        self.timeout = timeout

        self.client = httpx.Client(
            base_url=self.url,
            headers={
                "Authorization": f"Token {token}",
                "Content-Type": "text/plain; charset=utf-8",
            },
            timeout=self.timeout,
            transport=transport,
        )

        logger.info(f"Initialized InfluxDB writer for {self.url} bucket={bucket}")

    @classmethod
    def from_settings(cls, settings: InfluxSettings, **kwargs) -> "InfluxWriter":
        return cls(
            url=settings.url,
            token=settings.token,
            bucket=settings.bucket,
            org=settings.org,
            timeout=settings.timeout,
            **kwargs,
        )

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - close client."""
        self.close()

    def close(self):
        """Close the httpx client."""
        self.client.close()
        logger.debug("InfluxDB writer closed")

    def _safe_post(self, path: str, body: str, **kwargs) -> httpx.Response | None:
        """Safe POST request with error handling."""
        try:
            logger.debug(f"POST {path}")
            resp = self.client.post(path, content=body, **kwargs)
            resp.raise_for_status()
            return resp

        except httpx.HTTPStatusError as e:
            logger.warning(f"HTTP error on POST {path}: {e.response.status_code} - {e.response.text}")
            return None
        except httpx.TimeoutException:
            logger.warning(f"Timeout on POST {path}")
            return None
        except httpx.RequestError as e:
            logger.warning(f"Request failed on POST {path}: {str(e)}")
            return None

    def write(self, point: Point) -> bool:
        """
        Write a single point.

        Returns:
            True if InfluxDB accepted the point
        """
        params = {"bucket": self.bucket, "org": self.org, "precision": "ns"}
        resp = self._safe_post("/api/v2/write", point.to_line_protocol(), params=params)

        if resp is not None and resp.status_code in (200, 204):
            return True

        logger.warning(f"Dropped {MEASUREMENT} point for bucket={self.bucket}")
        return False

    def write_heartbeat(self, snapshot: StatisticsSnapshot) -> bool:
        """Write the heartbeat point for the latest sample."""
        return self.write(build_heartbeat(snapshot))
