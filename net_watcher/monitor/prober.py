"""
ICMP echo prober built on icmplib.

The prober knows nothing about statistics: `probe()` sends a single echo
request and hands back the round-trip time in milliseconds, or None when no
reply came back before the timeout.
"""

import os

from icmplib import ICMPLibError, NameLookupError, TimeoutExceeded, ping, resolve
from loguru import logger


class NetWatcherError(Exception):
    """Base class for fatal net-watcher errors."""


class ResolutionError(NetWatcherError):
    """The configured endpoint could not be resolved to an address."""


class PrivilegeError(NetWatcherError):
    """Raw ICMP sockets were requested without root privileges."""


def resolve_address(endpoint: str) -> str:
    """
    Resolve an endpoint (hostname or literal IP) to an IPv4 address.

    Raises:
        ResolutionError: If the name does not resolve
    """
    try:
        addresses = resolve(endpoint, family=4)
    except NameLookupError as e:
        raise ResolutionError(f"lookup {endpoint}: no such host") from e

    if not addresses:
        raise ResolutionError(f"lookup {endpoint}: no IPv4 address")

    logger.debug(f"Resolved {endpoint} -> {addresses}")
    return addresses[0]


def ensure_privileges(privileged: bool) -> None:
    """Raw sockets need root; unprivileged datagram sockets do not."""
    if privileged and os.geteuid() != 0:
        raise PrivilegeError("net-watcher must be run as root")


class Prober:
    """Send one ICMP echo request per call to a fixed address."""

    def __init__(
        self,
        address: str,
        timeout: float = 1.0,
        payload_size: int = 56,
        privileged: bool = True,
    ):
        """
        Initialize prober.

        Args:
            address: Resolved IPv4 address to ping
            timeout: Seconds to wait for the reply
            payload_size: ICMP payload size in bytes
            privileged: Use raw sockets (root) instead of datagram sockets
        """
        self.address = address
        self.timeout = timeout
        self.payload_size = payload_size
        self.privileged = privileged

    def probe(self) -> float | None:
        """
        Issue a single echo request and wait for the reply.

        Returns:
            RTT in milliseconds, or None if nothing came back
        """
        try:
            host = ping(
                self.address,
                count=1,
                interval=0,
                timeout=self.timeout,
                payload_size=self.payload_size,
                privileged=self.privileged,
            )
        except TimeoutExceeded:
            return None
        except ICMPLibError as e:
            logger.debug(f"Probe to {self.address} failed: {e}")
            return None

        if not host.is_alive:
            return None

        # icmplib already reports RTTs in milliseconds
        return host.rtts[0]
