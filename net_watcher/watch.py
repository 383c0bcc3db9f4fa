#!/usr/bin/env python3
"""
Continuously ping one endpoint and print RTT statistics on Ctrl-C.

Examples:
  # Ping the default target (or $WATCH_ENDPOINT)
  sudo net-watcher

  # Ping a specific host
  sudo net-watcher 1.1.1.1

  # Also push heartbeat points to InfluxDB
  sudo WATCH_INFLUX_ENABLED=true WATCH_INFLUX_URL=http://influx:8086 net-watcher
"""

import argparse
from contextlib import nullcontext

from pydantic import ValidationError

from net_watcher.lib.logging_setup import setup_logging
from net_watcher.monitor.influx_client import InfluxWriter
from net_watcher.monitor.monitor import ConsoleReporter, InfluxReporter, Monitor
from net_watcher.monitor.prober import (
    PrivilegeError,
    Prober,
    ResolutionError,
    ensure_privileges,
    resolve_address,
)
from net_watcher.monitor.settings import get_log_dir, load_settings
from net_watcher.monitor.shutdown import ShutdownWatcher
from net_watcher.monitor.stats_models import Statistics

EXIT_OK = 0
EXIT_FATAL = -1


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="net-watcher",
        description="Continuous ICMP reachability monitor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    p.add_argument(
        "endpoint",
        nargs="?",
        help="hostname or IP to ping (default: $WATCH_ENDPOINT, then www.google.com)",
    )
    return p.parse_args(argv)


def main(argv: list[str] | None = None, max_attempts: int | None = None) -> int:
    args = parse_args(argv)

    logger, console = setup_logging(get_log_dir())
    logger.debug(f"Script started with args: endpoint={args.endpoint}")

    stats = Statistics()

    with ShutdownWatcher() as watcher:
        try:
            settings = load_settings([args.endpoint] if args.endpoint else None)
        except (ValidationError, ValueError) as e:  # bad casts surface as ValueError
            logger.debug(f"Settings rejected: {e}")
            console.error(f"ERROR: invalid settings: {e}")
            return EXIT_FATAL

        try:
            ensure_privileges(settings.privileged)
        except PrivilegeError as e:
            console.error(f"ERROR: {e}")
            return EXIT_FATAL

        logger.debug(f"Settings: {settings.model_dump(exclude={'influx': {'token'}})}")

        writer_ctx = (
            InfluxWriter.from_settings(settings.influx) if settings.influx.enabled else nullcontext()
        )

        with writer_ctx as writer:
            try:
                address = resolve_address(settings.endpoint)
            except ResolutionError as e:
                console.error(str(e))
                return EXIT_FATAL

            stats.source = settings.source
            stats.endpoint = settings.endpoint
            stats.address = address

            reporter = InfluxReporter(writer, console) if writer else ConsoleReporter(console)
            prober = Prober(
                address,
                timeout=settings.timeout,
                payload_size=settings.payload_size,
                privileged=settings.privileged,
            )

            monitor = Monitor(stats, prober, reporter, watcher, interval=settings.timeout)
            summary = monitor.run(max_attempts=max_attempts)

    console.info(str(summary))
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
