"""
Pytest fixtures for net-watcher testing.

Provides fake probers, a clean environment for settings resolution, and
a statistics record shared by the loop tests.
"""

import os

import pytest
from loguru import logger

from net_watcher.monitor.shutdown import ShutdownWatcher
from net_watcher.monitor.stats_models import Statistics

# Configure loguru for tests
logger.remove()  # Remove default handler
logger.add(
    "logs/test_{time}.log",
    rotation="1 day",
    retention="7 days",
    level="DEBUG"
)

WATCH_VARIABLES = (
    "WATCH_ENDPOINT",
    "WATCH_HOSTNAME_FILE",
    "WATCH_TIMEOUT",
    "WATCH_PAYLOAD_SIZE",
    "WATCH_PRIVILEGED",
    "WATCH_LOG_DIR",
    "WATCH_INFLUX_ENABLED",
    "WATCH_INFLUX_URL",
    "WATCH_INFLUX_TOKEN",
    "WATCH_INFLUX_ORG",
    "WATCH_INFLUX_BUCKET",
    "WATCH_INFLUX_TIMEOUT",
)


class FakeProber:
    """
    Stand-in for Prober that replays scripted RTTs.

    None entries behave like timeouts. `after_each` runs once per probe with
    the number of probes issued so far, e.g. to raise a signal mid-run.
    """

    def __init__(self, samples, after_each=None):
        self.samples = list(samples)
        self.after_each = after_each
        self.calls = 0
        self.address = "192.0.2.10"

    def probe(self):
        self.calls += 1
        rtt = self.samples.pop(0) if self.samples else None
        if self.after_each:
            self.after_each(self.calls)
        return rtt


class RecordingReporter:
    """Collects every snapshot it is handed."""

    def __init__(self):
        self.snapshots = []

    def report(self, snapshot):
        self.snapshots.append(snapshot)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """
    Strip WATCH_* variables and run from an empty directory.

    The directory has no `hostname` file, so the system hostname is used
    unless a test writes one.
    """
    for name in WATCH_VARIABLES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("WATCH_LOG_DIR", str(tmp_path / "logs"))
    return tmp_path


@pytest.fixture
def stats():
    """Statistics record for a documentation-range address."""
    return Statistics(source="test-host", endpoint="example.test", address="192.0.2.10")


@pytest.fixture
def watcher():
    """Shutdown watcher that is never installed; tests call trigger()."""
    return ShutdownWatcher()


@pytest.fixture
def reporter():
    return RecordingReporter()


@pytest.fixture
def fake_prober():
    """Factory for FakeProber instances."""
    return FakeProber


@pytest.fixture
def reset_loguru():
    """Drop any sinks a test installed through setup_logging()."""
    yield
    logger.remove()


@pytest.fixture(autouse=True)
def log_test_info(request):
    """
    Automatically log test start/end for all tests.

    This fixture runs for every test automatically.
    """
    test_name = request.node.name
    logger.info(f"{'=' * 60}")
    logger.info(f"Starting test: {test_name}")
    logger.info(f"{'=' * 60}")

    yield

    logger.info(f"Finished test: {test_name}")


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "network: mark test as needing real ICMP/DNS (set RUN_NETWORK_TESTS=1)"
    )
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test"
    )


def pytest_collection_modifyitems(config, items):
    """Skip network tests unless explicitly enabled."""
    if os.getenv("RUN_NETWORK_TESTS") == "1":
        return
    skip_net = pytest.mark.skip(reason="Set RUN_NETWORK_TESTS=1 to run network tests")
    for item in items:
        if "network" in item.keywords:
            item.add_marker(skip_net)
