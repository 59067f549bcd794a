"""Pytest configuration and fixtures for TypePace tests."""

import pytest
import tempfile
import uuid
import logging
from datetime import datetime, timedelta
from pathlib import Path

import yaml

from typepace.config import TypePaceConfig
from typepace.models.metrics import MetricRecord
from typepace.services.tracker_service import TrackerService
from typepace.tracking.scheduler import ManualScheduler


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast isolated tests")
    config.addinivalue_line("markers", "integration: tests spanning several components")


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def log_file(temp_data_dir):
    """Path of a metric log inside the temporary directory."""
    return str(Path(temp_data_dir) / "wpm-tracker.csv")


@pytest.fixture
def config_file(temp_data_dir):
    """Write a YAML config pointing all files into the temporary directory."""
    path = Path(temp_data_dir) / "typepace.yaml"
    path.write_text(yaml.safe_dump({
        "storage": {"log_file": "wpm-tracker.csv"},
        "tracking": {
            "average_window": 10,
            "min_session_length": 5000,
            "update_interval": 1000,
            "idle_timeout": 5000,
        },
        "logging": {"file_path": "logs/typepace.log", "console_output": False},
    }))
    return str(path)


@pytest.fixture
def test_config(config_file):
    """Loaded configuration backed by the temporary directory."""
    return TypePaceConfig(config_file)


@pytest.fixture
def scheduler():
    """Virtual clock scheduler."""
    return ManualScheduler(start=1000.0)


class FakeWallClock:
    """Wall clock that follows a ManualScheduler."""

    def __init__(self, scheduler: ManualScheduler, start: datetime):
        self.scheduler = scheduler
        self.origin = scheduler.now()
        self.start = start

    def __call__(self) -> datetime:
        return self.start + timedelta(seconds=self.scheduler.now() - self.origin)


@pytest.fixture
def wall_clock(scheduler):
    return FakeWallClock(scheduler, datetime(2025, 3, 14, 9, 30, 0))


@pytest.fixture
def service(test_config, scheduler, wall_clock):
    """Started tracker service on an isolated topic prefix."""
    svc = TrackerService(
        test_config,
        scheduler=scheduler,
        topic_prefix=f"test_{uuid.uuid4().hex}",
        wall_clock=wall_clock,
    )
    svc.start()
    yield svc
    svc.close()


@pytest.fixture
def make_record():
    """Factory for metric records with sensible defaults."""
    def _make(manual_wpm=60, assisted_wpm=80, timestamp="2025-03-14 09:30:00",
              duration=30.0, manual_chars=150, total_chars=200):
        return MetricRecord(
            timestamp=timestamp,
            manual_wpm=manual_wpm,
            assisted_wpm=assisted_wpm,
            duration=duration,
            manual_chars=manual_chars,
            total_chars=total_chars,
        )
    return _make


@pytest.fixture
def history(make_record):
    """Generate a list of records spaced a few minutes apart."""
    def _history(manual_values, assisted_values=None, start=datetime(2025, 3, 14, 9, 0, 0),
                 step=timedelta(minutes=5)):
        if assisted_values is None:
            assisted_values = [v + 20 for v in manual_values]
        return [
            make_record(
                manual_wpm=m,
                assisted_wpm=a,
                timestamp=(start + i * step).strftime("%Y-%m-%d %H:%M:%S"),
            )
            for i, (m, a) in enumerate(zip(manual_values, assisted_values))
        ]
    return _history
