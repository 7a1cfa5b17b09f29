import dataclasses

import pytest

from turby.system import TurbySystem
from turby.types import TESTING_CONFIG, MockChamberConfig
from turby.util import defaults


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "slow: marks test as slow running test")
    config.addinivalue_line(
        "markers", "hardware: marks test that require physical hardware"
    )


class FakeClock:
    """Sleep and monotonic clock sharing one simulated time."""

    def __init__(self):
        self.now = 0.0
        self.sleeps: list[float] = []
        self.on_sleep = None  # optional hook, called after each sleep

    def sleep(self, seconds: float):
        self.sleeps.append(seconds)
        self.now += seconds
        if self.on_sleep is not None:
            self.on_sleep(self)

    def monotonic(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture(autouse=True)
def user_config_dir(tmp_path, monkeypatch):
    """Point ~/.turby at a temporary directory."""
    config_dir = tmp_path / ".turby"
    monkeypatch.setattr(defaults, "USER_CONFIG_DIR", config_dir)
    return config_dir


@pytest.fixture
def mock_config(tmp_path):
    return dataclasses.replace(TESTING_CONFIG, datafile=str(tmp_path / "run.csv"))


@pytest.fixture
def fast_config(tmp_path):
    """Mock config without any simulated motion time."""
    return dataclasses.replace(
        TESTING_CONFIG,
        chamber=MockChamberConfig(tflip=0.0),
        datafile=str(tmp_path / "run.csv"),
    )


@pytest.fixture
def system(mock_config, clock):
    system = TurbySystem(mock_config, sleep=clock.sleep)
    system.startup()
    yield system
    system.packdown()
