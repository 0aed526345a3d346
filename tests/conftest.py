"""
Pytest configuration and fixtures for serverbench tests
"""

import json
import subprocess

import pytest

from serverbench import ResultCache

SAMPLE_REWRK_REPORT = {
    "transfer_total": 1048576,
    "transfer_rate": 1048576,
    "requests_total": 1000,
    "requests_avg": 33.3,
    "latency_min": 1,
    "latency_max": 50,
    "latency_avg": 10,
    "latency_std_deviation": 5,
}

SAMPLE_RECORD = {
    "transfer": {"total": 1048576, "rate": 1048576},
    "requests": {"total": 1000, "avg": 33.3},
    "latencies": {"min": 1, "max": 50, "avg": 10, "stdev": 5},
}


class FakeRewrk:
    """Stand-in for subprocess.run that records calls and replays canned output"""

    def __init__(self):
        self.stdout = json.dumps(SAMPLE_REWRK_REPORT)
        self.stderr = ""
        self.returncode = 0
        self.raises = None
        self.calls = []

    def __call__(self, cmd, **kwargs):
        self.calls.append((cmd, kwargs))
        if self.raises is not None:
            raise self.raises
        return subprocess.CompletedProcess(cmd, self.returncode, self.stdout, self.stderr)


@pytest.fixture
def sample_record():
    """A fresh copy of the canonical sample record"""
    return json.loads(json.dumps(SAMPLE_RECORD))


@pytest.fixture
def fake_rewrk(monkeypatch):
    """Replace the rewrk child process with canned output"""
    fake = FakeRewrk()
    monkeypatch.setattr("serverbench._rewrk.subprocess.run", fake)
    return fake


@pytest.fixture
def cache_path(tmp_path):
    """Path of a cache file that does not exist yet"""
    return tmp_path / "benchmark_cache.json"


@pytest.fixture
def cache(cache_path):
    """A ResultCache backed by a temporary file"""
    return ResultCache(cache_path, lock_timeout=1)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Run with no serverbench variables set and no .env file in reach"""
    for var in (
        "CURRENT_BENCH",
        "SERVERBENCH_CACHE_FILE",
        "SERVERBENCH_THREADS",
        "SERVERBENCH_CONNECTIONS",
        "SERVERBENCH_DURATION",
        "SERVERBENCH_URL",
        "SERVERBENCH_REWRK",
    ):
        # setenv first so teardown also removes values load_dotenv() adds
        monkeypatch.setenv(var, "")
        monkeypatch.delenv(var)
    monkeypatch.chdir(tmp_path)
    return tmp_path


def pytest_configure(config):
    """Configure pytest"""
    config.addinivalue_line("markers", "cli: mark test as exercising the command-line entry point")
    config.addinivalue_line("markers", "slow: mark test as slow running")


def pytest_collection_modifyitems(config, items):
    """Modify test collection"""
    for item in items:
        if "test_cli" in item.nodeid:
            item.add_marker(pytest.mark.cli)
