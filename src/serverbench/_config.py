"""
Environment configuration and logging setup

Settings are read from the process environment, optionally seeded from a
``.env`` file. Values already present in the environment win over the file.
"""

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from dotenv import find_dotenv, load_dotenv

from ._cache import DEFAULT_CACHE_FILE
from ._rewrk import BenchConfig

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

ENV_NAME = "CURRENT_BENCH"
ENV_CACHE_FILE = "SERVERBENCH_CACHE_FILE"
ENV_THREADS = "SERVERBENCH_THREADS"
ENV_CONNECTIONS = "SERVERBENCH_CONNECTIONS"
ENV_DURATION = "SERVERBENCH_DURATION"
ENV_URL = "SERVERBENCH_URL"
ENV_REWRK = "SERVERBENCH_REWRK"


@dataclass
class Settings:
    """Defaults for a harness invocation, before CLI overrides"""

    name: Optional[str] = None
    cache_file: Path = Path(DEFAULT_CACHE_FILE)
    bench: BenchConfig = field(default_factory=BenchConfig)


def _env_int(var: str, default: int) -> int:
    raw = os.environ.get(var)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{var} must be an integer, got {raw!r}") from None


def load_settings(env_file: Optional[Union[str, Path]] = None) -> Settings:
    """Build settings from the environment.

    Args:
        env_file: ``.env`` file to load; when omitted the nearest ``.env``
            above the working directory is used, if any

    Raises:
        ValueError: If a numeric variable does not hold an integer
    """
    if env_file is None:
        env_file = find_dotenv(usecwd=True)
    if env_file:
        load_dotenv(env_file, override=False)

    defaults = BenchConfig()
    bench = BenchConfig(
        threads=_env_int(ENV_THREADS, defaults.threads),
        connections=_env_int(ENV_CONNECTIONS, defaults.connections),
        duration_seconds=_env_int(ENV_DURATION, defaults.duration_seconds),
        target_url=os.environ.get(ENV_URL) or defaults.target_url,
        executable=os.environ.get(ENV_REWRK) or defaults.executable,
    )
    return Settings(
        name=os.environ.get(ENV_NAME) or None,
        cache_file=Path(os.environ.get(ENV_CACHE_FILE) or DEFAULT_CACHE_FILE),
        bench=bench,
    )


class StderrHandler(logging.StreamHandler):
    """Handler installed by setup_logging; stdout is reserved for the report"""

    def __init__(self):
        super().__init__(sys.stderr)
        self.setFormatter(logging.Formatter(LOG_FORMAT))


def setup_logging(log_level=logging.INFO):
    """Send log records to stderr so stdout only carries the report"""
    root = logging.getLogger()
    root.setLevel(log_level)
    for handler in list(root.handlers):
        if isinstance(handler, StderrHandler):
            root.removeHandler(handler)
    root.addHandler(StderrHandler())
