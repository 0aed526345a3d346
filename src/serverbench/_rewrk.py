"""
Driver for the rewrk load generator
"""

import logging
import subprocess
from dataclasses import dataclass
from typing import List, Optional

from ._errors import InvocationError
from ._metrics import MetricsRecord, parse_report

logger = logging.getLogger(__name__)


@dataclass
class BenchConfig:
    """Load profile for a single benchmark run"""

    threads: int = 4
    connections: int = 500
    duration_seconds: int = 30
    target_url: str = "http://localhost:3000"
    executable: str = "rewrk"

    def __post_init__(self):
        for name in ("threads", "connections", "duration_seconds"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        if not self.target_url:
            raise ValueError("target_url must not be empty")

    def command(self) -> List[str]:
        """Build the rewrk command line"""
        return [
            self.executable,
            "--json",
            "-t", str(self.threads),
            "-c", str(self.connections),
            "-d", f"{self.duration_seconds}s",
            "-h", self.target_url,
        ]


def run_rewrk(config: BenchConfig, timeout: Optional[float] = None) -> str:
    """Run rewrk and return its stdout.

    Blocks for the configured duration. Without ``timeout`` there is no
    watchdog: a generator that never exits blocks forever.

    Raises:
        InvocationError: If the executable is missing, exits non-zero, times
            out, or writes anything to stderr
    """
    cmd = config.command()

    logger.info(
        "Running %s against %s (%d threads, %d connections, %ds)",
        config.executable,
        config.target_url,
        config.threads,
        config.connections,
        config.duration_seconds,
    )
    logger.debug("Command: %s", " ".join(cmd))

    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
    except subprocess.TimeoutExpired as e:
        raise InvocationError(f"load generator timed out after {timeout}s") from e
    except FileNotFoundError as e:
        raise InvocationError(f"load generator not found: {config.executable}") from e
    except OSError as e:
        raise InvocationError(f"could not start load generator: {e}") from e

    stderr = (result.stderr or "").strip()
    if result.returncode != 0:
        raise InvocationError(
            f"load generator exited with status {result.returncode}"
            + (f": {stderr}" if stderr else ""),
            returncode=result.returncode,
            stderr=stderr,
        )
    if stderr:
        raise InvocationError(
            f"load generator wrote to stderr: {stderr}",
            returncode=result.returncode,
            stderr=stderr,
        )

    return result.stdout


def collect_metrics(config: BenchConfig, timeout: Optional[float] = None) -> MetricsRecord:
    """Run the load generator and normalize its report"""
    return parse_report(run_rewrk(config, timeout=timeout))
