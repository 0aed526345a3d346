"""
serverbench - compare HTTP server benchmark runs

Runs the rewrk load generator against a listening server, keeps the latest
result of every named configuration in a JSON cache, and prints markdown
tables comparing the new run with what was recorded before.
"""

__version__ = "0.1.0"
__license__ = "MIT"

from serverbench._cache import DEFAULT_CACHE_FILE, ResultCache
from serverbench._config import Settings, load_settings, setup_logging
from serverbench._errors import (
    CacheCorruptError,
    CacheError,
    CacheLockError,
    CacheWriteError,
    InvocationError,
    MalformedRecordError,
    ParseError,
    ServerBenchError,
)
from serverbench._metrics import CATEGORIES, MetricsRecord, parse_report, validate_record
from serverbench._orchestrator import main_flow, persist_result, render_reports, run_benchmark
from serverbench._report import ComparisonRow, build_rows, format_value, render_table
from serverbench._rewrk import BenchConfig, collect_metrics, run_rewrk
from serverbench._units import format_bytes

__all__ = [
    "BenchConfig",
    "ResultCache",
    "Settings",
    "ComparisonRow",
    "MetricsRecord",
    "CATEGORIES",
    "DEFAULT_CACHE_FILE",
    "ServerBenchError",
    "InvocationError",
    "ParseError",
    "MalformedRecordError",
    "CacheError",
    "CacheCorruptError",
    "CacheLockError",
    "CacheWriteError",
    "format_bytes",
    "format_value",
    "parse_report",
    "validate_record",
    "run_rewrk",
    "collect_metrics",
    "build_rows",
    "render_table",
    "run_benchmark",
    "render_reports",
    "persist_result",
    "main_flow",
    "load_settings",
    "setup_logging",
]
