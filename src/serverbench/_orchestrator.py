"""
Run orchestration: load test, cache, report, persist
"""

import logging
import sys
from typing import Dict, List, Optional, TextIO

from ._cache import ResultCache
from ._errors import CacheError, MalformedRecordError, ServerBenchError
from ._metrics import MetricsRecord, validate_record
from ._report import render_table
from ._rewrk import BenchConfig, collect_metrics

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_PERSIST_FAILED = 3


def run_benchmark(config: BenchConfig, timeout: Optional[float] = None) -> MetricsRecord:
    """Run the load generator once and return the normalized record"""
    record = collect_metrics(config, timeout=timeout)
    requests = record.get("requests", {})
    logger.info(
        "Load test finished: %s requests, %s req/s",
        requests.get("total", "?"),
        requests.get("avg", "?"),
    )
    return record


def render_reports(
    results: Dict[str, MetricsRecord], name: str, current: MetricsRecord
) -> List[str]:
    """Render one table per cached benchmark, plus the active one.

    A cached entry that is not a valid record is reported in place of its
    table; the remaining entries are still rendered.
    """
    reports = []
    for bench_name in sorted(set(results) | {name}):
        if bench_name == name:
            previous = None
            note = ""
            if bench_name in results:
                try:
                    previous = validate_record(results[bench_name])
                except MalformedRecordError as e:
                    logger.warning("Ignoring cached result for %s: %s", bench_name, e)
                    note = f"_previous result ignored: {e}_\n"
            table = render_table(bench_name, previous, current, active=True)
            if note:
                title, _, body = table.partition("\n")
                table = f"{title}\n{note}{body}"
            reports.append(table)
            continue

        try:
            validate_record(results[bench_name])
        except MalformedRecordError as e:
            logger.warning("Skipping cached result for %s: %s", bench_name, e)
            reports.append(f"**{bench_name}**\n_skipped: {e}_\n")
            continue
        reports.append(render_table(bench_name, None, current, active=False))
    return reports


def persist_result(cache: ResultCache, name: str, current: MetricsRecord) -> bool:
    """Store the current record under ``name``; return False on failure"""
    try:
        cache.update(name, current)
    except CacheError as e:
        logger.error("Could not save results to cache: %s", e)
        return False
    logger.info("Results saved to cache %s under %r", cache.path, name)
    return True


def main_flow(
    config: BenchConfig,
    name: str,
    cache: ResultCache,
    save: bool = False,
    out: Optional[TextIO] = None,
    timeout: Optional[float] = None,
) -> int:
    """Run a full harness invocation and return the process exit code.

    Load test, parse and cache read failures abort before anything is
    printed. A failed save is reported after the tables have been written.
    """
    out = out or sys.stdout

    try:
        current = run_benchmark(config, timeout=timeout)
    except ServerBenchError as e:
        logger.error("Benchmark failed: %s", e)
        return EXIT_FATAL

    try:
        results = cache.load()
    except CacheError as e:
        logger.error("Aborting, cache left untouched: %s", e)
        return EXIT_FATAL

    out.write("\n".join(render_reports(results, name, current)))
    out.flush()

    if save and not persist_result(cache, name, current):
        return EXIT_PERSIST_FAILED
    return EXIT_OK
