"""
Normalization of rewrk JSON reports into metrics records

A metrics record is a plain nested dict::

    {
        "transfer": {"total": 1048576, "rate": 34952.5},
        "requests": {"total": 1000, "avg": 33.3},
        "latencies": {"min": 1.0, "max": 50.0, "avg": 10.0, "stdev": 5.0},
    }

Fields the generator did not report are left out instead of being zeroed.
"""

import json
import logging
import math
from typing import Any, Dict, Mapping, Union

from ._errors import MalformedRecordError, ParseError

logger = logging.getLogger(__name__)

Number = Union[int, float]
MetricsRecord = Dict[str, Dict[str, Number]]

CATEGORIES = ("transfer", "requests", "latencies")

# rewrk --json key -> (category, subfield)
REWRK_FIELDS = {
    "transfer_total": ("transfer", "total"),
    "transfer_rate": ("transfer", "rate"),
    "requests_total": ("requests", "total"),
    "requests_avg": ("requests", "avg"),
    "latency_min": ("latencies", "min"),
    "latency_max": ("latencies", "max"),
    "latency_avg": ("latencies", "avg"),
    "latency_std_deviation": ("latencies", "stdev"),
}


def is_number(value: Any) -> bool:
    """Return True for finite ints and floats (bools excluded)"""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def parse_report(raw: str) -> MetricsRecord:
    """Parse the stdout of ``rewrk --json`` into a metrics record.

    Args:
        raw: Text written by the load generator

    Returns:
        A record with all three categories; missing fields are absent

    Raises:
        ParseError: If the text is not a JSON object, carries none of the
            known fields, or a field holds something other than a number
    """
    text = raw.strip()
    if not text:
        raise ParseError("load generator produced no output")

    try:
        obj = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"load generator output is not valid JSON: {e}") from e

    if not isinstance(obj, dict):
        raise ParseError(f"expected a JSON object, got {type(obj).__name__}")

    if not any(key in obj for key in REWRK_FIELDS):
        raise ParseError(
            "load generator output has none of the expected fields: "
            + ", ".join(sorted(REWRK_FIELDS))
        )

    record = {category: {} for category in CATEGORIES}
    for key, (category, subfield) in REWRK_FIELDS.items():
        value = obj.get(key)
        if value is None:
            logger.debug("Field %s missing from report", key)
            continue
        if not is_number(value):
            raise ParseError(f"field {key!r} is not a finite number: {value!r}")
        record[category][subfield] = value

    return record


def validate_record(record: Any) -> MetricsRecord:
    """Check that a stored value is a metrics record.

    Unknown categories and subfields are accepted so that entries written by
    newer versions still render.

    Raises:
        MalformedRecordError: If the value is not a mapping of mappings of
            finite numbers
    """
    if not isinstance(record, Mapping):
        raise MalformedRecordError(f"expected an object, got {type(record).__name__}")

    for category, fields in record.items():
        if not isinstance(fields, Mapping):
            raise MalformedRecordError(
                f"category {category!r} is not an object: {fields!r}"
            )
        for subfield, value in fields.items():
            if value is not None and not is_number(value):
                raise MalformedRecordError(
                    f"{category}.{subfield} is not a finite number: {value!r}"
                )

    return {
        category: {k: v for k, v in fields.items() if v is not None}
        for category, fields in record.items()
    }
