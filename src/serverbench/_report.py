"""
Markdown comparison tables between two metrics records
"""

from dataclasses import dataclass
from typing import List, Optional

from ._metrics import CATEGORIES, MetricsRecord
from ._units import format_bytes

# Rounding applied to deltas so float noise (33.3 - 30.0) does not leak into the table
DELTA_PRECISION = 10


@dataclass(frozen=True)
class ComparisonRow:
    """One aligned field of a comparison, already formatted for display"""

    category: str
    subfield: str
    old: str
    new: str
    delta: str = ""
    sign: str = ""

    @property
    def label(self) -> str:
        return f"{self.category} {self.subfield}"

    @property
    def changed(self) -> bool:
        return bool(self.delta)


def format_value(category: str, value) -> str:
    """Render a single metric, blank when absent"""
    if value is None:
        return ""
    if category == "transfer":
        return format_bytes(value)
    return str(value)


def _ordered_categories(previous: MetricsRecord, current: MetricsRecord) -> List[str]:
    keys = set(previous) | set(current)
    known = [c for c in CATEGORIES if c in keys]
    return known + sorted(keys - set(CATEGORIES))


def build_rows(previous: Optional[MetricsRecord], current: MetricsRecord) -> List[ComparisonRow]:
    """Align two records field by field.

    Categories come in their canonical order and subfields sorted, so the
    same pair always yields the same rows. A delta is filled only when both
    values are present and differ; ``+`` means the new value is larger.
    """
    previous = previous or {}
    rows = []
    for category in _ordered_categories(previous, current):
        old_fields = previous.get(category) or {}
        new_fields = current.get(category) or {}
        for subfield in sorted(set(old_fields) | set(new_fields)):
            old = old_fields.get(subfield)
            new = new_fields.get(subfield)
            delta = sign = ""
            if old is not None and new is not None and old != new:
                delta = format_value(category, round(abs(new - old), DELTA_PRECISION))
                sign = "+" if new > old else "-"
            rows.append(
                ComparisonRow(
                    category=category,
                    subfield=subfield,
                    old=format_value(category, old),
                    new=format_value(category, new),
                    delta=delta,
                    sign=sign,
                )
            )
    return rows


def _row(*cells) -> str:
    return "| " + " | ".join(cells) + " |\n"


def render_table(
    name: str,
    previous: Optional[MetricsRecord],
    current: MetricsRecord,
    active: bool = True,
) -> str:
    """Render one benchmark as a markdown table.

    The active benchmark gets an Old / New / Diff table. Any other cached
    benchmark gets a single Value column holding the current run's values,
    so the newest numbers can be read next to every recorded configuration.
    """
    rows = build_rows(previous, current)
    md = [f"**{name}**\n"]

    if active:
        md.append(_row("Parameter", "Old", "New", "Diff"))
        md.append("|---|---|---|---|\n")
        for row in rows:
            if row.changed:
                md.append(_row(row.label, row.old, f"**{row.new}**", f"{row.sign} {row.delta}"))
            else:
                md.append(_row(row.label, row.old, row.new, ""))
    else:
        md.append(_row("Parameter", "Value"))
        md.append("|---|---|\n")
        for row in rows:
            md.append(_row(row.label, row.new))

    return "".join(md)
