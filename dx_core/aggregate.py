"""
aggregate.py — Generic group-by, percentage, ranking and threshold helpers

Every election, EV and border view is built from these routines so that
zero-guarding and missing-key defaults live in exactly one place.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, NamedTuple, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from dx_core import config
from dx_core.io_utils import coerce_float_series, coerce_int_series
from dx_core.records import Record

KeyRule = Union[str, Sequence[str], Callable[[Record], Any]]


class RankedEntry(NamedTuple):
    label: str
    value: float


@dataclass
class AggregateBucket:
    """Accumulated totals for one group key."""
    key: str
    total: float = 0
    count: int = 0
    subtotals: Dict[str, float] = field(default_factory=dict)
    details: List[Record] = field(default_factory=list)

    def percentages(self) -> Dict[str, str]:
        return percentages(self.subtotals, self.total)


# ------------------------------------------------------------------
# Group keys
# ------------------------------------------------------------------

def _key_part(value: Any, default: str) -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text if text else default


def group_key(record: Record, key: KeyRule, default: str = config.UNKNOWN_KEY) -> str:
    """
    Compute the group key for a record.

    `key` is a field name, a sequence of field names (joined with '-', each
    missing part becoming `default`) or a callable returning the key.
    A '-' or '\\' inside a composite part is backslash-escaped, so distinct
    field combinations never produce the same key.
    """
    if callable(key):
        return _key_part(key(record), default)
    if isinstance(key, str):
        return _key_part(record.get(key), default)
    parts = [_key_part(record.get(name), default) for name in key]
    if all(p == default for p in parts):
        return default
    sep = config.COMPOSITE_KEY_SEPARATOR
    return sep.join(p.replace("\\", "\\\\").replace(sep, "\\" + sep) for p in parts)


# ------------------------------------------------------------------
# Group-and-sum
# ------------------------------------------------------------------

def group_and_sum(
    records: Iterable[Record],
    key: KeyRule,
    value_field: str | None = None,
    category_field: str | None = None,
    categories: Sequence[str] | None = None,
    numeric: str = "int",
    default_key: str = config.UNKNOWN_KEY,
    default_category: str = config.OTHER_PARTY,
    keep_details: bool = True,
) -> Dict[str, AggregateBucket]:
    """
    Group records by `key` and sum `value_field` (a count of 1 per row when
    no value field is given).

    When `category_field` is set, per-category subtotals are accumulated as
    well; `categories` pre-seeds them with 0 so every bucket reports the same
    categories. Rows with a blank key land under `default_key`, rows with a
    blank category under `default_category`. Buckets keep first-appearance
    order.
    """
    records = list(records)
    if not records:
        return {}

    frame = pd.DataFrame({"key": [group_key(r, key, default_key) for r in records]})
    if value_field:
        raw = pd.Series([r.get(value_field, "") for r in records], dtype=object)
        coerce = coerce_float_series if numeric == "float" else coerce_int_series
        frame["value"] = coerce(raw)
    else:
        frame["value"] = 1
    if category_field:
        frame["category"] = [_key_part(r.get(category_field), default_category) for r in records]

    grouped = frame.groupby("key", sort=False)
    # to_dict() yields plain Python numbers
    totals = grouped["value"].sum().to_dict()
    counts = grouped.size().to_dict()
    positions = grouped.indices

    sub_table: Dict[str, Dict[str, float]] = {}
    if category_field:
        sub_sums = frame.groupby(["key", "category"], sort=False)["value"].sum().to_dict()
        for (bucket_key, category), amount in sub_sums.items():
            sub_table.setdefault(bucket_key, {})[category] = amount

    buckets: Dict[str, AggregateBucket] = {}
    for bucket_key, total in totals.items():
        subtotals = {c: 0 for c in (categories or [])}
        subtotals.update(sub_table.get(bucket_key, {}))
        buckets[bucket_key] = AggregateBucket(
            key=bucket_key,
            total=total,
            count=int(counts[bucket_key]),
            subtotals=subtotals,
            details=[records[i] for i in positions[bucket_key]] if keep_details else [],
        )
    return buckets


def count_by(records: Iterable[Record], key: KeyRule, default_key: str = config.UNKNOWN_KEY) -> Dict[str, int]:
    """Row count per key."""
    buckets = group_and_sum(records, key, default_key=default_key, keep_details=False)
    return {k: int(b.total) for k, b in buckets.items()}


def sum_by(records: Iterable[Record], key: KeyRule, value_field: str,
           numeric: str = "int", default_key: str = config.UNKNOWN_KEY) -> Dict[str, float]:
    """Sum of `value_field` per key."""
    buckets = group_and_sum(records, key, value_field=value_field, numeric=numeric,
                            default_key=default_key, keep_details=False)
    return {k: b.total for k, b in buckets.items()}


def unique_values(records: Iterable[Record], name: str, sort: bool = True) -> List[str]:
    """Distinct non-blank values of a field."""
    seen = dict.fromkeys(str(r.field(name)) for r in records if r.field(name) != "")
    values = list(seen)
    return sorted(values) if sort else values


# ------------------------------------------------------------------
# Percentages
# ------------------------------------------------------------------

def share(value: float, total: float) -> float:
    """Percent of `total` taken by `value`; 0.0 when total is 0."""
    if not total:
        return 0.0
    return value / total * 100


def percentages(subtotals: Dict[str, float], total: float, closure: bool = True) -> Dict[str, str]:
    """
    Format each subtotal's share of `total` with one decimal place.

    A zero total yields "0.0" for every category. With `closure` on and
    subtotals that add up to the total, shares are rounded by largest
    remainder so that they sum to exactly 100.0. Otherwise each share is
    rounded half up on its own (16.67 -> "16.7").
    """
    if not subtotals:
        return {}
    if not total:
        return {k: "0.0" for k in subtotals}

    names = list(subtotals)
    values = np.array([float(subtotals[k]) for k in names])
    scaled = values / float(total) * 1000
    if closure and np.isclose(values.sum(), float(total)):
        tenths = np.floor(scaled + 1e-9)
        missing = int(round(1000 - tenths.sum()))
        if missing > 0:
            order = np.argsort(-(scaled - tenths), kind="stable")
            tenths[order[:missing]] += 1
    else:
        tenths = np.floor(scaled + 0.5)
    return {name: f"{t / 10:.1f}" for name, t in zip(names, tenths)}


# ------------------------------------------------------------------
# Ranking and thresholds
# ------------------------------------------------------------------

def _as_pairs(items: Union[Dict[str, Any], Iterable[Any]]) -> List[Tuple[str, float]]:
    if isinstance(items, dict):
        items = list(items.items())
    pairs = []
    for item in items:
        if isinstance(item, AggregateBucket):
            pairs.append((item.key, item.total))
        elif isinstance(item, tuple) and len(item) == 2 and isinstance(item[1], AggregateBucket):
            pairs.append((item[0], item[1].total))
        else:
            label, value = item
            pairs.append((label, value))
    return pairs


def rank(
    items: Union[Dict[str, Any], Iterable[Any]],
    top_n: int | None = None,
    alphabetical: bool = False,
    descending: bool = True,
) -> List[RankedEntry]:
    """
    Sort (label, value) pairs by value, largest first, keeping input order
    between ties. `alphabetical=True` sorts by label instead. Accepts a
    mapping, a sequence of pairs, or AggregateBuckets.
    """
    entries = [RankedEntry(label, value) for label, value in _as_pairs(items)]
    if alphabetical:
        entries = sorted(entries, key=lambda e: str(e.label), reverse=descending)
    else:
        entries = sorted(entries, key=lambda e: e.value, reverse=descending)
    if top_n is not None:
        entries = entries[:max(top_n, 0)]
    return entries


def filter_significant(
    entries: Iterable[Any],
    total: float,
    threshold: float = config.DETAIL_SHARE_THRESHOLD,
    value: Callable[[Any], float] = lambda e: e[1],
) -> List[Any]:
    """Keep detail entries whose share of `total` is at least `threshold` percent.

    Only for display lists; totals used for percentage math are never
    filtered.
    """
    return [e for e in entries if share(value(e), total) >= threshold]


def bucket_frame(buckets: Dict[str, AggregateBucket], key_name: str = "key") -> pd.DataFrame:
    """Flatten buckets into a DataFrame (one row per bucket) for export."""
    rows = []
    for bucket in buckets.values():
        row = {key_name: bucket.key, "total": bucket.total, "count": bucket.count}
        row.update(bucket.subtotals)
        if bucket.subtotals:
            row.update({f"{k}_pct": v for k, v in bucket.percentages().items()})
        rows.append(row)
    if not rows:
        logging.info("No buckets to export.")
    return pd.DataFrame(rows)
