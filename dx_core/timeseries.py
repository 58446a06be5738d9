"""
timeseries.py — Month bucketing, chronological ordering and delta series

Dates arrive either as "MM/DD/YYYY hh:mm:ss AM" or already as "Mon YYYY".
Both normalize to a "Mon YYYY" period token; rows whose date cannot be
read are left out of every time series (never zero-filled).
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd

from dx_core import config
from dx_core.io_utils import coerce_int
from dx_core.records import Record


@dataclass
class TimeSeriesPoint:
    period: str
    month: str
    year: int
    value: float
    change: float = 0
    percent_change: float = 0.0


def month_index(month: str) -> int:
    """0-based calendar index of a month abbreviation, -1 if unknown."""
    try:
        return config.MONTH_NAMES.index(month)
    except ValueError:
        return -1


def _parse_year(token: str) -> Optional[int]:
    token = token.strip()
    if not token.isdigit():
        return None
    year = int(token)
    return year if year > 0 else None


def normalize_period(date_str: Any) -> Optional[str]:
    """Return the "Mon YYYY" token for a date string, or None if unreadable."""
    if date_str is None:
        return None
    text = str(date_str).strip()
    if not text:
        return None

    if "/" in text:
        parts = text.split(" ")[0].split("/")
        if len(parts) < 3:
            return None
        month = coerce_int(parts[0])
        year = _parse_year(parts[2])
        if not 1 <= month <= 12 or year is None:
            return None
        return f"{config.MONTH_NAMES[month - 1]} {year}"

    tokens = text.split()
    if len(tokens) != 2:
        return None
    month_token = tokens[0][:3].title()
    year = _parse_year(tokens[1])
    if month_token not in config.MONTH_NAMES or year is None:
        return None
    return f"{month_token} {year}"


def split_period(period: str) -> Tuple[str, int]:
    month, year = period.split(" ")
    return month, int(year)


def period_sort_key(period: str) -> Tuple[int, int]:
    """Chronological sort key: (year, month index)."""
    month, year = split_period(period)
    return year, month_index(month)


def bucket_by_period(
    records: Iterable[Record],
    date_field: str = "Date",
    value_field: str | None = "Value",
) -> List[TimeSeriesPoint]:
    """
    Sum `value_field` per month and return points in chronological order.

    Rows with an unreadable date are excluded. Without a value field each
    row counts as 1.
    """
    rows = []
    for record in records:
        period = normalize_period(record.get(date_field))
        if period is None:
            continue
        value = coerce_int(record.get(value_field, "")) if value_field else 1
        rows.append((period, value))
    if not rows:
        return []

    frame = pd.DataFrame(rows, columns=["period", "value"])
    sums = frame.groupby("period", sort=False)["value"].sum().to_dict()
    points = []
    for period, value in sums.items():
        month, year = split_period(period)
        points.append(TimeSeriesPoint(period=period, month=month, year=year, value=value))
    return sorted(points, key=lambda p: (p.year, month_index(p.month)))


def with_deltas(series: Iterable[Any]) -> List[TimeSeriesPoint]:
    """
    Attach period-over-period change to an already sorted series.

    The first point has change 0 and percent change 0; percent change is 0
    whenever the previous value is 0. Accepts TimeSeriesPoints or
    (period, value) pairs.
    """
    points = []
    for item in series:
        if isinstance(item, TimeSeriesPoint):
            points.append(item)
        else:
            period, value = item
            month, year = split_period(period)
            points.append(TimeSeriesPoint(period=period, month=month, year=year, value=value))

    out: List[TimeSeriesPoint] = []
    for i, point in enumerate(points):
        if i == 0:
            out.append(replace(point, change=0, percent_change=0.0))
            continue
        previous = points[i - 1].value
        change = point.value - previous
        percent = (change / previous) * 100 if previous else 0.0
        out.append(replace(point, change=change, percent_change=percent))
    return out


def time_series(
    records: Iterable[Record],
    date_field: str = "Date",
    value_field: str | None = "Value",
    positive_only: bool = False,
) -> List[TimeSeriesPoint]:
    """Monthly totals with deltas; `positive_only` drops months summing to <= 0."""
    points = bucket_by_period(records, date_field=date_field, value_field=value_field)
    if positive_only:
        points = [p for p in points if p.value > 0]
    return with_deltas(points)


def recent_trend(series: List[TimeSeriesPoint], window: int = config.TREND_WINDOW) -> str:
    if len(series) < window:
        return "insufficient data"
    tail = series[-window:]
    if all(p.change > 0 for p in tail):
        return "increasing"
    if all(p.change < 0 for p in tail):
        return "decreasing"
    return "fluctuating"


def trend_insights(series: List[TimeSeriesPoint]) -> Optional[Dict[str, Any]]:
    """Headline numbers for a delta series; None with fewer than two points."""
    if len(series) < 2:
        return None
    values = np.array([p.value for p in series], dtype=float)
    return {
        "last_value": series[-1].value,
        "last_period": series[-1].period,
        "max_entry": series[int(np.argmax(values))],
        "min_entry": series[int(np.argmin(values))],
        "average": int(np.floor(values.mean() + 0.5)),
        "recent_trend": recent_trend(series),
    }


def series_frame(series: List[TimeSeriesPoint]) -> pd.DataFrame:
    """Flatten a series into a DataFrame for export."""
    return pd.DataFrame([
        {"period": p.period, "value": p.value, "change": p.change,
         "percent_change": round(p.percent_change, 2)}
        for p in series
    ])
