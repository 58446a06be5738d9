"""
border.py — Border crossing entry views

Record fields used: Port Name, State, Border, Measure, Value, Date,
Latitude, Longitude.
"""

from __future__ import annotations
from typing import Any, Dict, List, Sequence

from dx_core import config
from dx_core.aggregate import count_by, rank, sum_by, unique_values
from dx_core.io_utils import coerce_int, leading_float
from dx_core.records import Record
from dx_core.timeseries import normalize_period, split_period, time_series, trend_insights

PORT_FIELD = "Port Name"


def _period_year(record: Record) -> str | None:
    period = normalize_period(record.get("Date"))
    return str(split_period(period)[1]) if period else None


def overview(records: Sequence[Record]) -> Dict[str, Any]:
    """Crossing totals by measure, border and state, plus the grand total."""
    by_measure = sum_by(records, "Measure", "Value")
    return {
        "by_measure": rank(by_measure),
        "by_border": rank(sum_by(records, "Border", "Value")),
        "by_state": rank(sum_by(records, "State", "Value")),
        "total_crossings": sum(by_measure.values()),
    }


def port_summary(records: Sequence[Record]) -> Dict[str, Any]:
    """
    Totals by port and state, and one map marker per (port, latitude,
    longitude) carrying its summed value and the measures seen there.
    """
    markers: Dict[tuple, Dict[str, Any]] = {}
    for crossing in records:
        lat = leading_float(crossing.field("Latitude", None))
        lon = leading_float(crossing.field("Longitude", None))
        if lat is None or lon is None:
            continue
        port = crossing.field(PORT_FIELD, config.UNKNOWN_KEY)
        value = coerce_int(crossing.get("Value"))
        marker = markers.get((port, lat, lon))
        if marker is None:
            markers[(port, lat, lon)] = {
                "port": port,
                "state": crossing.field("State", config.UNKNOWN_KEY),
                "latitude": lat,
                "longitude": lon,
                "value": value,
                "measures": [crossing.field("Measure")],
                "border": crossing.field("Border"),
                "color": border_color(crossing.field("Border")),
            }
            continue
        marker["value"] += value
        if crossing.field("Measure") not in marker["measures"]:
            marker["measures"].append(crossing.field("Measure"))

    return {
        "by_port": rank(sum_by(records, PORT_FIELD, "Value")),
        "by_state": rank(sum_by(records, "State", "Value")),
        "coordinates": sorted(markers.values(), key=lambda m: m["value"], reverse=True),
    }


def border_color(border: str) -> str:
    if "Canada" in border:
        return "#3b82f6"
    if "Mexico" in border:
        return "#ef4444"
    return "#a3a3a3"


def measure_analysis(
    records: Sequence[Record],
    border: str | None = None,
    year: Any = None,
    state: str | None = None,
) -> Dict[str, Any]:
    """Crossing totals per measure for the selected border, year and state."""
    years = sorted({y for y in (_period_year(r) for r in records) if y}, reverse=True)
    selected = [
        r for r in records
        if (border is None or r.field("Border") == border)
        and (year is None or _period_year(r) == str(year))
        and (state is None or r.field("State") == state)
    ]
    measure_data = rank(sum_by([r for r in selected if r.field("Measure")], "Measure", "Value"))
    return {
        "borders": unique_values(records, "Border"),
        "years": years,
        "states": unique_values(records, "State"),
        "measures": unique_values(records, "Measure"),
        "measure_data": measure_data,
        "total_crossings": sum(e.value for e in measure_data),
    }


def significant_ports(records: Sequence[Record], min_rows: int = config.BORDER_MIN_PORT_ROWS) -> List[str]:
    """Ports with more than `min_rows` rows, alphabetical."""
    counts = count_by([r for r in records if r.field(PORT_FIELD)], PORT_FIELD)
    return sorted(port for port, n in counts.items() if n > min_rows)


def trends(
    records: Sequence[Record],
    measure: str | None = None,
    border: str | None = None,
    port: str | None = None,
) -> Dict[str, Any]:
    """
    Monthly crossing totals with period-over-period change for the selected
    measure, border and port. Months that sum to zero or less are left out.
    """
    selected = [
        r for r in records
        if (measure is None or r.field("Measure") == measure)
        and (border is None or r.field("Border") == border)
        and (port is None or r.field(PORT_FIELD) == port)
    ]
    series = time_series(selected, date_field="Date", value_field="Value", positive_only=True)
    return {
        "measures": unique_values(records, "Measure"),
        "borders": unique_values(records, "Border"),
        "ports": significant_ports(records),
        "time_data": series,
        "insights": trend_insights(series),
    }
