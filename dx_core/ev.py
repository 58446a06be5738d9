"""
ev.py — Electric vehicle registration views

Record fields used: Make, Model, Model Year, Electric Range, Electric
Vehicle Type, County, City, VehicleLocation and the CAFV eligibility text.
"""

from __future__ import annotations
import re
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from dx_core import config
from dx_core.aggregate import count_by, group_and_sum, rank, unique_values
from dx_core.io_utils import leading_float, leading_int
from dx_core.records import Record

RANGE_FIELD = "Electric Range"
YEAR_FIELD = "Model Year"
TYPE_FIELD = "Electric Vehicle Type"
CAFV_FIELD = "Clean Alternative Fuel Vehicle (CAFV) Eligibility"

_POINT_RE = re.compile(r"POINT \(([^ ]+) ([^)]+)\)")


def _positive_range(record: Record) -> Optional[float]:
    value = leading_float(record.get(RANGE_FIELD))
    return value if value is not None and value > 0 else None


def _model_year(record: Record) -> Optional[int]:
    return leading_int(record.field(YEAR_FIELD, None))


def _round_half_up(value: float) -> int:
    return int(np.floor(value + 0.5))


def average_range(records: Iterable[Record]) -> float:
    """Mean of the positive electric ranges; 0.0 when none are known."""
    ranges = [r for r in (_positive_range(v) for v in records) if r is not None]
    return float(np.mean(ranges)) if ranges else 0.0


def parse_point(text: Any) -> Optional[Tuple[float, float]]:
    """(longitude, latitude) from a "POINT (lon lat)" string."""
    match = _POINT_RE.search(str(text or ""))
    if not match:
        return None
    lon, lat = leading_float(match.group(1)), leading_float(match.group(2))
    if lon is None or lat is None:
        return None
    return lon, lat


# ------------------------------------------------------------------
# Overview
# ------------------------------------------------------------------

def overview(records: Sequence[Record], top_makes: int = config.EV_TOP_MAKES) -> Dict[str, Any]:
    """Vehicle counts by make (top N), type, model year and county."""
    with_year = [r for r in records if _model_year(r) is not None]
    by_year = count_by(with_year, YEAR_FIELD)
    return {
        "total_vehicles": len(records),
        "by_make": rank(count_by(records, "Make"), top_n=top_makes),
        "by_type": rank(count_by(records, TYPE_FIELD)),
        "by_year": rank(by_year, alphabetical=True, descending=False),
        "by_county": rank(count_by(records, "County")),
    }


def location_summary(records: Sequence[Record]) -> Dict[str, Any]:
    """County and city rankings plus the vehicle coordinates."""
    coordinates = []
    for vehicle in records:
        point = parse_point(vehicle.get("VehicleLocation"))
        if point is None:
            continue
        coordinates.append({
            "longitude": point[0],
            "latitude": point[1],
            "make": vehicle.field("Make", config.UNKNOWN_KEY),
            "model": vehicle.field("Model", config.UNKNOWN_KEY),
            "year": vehicle.field(YEAR_FIELD, config.UNKNOWN_KEY),
            "city": vehicle.field("City", config.UNKNOWN_KEY),
        })
    return {
        "by_county": rank(count_by(records, "County")),
        "by_city": rank(count_by(records, "City")),
        "coordinates": coordinates,
    }


# ------------------------------------------------------------------
# Model comparison
# ------------------------------------------------------------------

def _models(records: Iterable[Record]) -> Dict[Tuple[str, str], List[Record]]:
    """Vehicles per (make, model), makes then models in first-seen order."""
    known = [r for r in records if r.field("Make") and r.field("Model")]
    out: Dict[Tuple[str, str], List[Record]] = {}
    for make, make_bucket in group_and_sum(known, "Make").items():
        for model, model_bucket in group_and_sum(make_bucket.details, "Model").items():
            out[(make, model)] = model_bucket.details
    return out


def model_catalog(records: Iterable[Record], min_count: int = config.EV_MIN_MODEL_COUNT) -> List[Dict[str, Any]]:
    """Models with at least `min_count` vehicles, most popular first."""
    catalog = [
        {"id": f"{make} {model}", "make": make, "model": model, "count": len(vehicles)}
        for (make, model), vehicles in _models(records).items()
        if len(vehicles) >= min_count
    ]
    return sorted(catalog, key=lambda m: m["count"], reverse=True)


def compare_models(records: Iterable[Record], model_ids: Sequence[str]) -> List[Dict[str, Any]]:
    """
    Side-by-side stats for selected "Make Model" ids: count, average range,
    model years, type breakdown and the five counties with most vehicles.
    Unknown ids produce a zero-count entry.
    """
    index = {f"{make} {model}": (make, model, vehicles)
             for (make, model), vehicles in _models(records).items()}
    out = []
    for model_id in model_ids:
        if model_id in index:
            make, model, vehicles = index[model_id]
        else:
            make, _, model = model_id.partition(" ")
            vehicles = []
        years = sorted({y for y in (_model_year(v) for v in vehicles) if y is not None})
        out.append({
            "id": model_id,
            "make": make,
            "model": model,
            "count": len(vehicles),
            "avg_range": _round_half_up(average_range(vehicles)),
            "years": years,
            "type_breakdown": list(count_by(vehicles, TYPE_FIELD).items()),
            "county_data": rank(count_by(vehicles, "County"), top_n=5),
        })
    return out


# ------------------------------------------------------------------
# Range by model year
# ------------------------------------------------------------------

def range_by_year(records: Iterable[Record], min_year: int = config.EV_MIN_MODEL_YEAR) -> List[Dict[str, Any]]:
    """Average positive range per model year (from `min_year`), oldest first."""
    usable = [r for r in records if _model_year(r) is not None and _positive_range(r) is not None]
    buckets = group_and_sum(usable, YEAR_FIELD, value_field=RANGE_FIELD, numeric="float")
    points = []
    for key, bucket in buckets.items():
        year = leading_int(key)
        if year is None or year < min_year:
            continue
        vehicles = sorted(
            ({"make": v.field("Make", config.UNKNOWN_KEY),
              "model": v.field("Model", config.UNKNOWN_KEY),
              "range": _positive_range(v)} for v in bucket.details),
            key=lambda v: v["range"], reverse=True,
        )
        points.append({
            "year": year,
            "avg_range": _round_half_up(bucket.total / bucket.count),
            "count": bucket.count,
            "vehicles": vehicles[:5],
        })
    return sorted(points, key=lambda p: p["year"])


def range_growth(points: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """First-to-last change in average range and the best year."""
    if len(points) < 2:
        return None
    first, last = points[0]["avg_range"], points[-1]["avg_range"]
    peak = max(points, key=lambda p: p["avg_range"])
    return {
        "from_year": points[0]["year"],
        "to_year": points[-1]["year"],
        "growth_pct": _round_half_up((last - first) / max(1, first) * 100),
        "peak_year": peak["year"],
        "peak_range": peak["avg_range"],
    }


# ------------------------------------------------------------------
# Type breakdown
# ------------------------------------------------------------------

def _eligibility(record: Record) -> str:
    status = record.field(CAFV_FIELD)
    if "Eligible" in status:
        return "Eligible"
    if "Not eligible" in status:
        return "Not Eligible"
    return config.UNKNOWN_KEY


def _in_range_bucket(record: Record, label: str) -> bool:
    bounds = {name: (lo, hi) for name, lo, hi in config.EV_RANGE_BUCKETS}
    if label not in bounds:
        raise KeyError(f"Unknown range bucket: {label}")
    value = leading_float(record.get(RANGE_FIELD))
    lo, hi = bounds[label]
    return value is not None and lo <= value < hi


def type_breakdown(
    records: Sequence[Record],
    vehicle_type: str | None = None,
    make: str | None = None,
    year: Any = None,
    range_bucket: str | None = None,
) -> Dict[str, Any]:
    """
    Filter options plus statistics for the vehicles matching the selected
    type, make, model year and range bucket (None means all).
    """
    years = sorted({y for y in (_model_year(r) for r in records) if y is not None}, reverse=True)
    selected = [
        r for r in records
        if (vehicle_type is None or r.field(TYPE_FIELD) == vehicle_type)
        and (make is None or r.field("Make") == make)
        and (year is None or r.field(YEAR_FIELD) == str(year))
        and (range_bucket is None or _in_range_bucket(r, range_bucket))
    ]
    result: Dict[str, Any] = {
        "types": unique_values(records, TYPE_FIELD, sort=False),
        "makes": unique_values(records, "Make", sort=False),
        "years": years,
        "ranges": [name for name, _, _ in config.EV_RANGE_BUCKETS],
        "total_vehicles": len(selected),
    }
    if not selected:
        return result

    has_range = any(_positive_range(r) is not None for r in selected)
    year_counts = count_by([r for r in selected if r.field(YEAR_FIELD)], YEAR_FIELD)
    result["avg_range"] = f"{average_range(selected):.1f}" if has_range else "N/A"
    result["year_data"] = rank(year_counts, top_n=10, alphabetical=True, descending=True)
    result["eligibility"] = count_by(selected, _eligibility)
    return result
