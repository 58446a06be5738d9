"""
elections.py — Election result views (map, results table, charts, trends)

Input records come from `io_utils.normalize_election_records`, so `year`,
`candidatevotes` and `totalvotes` are ints and `party_simplified` is never
blank.
"""

from __future__ import annotations
import logging
from typing import Any, Dict, Iterable, List, Optional

from dx_core import config
from dx_core.aggregate import (
    AggregateBucket,
    filter_significant,
    group_and_sum,
    percentages,
    share,
)
from dx_core.geo import margin_color
from dx_core.io_utils import coerce_int
from dx_core.records import Record


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _state_key(record: Record) -> str:
    return record.field("state_po") or record.field("state")


def _is_house(office: str | None) -> bool:
    return str(office or "").upper() == "HOUSE"


def _district_label(district: Any) -> str:
    return "At-Large" if str(district) == "0" else f"District {district}"


def _has_votes(record: Record) -> bool:
    """Rows the tables and charts consider: a state, a candidate, and votes."""
    return bool(record.field("state")) and coerce_int(record.get("candidatevotes")) > 0 \
        and bool(record.field("candidate"))


def _bucket_total_votes(bucket: AggregateBucket) -> int:
    # Every row of a contest repeats the contest total; take the first.
    return coerce_int(bucket.details[0].get("totalvotes")) if bucket.details else 0


def _candidate_rows(bucket: AggregateBucket, total_votes: int) -> List[Dict[str, Any]]:
    rows = []
    for record in bucket.details:
        votes = coerce_int(record.get("candidatevotes"))
        if votes <= 0 or not record.field("candidate"):
            continue
        rows.append({
            "name": record.field("candidate"),
            "party": record.field("party_simplified", config.OTHER_PARTY),
            "votes": votes,
            "percentage": f"{share(votes, total_votes):.1f}",
        })
    return sorted(rows, key=lambda c: c["votes"], reverse=True)


# ------------------------------------------------------------------
# Selection helpers
# ------------------------------------------------------------------

def filter_year(records: Iterable[Record], year: int, state_po: str | None = None) -> List[Record]:
    """Rows for one election year, optionally one state (House view)."""
    out = [r for r in records if coerce_int(r.get("year")) == int(year)]
    if state_po:
        out = [r for r in out if r.field("state_po").upper() == state_po.upper()]
    return out


def available_years(records: Iterable[Record]) -> List[int]:
    return sorted({coerce_int(r.get("year")) for r in records})


def winning_party(records: Iterable[Record]) -> Optional[str]:
    """Party with the largest vote sum; the first seen wins a tie."""
    buckets = group_and_sum(records, "party_simplified", value_field="candidatevotes",
                            default_key=config.OTHER_PARTY, keep_details=False)
    winner, best = None, -1
    for party, bucket in buckets.items():
        if bucket.total > best:
            winner, best = party, bucket.total
    return winner


# ------------------------------------------------------------------
# Map view
# ------------------------------------------------------------------

def state_results(records: Iterable[Record], thresholds=None) -> Dict[str, Dict[str, Any]]:
    """
    Per-state two-party summary used to color the map.

    Returns a dict keyed by postal code (state name when no postal code is
    present) with Democratic/Republican vote sums, their two-party
    percentages, the margin, fill color, winner and candidates by votes.
    """
    buckets = group_and_sum(records, _state_key, value_field="candidatevotes",
                            category_field="party_simplified",
                            categories=config.MAJOR_PARTIES)
    results: Dict[str, Dict[str, Any]] = {}
    for key, bucket in buckets.items():
        total_votes = _bucket_total_votes(bucket)
        dem = bucket.subtotals.get("DEMOCRAT", 0)
        rep = bucket.subtotals.get("REPUBLICAN", 0)
        candidates = _candidate_rows(bucket, total_votes)
        entry: Dict[str, Any] = {
            "state": bucket.details[0].field("state", key),
            "state_po": key,
            "total_votes": total_votes,
            "dem_votes": dem,
            "rep_votes": rep,
            "candidates": candidates,
        }
        major = dem + rep
        two_party = percentages({"DEMOCRAT": dem, "REPUBLICAN": rep}, major)
        entry["dem_percent"] = two_party["DEMOCRAT"]
        entry["rep_percent"] = two_party["REPUBLICAN"]
        if major > 0:
            dem_share, rep_share = share(dem, major), share(rep, major)
            leader = "DEMOCRAT" if dem_share > rep_share else "REPUBLICAN"
            entry["margin"] = abs(dem_share - rep_share)
            entry["color"] = margin_color(dem_share, rep_share, thresholds)
            entry["winner"] = next((c for c in candidates if c["party"] == leader), None)
        else:
            logging.warning(f"{key} has no major party votes.")
            entry["margin"] = 0.0
            entry["color"] = config.NEUTRAL_COLOR
            entry["winner"] = candidates[0] if candidates else None
        results[key] = entry
    return results


# ------------------------------------------------------------------
# Results table
# ------------------------------------------------------------------

_TABLE_SORTS = {
    "state": lambda row: row["state"],
    "winner": lambda row: row["winner"]["name"] if row["winner"] else "",
    "total_votes": lambda row: row["total_votes"],
}


def results_table(records: Iterable[Record], sort_key: str = "state",
                  descending: bool = False) -> List[Dict[str, Any]]:
    """
    One row per state: total votes, winner, and candidates holding at least
    1% of the state's total. Sortable by state, winner or total votes.
    """
    if sort_key not in _TABLE_SORTS:
        raise KeyError(f"Unknown sort key: {sort_key}")
    buckets = group_and_sum([r for r in records if _has_votes(r)], "state",
                            value_field="candidatevotes")
    rows = []
    for key, bucket in buckets.items():
        total_votes = _bucket_total_votes(bucket)
        candidates = filter_significant(_candidate_rows(bucket, total_votes), total_votes,
                                        value=lambda c: c["votes"])
        rows.append({
            "state": key,
            "total_votes": total_votes,
            "winner": candidates[0] if candidates else None,
            "candidates": candidates,
        })
    return sorted(rows, key=_TABLE_SORTS[sort_key], reverse=descending)


# ------------------------------------------------------------------
# Party comparison chart
# ------------------------------------------------------------------

def _entity_summary(bucket: AggregateBucket, office: str | None) -> Dict[str, Any]:
    first = bucket.details[0]
    district = first.field("district", None) if _is_house(office) else None
    total_votes = _bucket_total_votes(bucket)
    if district is not None:
        display = _district_label(district)
    else:
        display = first.field("state", bucket.key)
    return {
        "key": bucket.key,
        "state": first.field("state"),
        "state_code": first.field("state_po"),
        "district": district,
        "display_name": display,
        "total_votes": total_votes,
        "party_votes": dict(bucket.subtotals),
        "party_percentages": percentages(bucket.subtotals, total_votes),
    }


def party_comparison(records: Iterable[Record], office: str,
                     selected_state: str | None = None) -> List[Dict[str, Any]]:
    """
    Party vote split per state, or per district for the House, sorted by
    Democratic share (highest first). Percentages are of the contest total.
    """
    key = ("state", "district") if _is_house(office) else "state"
    buckets = group_and_sum([r for r in records if _has_votes(r)], key,
                            value_field="candidatevotes",
                            category_field="party_simplified",
                            categories=config.CHART_PARTIES)
    items = []
    for bucket in buckets.values():
        item = _entity_summary(bucket, office)
        item["candidates"] = filter_significant(
            _candidate_rows(bucket, item["total_votes"]), item["total_votes"],
            value=lambda c: c["votes"])
        items.append(item)
    if selected_state and not _is_house(office):
        items = [i for i in items if i["state_code"] == selected_state]
    return sorted(items, key=lambda i: float(i["party_percentages"].get("DEMOCRAT", "0.0")),
                  reverse=True)


# ------------------------------------------------------------------
# Historical trends
# ------------------------------------------------------------------

def historical_trends(records: Iterable[Record], office: str) -> Dict[int, Dict[str, Dict[str, Any]]]:
    """
    Party totals per year per state (or state-district for the House).

    Returns {year: {entity_key: summary}} with years ascending.
    """
    usable = [r for r in records
              if coerce_int(r.get("year")) and r.field("state") and coerce_int(r.get("candidatevotes"))]
    key = ("state_po", "district") if _is_house(office) else "state_po"
    by_year = group_and_sum(usable, "year")
    trends: Dict[int, Dict[str, Dict[str, Any]]] = {}
    for year_key in sorted(by_year, key=coerce_int):
        buckets = group_and_sum(by_year[year_key].details, key,
                                value_field="candidatevotes",
                                category_field="party_simplified",
                                categories=config.CHART_PARTIES)
        year_entities = {}
        for entity_key, bucket in buckets.items():
            summary = _entity_summary(bucket, office)
            if summary["district"] is not None:
                summary["display_name"] = f"{summary['state']} {summary['display_name']}"
            year_entities[entity_key] = summary
        trends[coerce_int(year_key)] = year_entities
    return trends


def trend_entities(trends: Dict[int, Dict[str, Dict[str, Any]]],
                   state_po: str | None = None) -> List[Dict[str, Any]]:
    """Distinct entities across all years in first-seen order."""
    seen: Dict[str, Dict[str, Any]] = {}
    for year in sorted(trends):
        for key, entity in trends[year].items():
            seen.setdefault(key, {
                "key": key,
                "display_name": entity["display_name"],
                "state_code": entity["state_code"],
                "district": entity["district"],
            })
    entities = list(seen.values())
    if state_po:
        entities = [e for e in entities if e["state_code"] == state_po]
    return entities


def entity_trend(trends: Dict[int, Dict[str, Dict[str, Any]]], key: str) -> List[Dict[str, Any]]:
    """Year-by-year summaries for one entity, skipping years it is absent."""
    return [dict(year=year, **trends[year][key]) for year in sorted(trends) if key in trends[year]]


def national_trend(trends: Dict[int, Dict[str, Dict[str, Any]]]) -> List[Dict[str, Any]]:
    """Sum every entity per year into one national series."""
    series = []
    for year in sorted(trends):
        party_votes = {p: 0 for p in config.CHART_PARTIES}
        total_votes = 0
        for entity in trends[year].values():
            total_votes += entity["total_votes"]
            for party, votes in entity["party_votes"].items():
                party_votes[party] = party_votes.get(party, 0) + votes
        series.append({
            "year": year,
            "total_votes": total_votes,
            "party_votes": party_votes,
            "party_percentages": percentages(party_votes, total_votes),
        })
    return series


def margin_trend(series: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Democratic minus Republican share (percentage points) per year."""
    out = []
    for point in series:
        pct = point["party_percentages"]
        margin = float(pct.get("DEMOCRAT", "0.0")) - float(pct.get("REPUBLICAN", "0.0"))
        out.append({"year": point["year"], "margin": round(margin, 1)})
    return out
