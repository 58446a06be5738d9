"""
geo.py — State code normalization and color lookups

Every lookup into a fixed table falls back to a sentinel (UNMATCHED for
state codes, OTHER's color for parties) so that callers can render a
neutral value instead of failing.
"""

from __future__ import annotations
from typing import Any, Dict, List, Tuple

from dx_core import config
from dx_core.io_utils import coerce_float


def _norm_str(s: Any) -> str:
    """Generic normalizer for robust comparisons (trim + upper)."""
    return str(s).strip().upper() if s is not None else ""


def normalize_fips(code: Any) -> str:
    """Zero-pad a state FIPS code to two characters.

    Five-digit county FIPS codes reduce to their two-digit state prefix.
    Non-numeric input is returned trimmed and unchanged.
    """
    s = str(code).strip() if code is not None else ""
    if not s.isdigit():
        return s
    if len(s) >= 4:
        s = s.zfill(5)[:2]
    return s.zfill(2)


def state_po_from_fips(code: Any) -> str:
    """FIPS code -> postal abbreviation, or UNMATCHED_STATE."""
    return config.FIPS_TO_STATE.get(normalize_fips(code), config.UNMATCHED_STATE)


def state_po_from_name(name: Any) -> str:
    """Full state name (any case) -> postal abbreviation, or UNMATCHED_STATE."""
    return config.STATE_NAME_TO_PO.get(_norm_str(name), config.UNMATCHED_STATE)


_KNOWN_POSTAL = set(config.FIPS_TO_STATE.values())


def normalize_state(value: Any) -> str:
    """Resolve a FIPS code, postal code or state name to a postal code."""
    text = _norm_str(value)
    if not text:
        return config.UNMATCHED_STATE
    if text.isdigit():
        return state_po_from_fips(text)
    if text in _KNOWN_POSTAL:
        return text
    return state_po_from_name(text)


def party_color(party: Any) -> str:
    """Display color for a party name; unknown parties use OTHER's color."""
    key = _norm_str(party) or config.OTHER_PARTY
    return config.PARTY_COLORS.get(key, config.PARTY_COLORS[config.OTHER_PARTY])


def margin_color(
    dem_percent: Any,
    rep_percent: Any,
    thresholds: Dict[str, List[Tuple[float, str]]] | None = None,
) -> str:
    """
    Fill color for a two-party result.

    The leading party's threshold table is scanned in order and the first
    row whose lower bound the margin exceeds supplies the color. A tie goes
    to the Republican table. Missing tables yield the neutral color.
    """
    table = thresholds if thresholds is not None else config.MARGIN_COLORS
    dem = coerce_float(dem_percent)
    rep = coerce_float(rep_percent)
    leader = "DEMOCRAT" if dem > rep else "REPUBLICAN"
    margin = abs(dem - rep)
    for lower_bound, color in table.get(leader, []):
        if margin > lower_bound:
            return color
    return config.NEUTRAL_COLOR
