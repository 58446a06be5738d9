"""
io_utils.py — Text loading, CSV tokenizing and record normalization

Turns raw delimited text into an ordered, fully materialized list of
`Record`s. Malformed rows are dropped, never raised.
"""

from __future__ import annotations
import logging
import math
import pathlib
import re
from typing import Any, Iterable, List, NamedTuple, Optional

import numpy as np
import pandas as pd
import requests

from dx_core import config
from dx_core.records import Record

_INT_RE = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


class ParseResult(NamedTuple):
    records: List[Record]
    dropped: int
    total_lines: int


# ------------------------------------------------------------------
# Numeric coercion
# ------------------------------------------------------------------

def leading_int(value: Any) -> Optional[int]:
    """Leading integer of `value` ("12abc" -> 12, "3.9" -> 3), or None."""
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    match = _INT_RE.match(str(value or ""))
    return int(match.group(1)) if match else None


def coerce_int(value: Any) -> int:
    """Parse the leading integer of `value`; anything unparseable is 0."""
    parsed = leading_int(value)
    return parsed if parsed is not None else 0


def leading_float(value: Any) -> Optional[float]:
    """Leading decimal number of `value`, or None when there is none."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value) if math.isfinite(value) else None
    match = _FLOAT_RE.match(str(value or ""))
    if not match:
        return None
    parsed = float(match.group(1))
    return parsed if math.isfinite(parsed) else None


def coerce_float(value: Any) -> float:
    """Parse the leading decimal number of `value`; anything unparseable is 0.0."""
    parsed = leading_float(value)
    return parsed if parsed is not None else 0.0


def coerce_int_series(series: pd.Series) -> pd.Series:
    """Vectorized `coerce_int` for a column of strings."""
    extracted = series.astype(str).str.extract(_INT_RE.pattern, expand=False)
    return pd.to_numeric(extracted, errors="coerce").fillna(0).astype("int64")


def coerce_float_series(series: pd.Series) -> pd.Series:
    """Vectorized `coerce_float` for a column of strings."""
    extracted = series.astype(str).str.extract(_FLOAT_RE.pattern, expand=False)
    numbers = pd.to_numeric(extracted, errors="coerce")
    return numbers.where(np.isfinite(numbers)).fillna(0.0).astype(float)


# ------------------------------------------------------------------
# Tokenizer
# ------------------------------------------------------------------

def split_csv_line(line: str) -> List[str]:
    """Split one line on commas, ignoring commas inside double quotes.

    A double quote toggles the in-quotes state and is not kept in the value.
    Every field is whitespace-trimmed.
    """
    values = []
    current = []
    inside_quotes = False
    for char in line:
        if char == '"':
            inside_quotes = not inside_quotes
        elif char == "," and not inside_quotes:
            values.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    values.append("".join(current).strip())
    return values


def parse_csv_with_stats(text: str, strict: bool = True) -> ParseResult:
    """
    Parse CSV text into Records and report how many data lines were dropped.

    The first non-blank line is the header. Blank lines are skipped and do
    not count as data lines. With `strict=True` a line whose field count
    differs from the header's is dropped; otherwise short lines are padded
    with empty strings and surplus fields ignored.
    """
    if not isinstance(text, str):
        raise TypeError(f"CSV input must be str, not {type(text).__name__}")

    lines = [line for line in text.split("\n") if line.strip()]
    if not lines:
        return ParseResult([], 0, 0)

    headers = [h.replace('"', "") for h in split_csv_line(lines[0])]
    records: List[Record] = []
    dropped = 0
    for line in lines[1:]:
        values = split_csv_line(line)
        if len(values) != len(headers):
            if strict:
                dropped += 1
                continue
            values = (values + [config.EMPTY_RECORD] * len(headers))[:len(headers)]
        records.append(Record(dict(zip(headers, values))))

    total = len(lines) - 1
    if dropped:
        logging.info(f"Parsed {len(records):,} records, dropped {dropped:,} malformed rows.")
    else:
        logging.info(f"Parsed {len(records):,} records.")
    return ParseResult(records, dropped, total)


def parse_csv(text: str, strict: bool = True) -> List[Record]:
    """Parse CSV text into an ordered list of Records."""
    return parse_csv_with_stats(text, strict=strict).records


def normalize_election_records(records: Iterable[Record]) -> List[Record]:
    """
    Type the numeric election fields and default the party.

    Records without a `year` or with an empty `candidatevotes` are dropped.
    `year`, `candidatevotes` and `totalvotes` become ints (unparseable -> 0)
    and a blank `party_simplified` becomes OTHER.
    """
    records = list(records)
    out = []
    for record in records:
        if not record.field("year") or record.get("candidatevotes", "") == "":
            continue
        changes = {name: coerce_int(record.get(name, "")) for name in config.ELECTION_NUMERIC_FIELDS}
        changes["party_simplified"] = record.field("party_simplified", config.OTHER_PARTY)
        out.append(record.replace(**changes))
    skipped = len(records) - len(out)
    if skipped:
        logging.info(f"Skipped {skipped:,} election rows without year or candidate votes.")
    return out


# ------------------------------------------------------------------
# Loading
# ------------------------------------------------------------------

def load_text(source: str | pathlib.Path) -> str:
    """Read CSV text from a local path or an http(s) URL.

    Transport failures are not retried; they propagate to the caller.
    """
    source_str = str(source)
    if source_str.startswith(("http://", "https://")):
        response = requests.get(source_str, timeout=config.REQUEST_TIMEOUT)
        response.raise_for_status()
        logging.info(f"Fetched {source_str} ({len(response.content):,} bytes).")
        return response.text
    path = pathlib.Path(source)
    text = path.read_text(encoding="utf-8-sig")
    logging.info(f"Loaded {path.name} ({len(text):,} characters).")
    return text


def records_to_frame(records: List[Record]) -> pd.DataFrame:
    """Build a DataFrame from Records, keeping the first record's column order."""
    if not records:
        return pd.DataFrame()
    columns = list(records[0].keys())
    for record in records[1:]:
        for name in record:
            if name not in columns:
                columns.append(name)
    df = pd.DataFrame.from_records([r.to_dict() for r in records], columns=columns)
    return df.fillna(config.EMPTY_RECORD)
