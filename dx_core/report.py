"""
report.py — Excel export of computed summary tables

One workbook per run: a "Summary" sheet with the scalar facts, then one
sheet per table (rankings, bucket tables, time series).
"""

from __future__ import annotations
import dataclasses
import logging
import pathlib
import re
from typing import Any, Dict, List

import numpy as np
import pandas as pd

from dx_core import config
from dx_core.aggregate import AggregateBucket, RankedEntry, bucket_frame
from dx_core.timeseries import TimeSeriesPoint, series_frame


# ---------------------------------------------------------------------
# Utility functions
# ---------------------------------------------------------------------

def _flatten(value: Any) -> str:
    """Convert listlike/dict/scalar cell contents to a concise string."""
    if isinstance(value, RankedEntry):
        return f"{value.label} ({value.value})"
    if isinstance(value, TimeSeriesPoint):
        return f"{value.period} ({value.value})"
    if isinstance(value, (list, tuple, set, pd.Series, np.ndarray)):
        items = [_flatten(v) for v in list(value)]
        if len(items) > 10:
            return ", ".join(items[:10]) + ", ..."
        return ", ".join(items)
    if isinstance(value, dict):
        if "name" in value and "votes" in value:
            return f"{value['name']} ({value['votes']:,})"
        return "; ".join(f"{k}={_flatten(v)}" for k, v in value.items())
    if value is None:
        return ""
    return str(value)


def _pretty_sheet_name(raw: str, taken: set) -> str:
    """Title-case a result key into a valid, unique Excel sheet name."""
    name = re.sub(r"[\[\]\:\*\?\/\\]", " ", str(raw)).replace("_", " ").title().strip()
    name = name[:31] or "Sheet"
    base, n = name, 2
    while name in taken:
        suffix = f" {n}"
        name = base[: 31 - len(suffix)] + suffix
        n += 1
    taken.add(name)
    return name


def _row(item: Any) -> Dict[str, Any]:
    if dataclasses.is_dataclass(item):
        item = dataclasses.asdict(item)
    return {k: (v if isinstance(v, (int, float, str, bool)) or v is None else _flatten(v))
            for k, v in item.items()}


def to_frame(value: Any) -> pd.DataFrame | None:
    """Turn one result value into a DataFrame, or None for scalars."""
    if isinstance(value, pd.DataFrame):
        return value
    if isinstance(value, list):
        if not value:
            return pd.DataFrame()
        if all(isinstance(v, RankedEntry) for v in value):
            return pd.DataFrame(value, columns=["label", "value"])
        if all(isinstance(v, TimeSeriesPoint) for v in value):
            return series_frame(value)
        if all(isinstance(v, dict) or dataclasses.is_dataclass(v) for v in value):
            return pd.DataFrame([_row(v) for v in value])
        return pd.DataFrame({"value": [_flatten(v) for v in value]})
    if isinstance(value, dict) and value and all(isinstance(v, AggregateBucket) for v in value.values()):
        return bucket_frame(value)
    if isinstance(value, dict) and value and all(isinstance(v, dict) for v in value.values()):
        return pd.DataFrame([{"key": k, **_row(v)} for k, v in value.items()])
    return None


def _autosize_sheet(writer: pd.ExcelWriter, sheet_name: str, df_table: pd.DataFrame) -> None:
    """Set column widths from the longest value in each column."""
    ws = writer.sheets.get(sheet_name)
    if ws is None:
        return
    min_w, max_w = 8, config.REPORT_MAX_COL_WIDTH
    for i, col in enumerate(df_table.columns):
        vals = df_table[col].astype(str).tolist()
        max_len = max([len(str(col))] + [len(v) for v in vals])
        cushion = 2 if pd.api.types.is_numeric_dtype(df_table[col]) else 4
        ws.set_column(i, i, min(max(max_len + cushion, min_w), max_w))


# ---------------------------------------------------------------------
# Workbook writer
# ---------------------------------------------------------------------

def write_excel_summary(results: Dict[str, Any], path: pathlib.Path) -> List[str]:
    """Write every table in `results` to its own sheet; return the sheet names."""
    path = pathlib.Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    summary_rows = []
    tables: List[tuple] = []
    for key, value in results.items():
        frame = to_frame(value)
        if frame is not None:
            tables.append((key, frame))
        elif isinstance(value, dict):
            summary_rows.extend({"Item": f"{key}.{k}", "Value": _flatten(v)} for k, v in value.items())
        else:
            summary_rows.append({"Item": key, "Value": _flatten(value)})

    taken = {"Summary"}
    written = []
    with pd.ExcelWriter(path, engine="xlsxwriter") as writer:
        summary = pd.DataFrame(summary_rows, columns=["Item", "Value"])
        summary.to_excel(writer, sheet_name="Summary", index=False)
        _autosize_sheet(writer, "Summary", summary)
        written.append("Summary")
        for key, frame in tables:
            sheet = _pretty_sheet_name(key, taken)
            if frame.empty:
                logging.info(f"Table '{key}' is empty; writing header-only sheet.")
            frame.to_excel(writer, sheet_name=sheet, index=False)
            _autosize_sheet(writer, sheet, frame)
            written.append(sheet)
    logging.info(f"Wrote {len(written)} sheets to {path}.")
    return written
