"""
runner.py — Orchestrator: load a dataset, compute its views, export them

Each run parses the CSV once and recomputes every view from scratch for
the requested parameters (year, state, filters).
"""

from __future__ import annotations
import argparse
import logging
import os
import pathlib
import platform
import subprocess
from typing import Any, Dict, List, Sequence

import requests

from dx_core import border, config, elections, ev, io_utils, report
from dx_core.records import Record


# ---------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------
def _setup_logging(log_dir: pathlib.Path) -> None:
    """Initialize logging to both console and file."""
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / "dx_run.log"
    logging.basicConfig(
        filename=log_path,
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    root = logging.getLogger()
    if not any(type(h) is logging.StreamHandler for h in root.handlers):
        root.addHandler(logging.StreamHandler())


# ---------------------------------------------------------------------
# Per-dataset views
# ---------------------------------------------------------------------
def election_views(records: List[Record], office: str, year: int | None = None,
                   state: str | None = None) -> Dict[str, Any]:
    """Map, table, chart and trend summaries for one office."""
    years = elections.available_years(records)
    if not years:
        logging.warning("No election rows with a usable year.")
        return {"available_years": []}
    year = int(year) if year is not None else years[-1]
    year_data = elections.filter_year(records, year, state if office.upper() == "HOUSE" else None)
    trends = elections.historical_trends(records, office)
    national = elections.national_trend(trends)
    return {
        "selection": {"office": office.upper(), "year": year, "state": state or ""},
        "available_years": years,
        "winning_party": elections.winning_party(year_data) or "",
        "state_results": elections.state_results(year_data),
        "results_table": elections.results_table(year_data),
        "party_comparison": elections.party_comparison(year_data, office, state),
        "national_trend": national,
        "margin_trend": elections.margin_trend(national),
    }


def ev_views(records: List[Record]) -> Dict[str, Any]:
    """Overview, model, range and type summaries for EV registrations."""
    summary = ev.overview(records)
    points = ev.range_by_year(records)
    breakdown = ev.type_breakdown(records)
    return {
        "total_vehicles": summary["total_vehicles"],
        "by_make": summary["by_make"],
        "by_type": summary["by_type"],
        "by_year": summary["by_year"],
        "by_county": summary["by_county"],
        "by_city": ev.location_summary(records)["by_city"],
        "model_catalog": ev.model_catalog(records),
        "range_by_year": points,
        "range_growth": ev.range_growth(points) or {},
        "eligibility": breakdown.get("eligibility", {}),
    }


def border_views(records: List[Record]) -> Dict[str, Any]:
    """Overview, port, measure and monthly trend summaries for crossings."""
    summary = border.overview(records)
    ports = border.port_summary(records)
    trend = border.trends(records)
    return {
        "total_crossings": summary["total_crossings"],
        "by_measure": summary["by_measure"],
        "by_border": summary["by_border"],
        "by_state": summary["by_state"],
        "by_port": ports["by_port"],
        "port_markers": ports["coordinates"],
        "monthly_trend": trend["time_data"],
        "trend_insights": trend["insights"] or {},
    }


def build_views(dataset: str, records: List[Record], year: int | None = None,
                state: str | None = None) -> Dict[str, Any]:
    """Dispatch to the views of `dataset`."""
    dataset = dataset.lower()
    if dataset in config.ELECTION_DATASETS:
        return election_views(io_utils.normalize_election_records(records), dataset, year, state)
    if dataset == "ev":
        return ev_views(records)
    if dataset == "border":
        return border_views(records)
    raise ValueError(f"Unknown dataset '{dataset}'; expected one of {sorted(config.DATASET_FILES)}")


# ---------------------------------------------------------------------
# Main runner
# ---------------------------------------------------------------------
def run_summary(
    source: str | pathlib.Path,
    dataset: str,
    year: int | None = None,
    state: str | None = None,
    output_dir: pathlib.Path | None = None,
    write_report: bool = True,
) -> Dict[str, Any] | None:
    """Load `source`, compute the views of `dataset`, and export them to Excel."""
    dataset = dataset.lower()
    if dataset not in config.DATASET_FILES:
        raise ValueError(f"Unknown dataset '{dataset}'; expected one of {sorted(config.DATASET_FILES)}")
    out_dir = pathlib.Path(output_dir) if output_dir else config.OUTPUT_DIR / dataset
    _setup_logging(out_dir)

    logging.info("==============================================")
    logging.info(f"Starting US Data Explorer summary ({dataset})")
    logging.info(f"Source: {source}")
    logging.info("==============================================")

    try:
        text = io_utils.load_text(source)
    except (OSError, UnicodeDecodeError, requests.RequestException) as e:
        logging.exception(f"Error loading {source}: {e}")
        return None

    parsed = io_utils.parse_csv_with_stats(text)
    results: Dict[str, Any] = {
        "dataset_info": {
            "dataset": dataset,
            "source": str(source),
            "data_lines": parsed.total_lines,
            "records": len(parsed.records),
            "dropped_rows": parsed.dropped,
        }
    }
    if not parsed.records:
        logging.warning("No records parsed; nothing to summarize.")
    results.update(build_views(dataset, parsed.records, year=year, state=state))

    if write_report:
        stem = pathlib.Path(str(source).rstrip("/").split("/")[-1]).stem or dataset
        xlsx_path = out_dir / f"summary_{stem}.xlsx"
        logging.info(f"Writing Excel summary to {xlsx_path} ...")
        report.write_excel_summary(results, xlsx_path)
        results["report_path"] = str(xlsx_path)
        _maybe_open(xlsx_path)

    logging.info("==============================================")
    logging.info(f"Summary completed for {source}")
    logging.info("==============================================")
    return results


def _maybe_open(path: pathlib.Path) -> None:
    """Open the workbook with the OS default application when enabled."""
    if not config.AUTO_OPEN_REPORT:
        return
    try:
        system = platform.system()
        if system == "Darwin":
            subprocess.Popen(["open", str(path)])
        elif system == "Windows":
            os.startfile(str(path))
        else:
            subprocess.Popen(["xdg-open", str(path)])
    except OSError as e:
        logging.warning(f"Failed to open report automatically: {e}")


# ---------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------
def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Summarize a US Data Explorer CSV dataset into an Excel workbook."
    )
    parser.add_argument("dataset", choices=sorted(config.DATASET_FILES),
                        help="Which dataset the file holds")
    parser.add_argument("source", nargs="?", default=None,
                        help="Path or http(s) URL of the CSV file (default: the dataset's standard file name)")
    parser.add_argument("--year", type=int, default=None, help="Election year (elections only)")
    parser.add_argument("--state", default=None, help="Postal code filter (House elections)")
    parser.add_argument("--output-dir", type=pathlib.Path, default=None)
    args = parser.parse_args(argv)
    source = args.source or config.DATASET_FILES[args.dataset]
    results = run_summary(source, args.dataset, year=args.year, state=args.state,
                          output_dir=args.output_dir)
    return 0 if results is not None else 1


if __name__ == "__main__":
    raise SystemExit(main())
