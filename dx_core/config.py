"""
config.py — Global constants and configuration defaults

Sentinels, lookup tables and cutoffs shared by the parser and the
aggregation views.
"""

from __future__ import annotations
import pathlib

BASE_DIR = pathlib.Path(__file__).resolve().parents[1]
OUTPUT_DIR = BASE_DIR / "output"

# Static CSV resources served next to the explorer front-end
DATASET_FILES = {
    "president": "1976-2020-president.csv",
    "senate": "1976-2020-senate.csv",
    "house": "1976-2022-house.csv",
    "ev": "Electric_Vehicle_Population_Data.csv",
    "border": "Border_Crossing_Entry_Data.csv",
}
ELECTION_DATASETS = {"president", "senate", "house"}
REQUEST_TIMEOUT = 60

EMPTY_RECORD = ""

# Sentinel keys for missing categorical values
UNKNOWN_KEY = "Unknown"
OTHER_PARTY = "OTHER"
UNMATCHED_STATE = "UNMATCHED"
COMPOSITE_KEY_SEPARATOR = "-"

# Detail rows under this share (percent of the bucket total) are hidden
DETAIL_SHARE_THRESHOLD = 1.0

MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
               "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

ELECTION_NUMERIC_FIELDS = ["year", "candidatevotes", "totalvotes"]
MAJOR_PARTIES = ["DEMOCRAT", "REPUBLICAN"]
CHART_PARTIES = ["DEMOCRAT", "REPUBLICAN", "LIBERTARIAN", "OTHER"]

PARTY_COLORS = {
    "DEMOCRAT": "#2166ac",
    "DEMOCRATIC": "#2166ac",
    "REPUBLICAN": "#b2182b",
    "LIBERTARIAN": "#ffd700",
    "GREEN": "#92c5de",
    "OTHER": "#666666",
}
NEUTRAL_COLOR = "#808080"

# Margin (percentage points, two-party) -> fill color. Checked in order;
# the first row whose lower bound the margin exceeds wins.
MARGIN_COLORS = {
    "DEMOCRAT": [(20.0, "#0000FF"), (float("-inf"), "#4169E1")],
    "REPUBLICAN": [(20.0, "#FF0000"), (float("-inf"), "#CD5C5C")],
}

FIPS_TO_STATE = {
    "01": "AL", "02": "AK", "04": "AZ", "05": "AR", "06": "CA",
    "08": "CO", "09": "CT", "10": "DE", "11": "DC", "12": "FL",
    "13": "GA", "15": "HI", "16": "ID", "17": "IL", "18": "IN",
    "19": "IA", "20": "KS", "21": "KY", "22": "LA", "23": "ME",
    "24": "MD", "25": "MA", "26": "MI", "27": "MN", "28": "MS",
    "29": "MO", "30": "MT", "31": "NE", "32": "NV", "33": "NH",
    "34": "NJ", "35": "NM", "36": "NY", "37": "NC", "38": "ND",
    "39": "OH", "40": "OK", "41": "OR", "42": "PA", "44": "RI",
    "45": "SC", "46": "SD", "47": "TN", "48": "TX", "49": "UT",
    "50": "VT", "51": "VA", "53": "WA", "54": "WV", "55": "WI",
    "56": "WY",
}

STATE_NAME_TO_PO = {
    "ALABAMA": "AL", "ALASKA": "AK", "ARIZONA": "AZ", "ARKANSAS": "AR",
    "CALIFORNIA": "CA", "COLORADO": "CO", "CONNECTICUT": "CT", "DELAWARE": "DE",
    "DISTRICT OF COLUMBIA": "DC", "FLORIDA": "FL", "GEORGIA": "GA", "HAWAII": "HI",
    "IDAHO": "ID", "ILLINOIS": "IL", "INDIANA": "IN", "IOWA": "IA",
    "KANSAS": "KS", "KENTUCKY": "KY", "LOUISIANA": "LA", "MAINE": "ME",
    "MARYLAND": "MD", "MASSACHUSETTS": "MA", "MICHIGAN": "MI", "MINNESOTA": "MN",
    "MISSISSIPPI": "MS", "MISSOURI": "MO", "MONTANA": "MT", "NEBRASKA": "NE",
    "NEVADA": "NV", "NEW HAMPSHIRE": "NH", "NEW JERSEY": "NJ", "NEW MEXICO": "NM",
    "NEW YORK": "NY", "NORTH CAROLINA": "NC", "NORTH DAKOTA": "ND", "OHIO": "OH",
    "OKLAHOMA": "OK", "OREGON": "OR", "PENNSYLVANIA": "PA", "RHODE ISLAND": "RI",
    "SOUTH CAROLINA": "SC", "SOUTH DAKOTA": "SD", "TENNESSEE": "TN", "TEXAS": "TX",
    "UTAH": "UT", "VERMONT": "VT", "VIRGINIA": "VA", "WASHINGTON": "WA",
    "WEST VIRGINIA": "WV", "WISCONSIN": "WI", "WYOMING": "WY",
}

# EV view cutoffs
EV_MIN_MODEL_COUNT = 5
EV_MIN_MODEL_YEAR = 2010
EV_TOP_MAKES = 15
EV_RANGE_BUCKETS = [
    ("Under 100 miles", 0, 100),
    ("100-200 miles", 100, 200),
    ("200-300 miles", 200, 300),
    ("Over 300 miles", 300, float("inf")),
]

# Border view cutoffs
BORDER_MIN_PORT_ROWS = 10
TREND_WINDOW = 3

REPORT_MAX_COL_WIDTH = 60

# If True, open the written workbook with the OS default application.
AUTO_OPEN_REPORT = False
