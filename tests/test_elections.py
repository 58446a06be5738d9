import pytest

from dx_core import elections
from dx_core.io_utils import normalize_election_records, parse_csv


HOUSE_CSV = (
    "state,state_po,year,candidate,candidatevotes,totalvotes,party_simplified,district\n"
    "ALASKA,AK,2020,YOUNG,190,350,REPUBLICAN,0\n"
    "ALASKA,AK,2020,GALVIN,160,350,DEMOCRAT,0\n"
    "OHIO,OH,2020,SMITH,100,150,DEMOCRAT,1\n"
    "OHIO,OH,2020,JONES,50,150,REPUBLICAN,1\n"
)


@pytest.fixture
def house_records():
    return normalize_election_records(parse_csv(HOUSE_CSV))


def test_state_results_two_party_split_without_postal_codes():
    text = (
        "state,candidatevotes,party_simplified,year,totalvotes\n"
        "OHIO,100,DEMOCRAT,2020,300\n"
        "OHIO,200,REPUBLICAN,2020,300\n"
    )
    results = elections.state_results(normalize_election_records(parse_csv(text)))
    assert list(results) == ["OHIO"]
    ohio = results["OHIO"]
    assert ohio["total_votes"] == 300
    assert ohio["dem_percent"] == "33.3"
    assert ohio["rep_percent"] == "66.7"
    assert ohio["color"] == "#FF0000"


def test_state_results_for_one_year(election_records):
    results = elections.state_results(elections.filter_year(election_records, 2020))
    assert set(results) == {"OH", "TX"}

    ohio = results["OH"]
    assert ohio["state"] == "OHIO"
    assert ohio["total_votes"] == 1000
    assert (ohio["dem_votes"], ohio["rep_votes"]) == (400, 590)
    assert (ohio["dem_percent"], ohio["rep_percent"]) == ("40.4", "59.6")
    assert ohio["color"] == "#CD5C5C"
    assert ohio["winner"]["name"] == "TRUMP"
    assert [c["name"] for c in ohio["candidates"]] == ["TRUMP", "BIDEN", "JORGENSEN", "HAWKINS"]
    assert ohio["candidates"][0]["percentage"] == "59.0"

    texas = results["TX"]
    assert texas["dem_percent"] == "60.0"
    assert texas["winner"]["name"] == "BIDEN"
    assert texas["margin"] == pytest.approx(20.0)


def test_state_results_custom_thresholds(election_records):
    thresholds = {"DEMOCRAT": [(5.0, "#111111")], "REPUBLICAN": [(5.0, "#222222")]}
    results = elections.state_results(elections.filter_year(election_records, 2020), thresholds)
    assert results["OH"]["color"] == "#222222"
    assert results["TX"]["color"] == "#111111"


def test_state_results_without_major_parties():
    text = (
        "state,state_po,candidate,candidatevotes,party_simplified,year,totalvotes\n"
        "UTAH,UT,MCMULLIN,10,,2016,10\n"
    )
    utah = elections.state_results(normalize_election_records(parse_csv(text)))["UT"]
    assert utah["dem_percent"] == "0.0" and utah["rep_percent"] == "0.0"
    assert utah["color"] == "#808080"
    assert utah["winner"]["name"] == "MCMULLIN"


def test_results_table_filters_minor_candidates(election_records):
    table = elections.results_table(elections.filter_year(election_records, 2020))
    assert [row["state"] for row in table] == ["OHIO", "TEXAS"]
    ohio = table[0]
    assert ohio["total_votes"] == 1000
    assert [c["name"] for c in ohio["candidates"]] == ["TRUMP", "BIDEN"]
    assert ohio["winner"]["percentage"] == "59.0"


def test_results_table_sorting(election_records):
    year_data = elections.filter_year(election_records, 2020)
    by_winner = elections.results_table(year_data, sort_key="winner")
    assert [row["state"] for row in by_winner] == ["TEXAS", "OHIO"]
    by_votes = elections.results_table(year_data, sort_key="total_votes", descending=True)
    assert [row["state"] for row in by_votes] == ["OHIO", "TEXAS"]
    with pytest.raises(KeyError):
        elections.results_table(year_data, sort_key="margin")


def test_party_comparison_sorted_by_democratic_share(election_records):
    items = elections.party_comparison(elections.filter_year(election_records, 2020), "president")
    assert [i["display_name"] for i in items] == ["TEXAS", "OHIO"]
    ohio = items[1]
    assert ohio["party_percentages"] == {
        "DEMOCRAT": "40.0", "REPUBLICAN": "59.0", "LIBERTARIAN": "0.5", "OTHER": "0.5"}
    assert [c["name"] for c in ohio["candidates"]] == ["TRUMP", "BIDEN"]

    only_ohio = elections.party_comparison(elections.filter_year(election_records, 2020),
                                           "senate", selected_state="OH")
    assert [i["state_code"] for i in only_ohio] == ["OH"]


def test_party_comparison_house_districts(house_records):
    items = elections.party_comparison(house_records, "house")
    assert [i["display_name"] for i in items] == ["District 1", "At-Large"]
    assert items[1]["key"] == "ALASKA-0"
    assert items[0]["party_percentages"]["DEMOCRAT"] == "66.7"

    ohio_only = elections.filter_year(house_records, 2020, state_po="oh")
    assert len(ohio_only) == 2


def test_historical_trends_and_national_series(election_records):
    trends = elections.historical_trends(election_records, "president")
    assert list(trends) == [2016, 2020]
    assert set(trends[2020]) == {"OH", "TX"}
    assert [e["key"] for e in elections.trend_entities(trends)] == ["OH", "TX"]
    assert [p["year"] for p in elections.entity_trend(trends, "TX")] == [2020]

    national = elections.national_trend(trends)
    latest = national[-1]
    assert latest["total_votes"] == 1100
    assert latest["party_votes"]["DEMOCRAT"] == 460
    assert latest["party_votes"]["REPUBLICAN"] == 630

    margins = elections.margin_trend(national)
    assert margins[0] == {"year": 2016, "margin": -10.0}


def test_historical_trends_house_labels(house_records):
    trends = elections.historical_trends(house_records, "house")
    assert list(trends[2020]) == ["AK-0", "OH-1"]
    assert trends[2020]["AK-0"]["display_name"] == "ALASKA At-Large"
    assert [e["key"] for e in elections.trend_entities(trends, state_po="OH")] == ["OH-1"]


def test_year_helpers(election_records):
    assert elections.available_years(election_records) == [2016, 2020]
    assert elections.winning_party(elections.filter_year(election_records, 2020)) == "REPUBLICAN"
    assert elections.winning_party([]) is None
