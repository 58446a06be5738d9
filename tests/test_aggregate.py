import pytest

from dx_core import aggregate
from dx_core.io_utils import normalize_election_records, parse_csv
from dx_core.records import Record


def _rows(*dicts):
    return [Record(d) for d in dicts]


def test_group_and_sum_subtotals_and_defaults():
    records = _rows(
        {"state": "OHIO", "party": "DEMOCRAT", "votes": "100"},
        {"state": "OHIO", "party": "REPUBLICAN", "votes": "200"},
        {"state": "", "party": "", "votes": "7"},
        {"state": "TEXAS", "party": "DEMOCRAT", "votes": "abc"},
    )
    buckets = aggregate.group_and_sum(records, "state", value_field="votes",
                                      category_field="party",
                                      categories=["DEMOCRAT", "REPUBLICAN"])
    # First-appearance order
    assert list(buckets) == ["OHIO", "Unknown", "TEXAS"]

    ohio = buckets["OHIO"]
    assert ohio.total == 300
    assert ohio.count == 2
    assert ohio.subtotals == {"DEMOCRAT": 100, "REPUBLICAN": 200}
    assert len(ohio.details) == 2
    for bucket in buckets.values():
        assert sum(bucket.subtotals.values()) == bucket.total

    assert buckets["Unknown"].subtotals == {"DEMOCRAT": 0, "REPUBLICAN": 0, "OTHER": 7}
    # Unparseable values are counted as a row but contribute 0
    assert buckets["TEXAS"].total == 0
    assert buckets["TEXAS"].count == 1


def test_group_and_sum_totals_match_input():
    records = _rows(*({"k": k, "v": str(v)} for k, v in [("a", 3), ("b", 4), ("a", 5), ("c", 0)]))
    buckets = aggregate.group_and_sum(records, "k", value_field="v")
    assert sum(b.total for b in buckets.values()) == 12
    assert sum(b.count for b in buckets.values()) == len(records)


def test_group_and_sum_empty_input():
    assert aggregate.group_and_sum([], "state") == {}


def test_group_key_composite_and_callable():
    record = Record({"state": "CA", "district": "", "year": "2020"})
    assert aggregate.group_key(record, ("state", "district")) == "CA-Unknown"
    assert aggregate.group_key(record, ("county", "district")) == "Unknown"
    assert aggregate.group_key(record, lambda r: r["year"][:2]) == "20"


def test_count_and_sum_by():
    records = _rows({"make": "TESLA", "range": "220"}, {"make": "TESLA", "range": "12.5"},
                    {"make": "NISSAN", "range": ""})
    assert aggregate.count_by(records, "make") == {"TESLA": 2, "NISSAN": 1}
    assert aggregate.sum_by(records, "make", "range", numeric="float") == {"TESLA": 232.5, "NISSAN": 0.0}
    assert aggregate.unique_values(records, "make") == ["NISSAN", "TESLA"]
    assert aggregate.unique_values(records, "make", sort=False) == ["TESLA", "NISSAN"]


def test_state_bucket_from_election_text():
    text = (
        "state,candidatevotes,party_simplified,year,totalvotes\n"
        "OHIO,100,DEMOCRAT,2020,300\n"
        "OHIO,200,REPUBLICAN,2020,300\n"
    )
    records = normalize_election_records(parse_csv(text))
    buckets = aggregate.group_and_sum(records, "state", value_field="candidatevotes",
                                      category_field="party_simplified")
    ohio = buckets["OHIO"]
    assert ohio.total == 300
    assert ohio.percentages() == {"DEMOCRAT": "33.3", "REPUBLICAN": "66.7"}


def test_percentages_close_to_exactly_100():
    subtotals = {name: 1 for name in "abcdef"}
    pct = aggregate.percentages(subtotals, 6)
    assert sum(round(float(v) * 10) for v in pct.values()) == 1000
    assert set(pct.values()) == {"16.7", "16.6"}


def test_percentages_zero_total():
    assert aggregate.percentages({"DEMOCRAT": 0, "REPUBLICAN": 0}, 0) == {
        "DEMOCRAT": "0.0", "REPUBLICAN": "0.0"}
    assert aggregate.percentages({}, 10) == {}
    assert aggregate.share(5, 0) == 0.0


def test_percentages_of_larger_total_round_each_share():
    # Shares of a contest total that includes minor candidates
    assert aggregate.percentages({"DEMOCRAT": 1, "REPUBLICAN": 2}, 8) == {
        "DEMOCRAT": "12.5", "REPUBLICAN": "25.0"}


def test_rank_is_stable_between_ties():
    ranked = aggregate.rank([("A", 5), ("B", 5), ("C", 10)], top_n=2)
    assert ranked == [("C", 10), ("A", 5)]
    assert ranked[0].label == "C" and ranked[0].value == 10


def test_rank_variants():
    counts = {"2019": 3, "2013": 9, "2021": 1}
    assert [e.label for e in aggregate.rank(counts, alphabetical=True)] == ["2021", "2019", "2013"]
    assert [e.label for e in aggregate.rank(counts, alphabetical=True, descending=False)] == [
        "2013", "2019", "2021"]
    assert [e.label for e in aggregate.rank(counts, descending=False)] == ["2021", "2019", "2013"]
    assert aggregate.rank(counts, top_n=0) == []

    buckets = aggregate.group_and_sum(_rows({"m": "x"}, {"m": "y"}, {"m": "y"}), "m")
    assert aggregate.rank(buckets) == [("y", 2), ("x", 1)]
    assert aggregate.rank(list(buckets.values()), top_n=1) == [("y", 2)]


def test_filter_significant_threshold():
    entries = [("A", 590), ("B", 400), ("C", 15), ("D", 9)]
    assert aggregate.filter_significant(entries, 1000) == [("A", 590), ("B", 400), ("C", 15)]
    assert aggregate.filter_significant(entries, 0) == []
    assert aggregate.filter_significant(entries, 1000, threshold=50.0) == [("A", 590)]


def test_bucket_frame_flattens_subtotals():
    records = _rows({"s": "OH", "p": "DEMOCRAT", "v": "1"}, {"s": "OH", "p": "REPUBLICAN", "v": "3"})
    buckets = aggregate.group_and_sum(records, "s", value_field="v", category_field="p")
    df = aggregate.bucket_frame(buckets, key_name="state")
    assert df.loc[0, "state"] == "OH"
    assert df.loc[0, "total"] == 4
    assert df.loc[0, "REPUBLICAN_pct"] == "75.0"
    assert aggregate.bucket_frame({}).empty


@pytest.mark.parametrize("numeric, expected", [("int", 12), ("float", 12.9)])
def test_group_and_sum_numeric_modes(numeric, expected):
    buckets = aggregate.group_and_sum(_rows({"k": "a", "v": "12.9"}), "k", value_field="v",
                                      numeric=numeric)
    assert buckets["a"].total == pytest.approx(expected)


def test_group_and_sum_returns_plain_numbers():
    records = _rows({"k": "a", "p": "X", "v": "2"}, {"k": "a", "p": "Y", "v": "3"})
    bucket = aggregate.group_and_sum(records, "k", value_field="v", category_field="p")["a"]
    assert type(bucket.total) is int
    assert all(type(v) is int for v in bucket.subtotals.values())
    floats = aggregate.group_and_sum(records, "k", value_field="v", numeric="float")["a"]
    assert type(floats.total) is float


def test_composite_keys_with_separator_do_not_collide():
    records = _rows({"a": "X-Y", "b": "Z", "v": "1"}, {"a": "X", "b": "Y-Z", "v": "2"})
    keys = [aggregate.group_key(r, ("a", "b")) for r in records]
    assert keys[0] != keys[1]
    buckets = aggregate.group_and_sum(records, ("a", "b"), value_field="v")
    assert sorted(b.total for b in buckets.values()) == [1, 2]
    assert aggregate.group_key(Record({"a": "AK", "b": "0"}), ("a", "b")) == "AK-0"


def test_rank_alphabetical_direction():
    counts = {"b": 1, "a": 1, "c": 1}
    assert [e.label for e in aggregate.rank(counts, alphabetical=True, descending=False)] == ["a", "b", "c"]
    assert [e.label for e in aggregate.rank(counts, alphabetical=True)] == ["c", "b", "a"]


def test_percentages_without_closure_rounds_each_share():
    subtotals = {name: 1 for name in "abcdef"}
    assert set(aggregate.percentages(subtotals, 6, closure=False).values()) == {"16.7"}
