# tests/test_search_rank.py
import pytest

from comp_directory.search import (
    categories,
    edit_distance,
    filter_by_type,
    search,
    search_exact,
    search_fuzzy,
)


def test_edit_distance_classic_levenshtein():
    assert edit_distance("kitten", "sitting") == 3
    assert edit_distance("ABC", "abc") == 0
    assert edit_distance("hanicap", "handicap") == 1


def test_fuzzy_one_edit_scores_two_and_is_fuzzy_only():
    recs = [{"Comp name": "Club Champs", "Notes": "Handicap Limit: 28"}]
    out = search_fuzzy(recs, "hanicap")
    assert len(out) == 1
    assert out[0].score == 2
    assert out[0].is_fuzzy_only is True


def test_exact_tokens_outrank_approximate_tokens():
    recs = [{"Comp name": "Wintr Leage"}, {"Comp name": "Winter League"}]
    out = search_fuzzy(recs, "winter league")
    assert [r.record["Comp name"] for r in out] == ["Winter League", "Wintr Leage"]
    assert out[0].score == 6 and out[0].is_fuzzy_only is False
    assert out[1].score == 4 and out[1].is_fuzzy_only is True


def test_records_without_any_close_token_are_excluded():
    recs = [{"Comp name": "Zebra"}, {"Comp name": "Winter"}]
    out = search_fuzzy(recs, "winter")
    assert [r.record["Comp name"] for r in out] == ["Winter"]


def test_fuzzy_ties_keep_batch_order():
    recs = [{"Comp name": "Open B"}, {"Comp name": "Open A"}, {"Comp name": "Open C"}]
    out = search_fuzzy(recs, "open")
    assert [r.position for r in out] == [0, 1, 2]


def test_empty_query_returns_everything_in_order(sample_records):
    assert [r.position for r in search_fuzzy(sample_records, "  ")] == [0, 1, 2]
    assert [r.position for r in search_exact(sample_records, "")] == [0, 1, 2]


def test_exact_mode_is_whole_query_substring_not_tokens():
    recs = [{"Comp name": "Spring Open"}, {"Comp name": "Open Spring"}]
    out = search_exact(recs, "  SPRING open ")
    assert [r.record["Comp name"] for r in out] == ["Spring Open"]
    assert out[0].score == 0 and out[0].is_fuzzy_only is False


def test_exact_mode_checks_every_column():
    recs = [{"Comp name": "A", "Venue": "North Course"}, {"Comp name": "B", "Venue": "South"}]
    out = search_exact(recs, "north")
    assert [r.position for r in out] == [0]


def test_type_prefilter_is_case_insensitive_equality(sample_records):
    kept = filter_by_type(sample_records, "STABLEFORD")
    assert [r["Comp name"] for r in kept] == ["Spring, Open", "Autumn Foursomes"]
    assert filter_by_type(sample_records, "") == sample_records
    assert filter_by_type(sample_records, "stable") == []


def test_search_positions_point_into_full_batch(sample_records):
    out = search(sample_records, "", mode="exact", category="medal")
    assert [r.position for r in out] == [1]


def test_categories_first_seen_order(sample_records):
    assert categories(sample_records) == ["Stableford", "Medal"]


def test_unknown_mode_raises(sample_records):
    with pytest.raises(ValueError):
        search(sample_records, "x", mode="regex")
