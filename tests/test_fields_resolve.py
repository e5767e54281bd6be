from comp_directory.fields import get_by_header, get_field, lower_index
from comp_directory.models import DirectoryConfig


def test_first_candidate_in_config_order_wins_not_column_order():
    # "competition" comes before "title" in the default candidate list
    rec = {"Title": "B", "Competition": "A"}
    assert get_field(rec, "title") == "A"


def test_empty_candidates_are_skipped():
    rec = {"COMP NAME": "  ", "title": "Fallback"}
    assert get_field(rec, "title") == "Fallback"


def test_unknown_logical_name_and_missing_columns_give_empty_string():
    rec = {"Comp name": "X"}
    assert get_field(rec, "nope") == ""
    assert get_field(rec, "date") == ""


def test_get_by_header_is_case_insensitive():
    rec = {"Entry Fee": "£10"}
    assert get_by_header(rec, "entry fee") == "£10"
    assert get_by_header(rec, "Draw") == ""


def test_lower_index_leaves_record_untouched():
    rec = {"Title": "A", "title": "", "Venue": "North"}
    before = dict(rec)
    idx = lower_index(rec)
    assert idx == {"title": "A", "venue": "North"}
    assert rec == before


def test_custom_field_map():
    cfg = DirectoryConfig(field_map={"title": ["Event Title", "Name"]})
    assert get_field({"Name": "N", "event title": "E"}, "title", cfg) == "E"
