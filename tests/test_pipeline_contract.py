# tests/test_pipeline_contract.py
from datetime import date

from comp_directory.pipeline import (
    apply_query,
    find_record,
    goto_page,
    load_state,
    paginate,
    render_page,
)

NOW = date(2025, 1, 1)


def test_load_state_and_pagination_clamps(sample_records):
    state = load_state(sample_records, page_size=2)
    assert len(state.results) == 3

    items, info = paginate(state)
    assert (info.page, info.total_pages, info.count) == (1, 2, 3)
    assert len(items) == 2

    items, info = paginate(state, 5)
    assert info.page == 2
    assert len(items) == 1

    assert goto_page(state, 0).page == 1


def test_empty_batch_still_has_one_page():
    items, info = paginate(load_state([]))
    assert items == []
    assert (info.page, info.total_pages, info.count) == (1, 1, 0)


def test_apply_query_returns_new_state(sample_records):
    state = goto_page(load_state(sample_records, page_size=1), 3)
    narrowed = apply_query(state, query="medal", mode="exact")
    assert state.query == "" and len(state.results) == 3 and state.page == 3
    assert narrowed.page == 1
    assert [r.position for r in narrowed.results] == [1]


def test_render_page_payload_shape(sample_records):
    state = apply_query(load_state(sample_records), query="open")
    payload = render_page(state, now=NOW)

    first = payload.items[0]
    assert first.id == "spring-open"
    assert first.title_html == "Spring, <mark>Open</mark>"
    assert first.overview_html == "<mark>Open</mark> to all <b>members</b>"
    assert first.details_html == "Line one<br/>Line two"
    assert first.is_past is True
    assert first.link == "https://example.com/spring"
    assert first.fuzzy_only is False
    assert [l.label for l in first.sections["Overview"]] == ["Venue", "Handicap limit"]
    assert "Procedures" not in first.sections

    assert payload.query == "open"
    assert payload.categories == ["Stableford", "Medal"]


def test_render_page_unsafe_link_and_fallback_details(sample_records):
    state = apply_query(load_state(sample_records), category="Medal")
    (item,) = render_page(state, now=NOW).items
    assert item.id == "summer-medal"
    assert item.link is None
    assert item.is_past is False
    assert item.details_html == "<strong>Summary:</strong> Eighteen holes"


def test_admin_only_section_lines_need_elevated_view(sample_records):
    state = load_state(sample_records)
    item = render_page(state, elevated=True, now=NOW).items[0]
    assert [l.label for l in item.sections["Procedures"]] == ["Organiser notes"]
    assert item.sections["Procedures"][0].html == "Check the tee sheet"


def test_duplicate_titles_render_with_distinct_ids():
    recs = [{"Comp name": "Open"}, {"Comp name": "Open"}]
    payload = render_page(load_state(recs))
    assert [i.id for i in payload.items] == ["open", "open-2"]


def test_find_record(sample_records):
    state = load_state(sample_records)
    assert find_record(state, "autumn-foursomes").title == "Autumn Foursomes"
    assert find_record(state, "nope") is None
