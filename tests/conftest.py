import pytest

SAMPLE_CSV = (
    "Comp name,Date,Type,Overview,Details,Link,Venue,Handicap Limit,Organiser Notes,Summary\n"
    '"Spring, Open",2024-01-10,Stableford,Open to all <b>members</b>,"Line one\nLine two",'
    "https://example.com/spring,North Course,28,Check the tee sheet,\n"
    "Summer Medal,14/07/2030,Medal,Club medal,,javascript:alert(1),South Course,,,Eighteen holes\n"
    "Autumn Foursomes,,stableford,Pairs event,Handicap Limit: 28,,,,,\n"
)


@pytest.fixture
def sample_csv():
    return SAMPLE_CSV


@pytest.fixture
def sample_records():
    from comp_directory.csvparse import parse_csv

    return parse_csv(SAMPLE_CSV)


@pytest.fixture
def sample_file(tmp_path):
    p = tmp_path / "comps.csv"
    p.write_text(SAMPLE_CSV, encoding="utf-8")
    return p
