from conftest import make_station
from radiomap.search import filter_stations, find_location_match, parse_query

STATIONS = [
    make_station("1", "Radio Ankara", country="Turkey", city="Ankara", tags=frozenset({"pop"})),
    make_station("2", "Ankara Haber", country="Turkey", city="Ankara", tags=frozenset({"news"})),
    make_station("3", "Pop Berlin", country="Germany", city="Berlin", language="german"),
    make_station("4", "Istanbul Pop", country="Turkey", city="Istanbul", tags=frozenset({"Pop"})),
]


def test_parse_query():
    assert parse_query("  Ankara   POP ") == ["ankara", "pop"]
    assert parse_query("") == []
    assert parse_query(None) == []


def test_empty_query_returns_everything_in_order():
    assert filter_stations(STATIONS, "") == STATIONS
    assert filter_stations(STATIONS, "   \t ") == STATIONS


def test_all_terms_must_match():
    result = filter_stations(STATIONS, "Ankara pop")
    assert [s.id for s in result] == ["1"]


def test_terms_may_match_different_fields():
    assert [s.id for s in filter_stations(STATIONS, "german berlin")] == ["3"]


def test_tags_match_case_insensitively():
    assert [s.id for s in filter_stations(STATIONS, "POP")] == ["1", "3", "4"]


def test_no_match():
    assert filter_stations(STATIONS, "jazz") == []


def test_result_preserves_input_order():
    reversed_stations = list(reversed(STATIONS))
    assert [s.id for s in filter_stations(reversed_stations, "turkey")] == ["4", "2", "1"]


def test_find_location_match_uses_city_and_country():
    assert find_location_match(STATIONS, "berl").id == "3"
    assert find_location_match(STATIONS, " TURKEY ").id == "1"
    assert find_location_match(STATIONS, "haber") is None
    assert find_location_match(STATIONS, "  ") is None
