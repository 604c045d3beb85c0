import itertools

import pytest

from estate_map.geo.proximity import within_radius
from estate_map.models import Address, Coordinate, FilterCriteria, PropertyRecord
from estate_map.search import filters
from estate_map.search.query import run_query

CENTER = Coordinate(latitude=40.7128, longitude=-74.0060)


def _record(record_id, property_type, value, latitude=40.75, longitude=-73.99, valid=True):
    return PropertyRecord(
        id=record_id,
        address=Address(),
        coordinates=Coordinate(latitude=latitude, longitude=longitude),
        has_valid_coordinates=valid,
        property_type=property_type,
        estimated_value=value,
    )


@pytest.fixture
def records():
    return [
        _record("1", "residential", 1_250_000),
        _record("2", "commercial", 4_500_000, 40.7621, -73.9654),
        _record("3", "mixed-use", 2_800_000, 42.3601, -71.0589),
        _record("4", "commercial", 5_200_000, valid=False),
        _record("5", "residential", 300_000, 34.0522, -118.2437),
        _record("6", "land", 0),
    ]


def test_all_type_matches_every_type(records):
    result = filters.apply_filters(records, FilterCriteria())
    assert [record.id for record in result] == ["1", "2", "3", "4", "5", "6"]


def test_type_and_range_are_intersected(records):
    criteria = FilterCriteria(property_type="commercial", min_value=1_000_000, max_value=5_000_000)
    assert [record.id for record in filters.apply_filters(records, criteria)] == ["2"]


def test_range_bounds_are_inclusive(records):
    criteria = FilterCriteria(min_value=300_000, max_value=1_250_000)
    assert [record.id for record in filters.apply_filters(records, criteria)] == ["1", "5"]


def test_inverted_range_matches_nothing(records):
    criteria = FilterCriteria(min_value=2_000_000, max_value=1_000_000)
    assert filters.apply_filters(records, criteria) == []


def test_record_missing_attributes_is_excluded():
    class Partial:
        property_type = None
        estimated_value = 10

    assert filters.applies(Partial(), FilterCriteria()) is False


def test_attribute_filter_keeps_invalid_coordinates(records):
    result = filters.apply_filters(records, FilterCriteria(property_type="commercial"))
    assert [record.id for record in result] == ["2", "4"]


CRITERIA = [
    FilterCriteria(),
    FilterCriteria(property_type="commercial"),
    FilterCriteria(property_type="residential", max_value=1_000_000),
    FilterCriteria(min_value=1_000_000, max_value=3_000_000),
    FilterCriteria(min_value=5, max_value=1),
]


def test_filters_commute_with_radius(records):
    for criteria, zoom in itertools.product(CRITERIA, [3, 6, 9, 12, 16]):
        one_way = filters.apply_filters(within_radius(records, CENTER, zoom), criteria)
        other_way = within_radius(filters.apply_filters(records, criteria), CENTER, zoom)
        assert one_way == other_way


def test_run_query_without_center_is_attribute_only(records):
    result = run_query(records, FilterCriteria(property_type="commercial"))
    assert [record.id for record in result] == ["2", "4"]


def test_run_query_with_center(records):
    criteria = FilterCriteria(center=CENTER, zoom=12)
    assert [record.id for record in run_query(records, criteria)] == ["1", "2", "6"]

    wide = FilterCriteria(center=CENTER, zoom=5, min_value=1)
    assert [record.id for record in run_query(records, wide)] == ["1", "2", "3"]
