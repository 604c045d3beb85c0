"""Attribute predicates over property records."""

from __future__ import annotations

from typing import Iterable, List

from estate_map.models import ALL_TYPES, FilterCriteria, PropertyRecord


def applies(record: PropertyRecord, criteria: FilterCriteria) -> bool:
    property_type = getattr(record, "property_type", None)
    value = getattr(record, "estimated_value", None)
    if property_type is None or value is None:
        return False

    if criteria.property_type != ALL_TYPES and property_type != criteria.property_type:
        return False
    return criteria.min_value <= value <= criteria.max_value


def apply_filters(records: Iterable[PropertyRecord], criteria: FilterCriteria) -> List[PropertyRecord]:
    """Keep records matching both the type and the value range.

    An inverted range matches nothing rather than raising.
    """
    return [record for record in records if applies(record, criteria)]
