"""Utilities for transforming raw CSV rows into property records."""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from estate_map.etl.coerce import (
    to_coordinate,
    to_currency,
    to_int,
    to_number,
    to_optional_int,
    to_text,
)
from estate_map.models import Address, Coordinate, PropertyRecord, PropertySize

logger = logging.getLogger(__name__)

DEFAULT_PROPERTY_TYPE = "residential"
ID_FIELDS = ("zpid", "id")


def _first(raw_row: Mapping[str, Any], *keys: str) -> str:
    """Return the first non-empty value among ``keys``."""
    for key in keys:
        value = to_text(raw_row.get(key))
        if value:
            return value
    return ""


def synthesize_id(source: str, index: int) -> str:
    return f"{source}-{index}"


def parse_address(raw_row: Mapping[str, Any]) -> Address:
    street = _first(raw_row, "streetAddress", "street")
    city = _first(raw_row, "city")
    state = _first(raw_row, "state")
    zip_code = _first(raw_row, "zipcode", "zipCode", "zip")

    formatted = _first(raw_row, "address", "formattedAddress")
    if not formatted:
        locality = " ".join(part for part in (state, zip_code) if part)
        formatted = ", ".join(part for part in (street, city, locality) if part)

    return Address(
        street=street,
        city=city,
        state=state,
        zip_code=zip_code,
        formatted_address=formatted,
    )


def parse_coordinates(raw_row: Mapping[str, Any]) -> Optional[Coordinate]:
    latitude = to_coordinate(raw_row.get("latitude"))
    longitude = to_coordinate(raw_row.get("longitude"))
    if latitude is None or longitude is None:
        return None
    return Coordinate(latitude=latitude, longitude=longitude)


def normalize(raw_row: Mapping[str, Any], index: int, source: str = "csv") -> PropertyRecord:
    """Map one raw row onto a ``PropertyRecord``.

    Pure: nothing outside the arguments is read or written.
    """
    record_id = _first(raw_row, *ID_FIELDS) or synthesize_id(source, index)
    coordinates = parse_coordinates(raw_row)

    value = max(to_currency(_first(raw_row, "price", "estimatedValue", "zestimate")), 0.0)

    return PropertyRecord(
        id=record_id,
        address=parse_address(raw_row),
        coordinates=coordinates or Coordinate(latitude=0.0, longitude=0.0),
        has_valid_coordinates=coordinates is not None,
        property_type=_first(raw_row, "homeType", "propertyType") or DEFAULT_PROPERTY_TYPE,
        property_sub_type=_first(raw_row, "propertySubType"),
        estimated_value=value,
        assessed_value=max(to_currency(raw_row.get("taxAssessedValue")), 0.0),
        last_sale_price=max(to_currency(raw_row.get("lastSoldPrice")), 0.0),
        last_sale_date=_first(raw_row, "dateSold", "dateSoldString"),
        size=PropertySize(
            building_size=to_int(raw_row.get("livingArea")),
            lot_size=to_int(raw_row.get("lotSize")),
            bedrooms=to_int(raw_row.get("bedrooms")),
            bathrooms=to_number(raw_row.get("bathrooms")),
        ),
        year_built=to_optional_int(raw_row.get("yearBuilt")),
    )


def normalize_rows(raw_rows: Iterable[Mapping[str, Any]], source: str = "csv") -> List[PropertyRecord]:
    """Normalize a whole load, keeping ids unique within it."""
    records: List[PropertyRecord] = []
    seen: Set[str] = set()
    for index, raw_row in enumerate(raw_rows):
        record = normalize(raw_row, index, source)
        if record.id in seen:
            fallback = synthesize_id(source, index)
            attempt = 1
            while fallback in seen:
                fallback = f"{synthesize_id(source, index)}-{attempt}"
                attempt += 1
            logger.warning("Duplicate id %s at row %d; using %s", record.id, index, fallback)
            record = normalize({**raw_row, "zpid": fallback, "id": fallback}, index, source)
        seen.add(record.id)
        records.append(record)
    return records


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def to_raw_row(record: PropertyRecord) -> Dict[str, str]:
    """Flatten a record back into a raw row using the source column names."""
    return {
        "zpid": record.id,
        "streetAddress": record.address.street,
        "city": record.address.city,
        "state": record.address.state,
        "zipcode": record.address.zip_code,
        "address": record.address.formatted_address,
        "latitude": repr(record.coordinates.latitude) if record.has_valid_coordinates else "",
        "longitude": repr(record.coordinates.longitude) if record.has_valid_coordinates else "",
        "homeType": record.property_type,
        "propertySubType": record.property_sub_type,
        "price": _format_number(record.estimated_value),
        "taxAssessedValue": _format_number(record.assessed_value),
        "lastSoldPrice": _format_number(record.last_sale_price),
        "dateSold": record.last_sale_date,
        "livingArea": str(record.size.building_size),
        "lotSize": str(record.size.lot_size),
        "bedrooms": str(record.size.bedrooms),
        "bathrooms": _format_number(record.size.bathrooms),
        "yearBuilt": "" if record.year_built is None else str(record.year_built),
    }
