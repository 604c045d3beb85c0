"""Core data models shared by the listing map pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

ALL_TYPES = "all"


@dataclass(frozen=True, slots=True)
class Coordinate:
    """A point in degrees."""

    latitude: float
    longitude: float


@dataclass(frozen=True, slots=True)
class Address:
    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    formatted_address: str = ""


@dataclass(frozen=True, slots=True)
class PropertySize:
    building_size: int = 0
    lot_size: int = 0
    bedrooms: int = 0
    bathrooms: float = 0.0


@dataclass(frozen=True, slots=True)
class PropertyRecord:
    """Normalized listing built once per CSV load and never mutated afterwards.

    When ``has_valid_coordinates`` is False the coordinates are ``(0, 0)``
    and the record only takes part in attribute queries.
    """

    id: str
    address: Address
    coordinates: Coordinate
    has_valid_coordinates: bool
    property_type: str = "residential"
    property_sub_type: str = ""
    estimated_value: float = 0.0
    assessed_value: float = 0.0
    last_sale_price: float = 0.0
    last_sale_date: str = ""
    size: PropertySize = field(default_factory=PropertySize)
    year_built: Optional[int] = None


@dataclass(frozen=True, slots=True)
class FilterCriteria:
    """Attribute bounds plus an optional proximity center.

    Inverted bounds (``min_value > max_value``) are not rejected; they match nothing.
    """

    property_type: str = ALL_TYPES
    min_value: float = 0.0
    max_value: float = float("inf")
    center: Optional[Coordinate] = None
    zoom: Optional[float] = None


@dataclass(frozen=True, slots=True)
class GeocodeResult:
    """One candidate returned by the geocoding lookup."""

    display_name: str
    latitude: float
    longitude: float
    location_type: str = ""
    raw: Optional[Dict[str, Any]] = field(default=None, repr=False, compare=False)

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(latitude=self.latitude, longitude=self.longitude)


@dataclass(frozen=True, slots=True)
class Suggestion:
    text: str
    result: GeocodeResult
