"""Zoom-dependent radius search over property records."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple

from estate_map.geo.distance import distance_km
from estate_map.models import Coordinate, PropertyRecord

logger = logging.getLogger(__name__)

# (max zoom, radius km); zooms beyond the last row use FINEST_RADIUS_KM.
ZOOM_RADII_KM: Tuple[Tuple[float, float], ...] = (
    (5, 500.0),
    (7, 200.0),
    (10, 50.0),
    (12, 20.0),
    (14, 10.0),
)
FINEST_RADIUS_KM = 5.0

# Coarse to fine; the first group containing the tag decides the zoom.
LOCATION_TYPE_ZOOMS: Tuple[Tuple[frozenset, int], ...] = (
    (frozenset({"country"}), 5),
    (frozenset({"state", "region", "province"}), 7),
    (frozenset({"city", "municipality", "town", "village"}), 10),
    (frozenset({"postcode", "district", "suburb", "neighbourhood"}), 12),
    (frozenset({"street", "road"}), 14),
    (frozenset({"building", "address", "house", "house_number"}), 16),
)
DEFAULT_ZOOM = 15


def radius_for_zoom(zoom: float) -> float:
    for max_zoom, radius in ZOOM_RADII_KM:
        if zoom <= max_zoom:
            return radius
    return FINEST_RADIUS_KM


def zoom_for_location_type(location_type: Optional[str]) -> int:
    tag = (location_type or "").strip().lower()
    if not tag:
        return DEFAULT_ZOOM
    for tags, zoom in LOCATION_TYPE_ZOOMS:
        if tag in tags:
            return zoom
    return DEFAULT_ZOOM


def within_radius(
    records: Iterable[PropertyRecord],
    center: Coordinate,
    zoom: float,
) -> List[PropertyRecord]:
    """Records strictly closer to ``center`` than the radius implied by ``zoom``.

    Records without valid coordinates are never returned. An empty list means
    nothing is nearby, not that the query failed.
    """
    radius = radius_for_zoom(zoom)
    matches = [
        record
        for record in records
        if record.has_valid_coordinates and distance_km(record.coordinates, center) < radius
    ]
    logger.debug("within_radius zoom=%s radius=%.0fkm matched=%d", zoom, radius, len(matches))
    return matches
