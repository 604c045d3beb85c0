from __future__ import annotations

from typing import Iterable, List

from estate_map.geo.proximity import DEFAULT_ZOOM, within_radius
from estate_map.models import FilterCriteria, PropertyRecord
from estate_map.search.filters import apply_filters


def run_query(records: Iterable[PropertyRecord], criteria: FilterCriteria) -> List[PropertyRecord]:
    """Attribute filter, then the radius search when a center is set.

    Both steps are plain intersections, so the order does not change the result.
    """
    matches = apply_filters(records, criteria)
    if criteria.center is None:
        return matches
    zoom = criteria.zoom if criteria.zoom is not None else DEFAULT_ZOOM
    return within_radius(matches, criteria.center, zoom)
