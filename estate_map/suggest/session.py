"""Map view state tying the dataset, the filters and the suggestion box together."""

from __future__ import annotations

import dataclasses
import logging
from typing import List, Optional

from estate_map.core.config import Settings
from estate_map.core.dataset import DatasetHandle
from estate_map.models import Coordinate, FilterCriteria, PropertyRecord
from estate_map.search.query import run_query
from estate_map.suggest.fetcher import SuggestionFetcher
from estate_map.vendors.nominatim import AsyncLookup, make_async_lookup

logger = logging.getLogger(__name__)

DEFAULT_CENTER = Coordinate(latitude=40.7128, longitude=-74.0060)
DEFAULT_ZOOM = 12


class MapSession:
    def __init__(
        self,
        handle: DatasetHandle,
        *,
        center: Coordinate = DEFAULT_CENTER,
        zoom: int = DEFAULT_ZOOM,
        criteria: Optional[FilterCriteria] = None,
    ) -> None:
        self.handle = handle
        self.center = center
        self.zoom = zoom
        self.criteria = criteria or FilterCriteria()

    def set_criteria(self, **changes) -> FilterCriteria:
        self.criteria = dataclasses.replace(self.criteria, **changes)
        return self.criteria

    def query(self) -> List[PropertyRecord]:
        """Filter the current dataset snapshot around the active center."""
        criteria = dataclasses.replace(self.criteria, center=self.center, zoom=self.zoom)
        return run_query(self.handle.records, criteria)

    def focus(self, center: Coordinate, zoom: int) -> List[PropertyRecord]:
        self.center = center
        self.zoom = zoom
        results = self.query()
        logger.info("Focused map on %s zoom=%d: %d records", center, zoom, len(results))
        return results

    def suggestion_fetcher(self, settings: Settings, lookup: Optional[AsyncLookup] = None) -> SuggestionFetcher:
        """Build a fetcher whose selections re-center this session."""
        return SuggestionFetcher.from_settings(
            settings,
            lookup or make_async_lookup(settings),
            on_select=self.focus,
        )
