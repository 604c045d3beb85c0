"""Client utilities for the OpenStreetMap Nominatim search API."""

import asyncio
import functools
import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Set, Tuple

import requests

from estate_map.core.config import DEFAULT_GEOCODER_URL, DEFAULT_USER_AGENT, Settings
from estate_map.etl.coerce import to_coordinate
from estate_map.models import GeocodeResult

logger = logging.getLogger(__name__)
_SESSION = requests.Session()

AsyncLookup = Callable[[str], Awaitable[List[GeocodeResult]]]


class GeocodingError(RuntimeError):
    """Raised when Nominatim returns an unusable response."""


def parse_results(payload: Iterable[Any]) -> List[GeocodeResult]:
    """Turn raw Nominatim items into results, dropping unusable and duplicate ones."""
    seen: Set[Tuple[str, float, float]] = set()
    results: List[GeocodeResult] = []
    for item in payload or []:
        if not isinstance(item, dict):
            continue
        display_name = str(item.get("display_name") or "").strip()
        latitude = to_coordinate(item.get("lat"))
        longitude = to_coordinate(item.get("lon"))
        if not display_name or latitude is None or longitude is None:
            logger.debug("Skipping unusable geocoding item: %s", item)
            continue
        key = (display_name, latitude, longitude)
        if key in seen:
            continue
        seen.add(key)
        results.append(
            GeocodeResult(
                display_name=display_name,
                latitude=latitude,
                longitude=longitude,
                location_type=str(item.get("addresstype") or item.get("type") or "").strip().lower(),
                raw=item,
            )
        )
    return results


def search(
    query: str,
    *,
    limit: int = 5,
    base_url: str = DEFAULT_GEOCODER_URL,
    user_agent: str = DEFAULT_USER_AGENT,
    email: str = "",
    timeout: int = 10,
) -> List[GeocodeResult]:
    params: Dict[str, Any] = {
        "q": query,
        "format": "jsonv2",
        "addressdetails": 1,
        "dedupe": 1,
        "limit": limit,
    }
    if email:
        params["email"] = email
    headers = {"User-Agent": user_agent or DEFAULT_USER_AGENT}

    try:
        response = _SESSION.get(base_url, params=params, headers=headers, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as exc:
        logger.error("Nominatim request failed for query=%s: %s", query, exc)
        raise GeocodingError(f"Network error calling Nominatim: {exc}") from exc

    try:
        payload = response.json()
    except ValueError as exc:
        raise GeocodingError(f"Invalid JSON from Nominatim: {exc}") from exc

    if not isinstance(payload, list):
        logger.error("Unexpected Nominatim payload type: %s", type(payload).__name__)
        raise GeocodingError("Unexpected Nominatim response format.")
    return parse_results(payload)


def make_async_lookup(settings: Settings, executor: Optional[Any] = None) -> AsyncLookup:
    """Wrap the blocking ``search`` so the event loop can await it."""
    blocking = functools.partial(
        search,
        limit=settings.max_suggestions,
        base_url=settings.geocoder_url,
        user_agent=settings.geocoder_user_agent,
        email=settings.geocoder_email,
        timeout=settings.geocoder_timeout,
    )

    async def lookup(query: str) -> List[GeocodeResult]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(executor, blocking, query)

    return lookup
