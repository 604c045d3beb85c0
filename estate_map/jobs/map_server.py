"""HTTP entrypoint serving listing queries over the loaded CSV dataset."""

from __future__ import annotations

import logging
import math
import os
from dataclasses import asdict
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request

from estate_map.core.config import get_settings
from estate_map.core.dataset import Dataset, DatasetError, DatasetHandle
from estate_map.geo.proximity import radius_for_zoom, zoom_for_location_type
from estate_map.models import ALL_TYPES, Coordinate, FilterCriteria, PropertyRecord
from estate_map.search.query import run_query
from estate_map.suggest.session import DEFAULT_ZOOM
from estate_map.vendors import nominatim

logger = logging.getLogger(__name__)

app = Flask(__name__)
_handle = DatasetHandle()


class BadRequest(ValueError):
    pass


def _float_arg(name: str, default: Optional[float] = None) -> Optional[float]:
    raw = request.args.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise BadRequest(f"{name} must be numeric") from exc
    if not math.isfinite(value):
        raise BadRequest(f"{name} must be finite")
    return value


def _record_payload(record: PropertyRecord) -> Dict[str, Any]:
    return asdict(record)


@app.errorhandler(BadRequest)
def _bad_request(exc: BadRequest) -> Any:
    return jsonify({"error": str(exc)}), 400


@app.get("/")
def root() -> Any:
    return "ok", 200


@app.get("/healthz")
def healthcheck() -> Any:
    dataset = _handle.current
    return (
        jsonify(
            {
                "status": "ok",
                "records": len(dataset),
                "source": dataset.source,
                "loaded_at": dataset.loaded_at.isoformat() if dataset.loaded_at else None,
                "revision": os.getenv("K_REVISION", "unknown"),
            }
        ),
        200,
    )


@app.get("/properties")
def list_properties() -> Any:
    """
    Query the dataset.
    Optional: type, min_value, max_value (attribute filter), lat + lon + zoom (radius search).
    """
    min_value = _float_arg("min_value", 0.0)
    max_value = _float_arg("max_value", float("inf"))
    lat = _float_arg("lat")
    lon = _float_arg("lon")
    zoom = _float_arg("zoom", float(DEFAULT_ZOOM))

    if (lat is None) != (lon is None):
        raise BadRequest("lat and lon must be provided together")
    if min_value < 0 or max_value < 0:
        raise BadRequest("min_value and max_value must be non-negative")

    center = Coordinate(latitude=lat, longitude=lon) if lat is not None and lon is not None else None
    criteria = FilterCriteria(
        property_type=request.args.get("type", "").strip() or ALL_TYPES,
        min_value=min_value,
        max_value=max_value,
        center=center,
        zoom=zoom,
    )
    results = run_query(_handle.records, criteria)

    meta: Dict[str, Any] = {"count": len(results)}
    if center is not None:
        meta["radius_km"] = radius_for_zoom(zoom)
    return jsonify({"data": [_record_payload(record) for record in results], "meta": meta}), 200


@app.get("/properties/<record_id>")
def get_property(record_id: str) -> Any:
    record = _handle.find(record_id)
    if record is None:
        return jsonify({"error": "property not found"}), 404
    return jsonify({"data": _record_payload(record)}), 200


@app.get("/geocode")
def geocode() -> Any:
    """Location suggestions for a free-text query; failures yield an empty list."""
    settings = get_settings()
    query = request.args.get("q", "").strip()
    if len(query) < settings.min_query_length:
        return jsonify({"data": []}), 200

    try:
        results = nominatim.search(
            query,
            limit=settings.max_suggestions,
            base_url=settings.geocoder_url,
            user_agent=settings.geocoder_user_agent,
            email=settings.geocoder_email,
            timeout=settings.geocoder_timeout,
        )
    except nominatim.GeocodingError as exc:
        logger.warning("Geocoding failed for query=%s: %s", query, exc)
        results = []

    suggestions = [
        {
            "text": result.display_name,
            "lat": result.latitude,
            "lon": result.longitude,
            "location_type": result.location_type,
            "zoom": zoom_for_location_type(result.location_type),
        }
        for result in results[: settings.max_suggestions]
    ]
    return jsonify({"data": suggestions}), 200


@app.post("/dataset/reload")
def reload_dataset() -> Any:
    settings = get_settings()
    if not settings.dataset_path:
        return jsonify({"error": "ESTATE_MAP_DATASET is not configured"}), 400
    try:
        dataset = load_configured_dataset()
    except DatasetError as exc:
        logger.exception("Dataset reload failed: %s", exc)
        return jsonify({"error": "dataset reload failed"}), 500
    return jsonify({"data": {"records": len(dataset), "source": dataset.source}}), 200


# ---------- Internals ----------


def load_configured_dataset() -> Dataset:
    """Load the dataset named by ESTATE_MAP_DATASET (a path or an http(s) URL)."""
    settings = get_settings()
    _handle.source_name = settings.source_name
    _handle.delimiter = settings.csv_delimiter
    location = settings.dataset_path
    if location.startswith(("http://", "https://")):
        return _handle.load_url(location)
    return _handle.load_file(location)


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    settings = get_settings()
    if settings.dataset_path:
        try:
            load_configured_dataset()
        except DatasetError as exc:
            logger.error("Initial dataset load failed: %s", exc)

    port = int(os.getenv("PORT") or 8080)
    logger.info("[BOOT] Binding on 0.0.0.0:%d", port)
    app.run(host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
