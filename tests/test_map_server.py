import pytest

from estate_map.core import config
from estate_map.core.dataset import DatasetHandle
from estate_map.jobs import map_server
from estate_map.models import GeocodeResult
from estate_map.vendors import nominatim

CSV_TEXT = (
    "zpid,streetAddress,city,state,zipcode,price,latitude,longitude,homeType\n"
    "1,350 5th Ave,New York,NY,10118,\"$900,000\",40.7484,-73.9857,residential\n"
    "2,200 Park Ave,New York,NY,10166,\"$4,500,000\",40.7536,-73.9766,commercial\n"
    "3,1 Beacon St,Boston,MA,02108,\"$700,000\",42.3579,-71.0612,residential\n"
    "4,No Coordinates Rd,Nowhere,NY,00000,$500000,,,residential\n"
)


@pytest.fixture(autouse=True)
def loaded_handle(monkeypatch):
    handle = DatasetHandle()
    handle.load_text(CSV_TEXT, source="fixture")
    monkeypatch.setattr(map_server, "_handle", handle)
    config.get_settings.cache_clear()
    yield handle
    config.get_settings.cache_clear()


@pytest.fixture
def client():
    return map_server.app.test_client()


def test_health_endpoint(client):
    response = client.get("/healthz")
    body = response.get_json()
    assert response.status_code == 200
    assert body["status"] == "ok"
    assert body["records"] == 4
    assert body["source"] == "fixture"


def test_list_properties_without_filters_returns_everything(client):
    response = client.get("/properties")
    body = response.get_json()
    assert response.status_code == 200
    assert body["meta"] == {"count": 4}
    assert [item["id"] for item in body["data"]] == ["1", "2", "3", "4"]


def test_list_properties_attribute_filters(client):
    response = client.get("/properties", query_string={"type": "residential", "min_value": "600000", "max_value": "1000000"})
    assert [item["id"] for item in response.get_json()["data"]] == ["1", "3"]


def test_list_properties_radius_search(client):
    response = client.get("/properties", query_string={"lat": "40.7505", "lon": "-73.9934", "zoom": "12"})
    body = response.get_json()
    assert response.status_code == 200
    assert [item["id"] for item in body["data"]] == ["1", "2"]
    assert body["meta"]["radius_km"] == 20
    assert body["data"][0]["address"]["city"] == "New York"
    assert body["data"][0]["coordinates"]["latitude"] == 40.7484


@pytest.mark.parametrize(
    "params",
    [
        {"min_value": "cheap"},
        {"max_value": "nan"},
        {"min_value": "-1"},
        {"lat": "40.7"},
        {"lat": "40.7", "lon": "-73.9", "zoom": "far"},
    ],
)
def test_list_properties_rejects_bad_params(client, params):
    response = client.get("/properties", query_string=params)
    assert response.status_code == 400
    assert "error" in response.get_json()


def test_get_property(client):
    response = client.get("/properties/2")
    assert response.status_code == 200
    assert response.get_json()["data"]["property_type"] == "commercial"

    missing = client.get("/properties/404")
    assert missing.status_code == 404
    assert missing.get_json() == {"error": "property not found"}


def test_geocode_returns_suggestions_with_zoom(client, monkeypatch):
    calls = []

    def fake_search(query, **kwargs):
        calls.append((query, kwargs))
        return [
            GeocodeResult(display_name="Brooklyn, New York", latitude=40.65, longitude=-73.95, location_type="suburb"),
            GeocodeResult(display_name="New York", latitude=40.71, longitude=-74.0, location_type="city"),
        ]

    monkeypatch.setattr(nominatim, "search", fake_search)
    response = client.get("/geocode", query_string={"q": "brooklyn"})

    data = response.get_json()["data"]
    assert response.status_code == 200
    assert [item["zoom"] for item in data] == [12, 10]
    assert data[0]["text"] == "Brooklyn, New York"
    assert calls[0][0] == "brooklyn"
    assert calls[0][1]["limit"] == 5


def test_geocode_short_query_skips_lookup(client, monkeypatch):
    monkeypatch.setattr(nominatim, "search", lambda *args, **kwargs: pytest.fail("lookup should not run"))
    response = client.get("/geocode", query_string={"q": "ny"})
    assert response.get_json() == {"data": []}


def test_geocode_failure_yields_empty_list(client, monkeypatch):
    def broken(query, **kwargs):
        raise nominatim.GeocodingError("upstream down")

    monkeypatch.setattr(nominatim, "search", broken)
    response = client.get("/geocode", query_string={"q": "boston"})
    assert response.status_code == 200
    assert response.get_json() == {"data": []}


def test_reload_requires_configured_dataset(client, monkeypatch):
    monkeypatch.setattr(map_server, "get_settings", lambda: config.Settings())
    assert client.post("/dataset/reload").status_code == 400


def test_reload_from_file(client, monkeypatch, tmp_path, loaded_handle):
    path = tmp_path / "fresh.csv"
    path.write_text("zpid,price\n10,100\n11,200\n", encoding="utf-8")
    monkeypatch.setattr(map_server, "get_settings", lambda: config.Settings(dataset_path=str(path)))

    response = client.post("/dataset/reload")

    assert response.status_code == 200
    assert response.get_json()["data"] == {"records": 2, "source": str(path)}
    assert [record.id for record in loaded_handle.records] == ["10", "11"]


def test_reload_failure_keeps_previous_dataset(client, monkeypatch, tmp_path, loaded_handle):
    missing = tmp_path / "missing.csv"
    monkeypatch.setattr(map_server, "get_settings", lambda: config.Settings(dataset_path=str(missing)))

    response = client.post("/dataset/reload")

    assert response.status_code == 500
    assert len(loaded_handle.records) == 4
