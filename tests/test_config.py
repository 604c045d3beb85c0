from estate_map.core import config


def setup_function(function):
    config.get_settings.cache_clear()


def teardown_function(function):
    config.get_settings.cache_clear()


def test_get_settings_reads_env(monkeypatch):
    monkeypatch.setenv("ESTATE_MAP_DATASET", "/data/listings.csv")
    monkeypatch.setenv("ESTATE_MAP_SOURCE", "zillow")
    monkeypatch.setenv("ESTATE_MAP_DELIMITER", ";")
    monkeypatch.setenv("GEOCODER_USER_AGENT", "estate-map-tests/0.1")
    monkeypatch.setenv("SUGGEST_DEBOUNCE_MS", "150")
    monkeypatch.setenv("SUGGEST_LIMIT", "8")

    settings = config.get_settings()

    assert settings.dataset_path == "/data/listings.csv"
    assert settings.source_name == "zillow"
    assert settings.csv_delimiter == ";"
    assert settings.geocoder_user_agent == "estate-map-tests/0.1"
    assert settings.debounce_ms == 150
    assert settings.max_suggestions == 8


def test_get_settings_defaults_and_warnings(monkeypatch, caplog):
    for name in ("ESTATE_MAP_DATASET", "ESTATE_MAP_SOURCE", "GEOCODER_URL", "SUGGEST_DEBOUNCE_MS", "SUGGEST_MIN_CHARS"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ESTATE_MAP_DELIMITER", "||")
    monkeypatch.setenv("GEOCODER_TIMEOUT", "soon")

    with caplog.at_level("WARNING"):
        settings = config.get_settings()

    messages = " ".join(caplog.messages)
    assert "ESTATE_MAP_DATASET is not set" in messages
    assert "ESTATE_MAP_DELIMITER must be a single character" in messages
    assert "GEOCODER_TIMEOUT" in messages
    assert settings.csv_delimiter == ","
    assert settings.source_name == "csv"
    assert settings.geocoder_url == config.DEFAULT_GEOCODER_URL
    assert settings.geocoder_timeout == 10
    assert settings.debounce_ms == 300
    assert settings.min_query_length == 3
