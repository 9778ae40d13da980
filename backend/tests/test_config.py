import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import ValidationError

from schedcore.core.config import Settings
from schedcore.core.middleware import RequestSizeLimitMiddleware


def test_defaults_describe_the_operating_window():
    settings = Settings()
    window = settings.operating_window()
    assert (window.start_time, window.end_time, window.grid_minutes) == ("7:30", "19:30", 15)
    assert settings.search_step_minutes == 30
    assert settings.bulk_attempts_per_session == 500


def test_cors_origins_accept_csv_and_json():
    assert Settings(cors_origins="http://a.test, http://b.test").cors_origins == ["http://a.test", "http://b.test"]
    assert Settings(cors_origins='["http://c.test"]').cors_origins == ["http://c.test"]


def test_log_level_is_normalized():
    assert Settings(log_level=" debug ").log_level == "DEBUG"


@pytest.mark.parametrize(
    "overrides",
    [
        {"day_start": "20:00"},
        {"day_end": "7:00"},
        {"day_start": "seven"},
        {"search_step_minutes": 0},
        {"bulk_attempts_per_session": 0},
    ],
)
def test_invalid_schedule_settings_are_rejected(overrides):
    with pytest.raises(ValidationError):
        Settings(**overrides)


def test_request_size_limit():
    app = FastAPI()
    app.add_middleware(RequestSizeLimitMiddleware, max_bytes=16)

    @app.post("/echo")
    def echo(payload: dict) -> dict:
        return payload

    client = TestClient(app)
    assert client.post("/echo", json={"a": 1}).status_code == 200
    response = client.post("/echo", json={"payload": "x" * 64})
    assert response.status_code == 413
    body = response.json()
    assert body["message"] == "Request body too large"
    assert body["details"]["max_bytes"] == 16
