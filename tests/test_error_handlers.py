from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient

from app.errors import register_error_handlers
from app.services.batch_operations import BatchInProgressError


def _client():
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/api/v1/conflict")
    def conflict():
        raise HTTPException(status_code=409, detail="Already exists")

    @app.get("/api/v1/structured")
    def structured():
        raise HTTPException(
            status_code=400,
            detail={"code": "bad_filter", "message": "Unknown filter", "details": ["x"]},
        )

    @app.get("/api/v1/busy")
    async def busy():
        raise BatchInProgressError("A batch operation is already running")

    @app.get("/api/v1/crash")
    def crash():
        raise RuntimeError("boom")

    return TestClient(app, raise_server_exceptions=False)


def test_http_exception_uses_error_envelope():
    response = _client().get("/api/v1/conflict", headers={"X-Request-ID": "req-123"})
    assert response.status_code == 409
    assert response.json() == {
        "code": "http_409",
        "message": "Already exists",
        "details": None,
        "request_id": "req-123",
    }
    assert response.headers["X-Request-ID"] == "req-123"


def test_structured_detail_is_unpacked():
    body = _client().get("/api/v1/structured").json()
    assert body["code"] == "bad_filter"
    assert body["message"] == "Unknown filter"
    assert body["details"] == ["x"]
    assert body["request_id"] != "unknown"


def test_unknown_route_is_404_envelope():
    response = _client().get("/api/v1/missing")
    assert response.status_code == 404
    assert response.json()["code"] == "http_404"


def test_batch_in_progress_maps_to_409():
    response = _client().get("/api/v1/busy")
    assert response.status_code == 409
    assert response.json()["code"] == "batch_in_progress"


def test_unhandled_exception_is_500():
    response = _client().get("/api/v1/crash")
    assert response.status_code == 500
    assert response.json()["code"] == "internal_error"
