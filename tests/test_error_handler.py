"""Tests for the error translator."""

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient

from nanjil.app.exceptions import InvalidCoordinateError, PhotoUploadError
from nanjil.app.middleware.error_handler import register_exception_handlers, translate_exception
from nanjil.app.middleware.request_id import RequestIdMiddleware


class TestTranslateException:
    def test_service_exception(self):
        translated = translate_exception(InvalidCoordinateError(float("nan"), 0))
        assert translated.status_code == 422
        assert translated.code == "INVALID_COORDINATE"

    def test_http_exception(self):
        translated = translate_exception(HTTPException(status_code=403, detail="Access forbidden"))
        assert (translated.status_code, translated.code, translated.message) == (
            403, "HTTP_EXCEPTION", "Access forbidden"
        )

    def test_not_found(self):
        assert translate_exception(HTTPException(status_code=404)).code == "NOT_FOUND"

    @pytest.mark.parametrize(
        ("message", "status", "code", "text"),
        [
            (
                'duplicate key value violates unique constraint "bookings_pkey"',
                409, "DUPLICATE_ENTRY", "Record already exists",
            ),
            (
                'insert on table "photos" violates foreign key constraint "photos_booking_id_fkey"',
                400, "INVALID_REFERENCE", "Invalid reference in request",
            ),
            ("something broke", 500, "INTERNAL_SERVER_ERROR", "An unexpected error occurred"),
        ],
    )
    def test_generic_errors(self, message, status, code, text):
        translated = translate_exception(RuntimeError(message))
        assert (translated.status_code, translated.code, translated.message) == (status, code, text)


class TestExceptionHandlers:
    @pytest.fixture
    def client(self):
        app = FastAPI()
        app.add_middleware(RequestIdMiddleware)
        register_exception_handlers(app)

        @app.get("/duplicate")
        async def duplicate():
            raise RuntimeError("UNIQUE constraint failed: bookings.id")

        @app.get("/boom")
        async def boom():
            raise RuntimeError("boom")

        @app.get("/forbidden")
        async def forbidden():
            raise HTTPException(status_code=403, detail="Access forbidden")

        @app.get("/upload")
        async def upload():
            raise PhotoUploadError()

        @app.get("/items/{item_id}")
        async def item(item_id: int):
            return {"item_id": item_id}

        return TestClient(app, raise_server_exceptions=False)

    def test_duplicate_entry(self, client):
        resp = client.get("/duplicate")
        assert resp.status_code == 409
        assert resp.json() == {
            "success": False,
            "error": {"code": "DUPLICATE_ENTRY", "message": "Record already exists"},
        }

    def test_unhandled_exception_hides_details(self, client):
        resp = client.get("/boom", headers={"X-Request-ID": "req-123"})
        assert resp.status_code == 500
        error = resp.json()["error"]
        assert error["code"] == "INTERNAL_SERVER_ERROR"
        assert error["message"] == "An unexpected error occurred"
        assert error["request_id"] == "req-123"
        assert "detail" not in error

    def test_debug_mode_includes_exception_message(self, client, monkeypatch):
        monkeypatch.setattr("nanjil.app.middleware.error_handler.settings.debug", True)
        resp = client.get("/boom")
        assert resp.json()["error"]["detail"] == "boom"

    def test_http_exception(self, client):
        resp = client.get("/forbidden")
        assert resp.status_code == 403
        assert resp.json()["error"] == {"code": "HTTP_EXCEPTION", "message": "Access forbidden"}

    def test_service_exception(self, client):
        resp = client.get("/upload")
        assert resp.status_code == 500
        assert resp.json()["error"]["code"] == "PHOTO_UPLOAD_FAILED"

    def test_unknown_route(self, client):
        resp = client.get("/missing")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "NOT_FOUND"

    def test_validation_error(self, client):
        resp = client.get("/items/not-a-number")
        assert resp.status_code == 422
        body = resp.json()
        assert body["error"]["code"] == "VALIDATION_ERROR"
        assert body["error"]["details"][0]["loc"] == ["path", "item_id"]
