"""Tests for the upload verification and health routes over HTTP.

A minimal FastAPI app mounts the same routers as src.main, so the tests
avoid the secret check and logging setup that importing src.main performs.
"""
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from src.api.dependencies.database import get_db
from src.api.middleware.request_id import RequestIdMiddleware
from src.api.routes import health, uploads
from tests.factories import EXE_MAGIC, JPEG_MAGIC, PDF_MAGIC, PNG_MAGIC, make_payload


@pytest.fixture
def app(mock_db):
    application = FastAPI()
    application.add_middleware(RequestIdMiddleware)
    application.include_router(health.router, prefix="/api")
    application.include_router(uploads.router, prefix="/api")

    async def _get_db():
        yield mock_db

    application.dependency_overrides[get_db] = _get_db
    return application


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


def _upload(name: str, content: bytes, content_type: str):
    return {"file": (name, content, content_type)}


class TestVerifyUpload:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("name,magic,declared", [
        ("receipt.jpg", JPEG_MAGIC, "image/jpeg"),
        ("receipt.png", PNG_MAGIC, "image/png"),
        ("receipt.pdf", PDF_MAGIC, "application/pdf"),
    ])
    async def test_accepts_genuine_file(self, client, name, magic, declared):
        payload = make_payload(magic)
        resp = await client.post("/api/uploads/verify", files=_upload(name, payload, declared))

        assert resp.status_code == 200
        assert resp.json() == {
            "filename": name,
            "content_type": declared,
            "size_bytes": len(payload),
        }

    @pytest.mark.asyncio
    async def test_jpg_alias_returns_canonical_type(self, client):
        resp = await client.post(
            "/api/uploads/verify",
            files=_upload("r.jpg", make_payload(JPEG_MAGIC), "image/jpg"),
        )
        assert resp.status_code == 200
        assert resp.json()["content_type"] == "image/jpeg"

    @pytest.mark.asyncio
    async def test_rejects_spoofed_executable(self, client):
        resp = await client.post(
            "/api/uploads/verify",
            files=_upload("receipt.jpg", make_payload(EXE_MAGIC), "image/jpeg"),
        )
        assert resp.status_code == 400
        assert resp.json()["detail"].startswith(
            "File content does not match declared type (image/jpeg)."
        )

    @pytest.mark.asyncio
    async def test_rejects_unsupported_type(self, client):
        resp = await client.post(
            "/api/uploads/verify",
            files=_upload("logo.svg", b"<svg xmlns='http://www.w3.org/2000/svg'/>", "image/svg+xml"),
        )
        assert resp.status_code == 400
        assert "Unsupported file type: image/svg+xml" in resp.json()["detail"]

    @pytest.mark.asyncio
    async def test_rejects_empty_file(self, client):
        resp = await client.post(
            "/api/uploads/verify", files=_upload("empty.pdf", b"", "application/pdf"),
        )
        assert resp.status_code == 400
        assert resp.json()["detail"] == "File is empty or null"

    @pytest.mark.asyncio
    async def test_rejects_truncated_png(self, client):
        resp = await client.post(
            "/api/uploads/verify", files=_upload("tiny.png", b"\x01\x02", "image/png"),
        )
        assert resp.status_code == 400
        assert "too small or corrupted" in resp.json()["detail"]

    @pytest.mark.asyncio
    async def test_rejects_oversize_file(self, client, monkeypatch):
        from src.core.config import settings
        monkeypatch.setattr(settings, "max_receipt_size_bytes", 1024 * 1024)

        resp = await client.post(
            "/api/uploads/verify",
            files=_upload("big.pdf", make_payload(PDF_MAGIC, 1024 * 1024 + 1), "application/pdf"),
        )
        assert resp.status_code == 413
        assert "Maximum size is 1 MB" in resp.json()["detail"]

    @pytest.mark.asyncio
    async def test_missing_file_is_422(self, client):
        resp = await client.post("/api/uploads/verify")
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_response_carries_request_id(self, client):
        resp = await client.post(
            "/api/uploads/verify",
            files=_upload("r.pdf", make_payload(PDF_MAGIC), "application/pdf"),
            headers={"X-Request-ID": "abc-123"},
        )
        assert resp.headers["X-Request-ID"] == "abc-123"


class TestHealth:
    @pytest.mark.asyncio
    async def test_healthy_when_database_up(self, client, mock_db):
        mock_db.execute = AsyncMock(return_value=MagicMock())
        resp = await client.get("/api/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "healthy"
        assert body["checks"]["database"]["status"] == "up"

    @pytest.mark.asyncio
    async def test_unhealthy_when_database_down(self, client, mock_db):
        mock_db.execute = AsyncMock(side_effect=ConnectionError("refused"))
        resp = await client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "unhealthy"
