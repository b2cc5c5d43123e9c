"""
Integration tests for API endpoints (api/main.py)
"""
import asyncio
import json
import os
import time
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_provider, get_settings
from api.main import _on_run_done, _running_tasks, app, limiter
from core.errors import ClientError

DOCX_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def parse_sse(body: str):
    """Decode ``data: <json>`` frames of an event-stream body."""
    events = []
    for frame in body.split("\n\n"):
        frame = frame.strip()
        if frame.startswith("data: "):
            events.append(json.loads(frame[len("data: "):]))
    return events


@pytest.fixture
def provider(make_provider):
    return make_provider()


@pytest.fixture
def client(test_settings, provider):
    """Test client wired to isolated settings and a fake provider."""
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_provider] = lambda: provider
    limiter.reset()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def upload(client, make_pdf):
    def _upload(pages):
        response = client.post(
            "/api/upload",
            files={"pdf": ("book.pdf", make_pdf(pages), "application/pdf")},
        )
        assert response.status_code == 200
        return response.json()["uploadId"]
    return _upload


class TestUpload:
    """POST /api/upload"""

    def test_upload_success(self, client, make_pdf, test_settings):
        contents = make_pdf(["First page"])
        response = client.post("/api/upload", files={"pdf": ("book.pdf", contents, "application/pdf")})

        assert response.status_code == 200
        data = response.json()
        assert len(data["uploadId"]) == 32
        assert data["size"] == len(contents)
        assert (test_settings.storage_dir / "uploads" / f"{data['uploadId']}.pdf").exists()

    def test_missing_field(self, client):
        response = client.post("/api/upload", files={"file": ("book.pdf", b"%PDF-1.4", "application/pdf")})
        assert response.status_code == 400

    def test_wrong_type(self, client):
        response = client.post("/api/upload", files={"pdf": ("notes.txt", b"hello", "text/plain")})
        assert response.status_code == 400
        assert response.json()["detail"] == "Only PDF files are allowed"

    def test_empty_file(self, client):
        response = client.post("/api/upload", files={"pdf": ("book.pdf", b"", "application/pdf")})
        assert response.status_code == 400


class TestTranslate:
    """POST /api/translate (Server-Sent Events)"""

    def test_full_run(self, client, upload, provider):
        upload_id = upload(["Hello first page", "Second page here"])

        response = client.post("/api/translate", json={"uploadId": upload_id, "targetLang": "ru"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["cache-control"] == "no-cache, no-transform"
        assert response.headers["x-accel-buffering"] == "no"

        events = parse_sse(response.text)
        types = [e["type"] for e in events]
        assert types[0] == "init"
        assert types[-1] == "completed"
        assert types.count("completed") == 1
        assert "error" not in types

        completed = events[-1]
        assert completed["partial"] is False
        assert completed["failedChunks"] == []
        assert completed["pagesProcessed"] == 2

        download = client.get(f"/api/download/{completed['downloadRef']}")
        assert download.status_code == 200
        assert download.headers["content-type"] == DOCX_TYPE
        assert download.content[:2] == b"PK"

    def test_partial_run(self, client, upload, make_provider, test_settings):
        def handler(request, n):
            if "Second" in request.user_text:
                return ClientError("rejected", status=400)
            return "перевод"

        one_page_units = test_settings.model_copy(update={"unit_size_pages": 1})
        app.dependency_overrides[get_settings] = lambda: one_page_units
        app.dependency_overrides[get_provider] = lambda: make_provider(handler)
        upload_id = upload(["First page", "Second page", "Third page"])

        events = parse_sse(client.post("/api/translate", json={"uploadId": upload_id}).text)

        completed = events[-1]
        assert completed["type"] == "completed"
        assert completed["partial"] is True
        assert completed["failedChunks"] == [1]

    def test_unknown_upload(self, client):
        response = client.post("/api/translate", json={"uploadId": "0" * 32})

        events = parse_sse(response.text)
        assert [e["type"] for e in events] == ["error"]
        assert "not found" in events[0]["message"]

    def test_provider_not_configured(self, client, upload):
        app.dependency_overrides[get_provider] = lambda: None
        upload_id = upload(["Hello"])

        events = parse_sse(client.post("/api/translate", json={"uploadId": upload_id}).text)

        assert events == [{"type": "error", "message": "Translation service is not configured"}]

    def test_missing_upload_id(self, client):
        response = client.post("/api/translate", json={})
        assert response.status_code == 422


class TestDownload:
    """GET /api/download/{key}"""

    def test_malformed_key(self, client):
        assert client.get("/api/download/not-a-key").status_code == 400

    def test_unknown_key(self, client):
        assert client.get(f"/api/download/{'0' * 32}.docx").status_code == 404


class TestCleanup:
    """POST /api/cleanup"""

    def test_requires_token(self, client):
        assert client.post("/api/cleanup").status_code == 401

    def test_wrong_token(self, client):
        response = client.post("/api/cleanup", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401

    def test_purges_old_files(self, client, upload, test_settings):
        fresh_id = upload(["Fresh"])
        old_id = upload(["Old"])
        old_path = test_settings.storage_dir / "uploads" / f"{old_id}.pdf"
        two_days_ago = time.time() - 48 * 3600
        os.utime(old_path, (two_days_ago, two_days_ago))

        response = client.post("/api/cleanup", headers={"Authorization": "Bearer test-secret"})

        assert response.status_code == 200
        data = response.json()
        assert data["deletedFiles"] == 1
        assert data["deleted"] == [f"{old_id}.pdf"]
        assert data["message"] == "Cleanup completed. Deleted 1 files."
        assert not old_path.exists()
        assert (test_settings.storage_dir / "uploads" / f"{fresh_id}.pdf").exists()


class TestRunTasks:
    """Detached translation run tasks"""

    @pytest.mark.asyncio
    async def test_failed_run_is_logged_and_released(self):
        async def failing_run():
            raise RuntimeError("provider close failed")

        task = asyncio.create_task(failing_run())
        _running_tasks.add(task)
        task.add_done_callback(_on_run_done)

        with patch("api.main.logger") as mock_logger:
            await asyncio.wait([task])
            await asyncio.sleep(0)

        assert task not in _running_tasks
        mock_logger.error.assert_called_once()
        assert "provider close failed" in mock_logger.error.call_args.args[0]

    @pytest.mark.asyncio
    async def test_successful_run_not_logged(self):
        async def run():
            return None

        task = asyncio.create_task(run())
        _running_tasks.add(task)
        task.add_done_callback(_on_run_done)

        with patch("api.main.logger") as mock_logger:
            await asyncio.wait([task])
            await asyncio.sleep(0)

        assert task not in _running_tasks
        mock_logger.error.assert_not_called()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {
        "status": "ok",
        "version": "1.0.0",
        "provider": "openai",
        "model": "gpt-4o-mini",
    }
