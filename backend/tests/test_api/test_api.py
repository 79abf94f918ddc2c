"""Tests for API endpoints (TestClient against the full pipeline)."""

from __future__ import annotations

import base64
import io
import json

from fastapi.testclient import TestClient
from PIL import Image

from app.config import Settings
from app.dependencies import get_settings
from app.engine.pipeline import Pipeline
from app.main import app
from tests.conftest import BUTTON_SCREEN, WHITE_100


client = TestClient(app)


def _encode(buffer) -> str:
    out = io.BytesIO()
    Image.fromarray(buffer.data).save(out, format="PNG")
    return base64.b64encode(out.getvalue()).decode("ascii")


def _sse_events(text: str) -> list[tuple[str, dict]]:
    events = []
    for block in text.strip().split("\n\n"):
        lines = dict(line.split(": ", 1) for line in block.splitlines())
        events.append((lines["event"], json.loads(lines["data"])))
    return events


def test_health():
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["transforms_registered"] == 5


def test_analyze_button():
    response = client.post("/api/analyze", json={"image": _encode(BUTTON_SCREEN)})
    assert response.status_code == 200
    data = response.json()
    assert data["transforms_completed"] == 5
    assert data["transforms_failed"] == 0
    assert data["processing_time_ms"] >= 0
    assert data["edge_density"] > 0

    result = data["result"]
    assert result["dimensions"] == {"width": 400, "height": 300}
    assert result["colors"]["accent"] == "#0000ff"
    assert len(result["elements"]) == 1
    assert result["elements"][0]["type"] == "button"
    assert result["elements"][0]["colors"] == {"background": "#0000ff"}
    assert result["layout"] == {"type": "absolute"}


def test_analyze_data_url_without_edge_map():
    payload = {
        "image": "data:image/png;base64," + _encode(WHITE_100),
        "options": {"compute_edge_map": False},
    }
    response = client.post("/api/analyze", json=payload)
    assert response.status_code == 200
    data = response.json()
    assert data["transforms_completed"] == 4
    assert "edge_density" not in data
    assert data["result"]["elements"] == []


def test_analyze_invalid_image():
    garbage = base64.b64encode(b"not an image").decode("ascii")
    response = client.post("/api/analyze", json={"image": garbage})
    assert response.status_code == 422
    assert response.json()["error"] == "decode_error"


def test_analyze_invalid_base64():
    response = client.post("/api/analyze", json={"image": "%%%"})
    assert response.status_code == 422
    assert response.json()["error"] == "decode_error"


def test_analyze_missing_image_field():
    response = client.post("/api/analyze", json={})
    assert response.status_code == 422


def test_analyze_too_large():
    app.dependency_overrides[get_settings] = lambda: Settings(max_image_bytes=16)
    try:
        response = client.post("/api/analyze", json={"image": _encode(WHITE_100)})
    finally:
        app.dependency_overrides.clear()
    assert response.status_code == 413


def test_analyze_stream():
    response = client.post("/api/analyze/stream", json={"image": _encode(BUTTON_SCREEN)})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")

    events = _sse_events(response.text)
    names = [name for name, _ in events]
    assert names[-2:] == ["result", "done"]
    assert set(names[:-2]) == {"progress"}

    result = events[-2][1]["result"]
    assert result["elements"][0]["type"] == "button"


def test_analyze_stream_decode_error():
    garbage = base64.b64encode(b"nope").decode("ascii")
    response = client.post("/api/analyze/stream", json={"image": garbage})
    events = _sse_events(response.text)
    assert [name for name, _ in events] == ["error"]
    assert events[0][1]["error"] == "decode_error"


def test_analyze_stream_reports_pipeline_crash(monkeypatch):
    def _crashing(self, ctx):
        yield {"transform_id": "T0.01", "status": "running"}
        raise RuntimeError("registry corrupted")

    monkeypatch.setattr(Pipeline, "run_streaming", _crashing)
    response = client.post("/api/analyze/stream", json={"image": _encode(WHITE_100)})
    assert response.status_code == 200

    events = _sse_events(response.text)
    assert [name for name, _ in events] == ["progress", "error"]
    assert events[-1][1]["error"] == "analysis_error"
    assert "registry corrupted" in events[-1][1]["message"]
