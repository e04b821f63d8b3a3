"""Tests for API endpoints."""

from __future__ import annotations

from fastapi.testclient import TestClient

from svgbake.main import app
from tests.conftest import GROUPED_RECT_SVG, STROKED_SKEW_SVG


client = TestClient(app)


def test_health():
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["precision"] == 80


def test_parse_transform():
    response = client.post("/api/transform/parse", json={"transform": "translate(10 20)"})
    assert response.status_code == 200
    data = response.json()
    assert data["matrix"] == ["1", "0", "0", "1", "10", "20"]
    assert data["svg_matrix"] == "matrix(1, 0, 0, 1, 10, 20)"
    assert data["minimal_transform"] == "translate(10 20)"
    assert data["diagnostics"] == []


def test_parse_reports_diagnostics():
    response = client.post("/api/transform/parse", json={"transform": "wobble(3) scale(2)"})
    assert response.status_code == 200
    data = response.json()
    assert data["minimal_transform"] == "scale(2)"
    assert data["diagnostics"][0]["severity"] == "degenerate"


def test_optimize():
    response = client.post("/api/transform/optimize", json={"transform": "translate(10 20) translate(5 5)"})
    assert response.status_code == 200
    data = response.json()
    assert data["transform"] == "translate(15 25)"
    assert data["optimization_count"] == 1
    assert data["verified"] is True


def test_decompose_transform():
    response = client.post(
        "/api/transform/decompose", json={"transform": "translate(10 20) rotate(45) scale(2)"}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["translate_x"] == "10"
    assert data["rotation_degrees"] == "45"
    assert data["scale_x"] == "2"
    assert data["skew_y_degrees"] == "0"
    assert data["verified"] is True
    assert data["singular"] is False
    assert data["minimal_transform"] == "translate(10 20) rotate(45) scale(2)"


def test_decompose_singular_matrix():
    response = client.post("/api/transform/decompose", json={"matrix": ["0", "0", "0", "5", "3", "4"]})
    assert response.status_code == 200
    data = response.json()
    assert data["singular"] is True
    assert data["verified"] is False
    assert data["translate_x"] == "3"
    assert data["translate_y"] == "4"


def test_decompose_requires_input():
    response = client.post("/api/transform/decompose", json={})
    assert response.status_code == 422
    assert "required" in response.json()["detail"]


def test_decompose_rejects_bad_matrix():
    assert client.post("/api/transform/decompose", json={"matrix": ["1", "0"]}).status_code == 422
    assert client.post("/api/transform/decompose", json={"matrix": ["1", "0", "0", "1", "x", "0"]}).status_code == 422


def test_viewport_ctm():
    hierarchy = [
        {"type": "svg", "width": "800", "height": "600", "view_box": "0 0 100 100"},
        {"type": "g", "transform": "translate(10 0)"},
    ]
    response = client.post("/api/viewport/ctm", json={"hierarchy": hierarchy})
    assert response.status_code == 200
    assert response.json()["matrix"] == ["6", "0", "0", "6", "160", "0"]


def test_viewport_requires_size():
    response = client.post("/api/viewport/ctm", json={"hierarchy": [{"type": "svg", "width": "10"}]})
    assert response.status_code == 422


def test_path_transform():
    response = client.post("/api/path/transform", json={"d": "M0 0 L10 0", "transform": "translate(5 5)"})
    assert response.status_code == 200
    data = response.json()
    assert data["d"] == "M5 5 L15 5"
    assert data["verified"] is True


def test_path_transform_relative_output():
    response = client.post(
        "/api/path/transform",
        json={"d": "m1 1 l1 0", "transform": "scale(3)", "to_absolute": False},
    )
    assert response.json()["d"] == "m3 3 l3 0"


def test_flatten():
    response = client.post("/api/flatten", json={"svg": GROUPED_RECT_SVG})
    assert response.status_code == 200
    data = response.json()
    assert "transform=" not in data["svg"]
    assert data["baked_elements"] == 1
    assert data["converted_shapes"] == 1
    assert data["verified"] is True


def test_flatten_keeps_stroke_transform():
    response = client.post("/api/flatten", json={"svg": STROKED_SKEW_SVG})
    assert response.status_code == 200
    data = response.json()
    assert data["kept_transforms"] == 1
    assert 'transform="scale(2 1)"' in data["svg"]


def test_flatten_invalid_svg():
    response = client.post("/api/flatten", json={"svg": "<not-svg"})
    assert response.status_code == 422
