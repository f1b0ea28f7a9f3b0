"""Tests for API endpoints: scene lifecycle and error mapping."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from pathanatomy.config import settings
from pathanatomy.dependencies import get_store
from pathanatomy.main import app
from tests.conftest import NESTED_SVG, SQUARE, SQUARE_DOCUMENT, SQUARE_SVG


client = TestClient(app)


def create(**payload) -> str:
    response = client.post("/api/scenes", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["id"]


@pytest.fixture
def built() -> str:
    scene_id = create(document=SQUARE_DOCUMENT)
    response = client.post(f"/api/scenes/{scene_id}/build", json={"source": "Shape Layer 1"})
    assert response.status_code == 200, response.text
    return scene_id


def test_health():
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["constructors_registered"] == 12


def test_constructors():
    data = client.get("/api/constructors").json()
    assert [c["id"] for c in data][:2] == ["G0.01", "G1.01"]
    assert data[0]["stage"] == "snapshot"


def test_controls_by_profile():
    extended = client.get("/api/controls").json()
    minimal = client.get("/api/controls", params={"profile": "minimal"}).json()
    assert len(extended) > len(minimal)
    grid = next(c for c in minimal if c["name"] == "Grid Opacity")
    assert grid["default"] == 40.0
    assert client.get("/api/controls", params={"profile": "fancy"}).status_code == 422


def test_create_from_svg():
    response = client.post("/api/scenes", json={"svg": NESTED_SVG, "layer_name": "Logo"})
    assert response.status_code == 201
    data = response.json()
    assert data["width"] == 400
    assert data["layers"] == [{"name": "Logo", "kind": "shape", "generated": False, "elements": 0}]


def test_create_requires_input():
    response = client.post("/api/scenes", json={})
    assert response.status_code == 400
    assert response.json()["error"] == "UserInputError"


def test_create_rejects_bad_svg():
    response = client.post("/api/scenes", json={"svg": "<svg"})
    assert response.status_code == 400


def test_create_rejects_bad_document():
    document = {"layers": [{"name": "L", "contents": [
        {"type": "path", "vertices": SQUARE, "in_tangents": [[0, 0]]},
    ]}]}
    assert client.post("/api/scenes", json={"document": document}).status_code == 422


def test_unknown_scene():
    response = client.get("/api/scenes/missing")
    assert response.status_code == 404
    assert response.json()["error"] == "SceneNotFoundError"


def test_build(built):
    data = client.get(f"/api/scenes/{built}").json()
    names = [layer["name"] for layer in data["layers"]]
    assert names[0] == "PP_Control"
    assert names[-2:] == ["Shape Layer 1", "PP_Grid"]
    anchors = next(layer for layer in data["layers"] if layer["name"] == "PP_Anchors")
    assert anchors["elements"] == 4


def test_build_errors():
    scene_id = create(svg=SQUARE_SVG)
    assert client.post(f"/api/scenes/{scene_id}/build", json={"source": "Nope"}).status_code == 400
    response = client.post(f"/api/scenes/{scene_id}/build", json={"source": "Artwork", "profile": "fancy"})
    assert response.status_code == 400


def test_build_minimal_profile():
    scene_id = create(svg=SQUARE_SVG)
    response = client.post(f"/api/scenes/{scene_id}/build", json={"source": "Artwork", "profile": "minimal"})
    assert response.status_code == 200
    assert "PP_Circumcircles" not in response.json()["layers"]


def test_build_label_font():
    scene_id = create(document=SQUARE_DOCUMENT)
    response = client.post(f"/api/scenes/{scene_id}/build", json={"source": "Shape Layer 1", "font": " Helvetica Neue "})
    assert response.status_code == 200
    labels = [lyr for lyr in get_store().get(scene_id).layers if lyr.name.startswith("PP_Label_")]
    assert labels
    assert {lyr.text.font for lyr in labels} == {"HelveticaNeue"}


def test_build_label_font_defaults_to_settings():
    scene_id = create(document=SQUARE_DOCUMENT)
    client.post(f"/api/scenes/{scene_id}/build", json={"source": "Shape Layer 1", "font": "  "})
    label = get_store().get(scene_id).layer("PP_Label_0_0")
    assert label.text.font == "".join(settings.default_font.split())


def test_vertex_guard():
    points = " ".join(f"{i * 3},{(i * 37) % 50}" for i in range(121))
    svg = f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 400 100"><polyline points="{points}"/></svg>'
    scene_id = create(svg=svg)
    request = {"source": "Artwork", "profile": "minimal"}

    response = client.post(f"/api/scenes/{scene_id}/build", json=request)
    assert response.status_code == 409
    data = response.json()
    assert data["error"] == "PerformanceWarning"
    assert (data["vertex_count"], data["threshold"]) == (121, 120)

    response = client.post(f"/api/scenes/{scene_id}/build", json={**request, "confirm": True})
    assert response.status_code == 200
    assert response.json()["vertex_count"] == 121


def test_evaluate(built):
    response = client.get(f"/api/scenes/{built}/evaluate")
    assert response.status_code == 200
    elements = response.json()["elements"]
    # Layer at (50, 60), group at (10, 0)
    assert elements["A0_0"]["position"] == [60.0, 60.0]
    assert elements["PP_Label_0_2"]["text"] == "(160, 160)"


def test_controls_roundtrip(built):
    response = client.post(f"/api/scenes/{built}/controls", json={"values": {"Timeline": 0, "Show Grid": False}})
    assert response.status_code == 200
    assert response.json()["values"]["Timeline"] == 0
    elements = client.get(f"/api/scenes/{built}/evaluate").json()["elements"]
    assert elements["A0_0"]["scale"] == [0.0, 0.0]

    response = client.post(f"/api/scenes/{built}/controls", json={"values": {"Bogus": 1}})
    assert response.status_code == 400


def test_controls_require_build():
    scene_id = create(svg=SQUARE_SVG)
    assert client.get(f"/api/scenes/{scene_id}/controls").status_code == 400


def test_expressions(built):
    expressions = client.get(f"/api/scenes/{built}/expressions").json()["expressions"]
    assert 'C.effect("Timeline")' in expressions["A0_0"]["scale"]
    assert "PP_Grid" in expressions


def test_preview(built):
    response = client.get(f"/api/scenes/{built}/preview")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("image/svg+xml")
    assert 'id="O0"' in response.text


def test_animate_and_reset(built):
    client.post(f"/api/scenes/{built}/time", json={"time": 1.5})
    response = client.post(f"/api/scenes/{built}/animate", json={"duration": "oops", "stagger": 20})
    assert response.status_code == 200
    assert response.json() == {"start": 1.5, "end": 3.5}

    values = client.post(f"/api/scenes/{built}/reset").json()["values"]
    assert values["Timeline"] == 100.0
    assert values["Stagger"] == 0.0


def test_bake_and_cleanup(built):
    response = client.post(f"/api/scenes/{built}/bake")
    assert response.status_code == 200
    data = response.json()
    assert data["frozen"] == ["O0"]
    assert data["complete"]

    removed = client.post(f"/api/scenes/{built}/cleanup").json()["removed"]
    assert "PP_Outlines" in removed
    response = client.post(f"/api/scenes/{built}/bake")
    assert response.status_code == 409
    assert response.json()["error"] == "StructuralMismatch"


def test_precompose(built):
    response = client.post(f"/api/scenes/{built}/precompose")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Path Plugin Visuals"
    assert data["layers"][0] == "PP_Control"

    layers = client.get(f"/api/scenes/{built}").json()["layers"]
    assert [layer["name"] for layer in layers] == ["Path Plugin Visuals", "Shape Layer 1"]
    assert client.post(f"/api/scenes/{built}/precompose").status_code == 400
    assert client.get(f"/api/scenes/{built}/evaluate").status_code == 200
