"""Tests for the static SVG preview."""

import xml.etree.ElementTree as ET

import numpy as np

from pathanatomy.engine import operations
from pathanatomy.engine.context import PathData
from pathanatomy.svg.serializer import offset_polyline, render_svg
from tests.conftest import square_data

SOURCE = "Shape Layer 1"


def ids(svg: str) -> set[str]:
    root = ET.fromstring(svg)
    return {el.get("id") for el in root.iter() if el.get("id")}


def test_source_only(square_comp):
    svg = render_svg(square_comp)
    assert 'viewBox="0 0 400 300"' in svg
    assert ids(svg) == {SOURCE}
    assert 'stroke="#808080"' in svg


def test_built_scene(square_comp):
    operations.build(square_comp, SOURCE)
    svg = render_svg(square_comp)
    drawn = ids(svg)
    assert {"O0", "A0_0", "VL_0_0", "CC_0_0_1_2", "PP_Label_0_2"} <= drawn
    assert "PP_Control" not in drawn
    assert ">(100, 100)</text>" in svg


def test_timeline_start_draws_nothing_generated(square_comp):
    operations.build(square_comp, SOURCE)
    square_comp.layer("PP_Control").effect("Timeline").set_value(0.0)
    drawn = ids(render_svg(square_comp))
    assert "O0" not in drawn
    assert "A0_0" not in drawn
    assert "PP_Label_0_0" not in drawn


def test_hidden_grid(square_comp):
    operations.build(square_comp, SOURCE)
    square_comp.layer("PP_Control").effect("Show Grid").set_value(False)
    drawn = ids(render_svg(square_comp))
    assert "PP_Grid" not in drawn
    assert "PP_Circumcircles" not in drawn
    assert "O0" in drawn


def test_precomposed_scene_still_renders(square_comp):
    operations.build(square_comp, SOURCE)
    operations.precompose(square_comp)
    svg = render_svg(square_comp)
    assert SOURCE in ids(svg)
    assert svg.endswith("</svg>")


def test_offset_grows_closed_paths():
    pts = offset_polyline(square_data(), 10.0)
    np.testing.assert_allclose(pts.min(axis=0), [-10, -10], atol=1e-6)
    np.testing.assert_allclose(pts.max(axis=0), [110, 110], atol=1e-6)


def test_offset_of_open_path_is_a_band():
    line = PathData(np.array([(0.0, 0.0), (100.0, 0.0)]))
    pts = offset_polyline(line, 5.0)
    np.testing.assert_allclose(pts[:, 1].min(), -5, atol=1e-6)
    np.testing.assert_allclose(pts[:, 1].max(), 5, atol=1e-6)
