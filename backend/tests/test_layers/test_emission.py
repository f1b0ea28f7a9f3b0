"""Tests for scene planning: layer order, opacity bindings and the vertex guard."""

import pytest

from pathanatomy.engine.bindings import ControlValue, LayerOpacity
from pathanatomy.engine.config import GenerationConfig, Profile
from pathanatomy.engine.context import GenerationContext
from pathanatomy.engine.emission import Shape, check_vertex_budget, grid_opacity, plan_scene
from pathanatomy.engine.extractor import discover_paths
from pathanatomy.engine.pipeline import Pipeline
from pathanatomy.errors import PerformanceWarning
from pathanatomy.host.evaluation import EvalContext
from pathanatomy.host.scene import LayerKind
from tests.conftest import comp_with, diamond_data, path_layer, square_data


def plan_for(*paths, profile=Profile.EXTENDED):
    config = GenerationConfig(profile=profile)
    comp = comp_with(path_layer(list(paths)))
    ctx = GenerationContext(paths=discover_paths(comp.layers[0], EvalContext(comp)), config=config)
    return plan_scene(Pipeline(config=config).run(ctx))


def test_square_layer_order():
    plan = plan_for(square_data())
    assert [lp.name for lp in plan.layers] == [
        "PP_Label_0_3",
        "PP_Label_0_2",
        "PP_Label_0_1",
        "PP_Label_0_0",
        "PP_Anchors",
        "PP_HandleLines",
        "PP_Handles",
        "PP_Outlines",
        "PP_OffsetContours",
        "PP_Triangulation",
        "PP_Circumcircles",
        "PP_Grid",
    ]
    assert plan.layer("PP_Grid").to_bottom
    assert plan.vertex_count == 4


def test_tangent_layer_only_when_rays_exist():
    plan = plan_for(diamond_data())
    names = [lp.name for lp in plan.layers]
    assert names.index("PP_Triangulation") < names.index("PP_Tangents") < names.index("PP_Circumcircles")


def test_minimal_profile_drops_construction_layers():
    plan = plan_for(square_data(), profile=Profile.MINIMAL)
    names = [lp.name for lp in plan.layers]
    assert "PP_Circumcircles" not in names
    assert "PP_OffsetContours" not in names
    assert plan.layer("PP_Grid").opacity == LayerOpacity("Show Grid", ("Grid Opacity", "Global Opacity"))
    assert "Grid Elements Opacity" not in [c.name for c in plan.controls]


def test_grid_opacity_master_follows_profile():
    assert grid_opacity(Profile.EXTENDED).factors == ("Grid Opacity", "Grid Elements Opacity")
    assert grid_opacity(Profile.MINIMAL).factors == ("Grid Opacity", "Global Opacity")


def test_grid_elements_are_grouped_by_family():
    plan = plan_for(square_data())
    groups = [e.group for e in plan.layer("PP_Grid").elements]
    assert groups == ["V_Lines", "V_Lines", "H_Lines", "H_Lines"]


def test_anchor_dots_and_labels():
    plan = plan_for(square_data())
    anchor = plan.layer("PP_Anchors").elements[0]
    assert anchor.shape is Shape.RECT
    assert anchor.slots["size"] == ControlValue("Anchor Size", pair=True)

    label = plan.layer("PP_Label_0_0")
    assert label.kind is LayerKind.TEXT
    assert label.slots["font_size"] == ControlValue("Label Size")
    assert label.position is label.slots["position"]


def test_construction_styles():
    plan = plan_for(diamond_data())
    rays = plan.layer("PP_Tangents")
    assert rays.opacity.constant == 20.0
    assert rays.elements[0].dashes == (4.0, 6.0)
    circles = plan.layer("PP_Circumcircles")
    assert circles.elements[0].shape is Shape.ELLIPSE
    assert circles.opacity.factors == ("Grid Elements Opacity", "Circumcircle Opacity")
    widths = [e.slots["stroke_width"] for e in plan.layer("PP_OffsetContours").elements]
    assert widths == [0.5, 0.4, 0.3]


def test_element_count_counts_text_layers():
    plan = plan_for(square_data())
    # 4 anchors, 4 labels, 1 outline, 4 grid lines, 1 circle, 1 diagonal, 3 contours
    assert plan.element_count == 18


class TestVertexBudget:
    def test_at_threshold(self):
        check_vertex_budget(120, 120)

    def test_above_threshold(self):
        with pytest.raises(PerformanceWarning) as info:
            check_vertex_budget(121, 120)
        assert info.value.vertex_count == 121
        assert info.value.threshold == 120

    def test_confirmed(self):
        seen = []
        check_vertex_budget(121, 120, confirm=lambda n: seen.append(n) or True)
        assert seen == [121]

    def test_declined(self):
        with pytest.raises(PerformanceWarning):
            check_vertex_budget(500, 120, confirm=lambda n: False)
