"""Tests for the geometry constructors, run through the full pipeline."""

import numpy as np
import pytest

from pathanatomy.engine.config import GenerationConfig, Profile
from pathanatomy.engine.context import GenerationContext, PathData
from pathanatomy.engine.extractor import discover_paths
from pathanatomy.engine.identity import Category
from pathanatomy.engine.pipeline import Pipeline
from pathanatomy.host.evaluation import EvalContext
from tests.conftest import comp_with, diamond_data, path_layer, square_data

TRIANGLE = [(0.0, 0.0), (100.0, 0.0), (50.0, 80.0)]


def run(*paths: PathData, config: GenerationConfig | None = None) -> GenerationContext:
    config = config or GenerationConfig()
    comp = comp_with(path_layer(list(paths)))
    descriptors = discover_paths(comp.layers[0], EvalContext(comp))
    return Pipeline(config=config).run(GenerationContext(paths=descriptors, config=config))


def names(ctx: GenerationContext, category: Category) -> list[str]:
    return [e.name for e in ctx.of(category)]


def test_square_anatomy():
    ctx = run(square_data())
    assert names(ctx, Category.OUTLINE) == ["O0"]
    assert names(ctx, Category.ANCHOR) == ["A0_0", "A0_1", "A0_2", "A0_3"]
    assert names(ctx, Category.LABEL) == ["PP_Label_0_0", "PP_Label_0_1", "PP_Label_0_2", "PP_Label_0_3"]
    assert ctx.of(Category.HANDLE) == []


def test_square_grid_lines():
    ctx = run(square_data())
    assert names(ctx, Category.GRID_V) == ["VL_0_0", "VL_0_1"]
    assert names(ctx, Category.GRID_H) == ["HL_0_0", "HL_0_2"]
    assert ctx.extents == (-30.0, 130.0, -30.0, 130.0)


def test_square_constructions():
    ctx = run(square_data())
    assert names(ctx, Category.CIRCUMCIRCLE) == ["CC_0_0_1_2"]
    assert len(ctx.of(Category.TRIANGULATION)) == 1
    assert names(ctx, Category.CONTOUR) == ["OC_0_0", "OC_0_1", "OC_0_2"]
    # Axis-aligned edges produce no guides or bisectors
    assert ctx.of(Category.DIAGONAL) == []
    assert ctx.of(Category.BISECTOR) == []


def test_grid_dedup_collapses_near_duplicates():
    path = PathData(np.array([(0.0, 0.0), (1.0, 10.0), (50.0, 20.0), (51.0, 30.0)]))
    ctx = run(path)
    assert names(ctx, Category.GRID_V) == ["VL_0_0", "VL_0_2"]
    assert len(ctx.of(Category.GRID_H)) == 4


def test_grid_stagger_runs_vertical_then_horizontal():
    ctx = run(square_data())
    reveals = [e.slots["trim"] for e in ctx.of(Category.GRID_V) + ctx.of(Category.GRID_H)]
    assert [r.index for r in reveals] == [0, 1, 2, 3]
    assert all(r.total == 4 for r in reveals)


def test_handles_in_before_out():
    ctx = run(diamond_data())
    assert names(ctx, Category.HANDLE) == ["HI0_2", "HO0_2"]
    assert names(ctx, Category.HANDLE_LINE) == ["LI0_2", "LO0_2"]
    dot, line = ctx.of(Category.HANDLE)[1], ctx.of(Category.HANDLE_LINE)[1]
    assert dot.slots["scale"].index == line.slots["trim"].index == 1


def test_tangent_rays_out_before_in():
    ctx = run(diamond_data())
    assert names(ctx, Category.TANGENT_RAY) == ["TO_0_2", "TI_0_2"]


def test_diagonal_guides_and_bisectors():
    ctx = run(PathData(np.array(TRIANGLE), closed=True))
    assert names(ctx, Category.DIAGONAL) == ["DL0", "DL1"]
    assert names(ctx, Category.BISECTOR) == ["PB_0_1_2", "PB_0_2_0"]
    guide = ctx.of(Category.DIAGONAL)[0].slots["path"]
    length = np.hypot(*(guide.vertices[1] - guide.vertices[0]))
    assert length == pytest.approx(2 * 1.4 * ctx.diagonal)


def test_curved_segments_are_not_guides():
    curved = PathData(
        np.array(TRIANGLE),
        in_tangents=np.array([(0.0, 0.0), (0.0, 0.0), (30.0, 0.0)]),
        out_tangents=np.array([(0.0, 0.0), (0.0, 0.0), (0.0, 0.0)]),
        closed=True,
    )
    ctx = run(curved)
    assert names(ctx, Category.DIAGONAL) == ["DL0"]


def test_collinear_path_gets_no_circumcircle():
    line = PathData(np.array([(0.0, 0.0), (50.0, 50.0), (100.0, 100.0)]), closed=True)
    ctx = run(line)
    assert ctx.of(Category.CIRCUMCIRCLE) == []


def test_small_triangle_keeps_circumcircle_by_determinant():
    # |det| = 16, area = 8
    small = PathData(np.array([(0.0, 0.0), (4.0, 0.0), (0.0, 4.0)]), closed=True)
    ctx = run(small)
    circles = ctx.of(Category.CIRCUMCIRCLE)
    assert len(circles) == 1
    assert circles[0].metric == pytest.approx(16.0)


def test_tiny_triangle_is_skipped():
    tiny = PathData(np.array([(0.0, 0.0), (3.0, 0.0), (0.0, 3.0)]), closed=True)
    assert run(tiny).of(Category.CIRCUMCIRCLE) == []


def test_circumcircle_cap():
    triangles = [
        PathData(np.array([(x, 0.0), (x + 20.0, 0.0), (x + 10.0, 15.0)]), closed=True)
        for x in range(0, 400, 50)
    ]
    ctx = run(*triangles)
    assert len(ctx.of(Category.CIRCUMCIRCLE)) == 6
    assert [e.identity.path_index for e in ctx.of(Category.CIRCUMCIRCLE)] == [0, 1, 2, 3, 4, 5]


def test_triangulation_cap_and_order():
    angles = np.radians(np.arange(0, 360, 30) + 7)
    ring = np.column_stack([np.cos(angles) * 100, np.sin(angles) * 60])
    ctx = run(PathData(ring, closed=True))
    edges = ctx.of(Category.TRIANGULATION)
    assert len(edges) == 12 - 3
    lengths = [e.metric for e in edges]
    assert lengths == sorted(lengths, reverse=True)


def test_minimal_profile_has_no_construction_elements():
    ctx = run(square_data(), config=GenerationConfig(profile=Profile.MINIMAL))
    assert ctx.of(Category.CIRCUMCIRCLE) == []
    assert ctx.of(Category.CONTOUR) == []
    assert len(ctx.of(Category.GRID_V)) == 2
