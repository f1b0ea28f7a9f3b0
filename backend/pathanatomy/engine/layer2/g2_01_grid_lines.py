"""G2.01: Grid Lines.

Vertical and horizontal construction lines through composition-space vertex
coordinates. Near-duplicate coordinates collapse to the first vertex seen
(tolerance max(6, 4% of the bbox width), both axes), at most 18 per axis.
Vertical then horizontal lines draw on in one stagger sequence.
"""

from __future__ import annotations

from pathanatomy.engine.bindings import Axis, GridLine, Reveal
from pathanatomy.engine.choreography import Output, Phase
from pathanatomy.engine.context import ConstructedElement, GenerationContext
from pathanatomy.engine.identity import Category, ElementId
from pathanatomy.engine.registry import Stage, constructor
from pathanatomy.utils.geometry import dedup_axis


@constructor(
    id="G2.01",
    stage=Stage.GRID,
    dependencies=["G0.01"],
    description="Deduplicated vertical/horizontal grid lines",
    tags={"always"},
)
def grid_lines(ctx: GenerationContext) -> None:
    if ctx.extents is None:
        return
    cfg = ctx.config

    refs = [
        (path, v)
        for path in ctx.paths
        for v in range(path.data.vertex_count)
    ]
    xs = [float(ctx.world_vertices[p.index][v][0]) for p, v in refs]
    ys = [float(ctx.world_vertices[p.index][v][1]) for p, v in refs]

    width = max(1.0, max(xs) - min(xs))
    tol = max(cfg.grid_dedup_min_tolerance, width * cfg.grid_dedup_ratio)
    kept_x = dedup_axis(xs, tol, cfg.grid_line_cap)
    kept_y = dedup_axis(ys, tol, cfg.grid_line_cap)

    ext = ctx.extents
    total = len(kept_x) + len(kept_y)
    idx = 0
    for axis, category, kept, low, high in (
        (Axis.VERTICAL, Category.GRID_V, kept_x, ext.y_min, ext.y_max),
        (Axis.HORIZONTAL, Category.GRID_H, kept_y, ext.x_min, ext.x_max),
    ):
        for k in kept:
            path, v = refs[k]
            ctx.add(ConstructedElement(
                identity=ElementId(category, path.index, (v,)),
                slots={
                    "path": GridLine(path.source, v, axis, low, high),
                    "trim": Reveal(Phase.GRID, Output.DRAW, idx, total),
                },
            ))
            idx += 1
