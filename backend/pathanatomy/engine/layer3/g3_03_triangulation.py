"""G3.03: Delaunay Diagonals.

Triangulate each path's composition-space vertices (at least 3) and keep
the edges that do not run along the path. Edges from all paths are sorted
by length, longest first; at most 15.
"""

from __future__ import annotations

import numpy as np

from pathanatomy.engine.bindings import EdgePath, Reveal
from pathanatomy.engine.choreography import Output, Phase
from pathanatomy.engine.context import ConstructedElement, GenerationContext
from pathanatomy.engine.delaunay import is_adjacent, triangle_edges, triangulate
from pathanatomy.engine.identity import Category, ElementId
from pathanatomy.engine.registry import Stage, constructor


@constructor(
    id="G3.03",
    stage=Stage.CONSTRUCTION,
    dependencies=["G0.01"],
    description="Non-adjacent Delaunay edges",
    tags={"construction", "triangles"},
)
def triangulation(ctx: GenerationContext) -> None:
    cfg = ctx.config
    edges = []
    for path in ctx.paths:
        nv = path.data.vertex_count
        if nv < 3:
            continue
        world = ctx.world_vertices[path.index]
        triangles = triangulate(world, cfg.delaunay_margin_ratio, cfg.delaunay_eps)
        for a, b in triangle_edges(triangles):
            if is_adjacent(a, b, nv, path.data.closed):
                continue
            edges.append((float(np.hypot(*(world[b] - world[a]))), path, a, b))

    edges.sort(key=lambda e: e[0], reverse=True)
    edges = edges[: cfg.triangulation_cap]
    for idx, (length, path, a, b) in enumerate(edges):
        ctx.add(ConstructedElement(
            identity=ElementId(Category.TRIANGULATION, path.index, (a, b)),
            slots={
                "path": EdgePath(path.source, (a, b)),
                "trim": Reveal(Phase.TRIANGULATION, Output.DRAW, idx, len(edges)),
            },
            metric=length,
        ))
