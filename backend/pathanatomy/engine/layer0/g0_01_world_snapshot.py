"""G0.01: World Snapshot.

Map every path vertex into composition space once, at build time, and derive
the grid extents: bounding box grown by max(30, 15% of its diagonal),
rounded half-up. Downstream constructors select elements from this snapshot;
the bindings they emit stay live.
"""

from __future__ import annotations

import numpy as np

from pathanatomy.engine.context import GenerationContext
from pathanatomy.engine.registry import Stage, constructor
from pathanatomy.utils.geometry import grid_extents, span_with_diagonal


@constructor(
    id="G0.01",
    stage=Stage.SNAPSHOT,
    description="Composition-space vertex snapshot and grid extents",
    tags={"always"},
)
def world_snapshot(ctx: GenerationContext) -> None:
    for path in ctx.paths:
        world = path.world_data()
        ctx.world_paths[path.index] = world
        ctx.world_vertices[path.index] = world.vertices

    stacked = [v for v in ctx.world_vertices.values() if len(v)]
    if not stacked:
        return
    points = np.vstack(stacked)
    ctx.extents = grid_extents(points, ctx.config.grid_min_pad, ctx.config.grid_pad_ratio)
    ctx.diagonal = span_with_diagonal(points)[4]
