"""G3.05: Perpendicular Bisectors.

Perpendiculars through segment midpoints, for segments at least 5 long
whose direction is more than 8° away from horizontal and vertical. Longest
segments first; at most 8.
"""

from __future__ import annotations

import numpy as np

from pathanatomy.engine.bindings import BisectorPath, Reveal
from pathanatomy.engine.choreography import Output, Phase
from pathanatomy.engine.context import ConstructedElement, GenerationContext
from pathanatomy.engine.identity import Category, ElementId
from pathanatomy.engine.registry import Stage, constructor
from pathanatomy.utils.geometry import segment_angle


@constructor(
    id="G3.05",
    stage=Stage.CONSTRUCTION,
    dependencies=["G0.01"],
    description="Perpendicular bisectors of diagonal segments",
    tags={"construction"},
)
def bisectors(ctx: GenerationContext) -> None:
    cfg = ctx.config
    tol = cfg.bisector_angle_tolerance
    found = []
    for path in ctx.paths:
        world = ctx.world_vertices[path.index]
        for a, b in path.data.segments():
            seg_len = float(np.hypot(*(world[b] - world[a])))
            if seg_len < cfg.bisector_min_length:
                continue
            ang = abs(segment_angle(world[a], world[b]))
            if ang < tol or abs(ang - 180.0) < tol or abs(ang - 90.0) < tol:
                continue
            found.append((seg_len, path, a, b))

    found.sort(key=lambda f: f[0], reverse=True)
    found = found[: cfg.bisector_cap]
    for idx, (seg_len, path, a, b) in enumerate(found):
        ctx.add(ConstructedElement(
            identity=ElementId(Category.BISECTOR, path.index, (a, b)),
            slots={
                "path": BisectorPath(path.source, (a, b)),
                "trim": Reveal(Phase.BISECTOR, Output.DRAW, idx, len(found)),
            },
            metric=seg_len,
        ))
