"""G3.01: Circumcircles.

For each closed path with at least 3 vertices, the vertex triple spanning
the largest triangle (exhaustive search) gets its circumscribed circle.
Triangles whose |det| (twice the area) is below 10 are skipped; at most 6
circles in total.
"""

from __future__ import annotations

import logging

from pathanatomy.engine.bindings import Circumcenter, CircumcircleSize, Reveal
from pathanatomy.engine.choreography import Output, Phase
from pathanatomy.engine.context import ConstructedElement, GenerationContext
from pathanatomy.engine.identity import Category, ElementId
from pathanatomy.engine.registry import Stage, constructor
from pathanatomy.utils.geometry import max_area_triple

logger = logging.getLogger(__name__)


@constructor(
    id="G3.01",
    stage=Stage.CONSTRUCTION,
    dependencies=["G0.01"],
    description="Circumcircle of the largest vertex triangle per closed path",
    tags={"construction", "triangles"},
)
def circumcircles(ctx: GenerationContext) -> None:
    cfg = ctx.config
    picked = []
    for path in ctx.paths:
        if not path.data.closed or path.data.vertex_count < 3:
            continue
        best = max_area_triple(ctx.world_vertices[path.index])
        if best is None:
            continue
        triple, area = best
        if area < cfg.circumcircle_min_area:
            logger.debug("Path %d: largest triangle |det| %.2f too small", path.index, area)
            continue
        picked.append((path, triple, area))

    picked = picked[: cfg.circumcircle_cap]
    for idx, (path, triple, area) in enumerate(picked):
        source = path.source
        ctx.add(ConstructedElement(
            identity=ElementId(Category.CIRCUMCIRCLE, path.index, triple),
            slots={
                "position": Circumcenter(source, triple, cfg.circumcircle_det_eps),
                "size": CircumcircleSize(source, triple, cfg.circumcircle_det_eps),
                "scale": Reveal(Phase.CIRCUMCIRCLE, Output.POP, idx, len(picked)),
            },
            metric=area,
        ))
