"""G3.02: Tangent Rays.

Long rays along the strongest tangent handles: local tangent magnitude > 5,
out before in per vertex, sorted by magnitude (stable), at most 12.
"""

from __future__ import annotations

import numpy as np

from pathanatomy.engine.bindings import Reveal, TangentRay
from pathanatomy.engine.choreography import Output, Phase
from pathanatomy.engine.context import ConstructedElement, GenerationContext
from pathanatomy.engine.identity import Category, ElementId, Tangent
from pathanatomy.engine.registry import Stage, constructor


@constructor(
    id="G3.02",
    stage=Stage.CONSTRUCTION,
    dependencies=["G0.01"],
    description="Rays along the longest tangent handles",
    tags={"construction"},
)
def tangent_rays(ctx: GenerationContext) -> None:
    cfg = ctx.config
    candidates = []
    for path in ctx.paths:
        for v in range(path.data.vertex_count):
            for kind in (Tangent.OUT, Tangent.IN):
                length = float(np.hypot(*path.data.tangent(v, kind)))
                if length > cfg.tangent_min_length:
                    candidates.append((length, path, v, kind))

    candidates.sort(key=lambda c: c[0], reverse=True)
    candidates = candidates[: cfg.tangent_ray_cap]
    for idx, (length, path, v, kind) in enumerate(candidates):
        ctx.add(ConstructedElement(
            identity=ElementId(Category.TANGENT_RAY, path.index, (v,), tangent=kind),
            slots={
                "path": TangentRay(path.source, v, kind),
                "trim": Reveal(Phase.TANGENT_RAY, Output.DRAW, idx, len(candidates)),
            },
            metric=length,
        ))
