"""G2.02: Diagonal Guides.

Straight-ish segments with a clearly diagonal direction become long static
guide lines through the segment midpoint. A segment qualifies when it is at
least 12 long, both attached tangents are within 15% of its length, and its
folded angle is more than 5° away from horizontal and vertical. Guides
within 4° of an earlier one are dropped; at most 6 are kept.

Guides are static: they are not re-derived when the source moves.
"""

from __future__ import annotations

import math

import numpy as np

from pathanatomy.engine.bindings import Reveal
from pathanatomy.engine.choreography import Output, Phase
from pathanatomy.engine.context import ConstructedElement, GenerationContext, PathData
from pathanatomy.engine.identity import Category, ElementId
from pathanatomy.engine.registry import Stage, constructor
from pathanatomy.utils.geometry import fold_angle, segment_angle


@constructor(
    id="G2.02",
    stage=Stage.GRID,
    dependencies=["G0.01"],
    description="Static diagonal guide lines",
    tags={"always"},
)
def diagonal_guides(ctx: GenerationContext) -> None:
    cfg = ctx.config
    guides: list[tuple[float, np.ndarray, int, int, int]] = []

    for path in ctx.paths:
        data = path.data
        world = ctx.world_vertices[path.index]
        for a, b in data.segments():
            va, vb = world[a], world[b]
            seg_len = float(np.hypot(*(vb - va)))
            if seg_len < cfg.diagonal_min_length:
                continue
            limit = seg_len * cfg.diagonal_tangent_ratio
            if np.hypot(*data.out_tangents[a]) > limit or np.hypot(*data.in_tangents[b]) > limit:
                continue
            ang = fold_angle(segment_angle(va, vb))
            if abs(ang) < cfg.diagonal_axis_tolerance or abs(abs(ang) - 90.0) < cfg.diagonal_axis_tolerance:
                continue
            if any(abs(g[0] - ang) <= cfg.diagonal_dedup_tolerance for g in guides):
                continue
            if len(guides) >= cfg.diagonal_cap:
                continue
            guides.append((ang, (va + vb) * 0.5, path.index, a, b))

    half = ctx.diagonal * cfg.diagonal_extent_ratio
    for n, (ang, mid, p, a, b) in enumerate(guides):
        rad = math.radians(ang)
        direction = np.array([math.cos(rad), math.sin(rad)])
        ctx.add(ConstructedElement(
            identity=ElementId(Category.DIAGONAL, p, (a, b), ordinal=n),
            slots={
                "path": PathData(np.vstack([mid - direction * half, mid + direction * half])),
                "trim": Reveal(Phase.GRID, Output.DRAW, n, len(guides)),
            },
            metric=ang,
        ))
