"""G1.03: Tangent Handles.

For every non-zero in/out tangent: a dot at the handle tip and a dashed line
from the vertex to it. Dot and line share one slot of the handle stagger
sequence (in before out, per vertex).
"""

from __future__ import annotations

import numpy as np

from pathanatomy.engine.bindings import HandleLine, Reveal, VertexPoint
from pathanatomy.engine.choreography import Output, Phase
from pathanatomy.engine.context import ConstructedElement, GenerationContext, PathDescriptor
from pathanatomy.engine.identity import Category, ElementId, Tangent
from pathanatomy.engine.registry import Stage, constructor


def _handles(path: PathDescriptor) -> list[tuple[int, Tangent]]:
    found = []
    for v in range(path.data.vertex_count):
        for kind in (Tangent.IN, Tangent.OUT):
            if np.any(path.data.tangent(v, kind) != 0):
                found.append((v, kind))
    return found


@constructor(
    id="G1.03",
    stage=Stage.ANATOMY,
    dependencies=["G0.01"],
    description="Handle dots and handle lines per non-zero tangent",
    tags={"always"},
)
def handles(ctx: GenerationContext) -> None:
    per_path = [(path, _handles(path)) for path in ctx.paths]
    total = sum(len(h) for _, h in per_path)
    idx = 0
    for path, found in per_path:
        source = path.source
        for v, kind in found:
            ctx.add(ConstructedElement(
                identity=ElementId(Category.HANDLE, path.index, (v,), tangent=kind),
                slots={
                    "position": VertexPoint(source, v, kind),
                    "scale": Reveal(Phase.HANDLE, Output.POP, idx, total),
                },
            ))
            ctx.add(ConstructedElement(
                identity=ElementId(Category.HANDLE_LINE, path.index, (v,), tangent=kind),
                slots={
                    "path": HandleLine(source, v, kind),
                    "trim": Reveal(Phase.HANDLE, Output.DRAW, idx, total),
                },
            ))
            idx += 1
