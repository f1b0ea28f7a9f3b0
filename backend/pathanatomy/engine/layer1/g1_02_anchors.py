"""G1.02: Anchor Points.

A dot per vertex, popped in one global stagger sequence across all paths
in discovery order.
"""

from __future__ import annotations

from pathanatomy.engine.bindings import Reveal, VertexPoint
from pathanatomy.engine.choreography import Output, Phase
from pathanatomy.engine.context import ConstructedElement, GenerationContext
from pathanatomy.engine.identity import Category, ElementId
from pathanatomy.engine.registry import Stage, constructor


@constructor(
    id="G1.02",
    stage=Stage.ANATOMY,
    dependencies=["G0.01"],
    description="Anchor dot per vertex",
    tags={"always"},
)
def anchors(ctx: GenerationContext) -> None:
    total = ctx.vertex_count
    idx = 0
    for path in ctx.paths:
        source = path.source
        for v in range(path.data.vertex_count):
            ctx.add(ConstructedElement(
                identity=ElementId(Category.ANCHOR, path.index, (v,)),
                slots={
                    "position": VertexPoint(source, v),
                    "scale": Reveal(Phase.ANCHOR, Output.POP, idx, total),
                },
            ))
            idx += 1
