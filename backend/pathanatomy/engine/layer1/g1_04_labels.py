"""G1.04: Coordinate Labels.

A text element per vertex showing its rounded composition-space position,
lifted above the vertex and popped in after the anchors.
"""

from __future__ import annotations

from pathanatomy.engine.bindings import LabelPosition, LabelText, Reveal
from pathanatomy.engine.choreography import Output, Phase
from pathanatomy.engine.context import ConstructedElement, GenerationContext
from pathanatomy.engine.identity import Category, ElementId
from pathanatomy.engine.registry import Stage, constructor


@constructor(
    id="G1.04",
    stage=Stage.ANATOMY,
    dependencies=["G0.01"],
    description="Coordinate label per vertex",
    tags={"always"},
)
def labels(ctx: GenerationContext) -> None:
    total = ctx.vertex_count
    lift = ctx.config.label_lift
    idx = 0
    for path in ctx.paths:
        source = path.source
        for v in range(path.data.vertex_count):
            ctx.add(ConstructedElement(
                identity=ElementId(Category.LABEL, path.index, (v,)),
                slots={
                    "text": LabelText(source, v),
                    "position": LabelPosition(source, v, lift=lift),
                    "scale": Reveal(Phase.LABEL, Output.POP, idx, total, scale_control="Label Scale"),
                },
            ))
            idx += 1
