"""G3.04: Offset Contours.

Three concentric offsets of every closed path (3+ vertices), spaced at
1, 2.5 and 5 × Contour Spacing with fading opacity and stroke. A level is
visible only while Contour Count reaches it.
"""

from __future__ import annotations

from pathanatomy.engine.bindings import ContourLevelOpacity, ControlValue, OutlinePath, Reveal
from pathanatomy.engine.choreography import Output, Phase
from pathanatomy.engine.context import ConstructedElement, GenerationContext
from pathanatomy.engine.identity import Category, ElementId
from pathanatomy.engine.registry import Stage, constructor


@constructor(
    id="G3.04",
    stage=Stage.CONSTRUCTION,
    dependencies=["G0.01"],
    description="Offset contours around closed paths",
    tags={"construction", "triangles"},
)
def offset_contours(ctx: GenerationContext) -> None:
    levels = ctx.config.contour_levels
    eligible = [p for p in ctx.paths if p.data.closed and p.data.vertex_count >= 3]
    total = len(eligible) * len(levels)
    idx = 0
    for path in eligible:
        for level, style in enumerate(levels):
            ctx.add(ConstructedElement(
                identity=ElementId(Category.CONTOUR, path.index, ordinal=level),
                slots={
                    "path": OutlinePath(path.source),
                    "offset": ControlValue("Contour Spacing", factor=style.spacing_multiplier),
                    "opacity": ContourLevelOpacity(level, style.opacity),
                    "trim": Reveal(Phase.CONTOUR, Output.DRAW, idx, total),
                },
                metric=style.stroke_width,
            ))
            idx += 1
