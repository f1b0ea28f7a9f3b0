"""G1.01: Outlines.

One live copy of every source path in composition space. Outlines draw on
together (no stagger) and are the bake anchor: baking freezes them and
relinks every other element to their frozen values.
"""

from __future__ import annotations

from pathanatomy.engine.bindings import OutlinePath, Reveal
from pathanatomy.engine.choreography import Output, Phase
from pathanatomy.engine.context import ConstructedElement, GenerationContext
from pathanatomy.engine.identity import Category, ElementId
from pathanatomy.engine.registry import Stage, constructor


@constructor(
    id="G1.01",
    stage=Stage.ANATOMY,
    dependencies=["G0.01"],
    description="Live outline per path",
    tags={"always"},
)
def outlines(ctx: GenerationContext) -> None:
    for path in ctx.paths:
        ctx.add(ConstructedElement(
            identity=ElementId(Category.OUTLINE, path.index),
            slots={
                "path": OutlinePath(path.source),
                "trim": Reveal(Phase.OUTLINE, Output.DRAW),
            },
        ))
