"""Constructor registry.

Each geometry constructor is a plain function that reads the world snapshot
from the ``GenerationContext`` and appends ``ConstructedElement``s to it:

    @constructor(id="G3.05", stage=Stage.CONSTRUCTION, dependencies=["G0.01"], tags={"construction"})
    def bisectors(ctx: GenerationContext) -> None:
        for path in ctx.paths:
            ctx.add(...)

Constructors live one per module under ``engine/layerN/``; importing the
module registers it.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from pathanatomy.engine.context import GenerationContext

logger = logging.getLogger(__name__)


class Stage(enum.IntEnum):
    SNAPSHOT = 0
    ANATOMY = 1
    GRID = 2
    CONSTRUCTION = 3


@dataclass
class ConstructorSpec:
    id: str
    stage: Stage
    fn: Callable[["GenerationContext"], None]
    dependencies: list[str] = field(default_factory=list)
    # "always", "construction" (profile-gated), "triangles" (needs 3+ vertices)
    tags: set[str] = field(default_factory=set)
    description: str = ""


class ConstructorRegistry:
    def __init__(self) -> None:
        self._constructors: dict[str, ConstructorSpec] = {}

    def register(self, spec: ConstructorSpec) -> None:
        if spec.id in self._constructors:
            raise ValueError(f"Duplicate constructor ID: {spec.id}")
        self._constructors[spec.id] = spec
        logger.debug("Registered %s at stage %s", spec.id, spec.stage.name.lower())

    def get(self, constructor_id: str) -> ConstructorSpec:
        return self._constructors[constructor_id]

    def all(self) -> list[ConstructorSpec]:
        """Every constructor, by stage then id."""
        return sorted(self._constructors.values(), key=lambda s: (s.stage, s.id))

    def resolve_order(self, requested_ids: set[str] | None = None) -> list[ConstructorSpec]:
        """Run order for ``requested_ids`` (all when None), dependencies first.

        A requested constructor pulls in what it depends on. Independent
        constructors keep stage/id order. Unknown dependencies and cycles
        raise ValueError.
        """
        ordered: list[ConstructorSpec] = []
        state: dict[str, str] = {}

        def visit(cid: str, chain: tuple[str, ...]) -> None:
            mark = state.get(cid)
            if mark == "done":
                return
            if mark == "active":
                raise ValueError(f"Circular dependency detected: {' -> '.join(chain + (cid,))}")
            spec = self._constructors.get(cid)
            if spec is None:
                raise ValueError(f"Unknown dependency {cid} required by {chain[-1]}")
            state[cid] = "active"
            for dep in sorted(spec.dependencies):
                visit(dep, chain + (cid,))
            state[cid] = "done"
            ordered.append(spec)

        for spec in self.all():
            if requested_ids is None or spec.id in requested_ids:
                visit(spec.id, ())
        return ordered

    @property
    def count(self) -> int:
        return len(self._constructors)


_registry = ConstructorRegistry()


def get_registry() -> ConstructorRegistry:
    return _registry


def constructor(
    *,
    id: str,
    stage: Stage,
    dependencies: list[str] | None = None,
    tags: set[str] | None = None,
    description: str = "",
):
    """Register the decorated function as a constructor."""

    def decorator(fn: Callable[["GenerationContext"], None]):
        _registry.register(ConstructorSpec(
            id=id,
            stage=stage,
            fn=fn,
            dependencies=list(dependencies or []),
            tags=set(tags or ()),
            description=description,
        ))
        return fn

    return decorator
