"""GenerationContext: the single mutable state object flowing through all constructors.

Per-path snapshots → PathDescriptor
Generated elements → GenerationContext.elements, grouped by category
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pathanatomy.engine.config import GenerationConfig
from pathanatomy.engine.frames import IDENTITY, AffineFrame, apply_frames, apply_frames_vector
from pathanatomy.engine.identity import Category, ElementId
from pathanatomy.utils.geometry import Extents


def _as_points(values: Any) -> NDArray[np.float64]:
    arr = np.asarray(values, dtype=np.float64)
    if arr.size == 0:
        return np.empty((0, 2))
    return arr.reshape(-1, 2)


@dataclass
class PathData:
    """Vertices with in/out tangents relative to their vertex."""

    vertices: NDArray[np.float64]
    in_tangents: NDArray[np.float64] | None = None
    out_tangents: NDArray[np.float64] | None = None
    closed: bool = False

    def __post_init__(self) -> None:
        self.vertices = _as_points(self.vertices)
        n = len(self.vertices)
        self.in_tangents = np.zeros((n, 2)) if self.in_tangents is None else _as_points(self.in_tangents)
        self.out_tangents = np.zeros((n, 2)) if self.out_tangents is None else _as_points(self.out_tangents)
        if len(self.in_tangents) != n or len(self.out_tangents) != n:
            raise ValueError(
                f"Path has {n} vertices but {len(self.in_tangents)} in-tangents "
                f"and {len(self.out_tangents)} out-tangents"
            )
        self.closed = bool(self.closed)

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def segment_count(self) -> int:
        n = len(self.vertices)
        if n == 0:
            return 0
        return n if self.closed else n - 1

    def segments(self) -> list[tuple[int, int]]:
        n = len(self.vertices)
        return [(i, (i + 1) % n) for i in range(self.segment_count)]

    def tangent(self, vertex: int, kind: str) -> NDArray[np.float64]:
        return self.in_tangents[vertex] if kind == "in" else self.out_tangents[vertex]

    def copy(self) -> PathData:
        return PathData(self.vertices.copy(), self.in_tangents.copy(), self.out_tangents.copy(), self.closed)

    def transformed(self, frames) -> PathData:
        """Same path mapped through ``frames`` (innermost first)."""
        return PathData(
            apply_frames(self.vertices, frames),
            apply_frames_vector(self.in_tangents, frames),
            apply_frames_vector(self.out_tangents, frames),
            self.closed,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "vertices": self.vertices.tolist(),
            "in_tangents": self.in_tangents.tolist(),
            "out_tangents": self.out_tangents.tolist(),
            "closed": self.closed,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PathData):
            return NotImplemented
        return (
            self.closed == other.closed
            and self.vertices.shape == other.vertices.shape
            and np.allclose(self.vertices, other.vertices)
            and np.allclose(self.in_tangents, other.in_tangents)
            and np.allclose(self.out_tangents, other.out_tangents)
        )


@dataclass(frozen=True)
class FrameRef:
    """Live frame address: a layer, or a group inside it (groups outer → inner)."""

    layer: str
    groups: tuple[str, ...] = ()


@dataclass(frozen=True)
class PathAddress:
    layer: str
    groups: tuple[str, ...]
    shape: str

    def frame_refs(self) -> tuple[FrameRef, ...]:
        """Enclosing frames innermost first, owning layer last."""
        refs = [FrameRef(self.layer, self.groups[:depth]) for depth in range(len(self.groups), 0, -1)]
        refs.append(FrameRef(self.layer))
        return tuple(refs)


@dataclass(frozen=True)
class PathSource:
    """Where a binding reads its path from, and which frames map it to composition space.

    A frozen source has no frames: its stored values already are in
    composition space.
    """

    address: PathAddress
    frames: tuple[FrameRef, ...] = ()

    @property
    def frozen(self) -> bool:
        return not self.frames


@dataclass(frozen=True)
class AncestorGroup:
    name: str
    frame: AffineFrame


@dataclass
class PathDescriptor:
    index: int
    address: PathAddress
    data: PathData
    # Innermost first
    ancestors: tuple[AncestorGroup, ...] = ()
    owner: AffineFrame = IDENTITY

    @property
    def frames(self) -> list[AffineFrame]:
        return [g.frame for g in self.ancestors] + [self.owner]

    @property
    def source(self) -> PathSource:
        return PathSource(self.address, self.address.frame_refs())

    def world_vertices(self) -> NDArray[np.float64]:
        return apply_frames(self.data.vertices, self.frames)

    def world_data(self) -> PathData:
        return self.data.transformed(self.frames)


@dataclass
class ConstructedElement:
    """One generated element: slots hold a binding or a static value."""

    identity: ElementId
    slots: dict[str, Any] = field(default_factory=dict)
    # Sort key used by cap policies (segment length, tangent magnitude, ...)
    metric: float = 0.0

    @property
    def name(self) -> str:
        return self.identity.name


@dataclass
class GenerationContext:
    """Shared state flowing through the constructor pipeline."""

    paths: list[PathDescriptor] = field(default_factory=list)
    config: GenerationConfig = field(default_factory=GenerationConfig)

    # Composition-space vertex snapshot per path index
    world_vertices: dict[int, NDArray[np.float64]] = field(default_factory=dict)
    world_paths: dict[int, PathData] = field(default_factory=dict)
    # Grid line extents
    extents: Extents | None = None
    # Diagonal of the (unpadded) world bounding box, spans floored at 1
    diagonal: float = 0.0

    elements: dict[Category, list[ConstructedElement]] = field(default_factory=dict)

    # --- Pipeline metadata ---
    completed_constructors: set[str] = field(default_factory=set)

    @property
    def vertex_count(self) -> int:
        return sum(p.data.vertex_count for p in self.paths)

    def add(self, element: ConstructedElement) -> None:
        self.elements.setdefault(element.identity.category, []).append(element)

    def of(self, category: Category) -> list[ConstructedElement]:
        return self.elements.get(category, [])

    def all_elements(self) -> list[ConstructedElement]:
        return [e for items in self.elements.values() for e in items]
