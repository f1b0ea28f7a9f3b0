"""Bindings: the structured formula IR attached to generated properties.

A binding is a pure function of live source geometry, live frames and
controller values. ``evaluate`` computes it numerically against a
``BindingEnvironment``; ``pathanatomy.engine.expression`` serializes the same
binding to host expression text. Rebinding swaps the ``PathSource`` and keeps
everything else.
"""

from __future__ import annotations

import dataclasses
import enum
import math
from dataclasses import dataclass
from typing import Any, Protocol

import numpy as np
from numpy.typing import NDArray

from pathanatomy.engine.choreography import ChoreographyParameters, Output, Phase, reveal
from pathanatomy.engine.context import FrameRef, PathAddress, PathData, PathSource
from pathanatomy.engine.controls import ControlParameters
from pathanatomy.engine.frames import AffineFrame, apply_frames
from pathanatomy.engine.identity import Tangent
from pathanatomy.utils.geometry import circumcircle, round_half_up

# Direction vectors shorter than this are not normalized
MIN_DIRECTION = 0.001


class BindingEnvironment(Protocol):
    controls: ControlParameters

    def path(self, address: PathAddress) -> PathData: ...

    def frame(self, ref: FrameRef) -> AffineFrame: ...


class Axis(str, enum.Enum):
    VERTICAL = "v"
    HORIZONTAL = "h"


class Binding:
    """Base class. Source-bound subclasses declare a ``source`` field."""

    def evaluate(self, env: BindingEnvironment) -> Any:
        raise NotImplementedError

    @property
    def source_bound(self) -> bool:
        return getattr(self, "source", None) is not None

    def rebind(self, source: PathSource) -> Binding:
        if not self.source_bound:
            return self
        return dataclasses.replace(self, source=source)


def _resolve(env: BindingEnvironment, source: PathSource) -> tuple[PathData, list[AffineFrame]]:
    data = env.path(source.address)
    frames = [env.frame(ref) for ref in source.frames]
    return data, frames


def _world(env: BindingEnvironment, source: PathSource, vertex: int, tangent: Tangent | None = None) -> NDArray[np.float64]:
    data, frames = _resolve(env, source)
    local = data.vertices[vertex]
    if tangent is not None:
        local = local + data.tangent(vertex, tangent)
    return apply_frames(local, frames)


def _world_points(env: BindingEnvironment, source: PathSource, vertices: tuple[int, ...]) -> list[NDArray[np.float64]]:
    data, frames = _resolve(env, source)
    return [apply_frames(data.vertices[v], frames) for v in vertices]


def _segment(a: NDArray[np.float64], b: NDArray[np.float64]) -> PathData:
    return PathData(np.vstack([a, b]), closed=False)


# ---------------------------------------------------------------------------
# Controller-driven values
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ControlValue(Binding):
    """A controller value, optionally scaled or duplicated into a size pair."""

    name: str
    factor: float = 1.0
    pair: bool = False

    def evaluate(self, env: BindingEnvironment) -> Any:
        value = env.controls.get(self.name)
        if self.factor != 1.0:
            value = float(value) * self.factor
        if self.pair:
            return np.array([float(value), float(value)])
        if isinstance(value, (tuple, list)):
            return np.asarray(value, dtype=np.float64)
        return value


@dataclass(frozen=True)
class LayerOpacity(Binding):
    """``toggle ? constant × Π(factor / 100) : 0``."""

    toggle: str | None
    factors: tuple[str, ...] = ()
    constant: float = 100.0

    def evaluate(self, env: BindingEnvironment) -> float:
        if self.toggle is not None and not env.controls.get(self.toggle):
            return 0.0
        value = self.constant
        for name in self.factors:
            value *= float(env.controls.get(name)) / 100.0
        return value


@dataclass(frozen=True)
class ContourLevelOpacity(Binding):
    level: int
    opacity: float

    def evaluate(self, env: BindingEnvironment) -> float:
        return self.opacity if float(env.controls.get("Contour Count")) >= self.level + 1 else 0.0


@dataclass(frozen=True)
class Reveal(Binding):
    """Draw fraction or pop scale of one element in a choreography phase."""

    phase: Phase
    output: Output
    index: int = 0
    total: int = 1
    scale_control: str | None = None

    def evaluate(self, env: BindingEnvironment) -> Any:
        params = ChoreographyParameters.from_controls(env.controls)
        eased = reveal(self.phase, params, self.index, self.total)
        if self.output is Output.DRAW:
            return eased * 100.0
        s = eased * 100.0
        if self.scale_control is not None:
            s *= float(env.controls.get(self.scale_control)) / 100.0
        return np.array([s, s])


# ---------------------------------------------------------------------------
# Source-bound geometry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VertexPoint(Binding):
    """Composition-space vertex, or the tip of one of its tangent handles."""

    source: PathSource
    vertex: int
    tangent: Tangent | None = None

    def evaluate(self, env: BindingEnvironment) -> NDArray[np.float64]:
        return _world(env, self.source, self.vertex, self.tangent)


@dataclass(frozen=True)
class HandleLine(Binding):
    source: PathSource
    vertex: int
    tangent: Tangent

    def evaluate(self, env: BindingEnvironment) -> PathData:
        data, frames = _resolve(env, self.source)
        v = data.vertices[self.vertex]
        tip = v + data.tangent(self.vertex, self.tangent)
        return _segment(apply_frames(v, frames), apply_frames(tip, frames))


@dataclass(frozen=True)
class OutlinePath(Binding):
    """The whole source path in composition space."""

    source: PathSource

    def evaluate(self, env: BindingEnvironment) -> PathData:
        data, frames = _resolve(env, self.source)
        return data.transformed(frames)


@dataclass(frozen=True)
class GridLine(Binding):
    """Axis-aligned line through a vertex spanning fixed extents."""

    source: PathSource
    vertex: int
    axis: Axis
    low: float
    high: float

    def evaluate(self, env: BindingEnvironment) -> PathData:
        cp = _world(env, self.source, self.vertex)
        if self.axis is Axis.VERTICAL:
            return _segment(np.array([cp[0], self.low]), np.array([cp[0], self.high]))
        return _segment(np.array([self.low, cp[1]]), np.array([self.high, cp[1]]))

    def with_extents(self, low: float, high: float) -> GridLine:
        return dataclasses.replace(self, low=low, high=high)


@dataclass(frozen=True)
class LabelText(Binding):
    source: PathSource
    vertex: int

    def evaluate(self, env: BindingEnvironment) -> str:
        cp = _world(env, self.source, self.vertex)
        return f"({round_half_up(cp[0])}, {round_half_up(cp[1])})"


@dataclass(frozen=True)
class LabelPosition(Binding):
    source: PathSource
    vertex: int
    offset_control: str = "Labels Offset"
    lift: float = 14.0

    def evaluate(self, env: BindingEnvironment) -> NDArray[np.float64]:
        cp = _world(env, self.source, self.vertex)
        off = np.asarray(env.controls.get(self.offset_control), dtype=np.float64)
        return np.array([cp[0] + off[0], cp[1] + off[1] - self.lift])


@dataclass(frozen=True)
class Circumcenter(Binding):
    source: PathSource
    vertices: tuple[int, int, int]
    eps: float = 0.001

    def evaluate(self, env: BindingEnvironment) -> NDArray[np.float64]:
        a, b, c = _world_points(env, self.source, self.vertices)
        center, _ = circumcircle(a, b, c, self.eps)
        return center


@dataclass(frozen=True)
class CircumcircleSize(Binding):
    source: PathSource
    vertices: tuple[int, int, int]
    eps: float = 0.001

    def evaluate(self, env: BindingEnvironment) -> NDArray[np.float64]:
        a, b, c = _world_points(env, self.source, self.vertices)
        _, r = circumcircle(a, b, c, self.eps)
        return np.array([2.0 * r, 2.0 * r])


@dataclass(frozen=True)
class TangentRay(Binding):
    """Ray from a vertex along its tangent direction, ``length_control`` long."""

    source: PathSource
    vertex: int
    tangent: Tangent
    length_control: str = "Tangent Length"

    def evaluate(self, env: BindingEnvironment) -> PathData:
        cv = _world(env, self.source, self.vertex)
        ce = _world(env, self.source, self.vertex, self.tangent)
        direction = ce - cv
        d = math.hypot(direction[0], direction[1])
        if d > MIN_DIRECTION:
            direction = direction / d
        else:
            direction = np.zeros(2)
        length = float(env.controls.get(self.length_control))
        return _segment(cv, cv + direction * length)


@dataclass(frozen=True)
class EdgePath(Binding):
    source: PathSource
    vertices: tuple[int, int]

    def evaluate(self, env: BindingEnvironment) -> PathData:
        a, b = _world_points(env, self.source, self.vertices)
        return _segment(a, b)


@dataclass(frozen=True)
class BisectorPath(Binding):
    """Perpendicular through the midpoint of a segment, ± ``length_control``."""

    source: PathSource
    vertices: tuple[int, int]
    length_control: str = "Bisector Length"

    def evaluate(self, env: BindingEnvironment) -> PathData:
        a, b = _world_points(env, self.source, self.vertices)
        mid = (a + b) / 2.0
        e = b - a
        el = math.hypot(e[0], e[1])
        if el < MIN_DIRECTION:
            return _segment(mid, mid.copy())
        normal = np.array([-e[1] / el, e[0] / el])
        length = float(env.controls.get(self.length_control))
        return _segment(mid - normal * length, mid + normal * length)
