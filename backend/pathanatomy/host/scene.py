"""In-memory host scene graph: compositions, layers, content trees and properties.

A property holds a static value, keyframes, or a binding. Bindings are
evaluated by ``pathanatomy.host.evaluation``; keyframed values interpolate
with temporal ease the way the host does (cubic Bézier in time/value space).
"""

from __future__ import annotations

import copy
import enum
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator

import numpy as np

from pathanatomy.engine.identity import ElementId

logger = logging.getLogger(__name__)

PLUGIN_PREFIX = "PP_"


@dataclass(frozen=True)
class KeyframeEase:
    speed: float = 0.0
    influence: float = 33.0  # percent of the interval


@dataclass
class Keyframe:
    time: float
    value: Any
    ease_in: KeyframeEase | None = None
    ease_out: KeyframeEase | None = None


def _bezier(p0: float, p1: float, p2: float, p3: float, u: float) -> float:
    v = 1.0 - u
    return v * v * v * p0 + 3 * v * v * u * p1 + 3 * v * u * u * p2 + u * u * u * p3


def _interpolate(k0: Keyframe, k1: Keyframe, t: float) -> Any:
    dt = k1.time - k0.time
    v0 = np.asarray(k0.value, dtype=np.float64)
    v1 = np.asarray(k1.value, dtype=np.float64)
    if dt <= 0:
        return k1.value
    if k0.ease_out is None and k1.ease_in is None:
        u = (t - k0.time) / dt
        out = v0 + (v1 - v0) * u
        return float(out) if out.ndim == 0 else out

    slope = (v1 - v0) / dt
    out_ease = k0.ease_out or KeyframeEase(speed=0.0, influence=100.0 / 3.0)
    in_ease = k1.ease_in or KeyframeEase(speed=0.0, influence=100.0 / 3.0)
    # Missing ease on one side means a straight-line handle on that side
    out_speed = slope if k0.ease_out is None else out_ease.speed
    in_speed = slope if k1.ease_in is None else in_ease.speed
    h_out = dt * out_ease.influence / 100.0
    h_in = dt * in_ease.influence / 100.0
    t0, t1 = k0.time, k0.time + h_out
    t2, t3 = k1.time - h_in, k1.time

    lo, hi = 0.0, 1.0
    for _ in range(60):
        mid = (lo + hi) / 2.0
        if _bezier(t0, t1, t2, t3, mid) < t:
            lo = mid
        else:
            hi = mid
    u = (lo + hi) / 2.0

    c1 = v0 + out_speed * h_out
    c2 = v1 - in_speed * h_in
    out = _bezier(v0, c1, c2, v1, u)
    return float(out) if np.ndim(out) == 0 else np.asarray(out)


class Property:
    """Animatable property: static value, keyframes or binding (binding wins)."""

    def __init__(self, value: Any = None, binding: Any = None) -> None:
        self.value = value
        self.binding = binding
        self.keyframes: list[Keyframe] = []

    @property
    def animated(self) -> bool:
        return bool(self.keyframes)

    @property
    def bound(self) -> bool:
        return self.binding is not None

    def set_value(self, value: Any) -> None:
        self.value = value

    def freeze(self, value: Any) -> None:
        """Replace binding and keyframes by a static value."""
        self.binding = None
        self.keyframes = []
        self.value = value

    def add_key(self, time: float, value: Any, ease_in: KeyframeEase | None = None, ease_out: KeyframeEase | None = None) -> Keyframe:
        key = Keyframe(time, value, ease_in, ease_out)
        self.keyframes = [k for k in self.keyframes if k.time != time]
        self.keyframes.append(key)
        self.keyframes.sort(key=lambda k: k.time)
        return key

    def remove_keys(self) -> None:
        self.keyframes = []

    def value_at(self, time: float) -> Any:
        """Static or keyframed value; bindings are evaluated elsewhere."""
        if not self.keyframes:
            return self.value
        keys = self.keyframes
        if time <= keys[0].time:
            return keys[0].value
        if time >= keys[-1].time:
            return keys[-1].value
        for k0, k1 in zip(keys, keys[1:]):
            if k0.time <= time <= k1.time:
                return _interpolate(k0, k1, time)
        return keys[-1].value


class TransformProps:
    def __init__(
        self,
        anchor=(0.0, 0.0),
        position=(0.0, 0.0),
        scale=(100.0, 100.0),
        rotation: float = 0.0,
        opacity: float = 100.0,
    ) -> None:
        self.anchor = Property(tuple(anchor))
        self.position = Property(tuple(position))
        self.scale = Property(tuple(scale))
        self.rotation = Property(float(rotation))
        self.opacity = Property(float(opacity))


# ---------------------------------------------------------------------------
# Content nodes
# ---------------------------------------------------------------------------


@dataclass
class Node:
    name: str


@dataclass
class PathNode(Node):
    path: Property = field(default_factory=Property)


@dataclass
class RectNode(Node):
    size: Property = field(default_factory=lambda: Property((10.0, 10.0)))
    roundness: Property = field(default_factory=lambda: Property(0.0))
    position: Property = field(default_factory=lambda: Property((0.0, 0.0)))


@dataclass
class EllipseNode(Node):
    size: Property = field(default_factory=lambda: Property((10.0, 10.0)))
    position: Property = field(default_factory=lambda: Property((0.0, 0.0)))


@dataclass
class StrokeNode(Node):
    color: Property = field(default_factory=lambda: Property((1.0, 1.0, 1.0)))
    width: Property = field(default_factory=lambda: Property(1.0))
    opacity: Property = field(default_factory=lambda: Property(100.0))
    dashes: tuple[float, ...] = ()


@dataclass
class FillNode(Node):
    color: Property = field(default_factory=lambda: Property((1.0, 1.0, 1.0)))
    opacity: Property = field(default_factory=lambda: Property(100.0))


@dataclass
class TrimNode(Node):
    start: Property = field(default_factory=lambda: Property(0.0))
    end: Property = field(default_factory=lambda: Property(100.0))


@dataclass
class OffsetNode(Node):
    amount: Property = field(default_factory=lambda: Property(0.0))
    line_join: str = "round"


@dataclass
class GroupNode(Node):
    contents: list[Node] = field(default_factory=list)
    transform: TransformProps = field(default_factory=TransformProps)
    identity: ElementId | None = None
    # Slot name → property inside this group, for generated elements
    slots: dict[str, Property] = field(default_factory=dict)

    def content(self, name: str) -> Node | None:
        for node in self.contents:
            if node.name == name:
                return node
        return None


# ---------------------------------------------------------------------------
# Layers and compositions
# ---------------------------------------------------------------------------


class LayerKind(str, enum.Enum):
    SHAPE = "shape"
    TEXT = "text"
    NULL = "null"
    PRECOMP = "precomp"


@dataclass
class TextDocument:
    text: Property = field(default_factory=lambda: Property(""))
    font: str = "ArialMT"
    font_size: Property = field(default_factory=lambda: Property(11.0))
    fill_color: Property = field(default_factory=lambda: Property((1.0, 1.0, 1.0)))


@dataclass
class Layer:
    name: str
    kind: LayerKind = LayerKind.SHAPE
    contents: list[Node] = field(default_factory=list)
    transform: TransformProps = field(default_factory=TransformProps)
    # Effect name → property, in creation order
    effects: dict[str, Property] = field(default_factory=dict)
    text: TextDocument | None = None
    source: Composition | None = None
    identity: ElementId | None = None
    slots: dict[str, Property] = field(default_factory=dict)

    def content(self, name: str) -> Node | None:
        for node in self.contents:
            if node.name == name:
                return node
        return None

    def effect(self, name: str) -> Property:
        return self.effects[name]

    @property
    def generated(self) -> bool:
        return self.name.startswith(PLUGIN_PREFIX)


class Composition:
    """Ordered layer stack; index 0 is the top layer."""

    def __init__(self, name: str = "Comp 1", width: float = 1920.0, height: float = 1080.0, duration: float = 10.0, time: float = 0.0) -> None:
        self.name = name
        self.width = width
        self.height = height
        self.duration = duration
        self.time = time
        self.layers: list[Layer] = []

    def layer(self, name: str) -> Layer | None:
        for lyr in self.layers:
            if lyr.name == name:
                return lyr
        return None

    def index_of(self, layer: Layer) -> int:
        for i, lyr in enumerate(self.layers):
            if lyr is layer:
                return i
        raise ValueError(f"Layer {layer.name} is not in {self.name}")

    def add_layer(self, layer: Layer, index: int = 0) -> Layer:
        self.layers.insert(index, layer)
        return layer

    def remove_layer(self, layer: Layer) -> None:
        self.layers.pop(self.index_of(layer))

    def generated_layers(self) -> list[Layer]:
        return [lyr for lyr in self.layers if lyr.generated]

    @contextmanager
    def transaction(self, label: str = "") -> Iterator[Composition]:
        """Undo group: restores the layer stack if the block raises."""
        snapshot = copy.deepcopy(self.layers)
        try:
            yield self
        except BaseException:
            logger.info("Rolling back %s on %s", label or "transaction", self.name)
            self.layers = snapshot
            raise


def iter_groups(nodes: list[Node]) -> Iterator[GroupNode]:
    """All groups in a content tree, depth-first pre-order."""
    for node in nodes:
        if isinstance(node, GroupNode):
            yield node
            yield from iter_groups(node.contents)


def iter_elements(comp: Composition) -> Iterator[tuple[ElementId, dict[str, Property], Layer]]:
    """Every generated element (layer or group with an identity) with its slots."""
    for lyr in comp.layers:
        if lyr.identity is not None:
            yield lyr.identity, lyr.slots, lyr
        for grp in iter_groups(lyr.contents):
            if grp.identity is not None:
                yield grp.identity, grp.slots, lyr
