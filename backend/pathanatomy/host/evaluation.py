"""Numeric stand-in for the host expression runtime.

``EvalContext`` resolves structural addresses and frame references against a
composition at one time sample and evaluates bindings through the same
``BindingEnvironment`` interface the expression text reads from.
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np

from pathanatomy.engine.bindings import Binding
from pathanatomy.engine.context import FrameRef, PathAddress, PathData
from pathanatomy.engine.controls import CONTROL_LAYER
from pathanatomy.engine.frames import AffineFrame
from pathanatomy.host.scene import Composition, GroupNode, Layer, PathNode, Property, TransformProps, iter_elements

logger = logging.getLogger(__name__)


class LayerControls:
    """ControlParameters backed by the effects of the control layer."""

    def __init__(self, ctx: EvalContext, layer: Layer | None) -> None:
        self._ctx = ctx
        self._layer = layer

    def get(self, name: str) -> Any:
        if self._layer is None:
            raise LookupError(f"Layer {CONTROL_LAYER} not found")
        try:
            prop = self._layer.effects[name]
        except KeyError:
            raise LookupError(f"Effect {name!r} not found on {CONTROL_LAYER}") from None
        return self._ctx.value(prop)


class EvalContext:
    def __init__(self, comp: Composition, time: float | None = None) -> None:
        self.comp = comp
        self.time = comp.time if time is None else float(time)
        self.controls = LayerControls(self, comp.layer(CONTROL_LAYER))

    def value(self, prop: Property) -> Any:
        if isinstance(prop.binding, Binding):
            return prop.binding.evaluate(self)
        return prop.value_at(self.time)

    def _layer(self, name: str) -> Layer:
        layer = self.comp.layer(name)
        if layer is None:
            raise LookupError(f"Layer {name!r} not found")
        return layer

    def _group(self, layer: Layer, groups: tuple[str, ...]) -> GroupNode:
        nodes = layer.contents
        group = None
        for name in groups:
            group = next((n for n in nodes if isinstance(n, GroupNode) and n.name == name), None)
            if group is None:
                raise LookupError(f"Group {name!r} not found in {layer.name!r}")
            nodes = group.contents
        return group

    def path(self, address: PathAddress) -> PathData:
        layer = self._layer(address.layer)
        nodes = self._group(layer, address.groups).contents if address.groups else layer.contents
        node = next((n for n in nodes if isinstance(n, PathNode) and n.name == address.shape), None)
        if node is None:
            raise LookupError(f"Path {address.shape!r} not found in {address.layer!r}")
        return self.value(node.path)

    def transform_frame(self, transform: TransformProps) -> AffineFrame:
        return AffineFrame.from_values(
            self.value(transform.anchor),
            self.value(transform.position),
            self.value(transform.scale),
            self.value(transform.rotation),
        )

    def frame(self, ref: FrameRef) -> AffineFrame:
        layer = self._layer(ref.layer)
        if not ref.groups:
            return self.transform_frame(layer.transform)
        return self.transform_frame(self._group(layer, ref.groups).transform)


def to_jsonable(value: Any) -> Any:
    if isinstance(value, PathData):
        return value.to_dict()
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, (np.floating, np.integer)):
        return value.item()
    if isinstance(value, tuple):
        return list(value)
    return value


def evaluate_elements(comp: Composition, time: float | None = None) -> dict[str, dict[str, Any]]:
    """Evaluated value of every slot of every generated element, by element name."""
    ctx = EvalContext(comp, time)
    result: dict[str, dict[str, Any]] = {}
    for identity, slots, _ in iter_elements(comp):
        result[identity.name] = {slot: ctx.value(prop) for slot, prop in slots.items()}
    return result
