"""Apply a ScenePlan to a composition."""

from __future__ import annotations

import logging
from typing import Any

from pathanatomy.engine.bindings import Binding
from pathanatomy.engine.controls import CONTROL_LAYER
from pathanatomy.engine.emission import ElementPlan, LayerPlan, ScenePlan, Shape
from pathanatomy.host.scene import (
    Composition,
    EllipseNode,
    FillNode,
    GroupNode,
    Layer,
    LayerKind,
    OffsetNode,
    PathNode,
    Property,
    RectNode,
    StrokeNode,
    TextDocument,
    TrimNode,
)

logger = logging.getLogger(__name__)


def prop(value: Any) -> Property:
    if isinstance(value, Binding):
        return Property(binding=value)
    return Property(value)


def _bind(target: Property, value: Any) -> Property:
    if isinstance(value, Binding):
        target.binding = value
    else:
        target.value = value
    return target


def _element_group(plan: ElementPlan) -> GroupNode:
    s = plan.slots
    group = GroupNode(name=plan.name, identity=plan.identity)
    slots: dict[str, Property] = {}

    if plan.shape is Shape.PATH:
        node = PathNode("Path", prop(s["path"]))
        group.contents.append(node)
        slots["path"] = node.path
        if "offset" in s:
            offset = OffsetNode("Offset Paths", prop(s["offset"]))
            group.contents.append(offset)
            slots["offset"] = offset.amount
    elif plan.shape is Shape.RECT:
        rect = RectNode("Rectangle Path", prop(s["size"]), prop(s["roundness"]))
        group.contents.append(rect)
        slots["size"] = rect.size
        slots["roundness"] = rect.roundness
    else:
        ellipse = EllipseNode("Ellipse Path", prop(s["size"]))
        group.contents.append(ellipse)
        slots["size"] = ellipse.size

    if "fill_color" in s:
        fill = FillNode("Fill", prop(s["fill_color"]))
        group.contents.append(fill)
        slots["fill_color"] = fill.color
    if "stroke_color" in s:
        stroke = StrokeNode("Stroke", prop(s["stroke_color"]), prop(s["stroke_width"]), dashes=plan.dashes)
        group.contents.append(stroke)
        slots["stroke_color"] = stroke.color
        slots["stroke_width"] = stroke.width
    if "trim" in s:
        trim = TrimNode("Trim Paths", end=prop(s["trim"]))
        group.contents.append(trim)
        slots["trim"] = trim.end

    for slot, target in (
        ("position", group.transform.position),
        ("scale", group.transform.scale),
        ("opacity", group.transform.opacity),
    ):
        if slot in s:
            slots[slot] = _bind(target, s[slot])

    group.slots = slots
    return group


def _shape_layer(plan: LayerPlan) -> Layer:
    layer = Layer(plan.name, LayerKind.SHAPE)
    _bind(layer.transform.opacity, plan.opacity)
    _bind(layer.transform.position, plan.position)
    families: dict[str, GroupNode] = {}
    for element in plan.elements:
        group = _element_group(element)
        if element.group is None:
            layer.contents.append(group)
            continue
        family = families.get(element.group)
        if family is None:
            family = GroupNode(element.group)
            families[element.group] = family
            layer.contents.append(family)
        family.contents.append(group)
    return layer


def _text_layer(plan: LayerPlan) -> Layer:
    s = plan.slots
    doc = TextDocument(
        text=prop(s["text"]),
        font=plan.font,
        font_size=prop(s["font_size"]),
        fill_color=prop(s["fill_color"]),
    )
    layer = Layer(plan.name, LayerKind.TEXT, text=doc, identity=plan.identity)
    _bind(layer.transform.opacity, plan.opacity)
    _bind(layer.transform.position, s["position"])
    _bind(layer.transform.scale, s["scale"])
    layer.slots = {
        "text": doc.text,
        "position": layer.transform.position,
        "scale": layer.transform.scale,
        "font_size": doc.font_size,
        "fill_color": doc.fill_color,
    }
    return layer


def control_layer(plan: ScenePlan) -> Layer:
    layer = Layer(CONTROL_LAYER, LayerKind.NULL)
    for spec in plan.controls:
        layer.effects[spec.name] = Property(spec.default)
    return layer


def materialize(comp: Composition, plan: ScenePlan) -> list[Layer]:
    """Insert the controller and planned layers; returns them top to bottom."""
    created = [control_layer(plan)]
    bottom: list[Layer] = []
    for lp in plan.layers:
        layer = _text_layer(lp) if lp.kind is LayerKind.TEXT else _shape_layer(lp)
        if lp.to_bottom:
            bottom.append(layer)
        else:
            created.append(layer)

    comp.layers[0:0] = created
    comp.layers.extend(bottom)
    logger.info("Materialized %d layers into %s", len(created) + len(bottom), comp.name)
    return created + bottom
