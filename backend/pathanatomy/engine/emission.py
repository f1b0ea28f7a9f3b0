"""Scene emission: turn constructed elements into a layer plan.

The plan fixes everything the host needs: layer order, names, per-layer
visibility and offset bindings, and per-element style. Applying it to a
host is ``pathanatomy.host.materialize``'s job.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from pathanatomy.engine.bindings import ControlValue, LayerOpacity
from pathanatomy.engine.config import CONSTRUCTION_STYLES, ConstructionStyle, Profile
from pathanatomy.engine.context import ConstructedElement, GenerationContext
from pathanatomy.engine.controls import WHITE, ControlSpec, control_specs
from pathanatomy.engine.identity import Category, ElementId
from pathanatomy.errors import PerformanceWarning
from pathanatomy.host.scene import LayerKind

logger = logging.getLogger(__name__)


class Shape(str, enum.Enum):
    PATH = "path"
    RECT = "rect"
    ELLIPSE = "ellipse"


@dataclass
class ElementPlan:
    identity: ElementId
    shape: Shape
    # Geometry, choreography and style slots: binding or static value
    slots: dict[str, Any] = field(default_factory=dict)
    dashes: tuple[float, ...] = ()
    # Sub-group inside the layer (grid line families)
    group: str | None = None

    @property
    def name(self) -> str:
        return self.identity.name


@dataclass
class LayerPlan:
    name: str
    kind: LayerKind
    opacity: Any
    position: Any = (0.0, 0.0)
    elements: list[ElementPlan] = field(default_factory=list)
    # Text layers carry their own identity and slots
    identity: ElementId | None = None
    slots: dict[str, Any] = field(default_factory=dict)
    font: str = "ArialMT"
    # Placed below every other layer of the composition
    to_bottom: bool = False


@dataclass
class ScenePlan:
    controls: list[ControlSpec]
    # Top to bottom, controller excluded
    layers: list[LayerPlan]
    vertex_count: int = 0

    def layer(self, name: str) -> LayerPlan | None:
        for lp in self.layers:
            if lp.name == name:
                return lp
        return None

    @property
    def element_count(self) -> int:
        return sum(len(lp.elements) or (1 if lp.identity else 0) for lp in self.layers)


def check_vertex_budget(
    vertex_count: int,
    threshold: int,
    confirm: Callable[[int], bool] | None = None,
) -> None:
    """Raise PerformanceWarning above ``threshold`` unless ``confirm`` approves."""
    if vertex_count <= threshold:
        return
    if confirm is not None and confirm(vertex_count):
        logger.info("Building %d vertices (above %d) after confirmation", vertex_count, threshold)
        return
    raise PerformanceWarning(vertex_count, threshold)


def visibility(toggle: str) -> LayerOpacity:
    return LayerOpacity(toggle, ("Global Opacity",))


def grid_opacity(profile: Profile) -> LayerOpacity:
    master = "Grid Elements Opacity" if profile is Profile.EXTENDED else "Global Opacity"
    return LayerOpacity("Show Grid", ("Grid Opacity", master))


def construction_opacity(style: ConstructionStyle) -> LayerOpacity:
    return LayerOpacity("Show Grid", style.opacity_controls, style.opacity_constant)


def _dot(element: ConstructedElement, prefix: str) -> ElementPlan:
    slots = dict(element.slots)
    slots["size"] = ControlValue(f"{prefix} Size", pair=True)
    slots["roundness"] = ControlValue(f"{prefix} Roundness")
    slots["fill_color"] = ControlValue(f"{prefix} Color")
    return ElementPlan(element.identity, Shape.RECT, slots)


def _stroked(
    element: ConstructedElement,
    color: Any,
    width: Any,
    dashes: tuple[float, ...] = (),
    group: str | None = None,
    shape: Shape = Shape.PATH,
) -> ElementPlan:
    slots = dict(element.slots)
    slots["stroke_color"] = color
    slots["stroke_width"] = width
    return ElementPlan(element.identity, shape, slots, dashes=dashes, group=group)


def _shape_layer(name: str, opacity: Any, position: Any = (0.0, 0.0), elements: list[ElementPlan] | None = None) -> LayerPlan:
    return LayerPlan(name, LayerKind.SHAPE, opacity, position, elements or [])


def _construction_layers(ctx: GenerationContext) -> list[LayerPlan]:
    """Bottom to top: circumcircles, tangents, triangulation, contours, bisectors."""
    layers = []
    for category in (
        Category.CIRCUMCIRCLE,
        Category.TANGENT_RAY,
        Category.TRIANGULATION,
        Category.CONTOUR,
        Category.BISECTOR,
    ):
        items = ctx.of(category)
        if not items:
            continue
        style = CONSTRUCTION_STYLES[category]
        if category is Category.CIRCUMCIRCLE:
            plans = [_stroked(e, WHITE, style.stroke_width, shape=Shape.ELLIPSE) for e in items]
        elif category is Category.CONTOUR:
            widths = [lvl.stroke_width for lvl in ctx.config.contour_levels]
            plans = [_stroked(e, WHITE, widths[e.identity.ordinal]) for e in items]
        else:
            plans = [_stroked(e, WHITE, style.stroke_width, style.dashes) for e in items]
        layers.append(_shape_layer(style.layer_name, construction_opacity(style), elements=plans))
    return layers


def plan_scene(ctx: GenerationContext) -> ScenePlan:
    cfg = ctx.config
    bottom_up: list[LayerPlan] = []

    grid_elements = [
        _stroked(e, ControlValue("Grid Color"), 1.0, group="V_Lines") for e in ctx.of(Category.GRID_V)
    ] + [
        _stroked(e, ControlValue("Grid Color"), 1.0, group="H_Lines") for e in ctx.of(Category.GRID_H)
    ] + [
        _stroked(e, ControlValue("Grid Color"), cfg.diagonal_stroke_width, group="D_Lines")
        for e in ctx.of(Category.DIAGONAL)
    ]
    if grid_elements:
        grid = _shape_layer("PP_Grid", grid_opacity(cfg.profile), ControlValue("Grid Offset"), grid_elements)
        grid.to_bottom = True
        bottom_up.append(grid)

    if cfg.construction_enabled:
        bottom_up += _construction_layers(ctx)

    bottom_up.append(_shape_layer(
        "PP_Outlines",
        visibility("Show Outlines"),
        ControlValue("Outlines Offset"),
        [_stroked(e, ControlValue("Outline Color"), ControlValue("Outline Width")) for e in ctx.of(Category.OUTLINE)],
    ))
    bottom_up.append(_shape_layer(
        "PP_Handles",
        visibility("Show Handles"),
        ControlValue("Handles Offset"),
        [_dot(e, "Handle") for e in ctx.of(Category.HANDLE)],
    ))
    bottom_up.append(_shape_layer(
        "PP_HandleLines",
        visibility("Show Handles"),
        ControlValue("Handles Offset"),
        [_stroked(e, ControlValue("Handle Color"), 1.5, (6.0, 4.0)) for e in ctx.of(Category.HANDLE_LINE)],
    ))
    bottom_up.append(_shape_layer(
        "PP_Anchors",
        visibility("Show Anchors"),
        ControlValue("Anchors Offset"),
        [_dot(e, "Anchor") for e in ctx.of(Category.ANCHOR)],
    ))

    for e in ctx.of(Category.LABEL):
        slots = dict(e.slots)
        slots["font_size"] = ControlValue("Label Size")
        slots["fill_color"] = ControlValue("Label Color")
        bottom_up.append(LayerPlan(
            name=e.name,
            kind=LayerKind.TEXT,
            opacity=visibility("Show Labels"),
            position=slots["position"],
            identity=e.identity,
            slots=slots,
            font=cfg.label_font,
        ))

    plan = ScenePlan(
        controls=control_specs(cfg.profile),
        layers=list(reversed(bottom_up)),
        vertex_count=ctx.vertex_count,
    )
    logger.info("Scene plan: %d layers, %d elements", len(plan.layers), plan.element_count)
    return plan
