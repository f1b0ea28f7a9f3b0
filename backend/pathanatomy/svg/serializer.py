"""Static SVG snapshot of a composition at one time sample.

Layers are drawn bottom to top with their evaluated opacity and offset.
Trim is applied by arc length; offset contours are drawn from shapely
buffers of the evaluated path.
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np
from numpy.typing import NDArray
from shapely.geometry import LineString, Polygon

from pathanatomy.engine.context import PathData
from pathanatomy.engine.extractor import discover_paths
from pathanatomy.host.evaluation import EvalContext
from pathanatomy.host.scene import (
    Composition,
    EllipseNode,
    GroupNode,
    Layer,
    LayerKind,
    OffsetNode,
    PathNode,
    RectNode,
    StrokeNode,
    iter_groups,
)
from pathanatomy.utils.geometry import sample_bezier_path, trim_polyline

logger = logging.getLogger(__name__)

SOURCE_STROKE = "#808080"


def _color(value: Any) -> str:
    rgb = [max(0, min(255, round(float(c) * 255))) for c in list(value)[:3]]
    return "#{:02x}{:02x}{:02x}".format(*rgb)


def _fmt(v: float) -> str:
    return f"{float(v):.2f}".rstrip("0").rstrip(".")


def _points_attr(points: NDArray[np.float64]) -> str:
    return " ".join(f"{_fmt(x)},{_fmt(y)}" for x, y in points)


def _polyline(data: PathData) -> NDArray[np.float64]:
    pts = sample_bezier_path(data.vertices, data.in_tangents, data.out_tangents, data.closed)
    if data.closed and len(pts) > 1:
        pts = np.vstack([pts, pts[:1]]) if not np.allclose(pts[0], pts[-1]) else pts
    return pts


def offset_polyline(data: PathData, amount: float) -> NDArray[np.float64]:
    """Round-joined offset of a path; closed paths grow outwards."""
    pts = _polyline(data)
    if len(pts) < 2 or amount == 0:
        return pts
    if data.closed and len(pts) >= 4:
        shape = Polygon(pts)
        if not shape.is_valid:
            shape = shape.buffer(0)
        grown = shape.buffer(amount, join_style="round")
    else:
        grown = LineString(pts).buffer(abs(amount), join_style="round")
    if grown.is_empty:
        return pts[:1]
    if grown.geom_type == "MultiPolygon":
        grown = max(grown.geoms, key=lambda g: g.area)
    return np.asarray(grown.exterior.coords)


def _stroke_attrs(group: GroupNode, ctx: EvalContext) -> str:
    stroke = next((n for n in group.contents if isinstance(n, StrokeNode)), None)
    if stroke is None:
        return 'fill="none"'
    attrs = (
        f'fill="none" stroke="{_color(ctx.value(stroke.color))}" '
        f'stroke-width="{_fmt(ctx.value(stroke.width))}"'
    )
    if stroke.dashes:
        attrs += f' stroke-dasharray="{" ".join(_fmt(d) for d in stroke.dashes)}"'
    return attrs


def _element(group: GroupNode, ctx: EvalContext) -> str | None:
    slots = group.slots
    opacity = float(ctx.value(group.transform.opacity)) / 100.0
    if opacity <= 0:
        return None
    extra = f' opacity="{_fmt(opacity)}"' if opacity < 1 else ""

    path_node = next((n for n in group.contents if isinstance(n, PathNode)), None)
    if path_node is not None:
        data = ctx.value(path_node.path)
        offset = next((n for n in group.contents if isinstance(n, OffsetNode)), None)
        pts = offset_polyline(data, float(ctx.value(offset.amount))) if offset else _polyline(data)
        if "trim" in slots:
            pts = trim_polyline(pts, float(ctx.value(slots["trim"])) / 100.0)
        if len(pts) < 2:
            return None
        return f'<polyline id="{group.name}" points="{_points_attr(pts)}" {_stroke_attrs(group, ctx)}{extra}/>'

    pos = np.asarray(ctx.value(group.transform.position), dtype=np.float64)
    scale = np.asarray(ctx.value(group.transform.scale), dtype=np.float64) / 100.0
    rect = next((n for n in group.contents if isinstance(n, RectNode)), None)
    if rect is not None:
        w, h = np.asarray(ctx.value(rect.size), dtype=np.float64) * scale
        if w <= 0 or h <= 0:
            return None
        r = min(float(ctx.value(rect.roundness)), w / 2, h / 2)
        fill = _color(ctx.value(slots["fill_color"])) if "fill_color" in slots else "#ffffff"
        return (
            f'<rect id="{group.name}" x="{_fmt(pos[0] - w / 2)}" y="{_fmt(pos[1] - h / 2)}" '
            f'width="{_fmt(w)}" height="{_fmt(h)}" rx="{_fmt(r)}" fill="{fill}"{extra}/>'
        )
    ellipse = next((n for n in group.contents if isinstance(n, EllipseNode)), None)
    if ellipse is not None:
        rx, ry = np.asarray(ctx.value(ellipse.size), dtype=np.float64) * scale / 2
        if rx <= 0 or ry <= 0:
            return None
        return (
            f'<ellipse id="{group.name}" cx="{_fmt(pos[0])}" cy="{_fmt(pos[1])}" '
            f'rx="{_fmt(rx)}" ry="{_fmt(ry)}" {_stroke_attrs(group, ctx)}{extra}/>'
        )
    return None


def _generated_layer(layer: Layer, ctx: EvalContext) -> list[str]:
    opacity = float(ctx.value(layer.transform.opacity)) / 100.0
    if opacity <= 0:
        return []
    dx, dy = np.asarray(ctx.value(layer.transform.position), dtype=np.float64)
    head = f'<g id="{layer.name}" opacity="{_fmt(opacity)}" transform="translate({_fmt(dx)},{_fmt(dy)})">'

    if layer.kind is LayerKind.TEXT and layer.text is not None:
        scale = np.asarray(ctx.value(layer.transform.scale), dtype=np.float64) / 100.0
        size = float(ctx.value(layer.text.font_size)) * float(scale[1])
        if size <= 0:
            return []
        # Text layers carry their position in the offset transform
        return [
            f'<g id="{layer.name}" opacity="{_fmt(opacity)}">',
            f'  <text x="{_fmt(dx)}" y="{_fmt(dy)}" font-family="{layer.text.font}" '
            f'font-size="{_fmt(size)}" text-anchor="middle" '
            f'fill="{_color(ctx.value(layer.text.fill_color))}">{ctx.value(layer.text.text)}</text>',
            "</g>",
        ]

    body = []
    for group in iter_groups(layer.contents):
        if group.identity is None:
            continue
        try:
            markup = _element(group, ctx)
        except LookupError as e:
            logger.warning("Preview: %s not drawn: %s", group.name, e)
            continue
        if markup:
            body.append("  " + markup)
    return [head, *body, "</g>"]


def _source_layer(layer: Layer, ctx: EvalContext) -> list[str]:
    lines = [f'<g id="{layer.name}">']
    for path in discover_paths(layer, ctx):
        pts = _polyline(path.world_data())
        if len(pts) >= 2:
            lines.append(f'  <polyline points="{_points_attr(pts)}" fill="none" stroke="{SOURCE_STROKE}" stroke-width="1"/>')
    lines.append("</g>")
    return lines


def render_svg(comp: Composition, time: float | None = None, background: str = "#000000") -> str:
    """Draw every layer of ``comp`` at ``time`` (default: the current time)."""
    ctx = EvalContext(comp, time)
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<svg viewBox="0 0 {_fmt(comp.width)} {_fmt(comp.height)}" xmlns="http://www.w3.org/2000/svg">',
        f'  <rect width="100%" height="100%" fill="{background}"/>',
    ]
    for layer in reversed(comp.layers):
        if layer.kind is LayerKind.NULL:
            continue
        if layer.kind is LayerKind.PRECOMP and layer.source is not None:
            nested = render_svg(layer.source, ctx.time, background="none").splitlines()[3:-1]
            lines.extend(nested)
            continue
        if layer.generated:
            try:
                drawn = _generated_layer(layer, ctx)
            except LookupError as e:
                logger.warning("Preview: %s not drawn: %s", layer.name, e)
                continue
            lines.extend("  " + line for line in drawn)
        else:
            lines.extend("  " + line for line in _source_layer(layer, ctx))
    lines.append("</svg>")
    return "\n".join(lines)
