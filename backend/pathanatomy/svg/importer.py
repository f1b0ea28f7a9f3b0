"""SVG importer: facade over svgpathtools + ElementTree.

Converts an SVG document into a composition with one shape layer holding the
artwork as groups and vertex/tangent paths. Group transforms are limited to
what a layer frame can express: ``translate``, ``rotate`` and ``scale``, in
that order.
"""

from __future__ import annotations

import logging
import math
import re
import xml.etree.ElementTree as ET

import numpy as np
from svgpathtools import Arc, CubicBezier, Line, QuadraticBezier, parse_path

from pathanatomy.engine.context import PathData
from pathanatomy.host.scene import Composition, GroupNode, Layer, LayerKind, Node, PathNode, Property, TransformProps

logger = logging.getLogger(__name__)

# Cubic approximation constant for quarter ellipses
KAPPA = 0.5522847498

_TRANSFORM_RE = re.compile(r"(\w+)\s*\(([^)]*)\)")
_NUMBER_RE = re.compile(r"[-+]?(?:\d*\.\d+|\d+\.?)(?:[eE][-+]?\d+)?")
_FRAME_ORDER = ("translate", "rotate", "scale")


def _tag(element: ET.Element) -> str:
    return element.tag.rsplit("}", 1)[-1]


def _numbers(text: str | None) -> list[float]:
    return [float(n) for n in _NUMBER_RE.findall(text or "")]


def _length(value: str | None, default: float = 0.0) -> float:
    nums = _numbers(value)
    return nums[0] if nums else default


def parse_transform(text: str | None) -> TransformProps:
    """``translate(...) rotate(a) scale(...)`` → TransformProps.

    Any other operation, a rotation centre, or an out-of-order list raises
    ValueError.
    """
    props = TransformProps()
    if not text or not text.strip():
        return props
    last = -1
    for name, args in _TRANSFORM_RE.findall(text):
        if name not in _FRAME_ORDER:
            raise ValueError(f"Unsupported transform: {name}")
        order = _FRAME_ORDER.index(name)
        if order <= last:
            raise ValueError(f"Transform order must be translate, rotate, scale: {text!r}")
        last = order
        values = _numbers(args)
        if name == "translate":
            tx = values[0] if values else 0.0
            ty = values[1] if len(values) > 1 else 0.0
            props.position.set_value((tx, ty))
        elif name == "rotate":
            if len(values) != 1:
                raise ValueError(f"Unsupported rotation centre: {text!r}")
            props.rotation.set_value(values[0])
        else:
            sx = values[0] if values else 1.0
            sy = values[1] if len(values) > 1 else sx
            props.scale.set_value((sx * 100.0, sy * 100.0))
    return props


def _pt(z: complex) -> np.ndarray:
    return np.array([z.real, z.imag])


def _cubics(segment) -> list[tuple[complex, complex, complex, complex]]:
    """One svgpathtools segment as cubic control quads."""
    if isinstance(segment, Line):
        return [(segment.start, segment.start, segment.end, segment.end)]
    if isinstance(segment, CubicBezier):
        return [(segment.start, segment.control1, segment.control2, segment.end)]
    if isinstance(segment, QuadraticBezier):
        p0, q, p3 = segment.start, segment.control, segment.end
        return [(p0, p0 + (q - p0) * 2 / 3, p3 + (q - p3) * 2 / 3, p3)]
    if isinstance(segment, Arc):
        pieces = max(1, math.ceil(abs(segment.delta) / 90.0))
        out = []
        for k in range(pieces):
            t0, t1 = k / pieces, (k + 1) / pieces
            dt = t1 - t0
            a, b = segment.point(t0), segment.point(t1)
            da, db = segment.derivative(t0), segment.derivative(t1)
            out.append((a, a + da * dt / 3, b - db * dt / 3, b))
        return out
    raise ValueError(f"Unsupported path segment: {type(segment).__name__}")


def subpath_to_data(subpath) -> PathData:
    """Vertices and relative tangents of one continuous svgpathtools path."""
    quads = [q for seg in subpath for q in _cubics(seg)]
    if not quads:
        return PathData(np.empty((0, 2)))
    vertices = [_pt(quads[0][0])]
    ins = [np.zeros(2)]
    outs = []
    for p0, c1, c2, p3 in quads:
        outs.append(_pt(c1 - p0))
        vertices.append(_pt(p3))
        ins.append(_pt(c2 - p3))
    outs.append(np.zeros(2))

    closed = bool(subpath.isclosed())
    if closed and len(vertices) > 2 and np.allclose(vertices[0], vertices[-1]):
        ins[0] = ins[-1]
        vertices, ins, outs = vertices[:-1], ins[:-1], outs[:-1]
    return PathData(np.array(vertices), np.array(ins), np.array(outs), closed)


def ellipse_data(cx: float, cy: float, rx: float, ry: float) -> PathData:
    """Four-vertex closed ellipse, clockwise from the top."""
    kx, ky = rx * KAPPA, ry * KAPPA
    vertices = [(cx, cy - ry), (cx + rx, cy), (cx, cy + ry), (cx - rx, cy)]
    outs = [(kx, 0.0), (0.0, ky), (-kx, 0.0), (0.0, -ky)]
    ins = [(-kx, 0.0), (0.0, -ky), (kx, 0.0), (0.0, ky)]
    return PathData(np.array(vertices), np.array(ins), np.array(outs), closed=True)


def _shape_paths(element: ET.Element) -> list[PathData]:
    tag = _tag(element)
    get = element.get
    if tag == "path":
        d = get("d")
        if not d:
            return []
        path = parse_path(d)
        return [subpath_to_data(sp) for sp in path.continuous_subpaths()]
    if tag == "circle":
        r = _length(get("r"))
        return [ellipse_data(_length(get("cx")), _length(get("cy")), r, r)]
    if tag == "ellipse":
        return [ellipse_data(_length(get("cx")), _length(get("cy")), _length(get("rx")), _length(get("ry")))]
    if tag == "rect":
        x, y = _length(get("x")), _length(get("y"))
        w, h = _length(get("width")), _length(get("height"))
        if get("rx") or get("ry"):
            logger.debug("Ignoring rounded corners on rect at (%.1f, %.1f)", x, y)
        return [PathData(np.array([(x, y), (x + w, y), (x + w, y + h), (x, y + h)]), closed=True)]
    if tag == "line":
        pts = [(_length(get("x1")), _length(get("y1"))), (_length(get("x2")), _length(get("y2")))]
        return [PathData(np.array(pts))]
    if tag in ("polyline", "polygon"):
        nums = _numbers(get("points"))
        pts = np.array(nums[: len(nums) // 2 * 2]).reshape(-1, 2)
        return [PathData(pts, closed=tag == "polygon")]
    return []


class _Namer:
    """Unique sibling names: id attribute when present, else a numbered default."""

    def __init__(self) -> None:
        self.used: set[str] = set()
        self.counts: dict[str, int] = {}

    def __call__(self, preferred: str | None, default: str) -> str:
        if preferred and preferred not in self.used:
            self.used.add(preferred)
            return preferred
        base = preferred or default
        while True:
            self.counts[base] = self.counts.get(base, 0) + 1
            name = f"{base} {self.counts[base]}"
            if name not in self.used:
                self.used.add(name)
                return name


def _convert(children: list[ET.Element]) -> list[Node]:
    nodes: list[Node] = []
    name = _Namer()
    for child in children:
        tag = _tag(child)
        if tag == "g":
            group = GroupNode(name(child.get("id"), "Group"), _convert(list(child)), parse_transform(child.get("transform")))
            nodes.append(group)
            continue
        paths = [p for p in _shape_paths(child) if p.vertex_count]
        if not paths:
            continue
        if child.get("transform"):
            # Element transforms become a wrapping group
            inner = _Namer()
            shapes = [PathNode(inner(None, "Path"), Property(p)) for p in paths]
            nodes.append(GroupNode(name(child.get("id"), "Group"), shapes, parse_transform(child.get("transform"))))
        else:
            nodes.extend(PathNode(name(child.get("id"), "Path"), Property(p)) for p in paths)
    return nodes


def _canvas(root: ET.Element) -> tuple[float, float]:
    viewbox = _numbers(root.get("viewBox"))
    if len(viewbox) >= 4:
        return viewbox[2], viewbox[3]
    return _length(root.get("width"), 1920.0), _length(root.get("height"), 1080.0)


def import_svg(svg_text: str, layer_name: str = "Artwork", comp_name: str = "Comp 1") -> Composition:
    """Parse an SVG document into a composition with one artwork layer."""
    try:
        root = ET.fromstring(svg_text)
    except ET.ParseError as e:
        raise ValueError(f"Invalid SVG: {e}") from e
    if _tag(root) != "svg":
        raise ValueError("Invalid SVG: root element is not <svg>")

    width, height = _canvas(root)
    comp = Composition(comp_name, width, height)
    layer = Layer(layer_name, LayerKind.SHAPE, _convert(list(root)), parse_transform(root.get("transform")))
    comp.add_layer(layer)
    logger.info("Imported SVG: %d top-level nodes, canvas %.0f×%.0f", len(layer.contents), width, height)
    return comp
