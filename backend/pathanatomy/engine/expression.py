"""Host expression text for bindings.

A thin serializer over the binding IR: every binding evaluated in
``pathanatomy.engine.bindings`` has a textual twin here that the host
expression runtime re-evaluates per frame. Frame composition is emitted as a
``toWorld`` function built from the binding's ``FrameRef`` list, innermost
first, so numeric and symbolic results agree.
"""

from __future__ import annotations

from functools import singledispatch

from pathanatomy.engine.bindings import (
    Axis,
    BisectorPath,
    Binding,
    Circumcenter,
    CircumcircleSize,
    ContourLevelOpacity,
    ControlValue,
    EdgePath,
    GridLine,
    HandleLine,
    LabelPosition,
    LabelText,
    LayerOpacity,
    OutlinePath,
    Reveal,
    TangentRay,
    VertexPoint,
)
from pathanatomy.engine.choreography import MIN_STAGGER_WIDTH, PHASES, Output
from pathanatomy.engine.context import FrameRef, PathAddress, PathSource
from pathanatomy.engine.controls import CONTROL_LAYER
from pathanatomy.engine.identity import Tangent
from pathanatomy.host.scene import Composition, iter_elements


def escape(name: str) -> str:
    return name.replace("\\", "\\\\").replace('"', '\\"')


def num(value: float) -> str:
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def layer_ref(name: str) -> str:
    return f'thisComp.layer("{escape(name)}")'


CTRL = layer_ref(CONTROL_LAYER)


def effect(name: str, ctrl: str = CTRL) -> str:
    return f'{ctrl}.effect("{escape(name)}")(1)'


def content_ref(layer: str, groups: tuple[str, ...]) -> str:
    ref = layer_ref(layer)
    for g in groups:
        ref += f'.content("{escape(g)}")'
    return ref


def path_ref(address: PathAddress) -> str:
    return content_ref(address.layer, address.groups) + f'.content("{escape(address.shape)}").path'


def transform_ref(ref: FrameRef) -> str:
    return content_ref(ref.layer, ref.groups) + ".transform"


def world_transform_block(frames: tuple[FrameRef, ...]) -> str:
    """``toWorld(pt)`` applying ``frames`` innermost first."""
    if not frames:
        return "function toWorld(pt) { return pt; }"
    lines = []
    for k, ref in enumerate(frames):
        tf = transform_ref(ref)
        lines.append(
            f"var a{k} = {tf}.anchorPoint, p{k} = {tf}.position, "
            f"s{k} = {tf}.scale, r{k} = degreesToRadians({tf}.rotation);"
        )
    lines.append("function toWorld(pt) {")
    lines.append("  var x = pt[0], y = pt[1], nx;")
    for k in range(len(frames)):
        lines.append(f"  x -= a{k}[0]; y -= a{k}[1];")
        lines.append(f"  x *= s{k}[0] / 100; y *= s{k}[1] / 100;")
        lines.append(f"  nx = x * Math.cos(r{k}) - y * Math.sin(r{k});")
        lines.append(f"  y = x * Math.sin(r{k}) + y * Math.cos(r{k});")
        lines.append(f"  x = nx + p{k}[0]; y += p{k}[1];")
    lines.append("  return [x, y];")
    lines.append("}")
    return "\n".join(lines)


def _source_prelude(source: PathSource) -> list[str]:
    return [f"var P = {path_ref(source.address)};", world_transform_block(source.frames)]


def _vertex_expr(vertex: int, tangent: Tangent | None = None) -> str:
    if tangent is None:
        return f"P.points()[{vertex}]"
    method = "inTangents" if tangent is Tangent.IN else "outTangents"
    return f"add(P.points()[{vertex}], P.{method}()[{vertex}])"


@singledispatch
def serialize(binding: Binding) -> str:
    raise TypeError(f"No expression form for {type(binding).__name__}")


@serialize.register
def _(b: ControlValue) -> str:
    value = effect(b.name)
    if b.factor != 1.0:
        value = f"{value} * {num(b.factor)}"
    if b.pair:
        return f"var s = {value}; [s, s];"
    return f"{value};"


@serialize.register
def _(b: LayerOpacity) -> str:
    value = num(b.constant)
    for name in b.factors:
        value += f' * C.effect("{escape(name)}")(1) / 100'
    lines = [f"var C = {CTRL};"]
    if b.toggle is None:
        lines.append(f"{value};")
    else:
        lines.append(f'C.effect("{escape(b.toggle)}")(1) ? {value} : 0;')
    return "\n".join(lines)


@serialize.register
def _(b: ContourLevelOpacity) -> str:
    return f'{effect("Contour Count")} >= {b.level + 1} ? {num(b.opacity)} : 0;'


@serialize.register
def _(b: Reveal) -> str:
    spec = PHASES[b.phase]
    window = spec.window
    lines = [
        f"var C = {CTRL};",
        'var _eAmt = clamp(C.effect("Easing")(1), 0, 100);',
        "function ez(p) { var k = 1 + _eAmt / 25; return 1 - Math.pow(Math.max(1 - p, 0), k); }",
        'var _tl = clamp(C.effect("Timeline")(1), 0, 100);',
    ]
    timed = f"clamp((_tl - {num(window.start)}) / {num(window.width)}, 0, 1)"
    if spec.override_control:
        lines.append(f'var _ov = C.effect("{escape(spec.override_control)}")(1);')
        lines.append(f"var _raw = (_ov < 100) ? clamp(_ov / 100, 0, 1) : {timed};")
    else:
        lines.append(f"var _raw = {timed};")
    if spec.staggered:
        norm = f"{b.index} / {b.total - 1}" if b.total > 1 else "0"
        lines += [
            'var _sg = clamp(C.effect("Stagger")(1), 0, 100) / 100;',
            f"var _w = Math.max(1 - _sg, {num(MIN_STAGGER_WIDTH)});",
            f"var _start = ({norm}) * Math.min(_sg, 1 - _w);",
            "var _p = clamp((_raw - _start) / _w, 0, 1);",
        ]
    else:
        lines.append("var _p = _raw;")
    if b.output is Output.DRAW:
        lines.append("ez(_p) * 100;")
    else:
        scale = ""
        if b.scale_control:
            scale = f' * C.effect("{escape(b.scale_control)}")(1) / 100'
        lines.append(f"var _s = ez(_p) * 100{scale};")
        lines.append("[_s, _s];")
    return "\n".join(lines)


@serialize.register
def _(b: VertexPoint) -> str:
    return "\n".join(_source_prelude(b.source) + [f"toWorld({_vertex_expr(b.vertex, b.tangent)});"])


@serialize.register
def _(b: HandleLine) -> str:
    return "\n".join(_source_prelude(b.source) + [
        f"var p1 = toWorld({_vertex_expr(b.vertex)});",
        f"var p2 = toWorld({_vertex_expr(b.vertex, b.tangent)});",
        "createPath([p1, p2], [], [], false);",
    ])


@serialize.register
def _(b: OutlinePath) -> str:
    return "\n".join(_source_prelude(b.source) + [
        "var pts = P.points(), inT = P.inTangents(), outT = P.outTangents();",
        "var org = toWorld([0, 0]), cPts = [], cIn = [], cOut = [];",
        "for (var i = 0; i < pts.length; i++) {",
        "  cPts.push(toWorld(pts[i]));",
        "  cIn.push(sub(toWorld(inT[i]), org));",
        "  cOut.push(sub(toWorld(outT[i]), org));",
        "}",
        "createPath(cPts, cIn, cOut, P.isClosed());",
    ])


@serialize.register
def _(b: GridLine) -> str:
    cp = f"toWorld({_vertex_expr(b.vertex)})"
    if b.axis is Axis.VERTICAL:
        body = f"createPath([[cp[0], {num(b.low)}], [cp[0], {num(b.high)}]], [], [], false);"
    else:
        body = f"createPath([[{num(b.low)}, cp[1]], [{num(b.high)}, cp[1]]], [], [], false);"
    return "\n".join(_source_prelude(b.source) + [f"var cp = {cp};", body])


@serialize.register
def _(b: LabelText) -> str:
    return "\n".join(_source_prelude(b.source) + [
        f"var cp = toWorld({_vertex_expr(b.vertex)});",
        '"(" + Math.round(cp[0]) + ", " + Math.round(cp[1]) + ")";',
    ])


@serialize.register
def _(b: LabelPosition) -> str:
    return "\n".join(_source_prelude(b.source) + [
        f"var cp = toWorld({_vertex_expr(b.vertex)});",
        f"var off = {effect(b.offset_control)};",
        f"[cp[0] + off[0], cp[1] + off[1] - {num(b.lift)}];",
    ])


def _circumcircle_lines(b: Circumcenter | CircumcircleSize) -> list[str]:
    i, j, k = b.vertices
    return _source_prelude(b.source) + [
        f"var p1 = toWorld({_vertex_expr(i)}), p2 = toWorld({_vertex_expr(j)}), p3 = toWorld({_vertex_expr(k)});",
        "var D = 2 * (p1[0] * (p2[1] - p3[1]) + p2[0] * (p3[1] - p1[1]) + p3[0] * (p1[1] - p2[1]));",
        "var a2 = p1[0] * p1[0] + p1[1] * p1[1], b2 = p2[0] * p2[0] + p2[1] * p2[1], c2 = p3[0] * p3[0] + p3[1] * p3[1];",
        f"var ok = Math.abs(D) >= {num(b.eps)};",
        "var cx = ok ? (a2 * (p2[1] - p3[1]) + b2 * (p3[1] - p1[1]) + c2 * (p1[1] - p2[1])) / D : 0;",
        "var cy = ok ? (a2 * (p3[0] - p2[0]) + b2 * (p1[0] - p3[0]) + c2 * (p2[0] - p1[0])) / D : 0;",
    ]


@serialize.register
def _(b: Circumcenter) -> str:
    return "\n".join(_circumcircle_lines(b) + ["[cx, cy];"])


@serialize.register
def _(b: CircumcircleSize) -> str:
    return "\n".join(_circumcircle_lines(b) + [
        "var r = ok ? length([cx, cy], p1) : 0;",
        "[r * 2, r * 2];",
    ])


@serialize.register
def _(b: TangentRay) -> str:
    return "\n".join(_source_prelude(b.source) + [
        f"var len = {effect(b.length_control)};",
        f"var cv = toWorld({_vertex_expr(b.vertex)});",
        f"var ce = toWorld({_vertex_expr(b.vertex, b.tangent)});",
        "var dx = ce[0] - cv[0], dy = ce[1] - cv[1];",
        "var d = Math.sqrt(dx * dx + dy * dy);",
        "if (d > 0.001) { dx /= d; dy /= d; } else { dx = 0; dy = 0; }",
        "createPath([cv, [cv[0] + dx * len, cv[1] + dy * len]], [], [], false);",
    ])


@serialize.register
def _(b: EdgePath) -> str:
    i, j = b.vertices
    return "\n".join(_source_prelude(b.source) + [
        f"createPath([toWorld({_vertex_expr(i)}), toWorld({_vertex_expr(j)})], [], [], false);",
    ])


@serialize.register
def _(b: BisectorPath) -> str:
    i, j = b.vertices
    return "\n".join(_source_prelude(b.source) + [
        f"var len = {effect(b.length_control)};",
        f"var v0 = toWorld({_vertex_expr(i)}), v1 = toWorld({_vertex_expr(j)});",
        "var mx = (v0[0] + v1[0]) / 2, my = (v0[1] + v1[1]) / 2;",
        "var ex = v1[0] - v0[0], ey = v1[1] - v0[1];",
        "var el = Math.sqrt(ex * ex + ey * ey);",
        "if (el < 0.001) createPath([[mx, my], [mx, my]], [], [], false);",
        "else { var px = -ey / el, py = ex / el;",
        "createPath([[mx - px * len, my - py * len], [mx + px * len, my + py * len]], [], [], false); }",
    ])


def scene_expressions(comp: Composition) -> dict[str, dict[str, str]]:
    """Expression text of every bound property of the generated layers.

    Keys are layer names (``opacity``/``position`` slots) and element names.
    """
    result: dict[str, dict[str, str]] = {}
    for layer in comp.generated_layers():
        bound = {
            slot: serialize(prop.binding)
            for slot, prop in (("opacity", layer.transform.opacity), ("position", layer.transform.position))
            if isinstance(prop.binding, Binding)
        }
        if bound:
            result[layer.name] = bound
    for identity, slots, _ in iter_elements(comp):
        exprs = {slot: serialize(prop.binding) for slot, prop in slots.items() if isinstance(prop.binding, Binding)}
        if exprs:
            result.setdefault(identity.name, {}).update(exprs)
    return result
