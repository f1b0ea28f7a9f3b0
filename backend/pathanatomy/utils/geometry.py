"""Leaf-node geometry helpers. No engine imports."""

from __future__ import annotations

import math
from typing import NamedTuple

import numpy as np
from numpy.typing import NDArray


class Extents(NamedTuple):
    """Axis-aligned span covered by grid lines, in composition space."""

    x_min: float
    x_max: float
    y_min: float
    y_max: float

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    @property
    def height(self) -> float:
        return self.y_max - self.y_min


def bbox(points: NDArray[np.float64]) -> tuple[float, float, float, float]:
    """Compute (xmin, ymin, xmax, ymax) bounding box."""
    if len(points) == 0:
        return (0.0, 0.0, 0.0, 0.0)
    return (
        float(np.min(points[:, 0])),
        float(np.min(points[:, 1])),
        float(np.max(points[:, 0])),
        float(np.max(points[:, 1])),
    )


def round_half_up(value: float) -> int:
    """Round .5 toward +infinity, the way host expressions round."""
    return int(math.floor(value + 0.5))


def span_with_diagonal(points: NDArray[np.float64]) -> tuple[float, float, float, float, float]:
    """Return (xmin, ymin, xmax, ymax, diag); the diagonal uses spans floored at 1."""
    xmin, ymin, xmax, ymax = bbox(points)
    w = max(1.0, xmax - xmin)
    h = max(1.0, ymax - ymin)
    return xmin, ymin, xmax, ymax, math.hypot(w, h)


def grid_extents(points: NDArray[np.float64], min_pad: float = 30.0, pad_ratio: float = 0.15) -> Extents:
    """Bounding box grown by max(min_pad, pad_ratio * diagonal), rounded half-up."""
    xmin, ymin, xmax, ymax, diag = span_with_diagonal(points)
    pad = max(min_pad, diag * pad_ratio)
    return Extents(
        float(round_half_up(xmin - pad)),
        float(round_half_up(xmax + pad)),
        float(round_half_up(ymin - pad)),
        float(round_half_up(ymax + pad)),
    )


def dedup_axis(values: list[float], tolerance: float, cap: int) -> list[int]:
    """Indices of the values kept by first-seen bucketing.

    A value is dropped when it lies within ``tolerance`` of any value already
    kept. At most ``cap`` indices are returned, in input order.
    """
    kept: list[float] = []
    indices: list[int] = []
    for i, v in enumerate(values):
        if len(kept) >= cap:
            break
        if any(abs(k - v) <= tolerance for k in kept):
            continue
        kept.append(v)
        indices.append(i)
    return indices


def segment_angle(a: NDArray[np.float64], b: NDArray[np.float64]) -> float:
    """Direction of a→b in degrees, (-180, 180]."""
    return math.degrees(math.atan2(b[1] - a[1], b[0] - a[0]))


def fold_angle(degrees: float) -> float:
    """Fold a line direction into (-90, 90]."""
    while degrees <= -90.0:
        degrees += 180.0
    while degrees > 90.0:
        degrees -= 180.0
    return degrees


def doubled_area(a: NDArray[np.float64], b: NDArray[np.float64], c: NDArray[np.float64]) -> float:
    """|det| of the triangle, twice its area."""
    return abs((b[0] - a[0]) * (c[1] - a[1]) - (c[0] - a[0]) * (b[1] - a[1]))


def max_area_triple(points: NDArray[np.float64]) -> tuple[tuple[int, int, int], float] | None:
    """Exhaustive search for the vertex triple spanning the largest triangle.

    Returns the triple and its doubled area. Ties keep the lexicographically
    first triple.
    """
    n = len(points)
    if n < 3:
        return None
    best = (0, 1, 2)
    best_area = -1.0
    for i in range(n - 2):
        for j in range(i + 1, n - 1):
            for k in range(j + 1, n):
                area = doubled_area(points[i], points[j], points[k])
                if area > best_area:
                    best_area = area
                    best = (i, j, k)
    return best, best_area


def circumcircle(
    a: NDArray[np.float64],
    b: NDArray[np.float64],
    c: NDArray[np.float64],
    eps: float = 0.001,
) -> tuple[NDArray[np.float64], float]:
    """Circumcenter and radius by the determinant formula.

    Near-collinear triples (|D| < eps) give center (0, 0) and radius 0.
    """
    d = 2.0 * (a[0] * (b[1] - c[1]) + b[0] * (c[1] - a[1]) + c[0] * (a[1] - b[1]))
    if abs(d) < eps:
        return np.zeros(2), 0.0
    a2 = a[0] * a[0] + a[1] * a[1]
    b2 = b[0] * b[0] + b[1] * b[1]
    c2 = c[0] * c[0] + c[1] * c[1]
    cx = (a2 * (b[1] - c[1]) + b2 * (c[1] - a[1]) + c2 * (a[1] - b[1])) / d
    cy = (a2 * (c[0] - b[0]) + b2 * (a[0] - c[0]) + c2 * (b[0] - a[0])) / d
    center = np.array([cx, cy], dtype=np.float64)
    return center, float(math.hypot(cx - a[0], cy - a[1]))


def arc_lengths(points: NDArray[np.float64]) -> NDArray[np.float64]:
    """Cumulative arc-length along a point sequence."""
    diffs = np.diff(points, axis=0)
    segment_lengths = np.sqrt(np.sum(diffs**2, axis=1))
    return np.concatenate([[0.0], np.cumsum(segment_lengths)])


def sample_bezier_path(
    vertices: NDArray[np.float64],
    in_tangents: NDArray[np.float64],
    out_tangents: NDArray[np.float64],
    closed: bool,
    samples_per_segment: int = 16,
) -> NDArray[np.float64]:
    """Polyline through a vertex/tangent path (tangents relative to their vertex)."""
    n = len(vertices)
    if n == 0:
        return np.empty((0, 2))
    if n == 1:
        return vertices.copy()
    seg_count = n if closed else n - 1
    t = np.linspace(0.0, 1.0, samples_per_segment + 1)[:, None]
    chunks = [vertices[:1]]
    for i in range(seg_count):
        j = (i + 1) % n
        p0 = vertices[i]
        p1 = vertices[i] + out_tangents[i]
        p2 = vertices[j] + in_tangents[j]
        p3 = vertices[j]
        curve = (
            (1 - t) ** 3 * p0
            + 3 * (1 - t) ** 2 * t * p1
            + 3 * (1 - t) * t**2 * p2
            + t**3 * p3
        )
        chunks.append(curve[1:])
    return np.vstack(chunks)


def trim_polyline(points: NDArray[np.float64], end_fraction: float) -> NDArray[np.float64]:
    """Keep the leading ``end_fraction`` (0..1) of a polyline by arc length."""
    if len(points) < 2 or end_fraction >= 1.0:
        return points
    if end_fraction <= 0.0:
        return points[:1]
    lengths = arc_lengths(points)
    target = lengths[-1] * end_fraction
    k = int(np.searchsorted(lengths, target, side="right"))
    if k >= len(points):
        return points
    seg = lengths[k] - lengths[k - 1]
    u = 0.0 if seg < 1e-12 else (target - lengths[k - 1]) / seg
    tip = points[k - 1] + (points[k] - points[k - 1]) * u
    return np.vstack([points[:k], tip[None, :]])
