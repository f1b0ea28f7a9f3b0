"""Bowyer–Watson Delaunay triangulation for small point sets.

Points are inserted one at a time into a super-triangle that encloses the
bounding box with a margin of ``margin_ratio`` × its diagonal. Triangles whose
circumcircle contains the new point are removed and the cavity is re-fanned
from its boundary. Degenerate triangles (|D| < eps) never count as containing
a point.
"""

from __future__ import annotations

import math
from collections import Counter

import numpy as np
from numpy.typing import ArrayLike

Triangle = tuple[int, int, int]


def _circumcircle(pts: list[tuple[float, float]], tri: Triangle, eps: float) -> tuple[float, float, float] | None:
    (ax, ay), (bx, by), (cx, cy) = (pts[i] for i in tri)
    d = 2.0 * (ax * (by - cy) + bx * (cy - ay) + cx * (ay - by))
    if abs(d) < eps:
        return None
    a2 = ax * ax + ay * ay
    b2 = bx * bx + by * by
    c2 = cx * cx + cy * cy
    ux = (a2 * (by - cy) + b2 * (cy - ay) + c2 * (ay - by)) / d
    uy = (a2 * (cx - bx) + b2 * (ax - cx) + c2 * (bx - ax)) / d
    return ux, uy, (ax - ux) ** 2 + (ay - uy) ** 2


def triangulate(points: ArrayLike, margin_ratio: float = 3.0, eps: float = 1e-10) -> list[Triangle]:
    """Triangles as sorted index triples into ``points``."""
    arr = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    n = len(arr)
    if n < 3:
        return []

    xmin, ymin = arr.min(axis=0)
    xmax, ymax = arr.max(axis=0)
    cx, cy = (xmin + xmax) / 2.0, (ymin + ymax) / 2.0
    d = margin_ratio * max(math.hypot(xmax - xmin, ymax - ymin), 1.0)

    pts = [(float(x), float(y)) for x, y in arr]
    # Offsets keep super vertices off the axes and diagonals of symmetric inputs
    pts += [(cx - 2.0 * d, cy - d), (cx + 2.0 * d, cy - d), (cx, cy + 2.0 * d)]

    circles: dict[Triangle, tuple[float, float, float] | None] = {}

    def circle(tri: Triangle) -> tuple[float, float, float] | None:
        if tri not in circles:
            circles[tri] = _circumcircle(pts, tri, eps)
        return circles[tri]

    triangles: list[Triangle] = [(n, n + 1, n + 2)]

    for i in range(n):
        px, py = pts[i]
        bad = []
        for tri in triangles:
            c = circle(tri)
            if c is None:
                continue
            ux, uy, r2 = c
            if (px - ux) ** 2 + (py - uy) ** 2 < r2 + eps:
                bad.append(tri)

        edge_counts = Counter(
            tuple(sorted(edge))
            for tri in bad
            for edge in ((tri[0], tri[1]), (tri[1], tri[2]), (tri[2], tri[0]))
        )
        boundary = [edge for edge, count in edge_counts.items() if count == 1]

        bad_set = set(bad)
        triangles = [t for t in triangles if t not in bad_set]
        triangles += [(a, b, i) for a, b in boundary]

    return sorted(tuple(sorted(t)) for t in triangles if max(t) < n)


def triangle_edges(triangles: list[Triangle]) -> list[tuple[int, int]]:
    """Unique edges (a < b) in first-seen order."""
    seen: dict[tuple[int, int], None] = {}
    for tri in triangles:
        for a, b in ((tri[0], tri[1]), (tri[1], tri[2]), (tri[2], tri[0])):
            seen.setdefault((min(a, b), max(a, b)), None)
    return list(seen)


def is_adjacent(a: int, b: int, vertex_count: int, closed: bool) -> bool:
    """True when a < b are consecutive along the path (including the closing edge)."""
    return b - a == 1 or (closed and a == 0 and b == vertex_count - 1)
