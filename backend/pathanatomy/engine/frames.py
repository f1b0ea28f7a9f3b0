"""Affine frames and the group → layer → composition transform chain.

A frame maps a point by: subtract anchor, scale (percent), rotate (degrees),
add position. A path's frames are applied innermost group first, outward,
and the owning layer's frame last.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

logger = logging.getLogger(__name__)

# Below this |det| the composed linear part is treated as non-invertible
SINGULAR_DET = 1e-12


@dataclass(frozen=True)
class AffineFrame:
    anchor: tuple[float, float] = (0.0, 0.0)
    position: tuple[float, float] = (0.0, 0.0)
    scale: tuple[float, float] = (100.0, 100.0)
    rotation: float = 0.0

    def matrix(self) -> NDArray[np.float64]:
        """3×3 homogeneous matrix T(position) · R · S · T(-anchor)."""
        r = math.radians(self.rotation)
        co, si = math.cos(r), math.sin(r)
        sx, sy = self.scale[0] / 100.0, self.scale[1] / 100.0
        ax, ay = self.anchor
        px, py = self.position
        linear = np.array([[co * sx, -si * sy], [si * sx, co * sy]])
        offset = np.array([px, py]) - linear @ np.array([ax, ay])
        m = np.eye(3)
        m[:2, :2] = linear
        m[:2, 2] = offset
        return m

    def apply(self, point: ArrayLike) -> NDArray[np.float64]:
        return _apply_matrix(self.matrix(), point)

    def apply_vector(self, vector: ArrayLike) -> NDArray[np.float64]:
        """Linear part only: apply(v) - apply(0)."""
        return _apply_linear(self.matrix(), vector)

    @classmethod
    def from_values(cls, anchor, position, scale, rotation) -> AffineFrame:
        return cls(
            anchor=(float(anchor[0]), float(anchor[1])),
            position=(float(position[0]), float(position[1])),
            scale=(float(scale[0]), float(scale[1])),
            rotation=float(rotation),
        )


IDENTITY = AffineFrame()


def _apply_matrix(m: NDArray[np.float64], point: ArrayLike) -> NDArray[np.float64]:
    pts = np.asarray(point, dtype=np.float64)
    return pts @ m[:2, :2].T + m[:2, 2]


def _apply_linear(m: NDArray[np.float64], vector: ArrayLike) -> NDArray[np.float64]:
    vec = np.asarray(vector, dtype=np.float64)
    return vec @ m[:2, :2].T


def compose(frames: Sequence[AffineFrame]) -> NDArray[np.float64]:
    """Single matrix for ``frames`` ordered innermost first."""
    m = np.eye(3)
    for frame in frames:
        m = frame.matrix() @ m
    return m


def apply_frames(point: ArrayLike, frames: Sequence[AffineFrame]) -> NDArray[np.float64]:
    """Map a point (or N×2 array) through ``frames``, innermost first."""
    out = np.asarray(point, dtype=np.float64)
    for frame in frames:
        out = frame.apply(out)
    return out


def apply_frames_vector(vector: ArrayLike, frames: Sequence[AffineFrame]) -> NDArray[np.float64]:
    out = np.asarray(vector, dtype=np.float64)
    for frame in frames:
        out = frame.apply_vector(out)
    return out


def to_world(
    point: ArrayLike,
    ancestors: Sequence[AffineFrame],
    owner: AffineFrame = IDENTITY,
) -> NDArray[np.float64]:
    """Group-local point → composition space. ``ancestors`` innermost first."""
    return apply_frames(point, [*ancestors, owner])


def to_world_vector(
    vector: ArrayLike,
    ancestors: Sequence[AffineFrame],
    owner: AffineFrame = IDENTITY,
) -> NDArray[np.float64]:
    """Tangent vector → composition space, i.e. to_world(v) - to_world(0)."""
    return apply_frames_vector(vector, [*ancestors, owner])


def to_local(
    point: ArrayLike,
    ancestors: Sequence[AffineFrame],
    owner: AffineFrame = IDENTITY,
) -> NDArray[np.float64]:
    """Composition-space point → group-local space.

    A collapsed frame (zero scale on an axis) has no inverse; the
    pseudo-inverse is used instead, which maps onto the nearest local point.
    """
    m = compose([*ancestors, owner])
    det = float(np.linalg.det(m[:2, :2]))
    if abs(det) < SINGULAR_DET:
        logger.debug("Non-invertible frame chain (det=%.3g), using pseudo-inverse", det)
        inv = np.linalg.pinv(m)
    else:
        inv = np.linalg.inv(m)
    return _apply_matrix(inv, point)
