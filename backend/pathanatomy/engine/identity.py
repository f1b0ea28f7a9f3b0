"""Structured identity of generated elements.

Host names are derived from an ``ElementId`` and never parsed back: the
identity object itself is stored on the host node and read by rebinding.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class Category(str, enum.Enum):
    OUTLINE = "outline"
    ANCHOR = "anchor"
    HANDLE = "handle"
    HANDLE_LINE = "handle_line"
    LABEL = "label"
    GRID_V = "grid_v"
    GRID_H = "grid_h"
    DIAGONAL = "diagonal"
    CIRCUMCIRCLE = "circumcircle"
    TANGENT_RAY = "tangent_ray"
    TRIANGULATION = "triangulation"
    CONTOUR = "contour"
    BISECTOR = "bisector"


class Tangent(str, enum.Enum):
    IN = "in"
    OUT = "out"


@dataclass(frozen=True)
class ElementId:
    category: Category
    path_index: int | None = None
    # Vertex index, vertex pair (edges) or vertex triple (circumcircles)
    vertices: tuple[int, ...] = ()
    tangent: Tangent | None = None
    # Contour level or guide number
    ordinal: int | None = None

    @property
    def vertex(self) -> int:
        return self.vertices[0]

    @property
    def name(self) -> str:
        c = self.category
        p = self.path_index
        joined = "_".join(str(v) for v in self.vertices)
        if c is Category.OUTLINE:
            return f"O{p}"
        if c is Category.ANCHOR:
            return f"A{p}_{joined}"
        if c is Category.HANDLE:
            return f"H{self._tangent_letter()}{p}_{joined}"
        if c is Category.HANDLE_LINE:
            return f"L{self._tangent_letter()}{p}_{joined}"
        if c is Category.LABEL:
            return f"PP_Label_{p}_{joined}"
        if c is Category.GRID_V:
            return f"VL_{p}_{joined}"
        if c is Category.GRID_H:
            return f"HL_{p}_{joined}"
        if c is Category.DIAGONAL:
            return f"DL{self.ordinal}"
        if c is Category.CIRCUMCIRCLE:
            return f"CC_{p}_{joined}"
        if c is Category.TANGENT_RAY:
            return f"T{self._tangent_letter()}_{p}_{joined}"
        if c is Category.TRIANGULATION:
            return f"DG_{p}_{joined}"
        if c is Category.CONTOUR:
            return f"OC_{p}_{self.ordinal}"
        return f"PB_{p}_{joined}"

    def _tangent_letter(self) -> str:
        return "I" if self.tangent is Tangent.IN else "O"

    def to_dict(self) -> dict:
        return {
            "category": self.category.value,
            "path_index": self.path_index,
            "vertices": list(self.vertices),
            "tangent": self.tangent.value if self.tangent else None,
            "ordinal": self.ordinal,
            "name": self.name,
        }
