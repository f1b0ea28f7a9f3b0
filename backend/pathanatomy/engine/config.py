"""Generation configuration: caps, tolerances, profiles and construction styles."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from pathanatomy.engine.identity import Category


class Profile(str, enum.Enum):
    MINIMAL = "minimal"  # anatomy + grid
    EXTENDED = "extended"  # adds construction layers


@dataclass(frozen=True)
class ConstructionStyle:
    """Visual constants of one construction layer.

    Layer opacity = ``opacity_constant`` × Π(control / 100) over
    ``opacity_controls``, gated by the Show Grid checkbox.
    """

    layer_name: str
    stroke_width: float
    dashes: tuple[float, ...] = ()
    opacity_constant: float = 100.0
    opacity_controls: tuple[str, ...] = ("Grid Elements Opacity",)


CONSTRUCTION_STYLES: dict[Category, ConstructionStyle] = {
    Category.CIRCUMCIRCLE: ConstructionStyle(
        "PP_Circumcircles", 0.75,
        opacity_controls=("Grid Elements Opacity", "Circumcircle Opacity"),
    ),
    Category.TANGENT_RAY: ConstructionStyle("PP_Tangents", 0.5, dashes=(4.0, 6.0), opacity_constant=20.0),
    Category.TRIANGULATION: ConstructionStyle("PP_Triangulation", 0.5, opacity_constant=15.0),
    Category.CONTOUR: ConstructionStyle("PP_OffsetContours", 0.5),
    Category.BISECTOR: ConstructionStyle("PP_Bisectors", 0.5, opacity_constant=15.0),
}


@dataclass(frozen=True)
class ContourLevel:
    spacing_multiplier: float
    opacity: float
    stroke_width: float


CONTOUR_LEVELS: tuple[ContourLevel, ...] = (
    ContourLevel(1.0, 25.0, 0.5),
    ContourLevel(2.5, 15.0, 0.4),
    ContourLevel(5.0, 8.0, 0.3),
)


@dataclass
class GenerationConfig:
    """Tunables for the constructor pipeline and scene emission."""

    profile: Profile = Profile.EXTENDED

    # Build guard
    vertex_warning_threshold: int = 120

    # Grid extents: pad = max(grid_min_pad, grid_pad_ratio * diagonal)
    grid_min_pad: float = 30.0
    grid_pad_ratio: float = 0.15

    # Grid line dedup: tolerance = max(min, ratio * width), per-axis cap
    grid_dedup_min_tolerance: float = 6.0
    grid_dedup_ratio: float = 0.04
    grid_line_cap: int = 18

    # Diagonal guides
    diagonal_min_length: float = 12.0
    diagonal_tangent_ratio: float = 0.15  # of segment length
    diagonal_axis_tolerance: float = 5.0  # degrees from 0 / ±90
    diagonal_dedup_tolerance: float = 4.0  # degrees
    diagonal_cap: int = 6
    diagonal_extent_ratio: float = 1.4  # half length, × extents diagonal
    diagonal_stroke_width: float = 1.0

    # Circumcircles
    circumcircle_min_area: float = 10.0  # compared with |det|, twice the area
    circumcircle_cap: int = 6
    circumcircle_det_eps: float = 0.001

    # Tangent rays
    tangent_min_length: float = 5.0
    tangent_ray_cap: int = 12

    # Delaunay
    delaunay_margin_ratio: float = 3.0  # × bbox diagonal
    delaunay_eps: float = 1e-10
    triangulation_cap: int = 15

    # Bisectors
    bisector_min_length: float = 5.0
    bisector_angle_tolerance: float = 8.0  # degrees from 0 / 90 / 180
    bisector_cap: int = 8

    # Labels
    label_font: str = "ArialMT"
    label_lift: float = 14.0

    contour_levels: tuple[ContourLevel, ...] = field(default_factory=lambda: CONTOUR_LEVELS)

    @property
    def construction_enabled(self) -> bool:
        return self.profile is Profile.EXTENDED

    @classmethod
    def from_settings(cls, settings, **overrides) -> GenerationConfig:
        values = {
            "profile": Profile(settings.construction_profile),
            "vertex_warning_threshold": settings.vertex_warning_threshold,
            "label_font": "".join(settings.default_font.split()),
        }
        values.update(overrides)
        return cls(**values)
