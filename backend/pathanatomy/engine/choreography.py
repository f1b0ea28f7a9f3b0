"""Reveal choreography: phase windows, stagger and easing on a 0–100 timeline.

Every element is revealed by a draw fraction (trim end) or a pop scale,
never by animating opacity. The functions here are pure; controls are
read by name through ``ControlParameters``.

    raw   = override < 100 ? override / 100 : clamp((timeline - start) / (end - start))
    p     = staggered ? clamp((raw - normPos · min(stagger, 1 - width)) / width) : raw
    eased = 1 - max(1 - p, 0) ^ (1 + easing / 25)
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathanatomy.engine.controls import ControlParameters

MIN_STAGGER_WIDTH = 0.01


class Phase(str, enum.Enum):
    GRID = "grid"
    OUTLINE = "outline"
    ANCHOR = "anchor"
    HANDLE = "handle"
    LABEL = "label"
    BISECTOR = "bisector"
    CIRCUMCIRCLE = "circumcircle"
    TRIANGULATION = "triangulation"
    CONTOUR = "contour"
    TANGENT_RAY = "tangent_ray"


class Output(str, enum.Enum):
    DRAW = "draw"  # trim end, 0–100
    POP = "pop"  # uniform scale [s, s], 0–100


@dataclass(frozen=True)
class PhaseWindow:
    start: float
    end: float

    @property
    def width(self) -> float:
        return self.end - self.start


@dataclass(frozen=True)
class PhaseSpec:
    window: PhaseWindow
    staggered: bool = True
    override_control: str | None = None


PHASES: dict[Phase, PhaseSpec] = {
    Phase.GRID: PhaseSpec(PhaseWindow(0, 30), override_control="Grid Draw"),
    Phase.OUTLINE: PhaseSpec(PhaseWindow(10, 55), staggered=False, override_control="Outline Draw"),
    Phase.ANCHOR: PhaseSpec(PhaseWindow(30, 65), override_control="Anchor Pop"),
    Phase.HANDLE: PhaseSpec(PhaseWindow(50, 80), override_control="Handle Pop"),
    Phase.LABEL: PhaseSpec(PhaseWindow(65, 95), override_control="Label Pop"),
    Phase.BISECTOR: PhaseSpec(PhaseWindow(0, 20)),
    Phase.CIRCUMCIRCLE: PhaseSpec(PhaseWindow(15, 40)),
    Phase.TRIANGULATION: PhaseSpec(PhaseWindow(25, 55)),
    Phase.CONTOUR: PhaseSpec(PhaseWindow(35, 65)),
    Phase.TANGENT_RAY: PhaseSpec(PhaseWindow(50, 75)),
}


OVERRIDE_CONTROLS: tuple[str, ...] = tuple(
    spec.override_control for spec in PHASES.values() if spec.override_control
)


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def phase_progress(timeline: float, window: PhaseWindow, override: float = 100.0) -> float:
    """Raw phase progress in [0, 1]; an override below 100 replaces the timeline."""
    if override < 100:
        return clamp(override / 100.0)
    if window.width <= 0:
        return 1.0 if timeline >= window.end else 0.0
    return clamp((timeline - window.start) / window.width)


def stagger_progress(raw: float, index: int, total: int, stagger: float) -> float:
    """Per-element progress inside a staggered phase.

    ``stagger`` is 0–100. Element starts are spread over ``min(s, 1 - width)``
    so the last element also completes when ``raw`` reaches 1.
    """
    s = clamp(stagger / 100.0)
    norm_pos = index / (total - 1) if total > 1 else 0.0
    width = max(1.0 - s, MIN_STAGGER_WIDTH)
    start = norm_pos * min(s, 1.0 - width)
    return clamp((raw - start) / width)


def ease(p: float, easing: float) -> float:
    """Ease-out power curve; easing 0 is linear, 100 is snappy."""
    k = 1.0 + clamp(easing, 0.0, 100.0) / 25.0
    return 1.0 - max(1.0 - p, 0.0) ** k


@dataclass(frozen=True)
class ChoreographyParameters:
    timeline: float = 100.0
    stagger: float = 0.0
    easing: float = 50.0
    overrides: dict[str, float] = field(default_factory=dict)

    def override(self, name: str | None) -> float:
        if name is None:
            return 100.0
        return float(self.overrides.get(name, 100.0))

    @classmethod
    def from_controls(cls, controls: ControlParameters) -> ChoreographyParameters:
        return cls(
            timeline=clamp(float(controls.get("Timeline")), 0.0, 100.0),
            stagger=clamp(float(controls.get("Stagger")), 0.0, 100.0),
            easing=clamp(float(controls.get("Easing")), 0.0, 100.0),
            overrides={name: float(controls.get(name)) for name in OVERRIDE_CONTROLS},
        )


def reveal(phase: Phase, params: ChoreographyParameters, index: int = 0, total: int = 1) -> float:
    """Eased reveal fraction in [0, 1] for one element of ``phase``."""
    spec = PHASES[phase]
    raw = phase_progress(params.timeline, spec.window, params.override(spec.override_control))
    p = stagger_progress(raw, index, total, params.stagger) if spec.staggered else raw
    return ease(p, params.easing)
