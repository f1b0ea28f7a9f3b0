"""Controller parameters: the named effects on the PP_Control layer."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Protocol

from pathanatomy.engine.config import Profile

CONTROL_LAYER = "PP_Control"

WHITE = (1.0, 1.0, 1.0)


class ControlKind(str, enum.Enum):
    CHECKBOX = "checkbox"
    SLIDER = "slider"
    COLOR = "color"
    POINT = "point"


@dataclass(frozen=True)
class ControlSpec:
    name: str
    kind: ControlKind
    default: Any


class ControlParameters(Protocol):
    """Read-only access to controller values by name."""

    def get(self, name: str) -> Any: ...


def _checkboxes(*names: str) -> list[ControlSpec]:
    return [ControlSpec(n, ControlKind.CHECKBOX, True) for n in names]


def _sliders(*pairs: tuple[str, float]) -> list[ControlSpec]:
    return [ControlSpec(n, ControlKind.SLIDER, float(v)) for n, v in pairs]


def control_specs(profile: Profile = Profile.EXTENDED) -> list[ControlSpec]:
    """Controller effects in the order they appear on the control layer."""
    extended = profile is Profile.EXTENDED
    specs = _checkboxes("Show Anchors", "Show Handles", "Show Outlines", "Show Grid", "Show Labels")
    specs += _sliders(
        ("Anchor Size", 12),
        ("Handle Size", 8),
        ("Anchor Roundness", 0),
        ("Handle Roundness", 0),
        ("Outline Width", 3),
        ("Label Size", 11),
        ("Label Scale", 100),
    )
    specs += [
        ControlSpec(n, ControlKind.COLOR, WHITE)
        for n in ("Anchor Color", "Handle Color", "Outline Color", "Grid Color", "Label Color")
    ]
    specs += _sliders(
        ("Grid Opacity", 8 if extended else 40),
        ("Global Opacity", 100),
        ("Timeline", 100),
        ("Stagger", 0),
        ("Easing", 50),
        ("Grid Draw", 100),
        ("Outline Draw", 100),
        ("Anchor Pop", 100),
        ("Handle Pop", 100),
        ("Label Pop", 100),
    )
    if extended:
        specs += _sliders(
            ("Circumcircle Opacity", 30),
            ("Tangent Length", 200),
            ("Contour Count", 3),
            ("Contour Spacing", 8),
            ("Bisector Length", 120),
            ("Grid Elements Opacity", 100),
        )
    specs += [
        ControlSpec(n, ControlKind.POINT, (0.0, 0.0))
        for n in ("Anchors Offset", "Handles Offset", "Outlines Offset", "Labels Offset", "Grid Offset")
    ]
    return specs


def default_controls(profile: Profile = Profile.EXTENDED) -> dict[str, Any]:
    return {spec.name: spec.default for spec in control_specs(profile)}


# Values restored by Reset Animation
ANIMATION_DEFAULTS: dict[str, float] = {
    "Timeline": 100.0,
    "Stagger": 0.0,
    "Easing": 50.0,
    "Grid Draw": 100.0,
    "Outline Draw": 100.0,
    "Anchor Pop": 100.0,
    "Handle Pop": 100.0,
    "Label Pop": 100.0,
}


class StaticControls:
    """ControlParameters over a plain mapping, falling back to profile defaults."""

    def __init__(self, values: dict[str, Any] | None = None, profile: Profile = Profile.EXTENDED) -> None:
        self._values = {**default_controls(profile), **(values or {})}

    def get(self, name: str) -> Any:
        try:
            return self._values[name]
        except KeyError:
            raise KeyError(f"Unknown control: {name}") from None
