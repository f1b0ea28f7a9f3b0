"""Scene operations: build, cleanup, bake, animate, reset and precompose.

Each operation works on one composition and either completes or leaves the
layer stack untouched.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass, field, replace

from pathanatomy.engine.bake import BakeReport, bake
from pathanatomy.engine.config import GenerationConfig
from pathanatomy.engine.context import GenerationContext
from pathanatomy.engine.controls import ANIMATION_DEFAULTS, CONTROL_LAYER
from pathanatomy.engine.emission import ScenePlan, check_vertex_budget, plan_scene
from pathanatomy.engine.extractor import discover_paths
from pathanatomy.engine.pipeline import Pipeline
from pathanatomy.errors import EmptySourceError, FatalConstructionError, PathAnatomyError, UserInputError
from pathanatomy.host.evaluation import EvalContext
from pathanatomy.host.materialize import materialize
from pathanatomy.host.scene import Composition, KeyframeEase, Layer, LayerKind

logger = logging.getLogger(__name__)

PRECOMP_NAME = "Path Plugin Visuals"
DEFAULT_DURATION = 2.0
MIN_DURATION = 0.1


@dataclass
class BuildResult:
    source: str
    path_count: int
    vertex_count: int
    layers: list[str] = field(default_factory=list)
    element_count: int = 0
    constructors: list[str] = field(default_factory=list)
    plan: ScenePlan | None = None


def _require_comp(comp: Composition | None) -> Composition:
    if comp is None:
        raise UserInputError("No active composition.")
    return comp


def _control_layer(comp: Composition) -> Layer:
    layer = comp.layer(CONTROL_LAYER)
    if layer is None:
        raise UserInputError(f"{CONTROL_LAYER} not found. Build first.")
    return layer


def _remove_generated(comp: Composition) -> list[str]:
    removed = [lyr.name for lyr in comp.generated_layers()]
    comp.layers = [lyr for lyr in comp.layers if not lyr.generated]
    return removed


def build(
    comp: Composition | None,
    source: str | None,
    config: GenerationConfig | None = None,
    confirm: Callable[[int], bool] | None = None,
    font: str | None = None,
) -> BuildResult:
    """Generate the overlay for the paths on layer ``source``.

    ``font`` names the label font; whitespace is removed and a blank name
    keeps the configured one.

    Previously generated layers are replaced. Above the vertex threshold,
    ``confirm`` is asked first; refusing raises PerformanceWarning before
    anything changes.
    """
    comp = _require_comp(comp)
    config = config or GenerationConfig()
    font = "".join((font or "").split())
    if font:
        config = replace(config, label_font=font)
    if not source:
        raise UserInputError("Select a layer containing paths.")
    layer = comp.layer(source)
    if layer is None:
        raise UserInputError(f'Layer "{source}" not found.')
    if layer.generated:
        raise UserInputError(f'"{source}" is a generated layer.')

    paths = discover_paths(layer, EvalContext(comp))
    if not paths:
        raise EmptySourceError(f'No paths found in "{source}".')

    vertex_count = sum(p.data.vertex_count for p in paths)
    check_vertex_budget(vertex_count, config.vertex_warning_threshold, confirm)

    try:
        with comp.transaction("Build"):
            removed = _remove_generated(comp)
            if removed:
                logger.info("Build: replacing %d generated layers", len(removed))
            ctx = Pipeline(config=config).run(GenerationContext(paths=paths, config=config))
            plan = plan_scene(ctx)
            created = materialize(comp, plan)
    except PathAnatomyError:
        raise
    except Exception as e:
        raise FatalConstructionError("build", e) from e

    return BuildResult(
        source=source,
        path_count=len(paths),
        vertex_count=vertex_count,
        layers=[lyr.name for lyr in created],
        element_count=plan.element_count,
        constructors=sorted(ctx.completed_constructors),
        plan=plan,
    )


def cleanup(comp: Composition | None) -> list[str]:
    """Remove every generated layer; returns their names."""
    comp = _require_comp(comp)
    with comp.transaction("Cleanup"):
        removed = _remove_generated(comp)
    logger.info("Cleanup: removed %d layers", len(removed))
    return removed


def bake_scene(comp: Composition | None) -> BakeReport:
    return bake(_require_comp(comp))


def parse_duration(text: str | float | None) -> float:
    """Duration in seconds; unparsable or zero falls back to 2, minimum 0.1."""
    try:
        value = float(text)
    except (TypeError, ValueError):
        value = DEFAULT_DURATION
    if math.isnan(value) or value == 0:
        value = DEFAULT_DURATION
    return max(value, MIN_DURATION)


def auto_animate(
    comp: Composition | None,
    duration: str | float | None = DEFAULT_DURATION,
    stagger: float = 0.0,
    easing: float = 50.0,
) -> tuple[float, float]:
    """Key Timeline 0 → 100 from the current time; returns the key times."""
    comp = _require_comp(comp)
    control = _control_layer(comp)
    dur = parse_duration(duration)
    t0, t1 = comp.time, comp.time + dur
    ease = KeyframeEase(speed=0.0, influence=33.0)

    with comp.transaction("Auto-Animate"):
        timeline = control.effect("Timeline")
        timeline.remove_keys()
        timeline.add_key(t0, 0.0, ease_in=ease, ease_out=ease)
        timeline.add_key(t1, 100.0, ease_in=ease, ease_out=ease)
        control.effect("Stagger").set_value(float(stagger))
        control.effect("Easing").set_value(float(easing))

    logger.info("Auto-Animate: Timeline keyed %.2fs → %.2fs", t0, t1)
    return t0, t1


def reset_animation(comp: Composition | None) -> None:
    """Drop Timeline keys and restore the choreography controls."""
    comp = _require_comp(comp)
    control = _control_layer(comp)
    with comp.transaction("Reset Animation"):
        for name, value in ANIMATION_DEFAULTS.items():
            prop = control.effects.get(name)
            if prop is None:
                continue
            prop.remove_keys()
            prop.set_value(value)


def precompose(comp: Composition | None) -> Composition:
    """Move all generated layers, in order, into a nested composition."""
    comp = _require_comp(comp)
    generated = comp.generated_layers()
    if not generated:
        raise UserInputError("Nothing to precomp.")

    nested = Composition(PRECOMP_NAME, comp.width, comp.height, comp.duration, comp.time)
    with comp.transaction("Precompose"):
        index = comp.index_of(generated[0])
        comp.layers = [lyr for lyr in comp.layers if not lyr.generated]
        nested.layers = list(generated)
        comp.add_layer(Layer(PRECOMP_NAME, LayerKind.PRECOMP, source=nested), index)

    logger.info("Precompose: %d layers moved into %s", len(generated), PRECOMP_NAME)
    return nested
