"""Scene endpoints: import artwork and run the panel operations on it."""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from pathanatomy.dependencies import SceneStore, get_settings, get_store
from pathanatomy.engine import operations
from pathanatomy.engine.config import GenerationConfig, Profile
from pathanatomy.engine.controls import CONTROL_LAYER
from pathanatomy.engine.expression import scene_expressions
from pathanatomy.errors import StructuralMismatch, UserInputError
from pathanatomy.host.evaluation import EvalContext, evaluate_elements, to_jsonable
from pathanatomy.host.scene import Composition, iter_groups
from pathanatomy.models.requests import AnimateRequest, BuildRequest, ControlsRequest, CreateSceneRequest, TimeRequest
from pathanatomy.models.responses import (
    AnimateResponse,
    BakeResponse,
    BuildResponse,
    CleanupResponse,
    ControlsResponse,
    EvaluateResponse,
    ExpressionsResponse,
    LayerSummary,
    PrecomposeResponse,
    SceneResponse,
)
from pathanatomy.svg.importer import import_svg
from pathanatomy.svg.serializer import render_svg

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scenes")


def _summary(scene_id: str, comp: Composition) -> SceneResponse:
    layers = []
    for layer in comp.layers:
        count = sum(1 for g in iter_groups(layer.contents) if g.identity is not None)
        if layer.identity is not None:
            count += 1
        layers.append(LayerSummary(name=layer.name, kind=layer.kind.value, generated=layer.generated, elements=count))
    return SceneResponse(
        id=scene_id,
        name=comp.name,
        width=comp.width,
        height=comp.height,
        time=comp.time,
        layers=layers,
    )


@router.post("", response_model=SceneResponse, status_code=201)
async def create_scene(
    request: CreateSceneRequest,
    store: SceneStore = Depends(get_store),
) -> SceneResponse:
    """Create a scene from SVG markup or a JSON scene document."""
    if request.document is not None:
        comp = request.document.to_composition()
    elif request.svg:
        try:
            comp = import_svg(request.svg, layer_name=request.layer_name)
        except ValueError as e:
            raise UserInputError(str(e)) from e
    else:
        raise UserInputError("Provide either svg or document.")
    scene_id = store.add(comp)
    return _summary(scene_id, comp)


@router.get("/{scene_id}", response_model=SceneResponse)
async def get_scene(scene_id: str, store: SceneStore = Depends(get_store)) -> SceneResponse:
    return _summary(scene_id, store.get(scene_id))


@router.post("/{scene_id}/time", response_model=SceneResponse)
async def set_time(scene_id: str, request: TimeRequest, store: SceneStore = Depends(get_store)) -> SceneResponse:
    comp = store.get(scene_id)
    comp.time = request.time
    return _summary(scene_id, comp)


@router.post("/{scene_id}/build", response_model=BuildResponse)
async def build(
    scene_id: str,
    request: BuildRequest,
    store: SceneStore = Depends(get_store),
    settings=Depends(get_settings),
) -> BuildResponse:
    comp = store.get(scene_id)
    overrides = {}
    if request.profile is not None:
        try:
            overrides["profile"] = Profile(request.profile)
        except ValueError:
            raise UserInputError(f"Unknown profile: {request.profile}") from None
    config = GenerationConfig.from_settings(settings, **overrides)

    start = time.perf_counter()
    result = operations.build(comp, request.source, config, confirm=lambda _: request.confirm, font=request.font)
    elapsed = (time.perf_counter() - start) * 1000
    logger.info("Build %s: %d elements in %.0fms", scene_id, result.element_count, elapsed)

    return BuildResponse(
        source=result.source,
        path_count=result.path_count,
        vertex_count=result.vertex_count,
        layers=result.layers,
        element_count=result.element_count,
        constructors=result.constructors,
        processing_time_ms=round(elapsed, 1),
    )


@router.post("/{scene_id}/cleanup", response_model=CleanupResponse)
async def cleanup(scene_id: str, store: SceneStore = Depends(get_store)) -> CleanupResponse:
    return CleanupResponse(removed=operations.cleanup(store.get(scene_id)))


@router.post("/{scene_id}/bake", response_model=BakeResponse)
async def bake(scene_id: str, store: SceneStore = Depends(get_store)) -> BakeResponse:
    report = operations.bake_scene(store.get(scene_id))
    return BakeResponse(**report.to_dict())


@router.post("/{scene_id}/animate", response_model=AnimateResponse)
async def animate(scene_id: str, request: AnimateRequest, store: SceneStore = Depends(get_store)) -> AnimateResponse:
    start, end = operations.auto_animate(store.get(scene_id), request.duration, request.stagger, request.easing)
    return AnimateResponse(start=start, end=end)


@router.post("/{scene_id}/reset", response_model=ControlsResponse)
async def reset(scene_id: str, store: SceneStore = Depends(get_store)) -> ControlsResponse:
    comp = store.get(scene_id)
    operations.reset_animation(comp)
    return ControlsResponse(values=_control_values(comp))


@router.post("/{scene_id}/precompose", response_model=PrecomposeResponse)
async def precompose(scene_id: str, store: SceneStore = Depends(get_store)) -> PrecomposeResponse:
    nested = operations.precompose(store.get(scene_id))
    return PrecomposeResponse(name=nested.name, layers=[lyr.name for lyr in nested.layers])


def _control_values(comp: Composition) -> dict:
    control = comp.layer(CONTROL_LAYER)
    if control is None:
        raise UserInputError(f"{CONTROL_LAYER} not found. Build first.")
    ctx = EvalContext(comp)
    return {name: to_jsonable(ctx.value(prop)) for name, prop in control.effects.items()}


@router.get("/{scene_id}/controls", response_model=ControlsResponse)
async def get_controls(scene_id: str, store: SceneStore = Depends(get_store)) -> ControlsResponse:
    return ControlsResponse(values=_control_values(store.get(scene_id)))


@router.post("/{scene_id}/controls", response_model=ControlsResponse)
async def set_controls(scene_id: str, request: ControlsRequest, store: SceneStore = Depends(get_store)) -> ControlsResponse:
    comp = store.get(scene_id)
    control = comp.layer(CONTROL_LAYER)
    if control is None:
        raise UserInputError(f"{CONTROL_LAYER} not found. Build first.")
    unknown = sorted(set(request.values) - set(control.effects))
    if unknown:
        raise UserInputError(f"Unknown controls: {', '.join(unknown)}")
    for name, value in request.values.items():
        prop = control.effect(name)
        prop.remove_keys()
        prop.set_value(tuple(value) if isinstance(value, list) else value)
    return ControlsResponse(values=_control_values(comp))


@router.get("/{scene_id}/evaluate", response_model=EvaluateResponse)
async def evaluate(scene_id: str, time: float | None = None, store: SceneStore = Depends(get_store)) -> EvaluateResponse:
    comp = store.get(scene_id)
    t = comp.time if time is None else time
    try:
        values = evaluate_elements(comp, t)
    except LookupError as e:
        raise StructuralMismatch(str(e)) from e
    return EvaluateResponse(
        time=t,
        elements={name: {slot: to_jsonable(v) for slot, v in slots.items()} for name, slots in values.items()},
    )


@router.get("/{scene_id}/expressions", response_model=ExpressionsResponse)
async def expressions(scene_id: str, store: SceneStore = Depends(get_store)) -> ExpressionsResponse:
    return ExpressionsResponse(expressions=scene_expressions(store.get(scene_id)))


@router.get("/{scene_id}/preview")
async def preview(scene_id: str, time: float | None = None, store: SceneStore = Depends(get_store)) -> Response:
    svg = render_svg(store.get(scene_id), time)
    return Response(content=svg, media_type="image/svg+xml")
