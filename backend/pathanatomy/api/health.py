"""Health check + meta endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from pathanatomy.engine.config import Profile
from pathanatomy.engine.controls import control_specs
from pathanatomy.engine.registry import get_registry
from pathanatomy.models.responses import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(
        status="ok",
        version="0.1.0",
        constructors_registered=get_registry().count,
    )


@router.get("/constructors")
async def constructors() -> list[dict[str, str]]:
    return [
        {"id": spec.id, "stage": spec.stage.name.lower(), "description": spec.description}
        for spec in get_registry().all()
    ]


@router.get("/controls")
async def controls(profile: Profile = Profile.EXTENDED) -> list[dict]:
    return [
        {"name": spec.name, "kind": spec.kind.value, "default": spec.default}
        for spec in control_specs(profile)
    ]
