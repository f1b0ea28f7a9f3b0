"""API response models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    constructors_registered: int = 0


class LayerSummary(BaseModel):
    name: str
    kind: str
    generated: bool = False
    elements: int = 0


class SceneResponse(BaseModel):
    id: str
    name: str
    width: float
    height: float
    time: float = 0.0
    layers: list[LayerSummary] = Field(default_factory=list)


class BuildResponse(BaseModel):
    source: str
    path_count: int
    vertex_count: int
    layers: list[str] = Field(default_factory=list)
    element_count: int = 0
    constructors: list[str] = Field(default_factory=list)
    processing_time_ms: float = 0.0


class CleanupResponse(BaseModel):
    removed: list[str] = Field(default_factory=list)


class BakeResponse(BaseModel):
    frozen: list[str] = Field(default_factory=list)
    relinked: list[str] = Field(default_factory=list)
    skipped: list[tuple[str, str]] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)
    complete: bool = True


class AnimateResponse(BaseModel):
    start: float
    end: float


class PrecomposeResponse(BaseModel):
    name: str
    layers: list[str] = Field(default_factory=list)


class EvaluateResponse(BaseModel):
    time: float
    elements: dict[str, dict[str, Any]] = Field(default_factory=dict)


class ExpressionsResponse(BaseModel):
    expressions: dict[str, dict[str, str]] = Field(default_factory=dict)


class ControlsResponse(BaseModel):
    values: dict[str, Any] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    error: str
    detail: str
