"""API request models."""

from __future__ import annotations

from pydantic import BaseModel, Field

from pathanatomy.models.documents import SceneDocument


class CreateSceneRequest(BaseModel):
    svg: str | None = Field(default=None, description="Raw SVG code")
    document: SceneDocument | None = Field(default=None, description="JSON scene document")
    layer_name: str = Field(default="Artwork", description="Name of the artwork layer created from SVG")


class BuildRequest(BaseModel):
    source: str = Field(..., description="Name of the layer holding the source paths")
    confirm: bool = Field(default=False, description="Proceed above the vertex warning threshold")
    profile: str | None = Field(default=None, description="minimal or extended; defaults to settings")
    font: str | None = Field(default=None, description="Label font name; defaults to settings")


class AnimateRequest(BaseModel):
    duration: str = Field(default="2", description="Seconds, as typed in the panel")
    stagger: float = Field(default=0.0, ge=0, le=100)
    easing: float = Field(default=50.0, ge=0, le=100)


class ControlsRequest(BaseModel):
    values: dict[str, bool | float | list[float]] = Field(..., description="Control name → new static value")


class TimeRequest(BaseModel):
    time: float = Field(..., ge=0, description="Composition time in seconds")
