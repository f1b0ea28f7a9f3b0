"""JSON scene document model."""

from __future__ import annotations

from typing import Annotated, Literal, Union

import numpy as np
from pydantic import BaseModel, Field, model_validator

from pathanatomy.engine.context import PathData
from pathanatomy.host.scene import Composition, GroupNode, Layer, LayerKind, Node, PathNode, Property, TransformProps

Point = tuple[float, float]


class TransformModel(BaseModel):
    anchor: Point = (0.0, 0.0)
    position: Point = (0.0, 0.0)
    scale: Point = (100.0, 100.0)
    rotation: float = 0.0

    def to_props(self) -> TransformProps:
        return TransformProps(self.anchor, self.position, self.scale, self.rotation)


class PathModel(BaseModel):
    type: Literal["path"] = "path"
    name: str = "Path 1"
    vertices: list[Point]
    in_tangents: list[Point] | None = None
    out_tangents: list[Point] | None = None
    closed: bool = False

    @model_validator(mode="after")
    def _tangent_lengths(self) -> PathModel:
        n = len(self.vertices)
        for label, tangents in (("in_tangents", self.in_tangents), ("out_tangents", self.out_tangents)):
            if tangents is not None and len(tangents) != n:
                raise ValueError(f"{label} has {len(tangents)} entries, expected {n}")
        return self

    def to_node(self) -> PathNode:
        data = PathData(
            np.array(self.vertices, dtype=np.float64),
            None if self.in_tangents is None else np.array(self.in_tangents, dtype=np.float64),
            None if self.out_tangents is None else np.array(self.out_tangents, dtype=np.float64),
            self.closed,
        )
        return PathNode(self.name, Property(data))


class GroupModel(BaseModel):
    type: Literal["group"] = "group"
    name: str
    transform: TransformModel = Field(default_factory=TransformModel)
    contents: list[ContentModel] = Field(default_factory=list)

    def to_node(self) -> GroupNode:
        return GroupNode(self.name, _nodes(self.contents), self.transform.to_props())


ContentModel = Annotated[Union[PathModel, GroupModel], Field(discriminator="type")]
GroupModel.model_rebuild()


def _nodes(contents: list[PathModel | GroupModel]) -> list[Node]:
    return [c.to_node() for c in contents]


class LayerModel(BaseModel):
    name: str
    transform: TransformModel = Field(default_factory=TransformModel)
    contents: list[ContentModel] = Field(default_factory=list)

    def to_layer(self) -> Layer:
        return Layer(self.name, LayerKind.SHAPE, _nodes(self.contents), self.transform.to_props())


class SceneDocument(BaseModel):
    """A composition holding artwork layers, top layer first."""

    name: str = "Comp 1"
    width: float = 1920.0
    height: float = 1080.0
    duration: float = 10.0
    time: float = 0.0
    layers: list[LayerModel] = Field(default_factory=list)

    def to_composition(self) -> Composition:
        comp = Composition(self.name, self.width, self.height, self.duration, self.time)
        comp.layers = [lm.to_layer() for lm in self.layers]
        return comp
