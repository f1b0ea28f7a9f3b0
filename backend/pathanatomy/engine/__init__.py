"""PathAnatomy geometry and choreography engine."""

from pathanatomy.engine.registry import constructor, Stage, get_registry
from pathanatomy.engine.context import GenerationContext, PathData, PathDescriptor
from pathanatomy.engine.pipeline import Pipeline, load_constructors

__all__ = [
    "constructor",
    "Stage",
    "get_registry",
    "GenerationContext",
    "PathData",
    "PathDescriptor",
    "Pipeline",
    "load_constructors",
]
