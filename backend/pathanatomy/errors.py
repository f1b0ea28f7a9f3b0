"""Error taxonomy for build, bake and the other scene operations.

Only ``GeometricDegeneracy`` never leaves the core: degenerate inputs are
replaced with a defined fallback value where they occur and logged.
"""

from __future__ import annotations


class PathAnatomyError(Exception):
    """Base class for every error raised by an operation."""


class UserInputError(PathAnatomyError):
    """The operation cannot start with the given selection or scene state."""


class EmptySourceError(UserInputError):
    """The selected layer holds no discoverable paths."""


class SceneNotFoundError(UserInputError):
    pass


class PerformanceWarning(PathAnatomyError):
    """Vertex count above the warning threshold and the caller did not confirm."""

    def __init__(self, vertex_count: int, threshold: int) -> None:
        self.vertex_count = vertex_count
        self.threshold = threshold
        super().__init__(
            f"{vertex_count} vertices found (more than {threshold}); "
            "this will generate many elements. Confirm to continue."
        )


class GeometricDegeneracy(PathAnatomyError):
    """Collinear triple, zero-length vector or non-invertible frame.

    Never raised. Each case is replaced by a fallback value where it is
    detected and logged at debug; the class names the category for callers
    that classify errors.
    """


class StructuralMismatch(PathAnatomyError):
    """An element the operation relies on is missing from the scene."""


class FatalConstructionError(PathAnatomyError):
    """Unexpected failure inside a transactional operation.

    The host transaction has already been rolled back when this is raised.
    """

    def __init__(self, location: str, cause: BaseException | None = None) -> None:
        self.location = location
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Error in {location}{detail}")
