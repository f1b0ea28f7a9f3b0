"""Bake: freeze the outlines and relink every dependent element to them.

After baking, the outlines hold static composition-space paths and stop
following the source artwork. Every other generated element keeps its
binding shape but reads from the frozen outline of its path instead of the
source layer, so the overlay survives deleting or editing the source.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from pathanatomy.engine.bindings import Axis, Binding, GridLine
from pathanatomy.engine.context import PathAddress, PathData, PathSource
from pathanatomy.engine.controls import CONTROL_LAYER
from pathanatomy.engine.identity import Category, ElementId
from pathanatomy.errors import FatalConstructionError, PathAnatomyError, StructuralMismatch
from pathanatomy.host.evaluation import EvalContext
from pathanatomy.host.scene import Composition, GroupNode, Layer, iter_elements
from pathanatomy.utils.geometry import grid_extents

logger = logging.getLogger(__name__)

OUTLINES_LAYER = "PP_Outlines"


@dataclass
class BakeReport:
    frozen: list[str] = field(default_factory=list)
    relinked: list[str] = field(default_factory=list)
    skipped: list[tuple[str, str]] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.skipped and not self.missing

    def to_dict(self) -> dict:
        return {
            "frozen": self.frozen,
            "relinked": self.relinked,
            "skipped": [list(s) for s in self.skipped],
            "missing": self.missing,
            "complete": self.complete,
        }


def frozen_source(path_index: int) -> PathSource:
    return PathSource(PathAddress(OUTLINES_LAYER, (ElementId(Category.OUTLINE, path_index).name,), "Path"))


def _outline_groups(layer: Layer) -> dict[int, GroupNode]:
    groups = {}
    for node in layer.contents:
        if isinstance(node, GroupNode) and node.identity is not None and node.identity.category is Category.OUTLINE:
            groups[node.identity.path_index] = node
    return groups


def _freeze_outlines(comp: Composition, layer: Layer, report: BakeReport) -> dict[int, PathData]:
    reader = EvalContext(comp)
    groups = _outline_groups(layer)
    if not groups:
        raise StructuralMismatch(f"No paths found on {OUTLINES_LAYER}.")

    # Evaluate everything before the first mutation: bindings may read the source
    values = {p: reader.value(g.slots["path"]) for p, g in groups.items()}
    layer.transform.position.freeze((0.0, 0.0))
    for p, group in groups.items():
        group.slots["path"].freeze(values[p].copy())
        report.frozen.append(group.name)
    return values


def _relink(comp: Composition, frozen: dict[int, PathData], report: BakeReport) -> None:
    points = np.vstack([d.vertices for d in frozen.values() if d.vertex_count]) if frozen else np.empty((0, 2))
    extents = grid_extents(points) if len(points) else None

    for identity, slots, _ in iter_elements(comp):
        if identity.category is Category.OUTLINE:
            continue
        bound = {name: prop for name, prop in slots.items() if isinstance(prop.binding, Binding) and prop.binding.source_bound}
        if not bound:
            continue
        if identity.path_index not in frozen:
            report.skipped.append((identity.name, f"no frozen outline for path {identity.path_index}"))
            logger.warning("Bake: skipping %s, path %s has no outline", identity.name, identity.path_index)
            continue
        source = frozen_source(identity.path_index)
        for prop in bound.values():
            binding = prop.binding.rebind(source)
            if isinstance(binding, GridLine) and extents is not None:
                if binding.axis is Axis.VERTICAL:
                    binding = binding.with_extents(extents.y_min, extents.y_max)
                else:
                    binding = binding.with_extents(extents.x_min, extents.x_max)
            prop.binding = binding
        report.relinked.append(identity.name)


def _expected(comp: Composition, frozen: dict[int, PathData], report: BakeReport) -> None:
    present = {identity.name for identity, _, _ in iter_elements(comp)}
    if comp.layer("PP_Anchors") is None:
        report.missing.append("PP_Anchors")
    for p, data in frozen.items():
        for v in range(data.vertex_count):
            for category in (Category.ANCHOR, Category.LABEL):
                name = ElementId(category, p, (v,)).name
                if name not in present:
                    report.missing.append(name)
    if report.missing:
        logger.warning("Bake: %d expected elements missing", len(report.missing))


def bake(comp: Composition) -> BakeReport:
    """Freeze the outlines and relink dependents, in one transaction."""
    outlines = comp.layer(OUTLINES_LAYER)
    if outlines is None:
        raise StructuralMismatch(f"{OUTLINES_LAYER} not found. Build first.")
    if comp.layer(CONTROL_LAYER) is None:
        raise StructuralMismatch(f"{CONTROL_LAYER} not found. Build first.")

    report = BakeReport()
    try:
        with comp.transaction("Bake"):
            frozen = _freeze_outlines(comp, outlines, report)
            _relink(comp, frozen, report)
            _expected(comp, frozen, report)
    except PathAnatomyError:
        raise
    except Exception as e:
        raise FatalConstructionError("bake", e) from e

    logger.info(
        "Bake: %d outlines frozen, %d elements relinked, %d skipped",
        len(report.frozen),
        len(report.relinked),
        len(report.skipped),
    )
    return report
