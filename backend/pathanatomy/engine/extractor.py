"""Path vertex extraction: walk a layer's content tree and snapshot every path."""

from __future__ import annotations

import logging

from pathanatomy.engine.context import AncestorGroup, PathAddress, PathDescriptor
from pathanatomy.host.evaluation import EvalContext
from pathanatomy.host.scene import GroupNode, Layer, Node, PathNode

logger = logging.getLogger(__name__)


def discover_paths(layer: Layer | None, reader: EvalContext) -> list[PathDescriptor]:
    """Depth-first, pre-order list of path descriptors.

    Values and frames are sampled at ``reader.time``. Non-path, non-group
    nodes are ignored. An absent or empty root yields an empty list.
    """
    if layer is None or not layer.contents:
        return []

    owner = reader.transform_frame(layer.transform)
    found: list[PathDescriptor] = []

    def walk(nodes: list[Node], chain: tuple[AncestorGroup, ...]) -> None:
        for node in nodes:
            if isinstance(node, PathNode):
                data = reader.value(node.path)
                if data is None:
                    continue
                found.append(PathDescriptor(
                    index=len(found),
                    address=PathAddress(layer.name, tuple(g.name for g in chain), node.name),
                    data=data.copy(),
                    # chain is outer → inner; descriptors hold innermost first
                    ancestors=tuple(reversed(chain)),
                    owner=owner,
                ))
            elif isinstance(node, GroupNode):
                frame = reader.transform_frame(node.transform)
                walk(node.contents, chain + (AncestorGroup(node.name, frame),))

    walk(layer.contents, ())
    logger.info(
        "Discovered %d paths (%d vertices) on %s",
        len(found),
        sum(p.data.vertex_count for p in found),
        layer.name,
    )
    return found
