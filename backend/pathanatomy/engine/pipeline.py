"""Pipeline orchestrator: runs constructors in dependency order with profile gating."""

from __future__ import annotations

import importlib
import logging
import pkgutil
import time

from pathanatomy.engine.config import GenerationConfig
from pathanatomy.engine.context import GenerationContext
from pathanatomy.engine.registry import ConstructorRegistry, get_registry
from pathanatomy.errors import FatalConstructionError

logger = logging.getLogger(__name__)

STAGE_PACKAGES = ["layer0", "layer1", "layer2", "layer3"]


def load_constructors() -> None:
    """Import all constructor modules so @constructor decorators fire.

    Module imports are cached, so repeated calls register nothing twice.
    """
    for stage_name in STAGE_PACKAGES:
        package_name = f"pathanatomy.engine.{stage_name}"
        package = importlib.import_module(package_name)
        for _, module_name, _ in pkgutil.iter_modules(package.__path__):
            importlib.import_module(f"{package_name}.{module_name}")


class Pipeline:
    """Orchestrates the constructor pipeline."""

    def __init__(
        self,
        registry: ConstructorRegistry | None = None,
        config: GenerationConfig | None = None,
    ) -> None:
        self.registry = registry or get_registry()
        self.config = config or GenerationConfig()

    def run(self, ctx: GenerationContext) -> GenerationContext:
        """Run every constructor not gated out. Any failure is fatal."""
        start = time.perf_counter()

        skip_ids = self._adaptive_gate(ctx)

        all_specs = self.registry.all()
        requested = {s.id for s in all_specs} - skip_ids
        ordered = self.registry.resolve_order(requested)

        logger.info(
            "Pipeline: %d constructors queued (%d skipped)",
            len(ordered),
            len(skip_ids),
        )

        for spec in ordered:
            t0 = time.perf_counter()
            try:
                spec.fn(ctx)
            except Exception as e:
                logger.error("  %s FAILED: %s", spec.id, e)
                raise FatalConstructionError(spec.id, e) from e
            ctx.completed_constructors.add(spec.id)
            elapsed = (time.perf_counter() - t0) * 1000
            logger.debug("  %s completed in %.1fms", spec.id, elapsed)

        total = (time.perf_counter() - start) * 1000
        logger.info(
            "Pipeline complete: %d constructors, %d elements in %.0fms",
            len(ctx.completed_constructors),
            len(ctx.all_elements()),
            total,
        )
        return ctx

    def _adaptive_gate(self, ctx: GenerationContext) -> set[str]:
        """Determine which constructors to skip.

        - The minimal profile skips every construction-tagged constructor
        - Paths too small for triangles skip the triangle-based constructions
        """
        skip: set[str] = set()

        if not ctx.config.construction_enabled:
            skip.update(s.id for s in self.registry.all() if "construction" in s.tags)

        if all(p.data.vertex_count < 3 for p in ctx.paths):
            skip.update(s.id for s in self.registry.all() if "triangles" in s.tags)

        return skip
