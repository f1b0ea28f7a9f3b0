"""FastAPI dependency injection."""

from __future__ import annotations

import logging
import uuid

from pathanatomy.config import settings
from pathanatomy.errors import SceneNotFoundError
from pathanatomy.host.scene import Composition

logger = logging.getLogger(__name__)


def get_settings():
    return settings


class SceneStore:
    """In-process compositions by id."""

    def __init__(self) -> None:
        self._scenes: dict[str, Composition] = {}

    def add(self, comp: Composition) -> str:
        scene_id = uuid.uuid4().hex[:12]
        self._scenes[scene_id] = comp
        logger.info("Stored scene %s (%s, %d layers)", scene_id, comp.name, len(comp.layers))
        return scene_id

    def get(self, scene_id: str) -> Composition:
        try:
            return self._scenes[scene_id]
        except KeyError:
            raise SceneNotFoundError(f"Scene {scene_id} not found") from None


_store = SceneStore()


def get_store() -> SceneStore:
    return _store
