"""Tests for the JSON scene document model."""

import numpy as np
import pytest
from pydantic import ValidationError

from pathanatomy.engine.extractor import discover_paths
from pathanatomy.host.evaluation import EvalContext
from pathanatomy.host.scene import GroupNode, PathNode
from pathanatomy.models.documents import SceneDocument
from tests.conftest import SQUARE, SQUARE_DOCUMENT


def test_square_document():
    comp = SceneDocument.model_validate(SQUARE_DOCUMENT).to_composition()
    assert (comp.name, comp.width, comp.height) == ("Square", 400, 300)
    layer = comp.layer("Shape Layer 1")
    (group,) = layer.contents
    assert isinstance(group, GroupNode)
    assert isinstance(group.contents[0], PathNode)

    (path,) = discover_paths(layer, EvalContext(comp))
    assert path.address.groups == ("Rectangle 1",)
    np.testing.assert_allclose(path.world_vertices()[0], [60, 60])


def test_nested_groups():
    doc = SceneDocument.model_validate({"layers": [{"name": "L", "contents": [
        {"type": "group", "name": "Outer", "contents": [
            {"type": "group", "name": "Inner", "contents": [
                {"type": "path", "vertices": [[0, 0], [1, 1]]},
            ]},
        ]},
    ]}]})
    comp = doc.to_composition()
    (path,) = discover_paths(comp.layer("L"), EvalContext(comp))
    assert path.address.groups == ("Outer", "Inner")
    assert not path.data.closed


def test_tangent_length_mismatch():
    with pytest.raises(ValidationError, match="in_tangents has 1 entries"):
        SceneDocument.model_validate({"layers": [{"name": "L", "contents": [
            {"type": "path", "vertices": SQUARE, "in_tangents": [[0, 0]]},
        ]}]})


def test_unknown_content_type():
    with pytest.raises(ValidationError):
        SceneDocument.model_validate({"layers": [{"name": "L", "contents": [{"type": "star"}]}]})
