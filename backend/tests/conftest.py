"""Shared test fixtures."""

from __future__ import annotations

import numpy as np
import pytest

from pathanatomy.engine.context import PathData
from pathanatomy.engine.pipeline import load_constructors
from pathanatomy.host.scene import Composition, GroupNode, Layer, PathNode, Property, TransformProps

load_constructors()


SQUARE = [(0.0, 0.0), (100.0, 0.0), (100.0, 100.0), (0.0, 100.0)]

# Closed diamond with one curved corner
DIAMOND = [(50.0, 0.0), (100.0, 40.0), (50.0, 100.0), (0.0, 40.0)]
DIAMOND_IN = [(0.0, 0.0), (0.0, 0.0), (20.0, 0.0), (0.0, 0.0)]
DIAMOND_OUT = [(0.0, 0.0), (0.0, 0.0), (-20.0, 0.0), (0.0, 0.0)]

SQUARE_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="200" height="200" viewBox="0 0 200 200">
  <path d="M0 0 L100 0 L100 100 L0 100 Z"/>
</svg>'''

NESTED_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 400 300">
  <g id="body" transform="translate(100,50) rotate(90) scale(2)">
    <path id="edge" d="M0 0 L10 0"/>
    <g transform="translate(5,5)">
      <circle cx="0" cy="0" r="10"/>
    </g>
  </g>
  <polygon points="0,0 30,0 15,20"/>
</svg>'''

CURVES_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 100 100">
  <path d="M10 10 C 20 0, 40 0, 50 10 Q 60 30 50 50 A 20 20 0 0 1 10 50 Z"/>
</svg>'''

SQUARE_DOCUMENT = {
    "name": "Square",
    "width": 400,
    "height": 300,
    "layers": [
        {
            "name": "Shape Layer 1",
            "transform": {"position": [50, 60]},
            "contents": [
                {
                    "type": "group",
                    "name": "Rectangle 1",
                    "transform": {"position": [10, 0]},
                    "contents": [
                        {"type": "path", "name": "Path 1", "vertices": SQUARE, "closed": True},
                    ],
                },
            ],
        },
    ],
}


def path_layer(
    paths: list[PathData],
    name: str = "Shape Layer 1",
    transform: TransformProps | None = None,
    group_transform: TransformProps | None = None,
) -> Layer:
    """A shape layer with every path inside one group."""
    group = GroupNode(
        "Group 1",
        [PathNode(f"Path {i + 1}", Property(p)) for i, p in enumerate(paths)],
        group_transform or TransformProps(),
    )
    return Layer(name, contents=[group], transform=transform or TransformProps())


def comp_with(*layers: Layer) -> Composition:
    comp = Composition("Test Comp", 400, 300)
    comp.layers = list(layers)
    return comp


def square_data() -> PathData:
    return PathData(np.array(SQUARE), closed=True)


def diamond_data() -> PathData:
    return PathData(np.array(DIAMOND), np.array(DIAMOND_IN), np.array(DIAMOND_OUT), closed=True)


@pytest.fixture
def square_comp() -> Composition:
    return comp_with(path_layer([square_data()]))


@pytest.fixture
def diamond_comp() -> Composition:
    return comp_with(path_layer(
        [diamond_data()],
        transform=TransformProps(position=(200.0, 100.0)),
        group_transform=TransformProps(anchor=(50.0, 50.0), scale=(150.0, 150.0), rotation=30.0),
    ))
