"""Tests for the constructor registry."""

import pytest

from pathanatomy.engine.context import GenerationContext
from pathanatomy.engine.registry import ConstructorRegistry, ConstructorSpec, Stage, get_registry


def _noop(ctx: GenerationContext) -> None:
    pass


def test_register_and_get():
    reg = ConstructorRegistry()
    spec = ConstructorSpec(id="G0.01", stage=Stage.SNAPSHOT, fn=_noop)
    reg.register(spec)
    assert reg.get("G0.01") is spec
    assert reg.count == 1


def test_duplicate_id_rejected():
    reg = ConstructorRegistry()
    reg.register(ConstructorSpec(id="G0.01", stage=Stage.SNAPSHOT, fn=_noop))
    with pytest.raises(ValueError, match="Duplicate"):
        reg.register(ConstructorSpec(id="G0.01", stage=Stage.SNAPSHOT, fn=_noop))


def test_all_orders_by_stage_then_id():
    reg = ConstructorRegistry()
    reg.register(ConstructorSpec(id="G1.01", stage=Stage.ANATOMY, fn=_noop))
    reg.register(ConstructorSpec(id="G0.01", stage=Stage.SNAPSHOT, fn=_noop))
    assert [s.id for s in reg.all()] == ["G0.01", "G1.01"]


def test_resolve_order_with_deps():
    reg = ConstructorRegistry()
    reg.register(ConstructorSpec(id="G0.01", stage=Stage.SNAPSHOT, fn=_noop))
    reg.register(ConstructorSpec(id="G3.05", stage=Stage.CONSTRUCTION, fn=_noop, dependencies=["G0.01"]))
    order = reg.resolve_order({"G3.05"})
    ids = [s.id for s in order]
    assert ids == ["G0.01", "G3.05"]


def test_resolve_order_detects_cycles():
    reg = ConstructorRegistry()
    reg.register(ConstructorSpec(id="A", stage=Stage.GRID, fn=_noop, dependencies=["B"]))
    reg.register(ConstructorSpec(id="B", stage=Stage.GRID, fn=_noop, dependencies=["A"]))
    with pytest.raises(ValueError, match="Circular"):
        reg.resolve_order(None)


def test_all_constructors_registered():
    reg = get_registry()
    assert reg.count == 12
    stages = [s.stage for s in reg.all()]
    assert (stages.count(Stage.ANATOMY), stages.count(Stage.GRID), stages.count(Stage.CONSTRUCTION)) == (4, 2, 5)
    assert all("construction" in s.tags for s in reg.all() if s.stage is Stage.CONSTRUCTION)


def test_resolve_order_rejects_unknown_dependency():
    reg = ConstructorRegistry()
    reg.register(ConstructorSpec(id="G1.01", stage=Stage.ANATOMY, fn=_noop, dependencies=["G0.01"]))
    with pytest.raises(ValueError, match="Unknown dependency G0.01 required by G1.01"):
        reg.resolve_order(None)


def test_resolve_order_keeps_stage_order():
    order = [s.id for s in get_registry().resolve_order()]
    assert order[0] == "G0.01"
    assert order == sorted(order)
