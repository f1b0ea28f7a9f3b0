"""Tests for the in-memory scene graph: keyframes, transactions, element lookup."""

import numpy as np
import pytest

from pathanatomy.engine.identity import Category, ElementId
from pathanatomy.host.scene import GroupNode, KeyframeEase, Layer, Property, iter_elements, iter_groups
from tests.conftest import comp_with, path_layer, square_data


class TestKeyframes:
    def test_static_value(self):
        prop = Property(5.0)
        assert prop.value_at(3.0) == 5.0
        assert not prop.animated

    def test_linear_interpolation(self):
        prop = Property(0.0)
        prop.add_key(0.0, 0.0)
        prop.add_key(2.0, 100.0)
        assert prop.value_at(1.0) == pytest.approx(50.0)
        assert prop.value_at(0.5) == pytest.approx(25.0)

    def test_holds_outside_keys(self):
        prop = Property(0.0)
        prop.add_key(1.0, 10.0)
        prop.add_key(2.0, 20.0)
        assert prop.value_at(0.0) == 10.0
        assert prop.value_at(5.0) == 20.0

    def test_eased_keys_are_symmetric(self):
        ease = KeyframeEase(speed=0.0, influence=33.0)
        prop = Property(0.0)
        prop.add_key(0.0, 0.0, ease_in=ease, ease_out=ease)
        prop.add_key(2.0, 100.0, ease_in=ease, ease_out=ease)
        assert prop.value_at(1.0) == pytest.approx(50.0, abs=1e-6)
        assert prop.value_at(0.5) < 25.0
        assert prop.value_at(1.5) > 75.0

    def test_vector_values(self):
        prop = Property((0.0, 0.0))
        prop.add_key(0.0, (0.0, 10.0))
        prop.add_key(1.0, (10.0, 30.0))
        np.testing.assert_allclose(prop.value_at(0.5), [5.0, 20.0])

    def test_key_at_same_time_replaces(self):
        prop = Property(0.0)
        prop.add_key(1.0, 10.0)
        prop.add_key(1.0, 20.0)
        assert [k.value for k in prop.keyframes] == [20.0]

    def test_freeze_drops_keys_and_binding(self):
        prop = Property(binding=object())
        prop.add_key(0.0, 1.0)
        prop.freeze(7.0)
        assert not prop.bound
        assert not prop.animated
        assert prop.value_at(0.0) == 7.0


class TestTransaction:
    def test_rollback_restores_layers(self):
        comp = comp_with(path_layer([square_data()]))
        with pytest.raises(RuntimeError):
            with comp.transaction("Test"):
                comp.layers.clear()
                comp.add_layer(Layer("PP_Partial"))
                raise RuntimeError("boom")
        assert [lyr.name for lyr in comp.layers] == ["Shape Layer 1"]

    def test_commit_keeps_changes(self):
        comp = comp_with(path_layer([square_data()]))
        with comp.transaction("Test"):
            comp.add_layer(Layer("PP_Grid"))
        assert [lyr.name for lyr in comp.layers] == ["PP_Grid", "Shape Layer 1"]


def test_generated_layers_by_prefix():
    comp = comp_with(Layer("PP_Control"), path_layer([square_data()]), Layer("PP_Grid"))
    assert [lyr.name for lyr in comp.generated_layers()] == ["PP_Control", "PP_Grid"]


def test_iter_groups_and_elements():
    anchor = GroupNode("A0_0", identity=ElementId(Category.ANCHOR, 0, (0,)))
    family = GroupNode("V_Lines", [GroupNode("VL_0_0", identity=ElementId(Category.GRID_V, 0, (0,)))])
    label = Layer("PP_Label_0_0", identity=ElementId(Category.LABEL, 0, (0,)))
    comp = comp_with(label, Layer("PP_Grid", contents=[anchor, family]))

    assert [g.name for g in iter_groups(comp.layers[1].contents)] == ["A0_0", "V_Lines", "VL_0_0"]
    assert [identity.name for identity, _, _ in iter_elements(comp)] == ["PP_Label_0_0", "A0_0", "VL_0_0"]
