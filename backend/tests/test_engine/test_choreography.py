"""Tests for phase progress, stagger and easing."""

import pytest

from pathanatomy.engine.choreography import (
    PHASES,
    ChoreographyParameters,
    Phase,
    PhaseWindow,
    ease,
    phase_progress,
    reveal,
    stagger_progress,
)
from pathanatomy.engine.controls import StaticControls


@pytest.mark.parametrize("phase", list(Phase))
def test_everything_revealed_at_timeline_100(phase):
    params = ChoreographyParameters(timeline=100.0, stagger=60.0, easing=80.0)
    assert reveal(phase, params, index=4, total=5) == pytest.approx(1.0)


@pytest.mark.parametrize("phase", list(Phase))
def test_nothing_revealed_at_timeline_0(phase):
    params = ChoreographyParameters(timeline=0.0, stagger=30.0)
    assert reveal(phase, params, index=0, total=3) == 0.0


def test_phase_window_progress():
    window = PhaseWindow(30, 65)
    assert phase_progress(30, window) == 0.0
    assert phase_progress(47.5, window) == pytest.approx(0.5)
    assert phase_progress(90, window) == 1.0


def test_override_below_100_replaces_timeline():
    window = PHASES[Phase.GRID].window
    assert phase_progress(100, window, override=40) == pytest.approx(0.4)
    assert phase_progress(0, window, override=40) == pytest.approx(0.4)
    assert phase_progress(0, window, override=100) == 0.0


@pytest.mark.parametrize("easing", [0, 25, 50, 100])
def test_easing_monotonic_with_fixed_endpoints(easing):
    values = [ease(p / 20, easing) for p in range(21)]
    assert values[0] == 0.0
    assert values[-1] == 1.0
    assert all(a <= b for a, b in zip(values, values[1:]))


def test_zero_easing_is_linear():
    assert ease(0.3, 0) == pytest.approx(0.3)


def test_stagger_orders_elements():
    raw = 0.5
    progress = [stagger_progress(raw, i, 5, stagger=60) for i in range(5)]
    assert all(a >= b for a, b in zip(progress, progress[1:]))
    assert progress[0] > progress[-1]


def test_full_stagger_still_completes():
    assert stagger_progress(1.0, 9, 10, stagger=100) == 1.0


def test_outline_phase_ignores_stagger():
    params = ChoreographyParameters(timeline=30.0, stagger=90.0, easing=0.0)
    assert reveal(Phase.OUTLINE, params, 0, 5) == reveal(Phase.OUTLINE, params, 4, 5)


def test_parameters_clamped_from_controls():
    controls = StaticControls({"Timeline": 250.0, "Stagger": -10.0, "Easing": 120.0})
    params = ChoreographyParameters.from_controls(controls)
    assert params.timeline == 100.0
    assert params.stagger == 0.0
    assert params.easing == 100.0
    assert params.override("Anchor Pop") == 100.0
