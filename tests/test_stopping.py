import numpy as np
import pytest

from projgrad.params import DenseParameter
from projgrad.stopping import AnyOf, MaxIterations, ProjectedGradientTolerance, ValueChangeTolerance


def _grad(*values):
    return DenseParameter(np.array(values, dtype=float))


def test_max_iterations_allows_n_steps():
    stop = MaxIterations(2)
    point = _grad(0.0)
    assert [stop.done(point, 0.0, point) for _ in range(4)] == [False, False, True, True]
    stop.reset()
    assert stop.done(point, 0.0, point) is False


def test_max_iterations_zero_stops_immediately():
    point = _grad(0.0)
    assert MaxIterations(0).done(point, 0.0, point)
    with pytest.raises(ValueError):
        MaxIterations(-1)


def test_projected_gradient_tolerance_relative():
    stop = ProjectedGradientTolerance(0.1)
    point = _grad(0.0, 0.0)
    assert stop.done(point, 1.0, _grad(3.0, 4.0)) is False
    assert stop.initial_norm == pytest.approx(5.0)
    assert stop.done(point, 1.0, _grad(0.6, 0.0)) is False
    assert stop.done(point, 1.0, _grad(0.3, 0.4)) is True
    assert stop.satisfied
    stop.reset()
    assert stop.initial_norm is None


def test_projected_gradient_tolerance_absolute():
    stop = ProjectedGradientTolerance(1e-3, relative=False)
    point = _grad(0.0)
    assert stop.done(point, 0.0, _grad(1e-2)) is False
    assert stop.done(point, 0.0, _grad(1e-4)) is True


def test_zero_initial_gradient_stops():
    stop = ProjectedGradientTolerance(1e-6)
    point = _grad(0.0)
    assert stop.done(point, 0.0, _grad(0.0))


def test_zero_initial_gradient_needs_zero_gradient_later():
    stop = ProjectedGradientTolerance(1e-6)
    point = _grad(0.0)
    assert stop.done(point, 0.0, _grad(0.0))
    assert stop.done(point, 0.0, _grad(1e-300)) is False


def test_relative_tolerance_is_scale_invariant():
    stop = ProjectedGradientTolerance(1e-8)
    point = _grad(0.0)
    assert stop.done(point, 0.0, _grad(6e-6)) is False
    assert stop.done(point, 0.0, _grad(5e-11)) is False
    assert stop.done(point, 0.0, _grad(5e-14)) is True


def test_absolute_tolerance_below_1e10_is_honored():
    stop = ProjectedGradientTolerance(1e-12, relative=False)
    point = _grad(0.0)
    assert stop.done(point, 0.0, _grad(5e-11)) is False
    assert stop.done(point, 0.0, _grad(5e-13)) is True


def test_value_change_tolerance():
    stop = ValueChangeTolerance(1e-3)
    point = _grad(0.0)
    assert stop.done(point, 10.0, point) is False
    assert stop.done(point, 5.0, point) is False
    assert stop.done(point, 4.999, point) is True


def test_any_of_consults_every_member():
    counter = MaxIterations(10)
    stop = AnyOf(MaxIterations(1), counter)
    point = _grad(0.0)
    assert stop.done(point, 0.0, point) is False
    assert stop.done(point, 0.0, point) is True
    assert counter.calls == 2
    stop.reset()
    assert counter.calls == 0


def test_criteria_do_not_mutate_arguments():
    point = _grad(1.0, 2.0)
    grad = _grad(3.0, 4.0)
    stop = AnyOf(MaxIterations(5), ProjectedGradientTolerance(1e-3), ValueChangeTolerance(1e-3))
    stop.done(point, 1.0, grad)
    assert np.array_equal(point.values, [1.0, 2.0])
    assert np.array_equal(grad.values, [3.0, 4.0])


def test_any_of_requires_members():
    with pytest.raises(ValueError):
        AnyOf()
