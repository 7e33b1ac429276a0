import numpy as np
import pytest

from projgrad.core import NonConvergenceError, NumericalError, OptimizationError
from projgrad.objectives import FunctionObjective
from projgrad.params import DenseParameter
from projgrad.projected import ProjectedGradient
from projgrad.projection import BoxProjection, NonNegativeProjection
from projgrad.stopping import MaxIterations


def test_non_finite_initial_value_raises():
    arr = np.array([1.0])
    obj = FunctionObjective(lambda x: float("nan"), lambda x: np.zeros_like(x))
    with pytest.raises(NumericalError):
        ProjectedGradient(NonNegativeProjection()).minimize(obj, MaxIterations(5), DenseParameter(arr))
    assert arr[0] == 1.0


def test_non_finite_initial_gradient_raises():
    obj = FunctionObjective(lambda x: 1.0, lambda x: np.array([np.inf]))
    with pytest.raises(NumericalError, match="gradient"):
        ProjectedGradient(NonNegativeProjection()).minimize(
            obj, MaxIterations(5), DenseParameter(np.array([1.0]))
        )


def test_non_finite_gradient_at_accepted_point_raises():
    def grad(x):
        return np.where(x > 2.5, np.inf, 2.0 * (x - 3.0))

    obj = FunctionObjective(lambda x: float((x[0] - 3.0) ** 2), grad)
    arr = np.array([0.0])
    pg = ProjectedGradient(NonNegativeProjection(), beta=0.5, sigma=0.1)
    with pytest.raises(NumericalError):
        pg.minimize(obj, MaxIterations(5), DenseParameter(arr))
    assert arr[0] == 0.0
    assert pg.last_stats.nit == 0


def test_nan_candidate_is_treated_as_failed_step():
    def fun(x):
        return float("nan") if x[0] > 4.0 else float((x[0] - 3.0) ** 2)

    obj = FunctionObjective(fun, lambda x: 2.0 * (x - 3.0))
    x = DenseParameter(np.array([0.0]))
    pg = ProjectedGradient(NonNegativeProjection(), beta=0.5, sigma=0.1)
    value = pg.minimize(obj, MaxIterations(10), x)
    assert value == pytest.approx(0.0)
    assert x.values[0] == pytest.approx(3.0)
    assert pg.last_stats.shrinks >= 1


def test_ascent_direction_exhausts_backtracking():
    # The reported gradient has the wrong sign, so no positive step decreases f.
    obj = FunctionObjective(lambda x: float(x[0] ** 2), lambda x: -2.0 * x)
    arr = np.array([1.0])
    pg = ProjectedGradient(BoxProjection(), beta=0.5, sigma=0.1, max_backtracks=20)
    with pytest.raises(NonConvergenceError) as excinfo:
        pg.minimize(obj, MaxIterations(5), DenseParameter(arr))
    err = excinfo.value
    assert isinstance(err, OptimizationError)
    assert err.backtracks == 20
    assert err.iteration == 0
    assert err.alpha == pytest.approx(0.5**20)
    assert arr[0] == 1.0
    assert pg.last_stats.shrinks == 20


def test_check_finite_can_be_disabled():
    obj = FunctionObjective(lambda x: float("inf"), lambda x: np.zeros_like(x))
    x = DenseParameter(np.array([1.0]))
    pg = ProjectedGradient(NonNegativeProjection(), check_finite=False)
    assert pg.minimize(obj, MaxIterations(0), x) == float("inf")
