import numpy as np
import pytest

from projgrad.objectives import FunctionObjective, LeastSquaresObjective, QuadraticObjective
from projgrad.params import DenseParameter, SparseParameter


def test_function_objective_writes_gradient():
    obj = FunctionObjective(lambda x: float(np.sum(x**2)), lambda x: 2 * x)
    point = DenseParameter(np.array([1.0, -2.0]))
    grad = point.clone_without_copy()
    value = obj.evaluate(point, grad)
    assert value == pytest.approx(5.0)
    assert np.allclose(grad.values, [2.0, -4.0])


def test_function_objective_requires_dense():
    obj = FunctionObjective(lambda x: 0.0, lambda x: x)
    with pytest.raises(TypeError):
        obj.evaluate(SparseParameter({0: 1.0}), SparseParameter({0: 0.0}))


def test_quadratic_objective_value_and_gradient():
    H = np.array([[2.0, 0.5], [0.5, 1.0]])
    g = np.array([-1.0, 1.0])
    obj = QuadraticObjective(H, g, c=3.0)
    x = np.array([1.0, 2.0])
    point = DenseParameter(x.copy())
    grad = point.clone_without_copy()
    value = obj.evaluate(point, grad)
    assert value == pytest.approx(0.5 * x @ H @ x + g @ x + 3.0)
    assert np.allclose(grad.values, H @ x + g)


def test_quadratic_objective_validates_shapes():
    with pytest.raises(ValueError):
        QuadraticObjective(np.ones((2, 3)), np.ones(2))
    with pytest.raises(ValueError):
        QuadraticObjective(np.eye(2), np.ones(3))


def test_least_squares_matches_direct_formula(rng):
    W = rng.random((6, 3))
    V = rng.random((6, 4))
    H = rng.random((3, 4))
    obj = LeastSquaresObjective(W, V)
    point = DenseParameter(H.copy())
    grad = point.clone_without_copy()
    value = obj.evaluate(point, grad)
    assert value == pytest.approx(0.5 * np.linalg.norm(V - W @ H) ** 2)
    assert np.allclose(grad.values, W.T @ (W @ H - V))


def test_least_squares_gradient_matches_finite_differences(rng):
    W = rng.random((5, 2))
    V = rng.random((5, 3))
    H = rng.random((2, 3))
    obj = LeastSquaresObjective(W, V)
    grad = DenseParameter(np.zeros_like(H))
    obj.evaluate(DenseParameter(H.copy()), grad)
    eps = 1e-6
    scratch = DenseParameter(np.zeros_like(H))
    for idx in np.ndindex(H.shape):
        plus = H.copy()
        minus = H.copy()
        plus[idx] += eps
        minus[idx] -= eps
        fd = (obj.evaluate(DenseParameter(plus), scratch) - obj.evaluate(DenseParameter(minus), scratch)) / (2 * eps)
        assert fd == pytest.approx(grad.values[idx], rel=1e-5, abs=1e-7)


def test_least_squares_rejects_mismatched_shapes():
    with pytest.raises(ValueError):
        LeastSquaresObjective(np.ones((3, 2)), np.ones((4, 2)))
    obj = LeastSquaresObjective(np.ones((3, 2)), np.ones((3, 5)))
    with pytest.raises(ValueError):
        obj.evaluate(DenseParameter(np.ones((2, 4))), DenseParameter(np.zeros((2, 4))))
