"""
Example: Projected Gradient and Non-negative Matrix Factorization

Shows the three ways to use projgrad:

1. the ``ProjectedGradient`` object with explicit collaborators,
2. the ``projected_gradient`` convenience function on NumPy callables,
3. the ``nmf`` driver that alternates non-negative least-squares solves.
"""

import numpy as np

from projgrad import (
    AnyOf,
    BoxProjection,
    DenseParameter,
    FunctionObjective,
    MaxIterations,
    NonNegativeProjection,
    ProjectedGradient,
    ProjectedGradientTolerance,
    Status,
    factorize,
    projected_gradient,
)


def example_scalar_bound():
    """Example: minimize (x - 3)^2 subject to x >= 0."""
    print("=" * 60)
    print("Example 1: Projected Gradient - Non-negativity")
    print("=" * 60)

    x = DenseParameter(np.array([0.0]))
    objective = FunctionObjective(
        lambda v: float((v[0] - 3.0) ** 2),
        lambda v: 2.0 * (v - 3.0),
    )
    optimizer = ProjectedGradient(NonNegativeProjection(), beta=0.5, sigma=0.1, alpha0=1.0)
    stop = AnyOf(MaxIterations(100), ProjectedGradientTolerance(1e-10))
    value = optimizer.minimize(objective, stop, x)
    stats = optimizer.last_stats
    print(f"Final point: {x.values}")
    print(f"Objective: {value}")
    print(f"Iterations: {stats.nit}, evaluations: {stats.nfev}")
    print(f"Step size: {stats.final_alpha} ({stats.growths} growths, {stats.shrinks} shrinks)")
    print()


def example_box_function():
    """Example: box-constrained least squares through the functional API."""
    print("=" * 60)
    print("Example 2: Projected Gradient - Box Constraints")
    print("=" * 60)

    target = np.array([0.8, -0.2, 1.2])

    def obj(x: np.ndarray) -> float:
        return 0.5 * np.sum((x - target) ** 2)

    def grad(x: np.ndarray) -> np.ndarray:
        return x - target

    result = projected_gradient(obj, grad, BoxProjection(0.0, 1.0), x0=np.zeros(3))
    print(f"Status: {result.status}")
    if result.status == Status.OPTIMAL and result.x is not None:
        print(f"Optimal point: {result.x}")
        print(f"Objective: {result.fun}")
        print(f"Iterations: {result.nit}")
        print(f"Expected (clipped target): {np.clip(target, 0.0, 1.0)}")
    print()


def example_nmf():
    """Example: factor a non-negative rank-3 matrix."""
    print("=" * 60)
    print("Example 3: Non-negative Matrix Factorization")
    print("=" * 60)

    rng = np.random.default_rng(0)
    V = rng.random((20, 3)) @ rng.random((3, 15))
    result = factorize(V, rank=3, max_outer=200, seed=0)
    print(f"Rounds: {result.n_outer}")
    print(f"Initial relative error: {result.history[0]:.4f}")
    print(f"Final relative error: {result.error:.4f}")
    print(f"min(W) = {result.W.min():.3g}, min(H) = {result.H.min():.3g}")
    print()


if __name__ == "__main__":
    print("\n" + "=" * 60)
    print("projgrad - Examples")
    print("=" * 60 + "\n")

    example_scalar_bound()
    example_box_function()
    example_nmf()

    print("=" * 60)
    print("All examples completed successfully!")
    print("=" * 60)
