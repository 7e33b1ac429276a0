"""Benchmark the projected-gradient loop on NMF subproblems."""

import time
from typing import Dict

import numpy as np

from projgrad import (
    DenseParameter,
    LeastSquaresObjective,
    MaxIterations,
    NonNegativeProjection,
    ProjectedGradient,
    SparseParameter,
)


def benchmark_nnls_subproblem(
    m: int = 200,
    n: int = 500,
    rank: int = 20,
    steps: int = 50,
    dtype: type = np.float64,
) -> Dict[str, float]:
    """Benchmark ``steps`` iterations of min_{H >= 0} ||V - W H||.

    Args:
        m, n: Shape of the data matrix ``V``.
        rank: Inner dimension.
        steps: Optimization steps per run.
        dtype: Element type of the ``H`` parameter.

    Returns:
        Dictionary with timing results.
    """
    rng = np.random.default_rng(0)
    W = rng.random((m, rank))
    V = W @ rng.random((rank, n))
    objective = LeastSquaresObjective(W, V)
    optimizer = ProjectedGradient(NonNegativeProjection())

    # Warmup
    optimizer.minimize(objective, MaxIterations(5), DenseParameter(rng.random((rank, n)), dtype=dtype))

    H0 = rng.random((rank, n))
    start = time.perf_counter()
    value = optimizer.minimize(objective, MaxIterations(steps), DenseParameter(H0, dtype=dtype))
    total_time = time.perf_counter() - start

    stats = optimizer.last_stats
    return {
        "rank": rank,
        "size": rank * n,
        "final_value": value,
        "nfev": stats.nfev,
        "total_time_sec": total_time,
        "time_per_step_sec": total_time / max(stats.nit, 1),
    }


def benchmark_sparse_parameter(size: int = 2000, steps: int = 20) -> Dict[str, float]:
    """Benchmark the generic (point-wise) path on a keyed parameter."""
    rng = np.random.default_rng(0)
    targets = {f"k{i}": float(v) for i, v in enumerate(rng.standard_normal(size))}

    class Squares:
        def evaluate(self, point, gradient_out):
            total = 0.0
            for key in point.indices():
                diff = point.get(key) - targets[key]
                gradient_out.set(key, 2.0 * diff)
                total += diff * diff
            return total

    optimizer = ProjectedGradient(NonNegativeProjection(), beta=0.5, sigma=0.1)
    x = SparseParameter(dict.fromkeys(targets, 1.0))
    start = time.perf_counter()
    optimizer.minimize(Squares(), MaxIterations(steps), x)
    total_time = time.perf_counter() - start
    return {
        "size": size,
        "total_time_sec": total_time,
        "time_per_step_sec": total_time / max(optimizer.last_stats.nit, 1),
    }


if __name__ == "__main__":
    print("Benchmarking projected gradient...")

    for dtype in (np.float64, np.float32):
        results = benchmark_nnls_subproblem(dtype=dtype)
        print(f"NNLS subproblem ({results['size']} unknowns, {np.dtype(dtype).name}):")
        print(f"  Time per step: {results['time_per_step_sec']*1e3:.2f} ms")
        print(f"  Evaluations: {results['nfev']}")

    results = benchmark_sparse_parameter()
    print(f"Sparse parameter ({results['size']} keys):")
    print(f"  Time per step: {results['time_per_step_sec']*1e3:.2f} ms")
