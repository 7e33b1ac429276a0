"""
Non-negative matrix factorization by alternating projected-gradient solves.

``V ~ W H`` with ``W >= 0`` and ``H >= 0`` is found by alternating the two
convex subproblems

* ``min_{H >= 0} 0.5 ||V - W H||_F^2`` with ``W`` fixed, and
* ``min_{W >= 0} 0.5 ||V^T - H^T W^T||_F^2`` with ``H`` fixed,

each handled by :class:`~projgrad.projected.ProjectedGradient` with a
:class:`~projgrad.projection.NonNegativeProjection` (Lin 2007, Section 4).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from .logging import get_logger
from .objectives import LeastSquaresObjective
from .params import DenseParameter
from .projected import ProjectedGradient
from .projection import NonNegativeProjection
from .stopping import AnyOf, MaxIterations, ProjectedGradientTolerance

logger = get_logger(__name__)


@dataclass
class NMFResult:
    """
    Factorization output.

    Attributes:
        W: Left factor, shape ``(m, rank)``.
        H: Right factor, shape ``(rank, n)``.
        error: Relative reconstruction error ``||V - W H||_F / ||V||_F``.
        n_outer: Number of alternating rounds performed.
        history: Relative error after initialization and after every round.
    """

    W: np.ndarray
    H: np.ndarray
    error: float
    n_outer: int
    history: List[float] = field(default_factory=list)


def _relative_error(V: np.ndarray, W: np.ndarray, H: np.ndarray, v_norm: float) -> float:
    residual = float(np.linalg.norm(V - W @ H))
    return residual / v_norm if v_norm > 0 else residual


def _initial_factor(given: Optional[np.ndarray], shape: tuple[int, int], rng: np.random.Generator, name: str) -> np.ndarray:
    if given is None:
        return rng.random(shape)
    factor = np.array(given, dtype=float, copy=True)
    if factor.shape != shape:
        raise ValueError(f"{name} must have shape {shape}, got {factor.shape}")
    return np.maximum(factor, 0.0)


def nmf(
    V: np.ndarray,
    rank: int,
    *,
    max_outer: int = 50,
    inner_iter: int = 20,
    inner_tol: float = 1e-3,
    tol: float = 1e-4,
    seed: Optional[int] = None,
    W0: Optional[np.ndarray] = None,
    H0: Optional[np.ndarray] = None,
    optimizer: Optional[ProjectedGradient] = None,
) -> NMFResult:
    """
    Factor a non-negative matrix into two non-negative factors.

    Args:
        V: Non-negative data matrix of shape ``(m, n)``.
        rank: Inner dimension of the factorization.
        max_outer: Maximum number of alternating rounds.
        inner_iter: Step limit for each subproblem solve.
        inner_tol: Relative projected-gradient tolerance of each subproblem.
        tol: Stop once the relative error improves by less than ``tol``
            (relative to the previous error) in one round.
        seed: Seed for the random initial factors.
        W0, H0: Optional initial factors; negative entries are clipped to 0.
        optimizer: Subproblem solver; must use a non-negative projection.
            Defaults to ``ProjectedGradient(NonNegativeProjection())``.

    Returns:
        :class:`NMFResult` with the factors and error trace.
    """

    V = np.asarray(V, dtype=float)
    if V.ndim != 2:
        raise ValueError("V must be a 2-D matrix")
    if np.any(V < 0):
        raise ValueError("V must be non-negative")
    if rank < 1:
        raise ValueError("rank must be at least 1")
    if max_outer < 1:
        raise ValueError("max_outer must be at least 1")

    m, n = V.shape
    rng = np.random.default_rng(seed)
    W = _initial_factor(W0, (m, rank), rng, "W0")
    H = _initial_factor(H0, (rank, n), rng, "H0")
    if optimizer is None:
        optimizer = ProjectedGradient(NonNegativeProjection())

    v_norm = float(np.linalg.norm(V))
    history = [_relative_error(V, W, H, v_norm)]
    H_param = DenseParameter(H)
    n_outer = 0
    for n_outer in range(1, max_outer + 1):
        stop = AnyOf(MaxIterations(inner_iter), ProjectedGradientTolerance(inner_tol))
        optimizer.minimize(LeastSquaresObjective(W, V), stop, H_param)

        Wt_param = DenseParameter(W.T.copy())
        stop = AnyOf(MaxIterations(inner_iter), ProjectedGradientTolerance(inner_tol))
        optimizer.minimize(LeastSquaresObjective(H_param.values.T, V.T), stop, Wt_param)
        W = Wt_param.values.T.copy()

        error = _relative_error(V, W, H_param.values, v_norm)
        previous = history[-1]
        history.append(error)
        logger.debug("NMF round %d: relative error %.6g", n_outer, error)
        if abs(previous - error) <= tol * max(previous, np.finfo(float).eps):
            break

    return NMFResult(W=W, H=H_param.values, error=history[-1], n_outer=n_outer, history=history)


__all__ = ["NMFResult", "nmf"]
