"""
Core types shared by the projected-gradient optimizer and its collaborators.

The optimizer never owns problem data. It is handed three collaborators:

* an :class:`Objective` that evaluates ``f(x)`` and writes ``grad f(x)`` into a
  caller-provided buffer,
* a :class:`Projection` that clips points into the feasible region and clips
  gradients at points sitting on its boundary,
* a :class:`StopCriterion` that decides when to terminate.

All three operate on :class:`projgrad.params.Parameter` containers rather than
raw arrays so that the same loop drives dense NumPy data as well as keyed,
sparse index domains.

References:
    - C.-J. Lin, *Projected Gradient Methods for Non-negative Matrix
      Factorization*, Neural Computation 19 (2007)
    - Nocedal & Wright, *Numerical Optimization* (2006)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional, Protocol, runtime_checkable

import numpy as np

if TYPE_CHECKING:
    from .params import Parameter


class Status(Enum):
    """Solution status for optimization routines."""

    OPTIMAL = "optimal"
    MAX_ITER = "max_iter"
    NUMERICAL_ERROR = "numerical_error"
    NON_CONVERGENCE = "non_convergence"


class OptimizationError(RuntimeError):
    """Base class for failures raised from inside an optimization run."""


class NumericalError(OptimizationError):
    """Raised when the objective produces a non-finite value or gradient."""


class NonConvergenceError(OptimizationError):
    """Raised when backtracking cannot satisfy the sufficient-decrease test."""

    def __init__(self, message: str, *, alpha: float, backtracks: int, iteration: int):
        super().__init__(message)
        self.alpha = alpha
        self.backtracks = backtracks
        self.iteration = iteration


@runtime_checkable
class Objective(Protocol):
    """Differentiable objective evaluated in place."""

    def evaluate(self, point: "Parameter", gradient_out: "Parameter") -> float:
        """Return ``f(point)`` and overwrite ``gradient_out`` with its gradient."""
        ...


@runtime_checkable
class Projection(Protocol):
    """Feasible-region operator."""

    def clip_point(self, point: "Parameter") -> None:
        """Move ``point`` to the nearest feasible point, in place."""
        ...

    def clip_gradient(self, point: "Parameter", gradient: "Parameter") -> None:
        """Zero gradient components that would leave the region at ``point``."""
        ...


@runtime_checkable
class StopCriterion(Protocol):
    """Termination predicate. Must not mutate its arguments."""

    def done(self, point: "Parameter", value: float, gradient: "Parameter") -> bool:
        ...


@dataclass
class OptimizeResult:
    """
    Solution container returned by :func:`projgrad.projected.projected_gradient`.

    Attributes:
        x: Final point (or ``None`` if unavailable).
        fun: Objective value at ``x``.
        status: Enumeration describing solver exit.
        message: Human-readable string explaining the status.
        nit: Number of accepted optimization steps.
        nfev: Number of objective/gradient evaluations.
        projected_grad_norm: Norm of the clipped gradient at ``x``.
        alpha: Step size in effect when the run stopped.
    """

    x: Optional[np.ndarray]
    fun: Optional[float]
    status: Status
    message: str
    nit: int
    nfev: int = 0
    projected_grad_norm: Optional[float] = None
    alpha: Optional[float] = None

    @property
    def success(self) -> bool:
        return self.status is Status.OPTIMAL


@dataclass
class MinimizeStats:
    """Counters collected during one :meth:`ProjectedGradient.minimize` call."""

    nit: int = 0
    nfev: int = 0
    growths: int = 0
    shrinks: int = 0
    final_alpha: float = float("nan")


__all__ = [
    "Status",
    "OptimizationError",
    "NumericalError",
    "NonConvergenceError",
    "Objective",
    "Projection",
    "StopCriterion",
    "OptimizeResult",
    "MinimizeStats",
]
