"""
Projected gradient method with an adaptive step size.

This follows the improved projected gradient method of Lin (2007), page 10:
every outer iteration takes a step ``x_new = P(x - alpha * grad f(x))`` and
accepts it once the sufficient-decrease condition (Eq. 13)

.. math::

    f(x_{new}) - f(x) \\le \\sigma \\, \\nabla f(x)^T (x_{new} - x)

holds. Instead of restarting every line search from the same initial step,
``alpha`` carries over between iterations and is grown again when recent
iterations succeed without backtracking (see
:class:`projgrad.step_size.StepSizeController`).

The optimizer works on :class:`projgrad.params.Parameter` buffers. Four of
them (current point, candidate point and their gradients) are allocated per
``minimize`` call and their roles are swapped every iteration, so the loop does
not allocate parameter-sized storage after start-up. The caller's vector is
written once, when the run finishes.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Callable, Optional, Union

import numpy as np

from .core import (
    MinimizeStats,
    NonConvergenceError,
    NumericalError,
    Objective,
    OptimizeResult,
    Projection,
    Status,
    StopCriterion,
)
from .logging import get_logger
from .objectives import FunctionObjective
from .params import (
    DenseParameter,
    Parameter,
    all_finite,
    copy_into,
    directional_change,
    fill,
    step_into,
)
from .projection import CallableProjection
from .step_size import StepSizeController
from .stopping import AnyOf, MaxIterations, ProjectedGradientTolerance

logger = get_logger(__name__)

StepCallback = Callable[[Parameter, float, float], None]


@dataclass(frozen=True)
class ProjectedGradientConfig:
    """
    Step-size and safeguard settings.

    Attributes:
        beta: Shrink factor on backtracking; ``1 / beta`` is the growth factor.
        sigma: Strictness of the sufficient-decrease test.
        alpha0: Initial step size.
        max_backtracks: Shrinks allowed within one outer iteration before
            :class:`~projgrad.core.NonConvergenceError` is raised. ``None``
            removes the limit.
        max_alpha: Optional ceiling on step-size growth.
        check_finite: Raise :class:`~projgrad.core.NumericalError` when the
            objective returns a non-finite value or gradient at an accepted
            point.
    """

    beta: float = 0.1
    sigma: float = 0.01
    alpha0: float = 1.0
    max_backtracks: Optional[int] = 100
    max_alpha: Optional[float] = None
    check_finite: bool = True

    def __post_init__(self) -> None:
        if not (0 < self.beta < 1):
            raise ValueError("beta must lie in (0, 1)")
        if not (0 < self.sigma < 1):
            raise ValueError("sigma must lie in (0, 1)")
        if not (math.isfinite(self.alpha0) and self.alpha0 > 0):
            raise ValueError("alpha0 must be a positive finite number")
        if self.max_backtracks is not None and self.max_backtracks < 1:
            raise ValueError("max_backtracks must be at least 1 or None")
        if self.max_alpha is not None:
            if not (math.isfinite(self.max_alpha) and self.max_alpha > 0):
                raise ValueError("max_alpha must be a positive finite number")
            if self.max_alpha < self.alpha0:
                raise ValueError("max_alpha must not be smaller than alpha0")


class ProjectedGradient:
    """
    Bound-constrained minimizer.

    Args:
        projection: Feasible-region operator used for every candidate point
            and gradient.
        beta, sigma, alpha0: See :class:`ProjectedGradientConfig`.
        max_backtracks, max_alpha, check_finite: Safeguards, see
            :class:`ProjectedGradientConfig`.

    Example:
        >>> import numpy as np
        >>> from projgrad import (DenseParameter, FunctionObjective,
        ...     MaxIterations, NonNegativeProjection, ProjectedGradient)
        >>> x = DenseParameter(np.array([0.0]))
        >>> f = FunctionObjective(lambda v: float((v[0] - 3) ** 2),
        ...                       lambda v: 2 * (v - 3))
        >>> pg = ProjectedGradient(NonNegativeProjection(), beta=0.5, sigma=0.1)
        >>> round(pg.minimize(f, MaxIterations(100), x), 6)
        0.0
    """

    def __init__(
        self,
        projection: Projection,
        beta: float = 0.1,
        sigma: float = 0.01,
        alpha0: float = 1.0,
        *,
        max_backtracks: Optional[int] = 100,
        max_alpha: Optional[float] = None,
        check_finite: bool = True,
    ):
        self.projection = projection
        self.config = ProjectedGradientConfig(
            beta=beta,
            sigma=sigma,
            alpha0=alpha0,
            max_backtracks=max_backtracks,
            max_alpha=max_alpha,
            check_finite=check_finite,
        )
        self.last_stats = MinimizeStats()

    @classmethod
    def from_config(cls, projection: Projection, config: ProjectedGradientConfig) -> "ProjectedGradient":
        return cls(
            projection,
            beta=config.beta,
            sigma=config.sigma,
            alpha0=config.alpha0,
            max_backtracks=config.max_backtracks,
            max_alpha=config.max_alpha,
            check_finite=config.check_finite,
        )

    def with_options(self, **changes) -> "ProjectedGradient":
        """Return a new optimizer sharing the projection with some settings changed."""
        return self.from_config(self.projection, replace(self.config, **changes))

    def __repr__(self) -> str:
        cfg = self.config
        return (
            f"ProjectedGradient(projection={self.projection!r}, beta={cfg.beta}, "
            f"sigma={cfg.sigma}, alpha0={cfg.alpha0})"
        )

    def minimize(
        self,
        objective: Objective,
        stop: StopCriterion,
        vector: Parameter,
        callback: Optional[StepCallback] = None,
    ) -> float:
        """
        Minimize ``objective`` over the feasible region starting from ``vector``.

        ``vector`` is overwritten with the final point when the run ends
        normally; it is left untouched if an exception is raised.

        Args:
            objective: Evaluates value and gradient in place.
            stop: Checked before every step with the current point, value and
                clipped gradient.
            vector: Initial point; receives the result.
            callback: Called as ``callback(point, value, alpha)`` after every
                accepted step. ``point`` is an internal buffer and is only
                valid for the duration of the call.

        Returns:
            Objective value at the final point.

        Raises:
            NumericalError: Non-finite value or gradient at the starting point
                or at an accepted point (when ``check_finite`` is set).
            NonConvergenceError: No step satisfied the sufficient-decrease test
                within ``max_backtracks`` shrinks.
        """
        cfg = self.config
        stats = self.last_stats = MinimizeStats()

        current = vector.clone_without_copy()
        copy_into(current, vector)
        self.projection.clip_point(current)
        candidate = vector.clone_without_copy()
        current_grad = vector.clone_without_copy()
        candidate_grad = vector.clone_without_copy()

        current_value = self._evaluate(objective, current, current_grad)
        stats.nfev += 1
        if cfg.check_finite:
            self._require_finite(current_value, current_grad, "initial point")
        self.projection.clip_gradient(current, current_grad)

        steps = StepSizeController(cfg.alpha0, cfg.beta, max_alpha=cfg.max_alpha)
        logger.debug(
            "Starting projected gradient: f0=%.6g alpha0=%g beta=%g sigma=%g",
            current_value,
            cfg.alpha0,
            cfg.beta,
            cfg.sigma,
        )

        k = 0
        while not stop.done(current, current_value, current_grad):
            alpha = steps.begin(k)
            candidate_value = self._trial(
                objective, current, candidate, current_grad, candidate_grad, alpha
            )
            stats.nfev += 1

            backtracks = 0
            if self._sufficient_decrease(
                current, candidate, current_value, candidate_value, current_grad
            ):
                steps.accept_first_try()
            else:
                # Shrink just enough to reach sufficient decrease.
                while not self._sufficient_decrease(
                    current, candidate, current_value, candidate_value, current_grad
                ):
                    if cfg.max_backtracks is not None and backtracks >= cfg.max_backtracks:
                        logger.error(
                            "No sufficient decrease after %d backtracks at iteration %d (alpha=%g)",
                            backtracks,
                            k,
                            alpha,
                        )
                        self._finish(stats, steps, k)
                        raise NonConvergenceError(
                            f"sufficient decrease not reached after {backtracks} "
                            f"backtracks at iteration {k}",
                            alpha=alpha,
                            backtracks=backtracks,
                            iteration=k,
                        )
                    alpha = steps.shrink()
                    backtracks += 1
                    candidate_value = self._trial(
                        objective, current, candidate, current_grad, candidate_grad, alpha
                    )
                    stats.nfev += 1

            steps.commit()
            if cfg.check_finite:
                try:
                    self._require_finite(candidate_value, candidate_grad, f"iteration {k}")
                except NumericalError:
                    self._finish(stats, steps, k)
                    raise

            current, candidate = candidate, current
            current_grad, candidate_grad = candidate_grad, current_grad
            current_value = candidate_value
            self.projection.clip_gradient(current, current_grad)
            k += 1

            logger.debug(
                "iter %d: f=%.6g alpha=%g backtracks=%d", k, current_value, steps.alpha, backtracks
            )
            if callback is not None:
                callback(current, current_value, steps.current_alpha)

        # ``current`` may now be either working buffer, so copy explicitly.
        copy_into(vector, current)
        self._finish(stats, steps, k)
        logger.debug(
            "Projected gradient finished: f=%.6g nit=%d nfev=%d alpha=%g",
            current_value,
            stats.nit,
            stats.nfev,
            stats.final_alpha,
        )
        return current_value

    def _trial(
        self,
        objective: Objective,
        current: Parameter,
        candidate: Parameter,
        gradient: Parameter,
        candidate_grad: Parameter,
        alpha: float,
    ) -> float:
        step_into(candidate, current, gradient, alpha)
        self.projection.clip_point(candidate)
        return self._evaluate(objective, candidate, candidate_grad)

    @staticmethod
    def _evaluate(objective: Objective, point: Parameter, gradient: Parameter) -> float:
        fill(gradient, 0.0)
        return float(objective.evaluate(point, gradient))

    def _sufficient_decrease(
        self,
        current: Parameter,
        candidate: Parameter,
        current_value: float,
        candidate_value: float,
        gradient: Parameter,
    ) -> bool:
        """Eq. (13): ``f(new) - f(old) <= sigma * grad^T (new - old)``."""
        predicted = directional_change(gradient, candidate, current)
        return candidate_value - current_value <= self.config.sigma * predicted

    @staticmethod
    def _require_finite(value: float, gradient: Parameter, where: str) -> None:
        if not math.isfinite(value):
            logger.error("Non-finite objective value %r at %s", value, where)
            raise NumericalError(f"objective value is {value} at {where}")
        if not all_finite(gradient):
            logger.error("Non-finite gradient at %s", where)
            raise NumericalError(f"gradient has non-finite entries at {where}")

    @staticmethod
    def _finish(stats: MinimizeStats, steps: StepSizeController, nit: int) -> None:
        stats.nit = nit
        stats.growths = steps.growths
        stats.shrinks = steps.shrinks
        stats.final_alpha = steps.current_alpha


def projected_gradient(
    obj: Callable[[np.ndarray], float],
    grad_fun: Callable[[np.ndarray], np.ndarray],
    proj: Union[Projection, Callable[[np.ndarray], np.ndarray]],
    x0: np.ndarray,
    beta: float = 0.1,
    sigma: float = 0.01,
    alpha0: float = 1.0,
    maxiter: int = 1000,
    tol: float = 1e-8,
    max_backtracks: Optional[int] = 100,
    max_alpha: Optional[float] = None,
    callback: Optional[Callable[[np.ndarray, float, float], None]] = None,
) -> OptimizeResult:
    """
    Projected gradient descent on plain NumPy callables.

    ``proj`` is either a :class:`~projgrad.core.Projection` (for example
    :class:`~projgrad.projection.BoxProjection`, which also clips gradients at
    the bounds) or a function returning the projection of its argument. The
    run stops when the clipped gradient norm falls below ``tol`` times its
    initial value or after ``maxiter`` steps. Failures are reported through
    ``status`` instead of being raised.
    """

    x = DenseParameter(np.array(x0, dtype=float, copy=True))
    projection = proj if isinstance(proj, Projection) else CallableProjection(proj)
    objective = FunctionObjective(obj, grad_fun)
    tolerance = ProjectedGradientTolerance(tol)
    stop = AnyOf(tolerance, MaxIterations(maxiter))
    optimizer = ProjectedGradient(
        projection,
        beta=beta,
        sigma=sigma,
        alpha0=alpha0,
        max_backtracks=max_backtracks,
        max_alpha=max_alpha,
    )

    step_callback = None
    if callback is not None:
        def step_callback(point: Parameter, value: float, alpha: float) -> None:
            callback(point.to_numpy(), value, alpha)

    try:
        value = optimizer.minimize(objective, stop, x, callback=step_callback)
    except NumericalError as exc:
        stats = optimizer.last_stats
        return OptimizeResult(
            x=None,
            fun=None,
            status=Status.NUMERICAL_ERROR,
            message=str(exc),
            nit=stats.nit,
            nfev=stats.nfev,
            alpha=stats.final_alpha,
        )
    except NonConvergenceError as exc:
        stats = optimizer.last_stats
        return OptimizeResult(
            x=None,
            fun=None,
            status=Status.NON_CONVERGENCE,
            message=str(exc),
            nit=stats.nit,
            nfev=stats.nfev,
            alpha=exc.alpha,
        )

    stats = optimizer.last_stats
    converged = tolerance.satisfied
    return OptimizeResult(
        x=x.values,
        fun=value,
        status=Status.OPTIMAL if converged else Status.MAX_ITER,
        message=(
            "Projected gradient terminated"
            if converged
            else "Projected gradient hit iteration limit"
        ),
        nit=stats.nit,
        nfev=stats.nfev,
        projected_grad_norm=tolerance.last_norm,
        alpha=stats.final_alpha,
    )


__all__ = ["ProjectedGradientConfig", "ProjectedGradient", "projected_gradient"]
