"""Stop criteria for the projected-gradient loop.

Criteria are called once per outer iteration with the current point, its
objective value and its *clipped* gradient. They may keep private state (an
iteration counter, a reference norm) but must never modify their arguments.
Stateful criteria expose ``reset()`` so one instance can be reused across
``minimize`` calls.
"""

from __future__ import annotations

from typing import Optional

from .core import StopCriterion
from .params import Parameter, norm


class MaxIterations:
    """Allow at most ``maxiter`` optimization steps."""

    def __init__(self, maxiter: int):
        if maxiter < 0:
            raise ValueError("maxiter must be non-negative")
        self.maxiter = int(maxiter)
        self.calls = 0

    def reset(self) -> None:
        self.calls = 0

    def done(self, point: Parameter, value: float, gradient: Parameter) -> bool:
        self.calls += 1
        return self.calls > self.maxiter


class ProjectedGradientTolerance:
    """
    Lin's stopping rule ``||grad^P f(x_k)|| <= tol * ||grad^P f(x_0)||``.

    The first call records the reference norm. With ``relative=False`` the
    comparison is against ``tol`` directly. A zero reference norm is only
    satisfied by a zero gradient.
    """

    def __init__(self, tol: float, relative: bool = True):
        if tol < 0:
            raise ValueError("tol must be non-negative")
        self.tol = float(tol)
        self.relative = relative
        self.initial_norm: Optional[float] = None
        self.last_norm: Optional[float] = None
        self.satisfied = False

    def reset(self) -> None:
        self.initial_norm = None
        self.last_norm = None
        self.satisfied = False

    def done(self, point: Parameter, value: float, gradient: Parameter) -> bool:
        grad_norm = norm(gradient)
        self.last_norm = grad_norm
        if self.initial_norm is None:
            self.initial_norm = grad_norm
        scale = self.initial_norm if self.relative else 1.0
        self.satisfied = grad_norm <= self.tol * scale
        return self.satisfied


class ValueChangeTolerance:
    """Stop once consecutive objective values differ by at most ``tol * max(1, |f|)``."""

    def __init__(self, tol: float):
        if tol < 0:
            raise ValueError("tol must be non-negative")
        self.tol = float(tol)
        self.previous: Optional[float] = None

    def reset(self) -> None:
        self.previous = None

    def done(self, point: Parameter, value: float, gradient: Parameter) -> bool:
        previous, self.previous = self.previous, value
        if previous is None:
            return False
        return abs(previous - value) <= self.tol * max(1.0, abs(value))


class AnyOf:
    """Stop when any member criterion does.

    Every member is consulted on every call so that counters inside stateful
    criteria advance together.
    """

    def __init__(self, *criteria: StopCriterion):
        if not criteria:
            raise ValueError("AnyOf needs at least one criterion")
        self.criteria = criteria

    def reset(self) -> None:
        for criterion in self.criteria:
            reset = getattr(criterion, "reset", None)
            if reset is not None:
                reset()

    def done(self, point: Parameter, value: float, gradient: Parameter) -> bool:
        results = [criterion.done(point, value, gradient) for criterion in self.criteria]
        return any(results)


__all__ = [
    "MaxIterations",
    "ProjectedGradientTolerance",
    "ValueChangeTolerance",
    "AnyOf",
]
