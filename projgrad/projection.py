"""
Projection operators defining the feasible region.

A projection does two things in place: it moves a point onto the feasible set
(``clip_point``) and, at points already on the boundary, zeros the gradient
components whose descent direction would immediately leave the set
(``clip_gradient``). The clipped gradient is Lin's *projected gradient*

.. math::

    \\nabla^P f(x)_i =
    \\begin{cases}
        \\nabla f(x)_i & l_i < x_i < u_i \\\\
        \\min(0, \\nabla f(x)_i) & x_i \\le l_i \\\\
        \\max(0, \\nabla f(x)_i) & x_i \\ge u_i
    \\end{cases}

which vanishes exactly at stationary points of the constrained problem.
"""

from __future__ import annotations

from typing import Callable, Optional, Union

import numpy as np

from .params import DenseParameter, Parameter

Bound = Union[float, np.ndarray, None]


class BoxProjection:
    """
    Element-wise box ``lower <= x <= upper``.

    Bounds may be scalars or arrays broadcastable to the parameter shape;
    ``None`` leaves that side unbounded. Array bounds require a
    :class:`~projgrad.params.DenseParameter`.
    """

    def __init__(self, lower: Bound = None, upper: Bound = None):
        if lower is not None:
            lower = np.asarray(lower, dtype=float)
        if upper is not None:
            upper = np.asarray(upper, dtype=float)
        if lower is not None and upper is not None and np.any(lower > upper):
            raise ValueError("lower bound must not exceed upper bound")
        self.lower = lower
        self.upper = upper

    def __repr__(self) -> str:
        return f"{type(self).__name__}(lower={self.lower}, upper={self.upper})"

    def _scalar_bounds(self) -> tuple[Optional[float], Optional[float]]:
        if (self.lower is not None and self.lower.ndim) or (
            self.upper is not None and self.upper.ndim
        ):
            raise TypeError("array bounds are only supported for DenseParameter")
        lo = None if self.lower is None else float(self.lower)
        hi = None if self.upper is None else float(self.upper)
        return lo, hi

    def clip_point(self, point: Parameter) -> None:
        if self.lower is None and self.upper is None:
            return
        if isinstance(point, DenseParameter):
            np.clip(point.values, self.lower, self.upper, out=point.values)
            return
        lo, hi = self._scalar_bounds()
        for i in point.indices():
            value = point.get(i)
            if lo is not None and value < lo:
                point.set(i, lo)
            elif hi is not None and value > hi:
                point.set(i, hi)

    def clip_gradient(self, point: Parameter, gradient: Parameter) -> None:
        if isinstance(point, DenseParameter) and isinstance(gradient, DenseParameter):
            x = point.values
            g = gradient.values
            if self.lower is not None:
                g[(x <= self.lower) & (g > 0)] = 0
            if self.upper is not None:
                g[(x >= self.upper) & (g < 0)] = 0
            return
        lo, hi = self._scalar_bounds()
        for i in point.indices():
            x_i = point.get(i)
            g_i = gradient.get(i)
            if lo is not None and x_i <= lo and g_i > 0:
                gradient.set(i, 0.0)
            elif hi is not None and x_i >= hi and g_i < 0:
                gradient.set(i, 0.0)


class NonNegativeProjection(BoxProjection):
    """The orthant ``x >= 0`` used by NMF subproblems."""

    def __init__(self) -> None:
        super().__init__(lower=0.0)

    def __repr__(self) -> str:
        return "NonNegativeProjection()"


class CallableProjection:
    """
    Adapter for a plain ``x -> proj(x)`` NumPy function.

    Only the point is projected; no boundary information is available to clip
    the gradient, so ``clip_gradient`` leaves it untouched.
    """

    def __init__(self, fn: Callable[[np.ndarray], np.ndarray]):
        self.fn = fn

    def clip_point(self, point: Parameter) -> None:
        if not isinstance(point, DenseParameter):
            raise TypeError("CallableProjection requires a DenseParameter")
        projected = np.asarray(self.fn(point.values.copy()), dtype=point.values.dtype)
        np.copyto(point.values, projected.reshape(point.values.shape))

    def clip_gradient(self, point: Parameter, gradient: Parameter) -> None:
        return None


__all__ = ["BoxProjection", "NonNegativeProjection", "CallableProjection"]
