"""Objective functions evaluated in place on dense parameters."""

from __future__ import annotations

from typing import Callable, Optional

import numpy as np

from .params import DenseParameter, Parameter


def _dense(param: Parameter, name: str) -> np.ndarray:
    if not isinstance(param, DenseParameter):
        raise TypeError(f"{name} must be a DenseParameter, got {type(param).__name__}")
    return param.values


class FunctionObjective:
    """
    Wrap a pair of NumPy callables ``fun(x) -> float`` and ``grad(x) -> array``.

    ``x`` is the parameter's backing array and must not be modified by either
    callable.
    """

    def __init__(
        self,
        fun: Callable[[np.ndarray], float],
        grad: Callable[[np.ndarray], np.ndarray],
    ):
        self.fun = fun
        self.grad = grad

    def evaluate(self, point: Parameter, gradient_out: Parameter) -> float:
        x = _dense(point, "point")
        out = _dense(gradient_out, "gradient_out")
        np.copyto(out, np.asarray(self.grad(x)).reshape(out.shape), casting="same_kind")
        return float(self.fun(x))


class QuadraticObjective:
    """``f(x) = 0.5 x^T H x + g^T x + c`` for a 1-D ``x``."""

    def __init__(self, H: np.ndarray, g: np.ndarray, c: float = 0.0):
        H = np.asarray(H, dtype=float)
        g = np.asarray(g, dtype=float).reshape(-1)
        if H.ndim != 2 or H.shape[0] != H.shape[1]:
            raise ValueError("H must be a square matrix")
        if H.shape[0] != g.shape[0]:
            raise ValueError("H and g dimensions disagree")
        self.H = H
        self.g = g
        self.c = float(c)

    def evaluate(self, point: Parameter, gradient_out: Parameter) -> float:
        x = _dense(point, "point").astype(np.float64, copy=False).reshape(-1)
        out = _dense(gradient_out, "gradient_out")
        Hx = self.H @ x
        np.copyto(out, (Hx + self.g).reshape(out.shape), casting="same_kind")
        return float(0.5 * x @ Hx + self.g @ x + self.c)


class LeastSquaresObjective:
    """
    NMF subproblem ``f(H) = 0.5 * ||V - W H||_F^2`` over the factor ``H``.

    ``W^T W`` and ``W^T V`` are formed once so that each evaluation costs two
    ``r x r`` by ``r x n`` products instead of touching ``V`` again. The value
    is recovered from the expansion
    ``0.5 * (<H, W^T W H> - 2 <H, W^T V> + ||V||^2)``.
    """

    def __init__(self, W: np.ndarray, V: np.ndarray, *, WtW: Optional[np.ndarray] = None):
        W = np.asarray(W, dtype=float)
        V = np.asarray(V, dtype=float)
        if W.ndim != 2 or V.ndim != 2:
            raise ValueError("W and V must be 2-D")
        if W.shape[0] != V.shape[0]:
            raise ValueError(f"row mismatch: W has {W.shape[0]}, V has {V.shape[0]}")
        self.WtW = W.T @ W if WtW is None else np.asarray(WtW, dtype=float)
        self.WtV = W.T @ V
        self.v_norm_sq = float(np.sum(V * V))
        self.shape = (W.shape[1], V.shape[1])

    def evaluate(self, point: Parameter, gradient_out: Parameter) -> float:
        H = _dense(point, "point").astype(np.float64, copy=False)
        out = _dense(gradient_out, "gradient_out")
        if H.shape != self.shape:
            raise ValueError(f"expected factor of shape {self.shape}, got {H.shape}")
        WtWH = self.WtW @ H
        np.subtract(WtWH, self.WtV, out=out, casting="same_kind")
        return float(0.5 * (np.sum(H * WtWH) - 2.0 * np.sum(H * self.WtV) + self.v_norm_sq))


__all__ = ["FunctionObjective", "QuadraticObjective", "LeastSquaresObjective"]
