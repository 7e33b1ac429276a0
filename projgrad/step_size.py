"""Adaptive step-size bookkeeping for the projected-gradient loop.

The controller keeps the step size ``alpha`` across outer iterations and a
short circular history of how each recent iteration went:

* ``+1``  the first trial step was accepted,
* ``-n``  the step had to be shrunk ``n`` times,
* ``0``   the slot has not been written since the last reset.

Two first-try successes inside the window are taken as evidence that the step
is too conservative, so ``alpha`` grows by ``1 / beta`` and the whole window is
cleared. A single lucky step is not enough.
"""

from __future__ import annotations

import math
from typing import Optional

from .logging import get_logger

logger = get_logger(__name__)

WINDOW = 5


class StepSizeController:
    """Grow/shrink rule driven by the last ``window`` iterations."""

    def __init__(
        self,
        alpha0: float,
        beta: float,
        window: int = WINDOW,
        max_alpha: Optional[float] = None,
    ):
        if not (0 < beta < 1):
            raise ValueError("beta must lie in (0, 1)")
        if not (math.isfinite(alpha0) and alpha0 > 0):
            raise ValueError("alpha0 must be a positive finite number")
        if window < 1:
            raise ValueError("window must be at least 1")
        if max_alpha is not None and not (math.isfinite(max_alpha) and max_alpha > 0):
            raise ValueError("max_alpha must be a positive finite number")
        self.beta = float(beta)
        self.max_alpha = None if max_alpha is None else float(max_alpha)
        self._history = [0] * window
        self._slot = 0
        self.current_alpha = min(float(alpha0), self.max_alpha or math.inf)
        self.alpha = self.current_alpha
        self.growths = 0
        self.shrinks = 0
        self._clamp_warned = False

    @property
    def history(self) -> tuple[int, ...]:
        return tuple(self._history)

    def begin(self, iteration: int) -> float:
        """Start outer iteration ``iteration`` and return its trial step."""
        self._slot = iteration % len(self._history)
        self._history[self._slot] = 0
        self.alpha = self.current_alpha
        return self.alpha

    def accept_first_try(self) -> float:
        """Record an unshrunk success, growing ``alpha`` if the window allows."""
        self._history[self._slot] = 1
        if sum(self._history) > 1:
            grown = self.alpha / self.beta
            if self.max_alpha is not None and grown > self.max_alpha:
                if not self._clamp_warned:
                    self._clamp_warned = True
                    logger.warning(
                        "Step size growth clamped at max_alpha=%g (requested %g)",
                        self.max_alpha,
                        grown,
                    )
                grown = self.max_alpha
            if grown > self.alpha:
                self.growths += 1
            self.alpha = grown
            for i in range(len(self._history)):
                self._history[i] = 0
        return self.alpha

    def shrink(self) -> float:
        """Backtrack once: ``alpha *= beta``."""
        self.alpha *= self.beta
        self._history[self._slot] -= 1
        self.shrinks += 1
        return self.alpha

    def commit(self) -> float:
        """Keep the accepted trial step for the next outer iteration."""
        self.current_alpha = self.alpha
        return self.current_alpha


__all__ = ["StepSizeController", "WINDOW"]
