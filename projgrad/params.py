"""Parameter containers consumed by the projected-gradient optimizer.

A parameter maps an index domain to floating-point values. The optimizer only
needs point-wise access, a restartable traversal of the index domain and a way
to make zeroed buffers of the same shape, which is what :class:`Parameter`
describes. Two implementations are provided:

* :class:`DenseParameter` wraps a NumPy array of any shape (the common case,
  e.g. a factor matrix in NMF).
* :class:`SparseParameter` holds a fixed set of arbitrary hashable keys.

The bulk helpers at the bottom of the module work on any pair of parameters
sharing an index domain and switch to vectorized NumPy kernels when both sides
are dense.
"""

from __future__ import annotations

import math
from typing import Any, Hashable, Iterator, Mapping, Optional, Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class Parameter(Protocol):
    """Point-wise accessible vector over an index domain."""

    def get(self, index: Any) -> float:
        ...

    def set(self, index: Any, value: float) -> None:
        ...

    def indices(self) -> Iterator[Any]:
        """Yield every valid index exactly once, in a stable order."""
        ...

    def clone_without_copy(self) -> "Parameter":
        """Return a zero-initialized parameter with the same index domain."""
        ...


class DenseParameter:
    """
    Parameter backed by a NumPy array.

    The array is held by reference: writes through :meth:`set` (or the bulk
    helpers) are visible to whoever else holds ``values``. Integer input is
    promoted to ``float64``; ``float32`` arrays keep their precision.

    Indices are the tuples produced by :func:`numpy.ndindex`, so a 1-D
    parameter is indexed with ``(i,)``. Plain integers are accepted as well.
    """

    __slots__ = ("values",)

    def __init__(self, values: Any, dtype: Optional[np.dtype] = None):
        if dtype is not None:
            arr = np.asarray(values, dtype=dtype)
        else:
            arr = np.asarray(values)
            if not np.issubdtype(arr.dtype, np.floating):
                arr = arr.astype(np.float64)
        if not np.issubdtype(arr.dtype, np.floating):
            raise ValueError(f"DenseParameter requires a floating dtype, got {arr.dtype}")
        self.values = arr

    @property
    def shape(self) -> tuple[int, ...]:
        return self.values.shape

    @property
    def dtype(self) -> np.dtype:
        return self.values.dtype

    @property
    def size(self) -> int:
        return int(self.values.size)

    def __len__(self) -> int:
        return self.size

    def __repr__(self) -> str:
        return f"DenseParameter(shape={self.shape}, dtype={self.dtype})"

    def get(self, index: Any) -> float:
        return float(self.values[index])

    def set(self, index: Any, value: float) -> None:
        self.values[index] = value

    def indices(self) -> Iterator[tuple[int, ...]]:
        return iter(np.ndindex(self.values.shape))

    def clone_without_copy(self) -> "DenseParameter":
        return DenseParameter(np.zeros_like(self.values))

    def to_numpy(self) -> np.ndarray:
        return self.values.copy()


class SparseParameter:
    """
    Parameter over a fixed set of hashable keys.

    The index domain is frozen at construction time; reading or writing an
    unknown key raises :class:`KeyError`. Traversal follows insertion order.
    """

    __slots__ = ("_data",)

    def __init__(self, mapping: Mapping[Hashable, float]):
        self._data: dict[Hashable, float] = {key: float(val) for key, val in mapping.items()}

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"SparseParameter(n={len(self._data)})"

    def get(self, index: Hashable) -> float:
        return self._data[index]

    def set(self, index: Hashable, value: float) -> None:
        if index not in self._data:
            raise KeyError(index)
        self._data[index] = float(value)

    def indices(self) -> Iterator[Hashable]:
        return iter(list(self._data))

    def clone_without_copy(self) -> "SparseParameter":
        return SparseParameter(dict.fromkeys(self._data, 0.0))

    def to_dict(self) -> dict[Hashable, float]:
        return dict(self._data)


def _both_dense(*params: Parameter) -> bool:
    return all(isinstance(p, DenseParameter) for p in params)


def fill(param: Parameter, value: float) -> None:
    """Set every coordinate of ``param`` to ``value``."""
    if isinstance(param, DenseParameter):
        param.values.fill(value)
        return
    for i in param.indices():
        param.set(i, value)


def copy_into(dst: Parameter, src: Parameter) -> None:
    """Overwrite ``dst`` with the values of ``src``."""
    if _both_dense(dst, src):
        np.copyto(dst.values, src.values)
        return
    for i in dst.indices():
        dst.set(i, src.get(i))


def step_into(dst: Parameter, src: Parameter, direction: Parameter, alpha: float) -> None:
    """Write ``src - alpha * direction`` into ``dst`` in the native precision."""
    if _both_dense(dst, src, direction):
        np.multiply(direction.values, alpha, out=dst.values)
        np.subtract(src.values, dst.values, out=dst.values)
        return
    for i in src.indices():
        dst.set(i, src.get(i) - alpha * direction.get(i))


def directional_change(gradient: Parameter, new: Parameter, old: Parameter) -> float:
    """
    Return ``sum_i gradient_i * (new_i - old_i)`` accumulated in float64.

    Summing a long float32 vector in float32 loses enough digits to flip the
    outcome of a sufficient-decrease test, so the reduction is always carried
    out in double precision.
    """
    if _both_dense(gradient, new, old):
        g = gradient.values.astype(np.float64, copy=False).ravel()
        delta = new.values.astype(np.float64).ravel()
        delta -= old.values.ravel()
        return float(np.dot(g, delta))
    total = 0.0
    for i in old.indices():
        total += float(gradient.get(i)) * (float(new.get(i)) - float(old.get(i)))
    return total


def norm(param: Parameter) -> float:
    """Euclidean norm accumulated in float64."""
    if isinstance(param, DenseParameter):
        return float(np.linalg.norm(param.values.astype(np.float64, copy=False).ravel()))
    return math.sqrt(sum(float(param.get(i)) ** 2 for i in param.indices()))


def all_finite(param: Parameter) -> bool:
    if isinstance(param, DenseParameter):
        return bool(np.all(np.isfinite(param.values)))
    return all(math.isfinite(param.get(i)) for i in param.indices())


__all__ = [
    "Parameter",
    "DenseParameter",
    "SparseParameter",
    "fill",
    "copy_into",
    "step_into",
    "directional_change",
    "norm",
    "all_finite",
]
