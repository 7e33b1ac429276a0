"""projgrad - adaptive projected-gradient minimization for box-constrained problems.

Example
-------
>>> import numpy as np
>>> from projgrad import (DenseParameter, FunctionObjective, MaxIterations,
...     NonNegativeProjection, ProjectedGradient)
>>> x = DenseParameter(np.array([10.0]))
>>> f = FunctionObjective(lambda v: float((v[0] - 3) ** 2), lambda v: 2 * (v - 3))
>>> optimizer = ProjectedGradient(NonNegativeProjection(), beta=0.5, sigma=0.1)
>>> value = optimizer.minimize(f, MaxIterations(50), x)
>>> round(float(x.values[0]), 6)
3.0
"""

__version__ = "0.1.0"

from . import core, nmf, objectives, params, projected, projection, step_size, stopping
from .core import (
    MinimizeStats,
    NonConvergenceError,
    NumericalError,
    Objective,
    OptimizationError,
    OptimizeResult,
    Projection,
    Status,
    StopCriterion,
)
from .logging import configure_logging, get_logger, set_log_level
from .nmf import NMFResult
from .nmf import nmf as factorize
from .objectives import FunctionObjective, LeastSquaresObjective, QuadraticObjective
from .params import (
    DenseParameter,
    Parameter,
    SparseParameter,
    all_finite,
    copy_into,
    directional_change,
    fill,
    step_into,
)
from .projected import ProjectedGradient, ProjectedGradientConfig, projected_gradient
from .projection import BoxProjection, CallableProjection, NonNegativeProjection
from .step_size import StepSizeController
from .stopping import AnyOf, MaxIterations, ProjectedGradientTolerance, ValueChangeTolerance

__all__ = [
    "__version__",
    "core",
    "nmf",
    "objectives",
    "params",
    "projected",
    "projection",
    "step_size",
    "stopping",
    # Core types
    "Status",
    "OptimizeResult",
    "MinimizeStats",
    "OptimizationError",
    "NumericalError",
    "NonConvergenceError",
    "Objective",
    "Projection",
    "StopCriterion",
    # Parameters
    "Parameter",
    "DenseParameter",
    "SparseParameter",
    "fill",
    "copy_into",
    "step_into",
    "directional_change",
    "all_finite",
    # Collaborators
    "BoxProjection",
    "NonNegativeProjection",
    "CallableProjection",
    "FunctionObjective",
    "QuadraticObjective",
    "LeastSquaresObjective",
    "MaxIterations",
    "ProjectedGradientTolerance",
    "ValueChangeTolerance",
    "AnyOf",
    # Algorithms
    "StepSizeController",
    "ProjectedGradientConfig",
    "ProjectedGradient",
    "projected_gradient",
    "NMFResult",
    "factorize",
    # Logging
    "get_logger",
    "set_log_level",
    "configure_logging",
]
