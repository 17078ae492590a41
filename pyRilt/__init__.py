"""Regularized inverse-Laplace toolbox: Tikhonov + NNLS inversion of decay data."""

from .types import Sequence, RegularizationConfig, SVDBasis, ReducedSystem, InversionResult
from .exceptions import (InversionError, AxisError, ShapeMismatchError, UnknownSequenceError,
                         NoiseEstimateError, TruncationError, ParameterSelectionError,
                         SolverConvergenceError, LowSNRWarning)
from .core.kernels import (build_kernel, build_separable_kernel, register_kernel,
                           register_separable, solution_axis)
from .core.snr import estimate_snr
from .core.regularization import gamma, solve
from .fit.nnls import solve_nnls, register_nnls
from .fit.lcurve import lcurve
from .fit.gcv import gcv
from .fit.inversion import invert
from .io import save_results, load_results

__version__ = "0.1.0"
