"""Forward kernels for exponential-decay acquisitions."""

from enum import Enum
from typing import Callable, Dict, Tuple
import numpy as np

from ..exceptions import AxisError, UnknownSequenceError
from ..types import Sequence, ReducedSystem
from .svd import compress, compress_separable

KernelEquation = Callable[[np.ndarray, np.ndarray], np.ndarray]

KERNEL_EQUATIONS: Dict[str, KernelEquation] = {}
SEPARABLE_SEQUENCES: Dict[str, Tuple[str, str]] = {}


def _tag(sequence) -> str:
    if isinstance(sequence, Enum):
        return str(sequence.value)
    return str(sequence)


def register_kernel(sequence):
    """Register `func(t, T)` as the kernel equation for `sequence`."""
    def decorator(func: KernelEquation) -> KernelEquation:
        KERNEL_EQUATIONS[_tag(sequence)] = func
        return func
    return decorator


def register_separable(sequence, direct, indirect) -> None:
    """Declare `sequence` as the product of a direct and an indirect 1D kernel."""
    SEPARABLE_SEQUENCES[_tag(sequence)] = (_tag(direct), _tag(indirect))


@register_kernel(Sequence.IR)
def inversion_recovery(t: np.ndarray, T: np.ndarray) -> np.ndarray:
    """K(t, T) = 1 - 2 exp(-t/T)."""
    return 1.0 - 2.0 * np.exp(-t / T)


@register_kernel(Sequence.CPMG)
@register_kernel(Sequence.PFG)
def exp_decay(t: np.ndarray, T: np.ndarray) -> np.ndarray:
    """K(t, T) = exp(-t/T)."""
    return np.exp(-t / T)


register_separable(Sequence.IRCPMG, Sequence.CPMG, Sequence.IR)


def is_separable(sequence) -> bool:
    return _tag(sequence) in SEPARABLE_SEQUENCES


def kernel_equation(sequence) -> KernelEquation:
    try:
        return KERNEL_EQUATIONS[_tag(sequence)]
    except KeyError:
        raise UnknownSequenceError(
            f"no kernel equation registered for sequence {_tag(sequence)!r}") from None


def separable_parts(sequence) -> Tuple[str, str]:
    try:
        return SEPARABLE_SEQUENCES[_tag(sequence)]
    except KeyError:
        raise UnknownSequenceError(
            f"{_tag(sequence)!r} is not a separable two-dimension sequence") from None


def _check_axis(values, name: str, strictly_positive: bool) -> np.ndarray:
    axis = np.asarray(values, dtype=np.float64)
    if axis.ndim != 1 or axis.size == 0:
        raise AxisError(f"{name} must be a non-empty 1D sequence, got shape {axis.shape}")
    if not np.all(np.isfinite(axis)):
        raise AxisError(f"{name} contains non-finite values")
    if strictly_positive and np.any(axis <= 0):
        raise AxisError(f"{name} must be strictly positive")
    if np.any(axis < 0):
        raise AxisError(f"{name} must be non-negative")
    return axis


def solution_axis(log10_min: float, log10_max: float, n: int) -> np.ndarray:
    """Log-spaced solution axis, e.g. (-5, 1, 128) for 1e-5 .. 10."""
    if int(n) < 1 or log10_min >= log10_max:
        raise AxisError(f"invalid solution range ({log10_min}, {log10_max}, {n})")
    return np.logspace(log10_min, log10_max, int(n))


def build_kernel(sequence, x, X, data=None, snr_threshold: float = 1000.0):
    """
    Build the forward kernel K[i, j] = k(x[i], X[j]).

    Parameters
    ----------
    sequence : Sequence or str
        Tag of a registered 1D kernel equation.
    x : 1D array
        Acquisition axis (times, b-factors, ...), non-negative.
    X : 1D array
        Solution axis (T1, T2, D, ...), strictly positive.
    data : 1D array, optional
        When given, the kernel is SVD-compressed against it and a
        ReducedSystem is returned instead. Real data keeps every component;
        complex data is truncated at the noise floor 1/SNR.

    Returns
    -------
    K : (len(x), len(X)) read-only array, or ReducedSystem if data is given.
    """
    equation = kernel_equation(sequence)
    x = _check_axis(x, "x", strictly_positive=False)
    X = _check_axis(X, "X", strictly_positive=True)
    K = np.asarray(equation(x[:, None], X[None, :]), dtype=np.float64)
    K.setflags(write=False)
    if data is None:
        return K
    return compress(K, data, snr_threshold=snr_threshold, stacklevel=3)


def build_separable_kernel(sequence, x_direct, x_indirect, X_direct, X_indirect,
                           data, snr_threshold: float = 1000.0) -> ReducedSystem:
    """
    Build and compress the joint kernel of a separable 2D sequence.

    `data` is the complex (len(x_direct), len(x_indirect)) matrix; rows follow
    the direct dimension.
    """
    direct, indirect = separable_parts(sequence)
    K_dir = build_kernel(direct, x_direct, X_direct)
    K_indir = build_kernel(indirect, x_indirect, X_indirect)
    return compress_separable(K_dir, K_indir, data, snr_threshold=snr_threshold, stacklevel=3)
