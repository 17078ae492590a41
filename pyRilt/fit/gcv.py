"""Generalized cross-validation (GCV) selection of the regularization parameter."""

import logging
from dataclasses import dataclass
import numpy as np
from lmfit import minimize, Parameters
from scipy.linalg import svd

from ..exceptions import ParameterSelectionError
from .lcurve import filter_factors

log = logging.getLogger(__name__)


@dataclass
class GCVCurve:
    alphas: np.ndarray
    values: np.ndarray
    best_alpha: float
    best_value: float


def gcv_function(s: np.ndarray, beta: np.ndarray, residual0: float, m: int, alpha: float,
                 robustness: float = 1.0) -> float:
    """
    G(alpha) = ||r_alpha||^2 / (m - robustness * sum f_i)^2 for the ridge-filtered solution.

    `residual0` is the part of ||g||^2 outside the range of U, which no alpha
    can fit. A `robustness` above 1 is the modified GCV of Cummins et al.:
    each fitted degree of freedom costs more, which counters the occasional
    very small alpha plain GCV picks on a single noise realization. G is
    infinite wherever the denominator is not positive.
    """
    f = filter_factors(s, alpha)
    rho = float(np.sum(((1.0 - f) * beta) ** 2)) + residual0
    dof = m - robustness * float(np.sum(f))
    if dof <= 0:
        return np.inf
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.float64(rho) / np.float64(dof) ** 2)


def _grid_minimum(values: np.ndarray) -> int:
    """
    Index of the smallest finite value. A minimum on the small-alpha edge only
    says G still decreases off the grid, so the lowest interior local minimum
    is preferred when there is one.
    """
    finite = np.flatnonzero(np.isfinite(values))
    i = finite[np.argmin(values[finite])]
    if i != 0 or values.size < 3:
        return int(i)
    inner = np.arange(1, values.size - 1)
    local = inner[(values[inner] <= values[inner - 1]) & (values[inner] <= values[inner + 1])
                  & np.isfinite(values[inner])]
    if local.size == 0:
        log.warning("GCV is smallest at the lower edge of the alpha grid; consider extending it")
        return int(i)
    return int(local[np.argmin(values[local])])


def gcv(K: np.ndarray, g: np.ndarray, alphas, refine: bool = True, robustness: float = 1.4) -> GCVCurve:
    """
    Evaluate GCV from the SVD spectrum of K over the grid and return its
    minimum. With `refine`, the grid minimum is polished by a bounded scalar
    minimization over log10(alpha) between its grid neighbours.
    """
    alphas = np.asarray(alphas, dtype=np.float64)
    if alphas.ndim != 1 or alphas.size == 0:
        raise ParameterSelectionError("the alpha grid is empty")
    if robustness < 1:
        raise ValueError(f"GCV robustness must be at least 1, got {robustness}")
    g = np.asarray(g, dtype=np.float64)

    U, s, _ = svd(K, full_matrices=False)
    beta = U.T @ g
    residual0 = max(float(g @ g - beta @ beta), 0.0)
    m = g.size

    values = np.array([gcv_function(s, beta, residual0, m, a, robustness) for a in alphas])
    if not np.isfinite(values).any():
        raise ParameterSelectionError("parameter selection failed: GCV is not finite anywhere on the alpha grid")
    i = _grid_minimum(values)
    best_alpha, best_value = float(alphas[i]), float(values[i])

    if refine and alphas.size > 1:
        lo = np.log10(alphas[max(i - 1, 0)])
        hi = np.log10(alphas[min(i + 1, alphas.size - 1)])
        lo, hi = min(lo, hi), max(lo, hi)

        def objective(params):
            v = gcv_function(s, beta, residual0, m, 10.0 ** params['log_alpha'].value, robustness)
            return v if np.isfinite(v) else 1e300

        params = Parameters()
        params.add('log_alpha', value=float(np.log10(best_alpha)), min=lo, max=hi)
        res = minimize(objective, params, method='nelder')
        alpha_ref = 10.0 ** res.params['log_alpha'].value
        value_ref = gcv_function(s, beta, residual0, m, alpha_ref, robustness)
        if np.isfinite(value_ref) and value_ref < best_value:
            best_alpha, best_value = float(alpha_ref), float(value_ref)

    log.info("GCV: alpha = %.3e (G = %.4g)", best_alpha, best_value)
    return GCVCurve(alphas=alphas, values=values, best_alpha=best_alpha, best_value=best_value)
