"""L-curve (maximum curvature) selection of the regularization parameter."""

import logging
from dataclasses import dataclass
from typing import Optional
import numpy as np
from scipy.linalg import svd

from ..core.regularization import solve
from ..exceptions import ParameterSelectionError
from .optimizer import scan_alpha_grid

log = logging.getLogger(__name__)


@dataclass
class LCurve:
    alphas: np.ndarray
    xi: np.ndarray               # ||f||^2
    rho: np.ndarray              # ||r||^2
    dxi_dlambda: np.ndarray
    curvature: np.ndarray
    finite: np.ndarray           # mask of grid points eligible for selection
    best_alpha: float


def filter_factors(s: np.ndarray, alpha: float) -> np.ndarray:
    return s ** 2 / (s ** 2 + alpha)


def dxi_dlambda(s: np.ndarray, beta: np.ndarray, alpha: float) -> float:
    """
    d||f||^2 / d lambda (lambda = sqrt(alpha)) from the SVD of the kernel:

        -(4 / lambda) sum (1 - f_i) f_i^2 beta_i^2 / s_i^2
    """
    keep = s > 0
    s, beta = s[keep], beta[keep]
    f = filter_factors(s, alpha)
    lam = np.sqrt(alpha)
    return float(-(4.0 / lam) * np.sum((1.0 - f) * f ** 2 * (beta ** 2 / s ** 2)))


def curvature(xi: float, rho: float, alpha: float, dxi: float) -> float:
    """
    Signed curvature of the L-curve (log ||r||, log ||f||) at one alpha,
    traversed with increasing alpha. Positive at the corner:

        -2 (xi rho / dxi) (lambda^2 dxi rho + 2 lambda xi rho + lambda^4 xi dxi)
            / (lambda^4 xi^2 + rho^2)^(3/2)

    with xi = ||f||^2, rho = ||r||^2 and dxi = d xi / d lambda.
    """
    xi, rho, alpha, dxi = (np.float64(v) for v in (xi, rho, alpha, dxi))
    lam = np.sqrt(alpha)
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        return float(-2.0 * (xi * rho / dxi)
                     * (alpha * dxi * rho + 2.0 * xi * lam * rho + alpha ** 2 * xi * dxi)
                     / (alpha ** 2 * xi ** 2 + rho ** 2) ** 1.5)


def lcurve(K: np.ndarray, g: np.ndarray, alphas, order: int = 0, nnls: str = "active-set",
           maxiter: Optional[int] = None, workers: Optional[int] = None) -> LCurve:
    """
    Solve at every alpha of the grid and pick the one of maximum curvature.

    Grid points with non-finite curvature (typical at the extremes of the grid)
    are never selected. The chosen alpha is always an element of `alphas`.
    """
    alphas = np.asarray(alphas, dtype=np.float64)
    if alphas.ndim != 1 or alphas.size == 0:
        raise ParameterSelectionError("the alpha grid is empty")

    U, s, _ = svd(K, full_matrices=False)
    beta = U.T @ g

    def evaluate(alpha):
        f, r = solve(K, g, alpha, order, nnls=nnls, maxiter=maxiter)
        xi, rho = float(f @ f), float(r @ r)
        dxi = dxi_dlambda(s, beta, alpha)
        c = curvature(xi, rho, alpha, dxi)
        log.debug("alpha %.3e: xi %.4g rho %.4g curvature %.4g", alpha, xi, rho, c)
        return xi, rho, dxi, c

    xi, rho, dxi, c = (np.array(col) for col in zip(*scan_alpha_grid(evaluate, alphas, workers)))

    finite = np.isfinite(c)
    if not finite.any():
        raise ParameterSelectionError("parameter selection failed: no finite L-curve curvature on the alpha grid")
    best = np.flatnonzero(finite)[np.argmax(c[finite])]
    log.info("L-curve: alpha = %.3e (curvature %.4g, %d/%d finite)",
             alphas[best], c[best], finite.sum(), alphas.size)
    return LCurve(alphas=alphas, xi=xi, rho=rho, dxi_dlambda=dxi, curvature=c,
                  finite=finite, best_alpha=float(alphas[best]))
