"""Tikhonov-regularized non-negative least squares."""

from functools import lru_cache
from typing import Optional, Tuple
import numpy as np
from scipy.sparse import diags

from ..exceptions import ShapeMismatchError
from ..fit.nnls import solve_nnls

# finite-difference stencils on the main and upper diagonals
_STENCILS = {
    0: (1.0,),
    1: (1.0, -1.0),
    2: (1.0, -2.0, 1.0),
}


@lru_cache(maxsize=32)
def gamma(n: int, order: int = 0) -> np.ndarray:
    """Square (n, n) smoothness operator: identity, first or second difference."""
    if order not in _STENCILS:
        raise ValueError(f"smoothness order must be one of {sorted(_STENCILS)}, got {order}")
    if n < 1:
        raise ValueError(f"operator size must be positive, got {n}")
    stencil = _STENCILS[order][:n]
    offsets = list(range(len(stencil)))
    G = diags([np.full(n - k, c) for k, c in zip(offsets, stencil)], offsets,
              shape=(n, n)).toarray()
    G.setflags(write=False)
    return G


def solve(K: np.ndarray, g: np.ndarray, alpha: float, order: int = 0,
          nnls: str = "active-set", maxiter: Optional[int] = None) -> Tuple[np.ndarray, np.ndarray]:
    """
    Minimize ||K f - g||^2 + alpha ||Gamma f||^2 subject to f >= 0.

    Solved as the augmented NNLS problem [K; sqrt(alpha) Gamma] f = [g; 0].
    Returns the solution f and the residual r = K f - g of the unaugmented
    system.
    """
    K = np.asarray(K, dtype=np.float64)
    g = np.asarray(g, dtype=np.float64)
    if K.ndim != 2 or g.ndim != 1 or K.shape[0] != g.shape[0]:
        raise ShapeMismatchError(f"kernel of shape {K.shape} does not match data of shape {g.shape}")
    alpha = float(alpha)
    if not np.isfinite(alpha) or alpha <= 0:
        raise ValueError(f"alpha must be positive and finite, got {alpha}")

    n = K.shape[1]
    A = np.vstack([K, np.sqrt(alpha) * gamma(n, order)])
    b = np.concatenate([g, np.zeros(n)])
    f = solve_nnls(A, b, method=nnls, maxiter=maxiter)
    r = K @ f - g
    return f, r
