"""Non-negative least-squares backends, selected by name."""

from typing import Callable, Dict, Optional
import numpy as np
from scipy.optimize import nnls

from ..exceptions import SolverConvergenceError

NNLSSolver = Callable[..., np.ndarray]

NNLS_SOLVERS: Dict[str, NNLSSolver] = {}


def register_nnls(name: str):
    def decorator(func: NNLSSolver) -> NNLSSolver:
        NNLS_SOLVERS[name] = func
        return func
    return decorator


@register_nnls("active-set")
def active_set_nnls(A: np.ndarray, b: np.ndarray, maxiter: Optional[int] = None) -> np.ndarray:
    """Lawson-Hanson active set (scipy.optimize.nnls). Exact, slow for wide problems."""
    if maxiter is None:
        maxiter = 10 * A.shape[1]
    try:
        x, _ = nnls(A, b, maxiter=maxiter)
    except RuntimeError as e:
        raise SolverConvergenceError(f"active-set NNLS did not converge: {e}") from e
    return x


@register_nnls("projected-gradient")
def projected_gradient_nnls(A: np.ndarray, b: np.ndarray, maxiter: Optional[int] = None,
                            tol: float = 1e-6) -> np.ndarray:
    """
    Accelerated projected gradient on 0.5 ||A x - b||^2 over x >= 0 (jaxopt).

    Scales better than the active set for large separable 2D problems, at the
    cost of an iterative tolerance instead of an exact solution.
    """
    import jax
    jax.config.update("jax_enable_x64", True)
    import jax.numpy as jnp
    from jaxopt import ProjectedGradient
    from jaxopt.projection import projection_non_negative

    if maxiter is None:
        maxiter = 20000
    A_j = jnp.asarray(A, dtype=jnp.float64)
    b_j = jnp.asarray(b, dtype=jnp.float64)

    def loss(x):
        r = A_j @ x - b_j
        return 0.5 * jnp.dot(r, r)

    # step size 1/L with L the largest eigenvalue of A^T A
    L = float(np.linalg.norm(A, 2)) ** 2
    solver = ProjectedGradient(fun=loss, projection=projection_non_negative,
                               stepsize=1.0 / L if L > 0 else 0.0,
                               maxiter=maxiter, tol=tol)
    sol = solver.run(jnp.zeros(A.shape[1], dtype=jnp.float64))
    error = float(sol.state.error)
    if not np.isfinite(error) or error > tol:
        raise SolverConvergenceError(
            f"projected-gradient NNLS did not converge after {int(sol.state.iter_num)} "
            f"iterations (error {error:.3g} > tol {tol:.3g})")
    return np.asarray(sol.params, dtype=np.float64)


def solve_nnls(A: np.ndarray, b: np.ndarray, method: str = "active-set",
               maxiter: Optional[int] = None) -> np.ndarray:
    """x >= 0 minimizing ||A x - b||, using the backend registered as `method`."""
    try:
        solver = NNLS_SOLVERS[method]
    except KeyError:
        raise KeyError(f"unknown NNLS method {method!r}; choose from {sorted(NNLS_SOLVERS)}") from None
    x = solver(np.asarray(A, dtype=np.float64), np.asarray(b, dtype=np.float64), maxiter=maxiter)
    if not np.all(np.isfinite(x)):
        raise SolverConvergenceError(f"{method} NNLS returned non-finite values")
    return x
