import numpy as np
import pytest

from pyRilt import solve_nnls
from pyRilt.exceptions import SolverConvergenceError
from pyRilt.fit.nnls import NNLS_SOLVERS


def test_registered_backends():
    assert {"active-set", "projected-gradient"} <= set(NNLS_SOLVERS)


def test_active_set_matches_known_solution():
    A = np.array([[1.0, 0.0], [0.0, 1.0], [1.0, 1.0]])
    b = np.array([2.0, -1.0, 1.0])
    x = solve_nnls(A, b)
    np.testing.assert_allclose(x, [1.5, 0.0])


def test_projected_gradient_agrees_with_active_set(rng):
    pytest.importorskip("jax")
    pytest.importorskip("jaxopt")

    A = rng.standard_normal((30, 6)) + 3.0 * np.eye(30, 6)
    x_true = np.array([1.0, 0.0, 2.5, 0.0, 0.3, 1.2])
    b = A @ x_true - 0.5 * A[:, 1]
    x_as = solve_nnls(A, b, method="active-set")
    x_pg = solve_nnls(A, b, method="projected-gradient")
    assert np.all(x_pg >= 0)
    np.testing.assert_allclose(x_pg, x_as, atol=1e-5)


def test_iteration_cap_is_a_convergence_error():
    # every column enters the passive set, one per iteration
    A = np.eye(6) + 0.1
    b = A @ np.arange(1.0, 7.0)
    np.testing.assert_allclose(solve_nnls(A, b), np.arange(1.0, 7.0))
    with pytest.raises(SolverConvergenceError):
        solve_nnls(A, b, maxiter=1)


def test_scipy_runtime_error_is_a_convergence_error(monkeypatch):
    import pyRilt.fit.nnls as backend

    def exhausted(A, b, maxiter=None):
        raise RuntimeError("Maximum number of iterations reached.")

    monkeypatch.setattr(backend, "nnls", exhausted)
    with pytest.raises(SolverConvergenceError, match="did not converge"):
        solve_nnls(np.eye(2), np.ones(2))


def test_default_cap_scales_with_columns(monkeypatch):
    import pyRilt.fit.nnls as backend

    seen = {}

    def record(A, b, maxiter=None):
        seen["maxiter"] = maxiter
        return np.zeros(A.shape[1]), 0.0

    monkeypatch.setattr(backend, "nnls", record)
    solve_nnls(np.ones((3, 40)), np.ones(3))
    assert seen["maxiter"] == 400
    solve_nnls(np.ones((3, 40)), np.ones(3), maxiter=7)
    assert seen["maxiter"] == 7
