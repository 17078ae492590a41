import numpy as np
import pytest

from pyRilt import Sequence, build_kernel, solve, solution_axis
from pyRilt.core.kernels import KERNEL_EQUATIONS, is_separable, separable_parts
from pyRilt.exceptions import AxisError, UnknownSequenceError
from pyRilt.types import ReducedSystem


@pytest.mark.parametrize("sequence", [Sequence.IR, Sequence.CPMG, Sequence.PFG, "IR", "CPMG"])
@pytest.mark.parametrize("n_x, n_X", [(1, 1), (32, 128), (100, 7)])
def test_kernel_shape(sequence, n_x, n_X):
    x = np.linspace(0.01, 2, n_x)
    X = np.logspace(-3, 1, n_X)
    K = build_kernel(sequence, x, X)
    assert K.shape == (n_x, n_X)


def test_kernel_equations():
    x = np.array([0.0, 1.0, 2.0])
    X = np.array([0.5, 1.0])
    K_ir = build_kernel(Sequence.IR, x, X)
    K_cpmg = build_kernel(Sequence.CPMG, x, X)
    np.testing.assert_allclose(K_ir[0], -1.0)
    np.testing.assert_allclose(K_cpmg[0], 1.0)
    np.testing.assert_allclose(K_ir, 1 - 2 * np.exp(-x[:, None] / X[None, :]))
    np.testing.assert_allclose(K_cpmg, np.exp(-x[:, None] / X[None, :]))
    np.testing.assert_array_equal(build_kernel(Sequence.PFG, x, X), K_cpmg)


def test_kernel_is_read_only():
    K = build_kernel("CPMG", [0.1, 0.2], [1.0, 2.0])
    with pytest.raises(ValueError):
        K[0, 0] = 3.0


def test_register_new_sequence_reaches_solver(monkeypatch):
    def saturation_recovery(t, T):
        return 1.0 - np.exp(-t / T)

    monkeypatch.setitem(KERNEL_EQUATIONS, "SR", saturation_recovery)
    x = np.linspace(0.01, 3, 20)
    X = np.logspace(-2, 1, 30)
    K = build_kernel("SR", x, X)
    np.testing.assert_allclose(K, saturation_recovery(x[:, None], X[None, :]))
    f, r = solve(K, K @ np.ones(X.size), 1e-2)
    assert np.all(f >= 0)
    assert r.shape == x.shape


def test_unknown_sequence():
    with pytest.raises(UnknownSequenceError):
        build_kernel("NOPE", [1.0], [1.0])
    with pytest.raises(KeyError):
        build_kernel("NOPE", [1.0], [1.0])


def test_separable_registry():
    assert is_separable(Sequence.IRCPMG)
    assert is_separable("IRCPMG")
    assert not is_separable(Sequence.IR)
    assert separable_parts(Sequence.IRCPMG) == ("CPMG", "IR")
    with pytest.raises(UnknownSequenceError):
        separable_parts("IR")


@pytest.mark.parametrize("x, X", [
    ([], [1.0]),
    ([1.0], []),
    ([1.0, np.nan], [1.0]),
    ([1.0], [np.inf]),
    ([-1.0, 1.0], [1.0]),
    ([1.0], [0.0, 1.0]),
    ([[1.0, 2.0]], [1.0]),
])
def test_invalid_axes(x, X):
    with pytest.raises(AxisError):
        build_kernel("CPMG", x, X)


def test_kernel_with_data_returns_reduced_system():
    x = np.linspace(0.01, 2, 16)
    X = np.logspace(-3, 1, 40)
    K = build_kernel("CPMG", x, X)
    system = build_kernel("CPMG", x, X, K @ np.ones(X.size))
    assert isinstance(system, ReducedSystem)
    assert system.K.shape == (16, 40)
    assert system.snr is None


def test_solution_axis():
    X = solution_axis(-5, 1, 128)
    assert X.size == 128
    np.testing.assert_allclose(X[[0, -1]], [1e-5, 10.0])
    with pytest.raises(AxisError):
        solution_axis(1, -5, 10)
