import numpy as np
import pytest

from pyRilt import build_kernel


def bimodal(n):
    u = np.linspace(-5, 5, n)
    return 0.5 * np.exp(-u ** 2 / 3) + np.exp(-(u - 1.3) ** 2 / 0.5)


def tilted_gaussian(n_direct, n_indirect, theta=135.0, s1=1.3, s2=0.4, x0=0.0, y0=1.3):
    th = np.deg2rad(theta)
    a = np.cos(th) ** 2 / (2 * s1 ** 2) + np.sin(th) ** 2 / (2 * s2 ** 2)
    b = -np.sin(2 * th) / (4 * s1 ** 2) + np.sin(2 * th) / (4 * s2 ** 2)
    c = np.sin(th) ** 2 / (2 * s1 ** 2) + np.cos(th) ** 2 / (2 * s2 ** 2)
    u, v = np.meshgrid(np.linspace(-5, 5, n_direct), np.linspace(-5, 5, n_indirect), indexing="ij")
    return np.exp(-(a * (u - x0) ** 2 + 2 * b * (u - x0) * (v - y0) + c * (v - y0) ** 2))


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


def make_ir_problem(rng):
    """32 IR delays, 128 T1 bins, bimodal truth, 0.1% Gaussian noise."""
    x = np.logspace(np.log10(1e-4), np.log10(5), 32)
    X = np.logspace(-5, 1, 128)
    K = build_kernel("IR", x, X)
    f_true = bimodal(X.size)
    g = K @ f_true
    y = g + 0.001 * np.max(g) * rng.standard_normal(x.size)
    return dict(x=x, X=X, K=K, f_true=f_true, y=y)


@pytest.fixture
def ir_problem(rng):
    return make_ir_problem(rng)


@pytest.fixture(params=[0, 1, 2, 3, 1234])
def seeded_ir_problem(request):
    """The IR problem over several noise realizations."""
    return make_ir_problem(np.random.default_rng(request.param))


@pytest.fixture
def ircpmg_problem(rng):
    """Separable T1-T2 problem with a tilted Gaussian truth and complex data."""
    x_direct = np.logspace(np.log10(1e-4), np.log10(5), 256)
    x_indirect = np.logspace(np.log10(1e-4), np.log10(5), 32)
    X_direct = np.logspace(-5, 1, 32)
    X_indirect = np.logspace(-5, 1, 32)
    F_true = tilted_gaussian(X_direct.size, X_indirect.size)
    K_dir = build_kernel("CPMG", x_direct, X_direct)
    K_indir = build_kernel("IR", x_indirect, X_indirect)
    G = K_dir @ F_true @ K_indir.T
    data = G + 1j * 0.001 * np.max(G) * rng.standard_normal(G.shape)
    return dict(x_direct=x_direct, x_indirect=x_indirect, X_direct=X_direct, X_indirect=X_indirect,
                K_dir=K_dir, K_indir=K_indir, F_true=F_true, G=G, data=data)
