"""SVD compression of kernels, with noise-floor truncation for complex data."""

import logging
import warnings
import numpy as np
from scipy.linalg import svd

from ..exceptions import LowSNRWarning, ShapeMismatchError, TruncationError
from ..types import ReducedSystem, SVDBasis
from .snr import estimate_snr

log = logging.getLogger(__name__)


def warn_low_snr(snr: float, threshold: float, stacklevel: int = 2) -> None:
    """`stacklevel` counts from the caller of warn_low_snr, as in warnings.warn."""
    if snr < threshold:
        warnings.warn(
            f"The SNR is {snr:.1f}, which is below the recommended value of {threshold:g}. "
            "Consider running the experiment with more scans.",
            LowSNRWarning, stacklevel=stacklevel + 1)


def compress(K: np.ndarray, data, snr_threshold: float = 1000.0, stacklevel: int = 2) -> ReducedSystem:
    """
    Project a 1D problem onto the SVD basis of K.

    Real data: every component is kept; K_red = diag(S) V^T, g_red = U^T g is
    a lossless reparametrization since U has orthonormal columns.
    Complex data: components with S <= 1/SNR are discarded and the real part of
    the data is projected onto the remaining columns of U. A low SNR warns,
    with `stacklevel` locating the reported line as in warnings.warn.
    """
    data = np.asarray(data)
    if data.ndim != 1 or data.shape[0] != K.shape[0]:
        raise ShapeMismatchError(
            f"data of shape {data.shape} does not match kernel with {K.shape[0]} rows")

    U, S, Vt = svd(K, full_matrices=False)
    n_total = S.size

    if np.iscomplexobj(data):
        snr = estimate_snr(data)
        warn_low_snr(snr, snr_threshold, stacklevel)
        indices = np.flatnonzero(S > 1.0 / snr)
        if indices.size == 0:
            raise TruncationError(f"no singular value exceeds the noise threshold 1/SNR = {1.0 / snr:.3g}")
        log.info("SVD truncated to %d singular values out of %d", indices.size, n_total)
        U, S, Vt = U[:, indices], S[indices], Vt[indices]
        g = np.real(data)
    else:
        snr = None
        indices = np.arange(n_total)
        g = data.astype(np.float64)

    basis = SVDBasis(U=U, S=S, V=Vt.T, n_total=n_total, indices=indices)
    return ReducedSystem(K=S[:, None] * Vt, g=U.T @ g, basis=basis, snr=snr)


def compress_separable(K_dir: np.ndarray, K_indir: np.ndarray, data,
                       snr_threshold: float = 1000.0, stacklevel: int = 2) -> ReducedSystem:
    """
    Joint SVD compression for data = K_dir @ F @ K_indir.T.

    Each 1D kernel is factorized on its own. The pair of modes (i, j)
    (indirect i, direct j) carries the singular value S_indir[i] * S_dir[j] of
    the joint kernel; pairs above 1/SNR are kept. For pair k:

        g_k = U_dir[:, j]^T G U_indir[:, i]
        V[:, k] = kron(V_dir[:, j], V_indir[:, i])

    so that K_red = diag(s) V^T acts on F flattened in C order over
    (X_direct, X_indirect). The left basis is absorbed into g and U is empty.
    """
    data = np.asarray(data)
    expected = (K_dir.shape[0], K_indir.shape[0])
    if data.shape != expected:
        raise ShapeMismatchError(f"data of shape {data.shape} does not match kernels, expected {expected}")
    if not np.iscomplexobj(data):
        raise TypeError("separable compression needs complex data to estimate the noise floor")

    G = np.real(data)
    snr = estimate_snr(data)
    warn_low_snr(snr, snr_threshold, stacklevel)

    U_dir, S_dir, Vt_dir = svd(K_dir, full_matrices=False)
    U_indir, S_indir, Vt_indir = svd(K_indir, full_matrices=False)

    S_combined = np.outer(S_indir, S_dir)
    si, sj = np.nonzero(S_combined > 1.0 / snr)
    if si.size == 0:
        raise TruncationError(f"no singular value exceeds the noise threshold 1/SNR = {1.0 / snr:.3g}")
    s = S_combined[si, sj]
    log.info("SVD truncated to %d singular values out of %d", s.size, S_combined.size)

    projected = U_dir.T @ G @ U_indir          # (n_dir_modes, n_indir_modes)
    g = projected[sj, si]

    V_dir, V_indir = Vt_dir.T, Vt_indir.T
    n_cols = V_dir.shape[0] * V_indir.shape[0]
    V = (V_dir[:, None, sj] * V_indir[None, :, si]).reshape(n_cols, s.size)

    basis = SVDBasis(U=np.empty((0, 0)), S=s, V=V, n_total=int(S_combined.size),
                     indices=np.column_stack([si, sj]))
    return ReducedSystem(K=s[:, None] * V.T, g=g, basis=basis, snr=snr)
